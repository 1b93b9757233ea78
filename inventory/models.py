from django.db import models
from django.core.validators import MinValueValidator
from decimal import Decimal

from authentication.models import TimeStampedModel


class Category(TimeStampedModel):
    name = models.CharField(max_length=255)
    icon = models.CharField(max_length=10, null=True, blank=True)

    def __str__(self):
        return str(self.name)

    class Meta:
        db_table = 'categories'
        ordering = ['name']
        verbose_name_plural = "Categories"


class Menu(TimeStampedModel):
    category = models.ForeignKey(Category, on_delete=models.PROTECT, related_name="menus")
    name = models.CharField(max_length=255)
    price = models.DecimalField(
        max_digits=12, decimal_places=2, validators=[MinValueValidator(Decimal('0.00'))]
    )
    icon = models.CharField(max_length=10, null=True, blank=True)

    # Deprecated: stock tracking was dropped from checkout. NULL means untracked;
    # voids still restore a tracked counter.
    stock = models.IntegerField(null=True, blank=True)

    def restore_stock(self, quantity):
        """Give ``quantity`` back to a tracked stock counter"""
        return Menu.objects.filter(pk=self.pk, stock__isnull=False).update(
            stock=models.F('stock') + quantity
        )

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'menus'
        ordering = ['name']
