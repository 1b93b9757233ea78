from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import Q
from django.utils.translation import gettext_lazy as _

from authentication.models import User, Branch, TimeStampedModel
from inventory.models import Menu


class OrderQuerySet(models.QuerySet):
    def voided(self):
        return self.filter(deleted_at__isnull=False)

    def not_voided(self):
        return self.filter(deleted_at__isnull=True)

    def created_between(self, start, end):
        """Orders created in the half-open interval ``[start, end)``"""
        return self.filter(created_at__gte=start, created_at__lt=end)

    def with_details(self):
        return self.select_related(
            'branch', 'user', 'edited_by', 'deleted_by'
        ).prefetch_related('items')


class ActiveOrderManager(models.Manager.from_queryset(OrderQuerySet)):
    """Hides voided (soft deleted) orders"""

    def get_queryset(self):
        return super().get_queryset().filter(deleted_at__isnull=True)


class Order(TimeStampedModel):
    STATUS_PENDING = 'pending'
    STATUS_SUCCESS = 'success'
    STATUS_FAILED = 'failed'
    STATUS_CANCELLED = 'cancelled'
    STATUS_REFUNDED = 'refunded'

    STATUS_CHOICES = (
        (STATUS_PENDING, _('Pending')),
        (STATUS_SUCCESS, _('Success')),
        (STATUS_FAILED, _('Failed')),
        (STATUS_CANCELLED, _('Cancelled')),
        (STATUS_REFUNDED, _('Refunded')),
    )

    PAYMENT_METHOD_CHOICES = (
        ('cash', _('Cash')),
        ('bca_va', _('BCA Virtual Account')),
        ('bri_va', _('BRI Virtual Account')),
        ('gopay', _('GoPay')),
        ('ovo', _('OVO')),
        ('transfer', _('Transfer')),
        ('qris', _('QRIS')),
    )

    order_number = models.CharField(max_length=32, unique=True)
    user = models.ForeignKey(
        User, on_delete=models.SET_NULL, null=True, blank=True, related_name='orders'
    )
    branch = models.ForeignKey(
        Branch, on_delete=models.SET_NULL, null=True, blank=True, related_name='orders'
    )

    subtotal = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    tax = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    total = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))

    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_SUCCESS)
    payment_method = models.CharField(max_length=20, choices=PAYMENT_METHOD_CHOICES, default='cash')
    cash_amount = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    change_amount = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    notes = models.TextField(null=True, blank=True)

    # Edit audit
    edited_by = models.ForeignKey(
        User, on_delete=models.SET_NULL, null=True, blank=True, related_name='edited_orders'
    )
    edited_at = models.DateTimeField(null=True, blank=True)
    edit_reason = models.CharField(max_length=500, null=True, blank=True)

    # Void audit
    deleted_by = models.ForeignKey(
        User, on_delete=models.SET_NULL, null=True, blank=True, related_name='voided_orders'
    )
    deleted_at = models.DateTimeField(null=True, blank=True)
    delete_reason = models.CharField(max_length=500, null=True, blank=True)

    objects = ActiveOrderManager()
    all_objects = OrderQuerySet.as_manager()

    @property
    def is_voided(self):
        return self.deleted_at is not None

    def get_payment_method_label(self):
        return dict(self.PAYMENT_METHOD_CHOICES).get(self.payment_method, self.payment_method)

    def __str__(self):
        return self.order_number

    class Meta:
        db_table = 'orders'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['created_at'], name='orders_created_idx'),
            models.Index(fields=['branch', 'created_at'], name='orders_branch_created_idx'),
        ]


class OrderItem(TimeStampedModel):
    order = models.ForeignKey(Order, related_name='items', on_delete=models.CASCADE)
    menu = models.ForeignKey(
        Menu, on_delete=models.SET_NULL, null=True, blank=True, related_name='order_items'
    )
    # Name and unit price are snapshotted when the line is written
    item_name = models.CharField(max_length=255)
    price = models.DecimalField(max_digits=12, decimal_places=2)
    quantity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    subtotal = models.DecimalField(max_digits=12, decimal_places=2)
    note = models.CharField(max_length=255, null=True, blank=True)
    is_custom = models.BooleanField(default=False)

    def __str__(self):
        return f"{self.quantity} x {self.item_name}"

    class Meta:
        db_table = 'order_items'
        ordering = ['id']
        constraints = [
            models.CheckConstraint(
                condition=Q(is_custom=False) | Q(menu__isnull=True),
                name='custom_item_without_menu',
            ),
            models.CheckConstraint(
                condition=Q(quantity__gte=1),
                name='order_item_quantity_positive',
            ),
        ]


class OrderSequence(models.Model):
    """Last order number handed out on a local business day"""
    day = models.DateField(unique=True)
    last_number = models.PositiveIntegerField(default=0)

    def __str__(self):
        return f"{self.day}: {self.last_number}"

    class Meta:
        db_table = 'order_sequences'
