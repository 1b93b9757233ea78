from django.contrib import admin

from .models import Order, OrderItem, OrderSequence


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ['order_number', 'branch', 'user', 'total', 'status', 'payment_method', 'created_at']
    list_filter = ['status', 'payment_method', 'branch']
    search_fields = ['order_number']
    inlines = [OrderItemInline]

    def get_queryset(self, request):
        return Order.all_objects.all()


@admin.register(OrderSequence)
class OrderSequenceAdmin(admin.ModelAdmin):
    list_display = ['day', 'last_number']
