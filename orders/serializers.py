from rest_framework import serializers

from .conf import pos_setting
from .models import Order, OrderItem


class CheckoutItemSerializer(serializers.Serializer):
    """
    One line of a checkout: either ``{menu_id, quantity}`` from the catalog
    or ``{is_custom: true, name, price, quantity}`` for a free-form item.
    """
    menu_id = serializers.IntegerField(required=False, allow_null=True)
    is_custom = serializers.BooleanField(default=False)
    name = serializers.CharField(max_length=255, required=False)
    price = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0, required=False)
    quantity = serializers.IntegerField(min_value=1)
    note = serializers.CharField(max_length=255, required=False, allow_blank=True, allow_null=True)

    def validate(self, attrs):
        if attrs.get('is_custom'):
            missing = {
                field: ["This field is required for custom items."]
                for field in ('name', 'price') if attrs.get(field) is None
            }
            if missing:
                raise serializers.ValidationError(missing)
            attrs.pop('menu_id', None)
        elif attrs.get('menu_id') is None:
            raise serializers.ValidationError({'menu_id': ["This field is required."]})
        return attrs


class CheckoutSerializer(serializers.Serializer):
    items = CheckoutItemSerializer(many=True, allow_empty=False)
    subtotal = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0)
    tax = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0)
    total = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0)
    payment_method = serializers.ChoiceField(choices=Order.PAYMENT_METHOD_CHOICES, default='cash')
    cash_amount = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=0, required=False, allow_null=True
    )
    change_amount = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=0, required=False, allow_null=True
    )
    notes = serializers.CharField(max_length=1000, required=False, allow_blank=True, allow_null=True)
    branch_id = serializers.IntegerField(required=False, allow_null=True)
    status = serializers.ChoiceField(
        choices=[Order.STATUS_PENDING, Order.STATUS_SUCCESS], default=Order.STATUS_SUCCESS
    )


class OrderEditItemSerializer(serializers.Serializer):
    """An existing line (by ``id``) or a new one; both must name a menu"""
    id = serializers.IntegerField(required=False, allow_null=True)
    menu_id = serializers.IntegerField()
    quantity = serializers.IntegerField(min_value=1)


class OrderEditSerializer(serializers.Serializer):
    items = OrderEditItemSerializer(many=True, allow_empty=False)
    edit_reason = serializers.CharField(max_length=500)

    def validate_items(self, value):
        ids = [item['id'] for item in value if item.get('id') is not None]
        if len(ids) != len(set(ids)):
            raise serializers.ValidationError("Each existing item may only be listed once.")
        return value


class VoidOrderSerializer(serializers.Serializer):
    delete_reason = serializers.CharField(max_length=500)

    def validate_delete_reason(self, value):
        min_length = pos_setting('VOID_REASON_MIN_LENGTH')
        if len(value) < min_length:
            raise serializers.ValidationError(
                f"Ensure this field has at least {min_length} characters."
            )
        return value


class OrderItemReadSerializer(serializers.ModelSerializer):
    class Meta:
        model = OrderItem
        fields = [
            'id', 'menu', 'item_name', 'price', 'quantity',
            'subtotal', 'note', 'is_custom',
        ]


class OrderReadSerializer(serializers.ModelSerializer):
    items = OrderItemReadSerializer(many=True, read_only=True)
    branch_name = serializers.CharField(source='branch.name', read_only=True, default=None)
    cashier_name = serializers.CharField(source='user.name', read_only=True, default=None)
    editor_name = serializers.CharField(source='edited_by.name', read_only=True, default=None)
    deleter_name = serializers.CharField(source='deleted_by.name', read_only=True, default=None)
    payment_method_label = serializers.CharField(source='get_payment_method_label', read_only=True)
    is_voided = serializers.BooleanField(read_only=True)

    class Meta:
        model = Order
        fields = [
            'id', 'order_number', 'branch', 'branch_name', 'user', 'cashier_name',
            'subtotal', 'tax', 'total', 'status', 'payment_method', 'payment_method_label',
            'cash_amount', 'change_amount', 'notes', 'items',
            'edited_by', 'editor_name', 'edited_at', 'edit_reason',
            'deleted_by', 'deleter_name', 'deleted_at', 'delete_reason', 'is_voided',
            'created_at', 'updated_at',
        ]
        read_only_fields = fields
