from rest_framework import serializers

from apps.catalog.serializers import ProductSerializer
from apps.utils.validators import validate_phone
from .models import Order, OrderItem


# ---------- Cart ----------

class CartLineSerializer(serializers.Serializer):
    product = ProductSerializer(read_only=True)
    quantity = serializers.IntegerField()
    unit_price = serializers.DecimalField(max_digits=10, decimal_places=2)
    subtotal = serializers.DecimalField(max_digits=12, decimal_places=2)


class CartQuantitySerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    quantity = serializers.IntegerField()


class CartAddSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    quantity = serializers.IntegerField(min_value=1, default=1)


class CartRemoveSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()


# ---------- Checkout ----------

class CheckoutSerializer(serializers.Serializer):
    business_name = serializers.CharField(max_length=255)
    contact_name = serializers.CharField(max_length=255)
    email = serializers.EmailField()
    phone = serializers.CharField(max_length=32, validators=[validate_phone])
    address = serializers.CharField()
    state = serializers.CharField(max_length=100, allow_blank=True, required=False, default="")
    postcode = serializers.CharField(max_length=20, allow_blank=True, required=False, default="")
    country = serializers.CharField(max_length=100, allow_blank=True, required=False, default="")
    notes = serializers.CharField(allow_blank=True, required=False, default="")


# ---------- Orders ----------

class OrderItemSerializer(serializers.ModelSerializer):
    product_id = serializers.UUIDField(read_only=True, allow_null=True)
    product_title = serializers.CharField(source="display_title", read_only=True)
    subtotal = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)

    class Meta:
        model = OrderItem
        fields = ["id", "product_id", "product_title", "quantity", "unit_price", "subtotal"]
        read_only_fields = fields


class OrderSerializer(serializers.ModelSerializer):
    """
    Customer view. Internal notes are never exposed here.
    """
    items = OrderItemSerializer(many=True, read_only=True)
    status_display = serializers.CharField(source="get_status_display", read_only=True)
    payment_status_display = serializers.CharField(source="get_payment_status_display", read_only=True)

    class Meta:
        model = Order
        fields = [
            "id", "number", "status", "status_display",
            "payment_status", "payment_status_display",
            "total", "shipping_cost", "shipping_address",
            "created_at", "items",
        ]
        read_only_fields = fields


class AdminOrderSerializer(serializers.ModelSerializer):
    items = OrderItemSerializer(many=True, read_only=True)
    customer_id = serializers.UUIDField(read_only=True)
    business_name = serializers.CharField(source="customer.business_name", read_only=True)
    items_subtotal = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)
    grand_total = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)

    class Meta:
        model = Order
        fields = [
            "id", "number", "customer_id", "business_name",
            "status", "payment_status",
            "items_subtotal", "shipping_cost", "grand_total", "total",
            "shipping_address", "internal_notes",
            "created_at", "updated_at", "items",
        ]
        read_only_fields = fields


class StatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Order.Status.choices)


class PaymentStatusSerializer(serializers.Serializer):
    payment_status = serializers.ChoiceField(choices=Order.PaymentStatus.choices)


class ShippingCostSerializer(serializers.Serializer):
    shipping_cost = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0)


class InternalNotesSerializer(serializers.Serializer):
    internal_notes = serializers.CharField(allow_blank=True)


class ItemUpdateSerializer(serializers.Serializer):
    quantity = serializers.IntegerField(min_value=1, required=False)
    unit_price = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0, required=False)

    def validate(self, attrs):
        if not attrs:
            raise serializers.ValidationError("Provide quantity and/or unit_price.")
        return attrs


class ItemAddSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
