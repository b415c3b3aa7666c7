# sales/api/serializers.py

from rest_framework import serializers

from sales.models import ReceiptReprint, Sale, SaleItem
from sales.services.pricing import DISCOUNT_AMOUNT, DISCOUNT_PERCENTAGE

DISCOUNT_TYPES = [DISCOUNT_PERCENTAGE, DISCOUNT_AMOUNT]


# =====================================================
# READ
# =====================================================
class SaleItemSerializer(serializers.ModelSerializer):
    product_id = serializers.UUIDField(read_only=True)
    returnable_quantity = serializers.IntegerField(read_only=True)

    class Meta:
        model = SaleItem
        fields = [
            "id",
            "product_id",
            "product_name",
            "quantity",
            "unit_price",
            "discount_amount",
            "total_price",
            "returned_quantity",
            "returnable_quantity",
        ]
        read_only_fields = fields


class SaleSerializer(serializers.ModelSerializer):
    items = SaleItemSerializer(many=True, read_only=True)
    customer_id = serializers.UUIDField(read_only=True, allow_null=True)
    customer_name = serializers.CharField(source="customer.name", read_only=True, default=None)
    payment_group = serializers.CharField(read_only=True)

    class Meta:
        model = Sale
        fields = [
            "id",
            "invoice_number",
            "receipt_number",
            "customer_id",
            "customer_name",
            "subtotal",
            "discount_amount",
            "tax_amount",
            "total_amount",
            "amount_tendered",
            "change_amount",
            "payment_method",
            "payment_group",
            "payment_status",
            "return_status",
            "loyalty_points_earned",
            "cashier_name",
            "receipt_printed",
            "receipt_printed_at",
            "notes",
            "sale_date",
            "items",
        ]
        read_only_fields = fields


class ReceiptReprintSerializer(serializers.ModelSerializer):
    sale_id = serializers.UUIDField(read_only=True)

    class Meta:
        model = ReceiptReprint
        fields = [
            "id",
            "sale_id",
            "receipt_number",
            "authorization_code",
            "reason",
            "reprinted_by",
            "user_ip",
            "reprint_count",
            "created_at",
        ]
        read_only_fields = fields


# =====================================================
# WRITE
# =====================================================
class CartLineInputSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    quantity = serializers.IntegerField(min_value=1)
    discount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0, required=False, default=0)
    discount_type = serializers.ChoiceField(choices=DISCOUNT_TYPES, required=False, default=DISCOUNT_PERCENTAGE)


class CartQuoteInputSerializer(serializers.Serializer):
    items = CartLineInputSerializer(many=True, allow_empty=False)
    global_discount = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=0, required=False, default=0
    )
    global_discount_type = serializers.ChoiceField(
        choices=DISCOUNT_TYPES, required=False, default=DISCOUNT_PERCENTAGE
    )

    def to_service_items(self):
        return [
            {
                "product": line["product_id"],
                "quantity": line["quantity"],
                "discount": line["discount"],
                "discount_type": line["discount_type"],
            }
            for line in self.validated_data["items"]
        ]


class SaleCreateInputSerializer(CartQuoteInputSerializer):
    payment_method = serializers.ChoiceField(choices=Sale.PAYMENT_METHODS, default=Sale.PAYMENT_CASH)
    customer_id = serializers.UUIDField(required=False, allow_null=True)
    amount_tendered = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=0, required=False, allow_null=True
    )
    notes = serializers.CharField(required=False, allow_blank=True, default="")
    cashier_name = serializers.CharField(required=False, allow_blank=True, default="")


class ReprintInputSerializer(serializers.Serializer):
    receipt_number = serializers.CharField(max_length=20)
    reason = serializers.CharField(max_length=255, required=False, allow_blank=True, default="Customer request")
    reprinted_by = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
