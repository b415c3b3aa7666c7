# returns/api/serializers.py

from rest_framework import serializers

from returns.models import RefundTransaction, Return, ReturnItem
from sales.models import Sale, SaleItem


class ReturnableItemSerializer(serializers.ModelSerializer):
    product_id = serializers.UUIDField(read_only=True)
    returnable_quantity = serializers.IntegerField(read_only=True)

    class Meta:
        model = SaleItem
        fields = [
            "id",
            "product_id",
            "product_name",
            "quantity",
            "returned_quantity",
            "returnable_quantity",
            "unit_price",
            "total_price",
        ]
        read_only_fields = fields


class ReturnSearchResultSerializer(serializers.ModelSerializer):
    customer_name = serializers.CharField(source="customer.name", read_only=True, default=None)
    customer_phone = serializers.CharField(source="customer.phone", read_only=True, default=None)
    item_count = serializers.SerializerMethodField()

    class Meta:
        model = Sale
        fields = [
            "id",
            "receipt_number",
            "invoice_number",
            "customer_name",
            "customer_phone",
            "total_amount",
            "payment_method",
            "payment_status",
            "return_status",
            "sale_date",
            "item_count",
        ]
        read_only_fields = fields

    def get_item_count(self, obj) -> int:
        return len(obj.items.all())


class ReturnItemSerializer(serializers.ModelSerializer):
    sale_item_id = serializers.UUIDField(read_only=True)
    product_id = serializers.UUIDField(read_only=True)
    product_name = serializers.CharField(source="sale_item.product_name", read_only=True)

    class Meta:
        model = ReturnItem
        fields = [
            "id",
            "sale_item_id",
            "product_id",
            "product_name",
            "quantity",
            "unit_price",
            "refund_amount",
            "condition",
            "restocked",
        ]
        read_only_fields = fields


class RefundTransactionSerializer(serializers.ModelSerializer):
    class Meta:
        model = RefundTransaction
        fields = ["id", "amount", "refund_method", "reference", "created_at"]
        read_only_fields = fields


class ReturnSerializer(serializers.ModelSerializer):
    sale_id = serializers.UUIDField(read_only=True)
    receipt_number = serializers.CharField(source="sale.receipt_number", read_only=True)
    customer_id = serializers.UUIDField(read_only=True, allow_null=True)
    customer_name = serializers.CharField(source="customer.name", read_only=True, default=None)
    processed_by_email = serializers.EmailField(source="processed_by.email", read_only=True, default=None)
    items = ReturnItemSerializer(many=True, read_only=True)
    refund = RefundTransactionSerializer(read_only=True, default=None)

    class Meta:
        model = Return
        fields = [
            "id",
            "return_number",
            "sale_id",
            "receipt_number",
            "customer_id",
            "customer_name",
            "reason",
            "refund_method",
            "total_refund",
            "status",
            "processed_by_email",
            "notes",
            "created_at",
            "items",
            "refund",
        ]
        read_only_fields = fields


class ReturnLineInputSerializer(serializers.Serializer):
    sale_item_id = serializers.UUIDField()
    quantity = serializers.IntegerField(min_value=1)
    condition = serializers.ChoiceField(choices=ReturnItem.CONDITIONS, default=ReturnItem.CONDITION_GOOD)


class ProcessReturnInputSerializer(serializers.Serializer):
    sale_id = serializers.UUIDField()
    items = ReturnLineInputSerializer(many=True, allow_empty=False)
    refund_method = serializers.ChoiceField(choices=Return.REFUND_METHODS)
    reason = serializers.CharField(max_length=255)
    notes = serializers.CharField(required=False, allow_blank=True, default="")
