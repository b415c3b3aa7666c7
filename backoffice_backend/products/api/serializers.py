# products/api/serializers.py

from rest_framework import serializers

from products.models import (
    Category,
    DamageReport,
    InventoryReceipt,
    Product,
    ProfitAnalysis,
    StockMovement,
)


class CategorySerializer(serializers.ModelSerializer):
    product_count = serializers.IntegerField(source="products.count", read_only=True)

    class Meta:
        model = Category
        fields = ["id", "name", "code", "description", "product_count", "created_at"]
        read_only_fields = ("id", "product_count", "created_at")


class ProductSerializer(serializers.ModelSerializer):
    """
    stock_quantity and cost_price are owned by the inventory services:
    read-only here, except opening_stock / cost_price on create.
    """

    category_name = serializers.CharField(source="category.name", read_only=True, default=None)
    opening_stock = serializers.IntegerField(write_only=True, required=False, min_value=0, default=0)

    is_low_stock = serializers.BooleanField(read_only=True)
    is_out_of_stock = serializers.BooleanField(read_only=True)
    is_near_expiry = serializers.BooleanField(read_only=True)
    is_expired = serializers.BooleanField(read_only=True)

    class Meta:
        model = Product
        fields = [
            "id",
            "name",
            "sku",
            "barcode",
            "description",
            "category",
            "category_name",
            "cost_price",
            "sale_price",
            "stock_quantity",
            "opening_stock",
            "min_stock_level",
            "expiry_date",
            "is_active",
            "is_low_stock",
            "is_out_of_stock",
            "is_near_expiry",
            "is_expired",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "stock_quantity", "created_at", "updated_at"]

    def validate_barcode(self, value):
        value = (value or "").strip()
        if not value:
            return None
        if not value.isdigit():
            raise serializers.ValidationError("Barcode must contain only numbers")
        if not 8 <= len(value) <= 13:
            raise serializers.ValidationError("Barcode must be between 8 and 13 digits")
        return value

    def validate_sale_price(self, value):
        if value is None or value < 0:
            raise serializers.ValidationError("Sale price must be zero or more")
        return value

    def create(self, validated_data):
        validated_data.pop("opening_stock", None)
        return super().create(validated_data)

    def update(self, instance, validated_data):
        validated_data.pop("opening_stock", None)
        # cost is re-averaged by stock intake only
        validated_data.pop("cost_price", None)
        return super().update(instance, validated_data)


class StockReceiveSerializer(serializers.Serializer):
    quantity = serializers.IntegerField(min_value=1)
    unit_cost = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0)
    supplier_name = serializers.CharField(required=False, allow_blank=True, default="")
    reference = serializers.CharField(required=False, allow_blank=True, default="")
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class StockAdjustSerializer(serializers.Serializer):
    new_quantity = serializers.IntegerField(min_value=0)
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class StockMovementSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source="product.name", read_only=True)

    class Meta:
        model = StockMovement
        fields = [
            "id",
            "product",
            "product_name",
            "movement_type",
            "quantity",
            "reference_type",
            "reference_id",
            "stock_after",
            "notes",
            "created_by",
            "created_at",
        ]


class InventoryReceiptSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source="product.name", read_only=True)

    class Meta:
        model = InventoryReceipt
        fields = "__all__"


class DamageReportSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source="product.name", read_only=True)

    class Meta:
        model = DamageReport
        fields = [
            "id",
            "product",
            "product_name",
            "quantity",
            "reason",
            "status",
            "reported_by",
            "reviewed_by",
            "reviewed_at",
            "review_notes",
            "created_at",
        ]
        read_only_fields = fields


class DamageReportCreateSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    quantity = serializers.IntegerField(min_value=1)
    reason = serializers.CharField(max_length=255)


class DamageReviewSerializer(serializers.Serializer):
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class ProfitAnalysisSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source="product.name", read_only=True)

    class Meta:
        model = ProfitAnalysis
        fields = [
            "product",
            "product_name",
            "cost_price",
            "sale_price",
            "stock_quantity",
            "stock_value",
            "profit_per_unit",
            "profit_margin",
            "updated_at",
        ]


class ProductImportSerializer(serializers.Serializer):
    rows = serializers.ListField(child=serializers.DictField(), allow_empty=False)
