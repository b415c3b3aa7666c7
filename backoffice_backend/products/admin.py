from django.contrib import admin

from products.models import (
    Category,
    DamageReport,
    InventoryReceipt,
    Product,
    ProfitAnalysis,
    StockMovement,
)


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ("name", "code")
    search_fields = ("name", "code")


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ("name", "sku", "barcode", "category", "sale_price", "cost_price", "stock_quantity", "is_active")
    list_filter = ("is_active", "category")
    search_fields = ("name", "sku", "barcode")
    readonly_fields = ("stock_quantity", "cost_price")


@admin.register(StockMovement)
class StockMovementAdmin(admin.ModelAdmin):
    list_display = ("product", "movement_type", "quantity", "reference_type", "reference_id", "created_at")
    list_filter = ("movement_type", "reference_type")

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(InventoryReceipt)
class InventoryReceiptAdmin(admin.ModelAdmin):
    list_display = ("product", "quantity", "unit_cost", "new_average_cost", "created_at")


@admin.register(DamageReport)
class DamageReportAdmin(admin.ModelAdmin):
    list_display = ("product", "quantity", "status", "created_at")
    list_filter = ("status",)


@admin.register(ProfitAnalysis)
class ProfitAnalysisAdmin(admin.ModelAdmin):
    list_display = ("product", "stock_value", "profit_per_unit", "profit_margin")
