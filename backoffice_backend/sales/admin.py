from django.contrib import admin

from sales.models import ReceiptReprint, Sale, SaleItem


class SaleItemInline(admin.TabularInline):
    model = SaleItem
    extra = 0
    can_delete = False
    readonly_fields = ("product", "product_name", "quantity", "unit_price", "discount_amount", "total_price", "returned_quantity")


@admin.register(Sale)
class SaleAdmin(admin.ModelAdmin):
    list_display = ("receipt_number", "invoice_number", "customer", "total_amount", "payment_method", "payment_status", "return_status", "sale_date")
    list_filter = ("payment_method", "payment_status", "return_status")
    search_fields = ("receipt_number", "invoice_number", "customer__name", "customer__phone")
    inlines = [SaleItemInline]

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(ReceiptReprint)
class ReceiptReprintAdmin(admin.ModelAdmin):
    list_display = ("receipt_number", "reprint_count", "authorization_code", "reprinted_by", "created_at")
    search_fields = ("receipt_number", "authorization_code", "reprinted_by")

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
