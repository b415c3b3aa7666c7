from django.contrib import admin

from returns.models import RefundTransaction, Return, ReturnItem


class ReturnItemInline(admin.TabularInline):
    model = ReturnItem
    extra = 0
    can_delete = False
    readonly_fields = ("sale_item", "product", "quantity", "unit_price", "refund_amount", "condition", "restocked")


@admin.register(Return)
class ReturnAdmin(admin.ModelAdmin):
    list_display = ("return_number", "sale", "customer", "refund_method", "total_refund", "status", "created_at")
    list_filter = ("refund_method", "status")
    search_fields = ("return_number", "sale__receipt_number", "customer__name")
    inlines = [ReturnItemInline]

    def has_change_permission(self, request, obj=None):
        return False


@admin.register(RefundTransaction)
class RefundTransactionAdmin(admin.ModelAdmin):
    list_display = ("return_record", "sale", "amount", "refund_method", "created_at")

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
