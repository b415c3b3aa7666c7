from django.contrib import admin

from purchases.models import PurchaseItem, PurchaseOrder, Supplier


@admin.register(Supplier)
class SupplierAdmin(admin.ModelAdmin):
    list_display = ("name", "contact_person", "phone", "email", "credit_terms", "is_active")
    list_filter = ("is_active",)
    search_fields = ("name", "contact_person", "phone", "email")


class PurchaseItemInline(admin.TabularInline):
    model = PurchaseItem
    extra = 0
    readonly_fields = ("total_cost", "received_quantity")


@admin.register(PurchaseOrder)
class PurchaseOrderAdmin(admin.ModelAdmin):
    list_display = ("po_number", "supplier", "status", "order_date", "expected_date", "total_amount")
    list_filter = ("status", "order_date")
    search_fields = ("po_number", "supplier__name")
    readonly_fields = ("po_number", "total_amount", "received_date")
    inlines = [PurchaseItemInline]
