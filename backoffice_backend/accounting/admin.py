from django.contrib import admin

from accounting.models import CashLedgerEntry, Expense


@admin.register(Expense)
class ExpenseAdmin(admin.ModelAdmin):
    list_display = ("expense_date", "category", "description", "amount", "payment_method", "created_by")
    list_filter = ("category", "payment_method", "expense_date")
    search_fields = ("category", "description", "reference")
    ordering = ("-expense_date",)


@admin.register(CashLedgerEntry)
class CashLedgerEntryAdmin(admin.ModelAdmin):
    list_display = ("created_at", "entry_type", "amount", "reference_type", "reference_id", "description")
    list_filter = ("entry_type",)
    search_fields = ("reference_id", "description")
    ordering = ("-created_at",)

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
