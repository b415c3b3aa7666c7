from django.contrib import admin

from bnpl.models import BnplPayment, BnplTransaction


class BnplPaymentInline(admin.TabularInline):
    model = BnplPayment
    extra = 0
    can_delete = False
    fields = ("confirmation_number", "amount", "payment_method", "amount_due_after", "status_after", "created_at")
    readonly_fields = fields

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(BnplTransaction)
class BnplTransactionAdmin(admin.ModelAdmin):
    list_display = ("sale", "customer", "original_amount", "amount_paid", "amount_due", "due_date", "status")
    list_filter = ("status",)
    search_fields = ("customer__name", "customer__phone", "sale__receipt_number")
    readonly_fields = ("sale", "customer", "original_amount", "amount_paid", "amount_due", "status")
    inlines = [BnplPaymentInline]


@admin.register(BnplPayment)
class BnplPaymentAdmin(admin.ModelAdmin):
    list_display = ("confirmation_number", "customer", "amount", "payment_method", "status_after", "created_at")
    list_filter = ("payment_method",)
    search_fields = ("confirmation_number", "receipt_number", "customer__name")

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
