from django.contrib import admin

from customers.models import Customer


@admin.register(Customer)
class CustomerAdmin(admin.ModelAdmin):
    list_display = (
        "name",
        "phone",
        "credit_limit",
        "current_balance",
        "available_credit",
        "total_outstanding_dues",
        "store_credit",
        "loyalty_points",
        "is_active",
    )
    list_filter = ("is_active",)
    search_fields = ("name", "phone", "email")
    readonly_fields = ("current_balance", "available_credit", "total_outstanding_dues", "store_credit", "loyalty_points")
