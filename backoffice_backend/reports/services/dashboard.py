# reports/services/dashboard.py

"""
DASHBOARD SUMMARY (READ-ONLY)

One payload for the back office landing page: today's and this month's
sales, inventory alerts, customer totals and the critical products list.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal, ROUND_HALF_UP

from django.db.models import Count, Q, Sum
from django.utils import timezone

from customers.models import Customer
from products.models import Product
from products.services import stock_status
from sales.models import Sale
from store.services.periods import end_of_day, start_of_day

TWOPLACES = Decimal("0.01")
ZERO = Decimal("0.00")

CRITICAL_PRODUCTS_LIMIT = 20


def _money(v) -> Decimal:
    return Decimal(str(v or "0.00")).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def _sales_between(start: date, end: date) -> dict:
    agg = Sale.objects.filter(sale_date__gte=start_of_day(start), sale_date__lt=end_of_day(end)).aggregate(
        total=Sum("total_amount"),
        count=Count("id"),
    )
    return {"total": _money(agg["total"]), "count": agg["count"] or 0}


def critical_products(*, today: date | None = None, limit: int = CRITICAL_PRODUCTS_LIMIT) -> list[dict]:
    today = today or timezone.localdate()
    near = stock_status.near_expiry(today=today)
    gone = stock_status.expired(today=today)

    qs = (
        Product.objects.filter(is_active=True)
        .filter(
            Q(id__in=stock_status.low_stock().values("id"))
            | Q(id__in=stock_status.out_of_stock().values("id"))
            | Q(id__in=near.values("id"))
            | Q(id__in=gone.values("id"))
        )
        .order_by("stock_quantity", "expiry_date", "name")
    )

    return [
        {
            "id": p.id,
            "name": p.name,
            "sku": p.sku,
            "stock_quantity": p.stock_quantity,
            "min_stock_level": p.min_stock_level,
            "expiry_date": p.expiry_date,
            "issues": stock_status.product_issues(p, today=today),
        }
        for p in qs[:limit]
    ]


def dashboard_summary(*, today: date | None = None) -> dict:
    today = today or timezone.localdate()
    month_start = today.replace(day=1)

    day_sales = _sales_between(today, today)
    month_sales = _sales_between(month_start, today)

    all_time = Sale.objects.aggregate(total=Sum("total_amount"), count=Count("id"))
    all_count = all_time["count"] or 0
    average_order = _money(_money(all_time["total"]) / all_count) if all_count else ZERO

    customers = Customer.objects.filter(is_active=True).aggregate(
        count=Count("id"),
        loyalty_points=Sum("loyalty_points"),
        outstanding_dues=Sum("total_outstanding_dues"),
    )

    return {
        "date": today,
        "sales": {
            "today_total": day_sales["total"],
            "today_count": day_sales["count"],
            "month_total": month_sales["total"],
            "month_count": month_sales["count"],
            "average_order_value": average_order,
        },
        "inventory": {
            "total_products": Product.objects.filter(is_active=True).count(),
            "low_stock": stock_status.low_stock().count(),
            "out_of_stock": stock_status.out_of_stock().count(),
            "near_expiry": stock_status.near_expiry(today=today).count(),
            "expired": stock_status.expired(today=today).count(),
        },
        "customers": {
            "total": customers["count"] or 0,
            "loyalty_points": customers["loyalty_points"] or 0,
            "outstanding_dues": _money(customers["outstanding_dues"]),
        },
        "critical_products": critical_products(today=today),
    }
