# reports/services/sales_analytics.py

"""
SALES ANALYTICS (READ-ONLY)

All functions take an inclusive [start, end] day range (YYYY-MM-DD strings
or dates). Missing bounds mean "unbounded" on that side.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal, ROUND_HALF_UP

from django.db.models import Count, F, Sum
from django.db.models.functions import TruncDay, TruncHour, TruncMonth
from django.utils import timezone

from sales.models import Sale, SaleItem
from store.services.periods import PeriodError, end_of_day, filter_period, start_of_day

TWOPLACES = Decimal("0.01")
ZERO = Decimal("0.00")

TRUNCATORS = {
    "hour": TruncHour,
    "day": TruncDay,
    "month": TruncMonth,
}


def _money(v) -> Decimal:
    return Decimal(str(v or "0.00")).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def _sales(start=None, end=None):
    return filter_period(Sale.objects.all(), "sale_date", start, end)


def sales_trend(*, start=None, end=None, group_by: str = "day") -> list[dict]:
    trunc = TRUNCATORS.get((group_by or "day").strip().lower())
    if trunc is None:
        raise PeriodError("group_by must be one of: hour, day, month")

    tz = timezone.get_current_timezone()
    sales = _sales(start, end)

    rows = (
        sales.annotate(bucket=trunc("sale_date", tzinfo=tz))
        .values("bucket")
        .annotate(revenue=Sum("total_amount"), transactions=Count("id"))
        .order_by("bucket")
    )

    items_by_bucket = {
        row["bucket"]: row["items"]
        for row in SaleItem.objects.filter(sale__in=sales)
        .annotate(bucket=trunc("sale__sale_date", tzinfo=tz))
        .values("bucket")
        .annotate(items=Sum("quantity"))
    }

    return [
        {
            "period": row["bucket"],
            "revenue": _money(row["revenue"]),
            "transactions": row["transactions"],
            "items_sold": items_by_bucket.get(row["bucket"]) or 0,
        }
        for row in rows
    ]


def sales_summary_metrics(*, start=None, end=None) -> dict:
    sales = _sales(start, end)

    agg = sales.aggregate(revenue=Sum("total_amount"), transactions=Count("id"))
    revenue = _money(agg["revenue"])
    transactions = agg["transactions"] or 0

    items_sold = SaleItem.objects.filter(sale__in=sales).aggregate(n=Sum("quantity"))["n"] or 0

    per_customer = (
        sales.filter(customer__isnull=False).values("customer").annotate(n=Count("id"))
    )
    unique_customers = per_customer.count()
    returning_customers = per_customer.filter(n__gt=1).count()

    by_method = {value: ZERO for value, _ in Sale.PAYMENT_METHODS}
    for row in sales.values("payment_method").annotate(total=Sum("total_amount")):
        by_method[row["payment_method"]] = _money(row["total"])

    return {
        "total_revenue": revenue,
        "total_transactions": transactions,
        "average_order_value": _money(revenue / transactions) if transactions else ZERO,
        "items_sold": items_sold,
        "unique_customers": unique_customers,
        "returning_customers": returning_customers,
        "revenue_by_payment_method": by_method,
    }


def top_products(*, start=None, end=None, limit: int = 10) -> dict:
    items = SaleItem.objects.filter(sale__in=_sales(start, end))

    rows = items.values("product_id", name=F("product__name")).annotate(
        quantity=Sum("quantity"),
        revenue=Sum("total_price"),
        net_quantity=Sum(F("quantity") - F("returned_quantity")),
    )

    def shape(qs):
        return [
            {
                "product_id": r["product_id"],
                "name": r["name"],
                "quantity": r["quantity"] or 0,
                "net_quantity": r["net_quantity"] or 0,
                "revenue": _money(r["revenue"]),
            }
            for r in qs[: max(1, int(limit))]
        ]

    return {
        "by_quantity": shape(rows.order_by("-quantity", "name")),
        "by_revenue": shape(rows.order_by("-revenue", "name")),
    }


def daily_sales(*, day: date | None = None) -> dict:
    """Hourly buckets 0..23 plus totals for one calendar day."""
    day = day or timezone.localdate()
    tz = timezone.get_current_timezone()
    sales = Sale.objects.filter(sale_date__gte=start_of_day(day), sale_date__lt=end_of_day(day))

    hours = [{"hour": h, "revenue": ZERO, "transactions": 0} for h in range(24)]
    for sale in sales.only("sale_date", "total_amount"):
        bucket = hours[timezone.localtime(sale.sale_date, tz).hour]
        bucket["revenue"] = _money(bucket["revenue"] + _money(sale.total_amount))
        bucket["transactions"] += 1

    total_revenue = _money(sum((h["revenue"] for h in hours), ZERO))
    total_transactions = sum(h["transactions"] for h in hours)
    busiest = max(hours, key=lambda h: (h["transactions"], h["revenue"]))

    return {
        "date": day,
        "hours": hours,
        "total_revenue": total_revenue,
        "total_transactions": total_transactions,
        "average_order_value": _money(total_revenue / total_transactions) if total_transactions else ZERO,
        "peak_hour": busiest["hour"] if total_transactions else None,
    }
