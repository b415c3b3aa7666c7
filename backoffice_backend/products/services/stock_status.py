# products/services/stock_status.py

from __future__ import annotations

from datetime import date, timedelta

from django.conf import settings
from django.db.models import F, QuerySet
from django.utils import timezone

from products.models import Product

STOCK_STATES = ("low", "out", "near_expiry", "expired")


def _near_expiry_days() -> int:
    return int(getattr(settings, "NEAR_EXPIRY_DAYS", 30))


def low_stock(qs: QuerySet | None = None) -> QuerySet:
    qs = Product.objects.filter(is_active=True) if qs is None else qs
    return qs.filter(stock_quantity__gt=0, stock_quantity__lte=F("min_stock_level"))


def out_of_stock(qs: QuerySet | None = None) -> QuerySet:
    qs = Product.objects.filter(is_active=True) if qs is None else qs
    return qs.filter(stock_quantity__lte=0)


def near_expiry(qs: QuerySet | None = None, *, today: date | None = None) -> QuerySet:
    qs = Product.objects.filter(is_active=True) if qs is None else qs
    today = today or timezone.localdate()
    return qs.filter(expiry_date__gte=today, expiry_date__lte=today + timedelta(days=_near_expiry_days()))


def expired(qs: QuerySet | None = None, *, today: date | None = None) -> QuerySet:
    qs = Product.objects.filter(is_active=True) if qs is None else qs
    today = today or timezone.localdate()
    return qs.filter(expiry_date__lt=today)


def filter_by_stock_state(qs: QuerySet, state: str) -> QuerySet:
    state = (state or "").strip().lower()
    if state == "low":
        return low_stock(qs)
    if state == "out":
        return out_of_stock(qs)
    if state == "near_expiry":
        return near_expiry(qs)
    if state == "expired":
        return expired(qs)
    return qs


def product_issues(product: Product, *, today: date | None = None) -> list[str]:
    """Human-readable problems for the dashboard's critical products list."""
    today = today or timezone.localdate()
    issues = []

    qty = int(product.stock_quantity or 0)
    if qty <= 0:
        issues.append("Out of stock")
    elif qty <= int(product.min_stock_level or 0):
        issues.append("Low stock")

    if product.expiry_date:
        if product.expiry_date < today:
            issues.append("Expired")
        elif (product.expiry_date - today).days <= _near_expiry_days():
            issues.append("Near expiry")

    return issues
