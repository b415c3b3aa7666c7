# returns/services/eligibility.py

"""
RETURN ELIGIBILITY (READ-ONLY)

Rules run in a fixed order and the first failure wins:
1) sale exists
2) sale is paid or partially paid
3) within RETURN_WINDOW_DAYS of the sale date
4) at least one unit left to return
5) sale not already fully returned
"""

from __future__ import annotations

from datetime import date

from django.conf import settings
from django.utils import timezone

from sales.models import Sale, SaleItem

RETURNABLE_PAYMENT_STATUSES = (Sale.PAYMENT_STATUS_PAID, Sale.PAYMENT_STATUS_PARTIALLY_PAID)


def return_window_days() -> int:
    return int(settings.RETURN_WINDOW_DAYS)


def days_since_sale(sale: Sale, *, today: date | None = None) -> int:
    today = today or timezone.localdate()
    return max(0, (today - timezone.localdate(sale.sale_date)).days)


def returnable_items(sale) -> list[SaleItem]:
    """Sale lines with at least one unit not yet returned."""
    sale_id = getattr(sale, "id", sale)
    items = SaleItem.objects.filter(sale_id=sale_id).select_related("product").order_by("id")
    return [item for item in items if item.returnable_quantity > 0]


def _result(eligible: bool, reason: str, days: int, window: int) -> dict:
    return {
        "eligible": eligible,
        "reason": reason,
        "days_since_sale": days,
        "return_window_days": window,
    }


def check_return_eligibility(sale_id, *, today: date | None = None) -> dict:
    window = return_window_days()

    sale = Sale.objects.filter(id=sale_id).first()
    if sale is None:
        return _result(False, "Sale not found", 0, window)

    days = days_since_sale(sale, today=today)

    if sale.payment_status not in RETURNABLE_PAYMENT_STATUSES:
        return _result(False, "Sale must be paid or partially paid to process returns", days, window)

    if days > window:
        return _result(False, f"Return window has expired ({window} days from sale date)", days, window)

    if not returnable_items(sale):
        return _result(
            False,
            "No items available for return (all items may have been returned already)",
            days,
            window,
        )

    if sale.return_status == Sale.RETURN_FULL:
        return _result(False, "This sale has already been fully returned", days, window)

    return _result(True, f"Sale is eligible for return within {window}-day window", days, window)
