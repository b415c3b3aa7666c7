# sales/services/receipts.py

"""
RECEIPTS

- print flag on the sale
- audited reprints (authorization code per duplicate)
- read-side helpers: audit log, statistics, history, daily totals
"""

from __future__ import annotations

import hashlib
import logging
from collections import defaultdict
from datetime import date
from decimal import Decimal, ROUND_HALF_UP

from django.db import transaction
from django.db.models import Count, Q, Sum
from django.utils import timezone

from sales.models import ReceiptReprint, Sale
from store.services.periods import end_of_day, filter_period, start_of_day

logger = logging.getLogger(__name__)

TWOPLACES = Decimal("0.01")
ZERO = Decimal("0.00")

PAYMENT_GROUPS = ("cash", "card", "bnpl", "digital", "store_credit")


class ReceiptError(ValueError):
    pass


def _money(v) -> Decimal:
    return Decimal(str(v or "0.00")).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


# =========================================================
# WRITES
# =========================================================
def mark_receipt_printed(*, sale: Sale) -> Sale:
    sale.receipt_printed = True
    sale.receipt_printed_at = timezone.now()
    sale.save(update_fields=["receipt_printed", "receipt_printed_at", "updated_at"])
    return sale


def build_authorization_code(*, receipt_number: str, count: int, at=None) -> str:
    at = at or timezone.now()
    digest = hashlib.md5(f"{receipt_number}{at.isoformat()}".encode()).hexdigest()[:6].upper()
    return f"REPRINT-{timezone.localdate(at):%Y%m%d}-{count:03d}-{digest}"


@transaction.atomic
def log_receipt_reprint(
    *,
    sale_id,
    receipt_number: str,
    reprinted_by: str,
    reason: str = "Customer request",
    user_ip: str | None = None,
    user_agent: str = "",
    user=None,
) -> ReceiptReprint:
    """
    Record one duplicate print of (sale_id, receipt_number).
    The sale row is locked so concurrent reprints get distinct counts.
    """
    sale = (
        Sale.objects.select_for_update()
        .filter(id=sale_id, receipt_number=(receipt_number or "").strip())
        .first()
    )
    if sale is None:
        raise ReceiptError("Receipt not found")

    reprinted_by = (reprinted_by or "").strip()
    if not reprinted_by:
        raise ReceiptError("reprinted_by is required")

    count = ReceiptReprint.objects.filter(sale=sale).count() + 1
    now = timezone.now()

    reprint = ReceiptReprint.objects.create(
        sale=sale,
        receipt_number=sale.receipt_number,
        authorization_code=build_authorization_code(receipt_number=sale.receipt_number, count=count, at=now),
        reason=(reason or "").strip() or "Customer request",
        reprinted_by=reprinted_by,
        reprinted_by_user=user,
        user_ip=user_ip or None,
        user_agent=user_agent or "",
        reprint_count=count,
    )

    logger.info(
        "Receipt reprinted",
        extra={
            "sale_id": str(sale.id),
            "receipt_number": sale.receipt_number,
            "authorization_code": reprint.authorization_code,
            "reprint_count": count,
            "reprinted_by": reprinted_by,
        },
    )
    return reprint


# =========================================================
# READS
# =========================================================
def receipt_audit_log(*, receipt_number: str | None = None, start=None, end=None, reprinted_by: str | None = None) -> list[dict]:
    """
    Reprint rows, newest first. `running_count` is the position of each row
    among all reprints of its receipt (not only those in the filtered window).
    """
    qs = ReceiptReprint.objects.select_related("sale")
    if receipt_number:
        qs = qs.filter(receipt_number__icontains=receipt_number.strip())
    if reprinted_by:
        qs = qs.filter(reprinted_by__icontains=reprinted_by.strip())
    qs = filter_period(qs, "created_at", start, end)

    rows = []
    for r in qs.order_by("-created_at"):
        rows.append(
            {
                "id": r.id,
                "sale_id": r.sale_id,
                "receipt_number": r.receipt_number,
                "authorization_code": r.authorization_code,
                "reason": r.reason,
                "reprinted_by": r.reprinted_by,
                "user_ip": r.user_ip,
                "user_agent": r.user_agent,
                "running_count": r.reprint_count,
                "sale_total": _money(r.sale.total_amount),
                "created_at": r.created_at,
            }
        )
    return rows


def receipt_statistics(*, start=None, end=None) -> dict:
    sales = filter_period(Sale.objects.all(), "sale_date", start, end)
    reprints = filter_period(ReceiptReprint.objects.all(), "created_at", start, end)

    per_receipt = (
        reprints.values("receipt_number").annotate(n=Count("id")).order_by("-n", "receipt_number")
    )
    top = per_receipt.first()

    return {
        "total_receipts": sales.count(),
        "printed_receipts": sales.filter(receipt_printed=True).count(),
        "reprinted_receipts": per_receipt.count(),
        "total_reprints": reprints.count(),
        "unique_reprint_users": reprints.values("reprinted_by").distinct().count(),
        "most_reprinted_receipt": top["receipt_number"] if top else None,
        "most_reprinted_count": top["n"] if top else 0,
    }


def receipt_history(
    *,
    search: str | None = None,
    start=None,
    end=None,
    payment_method: str | None = None,
    limit: int = 100,
):
    qs = Sale.objects.select_related("customer").prefetch_related("items")

    search = (search or "").strip()
    if search:
        qs = qs.filter(
            Q(receipt_number__icontains=search)
            | Q(invoice_number__icontains=search)
            | Q(customer__name__icontains=search)
            | Q(customer__phone__icontains=search)
        )

    if payment_method:
        if payment_method == "digital":
            qs = qs.filter(payment_method__in=Sale.DIGITAL_METHODS)
        else:
            qs = qs.filter(payment_method=payment_method)

    qs = filter_period(qs, "sale_date", start, end)
    return list(qs.order_by("-sale_date")[: max(1, int(limit))])


def daily_receipt_stats(*, day: date | None = None) -> dict:
    day = day or timezone.localdate()
    qs = Sale.objects.filter(sale_date__gte=start_of_day(day), sale_date__lt=end_of_day(day))

    groups = {g: {"count": 0, "amount": ZERO} for g in PAYMENT_GROUPS}
    extra = defaultdict(lambda: {"count": 0, "amount": ZERO})

    for row in qs.values("payment_method").annotate(n=Count("id"), amount=Sum("total_amount")):
        method = row["payment_method"]
        group = "digital" if method in Sale.DIGITAL_METHODS else method
        bucket = groups[group] if group in groups else extra[group]
        bucket["count"] += row["n"]
        bucket["amount"] = _money(bucket["amount"] + _money(row["amount"]))

    groups.update(extra)
    total_count = sum(g["count"] for g in groups.values())
    total_amount = _money(sum((g["amount"] for g in groups.values()), ZERO))

    return {
        "date": day,
        "by_method": groups,
        "total_receipts": total_count,
        "total_amount": total_amount,
        "average_amount": _money(total_amount / total_count) if total_count else ZERO,
    }
