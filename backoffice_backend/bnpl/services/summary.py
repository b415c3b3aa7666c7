# bnpl/services/summary.py

from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP

from django.db.models import Count, Q, Sum
from django.utils import timezone

from bnpl.models import BnplTransaction

TWOPLACES = Decimal("0.01")


def _money(v) -> Decimal:
    return Decimal(str(v or "0.00")).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def _overdue_q(today) -> Q:
    return Q(due_date__lt=today) & ~Q(status=BnplTransaction.STATUS_PAID)


def customer_bnpl_summary(*, customer, today=None) -> dict:
    today = today or timezone.localdate()
    customer_id = getattr(customer, "id", customer)

    agg = BnplTransaction.objects.filter(customer_id=customer_id).aggregate(
        total_bnpl_amount=Sum("original_amount"),
        total_paid=Sum("amount_paid"),
        total_outstanding=Sum("amount_due"),
        overdue_amount=Sum("amount_due", filter=_overdue_q(today)),
        active_transactions=Count("id", filter=~Q(status=BnplTransaction.STATUS_PAID)),
    )

    return {
        "customer_id": customer_id,
        "total_bnpl_amount": _money(agg["total_bnpl_amount"]),
        "total_paid": _money(agg["total_paid"]),
        "total_outstanding": _money(agg["total_outstanding"]),
        "overdue_amount": _money(agg["overdue_amount"]),
        "active_transactions": agg["active_transactions"] or 0,
    }


def bnpl_overview(*, today=None) -> dict:
    today = today or timezone.localdate()
    qs = BnplTransaction.objects.all()

    agg = qs.aggregate(
        total_bnpl_amount=Sum("original_amount"),
        total_paid=Sum("amount_paid"),
        total_outstanding=Sum("amount_due"),
        overdue_amount=Sum("amount_due", filter=_overdue_q(today)),
        customers_with_dues=Count("customer", filter=~Q(status=BnplTransaction.STATUS_PAID), distinct=True),
    )

    counts = {value: 0 for value, _ in BnplTransaction.STATUSES}
    for row in qs.values("status").annotate(n=Count("id")):
        counts[row["status"]] = row["n"]

    return {
        "total_bnpl_amount": _money(agg["total_bnpl_amount"]),
        "total_paid": _money(agg["total_paid"]),
        "total_outstanding": _money(agg["total_outstanding"]),
        "overdue_amount": _money(agg["overdue_amount"]),
        "customers_with_dues": agg["customers_with_dues"] or 0,
        "counts_by_status": counts,
    }
