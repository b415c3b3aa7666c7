# accounting/services/cash_ledger.py

"""
CASH LEDGER SERVICE

record_cash_entry takes a positive amount and signs it from the entry type:
- inflows  (sale, bnpl_payment, in, opening) are stored positive
- outflows (expense, refund, out) are stored negative

Entries carrying a reference are idempotent per (entry_type, reference):
recording the same reference twice returns the first row.
"""

from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP

from django.db import transaction
from django.db.models import Sum
from django.utils import timezone

from accounting.models import CashLedgerEntry

logger = logging.getLogger(__name__)

TWOPLACES = Decimal("0.01")
ZERO = Decimal("0.00")

MANUAL_ENTRY_TYPES = {
    CashLedgerEntry.TYPE_IN,
    CashLedgerEntry.TYPE_OUT,
    CashLedgerEntry.TYPE_OPENING,
}


class CashLedgerError(ValueError):
    pass


def _money(v) -> Decimal:
    return Decimal(str(v or "0.00")).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def signed_amount(*, entry_type: str, amount) -> Decimal:
    amt = _money(amount)
    if amt <= ZERO:
        raise CashLedgerError("Cash entry amount must be > 0")

    if entry_type in CashLedgerEntry.OUTFLOW_TYPES:
        return -amt
    if entry_type in CashLedgerEntry.INFLOW_TYPES:
        return amt
    raise CashLedgerError(f"Unknown cash entry type: {entry_type}")


@transaction.atomic
def record_cash_entry(
    *,
    entry_type: str,
    amount,
    description: str = "",
    reference_type: str = "",
    reference_id: str = "",
    user=None,
) -> CashLedgerEntry:
    value = signed_amount(entry_type=entry_type, amount=amount)
    reference_id = str(reference_id or "")

    if reference_id:
        existing = CashLedgerEntry.objects.filter(
            entry_type=entry_type,
            reference_type=reference_type or "",
            reference_id=reference_id,
        ).first()
        if existing is not None:
            return existing

    entry = CashLedgerEntry.objects.create(
        entry_type=entry_type,
        amount=value,
        description=(description or "").strip(),
        reference_type=reference_type or "",
        reference_id=reference_id,
        created_by=user,
    )

    logger.info(
        "Cash ledger entry recorded",
        extra={
            "entry_type": entry_type,
            "amount": str(value),
            "reference_type": reference_type or "",
            "reference_id": reference_id,
        },
    )
    return entry


def record_manual_entry(*, entry_type: str, amount, description: str = "", user=None) -> CashLedgerEntry:
    """Cash in / cash out / opening float entered by staff."""
    if entry_type not in MANUAL_ENTRY_TYPES:
        raise CashLedgerError("Manual entries must be one of: in, out, opening")
    return record_cash_entry(entry_type=entry_type, amount=amount, description=description, user=user)


def get_cash_balance(*, at: datetime | None = None) -> Decimal:
    """Sum of every entry created at or before `at` (default: now)."""
    at = at or timezone.now()
    total = CashLedgerEntry.objects.filter(created_at__lte=at).aggregate(total=Sum("amount"))["total"]
    return _money(total)
