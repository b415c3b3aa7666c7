# bnpl/services/allocation.py

"""
OLDEST-DUE-FIRST PAYMENT ALLOCATION (PURE)

allocate() never touches the database. Callers order the balances
(order_oldest_due_first), allocate, then apply every resulting write
inside one transaction.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Hashable, Iterable, Sequence

TWOPLACES = Decimal("0.01")
ZERO = Decimal("0.00")


class AllocationError(ValueError):
    pass


def _money(v) -> Decimal:
    return Decimal(str(v if v is not None else "0.00")).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def _payment_amount(payment) -> Decimal:
    try:
        value = Decimal(str(payment))
    except (InvalidOperation, ValueError) as exc:
        raise AllocationError("Payment amount must be a number") from exc
    if not value.is_finite():
        raise AllocationError("Payment amount must be a number")
    if value != value.quantize(TWOPLACES):
        raise AllocationError("Payment amount cannot have more than 2 decimal places")
    return value.quantize(TWOPLACES)


def allocate(
    open_balances: Sequence[tuple[Hashable, Decimal]],
    payment,
) -> list[tuple[Hashable, Decimal]]:
    """
    Spread `payment` over `open_balances` in the given order.

    Each row receives min(remaining, amount_due) until the payment is used up.
    Rows that receive nothing are left out; output keeps input order.

    Raises AllocationError when the payment is not positive, has more than
    two decimal places, exceeds the total due, any amount due is negative,
    or an id repeats.
    """
    amount = _payment_amount(payment)
    if amount <= ZERO:
        raise AllocationError("Payment amount must be greater than 0")

    seen = set()
    rows = []
    for row_id, due in open_balances:
        if row_id in seen:
            raise AllocationError(f"Duplicate transaction id: {row_id}")
        seen.add(row_id)

        due = _money(due)
        if due < ZERO:
            raise AllocationError(f"Amount due cannot be negative for {row_id}")
        rows.append((row_id, due))

    total_due = sum((due for _, due in rows), ZERO)
    if amount > total_due:
        raise AllocationError(
            f"Payment amount {amount} exceeds total amount due {total_due}"
        )

    remaining = amount
    applied = []
    for row_id, due in rows:
        if remaining <= ZERO:
            break
        portion = min(remaining, due)
        if portion > ZERO:
            applied.append((row_id, portion))
            remaining -= portion

    return applied


def _due_sort_key(txn):
    due = getattr(txn, "due_date", None)
    created = getattr(txn, "created_at", None)
    if isinstance(due, datetime):
        due = due.date()
    return (
        due is None,
        due or date.max,
        created is None,
        created or datetime.max,
    )


def order_oldest_due_first(transactions: Iterable) -> list:
    """Sort by due_date then created_at; rows with no due date go last."""
    return sorted(transactions, key=_due_sort_key)
