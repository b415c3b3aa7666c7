# accounting/services/expense_service.py

"""
EXPENSE SERVICE

- Creates the Expense business record
- Cash expenses also leave the till: exactly one `expense` cash ledger
  entry of -amount, referenced by the expense id
"""

from __future__ import annotations

import logging
from decimal import Decimal, ROUND_HALF_UP

from django.db import transaction

from accounting.models import CashLedgerEntry, Expense
from accounting.services.cash_ledger import record_cash_entry
from store.services.periods import PeriodError, parse_day

logger = logging.getLogger(__name__)

TWOPLACES = Decimal("0.01")

EXPENSE_REFERENCE = "expense"


class ExpenseError(ValueError):
    pass


def _money(v) -> Decimal:
    return Decimal(str(v or "0.00")).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


@transaction.atomic
def create_expense(
    *,
    category: str,
    description: str,
    amount,
    expense_date=None,
    payment_method: str = Expense.PAYMENT_CASH,
    reference: str = "",
    user=None,
) -> Expense:
    category = (category or "").strip()
    if not category:
        raise ExpenseError("Expense category is required")

    description = (description or "").strip()
    if not description:
        raise ExpenseError("Expense description is required")

    amt = _money(amount)
    if amt <= Decimal("0.00"):
        raise ExpenseError("Amount must be > 0")

    method = (payment_method or Expense.PAYMENT_CASH).strip().lower()
    if method not in dict(Expense.PAYMENT_METHODS):
        raise ExpenseError("Invalid payment_method. Use 'cash', 'card', or 'bank_transfer'.")

    try:
        day = parse_day(expense_date, field="expense_date")
    except PeriodError as exc:
        raise ExpenseError(str(exc)) from exc

    expense = Expense(
        category=category,
        description=description,
        amount=amt,
        payment_method=method,
        reference=(reference or "").strip(),
        created_by=user,
    )
    if day is not None:
        expense.expense_date = day
    expense.save()

    if method == Expense.PAYMENT_CASH:
        record_cash_entry(
            entry_type=CashLedgerEntry.TYPE_EXPENSE,
            amount=amt,
            description=f"{category}: {description}",
            reference_type=EXPENSE_REFERENCE,
            reference_id=str(expense.id),
            user=user,
        )

    logger.info(
        "Expense recorded",
        extra={
            "expense_id": str(expense.id),
            "category": category,
            "amount": str(amt),
            "payment_method": method,
        },
    )
    return expense
