# bnpl/services/transactions.py

"""
BNPL TRANSACTION SERVICE

Every write here runs in one transaction.atomic block with the BNPL rows
locked before the customer row, so concurrent payments serialize.

Per applied payment:
- transaction: amount_paid += x, amount_due -= x, status recomputed
- customer: current_balance and total_outstanding_dues -= x (floored at 0)
- sale: payment_status follows the transaction (partially_paid / paid)
- cash ledger: one bnpl_payment entry when paid in cash
- BnplPayment row with confirmation + receipt numbers
"""

from __future__ import annotations

import logging
import secrets
from datetime import timedelta
from decimal import Decimal, ROUND_HALF_UP

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from accounting.models import CashLedgerEntry
from accounting.services.cash_ledger import record_cash_entry
from bnpl.models import BnplPayment, BnplTransaction
from bnpl.services.allocation import AllocationError, allocate, order_oldest_due_first
from customers.models import Customer
from customers.services.credit import CustomerCreditError, charge_credit, settle_credit
from store.services.numbering import format_daily_number

logger = logging.getLogger(__name__)

TWOPLACES = Decimal("0.01")
ZERO = Decimal("0.00")

CONFIRMATION_PREFIX = "BNPLPAY"
PAYMENT_REFERENCE = "bnpl_payment"


class BnplPaymentError(ValueError):
    pass


def _money(v) -> Decimal:
    return Decimal(str(v or "0.00")).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def _payment_receipt_number(now=None) -> str:
    now = timezone.localtime(now or timezone.now())
    return f"RCPT-BNPL-{now:%Y%m%d%H%M%S}-{secrets.token_hex(2).upper()}"


def _lock_customer(customer_id) -> Customer:
    return Customer.objects.select_for_update().get(id=customer_id)


@transaction.atomic
def open_bnpl_transaction(*, sale, customer: Customer, amount, user=None) -> BnplTransaction:
    """
    Called by checkout for a BNPL sale: puts the amount on the customer's
    credit line and opens a transaction due in BNPL_DUE_DAYS.
    """
    amt = _money(amount)
    if amt <= ZERO:
        raise BnplPaymentError("BNPL amount must be greater than 0")

    try:
        charge_credit(customer=customer, amount=amt)
    except CustomerCreditError as exc:
        raise BnplPaymentError(str(exc)) from exc

    txn = BnplTransaction.objects.create(
        sale=sale,
        customer=customer,
        original_amount=amt,
        amount_paid=ZERO,
        amount_due=amt,
        due_date=timezone.localdate() + timedelta(days=int(settings.BNPL_DUE_DAYS)),
        status=BnplTransaction.STATUS_PENDING,
    )

    logger.info(
        "BNPL transaction opened",
        extra={
            "bnpl_transaction_id": str(txn.id),
            "sale_id": str(sale.id),
            "customer_id": str(customer.id),
            "amount": str(amt),
            "due_date": str(txn.due_date),
        },
    )
    return txn


def _status_after_payment(txn: BnplTransaction, today) -> str:
    if txn.amount_due == ZERO:
        return BnplTransaction.STATUS_PAID
    if txn.status == BnplTransaction.STATUS_OVERDUE or (txn.due_date and txn.due_date < today):
        return BnplTransaction.STATUS_OVERDUE
    return BnplTransaction.STATUS_PARTIALLY_PAID


def _apply_payment(
    *,
    txn: BnplTransaction,
    customer: Customer,
    amount: Decimal,
    payment_method: str,
    notes: str,
    user,
) -> BnplPayment:
    """Caller holds locks on txn and customer and owns the transaction."""
    today = timezone.localdate()

    txn.amount_paid = _money(txn.amount_paid) + amount
    txn.amount_due = _money(txn.amount_due) - amount
    txn.status = _status_after_payment(txn, today)
    txn.save(update_fields=["amount_paid", "amount_due", "status", "updated_at"])

    settle_credit(customer=customer, amount=amount)

    sale = txn.sale
    sale.payment_status = (
        sale.PAYMENT_STATUS_PAID if txn.status == BnplTransaction.STATUS_PAID else sale.PAYMENT_STATUS_PARTIALLY_PAID
    )
    sale.save(update_fields=["payment_status", "updated_at"])

    payment = BnplPayment.objects.create(
        transaction=txn,
        customer=customer,
        amount=amount,
        payment_method=payment_method,
        confirmation_number=format_daily_number(prefix=CONFIRMATION_PREFIX, day=today),
        receipt_number=_payment_receipt_number(),
        amount_due_after=txn.amount_due,
        status_after=txn.status,
        notes=(notes or "").strip(),
        received_by=user,
    )

    if payment_method == BnplPayment.METHOD_CASH:
        record_cash_entry(
            entry_type=CashLedgerEntry.TYPE_BNPL_PAYMENT,
            amount=amount,
            description=f"BNPL payment for receipt {sale.receipt_number}",
            reference_type=PAYMENT_REFERENCE,
            reference_id=str(payment.id),
            user=user,
        )

    logger.info(
        "BNPL payment applied",
        extra={
            "bnpl_transaction_id": str(txn.id),
            "bnpl_payment_id": str(payment.id),
            "customer_id": str(customer.id),
            "amount": str(amount),
            "amount_due_after": str(txn.amount_due),
            "status_after": txn.status,
            "payment_method": payment_method,
        },
    )
    return payment


def _validate_method(payment_method: str) -> str:
    method = (payment_method or BnplPayment.METHOD_CASH).strip().lower()
    if method not in dict(BnplPayment.METHODS):
        raise BnplPaymentError(f"Invalid payment method: {method}")
    return method


@transaction.atomic
def process_bnpl_payment(
    *,
    transaction_id,
    amount,
    payment_method: str = BnplPayment.METHOD_CASH,
    notes: str = "",
    user=None,
) -> BnplPayment:
    method = _validate_method(payment_method)

    txn = (
        BnplTransaction.objects.select_for_update()
        .select_related("sale")
        .filter(id=transaction_id)
        .first()
    )
    if txn is None:
        raise BnplPaymentError("BNPL transaction not found")

    if txn.status == BnplTransaction.STATUS_PAID:
        raise BnplPaymentError("BNPL transaction is already fully paid")

    amt = _money(amount)
    if amt <= ZERO:
        raise BnplPaymentError("Payment amount must be greater than 0")

    if amt > _money(txn.amount_due):
        raise BnplPaymentError("Payment amount exceeds remaining due amount")

    customer = _lock_customer(txn.customer_id)
    return _apply_payment(
        txn=txn,
        customer=customer,
        amount=amt,
        payment_method=method,
        notes=notes,
        user=user,
    )


@transaction.atomic
def apply_customer_payment(
    *,
    customer,
    amount,
    transaction_ids=None,
    payment_method: str = BnplPayment.METHOD_CASH,
    notes: str = "",
    user=None,
) -> list[BnplPayment]:
    """
    One payment spread oldest-due-first over the customer's selected open
    transactions (all open ones when transaction_ids is None).

    All-or-nothing: any failure rolls back every application.
    """
    method = _validate_method(payment_method)
    customer_id = getattr(customer, "id", customer)

    qs = (
        BnplTransaction.objects.select_for_update()
        .select_related("sale")
        .filter(customer_id=customer_id, status__in=BnplTransaction.OPEN_STATUSES)
    )
    wanted = None
    if transaction_ids is not None:
        wanted = {str(t) for t in transaction_ids}
        if not wanted:
            raise BnplPaymentError("Select at least one BNPL transaction")
        qs = qs.filter(id__in=list(wanted))

    txns = list(qs)
    if wanted is not None:
        missing = wanted - {str(t.id) for t in txns}
        if missing:
            raise BnplPaymentError(
                f"BNPL transaction not found or not open for this customer: {', '.join(sorted(missing))}"
            )

    open_txns = order_oldest_due_first(txns)
    if not open_txns:
        raise BnplPaymentError("Customer has no open BNPL transactions")

    try:
        plan = allocate([(t.id, t.amount_due) for t in open_txns], amount)
    except AllocationError as exc:
        raise BnplPaymentError(str(exc)) from exc

    by_id = {t.id: t for t in open_txns}
    locked_customer = _lock_customer(customer_id)

    payments = [
        _apply_payment(
            txn=by_id[txn_id],
            customer=locked_customer,
            amount=portion,
            payment_method=method,
            notes=notes,
            user=user,
        )
        for txn_id, portion in plan
    ]

    logger.info(
        "Customer BNPL payment allocated",
        extra={
            "customer_id": str(customer_id),
            "amount": str(_money(amount)),
            "transactions": [str(txn_id) for txn_id, _ in plan],
        },
    )
    return payments


def mark_overdue_transactions(*, today=None) -> int:
    """pending / partially_paid rows past their due date become overdue."""
    today = today or timezone.localdate()
    updated = BnplTransaction.objects.filter(
        status__in=[BnplTransaction.STATUS_PENDING, BnplTransaction.STATUS_PARTIALLY_PAID],
        due_date__lt=today,
    ).update(status=BnplTransaction.STATUS_OVERDUE, updated_at=timezone.now())

    if updated:
        logger.warning("BNPL transactions marked overdue", extra={"count": updated, "as_of": str(today)})
    return updated
