# customers/services/credit.py

"""
CUSTOMER CREDIT LINE

All balance mutations on Customer go through here so that
available_credit stays derived and every movement is logged.

Callers own the transaction: these helpers expect a row already
locked with select_for_update() when used inside a larger write.
"""

from __future__ import annotations

import logging
from decimal import Decimal, ROUND_HALF_UP

from customers.models import Customer

logger = logging.getLogger(__name__)

TWOPLACES = Decimal("0.01")
ZERO = Decimal("0.00")


class CustomerCreditError(ValueError):
    pass


def _money(v) -> Decimal:
    return Decimal(str(v or "0.00")).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def check_customer_credit(*, customer: Customer, amount) -> bool:
    """True when an active customer has at least `amount` available credit."""
    if customer is None or not customer.is_active:
        return False
    return _money(customer.available_credit) >= _money(amount)


def charge_credit(*, customer: Customer, amount) -> Customer:
    """Put `amount` on the customer's credit line (BNPL sale)."""
    amt = _money(amount)
    if amt <= ZERO:
        raise CustomerCreditError("Credit amount must be > 0")

    if not check_customer_credit(customer=customer, amount=amt):
        raise CustomerCreditError(
            f"Insufficient credit: available {_money(customer.available_credit)}, requested {amt}"
        )

    customer.current_balance = _money(customer.current_balance) + amt
    customer.total_outstanding_dues = _money(customer.total_outstanding_dues) + amt
    customer.save(update_fields=["current_balance", "total_outstanding_dues", "updated_at"])

    logger.info(
        "Customer credit charged",
        extra={"customer_id": str(customer.id), "amount": str(amt)},
    )
    return customer


def settle_credit(*, customer: Customer, amount) -> Customer:
    """Reduce balance and dues after a BNPL repayment. Never goes below zero."""
    amt = _money(amount)
    if amt <= ZERO:
        raise CustomerCreditError("Settlement amount must be > 0")

    customer.current_balance = max(ZERO, _money(customer.current_balance) - amt)
    customer.total_outstanding_dues = max(ZERO, _money(customer.total_outstanding_dues) - amt)
    customer.save(update_fields=["current_balance", "total_outstanding_dues", "updated_at"])

    logger.info(
        "Customer credit settled",
        extra={"customer_id": str(customer.id), "amount": str(amt)},
    )
    return customer


def add_store_credit(*, customer: Customer, amount) -> Customer:
    amt = _money(amount)
    if amt <= ZERO:
        raise CustomerCreditError("Store credit amount must be > 0")

    customer.store_credit = _money(customer.store_credit) + amt
    customer.save(update_fields=["store_credit", "updated_at"])

    logger.info(
        "Store credit issued",
        extra={"customer_id": str(customer.id), "amount": str(amt)},
    )
    return customer


def spend_store_credit(*, customer: Customer, amount) -> Customer:
    amt = _money(amount)
    if amt <= ZERO:
        raise CustomerCreditError("Store credit amount must be > 0")

    if _money(customer.store_credit) < amt:
        raise CustomerCreditError(
            f"Insufficient store credit: available {_money(customer.store_credit)}, requested {amt}"
        )

    customer.store_credit = _money(customer.store_credit) - amt
    customer.save(update_fields=["store_credit", "updated_at"])

    logger.info(
        "Store credit spent",
        extra={"customer_id": str(customer.id), "amount": str(amt)},
    )
    return customer
