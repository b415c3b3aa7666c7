# customers/services/summary.py

from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP

from django.db.models import Count, Max, Sum

from bnpl.services.summary import customer_bnpl_summary
from customers.models import Customer

TWOPLACES = Decimal("0.01")


def _money(v) -> Decimal:
    return Decimal(str(v or "0.00")).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def customer_financial_summary(*, customer: Customer, today=None) -> dict:
    """
    Everything the customer profile screen shows in one read:
    purchases, BNPL position, refunds, loyalty and the credit line.
    """
    purchases = customer.sales.aggregate(
        total=Sum("total_amount"),
        count=Count("id"),
        last=Max("sale_date"),
    )
    refunds = customer.refund_transactions.aggregate(total=Sum("amount"), count=Count("id"))

    return {
        "customer_id": customer.id,
        "name": customer.name,
        "total_purchases": _money(purchases["total"]),
        "purchase_count": purchases["count"] or 0,
        "last_purchase_at": purchases["last"],
        "bnpl": customer_bnpl_summary(customer=customer, today=today),
        "total_refunds": _money(refunds["total"]),
        "refund_count": refunds["count"] or 0,
        "loyalty_points": customer.loyalty_points,
        "store_credit": _money(customer.store_credit),
        "credit_limit": _money(customer.credit_limit),
        "current_balance": _money(customer.current_balance),
        "available_credit": _money(customer.available_credit),
        "total_outstanding_dues": _money(customer.total_outstanding_dues),
    }
