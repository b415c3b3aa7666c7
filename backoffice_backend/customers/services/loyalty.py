# customers/services/loyalty.py

from __future__ import annotations

import logging
from decimal import Decimal, ROUND_FLOOR

from customers.models import Customer
from store.models import LoyaltyRule

logger = logging.getLogger(__name__)

DEFAULT_POINTS_PER_CURRENCY = Decimal("1.0")


def points_rate_for(amount) -> Decimal:
    """
    Rate of the active rule with the highest threshold the purchase reaches.
    Falls back to 1 point per currency unit when no rule applies.
    """
    amt = Decimal(str(amount or 0))
    rule = (
        LoyaltyRule.objects.filter(is_active=True, min_purchase_amount__lte=amt)
        .order_by("-min_purchase_amount")
        .first()
    )
    if rule is None:
        return DEFAULT_POINTS_PER_CURRENCY
    return Decimal(rule.points_per_currency)


def calculate_loyalty_points(amount) -> int:
    amt = Decimal(str(amount or 0))
    if amt <= 0:
        return 0
    points = (amt * points_rate_for(amt)).to_integral_value(rounding=ROUND_FLOOR)
    return max(0, int(points))


def award_loyalty_points(*, customer: Customer, amount) -> int:
    points = calculate_loyalty_points(amount)
    if points <= 0:
        return 0

    customer.loyalty_points = int(customer.loyalty_points or 0) + points
    customer.save(update_fields=["loyalty_points", "updated_at"])

    logger.info(
        "Loyalty points awarded",
        extra={"customer_id": str(customer.id), "points": points, "amount": str(amount)},
    )
    return points
