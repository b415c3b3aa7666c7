# sales/services/pricing.py

"""
CART PRICING (PURE)

    line gross        = unit_price * quantity
    line discount     = gross * pct / 100   (percentage)
                      = amount               (amount, capped at gross)
    subtotal          = sum(line gross - line discount)
    global discount   = subtotal * pct / 100 or a flat amount (capped at subtotal)
    discounted        = subtotal - global discount
    tax               = discounted * tax_rate / 100
    total             = discounted + tax

Every figure is rounded to 2 places (ROUND_HALF_UP).
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

TWOPLACES = Decimal("0.01")
ZERO = Decimal("0.00")
HUNDRED = Decimal("100")

DISCOUNT_PERCENTAGE = "percentage"
DISCOUNT_AMOUNT = "amount"
DISCOUNT_TYPES = (DISCOUNT_PERCENTAGE, DISCOUNT_AMOUNT)


class PricingError(ValueError):
    pass


def _money(v) -> Decimal:
    try:
        return Decimal(str(v if v not in (None, "") else "0.00")).quantize(TWOPLACES, rounding=ROUND_HALF_UP)
    except InvalidOperation as exc:
        raise PricingError(f"Invalid amount: {v}") from exc


def discount_value(*, base, discount, discount_type: str = DISCOUNT_PERCENTAGE) -> Decimal:
    base = _money(base)
    value = _money(discount)
    if value < ZERO:
        raise PricingError("Discount cannot be negative")

    kind = (discount_type or DISCOUNT_PERCENTAGE).strip().lower()
    if kind == DISCOUNT_PERCENTAGE:
        if value > HUNDRED:
            raise PricingError("Percentage discount cannot exceed 100")
        return _money(base * value / HUNDRED)
    if kind == DISCOUNT_AMOUNT:
        return min(value, base)
    raise PricingError(f"Invalid discount type: {discount_type}")


def compute_cart_totals(
    *,
    lines: list[dict],
    global_discount=0,
    global_discount_type: str = DISCOUNT_PERCENTAGE,
    tax_rate=0,
) -> dict:
    """
    lines: [{"unit_price", "quantity", "discount"?, "discount_type"?, ...}]
    Extra keys on each line are carried through to the output.
    """
    rate = _money(tax_rate)
    if rate < ZERO:
        raise PricingError("Tax rate cannot be negative")

    priced = []
    subtotal = ZERO
    for line in lines:
        quantity = int(line.get("quantity") or 0)
        if quantity <= 0:
            raise PricingError("Quantity must be at least 1")

        unit_price = _money(line.get("unit_price"))
        if unit_price < ZERO:
            raise PricingError("Unit price cannot be negative")

        gross = _money(unit_price * quantity)
        line_discount = discount_value(
            base=gross,
            discount=line.get("discount") or 0,
            discount_type=line.get("discount_type") or DISCOUNT_PERCENTAGE,
        )
        total_price = gross - line_discount
        subtotal += total_price

        priced.append(
            {
                **line,
                "quantity": quantity,
                "unit_price": unit_price,
                "gross_amount": gross,
                "discount_amount": line_discount,
                "total_price": total_price,
            }
        )

    cart_discount = discount_value(
        base=subtotal,
        discount=global_discount or 0,
        discount_type=global_discount_type or DISCOUNT_PERCENTAGE,
    )
    discounted = subtotal - cart_discount
    tax = _money(discounted * rate / HUNDRED)

    return {
        "lines": priced,
        "subtotal": subtotal,
        "discount_amount": cart_discount,
        "discounted_subtotal": discounted,
        "tax_rate": rate,
        "tax_amount": tax,
        "total_amount": discounted + tax,
    }
