# products/services/profit.py

from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP

from products.models import Product, ProfitAnalysis

TWOPLACES = Decimal("0.01")


def _money(v) -> Decimal:
    return Decimal(str(v or "0.00")).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def compute_profit_figures(*, cost_price, sale_price, stock_quantity) -> dict:
    cost = _money(cost_price)
    sale = _money(sale_price)
    qty = int(stock_quantity or 0)

    profit_per_unit = sale - cost
    if sale > 0:
        margin = (profit_per_unit / sale * Decimal("100")).quantize(TWOPLACES, rounding=ROUND_HALF_UP)
    else:
        margin = Decimal("0.00")

    return {
        "cost_price": cost,
        "sale_price": sale,
        "stock_quantity": qty,
        "stock_value": _money(cost * qty),
        "profit_per_unit": profit_per_unit,
        "profit_margin": margin,
    }


def refresh_profit_analysis(product: Product) -> ProfitAnalysis:
    figures = compute_profit_figures(
        cost_price=product.cost_price,
        sale_price=product.sale_price,
        stock_quantity=product.stock_quantity,
    )
    row, _ = ProfitAnalysis.objects.update_or_create(product=product, defaults=figures)
    return row
