# products/services/inventory.py

"""
INVENTORY SERVICE (SINGLE WRITER FOR Product.stock_quantity)

Rules:
- Every stock change locks the product row (select_for_update)
- Every stock change writes exactly one StockMovement
- Stock never goes negative
- Every stock change refreshes the product's ProfitAnalysis row
- Receiving stock re-averages cost_price:
    new_cost = (stock * cost + qty * unit_cost) / (stock + qty)
  or unit_cost when nothing is on hand
"""

from __future__ import annotations

import logging
from decimal import Decimal, ROUND_HALF_UP

from django.db import transaction

from products.models import InventoryReceipt, Product, StockMovement
from products.services.profit import refresh_profit_analysis

logger = logging.getLogger(__name__)

TWOPLACES = Decimal("0.01")


class InventoryError(ValueError):
    pass


class InsufficientStockError(InventoryError):
    pass


def _money(v) -> Decimal:
    return Decimal(str(v or "0.00")).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def _lock_product(product) -> Product:
    product_id = getattr(product, "id", product)
    try:
        return Product.objects.select_for_update().get(id=product_id)
    except Product.DoesNotExist as exc:
        raise InventoryError(f"Product not found: {product_id}") from exc


def _positive_qty(quantity) -> int:
    try:
        qty = int(quantity)
    except (TypeError, ValueError) as exc:
        raise InventoryError("quantity must be a whole number") from exc
    if qty <= 0:
        raise InventoryError("quantity must be greater than zero")
    return qty


def weighted_average_cost(*, current_stock: int, current_cost, quantity: int, unit_cost) -> Decimal:
    current_stock = max(0, int(current_stock or 0))
    if current_stock == 0:
        return _money(unit_cost)

    total_value = Decimal(current_stock) * _money(current_cost) + Decimal(quantity) * _money(unit_cost)
    return _money(total_value / Decimal(current_stock + quantity))


@transaction.atomic
def receive_stock(
    *,
    product,
    quantity,
    unit_cost,
    user=None,
    supplier_name: str = "",
    reference: str = "",
    notes: str = "",
) -> InventoryReceipt:
    qty = _positive_qty(quantity)
    cost = _money(unit_cost)
    if cost < 0:
        raise InventoryError("unit_cost cannot be negative")

    p = _lock_product(product)
    previous_stock = int(p.stock_quantity or 0)
    previous_cost = _money(p.cost_price)

    new_cost = weighted_average_cost(
        current_stock=previous_stock,
        current_cost=previous_cost,
        quantity=qty,
        unit_cost=cost,
    )

    p.stock_quantity = previous_stock + qty
    p.cost_price = new_cost
    p.save(update_fields=["stock_quantity", "cost_price", "updated_at"])

    StockMovement.objects.create(
        product=p,
        movement_type=StockMovement.MovementType.IN,
        quantity=qty,
        reference_type=StockMovement.Reference.PURCHASE,
        reference_id=reference or "",
        stock_after=p.stock_quantity,
        notes=notes or f"Received {qty} @ {cost}",
        created_by=user,
    )

    receipt = InventoryReceipt.objects.create(
        product=p,
        quantity=qty,
        unit_cost=cost,
        total_cost=_money(cost * qty),
        previous_stock=previous_stock,
        previous_cost=previous_cost,
        new_average_cost=new_cost,
        supplier_name=supplier_name or "",
        reference=reference or "",
        notes=notes or "",
        received_by=user,
    )

    refresh_profit_analysis(p)

    logger.info(
        "Stock received",
        extra={
            "product_id": str(p.id),
            "quantity": qty,
            "unit_cost": str(cost),
            "new_average_cost": str(new_cost),
        },
    )
    return receipt


@transaction.atomic
def deduct_stock(
    *,
    product,
    quantity,
    reference_type: str,
    reference_id: str = "",
    user=None,
    notes: str = "",
) -> StockMovement:
    qty = _positive_qty(quantity)
    p = _lock_product(product)

    available = int(p.stock_quantity or 0)
    if available < qty:
        raise InsufficientStockError(
            f"Insufficient stock for {p.name}: available {available}, requested {qty}"
        )

    p.stock_quantity = available - qty
    p.save(update_fields=["stock_quantity", "updated_at"])

    movement = StockMovement.objects.create(
        product=p,
        movement_type=StockMovement.MovementType.OUT,
        quantity=-qty,
        reference_type=reference_type,
        reference_id=str(reference_id or ""),
        stock_after=p.stock_quantity,
        notes=notes,
        created_by=user,
    )

    refresh_profit_analysis(p)

    logger.info(
        "Stock deducted",
        extra={
            "product_id": str(p.id),
            "quantity": qty,
            "reference_type": reference_type,
            "reference_id": str(reference_id or ""),
        },
    )
    return movement


@transaction.atomic
def restore_stock(
    *,
    product,
    quantity,
    reference_type: str,
    reference_id: str = "",
    user=None,
    notes: str = "",
) -> StockMovement:
    qty = _positive_qty(quantity)
    p = _lock_product(product)

    p.stock_quantity = int(p.stock_quantity or 0) + qty
    p.save(update_fields=["stock_quantity", "updated_at"])

    movement = StockMovement.objects.create(
        product=p,
        movement_type=StockMovement.MovementType.IN,
        quantity=qty,
        reference_type=reference_type,
        reference_id=str(reference_id or ""),
        stock_after=p.stock_quantity,
        notes=notes,
        created_by=user,
    )

    refresh_profit_analysis(p)

    logger.info(
        "Stock restored",
        extra={
            "product_id": str(p.id),
            "quantity": qty,
            "reference_type": reference_type,
            "reference_id": str(reference_id or ""),
        },
    )
    return movement


@transaction.atomic
def adjust_stock(*, product, new_quantity, user=None, notes: str = "") -> StockMovement | None:
    """
    Set on-hand stock to a counted value. Returns None when nothing changes.
    """
    try:
        target = int(new_quantity)
    except (TypeError, ValueError) as exc:
        raise InventoryError("new_quantity must be a whole number") from exc
    if target < 0:
        raise InventoryError("new_quantity cannot be negative")

    p = _lock_product(product)
    delta = target - int(p.stock_quantity or 0)
    if delta == 0:
        return None

    p.stock_quantity = target
    p.save(update_fields=["stock_quantity", "updated_at"])

    movement = StockMovement.objects.create(
        product=p,
        movement_type=StockMovement.MovementType.ADJUSTMENT,
        quantity=delta,
        reference_type=StockMovement.Reference.ADJUSTMENT,
        stock_after=target,
        notes=notes or "Stock count adjustment",
        created_by=user,
    )

    refresh_profit_analysis(p)

    logger.warning(
        "Stock adjusted manually",
        extra={"product_id": str(p.id), "delta": delta, "new_quantity": target},
    )
    return movement
