# purchases/services/purchase_orders.py

"""
PURCHASE ORDER SERVICE

Flow:
1) create_purchase_order: header + lines, total = sum(qty * unit_cost)
2) receive_purchase_item: receive up to the outstanding quantity of one line
   - stock arrives through products.services.inventory.receive_stock
     (weighted average cost, StockMovement + InventoryReceipt)
   - order becomes received when every line is complete,
     partially_received otherwise
3) receive_purchase_order: receive every outstanding line in one transaction
4) cancel_purchase_order: pending orders only
"""

from __future__ import annotations

import logging
from decimal import Decimal, ROUND_HALF_UP

from django.db import transaction
from django.utils import timezone

from products.models import Product
from products.services.inventory import InventoryError, receive_stock
from purchases.models import PurchaseItem, PurchaseOrder, Supplier
from store.services.numbering import format_daily_number

logger = logging.getLogger(__name__)

TWOPLACES = Decimal("0.01")

PO_PREFIX = "PO"


class PurchaseOrderError(ValueError):
    pass


def _money(v) -> Decimal:
    return Decimal(str(v or "0.00")).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def _lock_order(order_id) -> PurchaseOrder:
    try:
        return PurchaseOrder.objects.select_for_update().select_related("supplier").get(id=order_id)
    except PurchaseOrder.DoesNotExist as exc:
        raise PurchaseOrderError("Purchase order not found") from exc


def _refresh_order_status(order: PurchaseOrder) -> PurchaseOrder:
    items = list(order.items.all())
    if items and all(it.received_quantity >= it.quantity for it in items):
        order.status = PurchaseOrder.STATUS_RECEIVED
        order.received_date = timezone.localdate()
    elif any(it.received_quantity > 0 for it in items):
        order.status = PurchaseOrder.STATUS_PARTIALLY_RECEIVED
    order.save(update_fields=["status", "received_date", "updated_at"])
    return order


@transaction.atomic
def create_purchase_order(
    *,
    supplier,
    items: list[dict],
    order_date=None,
    expected_date=None,
    notes: str = "",
    user=None,
) -> PurchaseOrder:
    """
    items: [{"product": Product | id, "quantity": int, "unit_cost": Decimal}, ...]
    """
    if isinstance(supplier, Supplier):
        supplier_obj = supplier
    else:
        supplier_obj = Supplier.objects.filter(id=supplier).first()

    if supplier_obj is None or not supplier_obj.is_active:
        raise PurchaseOrderError("Supplier not found")

    if not items:
        raise PurchaseOrderError("Purchase order must contain at least one item")

    lines = []
    for line in items:
        product = line.get("product")
        if not isinstance(product, Product):
            product = Product.objects.filter(id=product).first()
        if product is None:
            raise PurchaseOrderError(f"Product not found: {line.get('product')}")

        quantity = int(line.get("quantity") or 0)
        if quantity <= 0:
            raise PurchaseOrderError(f"Quantity must be > 0 for {product.name}")

        unit_cost = _money(line.get("unit_cost"))
        if unit_cost < Decimal("0.00"):
            raise PurchaseOrderError(f"Unit cost cannot be negative for {product.name}")

        lines.append((product, quantity, unit_cost))

    order = PurchaseOrder(
        po_number=format_daily_number(prefix=PO_PREFIX),
        supplier=supplier_obj,
        expected_date=expected_date,
        notes=(notes or "").strip(),
        created_by=user,
    )
    if order_date:
        order.order_date = order_date
    order.save()

    total = Decimal("0.00")
    for product, quantity, unit_cost in lines:
        item = PurchaseItem.objects.create(
            purchase_order=order,
            product=product,
            quantity=quantity,
            unit_cost=unit_cost,
        )
        total += item.total_cost

    order.total_amount = _money(total)
    order.save(update_fields=["total_amount", "updated_at"])

    logger.info(
        "Purchase order created",
        extra={
            "purchase_order_id": str(order.id),
            "po_number": order.po_number,
            "supplier_id": str(supplier_obj.id),
            "total_amount": str(order.total_amount),
            "lines": len(lines),
        },
    )
    return order


def _receive_line(*, order: PurchaseOrder, item: PurchaseItem, quantity: int, user=None) -> PurchaseItem:
    try:
        receive_stock(
            product=item.product_id,
            quantity=quantity,
            unit_cost=item.unit_cost,
            user=user,
            supplier_name=order.supplier.name,
            reference=order.po_number,
            notes=f"Received against {order.po_number}",
        )
    except InventoryError as exc:
        raise PurchaseOrderError(str(exc)) from exc

    item.received_quantity = int(item.received_quantity or 0) + quantity
    item.save(update_fields=["received_quantity"])
    return item


@transaction.atomic
def receive_purchase_item(*, item_id, quantity, user=None) -> PurchaseOrder:
    # Lock order before item, same as receive_purchase_order.
    order_id = PurchaseItem.objects.filter(id=item_id).values_list("purchase_order_id", flat=True).first()
    if order_id is None:
        raise PurchaseOrderError("Purchase item not found")

    order = _lock_order(order_id)
    item = PurchaseItem.objects.select_for_update().get(id=item_id)
    if not order.is_open:
        raise PurchaseOrderError(f"Cannot receive items on a {order.status} purchase order")

    try:
        qty = int(quantity)
    except (TypeError, ValueError) as exc:
        raise PurchaseOrderError("quantity must be a whole number") from exc
    if qty <= 0:
        raise PurchaseOrderError("quantity must be greater than zero")

    outstanding = item.outstanding_quantity
    if qty > outstanding:
        raise PurchaseOrderError(
            f"Cannot receive {qty}; only {outstanding} outstanding on this line"
        )

    _receive_line(order=order, item=item, quantity=qty, user=user)
    _refresh_order_status(order)

    logger.info(
        "Purchase item received",
        extra={
            "purchase_order_id": str(order.id),
            "purchase_item_id": str(item.id),
            "quantity": qty,
            "status": order.status,
        },
    )
    return order


@transaction.atomic
def receive_purchase_order(*, order_id, user=None) -> PurchaseOrder:
    order = _lock_order(order_id)
    if not order.is_open:
        raise PurchaseOrderError(f"Cannot receive a {order.status} purchase order")

    items = list(order.items.select_for_update().order_by("created_at"))
    received_any = False
    for item in items:
        qty = item.outstanding_quantity
        if qty <= 0:
            continue
        _receive_line(order=order, item=item, quantity=qty, user=user)
        received_any = True

    if not received_any:
        raise PurchaseOrderError("Nothing outstanding to receive")

    _refresh_order_status(order)

    logger.info(
        "Purchase order received",
        extra={"purchase_order_id": str(order.id), "po_number": order.po_number},
    )
    return order


@transaction.atomic
def cancel_purchase_order(*, order_id, user=None) -> PurchaseOrder:
    order = _lock_order(order_id)
    if order.status != PurchaseOrder.STATUS_PENDING:
        raise PurchaseOrderError("Only pending purchase orders can be cancelled")

    order.status = PurchaseOrder.STATUS_CANCELLED
    order.save(update_fields=["status", "updated_at"])

    logger.warning(
        "Purchase order cancelled",
        extra={
            "purchase_order_id": str(order.id),
            "po_number": order.po_number,
            "user_id": str(getattr(user, "id", "") or ""),
        },
    )
    return order
