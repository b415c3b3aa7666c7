# returns/services/processing.py

"""
RETURN + REFUND (ONE ATOMIC WRITE)

process_return_and_refund():
1) lock the sale, re-check eligibility
2) validate every line against the returnable quantity
3) write Return + ReturnItems, advance SaleItem.returned_quantity
4) restock lines in good condition (StockMovement in / reference return)
5) refund:
   - cash / bank_transfer: cash ledger `refund` entry (-total)
   - store_credit / exchange: customer.store_credit += total
6) RefundTransaction
7) sale.return_status -> fully_returned | partially_returned

Any failure rolls back everything.
"""

from __future__ import annotations

import logging
from decimal import Decimal, ROUND_HALF_UP

from django.db import transaction
from django.db.models import Sum

from accounting.models import CashLedgerEntry
from accounting.services.cash_ledger import record_cash_entry
from customers.models import Customer
from customers.services.credit import add_store_credit
from products.models import StockMovement
from products.services.inventory import restore_stock
from returns.models import RefundTransaction, Return, ReturnItem
from returns.services.eligibility import check_return_eligibility
from sales.models import Sale, SaleItem
from store.services.numbering import format_daily_number

logger = logging.getLogger(__name__)

TWOPLACES = Decimal("0.01")
ZERO = Decimal("0.00")

RETURN_PREFIX = "RET"
RETURN_REFERENCE = "return"


class ReturnError(ValueError):
    pass


def _money(v) -> Decimal:
    return Decimal(str(v or "0.00")).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def _validate_lines(*, sale: Sale, items: list[dict]) -> list[tuple[SaleItem, int, str]]:
    """
    items: [{"sale_item_id", "quantity", "condition"?}]
    Returns (locked sale item, quantity, condition) per line.
    """
    if not items:
        raise ReturnError("Select at least one item to return")

    wanted_ids = [str(line.get("sale_item_id")) for line in items]
    if len(set(wanted_ids)) != len(wanted_ids):
        raise ReturnError("Each sale item may appear only once per return")

    locked = {
        str(si.id): si
        for si in SaleItem.objects.select_for_update()
        .select_related("product")
        .filter(sale=sale, id__in=wanted_ids)
    }

    conditions = dict(ReturnItem.CONDITIONS)
    lines = []
    for line in items:
        sale_item = locked.get(str(line.get("sale_item_id")))
        if sale_item is None:
            raise ReturnError("Sale item not found on this sale")

        try:
            qty = int(line.get("quantity") or 0)
        except (TypeError, ValueError) as exc:
            raise ReturnError("Return quantity must be a whole number") from exc
        if qty <= 0:
            raise ReturnError("Return quantity must be at least 1")
        if qty > sale_item.returnable_quantity:
            raise ReturnError(
                f"Cannot return {qty} of {sale_item.product_name}; "
                f"only {sale_item.returnable_quantity} returnable"
            )

        condition = (line.get("condition") or ReturnItem.CONDITION_GOOD).strip().lower()
        if condition not in conditions:
            raise ReturnError(f"Invalid item condition: {condition}")

        lines.append((sale_item, qty, condition))
    return lines


def _refund(*, ret: Return, sale: Sale, total: Decimal, user) -> str:
    """Moves the money; returns the reference stored on the RefundTransaction."""
    if ret.refund_method in Return.CASH_OUT_METHODS:
        entry = record_cash_entry(
            entry_type=CashLedgerEntry.TYPE_REFUND,
            amount=total,
            description=f"{ret.get_refund_method_display()} refund for return {ret.return_number}",
            reference_type=RETURN_REFERENCE,
            reference_id=str(ret.id),
            user=user,
        )
        return str(entry.id)

    if sale.customer_id is None:
        raise ReturnError("Store credit refunds require a registered customer on the sale")

    customer = Customer.objects.select_for_update().get(id=sale.customer_id)
    add_store_credit(customer=customer, amount=total)
    return str(customer.id)


def _return_status_after(sale: Sale) -> str:
    quantities = SaleItem.objects.filter(sale=sale).values_list("quantity", "returned_quantity")
    all_units_back = all(returned >= sold for sold, returned in quantities)

    refunded = _money(
        RefundTransaction.objects.filter(sale=sale).aggregate(total=Sum("amount"))["total"]
    )
    if all_units_back or refunded >= _money(sale.total_amount):
        return Sale.RETURN_FULL
    return Sale.RETURN_PARTIAL


@transaction.atomic
def process_return_and_refund(
    *,
    sale_id,
    items: list[dict],
    refund_method: str,
    reason: str,
    notes: str = "",
    user=None,
) -> Return:
    sale = Sale.objects.select_for_update().filter(id=sale_id).first()
    if sale is None:
        raise ReturnError("Sale not found")

    eligibility = check_return_eligibility(sale.id)
    if not eligibility["eligible"]:
        raise ReturnError(eligibility["reason"])

    method = (refund_method or "").strip().lower()
    if method not in dict(Return.REFUND_METHODS):
        raise ReturnError(f"Invalid refund method: {refund_method}")

    reason = (reason or "").strip()
    if not reason:
        raise ReturnError("Return reason is required")

    lines = _validate_lines(sale=sale, items=items)

    ret = Return.objects.create(
        return_number=format_daily_number(prefix=RETURN_PREFIX),
        sale=sale,
        customer_id=sale.customer_id,
        reason=reason,
        refund_method=method,
        processed_by=user,
        notes=(notes or "").strip(),
    )

    total = ZERO
    for sale_item, qty, condition in lines:
        refund_amount = _money(sale_item.unit_price * qty)
        total += refund_amount

        restock = condition == ReturnItem.CONDITION_GOOD
        ReturnItem.objects.create(
            return_record=ret,
            sale_item=sale_item,
            product=sale_item.product,
            quantity=qty,
            unit_price=sale_item.unit_price,
            refund_amount=refund_amount,
            condition=condition,
            restocked=restock,
        )

        sale_item.returned_quantity = int(sale_item.returned_quantity or 0) + qty
        sale_item.save(update_fields=["returned_quantity"])

        if restock:
            restore_stock(
                product=sale_item.product,
                quantity=qty,
                reference_type=StockMovement.Reference.RETURN,
                reference_id=str(ret.id),
                user=user,
                notes=f"Stock returned from sale return: {sale_item.product_name}",
            )

    ret.total_refund = total
    ret.save(update_fields=["total_refund"])

    if total > ZERO:
        reference = _refund(ret=ret, sale=sale, total=total, user=user)
        RefundTransaction.objects.create(
            return_record=ret,
            sale=sale,
            customer_id=sale.customer_id,
            amount=total,
            refund_method=method,
            reference=reference,
        )

    sale.return_status = _return_status_after(sale)
    sale.save(update_fields=["return_status", "updated_at"])

    logger.info(
        "Return processed",
        extra={
            "return_id": str(ret.id),
            "return_number": ret.return_number,
            "sale_id": str(sale.id),
            "refund_method": method,
            "total_refund": str(total),
            "lines": len(lines),
            "return_status": sale.return_status,
        },
    )
    return ret
