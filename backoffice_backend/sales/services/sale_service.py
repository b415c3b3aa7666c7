# sales/services/sale_service.py

"""
CHECKOUT SERVICE (APPLICATION SERVICE)

create_sale() turns validated cart lines into a Sale in ONE transaction:

1) Lock products, validate activity + stock (fast fail)
2) Price server-side (sales.services.pricing, tax from store settings)
3) Payment rules
   - bnpl:         registered customer + enough available credit;
                   payment_status pending; opens a BNPL transaction
   - store_credit: registered customer with enough store credit
   - cash:         optional amount_tendered must cover the total
4) Number invoice + receipt, write Sale + SaleItems
5) Deduct stock (StockMovement out / reference sale)
6) Cash sales: cash ledger `sale` entry
7) Cash / card sales with a customer: loyalty points

Any failure rolls back everything.
"""

from __future__ import annotations

import logging
from decimal import Decimal, ROUND_HALF_UP

from django.db import transaction

from accounting.models import CashLedgerEntry
from accounting.services.cash_ledger import record_cash_entry
from bnpl.services.transactions import BnplPaymentError, open_bnpl_transaction
from customers.models import Customer
from customers.services.credit import CustomerCreditError, check_customer_credit, spend_store_credit
from customers.services.loyalty import award_loyalty_points
from products.models import Product, StockMovement
from products.services.inventory import InventoryError, deduct_stock
from sales.models import Sale, SaleItem
from sales.services.numbering import generate_invoice_number, next_receipt_number
from sales.services.pricing import DISCOUNT_PERCENTAGE, PricingError, compute_cart_totals
from store.services.settings import get_tax_rate

logger = logging.getLogger(__name__)

TWOPLACES = Decimal("0.01")
ZERO = Decimal("0.00")

SALE_REFERENCE = "sale"

LOYALTY_METHODS = {Sale.PAYMENT_CASH, Sale.PAYMENT_CARD}


class SaleError(ValueError):
    code = "sale_error"


class EmptySaleError(SaleError):
    code = "empty_cart"


class StockValidationError(SaleError):
    code = "insufficient_stock"


class PaymentValidationError(SaleError):
    code = "payment_invalid"


def _money(v) -> Decimal:
    return Decimal(str(v or "0.00")).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def _lock_products(items: list[dict]) -> dict:
    ids = []
    for line in items:
        product = line.get("product")
        ids.append(getattr(product, "id", product))

    products = Product.objects.select_for_update().filter(id__in=ids).order_by("id")
    return {str(p.id): p for p in products}


def _resolve_lines(items: list[dict]) -> list[dict]:
    """
    items: [{"product": Product | id, "quantity": int,
             "discount"?: Decimal, "discount_type"?: "percentage" | "amount"}]
    Lines for the same product are merged only when their discounts match.
    """
    if not items:
        raise EmptySaleError("Sale must contain at least one item")

    by_id = _lock_products(items)
    requested = {}
    lines = []

    for line in items:
        product_id = str(getattr(line.get("product"), "id", line.get("product")))
        product = by_id.get(product_id)
        if product is None:
            raise SaleError(f"Product not found: {product_id}")
        if not product.is_active:
            raise SaleError(f"Product is inactive: {product.name}")

        try:
            quantity = int(line.get("quantity") or 0)
        except (TypeError, ValueError) as exc:
            raise StockValidationError(
                f"Invalid quantity for {product.name}. Quantity must be a whole number."
            ) from exc
        if quantity <= 0:
            raise StockValidationError(f"Invalid quantity for {product.name}. Quantity must be at least 1.")

        requested[product_id] = requested.get(product_id, 0) + quantity
        lines.append(
            {
                "product": product,
                "quantity": quantity,
                "unit_price": product.sale_price,
                "discount": line.get("discount") or 0,
                "discount_type": line.get("discount_type") or DISCOUNT_PERCENTAGE,
            }
        )

    shortages = [
        f"{by_id[pid].name}: Requested {qty}, Available {by_id[pid].stock_quantity}"
        for pid, qty in requested.items()
        if qty > int(by_id[pid].stock_quantity or 0)
    ]
    if shortages:
        raise StockValidationError("Insufficient stock. " + "; ".join(shortages))

    return lines


def quote_cart(
    *,
    items: list[dict],
    global_discount=0,
    global_discount_type: str = DISCOUNT_PERCENTAGE,
) -> dict:
    """Totals only; nothing is written. Stock is checked so the quote is sellable."""
    with transaction.atomic():
        lines = _resolve_lines(items)
        try:
            totals = compute_cart_totals(
                lines=lines,
                global_discount=global_discount,
                global_discount_type=global_discount_type,
                tax_rate=get_tax_rate(),
            )
        except PricingError as exc:
            raise SaleError(str(exc)) from exc

    for line in totals["lines"]:
        product = line.pop("product")
        line["product_id"] = product.id
        line["product_name"] = product.name
    return totals


def _resolve_customer(customer) -> Customer | None:
    if customer is None or customer == "":
        return None
    customer_id = getattr(customer, "id", customer)
    found = Customer.objects.select_for_update().filter(id=customer_id).first()
    if found is None:
        raise SaleError("Customer not found")
    return found


def _validate_payment(*, method: str, customer: Customer | None, total: Decimal, amount_tendered) -> Decimal:
    """Returns the change due (cash only)."""
    if method == Sale.PAYMENT_BNPL:
        if customer is None:
            raise PaymentValidationError(
                "BNPL payment is only available for registered customers. "
                "Please select a customer or use Cash/Card payment."
            )
        if total <= ZERO:
            raise PaymentValidationError("BNPL sale total must be greater than 0")
        if not check_customer_credit(customer=customer, amount=total):
            raise PaymentValidationError(
                f"Insufficient credit limit. Available credit: {_money(customer.available_credit)}, "
                f"Required: {total}"
            )
        return ZERO

    if method == Sale.PAYMENT_STORE_CREDIT:
        if customer is None:
            raise PaymentValidationError("Store credit payment requires a registered customer")
        if _money(customer.store_credit) < total:
            raise PaymentValidationError(
                f"Insufficient store credit. Available: {_money(customer.store_credit)}, Required: {total}"
            )
        return ZERO

    if method == Sale.PAYMENT_CASH and amount_tendered not in (None, ""):
        tendered = _money(amount_tendered)
        if tendered < total:
            raise PaymentValidationError(f"Insufficient payment amount. Required: {total}")
        return tendered - total

    return ZERO


@transaction.atomic
def create_sale(
    *,
    items: list[dict],
    payment_method: str = Sale.PAYMENT_CASH,
    customer=None,
    global_discount=0,
    global_discount_type: str = DISCOUNT_PERCENTAGE,
    amount_tendered=None,
    notes: str = "",
    user=None,
    cashier_name: str = "",
) -> Sale:
    method = (payment_method or Sale.PAYMENT_CASH).strip().lower()
    if method not in dict(Sale.PAYMENT_METHODS):
        raise PaymentValidationError(f"Invalid payment method: {method}")

    lines = _resolve_lines(items)

    try:
        totals = compute_cart_totals(
            lines=lines,
            global_discount=global_discount,
            global_discount_type=global_discount_type,
            tax_rate=get_tax_rate(),
        )
    except PricingError as exc:
        raise SaleError(str(exc)) from exc

    total = totals["total_amount"]
    buyer = _resolve_customer(customer)
    change = _validate_payment(method=method, customer=buyer, total=total, amount_tendered=amount_tendered)

    if not cashier_name and user is not None:
        cashier_name = getattr(user, "display_name", "") or getattr(user, "email", "")

    sale = Sale.objects.create(
        invoice_number=generate_invoice_number(),
        receipt_number=next_receipt_number(),
        customer=buyer,
        subtotal=totals["subtotal"],
        discount_amount=totals["discount_amount"],
        tax_amount=totals["tax_amount"],
        total_amount=total,
        amount_tendered=_money(amount_tendered) if amount_tendered not in (None, "") else None,
        change_amount=change,
        payment_method=method,
        payment_status=Sale.PAYMENT_STATUS_PENDING if method == Sale.PAYMENT_BNPL else Sale.PAYMENT_STATUS_PAID,
        cashier=user,
        cashier_name=cashier_name or "",
        notes=(notes or "").strip(),
    )

    for line in totals["lines"]:
        product = line["product"]
        SaleItem.objects.create(
            sale=sale,
            product=product,
            product_name=product.name,
            quantity=line["quantity"],
            unit_price=line["unit_price"],
            discount_amount=line["discount_amount"],
            total_price=line["total_price"],
        )
        try:
            deduct_stock(
                product=product,
                quantity=line["quantity"],
                reference_type=StockMovement.Reference.SALE,
                reference_id=str(sale.id),
                user=user,
                notes=f"Sale {sale.receipt_number}",
            )
        except InventoryError as exc:
            raise StockValidationError(str(exc)) from exc

    if method == Sale.PAYMENT_BNPL:
        try:
            open_bnpl_transaction(sale=sale, customer=buyer, amount=total, user=user)
        except BnplPaymentError as exc:
            raise PaymentValidationError(str(exc)) from exc

    elif method == Sale.PAYMENT_STORE_CREDIT:
        try:
            spend_store_credit(customer=buyer, amount=total)
        except CustomerCreditError as exc:
            raise PaymentValidationError(str(exc)) from exc

    elif method == Sale.PAYMENT_CASH and total > ZERO:
        record_cash_entry(
            entry_type=CashLedgerEntry.TYPE_SALE,
            amount=total,
            description=f"Cash sale {sale.receipt_number}",
            reference_type=SALE_REFERENCE,
            reference_id=str(sale.id),
            user=user,
        )

    if buyer is not None and method in LOYALTY_METHODS:
        points = award_loyalty_points(customer=buyer, amount=total)
        if points:
            sale.loyalty_points_earned = points
            sale.save(update_fields=["loyalty_points_earned", "updated_at"])

    logger.info(
        "Sale created",
        extra={
            "sale_id": str(sale.id),
            "receipt_number": sale.receipt_number,
            "payment_method": method,
            "total_amount": str(total),
            "customer_id": str(buyer.id) if buyer else None,
            "lines": len(totals["lines"]),
        },
    )
    return sale
