# products/services/product_import.py

"""
BULK PRODUCT IMPORT

Rows are plain dicts (one per spreadsheet line) with the template columns:
name, sku, barcode, category_name, category_code, cost_price, sale_price,
stock_quantity, min_stock_level, expiry_date, is_active

Valid rows are created; invalid rows are reported with their 1-based row
number and the first validation error. Opening stock goes through
receive_stock so it lands in the movement ledger.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal, InvalidOperation

from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import Q

from products.models import Category, Product
from products.services.inventory import receive_stock
from products.services.profit import refresh_profit_analysis

logger = logging.getLogger(__name__)

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_TRUTHY = {"yes", "y", "true", "1", "active"}


@dataclass
class ImportResult:
    created: list = field(default_factory=list)
    errors: list = field(default_factory=list)

    def as_dict(self) -> dict:
        return {
            "created_count": len(self.created),
            "error_count": len(self.errors),
            "created": [str(p.id) for p in self.created],
            "errors": self.errors,
        }


def _text(row: dict, key: str) -> str:
    return str(row.get(key) or "").strip()


def _is_number(value: str) -> bool:
    try:
        Decimal(value)
    except InvalidOperation:
        return False
    return True


def _is_int(value: str) -> bool:
    try:
        int(value)
    except ValueError:
        return False
    return True


def validate_import_row(row: dict) -> str | None:
    """Return the first validation error for a row, or None when valid."""
    if not _text(row, "name"):
        return "Product name is required"

    if not _text(row, "category_name") and not _text(row, "category_code"):
        return "Either category name or code is required"

    sale_price = _text(row, "sale_price")
    if not sale_price:
        return "Sale price is required"

    cost_price = _text(row, "cost_price")
    if cost_price and not _is_number(cost_price):
        return "Cost price must be a number"

    if not _is_number(sale_price):
        return "Sale price must be a number"

    stock = _text(row, "stock_quantity")
    if stock and not _is_int(stock):
        return "Stock quantity must be a number"

    min_level = _text(row, "min_stock_level")
    if min_level and not _is_int(min_level):
        return "Minimum stock level must be a number"

    barcode = _text(row, "barcode")
    if barcode:
        if not barcode.isdigit():
            return "Barcode must contain only numbers"
        if not 8 <= len(barcode) <= 13:
            return "Barcode must be between 8 and 13 digits"

    expiry = _text(row, "expiry_date")
    if expiry:
        if not _DATE_RE.match(expiry):
            return "Expiry date must be in YYYY-MM-DD format"
        try:
            date.fromisoformat(expiry)
        except ValueError:
            return "Expiry date must be in YYYY-MM-DD format"

    return None


def _resolve_category(row: dict) -> Category | None:
    code = _text(row, "category_code").upper()
    name = _text(row, "category_name")

    q = Q()
    if code:
        q |= Q(code__iexact=code)
    if name:
        q |= Q(name__iexact=name)
    return Category.objects.filter(q).first()


@transaction.atomic
def _create_from_row(row: dict, *, user=None) -> Product:
    category = _resolve_category(row)
    if category is None:
        raise ValidationError("Category not found")

    expiry = _text(row, "expiry_date")
    active_raw = _text(row, "is_active").lower()

    product = Product.objects.create(
        name=_text(row, "name"),
        sku=_text(row, "sku") or None,
        barcode=_text(row, "barcode") or None,
        category=category,
        cost_price=Decimal(_text(row, "cost_price") or "0"),
        sale_price=Decimal(_text(row, "sale_price")),
        min_stock_level=int(_text(row, "min_stock_level") or 10),
        expiry_date=date.fromisoformat(expiry) if expiry else None,
        is_active=(active_raw in _TRUTHY) if active_raw else True,
    )

    opening_stock = int(_text(row, "stock_quantity") or 0)
    if opening_stock > 0:
        receive_stock(
            product=product,
            quantity=opening_stock,
            unit_cost=product.cost_price,
            user=user,
            reference="import",
            notes="Opening stock (import)",
        )
    else:
        refresh_profit_analysis(product)

    return product


def import_products(rows, *, user=None) -> ImportResult:
    """
    Each row is created in its own savepoint, so one bad row does not
    discard the rest of the file.
    """
    result = ImportResult()

    for index, row in enumerate(rows, start=1):
        error = validate_import_row(row)
        if error:
            result.errors.append({"row": index, "error": error})
            continue

        try:
            result.created.append(_create_from_row(row, user=user))
        except ValidationError as exc:
            result.errors.append({"row": index, "error": "; ".join(exc.messages)})

    logger.info(
        "Product import finished",
        extra={"created": len(result.created), "errors": len(result.errors)},
    )
    return result
