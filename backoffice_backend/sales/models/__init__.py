from .receipt_reprint import ReceiptReprint
from .sale import Sale
from .sale_item import SaleItem

__all__ = [
    "ReceiptReprint",
    "Sale",
    "SaleItem",
]
