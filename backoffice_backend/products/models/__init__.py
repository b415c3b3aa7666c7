"""
PATH: products/models/__init__.py

Products & inventory models export surface.
"""

from .category import Category
from .product import Product
from .stock_movement import StockMovement
from .inventory_receipt import InventoryReceipt
from .damage_report import DamageReport
from .profit_analysis import ProfitAnalysis

__all__ = [
    "Category",
    "Product",
    "StockMovement",
    "InventoryReceipt",
    "DamageReport",
    "ProfitAnalysis",
]
