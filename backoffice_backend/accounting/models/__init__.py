from .cash_ledger import CashLedgerEntry
from .expense import Expense

__all__ = [
    "CashLedgerEntry",
    "Expense",
]
