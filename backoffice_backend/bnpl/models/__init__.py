from .payment import BnplPayment
from .transaction import BnplTransaction

__all__ = [
    "BnplPayment",
    "BnplTransaction",
]
