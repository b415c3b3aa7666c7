from .refund_transaction import RefundTransaction
from .return_record import Return, ReturnItem

__all__ = [
    "RefundTransaction",
    "Return",
    "ReturnItem",
]
