from .store_info import StoreInfo
from .setting import Setting
from .loyalty_rule import LoyaltyRule
from .daily_counter import DailyCounter
from .sequence_counter import SequenceCounter

__all__ = [
    "StoreInfo",
    "Setting",
    "LoyaltyRule",
    "DailyCounter",
    "SequenceCounter",
]
