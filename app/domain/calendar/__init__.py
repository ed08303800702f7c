"""Calendar engine - pure date logic with no database or HTTP dependencies"""

from . import delivery_window, holidays, just_because, recurrence
from .delivery_window import DeliveryDecision, DeliveryWindowPolicy
from .just_because import JustBecauseSelection
from .vocabulary import HOLIDAY_OCCASIONS, PERSONAL_OCCASIONS, OccasionType, Relationship

__all__ = [
    "delivery_window",
    "holidays",
    "just_because",
    "recurrence",
    "DeliveryDecision",
    "DeliveryWindowPolicy",
    "JustBecauseSelection",
    "HOLIDAY_OCCASIONS",
    "PERSONAL_OCCASIONS",
    "OccasionType",
    "Relationship",
]
