from .addresses import router as addresses_router
from .holidays import router as holidays_router
from .pending_reminders import router as pending_reminders_router

__all__ = ["addresses_router", "holidays_router", "pending_reminders_router"]
