"""Orders domain - Order lifecycle, fulfillment desk and the batch trigger"""

from .router import cron_router, router

__all__ = ["router", "cron_router"]
