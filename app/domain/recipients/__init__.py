"""Recipients domain - Recipients, their occasions and card allocation"""

from .router import allocation_router, occasions_router, router

__all__ = ["router", "occasions_router", "allocation_router"]
