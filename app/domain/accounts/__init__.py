"""Accounts domain - Account profile and the default return address"""

from .router import router

__all__ = ["router"]
