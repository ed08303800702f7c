"""Domain error taxonomy for the scheduling and fulfillment engine.

Services raise these; the handler registered in ``main.py`` turns them into
JSON responses using ``status_code`` and ``extra()``.
"""

from typing import Any, Optional


class CardServiceError(Exception):
    """Base class for every error the engine raises on purpose"""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def extra(self) -> dict[str, Any]:
        return {}

    def to_dict(self) -> dict[str, Any]:
        return {"detail": self.message, "error": type(self).__name__, **self.extra()}


class ConfigurationError(CardServiceError):
    """Unknown holiday/occasion vocabulary. A programmer error, never recoverable at runtime."""

    status_code = 500


class NotFoundError(CardServiceError):
    """Resource does not exist or does not belong to the caller"""

    status_code = 404


class SchedulingConflictError(CardServiceError):
    """No valid Just Because date could be found within the resampling bound"""

    status_code = 409

    def __init__(self, message: str, recipient_id: Optional[int] = None, year: Optional[int] = None):
        super().__init__(message)
        self.recipient_id = recipient_id
        self.year = year

    def extra(self) -> dict[str, Any]:
        return {"recipient_id": self.recipient_id, "year": self.year}


class InvalidTransitionError(CardServiceError):
    """Illegal order status change"""

    status_code = 409

    def __init__(self, order_id: int, current_status: str, target_status: str):
        super().__init__(
            f"Order {order_id} cannot move from '{current_status}' to '{target_status}'"
        )
        self.order_id = order_id
        self.current_status = current_status
        self.target_status = target_status

    def extra(self) -> dict[str, Any]:
        return {
            "order_id": self.order_id,
            "current_status": self.current_status,
            "target_status": self.target_status,
        }


class LockedResourceError(CardServiceError):
    """Recipient edit blocked while cards for it are pending or printed"""

    status_code = 423

    def __init__(self, recipient_id: int, in_flight_orders: int):
        noun = "card" if in_flight_orders == 1 else "cards"
        super().__init__(
            f"This recipient has {in_flight_orders} {noun} being printed or mailed. "
            "You can edit after the cards ship."
        )
        self.recipient_id = recipient_id
        self.in_flight_orders = in_flight_orders

    def extra(self) -> dict[str, Any]:
        return {"recipient_id": self.recipient_id, "in_flight_orders": self.in_flight_orders}


class ConflictError(CardServiceError):
    """Duplicate add. When confirmable, the caller may resend with confirmDuplicate=true"""

    status_code = 409

    def __init__(self, message: str, confirmable: bool = True):
        super().__init__(message)
        self.confirmable = confirmable

    def extra(self) -> dict[str, Any]:
        return {"confirmable": self.confirmable}
