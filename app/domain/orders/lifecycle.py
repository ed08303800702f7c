"""
Order status state machine

Order statuses: pending → printed → mailed, or pending → cancelled
mailed and cancelled are terminal. Status never moves backward.
"""

from ...models import Order, OrderStatus
from ...shared.exceptions import InvalidTransitionError

VALID_TRANSITIONS = {
    OrderStatus.PENDING.value: [OrderStatus.PRINTED.value, OrderStatus.CANCELLED.value],
    OrderStatus.PRINTED.value: [OrderStatus.MAILED.value],
    OrderStatus.MAILED.value: [],  # Terminal state
    OrderStatus.CANCELLED.value: [],  # Terminal state
}


def validate_status_transition(current_status: str, new_status: str) -> bool:
    """
    Validate if an order status transition is allowed

    Args:
        current_status: Current order status
        new_status: Desired new status

    Returns:
        bool: True if transition is valid, False otherwise
    """
    return new_status in VALID_TRANSITIONS.get(current_status, [])


def ensure_transition(order: Order, new_status: str) -> None:
    """Raise InvalidTransitionError unless ``order`` may move to ``new_status``"""
    if not validate_status_transition(order.status, new_status):
        raise InvalidTransitionError(order.id, order.status, new_status)


def is_terminal(status: str) -> bool:
    return not VALID_TRANSITIONS.get(status)
