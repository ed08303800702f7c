"""
Delivery-Window Policy

An occasion can be fulfilled this cycle only when it is at least the lead time
away. Exactly ``lead_time_days`` away is fine; one day less is deferred to the
next cycle. Always evaluate against the current batch date, never a cached one.
"""

from dataclasses import dataclass
from datetime import date
from typing import Callable, Optional

from ...config import DELIVERY_WINDOW_DAYS, ORDER_WINDOW_DAYS
from .recurrence import occurrence_in_year

# year -> occasion date in that year
NextCycleResolver = Callable[[int], date]


@dataclass(frozen=True)
class DeliveryDecision:
    target_date: date
    days_until: int
    is_deferred: bool
    fulfillment_date: date

    @property
    def fulfillment_year(self) -> int:
        return self.fulfillment_date.year


def days_until(target_date: date, reference_date: date) -> int:
    return (target_date - reference_date).days


def evaluate(
    target_date: date,
    reference_date: date,
    lead_time_days: int = DELIVERY_WINDOW_DAYS,
    next_cycle: Optional[NextCycleResolver] = None,
) -> DeliveryDecision:
    """
    Decide whether ``target_date`` can still be fulfilled.

    ``next_cycle`` resolves the occasion for a later year (holiday resolver,
    recurrence calculator or Just Because selector). Without it the same
    month/day one year later is used.
    """
    remaining = days_until(target_date, reference_date)
    if remaining >= lead_time_days:
        return DeliveryDecision(target_date, remaining, False, target_date)

    next_year = target_date.year + 1
    if next_cycle is not None:
        fulfillment = next_cycle(next_year)
    else:
        fulfillment = occurrence_in_year(target_date.month, target_date.day, next_year)
    return DeliveryDecision(target_date, remaining, True, fulfillment)


class DeliveryWindowPolicy:
    """Lead-time evaluation plus the batch window in which an order is materialized"""

    def __init__(
        self, lead_time_days: int = DELIVERY_WINDOW_DAYS, order_window_days: int = ORDER_WINDOW_DAYS
    ):
        self.lead_time_days = lead_time_days
        self.order_window_days = order_window_days

    def evaluate(
        self, target_date: date, reference_date: date, next_cycle: Optional[NextCycleResolver] = None
    ) -> DeliveryDecision:
        return evaluate(target_date, reference_date, self.lead_time_days, next_cycle)

    def is_due(self, decision: DeliveryDecision) -> bool:
        """An on-time occasion whose order should be created on this pass"""
        return (
            not decision.is_deferred
            and decision.days_until <= self.lead_time_days + self.order_window_days
        )
