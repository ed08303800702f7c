"""
Plan limits and the card allocation calculator.

Each subscription plan includes a yearly allotment of cards. Purchased card
credits add single-card capacity on top of the allotment.
"""

from dataclasses import asdict, dataclass
from typing import Optional

from sqlalchemy.orm import Session

from .models import Account, Occasion, Recipient

# Cards included per year, keyed by product id
PLAN_CARD_LIMITS = {"basic": 5, "pro": 15, "concierge": 25}


def get_plan_limit(plan: Optional[str]) -> int:
    """Get the yearly card allotment for a plan. Returns 0 for no plan or an unknown plan."""
    if not plan:
        return 0  # No plan = no subscription cards
    return PLAN_CARD_LIMITS.get(plan.strip().lower(), 0)


@dataclass(frozen=True)
class CardAllocation:
    scheduled_cards: int
    subscription_cards: int
    extra_cards: int
    total_available: int
    shortfall: int
    is_over_limit: bool

    def to_dict(self) -> dict:
        return asdict(self)


def calculate(scheduled_count: int, plan: Optional[str], extra_credits: int = 0) -> CardAllocation:
    """
    Compare scheduled occasions against plan capacity.

    Args:
        scheduled_count: Number of occasions the caller counts against capacity
        plan: Plan product id, e.g. "pro" (case-insensitive)
        extra_credits: Purchased single cards

    Returns:
        CardAllocation with shortfall and over-limit flag
    """
    if scheduled_count < 0 or extra_credits < 0:
        raise ValueError("Card counts cannot be negative")

    subscription_cards = get_plan_limit(plan)
    total_available = subscription_cards + extra_credits
    return CardAllocation(
        scheduled_cards=scheduled_count,
        subscription_cards=subscription_cards,
        extra_cards=extra_credits,
        total_available=total_available,
        shortfall=max(0, scheduled_count - total_available),
        is_over_limit=scheduled_count > total_available,
    )


def count_scheduled_occasions(account: Account, db: Session) -> int:
    """
    Count every occasion currently on file for the account.
    Each one recurs once per rolling 12 months, so this is the yearly card demand.
    """
    return (
        db.query(Occasion)
        .join(Recipient, Occasion.recipient_id == Recipient.id)
        .filter(Recipient.account_id == account.id)
        .count()
    )


def get_allocation_for_account(account: Account, db: Session) -> CardAllocation:
    """Allocation for display; subscription cards only count while the subscription is active"""
    plan = account.plan if account.has_active_subscription else None
    return calculate(count_scheduled_occasions(account, db), plan, account.card_credits or 0)
