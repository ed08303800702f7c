"""
Automated order creation for due occasions
Resolves each occasion's next occurrence, applies the delivery window and
materializes one pending order per (occasion, target year)
"""

import logging
from datetime import date, datetime, timedelta
from typing import Callable, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..domain.calendar import holidays, just_because, recurrence
from ..domain.calendar.delivery_window import DeliveryDecision, DeliveryWindowPolicy
from ..domain.calendar.vocabulary import OccasionType, is_holiday, parse_occasion_type
from ..domain.orders.repository import OrderRepository
from ..models import Account, CardType, Occasion, Order, OrderStatus, Recipient
from ..plan_limits import get_plan_limit
from ..shared.exceptions import ConfigurationError, ConflictError, SchedulingConflictError

logger = logging.getLogger(__name__)

# Skip reasons reported back by the batch pass
SKIP_ALREADY_SENT = "already_sent"
SKIP_ORDER_EXISTS = "order_exists"
SKIP_NO_RETURN_ADDRESS = "missing_return_address"
SKIP_NO_CAPACITY = "no_capacity"


def existing_occasion_dates(
    recipient: Recipient, year: int, exclude_id: Optional[int] = None
) -> list[date]:
    """Dates of the recipient's other occasions, resolved for ``year``"""
    dates = []
    for occasion in recipient.occasions:
        if occasion.id == exclude_id or occasion.is_just_because:
            continue
        if is_holiday(occasion.occasion_type):
            dates.append(holidays.resolve(occasion.occasion_type, year))
        elif occasion.occasion_date is not None:
            dates.append(occasion.occasion_date)
    return dates


def select_just_because(
    occasion: Occasion, today: date, lead_time_days: int, cycle_year: Optional[int] = None
) -> just_because.JustBecauseSelection:
    """
    Pick the next Just Because date no sooner than the lead time from ``today``.
    Falls back to the following year when the rest of the cycle is too crowded.
    """
    recipient = occasion.recipient
    if cycle_year is None:
        cycle_year = max(today.year, (occasion.last_sent_year or 0) + 1)
    not_before = today + timedelta(days=lead_time_days)

    try:
        return just_because.select(
            recipient.id,
            recipient.relationship,
            cycle_year,
            existing_occasion_dates(recipient, cycle_year, exclude_id=occasion.id),
            not_before=not_before,
        )
    except SchedulingConflictError:
        logger.warning(
            f"⚠️ No Just Because date left in {cycle_year} for recipient {recipient.id}, "
            f"trying {cycle_year + 1}"
        )
        return just_because.select(
            recipient.id,
            recipient.relationship,
            cycle_year + 1,
            existing_occasion_dates(recipient, cycle_year + 1, exclude_id=occasion.id),
            not_before=not_before,
        )


def ensure_just_because_date(occasion: Occasion, today: date, lead_time_days: int) -> date:
    """
    Return the stored Just Because date, selecting a new one only when none is
    pending: nothing stored yet, the stored date has passed, or its cycle has
    already been sent. Does not commit.
    """
    stored = occasion.computed_send_date
    if (
        stored is not None
        and stored >= today
        and (occasion.last_sent_year is None or stored.year > occasion.last_sent_year)
    ):
        return stored

    selection = select_just_because(occasion, today, lead_time_days)
    occasion.computed_send_date = selection.date
    occasion.card_variation = selection.card_variation
    logger.info(f"✅ Just Because date for occasion {occasion.id} set to {selection.date}")
    return selection.date


def resolve_target(
    occasion: Occasion, today: date, policy: DeliveryWindowPolicy
) -> tuple[date, Callable[[int], date]]:
    """Next occurrence on or after ``today`` plus a resolver for later cycles"""
    occasion_type = parse_occasion_type(occasion.occasion_type)

    if occasion_type is OccasionType.JUST_BECAUSE or occasion.is_just_because:
        recipient = occasion.recipient
        target = ensure_just_because_date(occasion, today, policy.lead_time_days)

        def next_cycle(year: int) -> date:
            return just_because.select(
                recipient.id,
                recipient.relationship,
                year,
                existing_occasion_dates(recipient, year, exclude_id=occasion.id),
            ).date

        return target, next_cycle

    if is_holiday(occasion_type):
        return (
            holidays.next_holiday_occurrence(occasion_type, today),
            lambda year: holidays.resolve(occasion_type, year),
        )

    if occasion.occasion_date is None:
        raise ConfigurationError(f"{occasion_type.value} occasion {occasion.id} has no date")
    month, day = occasion.occasion_date.month, occasion.occasion_date.day
    return (
        recurrence.next_occurrence(month, day, today),
        lambda year: recurrence.occurrence_in_year(month, day, year),
    )


def choose_card_type(db: Session, account: Account, target_year: int) -> Optional[str]:
    """Subscription allotment first, then purchased credits. None when neither has room."""
    if account.has_active_subscription:
        used = OrderRepository.count_subscription_orders(db, account.id, target_year)
        if used < get_plan_limit(account.plan):
            return CardType.SUBSCRIPTION.value
    if (account.card_credits or 0) > 0:
        return CardType.INDIVIDUAL.value
    return None


def build_order_snapshot(
    occasion: Occasion, recipient: Recipient, account: Account, occasion_date: date, card_type: str
) -> dict:
    """Order fields copied from the occasion, recipient and account as they are right now"""
    return {
        "account_id": account.id,
        "recipient_id": recipient.id,
        "occasion_id": occasion.id,
        "target_year": occasion_date.year,
        "card_type": card_type,
        "status": OrderStatus.PENDING.value,
        "occasion_type": occasion.occasion_type,
        "occasion_date": occasion_date,
        "occasion_notes": occasion.notes,
        "card_variation": occasion.card_variation
        or just_because.card_variation_for(recipient.relationship),
        "recipient_name": recipient.display_name,
        "recipient_street": recipient.street,
        "recipient_apartment": recipient.apartment,
        "recipient_city": recipient.city,
        "recipient_state": recipient.state,
        "recipient_zip": recipient.zip,
        "recipient_country": recipient.country,
        "return_name": account.return_name,
        "return_street": account.return_street,
        "return_apartment": account.return_apartment,
        "return_city": account.return_city,
        "return_state": account.return_state,
        "return_zip": account.return_zip,
    }


def materialize_order(
    db: Session, occasion: Occasion, occasion_date: date, card_type: str
) -> Order:
    """Create the order, mark the cycle as sent and consume a credit for individual cards"""
    recipient = occasion.recipient
    account = recipient.account

    if card_type == CardType.INDIVIDUAL.value:
        account.card_credits = (account.card_credits or 0) - 1
    occasion.last_sent_year = occasion_date.year

    order = OrderRepository.create_order(
        db, **build_order_snapshot(occasion, recipient, account, occasion_date, card_type)
    )
    logger.info(
        f"✅ Order {order.id} created: {order.occasion_type} for recipient {recipient.id} "
        f"on {occasion_date} ({card_type})"
    )
    return order


def _schedule_occasion(
    db: Session, occasion: Occasion, today: date, policy: DeliveryWindowPolicy
) -> tuple[str, Optional[Order], Optional[str]]:
    """Returns (outcome, order, skip reason) for one occasion"""
    target, next_cycle = resolve_target(occasion, today, policy)
    decision: DeliveryDecision = policy.evaluate(target, today, next_cycle)

    if decision.is_deferred:
        logger.info(
            f"⚠️ Occasion {occasion.id} on {target} is {decision.days_until} days away, "
            f"deferred to {decision.fulfillment_date}"
        )
        if occasion.is_just_because:
            occasion.computed_send_date = decision.fulfillment_date
        db.commit()
        return "deferred", None, None

    if not policy.is_due(decision):
        db.commit()  # persists a newly selected Just Because date
        return "not_due", None, None

    target_year = decision.target_date.year
    if occasion.last_sent_year is not None and occasion.last_sent_year >= target_year:
        db.commit()
        return "skipped", None, SKIP_ALREADY_SENT
    if OrderRepository.order_exists(db, occasion.id, target_year):
        occasion.last_sent_year = target_year
        db.commit()
        return "skipped", None, SKIP_ORDER_EXISTS

    # Holds off concurrent recipient edits until the order is committed
    OrderRepository.lock_recipient(db, occasion.recipient_id)
    account = occasion.recipient.account

    if not account.has_return_address:
        db.commit()
        return "skipped", None, SKIP_NO_RETURN_ADDRESS

    card_type = choose_card_type(db, account, target_year)
    if card_type is None:
        db.commit()
        return "skipped", None, SKIP_NO_CAPACITY

    order = materialize_order(db, occasion, decision.target_date, card_type)
    return "created", order, None


def create_due_orders(
    db: Session, today: Optional[date] = None, policy: Optional[DeliveryWindowPolicy] = None
) -> dict:
    """
    Create pending orders for every occasion that is due on ``today``.
    Safe to run several times a day: the (occasion, target year) unique
    constraint turns a concurrent duplicate into a skip.

    A failure while scheduling one occasion is logged and reported in the
    summary; the pass carries on with the remaining occasions.

    Returns:
        dict: Summary of the pass
    """
    today = today or datetime.utcnow().date()
    policy = policy or DeliveryWindowPolicy()

    summary = {
        "run_date": today.isoformat(),
        "examined": 0,
        "created": 0,
        "deferred": 0,
        "not_due": 0,
        "skipped": 0,
        "failed": 0,
        "created_order_ids": [],
        "skipped_occasions": [],
        "failures": [],
    }

    occasion_ids = [row.id for row in db.query(Occasion.id).order_by(Occasion.id.asc()).all()]
    logger.info(f"🔄 Creating due orders for {today}: {len(occasion_ids)} occasions to check")

    for occasion_id in occasion_ids:
        summary["examined"] += 1
        try:
            occasion = db.get(Occasion, occasion_id)
            if occasion is None:  # deleted since the id list was read
                continue
            outcome, order, reason = _schedule_occasion(db, occasion, today, policy)
        except IntegrityError:
            db.rollback()
            logger.info(f"⚠️ Order for occasion {occasion_id} already created by another run")
            summary["skipped"] += 1
            summary["skipped_occasions"].append({"occasion_id": occasion_id, "reason": SKIP_ORDER_EXISTS})
            continue
        except Exception as e:
            db.rollback()
            logger.error(f"❌ Failed to schedule occasion {occasion_id}: {type(e).__name__}: {e}")
            summary["failed"] += 1
            summary["failures"].append(
                {"occasion_id": occasion_id, "error": type(e).__name__, "detail": str(e)}
            )
            continue

        summary[outcome] += 1
        if order is not None:
            summary["created_order_ids"].append(order.id)
        if reason is not None:
            logger.info(f"⚠️ Occasion {occasion_id} skipped: {reason}")
            summary["skipped_occasions"].append({"occasion_id": occasion_id, "reason": reason})

    logger.info(
        f"📦 Order batch {today}: created={summary['created']} deferred={summary['deferred']} "
        f"skipped={summary['skipped']} failed={summary['failed']}"
    )
    return summary


def apply_credit(db: Session, occasion: Occasion, today: date, lead_time_days: int) -> Order:
    """
    Materialize an individual order for a Just Because occasion now, paid with
    one purchased card credit.

    Raises:
        ConflictError: not a Just Because occasion, no credits left, no return
            address, or the cycle already has an order
    """
    if not occasion.is_just_because:
        raise ConflictError(
            "Card credits can only be applied to Just Because cards", confirmable=False
        )

    account = occasion.recipient.account
    if (account.card_credits or 0) <= 0:
        raise ConflictError("No card credits available", confirmable=False)
    if not account.has_return_address:
        raise ConflictError("Add a return address before sending cards", confirmable=False)

    send_date = ensure_just_because_date(occasion, today, lead_time_days)
    if OrderRepository.order_exists(db, occasion.id, send_date.year):
        db.rollback()
        raise ConflictError(
            f"A card for this occasion is already on its way in {send_date.year}", confirmable=False
        )

    OrderRepository.lock_recipient(db, occasion.recipient_id)
    try:
        return materialize_order(db, occasion, send_date, CardType.INDIVIDUAL.value)
    except IntegrityError as e:
        db.rollback()
        raise ConflictError("A card for this occasion was just created", confirmable=False) from e
