"""Recipient service - Business logic for recipients and their occasions"""

import logging
from datetime import date, datetime
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...config import DELIVERY_WINDOW_DAYS, JUST_BECAUSE_SPACING_DAYS
from ...domain.calendar import just_because
from ...domain.calendar.vocabulary import PERSONAL_OCCASIONS, OccasionType, parse_occasion_type
from ...domain.orders.repository import OrderRepository
from ...models import Account, Occasion, Order, Recipient
from ...plan_limits import CardAllocation, get_allocation_for_account
from ...services import order_automation
from ...shared.exceptions import ConflictError, LockedResourceError, NotFoundError
from .repository import RecipientRepository
from .schemas import OccasionCreate, OccasionUpdate, RecipientCreate, RecipientUpdate

logger = logging.getLogger(__name__)

UPDATE_COLUMNS = {
    "firstName": "first_name",
    "lastName": "last_name",
    "partnerFirstName": "partner_first_name",
    "partnerLastName": "partner_last_name",
    "relationship": "relationship",
    "street": "street",
    "apartment": "apartment",
    "city": "city",
    "state": "state",
    "zip": "zip",
    "country": "country",
    "notes": "notes",
}


def _occasion_fields(data: OccasionCreate) -> dict:
    is_just_because = data.occasionType is OccasionType.JUST_BECAUSE
    return {
        "occasion_type": data.occasionType.value,
        "occasion_date": data.occasionDate,
        "notes": data.notes,
        "is_just_because": is_just_because,
    }


class RecipientService:
    """Service layer for recipient business logic"""

    def __init__(self, db: Session, lead_time_days: int = DELIVERY_WINDOW_DAYS):
        self.db = db
        self.repo = RecipientRepository()
        self.orders = OrderRepository()
        self.lead_time_days = lead_time_days

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_recipients(self, account: Account) -> list[Recipient]:
        """Get all recipients for an account"""
        return self.repo.get_recipients(self.db, account.id)

    def get_recipient(self, recipient_id: int, account: Account) -> Recipient:
        """Get a specific recipient"""
        recipient = self.repo.get_recipient_by_id(self.db, recipient_id, account.id)
        if not recipient:
            raise NotFoundError(f"Recipient {recipient_id} not found")
        return recipient

    def get_occasion(self, occasion_id: int, account: Account) -> Occasion:
        """Get a specific occasion"""
        occasion = self.repo.get_occasion_by_id(self.db, occasion_id, account.id)
        if not occasion:
            raise NotFoundError(f"Occasion {occasion_id} not found")
        return occasion

    def in_flight_orders(self, recipient: Recipient) -> int:
        return self.orders.count_in_flight_orders(self.db, recipient.id)

    def get_allocation(self, account: Account) -> CardAllocation:
        """Card allocation for display; never blocks an edit"""
        return get_allocation_for_account(account, self.db)

    def get_recipient_orders(self, recipient_id: int, account: Account) -> list[Order]:
        """Order history; recipient ownership is checked first"""
        self.get_recipient(recipient_id, account)
        return self.orders.get_orders_for_recipient(self.db, recipient_id, account.id)

    # ------------------------------------------------------------------
    # Locking
    # ------------------------------------------------------------------

    def ensure_editable(self, recipient_id: int, account: Account) -> Recipient:
        """Refuse early, before any outside call, when cards are in flight"""
        recipient = self.get_recipient(recipient_id, account)
        in_flight = self.in_flight_orders(recipient)
        if in_flight:
            raise LockedResourceError(recipient_id, in_flight)
        return recipient

    def _lock_for_edit(self, recipient_id: int, account: Account) -> Recipient:
        """
        Lock the recipient row and refuse the edit while it has pending or
        printed orders. The check and the caller's write share one transaction.
        """
        recipient = self.repo.lock_recipient(self.db, recipient_id, account.id)
        if not recipient:
            self.db.rollback()
            raise NotFoundError(f"Recipient {recipient_id} not found")

        in_flight = self.orders.count_in_flight_orders(self.db, recipient.id)
        if in_flight:
            self.db.rollback()
            logger.warning(f"⚠️ Recipient {recipient_id} is locked by {in_flight} in-flight order(s)")
            raise LockedResourceError(recipient_id, in_flight)
        return recipient

    # ------------------------------------------------------------------
    # Duplicate checks
    # ------------------------------------------------------------------

    @staticmethod
    def _check_duplicates(existing: list[Occasion], new: list[OccasionCreate]) -> None:
        """
        A second Just Because occasion is never allowed. Any other repeated
        occasion type needs confirmDuplicate.
        """
        seen_types = [parse_occasion_type(o.occasion_type) for o in existing]
        for occasion in new:
            if occasion.occasionType in seen_types:
                if occasion.occasionType is OccasionType.JUST_BECAUSE:
                    raise ConflictError(
                        "This recipient already has a Just Because card", confirmable=False
                    )
                if not occasion.confirmDuplicate:
                    raise ConflictError(
                        f"This recipient already has a {occasion.occasionType.value} card. "
                        "Add another one anyway?"
                    )
            seen_types.append(occasion.occasionType)

    # ------------------------------------------------------------------
    # Just Because scheduling
    # ------------------------------------------------------------------

    def _just_because_occasion(self, recipient: Recipient) -> Optional[Occasion]:
        return next((o for o in recipient.occasions if o.is_just_because), None)

    def _schedule_just_because(self, recipient: Recipient, today: date) -> None:
        """Select a date for a new Just Because occasion. Does not commit."""
        occasion = self._just_because_occasion(recipient)
        if occasion is not None and occasion.computed_send_date is None:
            order_automation.ensure_just_because_date(occasion, today, self.lead_time_days)

    def _reschedule_just_because(self, recipient: Recipient, today: date) -> None:
        """
        Re-select the stored Just Because date when a personal occasion now
        lands within the spacing window of it. Dates that already have an
        order are left alone. Does not commit.
        """
        occasion = self._just_because_occasion(recipient)
        if occasion is None or occasion.computed_send_date is None:
            return

        stored = occasion.computed_send_date
        if self.orders.order_exists(self.db, occasion.id, stored.year):
            return

        existing = order_automation.existing_occasion_dates(
            recipient, stored.year, exclude_id=occasion.id
        )
        exclusions = just_because.exclusion_dates(stored.year, existing)
        if not just_because.is_excluded(stored, exclusions, JUST_BECAUSE_SPACING_DAYS):
            return

        occasion.computed_send_date = None
        new_date = order_automation.ensure_just_because_date(occasion, today, self.lead_time_days)
        logger.info(
            f"✅ Just Because occasion {occasion.id} moved from {stored} to {new_date} (collision)"
        )

    # ------------------------------------------------------------------
    # Recipient writes
    # ------------------------------------------------------------------

    def create_recipient(
        self,
        data: RecipientCreate,
        account: Account,
        address_status: Optional[str] = None,
        today: Optional[date] = None,
    ) -> Recipient:
        """Create a recipient with its occasions"""
        today = today or datetime.utcnow().date()
        logger.info(f"📥 Creating recipient for account_id: {account.id}")

        self._check_duplicates([], data.occasions)

        recipient_data = {
            "first_name": data.firstName,
            "last_name": data.lastName,
            "partner_first_name": data.partnerFirstName,
            "partner_last_name": data.partnerLastName,
            "relationship": data.relationship.value,
            "street": data.street,
            "apartment": data.apartment,
            "city": data.city,
            "state": data.state,
            "zip": data.zip,
            "country": data.country,
            "notes": data.notes,
        }
        if address_status:
            recipient_data["address_status"] = address_status
            recipient_data["address_verified_at"] = datetime.utcnow()

        try:
            recipient = self.repo.create_recipient(
                self.db, account.id, [_occasion_fields(o) for o in data.occasions], **recipient_data
            )
        except IntegrityError as e:
            self.db.rollback()
            raise ConflictError("This recipient already has a Just Because card", confirmable=False) from e

        self._schedule_just_because(recipient, today)
        self.db.commit()
        self.db.refresh(recipient)
        logger.info(f"✅ Recipient {recipient.id} created with {len(recipient.occasions)} occasion(s)")
        return recipient

    def update_recipient(
        self,
        recipient_id: int,
        data: RecipientUpdate,
        account: Account,
        address_status: Optional[str] = None,
    ) -> Recipient:
        """Update a recipient unless cards for it are in flight"""
        recipient = self._lock_for_edit(recipient_id, account)

        # Only fields sent in the request; an explicit null clears an optional field
        updates = {
            UPDATE_COLUMNS[field]: value
            for field, value in data.model_dump(exclude_unset=True).items()
        }
        if data.relationship is not None:
            updates["relationship"] = data.relationship.value
        if address_status:
            updates["address_status"] = address_status
            updates["address_verified_at"] = datetime.utcnow()

        # Relationship drives the card variation of a Just Because card not ordered yet
        if data.relationship is not None:
            jb = self._just_because_occasion(recipient)
            if jb is not None and jb.computed_send_date is not None:
                jb.card_variation = just_because.card_variation_for(data.relationship)

        recipient = self.repo.update_recipient(self.db, recipient, **updates)
        logger.info(f"✅ Recipient {recipient_id} updated")
        return recipient

    def delete_recipient(self, recipient_id: int, account: Account) -> dict:
        """Delete a recipient unless cards for it are in flight"""
        recipient = self._lock_for_edit(recipient_id, account)
        self.repo.delete_recipient(self.db, recipient)
        logger.info(f"✅ Recipient {recipient_id} deleted")
        return {"message": "Recipient deleted"}

    # ------------------------------------------------------------------
    # Occasion writes
    # ------------------------------------------------------------------

    def add_occasion(
        self,
        recipient_id: int,
        data: OccasionCreate,
        account: Account,
        today: Optional[date] = None,
    ) -> Occasion:
        """Add an occasion; duplicates raise ConflictError, capacity never blocks"""
        today = today or datetime.utcnow().date()
        recipient = self._lock_for_edit(recipient_id, account)

        try:
            self._check_duplicates(list(recipient.occasions), [data])
        except ConflictError:
            self.db.rollback()
            raise

        try:
            occasion = self.repo.add_occasion(self.db, recipient, **_occasion_fields(data))
        except IntegrityError as e:
            self.db.rollback()
            raise ConflictError("This recipient already has a Just Because card", confirmable=False) from e

        if occasion.is_just_because:
            self._schedule_just_because(recipient, today)
        elif data.occasionType in PERSONAL_OCCASIONS:
            self._reschedule_just_because(recipient, today)

        self.db.commit()
        self.db.refresh(occasion)
        logger.info(
            f"✅ Occasion {occasion.id} ({occasion.occasion_type}) added to recipient {recipient_id}"
        )
        return occasion

    def update_occasion(
        self,
        occasion_id: int,
        data: OccasionUpdate,
        account: Account,
        today: Optional[date] = None,
    ) -> Occasion:
        """Update an occasion's date or note"""
        today = today or datetime.utcnow().date()
        occasion = self.get_occasion(occasion_id, account)
        recipient = self._lock_for_edit(occasion.recipient_id, account)

        is_personal = parse_occasion_type(occasion.occasion_type) in PERSONAL_OCCASIONS
        if data.occasionDate is not None and is_personal:
            occasion.occasion_date = data.occasionDate
        if data.notes is not None:
            occasion.notes = data.notes

        if is_personal and data.occasionDate is not None:
            self._reschedule_just_because(recipient, today)

        self.db.commit()
        self.db.refresh(occasion)
        logger.info(f"✅ Occasion {occasion_id} updated")
        return occasion

    def delete_occasion(self, occasion_id: int, account: Account) -> dict:
        """Delete an occasion"""
        occasion = self.get_occasion(occasion_id, account)
        self._lock_for_edit(occasion.recipient_id, account)
        self.repo.delete_occasion(self.db, occasion)
        logger.info(f"✅ Occasion {occasion_id} deleted")
        return {"message": "Occasion deleted"}

    def apply_credit(self, occasion_id: int, account: Account, today: Optional[date] = None) -> Order:
        """Spend one purchased card credit on a Just Because occasion right away"""
        today = today or datetime.utcnow().date()
        occasion = self.get_occasion(occasion_id, account)
        return order_automation.apply_credit(self.db, occasion, today, self.lead_time_days)
