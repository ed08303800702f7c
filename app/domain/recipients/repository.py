"""Recipient repository - Database operations for recipients and occasions"""

from typing import Optional

from sqlalchemy.orm import Session, joinedload

from ...models import Occasion, Recipient


class RecipientRepository:
    """Repository for recipient database operations"""

    @staticmethod
    def get_recipients(db: Session, account_id: int) -> list[Recipient]:
        """Get all recipients for an account"""
        return (
            db.query(Recipient)
            .options(joinedload(Recipient.occasions))
            .filter(Recipient.account_id == account_id)
            .order_by(Recipient.last_name.asc(), Recipient.first_name.asc())
            .all()
        )

    @staticmethod
    def get_recipient_by_id(db: Session, recipient_id: int, account_id: int) -> Optional[Recipient]:
        """Get a specific recipient by ID"""
        return (
            db.query(Recipient)
            .filter(Recipient.id == recipient_id, Recipient.account_id == account_id)
            .first()
        )

    @staticmethod
    def lock_recipient(db: Session, recipient_id: int, account_id: int) -> Optional[Recipient]:
        """Get a recipient with a row lock held until commit or rollback"""
        return (
            db.query(Recipient)
            .filter(Recipient.id == recipient_id, Recipient.account_id == account_id)
            .with_for_update()
            .first()
        )

    @staticmethod
    def get_occasion_by_id(db: Session, occasion_id: int, account_id: int) -> Optional[Occasion]:
        """Get an occasion, scoped to the owning account"""
        return (
            db.query(Occasion)
            .join(Recipient, Occasion.recipient_id == Recipient.id)
            .filter(Occasion.id == occasion_id, Recipient.account_id == account_id)
            .first()
        )

    @staticmethod
    def create_recipient(
        db: Session, account_id: int, occasions: list[dict], **recipient_data
    ) -> Recipient:
        """Create a recipient and its occasions in one transaction"""
        recipient = Recipient(account_id=account_id, **recipient_data)
        recipient.occasions = [Occasion(**o) for o in occasions]
        db.add(recipient)
        db.commit()
        db.refresh(recipient)
        return recipient

    @staticmethod
    def update_recipient(db: Session, recipient: Recipient, **updates) -> Recipient:
        """Write the given columns; None clears a column"""
        for key, value in updates.items():
            setattr(recipient, key, value)

        db.commit()
        db.refresh(recipient)
        return recipient

    @staticmethod
    def delete_recipient(db: Session, recipient: Recipient) -> None:
        """Delete a recipient (occasions cascade, orders keep their snapshot)"""
        db.delete(recipient)
        db.commit()

    @staticmethod
    def add_occasion(db: Session, recipient: Recipient, **occasion_data) -> Occasion:
        """Add an occasion without committing"""
        occasion = Occasion(**occasion_data)
        recipient.occasions.append(occasion)
        db.flush()
        return occasion

    @staticmethod
    def delete_occasion(db: Session, occasion: Occasion) -> None:
        """Delete an occasion"""
        db.delete(occasion)
        db.commit()
