"""Order repository - Database operations for orders"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import IN_FLIGHT_STATUSES, CardType, Order, OrderStatus, Recipient


class OrderRepository:
    """Repository for order database operations"""

    @staticmethod
    def get_order_by_id(db: Session, order_id: int) -> Optional[Order]:
        """Get a specific order by ID"""
        return db.query(Order).filter(Order.id == order_id).first()

    @staticmethod
    def get_orders(db: Session, status: Optional[str] = None, limit: int = 500) -> list[Order]:
        """Get orders for the fulfillment desk, oldest occasion first"""
        query = db.query(Order)
        if status:
            query = query.filter(Order.status == status)
        return query.order_by(Order.occasion_date.asc(), Order.id.asc()).limit(limit).all()

    @staticmethod
    def get_orders_for_recipient(db: Session, recipient_id: int, account_id: int) -> list[Order]:
        """Order history for one recipient, newest first"""
        return (
            db.query(Order)
            .filter(Order.recipient_id == recipient_id, Order.account_id == account_id)
            .order_by(Order.occasion_date.desc(), Order.id.desc())
            .all()
        )

    @staticmethod
    def order_exists(db: Session, occasion_id: int, target_year: int) -> bool:
        """Check whether an order was already materialized for this cycle"""
        return (
            db.query(Order.id)
            .filter(Order.occasion_id == occasion_id, Order.target_year == target_year)
            .first()
            is not None
        )

    @staticmethod
    def count_in_flight_orders(db: Session, recipient_id: int) -> int:
        """Count pending and printed orders for a recipient"""
        return (
            db.query(Order)
            .filter(Order.recipient_id == recipient_id, Order.status.in_(IN_FLIGHT_STATUSES))
            .count()
        )

    @staticmethod
    def count_subscription_orders(db: Session, account_id: int, target_year: int) -> int:
        """Subscription cards already drawn for a year (cancelled orders give the card back)"""
        return (
            db.query(Order)
            .filter(
                Order.account_id == account_id,
                Order.target_year == target_year,
                Order.card_type == CardType.SUBSCRIPTION.value,
                Order.status != OrderStatus.CANCELLED.value,
            )
            .count()
        )

    @staticmethod
    def lock_recipient(db: Session, recipient_id: int) -> Optional[Recipient]:
        """Load a recipient with a row lock held until the transaction ends"""
        return db.query(Recipient).filter(Recipient.id == recipient_id).with_for_update().first()

    @staticmethod
    def create_order(db: Session, **order_data) -> Order:
        """Create a new order and commit every pending change with it"""
        order = Order(**order_data)
        db.add(order)
        db.commit()
        db.refresh(order)
        return order

    @staticmethod
    def transition_status(
        db: Session, order_id: int, from_status: str, to_status: str, **fields
    ) -> bool:
        """
        Move one order from ``from_status`` to ``to_status`` in a single UPDATE.
        Returns False when the order was not in ``from_status`` (nothing changed).
        """
        updated = (
            db.query(Order)
            .filter(Order.id == order_id, Order.status == from_status)
            .update({"status": to_status, **fields}, synchronize_session=False)
        )
        db.commit()
        return updated == 1
