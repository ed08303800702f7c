"""Order service - Business logic for the fulfillment desk"""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from ...models import Order, OrderStatus
from ...shared.exceptions import InvalidTransitionError, NotFoundError
from .lifecycle import ensure_transition
from .repository import OrderRepository

logger = logging.getLogger(__name__)


class OrderService:
    """Service layer for order status transitions"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = OrderRepository()

    def get_orders(self, status: Optional[str] = None, limit: int = 500) -> list[Order]:
        """List orders, optionally by status"""
        return self.repo.get_orders(self.db, status, limit)

    def get_order(self, order_id: int) -> Order:
        """Get a specific order"""
        order = self.repo.get_order_by_id(self.db, order_id)
        if not order:
            raise NotFoundError(f"Order {order_id} not found")
        return order

    def mark_printed(self, order_ids: list[int], printed_at: Optional[datetime] = None) -> dict:
        """
        Mark a batch of orders as printed.

        Only pending orders move; anything else (already printed, mailed,
        cancelled or unknown) is left untouched and reported back. Each order
        is updated in its own transaction.
        """
        printed_at = printed_at or datetime.utcnow()
        updated: list[int] = []
        skipped: list[dict] = []

        for order_id in dict.fromkeys(order_ids):
            moved = self.repo.transition_status(
                self.db,
                order_id,
                OrderStatus.PENDING.value,
                OrderStatus.PRINTED.value,
                print_date=printed_at,
            )
            if moved:
                updated.append(order_id)
                logger.info(f"✅ Order {order_id} transitioned: pending → printed")
                continue

            order = self.repo.get_order_by_id(self.db, order_id)
            skipped.append({"order_id": order_id, "status": order.status if order else "not_found"})

        if skipped:
            logger.info(f"⚠️ Mark printed skipped {len(skipped)} order(s): {skipped}")
        logger.info(f"📦 Marked {len(updated)} order(s) as printed")
        return {"updated": updated, "skipped": skipped}

    def mark_mailed(self, order_id: int, mailed_at: Optional[datetime] = None) -> Order:
        """Mark one printed order as mailed"""
        order = self.get_order(order_id)
        try:
            ensure_transition(order, OrderStatus.MAILED.value)
        except InvalidTransitionError:
            logger.warning(f"❌ Order {order_id} cannot be mailed from status '{order.status}'")
            raise

        moved = self.repo.transition_status(
            self.db,
            order_id,
            OrderStatus.PRINTED.value,
            OrderStatus.MAILED.value,
            mail_date=mailed_at or datetime.utcnow(),
        )
        order = self.get_order(order_id)
        if not moved:
            # Status changed between the read and the update
            logger.warning(f"❌ Order {order_id} changed to '{order.status}' before it could be mailed")
            raise InvalidTransitionError(order_id, order.status, OrderStatus.MAILED.value)

        logger.info(f"✅ Order {order_id} transitioned: printed → mailed")
        return order

    def cancel_order(self, order_id: int) -> Order:
        """Cancel an order that has not been printed yet"""
        order = self.get_order(order_id)
        ensure_transition(order, OrderStatus.CANCELLED.value)

        moved = self.repo.transition_status(
            self.db, order_id, OrderStatus.PENDING.value, OrderStatus.CANCELLED.value
        )
        order = self.get_order(order_id)
        if not moved:
            raise InvalidTransitionError(order_id, order.status, OrderStatus.CANCELLED.value)

        logger.info(f"✅ Order {order_id} transitioned: pending → cancelled")
        return order

    def get_recipient_orders(self, recipient_id: int, account_id: int) -> list[Order]:
        """Order history for one of the account's recipients"""
        return self.repo.get_orders_for_recipient(self.db, recipient_id, account_id)
