"""Order router - FastAPI endpoints for the fulfillment desk and the batch trigger"""

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import require_cron, require_operator
from ...database import get_db
from ...models import Order, OrderStatus
from ...services import order_automation
from .schemas import BatchRunSummary, MarkPrintedRequest, MarkPrintedResponse, OrderResponse
from .service import OrderService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/orders", tags=["Orders"], dependencies=[Depends(require_operator)])
cron_router = APIRouter(prefix="/cron", tags=["Cron"], dependencies=[Depends(require_cron)])


def get_order_service(db: Session = Depends(get_db)) -> OrderService:
    """Dependency injection for OrderService"""
    return OrderService(db)


def _format_address(street, apartment, city, state, zipcode) -> str:
    line1 = f"{street}, {apartment}" if apartment else street
    return f"{line1}, {city}, {state} {zipcode}"


def to_order_response(order: Order) -> OrderResponse:
    return OrderResponse(
        id=order.id,
        recipientId=order.recipient_id,
        occasionId=order.occasion_id,
        targetYear=order.target_year,
        occasionType=order.occasion_type,
        occasionDate=order.occasion_date,
        occasionNotes=order.occasion_notes,
        cardType=order.card_type,
        cardVariation=order.card_variation,
        status=order.status,
        printDate=order.print_date,
        mailDate=order.mail_date,
        recipientName=order.recipient_name,
        recipientAddress=_format_address(
            order.recipient_street,
            order.recipient_apartment,
            order.recipient_city,
            order.recipient_state,
            order.recipient_zip,
        ),
        returnName=order.return_name,
        returnAddress=_format_address(
            order.return_street,
            order.return_apartment,
            order.return_city,
            order.return_state,
            order.return_zip,
        ),
        created_at=order.created_at,
    )


# ============================================================================
# FULFILLMENT DESK
# ============================================================================


@router.get("", response_model=list[OrderResponse])
async def get_orders(
    status: Optional[OrderStatus] = Query(None, description="Filter by order status"),
    limit: int = Query(500, ge=1, le=5000),
    service: OrderService = Depends(get_order_service),
):
    """List orders for printing and mailing"""
    orders = service.get_orders(status.value if status else None, limit)
    return [to_order_response(o) for o in orders]


@router.post("/mark-printed", response_model=MarkPrintedResponse)
async def mark_orders_printed(
    data: MarkPrintedRequest,
    service: OrderService = Depends(get_order_service),
):
    """Mark pending orders as printed; other orders are skipped and reported"""
    return service.mark_printed(data.orderIds)


@router.post("/{order_id}/mark-mailed", response_model=OrderResponse)
async def mark_order_mailed(
    order_id: int,
    service: OrderService = Depends(get_order_service),
):
    """Mark a printed order as mailed"""
    return to_order_response(service.mark_mailed(order_id))


@router.post("/{order_id}/cancel", response_model=OrderResponse)
async def cancel_order(
    order_id: int,
    service: OrderService = Depends(get_order_service),
):
    """Cancel a pending order"""
    return to_order_response(service.cancel_order(order_id))


# ============================================================================
# BATCH TRIGGER
# ============================================================================


@cron_router.post("/create-orders", response_model=BatchRunSummary)
async def run_create_due_orders(
    run_date: Optional[date] = Query(None, description="Batch date, defaults to today (UTC)"),
    db: Session = Depends(get_db),
):
    """
    Create orders for every due occasion.
    Safe to call several times a day; occasions that already have an order are skipped.
    """
    return order_automation.create_due_orders(db, run_date)


__all__ = ["router", "cron_router", "get_order_service", "to_order_response"]
