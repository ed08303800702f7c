"""Recipient router - FastAPI endpoints for recipients, occasions and card allocation"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import get_current_account
from ...database import get_db
from ...models import Account, Occasion, Recipient
from ...plan_limits import CardAllocation
from ...services.address_validation import AddressInput, validate_address
from ..orders.router import to_order_response
from ..orders.schemas import OrderResponse
from .schemas import (
    CardAllocationResponse,
    OccasionCreate,
    OccasionMutationResponse,
    OccasionResponse,
    OccasionUpdate,
    RecipientCreate,
    RecipientResponse,
    RecipientUpdate,
)
from .service import RecipientService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/recipients", tags=["Recipients"])
occasions_router = APIRouter(prefix="/occasions", tags=["Occasions"])
allocation_router = APIRouter(tags=["Card Allocation"])


def get_recipient_service(db: Session = Depends(get_db)) -> RecipientService:
    """Dependency injection for RecipientService"""
    return RecipientService(db)


def to_occasion_response(occasion: Occasion) -> OccasionResponse:
    return OccasionResponse(
        id=occasion.id,
        recipientId=occasion.recipient_id,
        occasionType=occasion.occasion_type,
        occasionDate=occasion.occasion_date,
        notes=occasion.notes,
        isJustBecause=occasion.is_just_because,
        computedSendDate=occasion.computed_send_date,
        cardVariation=occasion.card_variation,
        lastSentYear=occasion.last_sent_year,
    )


def to_allocation_response(allocation: CardAllocation) -> CardAllocationResponse:
    return CardAllocationResponse(
        scheduledCards=allocation.scheduled_cards,
        subscriptionCards=allocation.subscription_cards,
        extraCards=allocation.extra_cards,
        totalAvailable=allocation.total_available,
        shortfall=allocation.shortfall,
        isOverLimit=allocation.is_over_limit,
    )


def to_recipient_response(recipient: Recipient, in_flight: int = 0) -> RecipientResponse:
    return RecipientResponse(
        id=recipient.id,
        firstName=recipient.first_name,
        lastName=recipient.last_name,
        partnerFirstName=recipient.partner_first_name,
        partnerLastName=recipient.partner_last_name,
        displayName=recipient.display_name,
        relationship=recipient.relationship,
        street=recipient.street,
        apartment=recipient.apartment,
        city=recipient.city,
        state=recipient.state,
        zip=recipient.zip,
        country=recipient.country,
        addressStatus=recipient.address_status,
        notes=recipient.notes,
        occasions=[to_occasion_response(o) for o in recipient.occasions],
        inFlightOrders=in_flight,
        isLocked=in_flight > 0,
        created_at=recipient.created_at,
    )


async def address_status_for(street, apartment, city, state, zipcode) -> str:
    """Validate the mailing address; never blocks (verdict ERROR maps to 'unverified')"""
    result = await validate_address(
        AddressInput(street=street, apartment=apartment, city=city, state=state, zip=zipcode)
    )
    return result.address_status


# ============================================================================
# RECIPIENTS
# ============================================================================


@router.get("", response_model=list[RecipientResponse])
async def get_recipients(
    current_account: Account = Depends(get_current_account),
    service: RecipientService = Depends(get_recipient_service),
):
    """Get all recipients with their occasions"""
    recipients = service.get_recipients(current_account)
    return [to_recipient_response(r, service.in_flight_orders(r)) for r in recipients]


@router.get("/{recipient_id}", response_model=RecipientResponse)
async def get_recipient(
    recipient_id: int,
    current_account: Account = Depends(get_current_account),
    service: RecipientService = Depends(get_recipient_service),
):
    """Get a specific recipient"""
    recipient = service.get_recipient(recipient_id, current_account)
    return to_recipient_response(recipient, service.in_flight_orders(recipient))


@router.post("", response_model=RecipientResponse)
async def create_recipient(
    data: RecipientCreate,
    current_account: Account = Depends(get_current_account),
    service: RecipientService = Depends(get_recipient_service),
):
    """Create a recipient together with its occasions"""
    address_status = await address_status_for(
        data.street, data.apartment, data.city, data.state, data.zip
    )
    recipient = service.create_recipient(data, current_account, address_status)
    return to_recipient_response(recipient)


@router.patch("/{recipient_id}", response_model=RecipientResponse)
async def update_recipient(
    recipient_id: int,
    data: RecipientUpdate,
    current_account: Account = Depends(get_current_account),
    service: RecipientService = Depends(get_recipient_service),
):
    """Update a recipient (423 while cards for it are being printed or mailed)"""
    # 423 before the address validator is called
    current = service.ensure_editable(recipient_id, current_account)

    address_status = None
    if data.has_address_change():
        address_status = await address_status_for(
            data.street or current.street,
            data.apartment if "apartment" in data.model_fields_set else current.apartment,
            data.city or current.city,
            data.state or current.state,
            data.zip or current.zip,
        )
    recipient = service.update_recipient(recipient_id, data, current_account, address_status)
    return to_recipient_response(recipient)


@router.delete("/{recipient_id}")
async def delete_recipient(
    recipient_id: int,
    current_account: Account = Depends(get_current_account),
    service: RecipientService = Depends(get_recipient_service),
):
    """Delete a recipient (423 while cards for it are being printed or mailed)"""
    return service.delete_recipient(recipient_id, current_account)


@router.get("/{recipient_id}/orders", response_model=list[OrderResponse])
async def get_recipient_orders(
    recipient_id: int,
    current_account: Account = Depends(get_current_account),
    service: RecipientService = Depends(get_recipient_service),
):
    """Card history for a recipient"""
    orders = service.get_recipient_orders(recipient_id, current_account)
    return [to_order_response(o) for o in orders]


@router.post("/{recipient_id}/occasions", response_model=OccasionMutationResponse)
async def add_occasion(
    recipient_id: int,
    data: OccasionCreate,
    current_account: Account = Depends(get_current_account),
    service: RecipientService = Depends(get_recipient_service),
):
    """Add an occasion; the response carries the recomputed card allocation"""
    occasion = service.add_occasion(recipient_id, data, current_account)
    return OccasionMutationResponse(
        occasion=to_occasion_response(occasion),
        allocation=to_allocation_response(service.get_allocation(current_account)),
    )


# ============================================================================
# OCCASIONS
# ============================================================================


@occasions_router.get("/{occasion_id}", response_model=OccasionResponse)
async def get_occasion(
    occasion_id: int,
    current_account: Account = Depends(get_current_account),
    service: RecipientService = Depends(get_recipient_service),
):
    """Get a specific occasion"""
    return to_occasion_response(service.get_occasion(occasion_id, current_account))


@occasions_router.patch("/{occasion_id}", response_model=OccasionMutationResponse)
async def update_occasion(
    occasion_id: int,
    data: OccasionUpdate,
    current_account: Account = Depends(get_current_account),
    service: RecipientService = Depends(get_recipient_service),
):
    """Update an occasion's date or note"""
    occasion = service.update_occasion(occasion_id, data, current_account)
    return OccasionMutationResponse(
        occasion=to_occasion_response(occasion),
        allocation=to_allocation_response(service.get_allocation(current_account)),
    )


@occasions_router.delete("/{occasion_id}")
async def delete_occasion(
    occasion_id: int,
    current_account: Account = Depends(get_current_account),
    service: RecipientService = Depends(get_recipient_service),
):
    """Delete an occasion"""
    return service.delete_occasion(occasion_id, current_account)


@occasions_router.post("/{occasion_id}/apply-credit", response_model=OrderResponse)
async def apply_credit(
    occasion_id: int,
    current_account: Account = Depends(get_current_account),
    service: RecipientService = Depends(get_recipient_service),
):
    """Send a Just Because card now using one purchased card credit"""
    return to_order_response(service.apply_credit(occasion_id, current_account))


# ============================================================================
# CARD ALLOCATION
# ============================================================================


@allocation_router.get("/card-allocation", response_model=CardAllocationResponse)
async def get_card_allocation(
    current_account: Account = Depends(get_current_account),
    service: RecipientService = Depends(get_recipient_service),
):
    """Scheduled cards versus plan allotment plus purchased credits"""
    return to_allocation_response(service.get_allocation(current_account))


__all__ = ["router", "occasions_router", "allocation_router", "get_recipient_service"]
