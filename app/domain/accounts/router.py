"""Account router - FastAPI endpoints for the signed-in account"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import get_current_account
from ...database import get_db
from ...models import Account
from .schemas import AccountResponse, ReturnAddressResponse, ReturnAddressUpdate
from .service import AccountService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/account", tags=["Account"])


def get_account_service(db: Session = Depends(get_db)) -> AccountService:
    """Dependency injection for AccountService"""
    return AccountService(db)


def to_return_address_response(account: Account) -> Optional[ReturnAddressResponse]:
    if not account.has_return_address:
        return None
    return ReturnAddressResponse(
        name=account.return_name,
        street=account.return_street,
        apartment=account.return_apartment,
        city=account.return_city,
        state=account.return_state,
        zip=account.return_zip,
    )


# ============================================================================
# ACCOUNT
# ============================================================================


@router.get("", response_model=AccountResponse)
async def get_account(current_account: Account = Depends(get_current_account)):
    """Plan, card credits and return address of the signed-in account"""
    return AccountResponse(
        id=current_account.id,
        email=current_account.email,
        fullName=current_account.full_name,
        plan=current_account.plan,
        subscriptionStatus=current_account.subscription_status,
        cardCredits=current_account.card_credits or 0,
        returnAddress=to_return_address_response(current_account),
    )


# ============================================================================
# RETURN ADDRESS
# ============================================================================


@router.get("/return-address", response_model=ReturnAddressResponse)
async def get_return_address(
    current_account: Account = Depends(get_current_account),
    service: AccountService = Depends(get_account_service),
):
    """Default return address printed on envelopes (404 until one is set)"""
    return to_return_address_response(service.get_return_address(current_account))


@router.put("/return-address", response_model=ReturnAddressResponse)
async def update_return_address(
    data: ReturnAddressUpdate,
    current_account: Account = Depends(get_current_account),
    service: AccountService = Depends(get_account_service),
):
    """Set the return address; orders already created keep their snapshot"""
    account = service.update_return_address(current_account, data)
    return to_return_address_response(account)


__all__ = ["router", "get_account_service"]
