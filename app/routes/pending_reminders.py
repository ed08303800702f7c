"""
Pending reminder endpoints
An anonymous visitor stages a recipient draft before signing up; after sign-up
the draft is claimed into the new account.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel, ValidationError
from sqlalchemy.orm import Session

from ..auth import get_current_account
from ..cache import PendingReminderStore, StagingUnavailableError, get_pending_reminder_store
from ..database import get_db
from ..domain.recipients.router import address_status_for, to_recipient_response
from ..domain.recipients.schemas import RecipientCreate, RecipientResponse
from ..domain.recipients.service import RecipientService
from ..models import Account

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/pending-reminders", tags=["Pending Reminders"])


class StagedReminder(BaseModel):
    token: str
    expiresIn: int


def _unavailable(e: Exception) -> HTTPException:
    logger.error(f"❌ Pending reminder store unavailable: {e}")
    return HTTPException(status_code=503, detail="Reminder drafts are temporarily unavailable")


@router.post("", response_model=StagedReminder)
async def stage_pending_reminder(
    data: RecipientCreate,
    request: Request,
    store: PendingReminderStore = Depends(get_pending_reminder_store),
):
    """Stage a recipient draft for a visitor who has not signed up yet"""
    # Store the submitted body; it is validated again when claimed
    draft = await request.json()
    try:
        token = store.stage(draft)
    except StagingUnavailableError as e:
        raise _unavailable(e) from e
    return StagedReminder(token=token, expiresIn=store.ttl)


@router.post("/{token}/claim", response_model=RecipientResponse)
async def claim_pending_reminder(
    token: str,
    current_account: Account = Depends(get_current_account),
    store: PendingReminderStore = Depends(get_pending_reminder_store),
    db: Session = Depends(get_db),
):
    """Take the staged draft and create its recipient in the signed-in account"""
    try:
        draft = store.take(token)
    except StagingUnavailableError as e:
        raise _unavailable(e) from e

    if draft is None:
        raise HTTPException(status_code=404, detail="Reminder draft not found or expired")

    try:
        data = RecipientCreate.model_validate(draft)
    except ValidationError as e:
        logger.warning(f"⚠️ Discarded invalid reminder draft: {e.error_count()} error(s)")
        raise HTTPException(status_code=422, detail="Reminder draft is no longer valid") from e

    address_status = await address_status_for(
        data.street, data.apartment, data.city, data.state, data.zip
    )
    recipient = RecipientService(db).create_recipient(data, current_account, address_status)

    logger.info(f"✅ Pending reminder claimed by account {current_account.id}")
    return to_recipient_response(recipient)
