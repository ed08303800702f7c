"""
Request authentication

Account endpoints take the identity provider's user id as the Bearer value and
look up the Account whose external_uid matches. No token signature is checked
here: the API must be deployed behind a gateway that verifies the signed ID
token and forwards only the verified uid. Never expose it directly.

Cron and operator endpoints compare the Bearer value against CRON_SECRET and
OPERATOR_API_KEY in constant time.
"""

import logging
import secrets
from typing import Optional

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from . import config
from .database import get_db
from .models import Account

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


def _bearer_token(credentials: Optional[HTTPAuthorizationCredentials]) -> str:
    if not credentials or not credentials.credentials:
        raise HTTPException(
            status_code=401,
            detail="Not authenticated. Please provide a valid Bearer token in the Authorization header.",
        )
    return credentials.credentials


def _secret_matches(token: str, secret: Optional[str]) -> bool:
    """Constant-time comparison; an unset secret never matches"""
    if not secret:
        return False
    return secrets.compare_digest(token.encode(), secret.encode())


async def get_current_account(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> Account:
    """
    Get the current account from the identity provider uid.
    The gateway has already verified the token; the bearer value is the uid.
    """
    uid = _bearer_token(credentials)

    account = db.query(Account).filter(Account.external_uid == uid).first()
    if not account:
        logger.warning("⚠️ Authentication failed: unknown account uid")
        raise HTTPException(status_code=401, detail="Unknown account")

    logger.debug(f"✅ Account authenticated: {account.email}")
    return account


async def require_cron(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> None:
    """Batch trigger authentication: Authorization: Bearer <CRON_SECRET>"""
    token = _bearer_token(credentials)
    if not _secret_matches(token, config.CRON_SECRET):
        logger.warning("❌ Rejected cron request with invalid secret")
        raise HTTPException(status_code=401, detail="Invalid cron secret")


async def require_operator(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> None:
    """Fulfillment desk authentication: Authorization: Bearer <OPERATOR_API_KEY>"""
    token = _bearer_token(credentials)
    if not _secret_matches(token, config.OPERATOR_API_KEY):
        logger.warning("❌ Rejected operator request with invalid API key")
        raise HTTPException(status_code=403, detail="Operator access required")
