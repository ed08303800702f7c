"""
Redis staging store for pending reminders
Holds an unauthenticated intake draft under a random session token until the
visitor signs up and claims it. Drafts expire after PENDING_REMINDER_TTL_SECONDS.
"""

import json
import logging
import secrets
from typing import Any, Optional

from .config import PENDING_REMINDER_TTL_SECONDS
from .redis_client import get_redis_client

logger = logging.getLogger(__name__)

KEY_PREFIX = "pending_reminder"


class StagingUnavailableError(Exception):
    """Redis could not be reached"""


class PendingReminderStore:
    """Redis wrapper with automatic serialization and a fixed TTL"""

    def __init__(self, ttl: int = PENDING_REMINDER_TTL_SECONDS):
        self.ttl = ttl
        self.redis_client = None

    def _get_client(self):
        """Lazy load Redis client"""
        if self.redis_client is None:
            try:
                self.redis_client = get_redis_client()
            except Exception as e:
                logger.warning(f"⚠️ Pending reminder store unavailable: {e}")
                raise StagingUnavailableError(str(e)) from e
        return self.redis_client

    @staticmethod
    def _key(token: str) -> str:
        return f"{KEY_PREFIX}:{token}"

    def stage(self, draft: dict[str, Any]) -> str:
        """Store a draft and return its session token"""
        client = self._get_client()
        token = secrets.token_urlsafe(24)
        try:
            client.setex(self._key(token), self.ttl, json.dumps(draft))
        except Exception as e:
            logger.error(f"❌ Failed to stage pending reminder: {e}")
            raise StagingUnavailableError(str(e)) from e
        logger.info(f"✅ Pending reminder staged (TTL: {self.ttl}s)")
        return token

    def take(self, token: str) -> Optional[dict[str, Any]]:
        """Read and delete a draft in one GETDEL; only one caller gets it"""
        client = self._get_client()
        try:
            value = client.getdel(self._key(token))
        except Exception as e:
            logger.error(f"❌ Failed to take pending reminder: {e}")
            raise StagingUnavailableError(str(e)) from e
        return json.loads(value) if value else None


# Global store instance
pending_reminders = PendingReminderStore()


def get_pending_reminder_store() -> PendingReminderStore:
    """Dependency injection for the staging store"""
    return pending_reminders
