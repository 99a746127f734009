"""
Pending-confirmation store keyed by unguessable URL-safe tokens.

Entries expire 20 minutes after creation (not extended on read) and are
single use: ``consume`` removes the entry. A missing token and an expired
one look the same to callers.
"""

import logging
import secrets
from typing import AsyncContextManager, Optional

from phone_booking.config import settings
from phone_booking.schemas.booking_schema import PendingConfirmation, PendingPayload
from phone_booking.stores.base import KeyValueStore
from phone_booking.stores.memory import InMemoryStore
from phone_booking.utils import Clock

logger = logging.getLogger(__name__)

# 192 bits of entropy
TOKEN_BYTES = 24


def token_prefix(token: str) -> str:
    """Short token prefix safe to put in logs."""
    return token[:6] + "…"


class PendingConfirmationStore:
    """Single-use, TTL-bounded handoff records."""

    def __init__(
        self,
        backend: Optional[KeyValueStore[PendingConfirmation]] = None,
        clock: Optional[Clock] = None,
        ttl_minutes: Optional[int] = None,
    ) -> None:
        self._clock = clock or Clock()
        self._backend = backend if backend is not None else InMemoryStore(self._clock, name="pending")
        minutes = ttl_minutes if ttl_minutes is not None else settings.sessions.pending_ttl_minutes
        self.ttl_minutes = minutes
        self._ttl_seconds = minutes * 60

    async def create(self, payload: PendingPayload) -> PendingConfirmation:
        """Mint a fresh token for ``payload``."""
        token = secrets.token_urlsafe(TOKEN_BYTES)
        entry = PendingConfirmation(
            token=token,
            expires_at=self._clock.monotonic() + self._ttl_seconds,
            payload=payload,
        )
        async with self._backend.lock(token):
            await self._backend.set(token, entry, self._ttl_seconds)
        logger.info("Pending confirmation %s created", token_prefix(token))
        return entry

    def lock(self, token: str) -> AsyncContextManager[None]:
        """Exclusive section for one token (used around finalization)."""
        return self._backend.lock(token)

    async def resolve(self, token: str) -> Optional[PendingConfirmation]:
        """Return the live entry for ``token`` without consuming it."""
        if not token:
            return None
        entry = await self._backend.get(token)
        if entry is None or entry.expires_at <= self._clock.monotonic():
            return None
        return entry

    async def consume(self, token: str) -> Optional[PendingConfirmation]:
        """Remove and return the live entry; None if missing or expired.

        Callers racing on the same token must hold ``lock(token)``.
        """
        entry = await self.resolve(token)
        await self._backend.delete(token)
        if entry is not None:
            logger.info("Pending confirmation %s consumed", token_prefix(token))
        return entry

    async def discard(self, token: str) -> None:
        """Drop a token minted in a turn that did not complete."""
        async with self._backend.lock(token):
            await self._backend.delete(token)
        logger.info("Pending confirmation %s discarded", token_prefix(token))
