"""
Call-session store keyed by call SID.

Every access re-validates the TTL and extends it. A turn runs inside
``transaction``: the key is locked, the session is loaded (or created
fresh), and the new session is written back only if the turn commits.
"""

import logging
from contextlib import asynccontextmanager
from dataclasses import replace
from typing import AsyncIterator, Optional

from phone_booking.config import settings
from phone_booking.conversation.state_machine import CallSession
from phone_booking.stores.base import KeyValueStore
from phone_booking.stores.memory import InMemoryStore
from phone_booking.utils import Clock

logger = logging.getLogger(__name__)


class SessionTransaction:
    """Holds the session loaded for one turn and the result to commit."""

    def __init__(self, session: CallSession) -> None:
        self.session = session
        self.committed: Optional[CallSession] = None

    def commit(self, session: CallSession) -> None:
        self.committed = session


class SessionStore:
    """TTL-bounded mapping of call SID to CallSession."""

    def __init__(
        self,
        backend: Optional[KeyValueStore[CallSession]] = None,
        clock: Optional[Clock] = None,
        ttl_minutes: Optional[int] = None,
    ) -> None:
        self._clock = clock or Clock()
        self._backend = backend if backend is not None else InMemoryStore(self._clock, name="sessions")
        minutes = ttl_minutes if ttl_minutes is not None else settings.sessions.session_ttl_minutes
        self._ttl_seconds = minutes * 60

    async def _touch(self, call_id: str, caller: str) -> CallSession:
        now = self._clock.monotonic()
        session = await self._backend.get(call_id)
        if session is None:
            logger.debug("Starting a fresh session")
            session = CallSession.fresh(call_id, now, caller)
        else:
            session = replace(session, updated_at=now, caller=caller or session.caller)
        await self._backend.set(call_id, session, self._ttl_seconds)
        return session

    async def get(self, call_id: str, caller: str = "") -> CallSession:
        """Return the live session for ``call_id``, creating one if absent or expired."""
        async with self._backend.lock(call_id):
            return await self._touch(call_id, caller)

    async def reset(self, call_id: str, caller: str = "") -> CallSession:
        """Put the call back at the menu with no collected data."""
        async with self._backend.lock(call_id):
            session = CallSession.fresh(call_id, self._clock.monotonic(), caller)
            await self._backend.set(call_id, session, self._ttl_seconds)
            return session

    @asynccontextmanager
    async def transaction(self, call_id: str, caller: str = "") -> AsyncIterator[SessionTransaction]:
        """Lock the call, load its session and write back whatever the turn commits."""
        async with self._backend.lock(call_id):
            txn = SessionTransaction(await self._touch(call_id, caller))
            yield txn
            if txn.committed is not None:
                await self._backend.set(
                    call_id,
                    replace(txn.committed, updated_at=self._clock.monotonic()),
                    self._ttl_seconds,
                )
