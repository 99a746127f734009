"""In-process implementation of the key-value store contract."""

import asyncio
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import AsyncIterator, Generic, Optional

from phone_booking.stores.base import KeyValueStore, V
from phone_booking.utils import Clock

logger = logging.getLogger(__name__)


@dataclass
class _Entry(Generic[V]):
    value: V
    expires_at: float


@dataclass
class _KeyLock:
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    users: int = 0


class InMemoryStore(KeyValueStore[V]):
    """
    Dict-backed store with lazy TTL expiry.

    Nothing sweeps abandoned entries; they are discarded the next time
    their key is read. Lock objects live only while someone holds or
    waits for them.
    """

    def __init__(self, clock: Optional[Clock] = None, name: str = "store") -> None:
        self._clock = clock or Clock()
        self._name = name
        self._entries: dict[str, _Entry[V]] = {}
        self._locks: dict[str, _KeyLock] = {}

    def __len__(self) -> int:
        return len(self._entries)

    async def get(self, key: str) -> Optional[V]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.expires_at <= self._clock.monotonic():
            del self._entries[key]
            logger.debug("%s: entry expired on read", self._name)
            return None
        return entry.value

    async def set(self, key: str, value: V, ttl_seconds: float) -> None:
        self._entries[key] = _Entry(value=value, expires_at=self._clock.monotonic() + ttl_seconds)

    async def delete(self, key: str) -> bool:
        entry = self._entries.pop(key, None)
        return entry is not None and entry.expires_at > self._clock.monotonic()

    @asynccontextmanager
    async def lock(self, key: str) -> AsyncIterator[None]:
        key_lock = self._locks.get(key)
        if key_lock is None:
            key_lock = self._locks[key] = _KeyLock()
        key_lock.users += 1
        try:
            async with key_lock.lock:
                yield
        finally:
            key_lock.users -= 1
            if key_lock.users == 0:
                del self._locks[key]
