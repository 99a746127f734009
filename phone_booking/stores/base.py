"""
Key-value store contract shared by the session and pending-confirmation stores.

Individual ``get``/``set``/``delete`` calls are atomic. A caller that needs
read → validate → write back on one key holds ``lock(key)`` around the
sequence; locks are scoped to a key, so different keys never wait on each
other. Expired entries are dropped lazily when read.
"""

from abc import ABC, abstractmethod
from typing import AsyncContextManager, Generic, Optional, TypeVar

V = TypeVar("V")


class KeyValueStore(ABC, Generic[V]):
    """Async key-value store with per-entry TTL and per-key locking."""

    @abstractmethod
    async def get(self, key: str) -> Optional[V]:
        """Return the live value for ``key``; expired entries read as missing."""

    @abstractmethod
    async def set(self, key: str, value: V, ttl_seconds: float) -> None:
        """Store ``value`` and (re)start its TTL."""

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """Remove ``key``. Returns True if a live entry was removed."""

    @abstractmethod
    def lock(self, key: str) -> AsyncContextManager[None]:
        """Exclusive section for one key."""
