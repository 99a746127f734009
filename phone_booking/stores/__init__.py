from phone_booking.stores.base import KeyValueStore
from phone_booking.stores.memory import InMemoryStore
from phone_booking.stores.pending import PendingConfirmationStore
from phone_booking.stores.sessions import SessionStore

__all__ = [
    "KeyValueStore",
    "InMemoryStore",
    "SessionStore",
    "PendingConfirmationStore",
]
