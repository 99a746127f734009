"""Shared test fixtures and helpers."""

from dataclasses import replace
from datetime import datetime, timedelta, timezone
from typing import Optional

import pytest

from phone_booking.call_log import CallLogBook
from phone_booking.config import BusinessConfig, SchedulingConfig
from phone_booking.conversation.dialog_engine import DialogEngine
from phone_booking.conversation.state_machine import DialogState
from phone_booking.handoff.controller import WebHandoffController
from phone_booking.schemas.booking_schema import BookingRecord, ClientContact, PendingPayload
from phone_booking.stores.memory import InMemoryStore
from phone_booking.stores.pending import PendingConfirmationStore
from phone_booking.stores.sessions import SessionStore
from phone_booking.tools.contacts import ContactsAdapter
from phone_booking.tools.errors import ContactsError, NotificationError, SchedulingError
from phone_booking.tools.intent_classifier import IntentClassifier
from phone_booking.tools.notification import NotificationAdapter
from phone_booking.tools.scheduling import SchedulingAdapter
from phone_booking.tools.services import Service
from phone_booking.utils import Clock

CALL_ID = "CA0000000000000001"
CALLER = "+18195550100"
FALLBACK_NUMBER = "+18195559999"
PUBLIC_BASE_URL = "https://salon.example"

EVENT_TYPES = {
    Service.MAN_CUT: "https://api.calendly.com/event_types/HOMME",
    Service.WOMAN_CUT: "https://api.calendly.com/event_types/FEMME",
    Service.NONBINARY_CUT: "https://api.calendly.com/event_types/NONBINAIRE",
}

# Monday 13 January 2025, 12:00 UTC
START_UTC = datetime(2025, 1, 13, 12, 0, tzinfo=timezone.utc)

SLOTS = [
    datetime(2025, 1, 14, 15, 0, tzinfo=timezone.utc),
    datetime(2025, 1, 14, 16, 0, tzinfo=timezone.utc),
    datetime(2025, 1, 15, 14, 30, tzinfo=timezone.utc),
    datetime(2025, 1, 15, 19, 0, tzinfo=timezone.utc),
    datetime(2025, 1, 16, 15, 0, tzinfo=timezone.utc),
]


class FakeClock(Clock):
    """Manually advanced clock; monotonic and wall time move together."""

    def __init__(self, start: datetime = START_UTC, monotonic_start: float = 1000.0) -> None:
        self._utc = start
        self._mono = monotonic_start

    def monotonic(self) -> float:
        return self._mono

    def utcnow(self) -> datetime:
        return self._utc

    def advance(self, seconds: float = 0.0, minutes: float = 0.0) -> None:
        delta = seconds + minutes * 60
        self._mono += delta
        self._utc += timedelta(seconds=delta)


class FakeScheduling(SchedulingAdapter):
    """Records calls; returns canned slots or raises on demand."""

    def __init__(self, slots: Optional[list[datetime]] = None) -> None:
        self.slots = list(SLOTS if slots is None else slots)
        self.fail_listing = False
        self.fail_booking = False
        self.list_calls: list[tuple[str, datetime, datetime]] = []
        self.bookings: list[tuple[str, str, str, str]] = []

    async def list_available_start_times(self, event_type_uri, start, end):
        self.list_calls.append((event_type_uri, start, end))
        if self.fail_listing:
            raise SchedulingError("calendar unreachable")
        return list(self.slots)

    async def create_booking(self, event_type_uri, start_time_iso, name, email):
        if self.fail_booking:
            raise SchedulingError("slot taken")
        self.bookings.append((event_type_uri, start_time_iso, name, email))
        return BookingRecord(
            uri="https://api.calendly.com/scheduled_events/EV1/invitees/INV1",
            start_time_iso=start_time_iso,
            name=name,
            email=email,
            cancel_url="https://calendly.com/cancellations/INV1",
            reschedule_url="https://calendly.com/reschedulings/INV1",
        )


class FakeNotifier(NotificationAdapter):
    def __init__(self) -> None:
        self.sent: list[tuple[str, str]] = []
        self.fail = False

    async def send_text(self, to_number: str, body: str) -> None:
        if self.fail:
            raise NotificationError("carrier rejected the message")
        self.sent.append((to_number, body))


class FakeContacts(ContactsAdapter):
    """Address book keyed by phone; records saves, raises on demand."""

    def __init__(self, known: Optional[dict[str, ClientContact]] = None) -> None:
        self.known = dict(known or {})
        self.fail = False
        self.lookups: list[str] = []
        self.saved: list[tuple[str, str, str]] = []

    async def find_by_phone(self, phone: str) -> Optional[ClientContact]:
        self.lookups.append(phone)
        if self.fail:
            raise ContactsError("address book unreachable")
        return self.known.get(phone)

    async def save_contact(self, name: str, email: str, phone: str) -> None:
        if self.fail:
            raise ContactsError("address book unreachable")
        self.saved.append((name, email, phone))


class FakeClassifier(IntentClassifier):
    def __init__(self, result: Service = Service.NONE) -> None:
        self.result = result
        self.error: Optional[Exception] = None
        self.calls: list[str] = []

    async def classify_service(self, text: str) -> Service:
        self.calls.append(text)
        if self.error is not None:
            raise self.error
        return self.result


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def session_backend(clock):
    return InMemoryStore(clock, name="sessions")


@pytest.fixture
def pending_backend(clock):
    return InMemoryStore(clock, name="pending")


@pytest.fixture
def sessions(session_backend, clock):
    return SessionStore(session_backend, clock, ttl_minutes=30)


@pytest.fixture
def pending(pending_backend, clock):
    return PendingConfirmationStore(pending_backend, clock, ttl_minutes=20)


@pytest.fixture
def scheduling():
    return FakeScheduling()


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest.fixture
def classifier():
    return FakeClassifier()


@pytest.fixture
def call_log():
    return CallLogBook(max_calls=10)


@pytest.fixture
def business():
    return BusinessConfig(fallback_number=FALLBACK_NUMBER, public_base_url=PUBLIC_BASE_URL)


@pytest.fixture
def scheduling_config():
    return SchedulingConfig(
        timezone="America/Toronto",
        slot_lead_minutes=5,
        slot_window_days=7,
        max_slots_offered=3,
    )


def make_engine(
    sessions, pending, scheduling, notifier, classifier, clock, call_log,
    business, scheduling_config, event_types=None, contacts=None,
) -> DialogEngine:
    return DialogEngine(
        sessions,
        pending,
        scheduling,
        notifier,
        classifier,
        clock=clock,
        event_types=dict(EVENT_TYPES) if event_types is None else event_types,
        call_log=call_log,
        business=business,
        scheduling_config=scheduling_config,
        max_phone_attempts=3,
        contacts=contacts,
    )


@pytest.fixture
def engine(sessions, pending, scheduling, notifier, classifier, clock, call_log,
           business, scheduling_config):
    return make_engine(sessions, pending, scheduling, notifier, classifier, clock,
                       call_log, business, scheduling_config)


@pytest.fixture
def controller(pending, scheduling, notifier):
    return WebHandoffController(pending, scheduling, notifier)


def make_payload(**overrides) -> PendingPayload:
    """Helper to create a PendingPayload with sensible defaults."""
    values = dict(
        phone="+15145551234",
        name="Marie Tremblay",
        service=Service.WOMAN_CUT,
        event_type_uri=EVENT_TYPES[Service.WOMAN_CUT],
        start_time_iso=SLOTS[0].isoformat(),
    )
    values.update(overrides)
    return PendingPayload(**values)


async def put_state(sessions: SessionStore, state: DialogState, call_id: str = CALL_ID,
                    caller: str = CALLER) -> None:
    """Place a call directly at ``state``, bypassing the dialog."""
    async with sessions.transaction(call_id, caller) as txn:
        txn.commit(replace(txn.session, state=state))


async def drive(engine: DialogEngine, *turns: str, call_id: str = CALL_ID, caller: str = CALLER):
    """Start a call and feed it turns; ``#N`` sends digits N, anything else is speech."""
    response = await engine.start_call(call_id, caller)
    for turn in turns:
        if turn.startswith("#"):
            response = await engine.handle_turn(call_id, caller, digits=turn[1:])
        else:
            response = await engine.handle_turn(call_id, caller, speech=turn)
    return response
