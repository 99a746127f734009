"""Booking and pending-confirmation data models."""

from typing import Optional

from pydantic import BaseModel, ConfigDict

from phone_booking.tools.services import Service


class BookingRecord(BaseModel):
    """Booking created by the scheduling service."""

    uri: Optional[str] = None
    start_time_iso: str
    name: str
    email: str
    cancel_url: Optional[str] = None
    reschedule_url: Optional[str] = None


class PendingPayload(BaseModel):
    """Immutable snapshot bridging a phone call to the web confirmation step."""

    model_config = ConfigDict(frozen=True)

    phone: str
    name: str
    service: Service
    event_type_uri: str
    start_time_iso: str


class PendingConfirmation(BaseModel):
    """A single-use pending confirmation with its monotonic deadline."""

    model_config = ConfigDict(frozen=True)

    token: str
    expires_at: float
    payload: PendingPayload


class ClientContact(BaseModel):
    """A returning client found in the salon's address book."""

    model_config = ConfigDict(frozen=True)

    name: Optional[str] = None
    email: Optional[str] = None
    resource_name: Optional[str] = None
