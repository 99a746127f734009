"""
Scheduling adapters: list available start times and create bookings.

``CalendlyScheduling`` talks to the Calendly v2 API over httpx.
``MockScheduling`` generates a deterministic salon calendar and keeps
bookings in memory; it is used for the console demo and whenever no
Calendly token is configured.
"""

import logging
import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import httpx

from phone_booking.config import SchedulingConfig, settings
from phone_booking.schemas.booking_schema import BookingRecord
from phone_booking.tools.errors import SchedulingError
from phone_booking.utils import parse_iso_instant

logger = logging.getLogger(__name__)

# Calendly rejects availability windows longer than 7 days
CALENDLY_MAX_WINDOW = timedelta(days=7)


class SchedulingAdapter(ABC):
    """Contract the dialog engine and the web handoff rely on."""

    @abstractmethod
    async def list_available_start_times(
        self, event_type_uri: str, start: datetime, end: datetime
    ) -> list[datetime]:
        """Return available start instants in ascending order."""

    @abstractmethod
    async def create_booking(
        self, event_type_uri: str, start_time_iso: str, name: str, email: str
    ) -> BookingRecord:
        """Book ``start_time_iso`` for the invitee and return the record."""


class CalendlyScheduling(SchedulingAdapter):
    """Calendly v2 API client."""

    def __init__(
        self,
        config: Optional[SchedulingConfig] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._config = config or settings.scheduling
        self._client = client or httpx.AsyncClient(
            base_url=self._config.api_base_url,
            timeout=self._config.request_timeout_sec,
        )
        self._headers = {
            "Authorization": f"Bearer {self._config.api_token}",
            "Content-Type": "application/json",
        }

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        try:
            response = await self._client.request(method, path, headers=self._headers, **kwargs)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as exc:
            raise SchedulingError(
                f"Calendly {method} {path} returned {exc.response.status_code}: "
                f"{exc.response.text[:200]}"
            ) from exc
        except (httpx.HTTPError, ValueError) as exc:
            raise SchedulingError(f"Calendly {method} {path} failed: {exc}") from exc

    async def list_available_start_times(
        self, event_type_uri: str, start: datetime, end: datetime
    ) -> list[datetime]:
        slots: list[datetime] = []
        cursor = start
        while cursor < end:
            chunk_end = min(cursor + CALENDLY_MAX_WINDOW, end)
            data = await self._request(
                "GET",
                "/event_type_available_times",
                params={
                    "event_type": event_type_uri,
                    "start_time": cursor.isoformat(),
                    "end_time": chunk_end.isoformat(),
                },
            )
            try:
                chunk = [
                    parse_iso_instant(item["start_time"])
                    for item in data.get("collection") or []
                    if item.get("start_time")
                ]
            except (AttributeError, TypeError, ValueError) as exc:
                raise SchedulingError(f"Calendly availability unreadable: {exc!r}") from exc
            logger.debug(
                "Calendly returned %d slots between %s and %s",
                len(chunk), cursor.isoformat(), chunk_end.isoformat(),
            )
            slots.extend(chunk)
            cursor = chunk_end
        return sorted(slots)

    async def _event_location(self, event_type_uri: str) -> Optional[dict[str, Any]]:
        event_uuid = event_type_uri.rstrip("/").split("/")[-1]
        data = await self._request("GET", f"/event_types/{event_uuid}")
        try:
            locations = data.get("resource", {}).get("locations") or []
            location = locations[0] if locations else None
        except (AttributeError, TypeError, KeyError) as exc:
            raise SchedulingError(f"Calendly event type unreadable: {exc!r}") from exc
        return location if isinstance(location, dict) else None

    async def create_booking(
        self, event_type_uri: str, start_time_iso: str, name: str, email: str
    ) -> BookingRecord:
        body: dict[str, Any] = {
            "event_type": event_type_uri,
            "start_time": start_time_iso,
            "invitee": {"name": name, "email": email, "timezone": self._config.timezone},
        }
        location = await self._event_location(event_type_uri)
        if location:
            body["location"] = {"kind": location.get("kind")}
            if location.get("location"):
                body["location"]["location"] = location["location"]

        data = await self._request("POST", "/invitees", json=body)
        try:
            resource = data.get("resource", {})
            record = BookingRecord(
                uri=resource.get("uri"),
                start_time_iso=start_time_iso,
                name=name,
                email=email,
                cancel_url=resource.get("cancel_url") or None,
                reschedule_url=resource.get("reschedule_url") or None,
            )
        except (AttributeError, ValueError) as exc:
            raise SchedulingError(f"Calendly invitee response unreadable: {exc!r}") from exc
        logger.info("Calendly booking created for %s at %s", name, start_time_iso)
        return record


# Mock calendar parameters
MOCK_OPENING_HOURS = (9, 10, 11, 13, 14, 15, 16)
MOCK_CLOSED_WEEKDAYS = (0, 6)  # Monday, Sunday


class MockScheduling(SchedulingAdapter):
    """Deterministic in-memory calendar.

    Every opening hour on open days is free unless already booked.
    """

    def __init__(self, fail_bookings: bool = False) -> None:
        self._fail_bookings = fail_bookings
        self.bookings: dict[str, BookingRecord] = {}

    def _booked_starts(self, event_type_uri: str) -> set[str]:
        return {
            ref.split("|", 1)[1]
            for ref in self.bookings
            if ref.startswith(event_type_uri + "|")
        }

    async def list_available_start_times(
        self, event_type_uri: str, start: datetime, end: datetime
    ) -> list[datetime]:
        booked = self._booked_starts(event_type_uri)
        slots: list[datetime] = []
        day = start.astimezone(timezone.utc).replace(hour=0, minute=0, second=0, microsecond=0)
        while day < end:
            if day.weekday() not in MOCK_CLOSED_WEEKDAYS:
                for hour in MOCK_OPENING_HOURS:
                    slot = day.replace(hour=hour + 5)  # opening hours in UTC-5
                    if start <= slot < end and slot.isoformat() not in booked:
                        slots.append(slot)
            day += timedelta(days=1)
        return slots

    async def create_booking(
        self, event_type_uri: str, start_time_iso: str, name: str, email: str
    ) -> BookingRecord:
        if self._fail_bookings:
            raise SchedulingError("Mock calendar refused the booking")
        key = f"{event_type_uri}|{parse_iso_instant(start_time_iso).isoformat()}"
        if key in self.bookings:
            raise SchedulingError(f"Slot {start_time_iso} is no longer available")
        ref = uuid.uuid4().hex[:8]
        record = BookingRecord(
            uri=f"mock://bookings/{ref}",
            start_time_iso=start_time_iso,
            name=name,
            email=email,
            cancel_url=f"mock://bookings/{ref}/cancel",
            reschedule_url=f"mock://bookings/{ref}/reschedule",
        )
        self.bookings[key] = record
        logger.info("Mock booking %s created for %s at %s", ref, name, start_time_iso)
        return record


def build_scheduling_adapter(config: Optional[SchedulingConfig] = None) -> SchedulingAdapter:
    """Return the Calendly client when a token is configured, else the mock calendar."""
    cfg = config or settings.scheduling
    if cfg.api_token:
        return CalendlyScheduling(cfg)
    logger.warning("CALENDLY_API_TOKEN not set; using the mock calendar")
    return MockScheduling()
