"""Shared utilities: the clock used for expiry math and display formatting."""

import time
from datetime import datetime, timezone
from typing import Optional
from zoneinfo import ZoneInfo

_FR_WEEKDAYS = ["lundi", "mardi", "mercredi", "jeudi", "vendredi", "samedi", "dimanche"]
_FR_MONTHS = [
    "janvier", "février", "mars", "avril", "mai", "juin",
    "juillet", "août", "septembre", "octobre", "novembre", "décembre",
]


class Clock:
    """Time source for the stores and the dialog engine.

    ``monotonic()`` drives every TTL and deadline; ``utcnow()`` is only used
    to compute the slot search window sent to the scheduling service.
    """

    def monotonic(self) -> float:
        return time.monotonic()

    def utcnow(self) -> datetime:
        return datetime.now(timezone.utc)


def format_phone_for_speech(phone: str) -> str:
    """Format a canonical North American number for read-back.

    Examples:
        >>> format_phone_for_speech("+15145551234")
        '(514) 555-1234'
        >>> format_phone_for_speech("anonymous")
        'anonymous'
    """
    digits = phone[2:] if phone.startswith("+1") else phone
    if len(digits) == 10 and digits.isdigit():
        return f"({digits[:3]}) {digits[3:6]}-{digits[6:]}"
    return phone


def mask_phone(phone: Optional[str]) -> str:
    """Hide the middle of a phone number for log lines."""
    if not phone:
        return ""
    phone = phone.strip()
    if len(phone) > 6:
        return phone[:4] + "****" + phone[-2:]
    return "****"


def format_slot_fr(start: datetime, tz_name: str) -> str:
    """Render a slot start time the way the voice prompts speak it.

    Examples:
        >>> from datetime import datetime, timezone
        >>> format_slot_fr(datetime(2025, 1, 14, 15, 0, tzinfo=timezone.utc), "America/Toronto")
        'mardi 14 janvier à 10 h'
    """
    local = start.astimezone(ZoneInfo(tz_name))
    weekday = _FR_WEEKDAYS[local.weekday()]
    month = _FR_MONTHS[local.month - 1]
    clock = f"{local.hour} h" if local.minute == 0 else f"{local.hour} h {local.minute:02d}"
    return f"{weekday} {local.day} {month} à {clock}"


def parse_iso_instant(value: str) -> datetime:
    """Parse an ISO-8601 instant as returned by the scheduling service."""
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
