"""
Web handoff: finish a phone booking by collecting the caller's email.

A pending confirmation minted during the call is resolved when the texted
link is opened and finalized when the form is posted. Finalization runs
under the token's lock and consumes the token before the booking is
created, so a link can produce at most one booking even when submitted
twice at once.
"""

import re
from enum import Enum
from typing import Optional

from pydantic import BaseModel

from phone_booking.config import AppConfig, settings
from phone_booking.logging_context import get_call_logger, set_call_id
from phone_booking.prompts.prompt_templates import build_confirmation_sms
from phone_booking.stores.pending import PendingConfirmationStore, token_prefix
from phone_booking.tools.contacts import ContactsAdapter
from phone_booking.tools.errors import ContactsError, NotificationError, SchedulingError
from phone_booking.tools.notification import NotificationAdapter
from phone_booking.tools.scheduling import SchedulingAdapter
from phone_booking.utils import format_slot_fr, mask_phone, parse_iso_instant

logger = get_call_logger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]{2,}$")

INVALID_EMAIL_MESSAGE = "Adresse courriel invalide. Vérifie et réessaie."
BOOKING_FAILED_MESSAGE = (
    "Nous n'avons pas pu créer ton rendez-vous. Appelle-nous pour finaliser ta réservation."
)


class HandoffOutcomeKind(str, Enum):
    FORM = "form"
    SUCCESS = "success"
    ERROR = "error"
    EXPIRED = "expired"


class HandoffOutcome(BaseModel):
    """What the confirmation page should show, with its HTTP status."""

    kind: HandoffOutcomeKind
    status_code: int = 200
    token: str = ""
    name: str = ""
    email: str = ""
    error: Optional[str] = None
    slot_text: Optional[str] = None
    reschedule_url: Optional[str] = None
    cancel_url: Optional[str] = None


def normalize_email(raw: Optional[str]) -> str:
    return (raw or "").strip().lower()


def is_valid_email(email: str) -> bool:
    """
    Loose syntactic check: something@something.tld with a 2+ char tld.

    Examples:
        >>> is_valid_email("marie@example.com")
        True
        >>> is_valid_email("marie@example.c")
        False
    """
    return bool(EMAIL_PATTERN.match(email))


def _expired() -> HandoffOutcome:
    return HandoffOutcome(kind=HandoffOutcomeKind.EXPIRED, status_code=410)


class WebHandoffController:
    """Resolve and finalize pending confirmations."""

    def __init__(
        self,
        pending: PendingConfirmationStore,
        scheduling: SchedulingAdapter,
        notifier: NotificationAdapter,
        config: Optional[AppConfig] = None,
        contacts: Optional[ContactsAdapter] = None,
    ) -> None:
        self._pending = pending
        self._scheduling = scheduling
        self._notifier = notifier
        self._config = config or settings
        self._contacts = contacts

    @property
    def adapters(self) -> tuple[object, ...]:
        """External collaborators used by the controller, for shutdown."""
        return tuple(
            adapter
            for adapter in (self._scheduling, self._notifier, self._contacts)
            if adapter is not None
        )

    async def resolve(self, token: str) -> HandoffOutcome:
        """Show the email form for a live token, or the expired page."""
        set_call_id(token_prefix(token))
        entry = await self._pending.resolve(token)
        if entry is None:
            logger.info("Link opened for a missing or expired token")
            return _expired()
        payload = entry.payload
        return HandoffOutcome(
            kind=HandoffOutcomeKind.FORM,
            token=token,
            name=payload.name,
            slot_text=self._slot_text(payload.start_time_iso),
        )

    async def finalize(self, token: str, raw_email: Optional[str]) -> HandoffOutcome:
        """
        Validate the email, consume the token and create the booking.

        An invalid email leaves the token in place so the form can be
        resubmitted. Once consumed, the token is gone whether or not the
        booking succeeds.
        """
        set_call_id(token_prefix(token))
        email = normalize_email(raw_email)

        async with self._pending.lock(token):
            entry = await self._pending.resolve(token)
            if entry is None:
                logger.info("Finalize attempted on a missing or expired token")
                return _expired()

            payload = entry.payload
            if not is_valid_email(email):
                logger.info("Rejected invalid email input")
                return HandoffOutcome(
                    kind=HandoffOutcomeKind.FORM,
                    status_code=400,
                    token=token,
                    name=payload.name,
                    email=email,
                    error=INVALID_EMAIL_MESSAGE,
                    slot_text=self._slot_text(payload.start_time_iso),
                )

            await self._pending.consume(token)

        try:
            booking = await self._scheduling.create_booking(
                payload.event_type_uri, payload.start_time_iso, payload.name, email
            )
        except SchedulingError:
            logger.exception("Booking creation failed for a consumed token")
            return HandoffOutcome(
                kind=HandoffOutcomeKind.ERROR,
                status_code=500,
                name=payload.name,
                error=BOOKING_FAILED_MESSAGE,
            )

        sms = build_confirmation_sms(
            payload,
            email,
            self._config.scheduling.timezone,
            reschedule_url=booking.reschedule_url,
            cancel_url=booking.cancel_url,
        )
        try:
            await self._notifier.send_text(payload.phone, sms)
        except NotificationError:
            logger.exception("Confirmation SMS to %s failed", mask_phone(payload.phone))

        if self._contacts is not None:
            try:
                await self._contacts.save_contact(payload.name, email, payload.phone)
            except ContactsError:
                logger.exception("Saving client %s failed", mask_phone(payload.phone))

        logger.info("Booking confirmed for %s", payload.name)
        return HandoffOutcome(
            kind=HandoffOutcomeKind.SUCCESS,
            name=payload.name,
            email=email,
            slot_text=self._slot_text(payload.start_time_iso),
            reschedule_url=booking.reschedule_url,
            cancel_url=booking.cancel_url,
        )

    def _slot_text(self, start_time_iso: str) -> str:
        return format_slot_fr(parse_iso_instant(start_time_iso), self._config.scheduling.timezone)
