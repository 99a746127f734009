"""
Outbound text messages through the Twilio REST API.

Sending is best effort: without credentials every send is a logged no-op.
Failures reported by Twilio, and transport errors on the way to it, are
raised as ``NotificationError`` so the caller decides whether they matter.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Optional

from twilio.base.exceptions import TwilioException
from twilio.rest import Client

from phone_booking.config import TelephonyConfig, settings
from phone_booking.tools.errors import NotificationError
from phone_booking.utils import mask_phone

logger = logging.getLogger(__name__)


class NotificationAdapter(ABC):
    """Contract for sending a text message."""

    @abstractmethod
    async def send_text(self, to_number: str, body: str) -> None:
        """Send ``body`` to ``to_number``."""


class TwilioNotifier(NotificationAdapter):
    """SMS sender backed by ``twilio.rest.Client``."""

    def __init__(
        self,
        config: Optional[TelephonyConfig] = None,
        client: Optional[Client] = None,
    ) -> None:
        self._config = config or settings.telephony
        self._client = client
        if self._client is None and self._config.account_sid and self._config.auth_token:
            self._client = Client(self._config.account_sid, self._config.auth_token)

    @property
    def enabled(self) -> bool:
        return self._client is not None and bool(self._config.caller_id)

    async def send_text(self, to_number: str, body: str) -> None:
        if not self.enabled:
            logger.warning("SMS to %s skipped: Twilio not configured", mask_phone(to_number))
            return
        try:
            message = await asyncio.to_thread(
                self._client.messages.create,
                from_=self._config.caller_id,
                to=to_number,
                body=body,
            )
        except (TwilioException, OSError) as exc:
            raise NotificationError(f"SMS to {mask_phone(to_number)} failed: {exc}") from exc
        logger.info("SMS sent to %s (sid=%s)", mask_phone(to_number), getattr(message, "sid", "?"))


class ConsoleNotifier(NotificationAdapter):
    """Collects messages in memory; used by the offline console demo."""

    def __init__(self) -> None:
        self.sent: list[tuple[str, str]] = []

    async def send_text(self, to_number: str, body: str) -> None:
        self.sent.append((to_number, body))
        logger.info("SMS to %s recorded (%d chars)", mask_phone(to_number), len(body))
