"""Tests for the SMS adapters."""

from types import SimpleNamespace

import pytest
import requests
from twilio.base.exceptions import TwilioException

from phone_booking.config import TelephonyConfig
from phone_booking.tools.errors import NotificationError
from phone_booking.tools.notification import ConsoleNotifier, TwilioNotifier

CONFIGURED = TelephonyConfig(account_sid="AC123", auth_token="tok", caller_id="+18195550000")


class FakeMessages:
    def __init__(self, error: Exception = None) -> None:
        self.created: list[dict] = []
        self.error = error

    def create(self, **kwargs):
        if self.error is not None:
            raise self.error
        self.created.append(kwargs)
        return SimpleNamespace(sid="SM123")


class TestTwilioNotifier:
    @pytest.mark.asyncio
    async def test_without_credentials_is_a_no_op(self):
        notifier = TwilioNotifier(TelephonyConfig(account_sid="", auth_token="", caller_id=""))
        assert notifier.enabled is False
        await notifier.send_text("+15145551234", "Bonjour")  # should not raise

    @pytest.mark.asyncio
    async def test_without_sender_number_is_a_no_op(self):
        messages = FakeMessages()
        config = TelephonyConfig(account_sid="AC123", auth_token="tok", caller_id="")
        notifier = TwilioNotifier(config, client=SimpleNamespace(messages=messages))
        await notifier.send_text("+15145551234", "Bonjour")
        assert messages.created == []

    @pytest.mark.asyncio
    async def test_sends_through_client(self):
        messages = FakeMessages()
        notifier = TwilioNotifier(CONFIGURED, client=SimpleNamespace(messages=messages))
        await notifier.send_text("+15145551234", "Bonjour")
        assert messages.created == [
            {"from_": "+18195550000", "to": "+15145551234", "body": "Bonjour"}
        ]

    @pytest.mark.asyncio
    async def test_twilio_error_is_wrapped(self):
        messages = FakeMessages(error=TwilioException("invalid number"))
        notifier = TwilioNotifier(CONFIGURED, client=SimpleNamespace(messages=messages))
        with pytest.raises(NotificationError) as exc_info:
            await notifier.send_text("+15145551234", "Bonjour")
        assert "5551" not in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_connection_failure_is_wrapped(self):
        messages = FakeMessages(error=requests.exceptions.ConnectionError("connection reset by peer"))
        notifier = TwilioNotifier(CONFIGURED, client=SimpleNamespace(messages=messages))
        with pytest.raises(NotificationError) as exc_info:
            await notifier.send_text("+15145551234", "Bonjour")
        assert isinstance(exc_info.value.__cause__, requests.exceptions.ConnectionError)

    @pytest.mark.asyncio
    async def test_socket_error_is_wrapped(self):
        messages = FakeMessages(error=TimeoutError("timed out"))
        notifier = TwilioNotifier(CONFIGURED, client=SimpleNamespace(messages=messages))
        with pytest.raises(NotificationError):
            await notifier.send_text("+15145551234", "Bonjour")


class TestConsoleNotifier:
    @pytest.mark.asyncio
    async def test_records_messages(self):
        notifier = ConsoleNotifier()
        await notifier.send_text("+15145551234", "Bonjour")
        assert notifier.sent == [("+15145551234", "Bonjour")]
