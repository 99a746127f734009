"""
Bounded journal of recent calls.

Keeps the latest N call records in insertion order; the oldest record is
dropped when a new call starts past the limit. Purely informational, the
dialog never reads it back.
"""

import logging
from collections import OrderedDict
from datetime import datetime, timezone
from typing import Optional

from phone_booking.config import settings
from phone_booking.schemas.call_log_schema import CallEvent, CallOutcome, CallRecord
from phone_booking.utils import mask_phone

logger = logging.getLogger(__name__)


class CallLogBook:
    """In-memory ring of CallRecord keyed by call SID."""

    def __init__(self, max_calls: Optional[int] = None) -> None:
        self._max_calls = max_calls or settings.sessions.call_log_size
        self._records: "OrderedDict[str, CallRecord]" = OrderedDict()

    def __len__(self) -> int:
        return len(self._records)

    @staticmethod
    def _now() -> datetime:
        return datetime.now(timezone.utc)

    def start(self, call_id: str, caller: str) -> CallRecord:
        record = CallRecord(call_id=call_id, caller=mask_phone(caller), started_at=self._now())
        self._records[call_id] = record
        self._records.move_to_end(call_id)
        while len(self._records) > self._max_calls:
            self._records.popitem(last=False)
        self.event(call_id, "info", f"Incoming call from {record.caller}")
        return record

    def get(self, call_id: str) -> Optional[CallRecord]:
        return self._records.get(call_id)

    def event(self, call_id: str, kind: str, message: str) -> None:
        record = self._records.get(call_id)
        if record is None:
            return
        record.events.append(CallEvent(timestamp=self._now(), kind=kind, message=message))

    def topic(self, call_id: str, topic: str) -> None:
        record = self._records.get(call_id)
        if record is not None and topic not in record.topics:
            record.topics.append(topic)

    def update(self, call_id: str, **fields: str) -> None:
        """Set descriptive fields (service, slot, name) on the record."""
        record = self._records.get(call_id)
        if record is None:
            return
        for key, value in fields.items():
            setattr(record, key, value)

    def close(self, call_id: str, outcome: CallOutcome) -> None:
        record = self._records.get(call_id)
        if record is None:
            return
        record.ended_at = self._now()
        record.outcome = outcome
        logger.debug("Call record closed with outcome %s", outcome.value)

    def recent(self, limit: int = 50) -> list[CallRecord]:
        """Most recent records first."""
        return list(reversed(self._records.values()))[:limit]
