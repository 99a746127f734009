"""Tests for the bounded call journal."""

from phone_booking.call_log import CallLogBook
from phone_booking.schemas.call_log_schema import CallOutcome


class TestCallLogBook:
    def test_start_masks_caller(self):
        book = CallLogBook(max_calls=5)
        record = book.start("CA1", "+15145551234")
        assert record.caller == "+151****34"
        assert record.outcome == CallOutcome.IN_PROGRESS
        assert record.events[0].kind == "info"

    def test_oldest_calls_are_dropped(self):
        book = CallLogBook(max_calls=3)
        for i in range(5):
            book.start(f"CA{i}", "")
        assert len(book) == 3
        assert book.get("CA0") is None
        assert book.get("CA4") is not None

    def test_recent_is_newest_first(self):
        book = CallLogBook(max_calls=5)
        for i in range(3):
            book.start(f"CA{i}", "")
        assert [r.call_id for r in book.recent()] == ["CA2", "CA1", "CA0"]
        assert [r.call_id for r in book.recent(limit=1)] == ["CA2"]

    def test_topics_are_not_duplicated(self):
        book = CallLogBook(max_calls=5)
        book.start("CA1", "")
        book.topic("CA1", "price")
        book.topic("CA1", "price")
        book.topic("CA1", "hours")
        assert book.get("CA1").topics == ["price", "hours"]

    def test_update_and_close(self):
        book = CallLogBook(max_calls=5)
        book.start("CA1", "")
        book.update("CA1", service="femme", name="Marie Tremblay")
        book.close("CA1", CallOutcome.HANDOFF_SENT)
        record = book.get("CA1")
        assert record.service == "femme"
        assert record.name == "Marie Tremblay"
        assert record.outcome == CallOutcome.HANDOFF_SENT
        assert record.ended_at is not None

    def test_unknown_call_is_ignored(self):
        book = CallLogBook(max_calls=5)
        book.event("nope", "info", "hello")
        book.topic("nope", "price")
        book.update("nope", name="X")
        book.close("nope", CallOutcome.ERROR)
        assert len(book) == 0

    def test_records_serialize_to_json(self):
        book = CallLogBook(max_calls=5)
        book.start("CA1", "+15145551234")
        data = book.get("CA1").model_dump(mode="json")
        assert data["call_id"] == "CA1"
        assert data["outcome"] == "in_progress"
        assert isinstance(data["started_at"], str)
