"""Call journal schemas for the operator view."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class CallOutcome(str, Enum):
    IN_PROGRESS = "in_progress"
    HANDOFF_SENT = "handoff_sent"
    TRANSFERRED = "transferred"
    ERROR = "error"


class CallEvent(BaseModel):
    """A single timestamped entry in a call record."""

    timestamp: datetime
    kind: str
    message: str


class CallRecord(BaseModel):
    """What happened during one call."""

    call_id: str
    caller: str
    started_at: datetime
    ended_at: Optional[datetime] = None
    outcome: CallOutcome = CallOutcome.IN_PROGRESS
    topics: list[str] = Field(default_factory=list)
    service: Optional[str] = None
    slot: Optional[str] = None
    name: Optional[str] = None
    events: list[CallEvent] = Field(default_factory=list)
