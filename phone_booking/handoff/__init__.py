from phone_booking.handoff.controller import (
    HandoffOutcome,
    HandoffOutcomeKind,
    WebHandoffController,
)

__all__ = [
    "WebHandoffController",
    "HandoffOutcome",
    "HandoffOutcomeKind",
]
