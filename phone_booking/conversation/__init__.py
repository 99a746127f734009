from phone_booking.conversation.guardrails import HumanHandoffGuardrail, wants_human
from phone_booking.conversation.intents import Intent, match_intent, match_service
from phone_booking.conversation.state_machine import (
    CallSession,
    DialogStep,
    InvalidTransitionError,
    advance,
)

__all__ = [
    "CallSession",
    "DialogStep",
    "InvalidTransitionError",
    "advance",
    "Intent",
    "match_intent",
    "match_service",
    "HumanHandoffGuardrail",
    "wants_human",
]
