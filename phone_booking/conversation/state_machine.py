"""
Dialog states and the transition table of the booking call.

Each step is its own frozen dataclass carrying only the data collected so
far, so a session can never hold e.g. a selected slot before the slot
menu was answered. Transitions between steps are explicit; anything not
listed in ``TRANSITIONS`` is rejected.

Usage:
    session = CallSession(call_id="CA123", state=Menu(), updated_at=0.0)
    session = advance(session, ChooseService(), now=1.0)
    assert session.step == DialogStep.CHOOSE_SERVICE
"""

import logging
from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import Optional, Union

from phone_booking.tools.services import Service

logger = logging.getLogger(__name__)


class DialogStep(str, Enum):
    """All steps of a booking call."""
    MENU = "menu"
    CHOOSE_SERVICE = "choose_service"
    CHOOSE_SLOT = "choose_slot"
    COLLECT_NAME = "collect_name"
    COLLECT_PHONE = "collect_phone"
    CONFIRM_PHONE = "confirm_phone"


@dataclass(frozen=True)
class Menu:
    step = DialogStep.MENU


@dataclass(frozen=True)
class ChooseService:
    step = DialogStep.CHOOSE_SERVICE


@dataclass(frozen=True)
class ChooseSlot:
    service: Service
    event_type_uri: str
    slots: tuple[datetime, ...]

    step = DialogStep.CHOOSE_SLOT


@dataclass(frozen=True)
class CollectName:
    service: Service
    event_type_uri: str
    selected_slot: datetime
    known_name: Optional[str] = None

    step = DialogStep.COLLECT_NAME


@dataclass(frozen=True)
class CollectPhone:
    service: Service
    event_type_uri: str
    selected_slot: datetime
    name: str
    attempts: int = 0

    step = DialogStep.COLLECT_PHONE


@dataclass(frozen=True)
class ConfirmPhone:
    service: Service
    event_type_uri: str
    selected_slot: datetime
    name: str
    phone: str

    step = DialogStep.CONFIRM_PHONE


DialogState = Union[Menu, ChooseService, ChooseSlot, CollectName, CollectPhone, ConfirmPhone]


# Staying in the same step (re-prompt) is always allowed
TRANSITIONS: dict[DialogStep, frozenset[DialogStep]] = {
    DialogStep.MENU: frozenset({DialogStep.CHOOSE_SERVICE}),
    DialogStep.CHOOSE_SERVICE: frozenset({DialogStep.CHOOSE_SLOT}),
    DialogStep.CHOOSE_SLOT: frozenset({DialogStep.COLLECT_NAME}),
    DialogStep.COLLECT_NAME: frozenset({DialogStep.COLLECT_PHONE}),
    DialogStep.COLLECT_PHONE: frozenset({DialogStep.CONFIRM_PHONE}),
    # handoff sent resets to MENU
    DialogStep.CONFIRM_PHONE: frozenset({DialogStep.COLLECT_PHONE, DialogStep.MENU}),
}


class InvalidTransitionError(Exception):
    """Raised when a transition is not valid from the current step."""


@dataclass(frozen=True)
class CallSession:
    """Dialog state of one phone call."""

    call_id: str
    state: DialogState
    updated_at: float
    caller: str = ""

    @property
    def step(self) -> DialogStep:
        return self.state.step

    @classmethod
    def fresh(cls, call_id: str, now: float, caller: str = "") -> "CallSession":
        """A session at the start of the menu with no collected data."""
        return cls(call_id=call_id, state=Menu(), updated_at=now, caller=caller)


def valid_next_steps(step: DialogStep) -> frozenset[DialogStep]:
    """Return the steps reachable from ``step`` (including itself)."""
    return TRANSITIONS[step] | {step}


def advance(session: CallSession, new_state: DialogState, now: float) -> CallSession:
    """
    Return a copy of ``session`` moved to ``new_state``.

    Raises:
        InvalidTransitionError: If the step change is not in the table.
    """
    old_step = session.step
    if new_state.step not in valid_next_steps(old_step):
        valid = sorted(s.value for s in valid_next_steps(old_step))
        raise InvalidTransitionError(
            f"No valid transition from '{old_step.value}' "
            f"to '{new_state.step.value}'. Valid targets: {valid}"
        )
    if new_state.step != old_step:
        logger.debug("Dialog transition: %s -> %s", old_step.value, new_state.step.value)
    return replace(session, state=new_state, updated_at=now)
