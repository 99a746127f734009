"""
Dialog engine: one booking call driven across stateless webhook turns.

Each turn loads the call's session under its key lock, runs the handler
for the current step, and commits the resulting session only when the
handler returns normally. Adapter failures abort the turn: nothing is
committed and the caller is transferred to a human.

The human-handoff check runs before any step logic and never touches the
session.
"""

from dataclasses import dataclass, replace
from datetime import timedelta
from typing import Awaitable, Callable, Optional

from phone_booking.call_log import CallLogBook
from phone_booking.config import BusinessConfig, SchedulingConfig, settings
from phone_booking.conversation.guardrails import wants_human
from phone_booking.conversation.intents import (
    INFO_INTENTS,
    INTENT_TO_SERVICE,
    Intent,
    match_intent,
    match_service,
)
from phone_booking.conversation.normalizers import (
    canonicalize_name,
    canonicalize_phone,
    is_affirmative,
)
from phone_booking.conversation.state_machine import (
    CallSession,
    ChooseService,
    ChooseSlot,
    CollectName,
    CollectPhone,
    ConfirmPhone,
    DialogState,
    DialogStep,
    Menu,
    advance,
)
from phone_booking.logging_context import get_call_logger, set_call_id
from phone_booking.prompts import system_prompts as lines
from phone_booking.prompts.prompt_templates import (
    build_handoff_link,
    build_handoff_sms,
    build_known_name_prompt,
    build_phone_confirmation_prompt,
    build_slot_menu_prompt,
)
from phone_booking.schemas.booking_schema import PendingPayload
from phone_booking.schemas.call_log_schema import CallOutcome
from phone_booking.schemas.voice_schema import VoiceResponse
from phone_booking.stores.pending import PendingConfirmationStore
from phone_booking.stores.sessions import SessionStore
from phone_booking.tools.contacts import ContactsAdapter
from phone_booking.tools.errors import AdapterError, ContactsError, NotificationError
from phone_booking.tools.intent_classifier import IntentClassifier
from phone_booking.tools.notification import NotificationAdapter
from phone_booking.tools.scheduling import SchedulingAdapter
from phone_booking.tools.services import Service, configured_event_types, service_label
from phone_booking.utils import Clock, format_slot_fr, mask_phone

logger = get_call_logger(__name__)

VALID_SLOT_DIGITS = ("1", "2", "3")
CORRECT_PHONE_DIGIT = "2"

_INFO_LINES: dict[Intent, str] = {
    Intent.PRICE: lines.PRICE_INFO,
    Intent.ADDRESS: lines.ADDRESS_INFO,
    Intent.HOURS: lines.HOURS_INFO,
}


@dataclass(frozen=True)
class TurnInput:
    """What the voice gateway recognized this turn."""
    speech: str = ""
    digits: str = ""


@dataclass(frozen=True)
class TurnResult:
    """Session to commit and document to return."""
    session: CallSession
    response: VoiceResponse


class DialogEngine:
    """State machine for the phone booking dialog."""

    def __init__(
        self,
        sessions: SessionStore,
        pending: PendingConfirmationStore,
        scheduling: SchedulingAdapter,
        notifier: NotificationAdapter,
        classifier: IntentClassifier,
        clock: Optional[Clock] = None,
        event_types: Optional[dict[Service, str]] = None,
        call_log: Optional[CallLogBook] = None,
        business: Optional[BusinessConfig] = None,
        scheduling_config: Optional[SchedulingConfig] = None,
        max_phone_attempts: Optional[int] = None,
        contacts: Optional[ContactsAdapter] = None,
    ) -> None:
        self._sessions = sessions
        self._pending = pending
        self._scheduling = scheduling
        self._notifier = notifier
        self._classifier = classifier
        self._clock = clock or Clock()
        self._event_types = event_types if event_types is not None else configured_event_types()
        self._call_log = call_log if call_log is not None else CallLogBook()
        self._business = business or settings.business
        self._scheduling_config = scheduling_config or settings.scheduling
        self._max_phone_attempts = max_phone_attempts or settings.sessions.max_phone_attempts
        self._contacts = contacts

        self._handlers: dict[
            DialogStep, Callable[[CallSession, TurnInput], Awaitable[TurnResult]]
        ] = {
            DialogStep.MENU: self._on_menu,
            DialogStep.CHOOSE_SERVICE: self._on_choose_service,
            DialogStep.CHOOSE_SLOT: self._on_choose_slot,
            DialogStep.COLLECT_NAME: self._on_collect_name,
            DialogStep.COLLECT_PHONE: self._on_collect_phone,
            DialogStep.CONFIRM_PHONE: self._on_confirm_phone,
        }

    @property
    def call_log(self) -> CallLogBook:
        return self._call_log

    @property
    def adapters(self) -> tuple[object, ...]:
        """External collaborators used by the engine, for shutdown."""
        return tuple(
            adapter
            for adapter in (self._scheduling, self._notifier, self._classifier, self._contacts)
            if adapter is not None
        )

    # ------------------------------------------------------------------ #
    # Entry points
    # ------------------------------------------------------------------ #

    async def start_call(self, call_id: str, caller: str = "") -> VoiceResponse:
        """Reset the call's session and greet the caller with the menu."""
        set_call_id(call_id)
        await self._sessions.reset(call_id, caller)
        self._call_log.start(call_id, caller)
        logger.info("Call started from %s", mask_phone(caller))
        return VoiceResponse().say(lines.GREETING).gather_speech(lines.MENU_SUMMARY)

    async def handle_turn(
        self,
        call_id: str,
        caller: str = "",
        speech: Optional[str] = None,
        digits: Optional[str] = None,
    ) -> VoiceResponse:
        """Advance the dialog by one gateway event and return what to do next."""
        set_call_id(call_id)
        turn = TurnInput(speech=(speech or "").strip(), digits=(digits or "").strip())

        if turn.speech and wants_human(turn.speech):
            logger.info("Caller asked for a human")
            self._call_log.event(call_id, "transfer", "Caller asked for a human")
            return self._transfer(call_id)

        async with self._sessions.transaction(call_id, caller) as txn:
            step = txn.session.step
            logger.debug(
                "Turn at %s (speech=%r, digits=%r)", step.value, turn.speech, turn.digits
            )
            try:
                result = await self._handlers[step](txn.session, turn)
            except AdapterError as exc:
                logger.exception("Adapter failure at %s, transferring caller", step.value)
                self._call_log.event(call_id, "error", f"{type(exc).__name__}: {exc}")
                return self._transfer(call_id, prefix=lines.TECHNICAL_PROBLEM)
            txn.commit(result.session)
            return result.response

    # ------------------------------------------------------------------ #
    # Step handlers
    # ------------------------------------------------------------------ #

    async def _on_menu(self, session: CallSession, turn: TurnInput) -> TurnResult:
        intent = match_intent(turn.speech)

        if intent in INFO_INTENTS:
            self._call_log.topic(session.call_id, intent.value)
            response = VoiceResponse().say(_INFO_LINES[intent]).gather_speech(lines.MENU_FOLLOW_UP)
            return TurnResult(self._stay(session), response)

        if intent == Intent.BOOK or intent in INTENT_TO_SERVICE:
            self._call_log.topic(session.call_id, Intent.BOOK.value)
            return TurnResult(
                self._move(session, ChooseService()),
                VoiceResponse().gather_speech(lines.ASK_SERVICE),
            )

        return TurnResult(self._stay(session), VoiceResponse().gather_speech(lines.MENU_SUMMARY))

    async def _on_choose_service(self, session: CallSession, turn: TurnInput) -> TurnResult:
        service = match_service(turn.speech)
        if service == Service.NONE and turn.speech:
            service = await self._classifier.classify_service(turn.speech)
        if service == Service.NONE:
            return TurnResult(
                self._stay(session), VoiceResponse().gather_speech(lines.SERVICE_NOT_UNDERSTOOD)
            )

        self._call_log.update(session.call_id, service=service.value)
        event_type_uri = self._event_types.get(service)
        if not event_type_uri:
            logger.warning("Service '%s' has no scheduling handle", service.value)
            return TurnResult(
                self._stay(session),
                self._transfer(session.call_id, prefix=lines.SERVICE_NOT_CONFIGURED, announce=False),
            )

        cfg = self._scheduling_config
        window_start = self._clock.utcnow() + timedelta(minutes=cfg.slot_lead_minutes)
        window_end = window_start + timedelta(days=cfg.slot_window_days)
        available = await self._scheduling.list_available_start_times(
            event_type_uri, window_start, window_end
        )
        slots = tuple(available[: cfg.max_slots_offered])
        logger.info("%d slot(s) offered for %s", len(slots), service.value)

        if not slots:
            self._call_log.event(session.call_id, "info", f"No slots for {service.value}")
            return TurnResult(
                self._stay(session), VoiceResponse().gather_speech(lines.NO_SLOTS_AVAILABLE)
            )

        prompt = build_slot_menu_prompt(service, slots, cfg.timezone)
        return TurnResult(
            self._move(session, ChooseSlot(service, event_type_uri, slots)),
            VoiceResponse().gather_digit(prompt),
        )

    async def _on_choose_slot(self, session: CallSession, turn: TurnInput) -> TurnResult:
        state = session.state
        assert isinstance(state, ChooseSlot)
        if turn.digits in VALID_SLOT_DIGITS and int(turn.digits) <= len(state.slots):
            selected = state.slots[int(turn.digits) - 1]
            self._call_log.update(
                session.call_id, slot=format_slot_fr(selected, self._scheduling_config.timezone)
            )
            known_name = await self._name_on_file(session.caller)
            prompt = build_known_name_prompt(known_name) if known_name else lines.ASK_NAME
            next_state = CollectName(state.service, state.event_type_uri, selected, known_name)
            return TurnResult(
                self._move(session, next_state), VoiceResponse().gather_speech(prompt)
            )

        prompt = build_slot_menu_prompt(state.service, state.slots, self._scheduling_config.timezone)
        return TurnResult(
            self._stay(session),
            VoiceResponse().gather_digit(f"{lines.SLOT_NOT_UNDERSTOOD} {prompt}"),
        )

    async def _on_collect_name(self, session: CallSession, turn: TurnInput) -> TurnResult:
        state = session.state
        assert isinstance(state, CollectName)
        if state.known_name and is_affirmative(turn.speech):
            name = state.known_name
        else:
            name = canonicalize_name(turn.speech)
        if name is None:
            return TurnResult(
                self._stay(session), VoiceResponse().gather_speech(lines.NAME_NOT_UNDERSTOOD)
            )

        self._call_log.update(session.call_id, name=name)
        next_state = CollectPhone(state.service, state.event_type_uri, state.selected_slot, name)
        return TurnResult(
            self._move(session, next_state), VoiceResponse().gather_speech(lines.ASK_PHONE)
        )

    async def _on_collect_phone(self, session: CallSession, turn: TurnInput) -> TurnResult:
        state = session.state
        assert isinstance(state, CollectPhone)
        phone = canonicalize_phone(turn.speech)

        if phone is None:
            attempts = state.attempts + 1
            if attempts < self._max_phone_attempts:
                logger.info("Phone capture failed (attempt %d)", attempts)
                return TurnResult(
                    self._move(session, replace(state, attempts=attempts)),
                    VoiceResponse().gather_speech(lines.PHONE_NOT_UNDERSTOOD),
                )
            phone = canonicalize_phone(session.caller) or session.caller
            logger.info("Phone capture failed %d times, using caller id", attempts)
            self._call_log.event(session.call_id, "info", "Phone fell back to caller id")

        next_state = ConfirmPhone(
            state.service, state.event_type_uri, state.selected_slot, state.name, phone
        )
        return TurnResult(
            self._move(session, next_state),
            VoiceResponse().gather_digit(build_phone_confirmation_prompt(phone)),
        )

    async def _on_confirm_phone(self, session: CallSession, turn: TurnInput) -> TurnResult:
        state = session.state
        assert isinstance(state, ConfirmPhone)
        if turn.digits == CORRECT_PHONE_DIGIT:
            next_state = CollectPhone(
                state.service, state.event_type_uri, state.selected_slot, state.name
            )
            return TurnResult(
                self._move(session, next_state), VoiceResponse().gather_speech(lines.ASK_PHONE)
            )

        await self._send_handoff(state)
        self._call_log.event(
            session.call_id, "booking", f"Handoff link sent for {service_label(state.service)}"
        )
        self._call_log.close(session.call_id, CallOutcome.HANDOFF_SENT)
        return TurnResult(
            self._move(session, Menu()),
            VoiceResponse().say(lines.CLOSING).hangup(),
        )

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #

    async def _send_handoff(self, state: ConfirmPhone) -> None:
        """Mint the pending confirmation and text its link to the caller."""
        payload = PendingPayload(
            phone=state.phone,
            name=state.name,
            service=state.service,
            event_type_uri=state.event_type_uri,
            start_time_iso=state.selected_slot.isoformat(),
        )
        entry = await self._pending.create(payload)
        link = build_handoff_link(entry.token, self._business.public_base_url)
        body = build_handoff_sms(
            payload, link, self._pending.ttl_minutes, self._scheduling_config.timezone
        )
        try:
            await self._notifier.send_text(state.phone, body)
        except NotificationError:
            await self._pending.discard(entry.token)
            raise
        logger.info("Handoff link sent to %s", mask_phone(state.phone))

    async def _name_on_file(self, caller: str) -> Optional[str]:
        """Name of a returning client calling from a known number, if any."""
        if self._contacts is None:
            return None
        try:
            contact = await self._contacts.find_by_phone(caller)
        except ContactsError:
            logger.warning("Client lookup failed, asking for the name", exc_info=True)
            return None
        if contact is None:
            return None
        return canonicalize_name(contact.name)

    def _stay(self, session: CallSession) -> CallSession:
        return advance(session, session.state, self._clock.monotonic())

    def _move(self, session: CallSession, new_state: DialogState) -> CallSession:
        return advance(session, new_state, self._clock.monotonic())

    def _transfer(
        self, call_id: str, prefix: Optional[str] = None, announce: bool = True
    ) -> VoiceResponse:
        """Dial the salon, or end the call when no fallback number is configured."""
        response = VoiceResponse()
        if prefix:
            response.say(prefix)
        if self._business.fallback_number:
            if announce:
                response.say(lines.TRANSFER)
            response.dial(self._business.fallback_number)
            self._call_log.close(call_id, CallOutcome.TRANSFERRED)
        else:
            logger.warning("No FALLBACK_NUMBER configured, ending call instead of transfer")
            response.say(lines.TRANSFER_UNAVAILABLE).hangup()
            self._call_log.close(call_id, CallOutcome.ERROR)
        return response
