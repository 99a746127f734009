"""
Offline console demo — plays a booking call without any API keys.

Drives the real dialog engine, stores and web handoff controller with the
mock calendar, an in-memory SMS outbox, an in-memory client address book
and keyword-only service matching.
No Twilio, no Calendly, no OpenAI, no Google, no network calls.

When the line waits for a keypad choice, whatever you type is sent as
digits; otherwise it is sent as recognized speech.

Usage:
    python console_demo.py
    python console_demo.py --scenario booking
    python console_demo.py --scenario phone-fallback
    python console_demo.py --scenario returning
"""

import argparse
import asyncio
import uuid
from typing import Optional

from phone_booking.config import settings
from phone_booking.conversation.dialog_engine import DialogEngine
from phone_booking.handoff.controller import WebHandoffController
from phone_booking.schemas.booking_schema import ClientContact
from phone_booking.schemas.voice_schema import GatherInput, VoiceResponse
from phone_booking.stores.pending import PendingConfirmationStore
from phone_booking.stores.sessions import SessionStore
from phone_booking.tools.contacts import InMemoryContacts
from phone_booking.tools.intent_classifier import NullClassifier
from phone_booking.tools.notification import ConsoleNotifier
from phone_booking.tools.scheduling import MockScheduling
from phone_booking.tools.services import BOOKABLE_SERVICES

BLUE = "\033[94m"
GREEN = "\033[92m"
YELLOW = "\033[93m"
RED = "\033[91m"
DIM = "\033[2m"
RESET = "\033[0m"
BOLD = "\033[1m"

DEMO_CALLER = "+18195550100"
RETURNING_CALLER = "+18195550142"


class ConsoleSession:
    """One simulated phone call in the terminal."""

    # Pre-scripted scenarios for --scenario flag
    SCENARIOS: dict[str, list[str]] = {
        "booking": [
            "je voudrais prendre rendez-vous",
            "une coupe pour femme",
            "2",
            "marie tremblay",
            "514 555 1234",
            "1",
        ],
        "info": [
            "c'est combien une coupe?",
            "c'est quoi votre adresse?",
            "quelles sont vos heures?",
        ],
        "human": [
            "rendez-vous",
            "je veux parler à un humain",
        ],
        "phone-fallback": [
            "rendez-vous",
            "homme",
            "1",
            "jean gagnon",
            "euh je sais pas",
            "attends",
            "non",
            "1",
        ],
        "returning": [
            "rendez-vous",
            "femme",
            "1",
            "oui",
            "819 555 0142",
            "1",
        ],
    }

    SCENARIO_CALLERS: dict[str, str] = {"returning": RETURNING_CALLER}

    DEMO_EMAIL = "client@example.com"
    MAX_INPUT_LENGTH = 500

    def __init__(self) -> None:
        self.call_id = f"CA{uuid.uuid4().hex[:16]}"
        self.caller = DEMO_CALLER
        self.notifier = ConsoleNotifier()
        self.scheduling = MockScheduling()
        self.sessions = SessionStore()
        self.pending = PendingConfirmationStore()
        self.contacts = InMemoryContacts(
            {RETURNING_CALLER: ClientContact(name="Sophie Lavoie", email="sophie@example.com")}
        )
        self.engine = DialogEngine(
            self.sessions,
            self.pending,
            self.scheduling,
            self.notifier,
            NullClassifier(),
            event_types={svc: f"mock://event_types/{svc.value}" for svc in BOOKABLE_SERVICES},
            contacts=self.contacts,
        )
        self.controller = WebHandoffController(
            self.pending, self.scheduling, self.notifier, contacts=self.contacts
        )
        self._expects: Optional[GatherInput] = None
        self._finished = False
        self._sms_seen = 0

    def line_say(self, response: VoiceResponse) -> None:
        print(f"{GREEN}{BOLD}[Ligne]{RESET} {GREEN}{response.spoken_text}{RESET}")
        if response.is_transfer:
            print(f"{YELLOW}  >> Transfert vers {settings.business.fallback_number}{RESET}")
        if response.ends_call:
            print(f"{DIM}  >> Raccroché{RESET}")
        self._expects = response.expects
        self._finished = response.ends_call or response.is_transfer or self._expects is None
        self._show_new_sms()

    def system_log(self, text: str) -> None:
        print(f"{DIM}  >> {text}{RESET}")

    def _show_new_sms(self) -> None:
        for to_number, body in self.notifier.sent[self._sms_seen:]:
            print(f"{YELLOW}  [SMS -> {to_number}]{RESET}")
            for line in body.splitlines():
                print(f"{YELLOW}    {line}{RESET}")
        self._sms_seen = len(self.notifier.sent)

    async def _send(self, text: str) -> None:
        if self._expects == GatherInput.DTMF:
            response = await self.engine.handle_turn(self.call_id, self.caller, digits=text)
        else:
            response = await self.engine.handle_turn(self.call_id, self.caller, speech=text)
        self.line_say(response)
        if not self._finished:
            session = await self.sessions.get(self.call_id, self.caller)
            self.system_log(f"Step: {session.step.value}")

    async def _finish_on_web(self) -> None:
        """Follow the texted link the way the caller's browser would."""
        link = next(
            (body for _, body in reversed(self.notifier.sent) if "/confirm-email/" in body),
            None,
        )
        if link is None:
            return
        token = link.rsplit("/confirm-email/", 1)[1].split()[0]
        print(f"\n{BOLD}  Lien ouvert dans le navigateur{RESET}")
        form = await self.controller.resolve(token)
        self.system_log(f"Page: {form.kind.value} ({form.status_code}) pour {form.name}")
        print(f"{BLUE}[Courriel] {RESET}{self.DEMO_EMAIL}")
        outcome = await self.controller.finalize(token, self.DEMO_EMAIL)
        self.system_log(f"Page: {outcome.kind.value} ({outcome.status_code})")
        self.system_log(f"Clients au carnet : {len(self.contacts.contacts)}")
        self._show_new_sms()

    def _banner(self, title: str) -> None:
        print()
        print(f"{BOLD}{'=' * 60}{RESET}")
        print(f"{BOLD}  LIGNE DE RÉSERVATION - {title}{RESET}")
        print(f"{BOLD}  Salon : {settings.business.name}{RESET}")
        print(f"{BOLD}{'=' * 60}{RESET}")
        print()

    def _summary(self) -> None:
        record = self.engine.call_log.get(self.call_id)
        print(f"\n{BOLD}{'=' * 60}{RESET}")
        if record is not None:
            print(f"{DIM}  Outcome: {record.outcome.value}{RESET}")
            print(f"{DIM}  Topics: {', '.join(record.topics) or '-'}{RESET}")
            for event in record.events:
                print(f"{DIM}  {event.kind}: {event.message}{RESET}")
        print(f"{BOLD}{'=' * 60}{RESET}")

    async def run_scenario(self, scenario: str) -> None:
        """Auto-play a pre-scripted scenario for demo purposes."""
        steps = self.SCENARIOS.get(scenario)
        if not steps:
            print(f"{RED}Unknown scenario: {scenario}{RESET}")
            return

        self.caller = self.SCENARIO_CALLERS.get(scenario, DEMO_CALLER)
        self._banner(f"Scénario : {scenario}")
        self.line_say(await self.engine.start_call(self.call_id, self.caller))

        for step in steps:
            if self._finished:
                break
            print(f"\n{BLUE}[Appelant] {RESET}{step}")
            await self._send(step)

        await self._finish_on_web()
        self._summary()

    async def run(self) -> None:
        self._banner("Démo console (tape 'quit' pour sortir)")
        self.line_say(await self.engine.start_call(self.call_id, self.caller))

        while not self._finished:
            user_input = (await asyncio.to_thread(input, f"\n{BLUE}[Appelant] {RESET}")).strip()
            if user_input.lower() in ("quit", "exit", "q"):
                print(f"\n{DIM}Session terminée.{RESET}")
                return
            if len(user_input) > self.MAX_INPUT_LENGTH:
                user_input = user_input[: self.MAX_INPUT_LENGTH]
            await self._send(user_input)

        await self._finish_on_web()
        self._summary()


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Offline console demo")
    parser.add_argument(
        "--scenario",
        choices=sorted(ConsoleSession.SCENARIOS),
        default=None,
        help="Auto-play a pre-scripted scenario instead of interactive mode",
    )
    args = parser.parse_args(argv)

    session = ConsoleSession()
    if args.scenario:
        asyncio.run(session.run_scenario(args.scenario))
    else:
        asyncio.run(session.run())


if __name__ == "__main__":
    main()
