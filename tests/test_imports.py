"""Tests for import chains and module integrity.

Ensures all public modules can be imported without errors and
that re-exports from __init__.py files work correctly.
"""


class TestSchemaImports:
    def test_import_booking_schema(self):
        from phone_booking.schemas.booking_schema import (
            BookingRecord, PendingConfirmation, PendingPayload,
        )
        assert BookingRecord is not None
        assert PendingPayload.model_config["frozen"] is True
        assert PendingConfirmation.model_config["frozen"] is True

    def test_import_voice_schema(self):
        from phone_booking.schemas.voice_schema import GatherInput, VoiceResponse
        assert GatherInput.DTMF == "dtmf"
        assert VoiceResponse().actions == []

    def test_import_call_log_schema(self):
        from phone_booking.schemas.call_log_schema import CallOutcome
        assert CallOutcome.HANDOFF_SENT == "handoff_sent"


class TestConversationImports:
    def test_package_reexports(self):
        from phone_booking.conversation import (
            CallSession, DialogStep, HumanHandoffGuardrail, Intent, advance, wants_human,
        )
        session = CallSession.fresh("CA1", 0.0)
        assert session.step == DialogStep.MENU
        assert wants_human("agent")
        assert Intent.BOOK == "book"
        assert HumanHandoffGuardrail is not None
        assert advance is not None

    def test_import_dialog_engine(self):
        from phone_booking.conversation.dialog_engine import DialogEngine
        assert DialogEngine is not None


class TestStoreImports:
    def test_package_reexports(self):
        from phone_booking.stores import (
            InMemoryStore, KeyValueStore, PendingConfirmationStore, SessionStore,
        )
        assert issubclass(InMemoryStore, KeyValueStore)
        assert SessionStore is not None
        assert PendingConfirmationStore is not None


class TestToolImports:
    def test_adapters(self):
        from phone_booking.tools.contacts import ContactsAdapter
        from phone_booking.tools.errors import AdapterError, ContactsError, SchedulingError
        from phone_booking.tools.intent_classifier import IntentClassifier
        from phone_booking.tools.notification import NotificationAdapter
        from phone_booking.tools.scheduling import SchedulingAdapter
        assert issubclass(SchedulingError, AdapterError)
        assert issubclass(ContactsError, AdapterError)
        assert ContactsAdapter is not None
        assert IntentClassifier is not None
        assert NotificationAdapter is not None
        assert SchedulingAdapter is not None


class TestWebImports:
    def test_handoff_package(self):
        from phone_booking.handoff import HandoffOutcomeKind, WebHandoffController
        assert HandoffOutcomeKind.EXPIRED == "expired"
        assert WebHandoffController is not None

    def test_app_factory(self):
        from phone_booking.web.app import build_components, create_app
        engine, controller, call_log = build_components()
        app = create_app(engine=engine, controller=controller, call_log=call_log)
        paths = {route.path for route in app.routes}
        assert {"/voice", "/voice/turn", "/confirm-email/{token}", "/calls", "/health"} <= paths


class TestConsoleDemo:
    def test_scenarios_defined(self):
        from console_demo import ConsoleSession
        assert {"booking", "info", "human", "phone-fallback", "returning"} <= set(ConsoleSession.SCENARIOS)
