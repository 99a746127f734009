"""
FastAPI application factory.

The dialog engine, the handoff controller and the call journal share one
set of stores and adapters, chosen from configuration: real vendors when
credentials are present, in-process stand-ins otherwise.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Iterable, Optional

from fastapi import FastAPI

from phone_booking.call_log import CallLogBook
from phone_booking.config import AppConfig, settings
from phone_booking.conversation.dialog_engine import DialogEngine
from phone_booking.handoff.controller import WebHandoffController
from phone_booking.stores.pending import PendingConfirmationStore
from phone_booking.stores.sessions import SessionStore
from phone_booking.tools.contacts import build_contacts_adapter
from phone_booking.tools.intent_classifier import build_intent_classifier
from phone_booking.tools.notification import TwilioNotifier
from phone_booking.tools.scheduling import build_scheduling_adapter
from phone_booking.web.routes import router

logger = logging.getLogger(__name__)


def build_components(
    config: Optional[AppConfig] = None,
) -> tuple[DialogEngine, WebHandoffController, CallLogBook]:
    """Wire stores and adapters from configuration."""
    cfg = config or settings
    sessions = SessionStore(ttl_minutes=cfg.sessions.session_ttl_minutes)
    pending = PendingConfirmationStore(ttl_minutes=cfg.sessions.pending_ttl_minutes)
    scheduling = build_scheduling_adapter(cfg.scheduling)
    notifier = TwilioNotifier(cfg.telephony)
    classifier = build_intent_classifier(cfg.model)
    contacts = build_contacts_adapter(cfg.contacts)
    call_log = CallLogBook(cfg.sessions.call_log_size)

    engine = DialogEngine(
        sessions,
        pending,
        scheduling,
        notifier,
        classifier,
        call_log=call_log,
        business=cfg.business,
        scheduling_config=cfg.scheduling,
        max_phone_attempts=cfg.sessions.max_phone_attempts,
        contacts=contacts,
    )
    controller = WebHandoffController(pending, scheduling, notifier, cfg, contacts=contacts)
    return engine, controller, call_log


async def close_adapters(adapters: Iterable[object]) -> None:
    """Close every adapter that owns a connection pool, once each."""
    closed: set[int] = set()
    for adapter in adapters:
        aclose = getattr(adapter, "aclose", None)
        if aclose is None or id(adapter) in closed:
            continue
        closed.add(id(adapter))
        await aclose()
        logger.debug("Closed %s", type(adapter).__name__)


def create_app(
    engine: Optional[DialogEngine] = None,
    controller: Optional[WebHandoffController] = None,
    call_log: Optional[CallLogBook] = None,
) -> FastAPI:
    """Build the app; pass components to override the configured ones."""
    if engine is None or controller is None:
        built_engine, built_controller, _ = build_components()
        engine = engine or built_engine
        controller = controller or built_controller
    if call_log is None:
        call_log = engine.call_log

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await close_adapters((*engine.adapters, *controller.adapters))

    app = FastAPI(title=f"{settings.business.name} booking line", lifespan=lifespan)
    app.state.engine = engine
    app.state.controller = controller
    app.state.call_log = call_log
    app.include_router(router)
    logger.info("Booking line ready for '%s'", settings.business.name)
    return app
