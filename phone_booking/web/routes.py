"""HTTP endpoints: voice webhooks, email confirmation pages and the call journal."""

import logging
from typing import Optional

from fastapi import APIRouter, Form, Request
from fastapi.responses import HTMLResponse, Response

from phone_booking.call_log import CallLogBook
from phone_booking.conversation.dialog_engine import DialogEngine
from phone_booking.handoff.controller import WebHandoffController
from phone_booking.web.pages import render_outcome
from phone_booking.web.twiml import render_twiml

logger = logging.getLogger(__name__)

router = APIRouter()

TWIML_MEDIA_TYPE = "application/xml"


def _engine(request: Request) -> DialogEngine:
    return request.app.state.engine


def _controller(request: Request) -> WebHandoffController:
    return request.app.state.controller


def _call_log(request: Request) -> CallLogBook:
    return request.app.state.call_log


@router.post("/voice")
async def voice_start(
    request: Request,
    call_sid: str = Form("", alias="CallSid"),
    caller: str = Form("", alias="From"),
) -> Response:
    """Incoming call: greet and offer the menu."""
    response = await _engine(request).start_call(call_sid, caller)
    return Response(content=render_twiml(response), media_type=TWIML_MEDIA_TYPE)


@router.post("/voice/turn")
async def voice_turn(
    request: Request,
    call_sid: str = Form("", alias="CallSid"),
    caller: str = Form("", alias="From"),
    speech: Optional[str] = Form(None, alias="SpeechResult"),
    digits: Optional[str] = Form(None, alias="Digits"),
) -> Response:
    """One gather result: advance the dialog."""
    response = await _engine(request).handle_turn(call_sid, caller, speech=speech, digits=digits)
    return Response(content=render_twiml(response), media_type=TWIML_MEDIA_TYPE)


@router.get("/confirm-email/{token}", response_class=HTMLResponse)
async def confirm_email_form(request: Request, token: str) -> HTMLResponse:
    outcome = await _controller(request).resolve(token)
    return HTMLResponse(render_outcome(outcome), status_code=outcome.status_code)


@router.post("/confirm-email/{token}", response_class=HTMLResponse)
async def confirm_email_submit(
    request: Request,
    token: str,
    email: str = Form(""),
) -> HTMLResponse:
    outcome = await _controller(request).finalize(token, email)
    return HTMLResponse(render_outcome(outcome), status_code=outcome.status_code)


@router.get("/calls")
async def recent_calls(request: Request, limit: int = 50) -> list[dict]:
    """Latest call records, newest first."""
    return [record.model_dump(mode="json") for record in _call_log(request).recent(limit)]


@router.get("/health")
async def health(request: Request) -> dict:
    return {"status": "ok", "calls_tracked": len(_call_log(request))}
