"""Render the engine's VoiceResponse as Twilio TwiML."""

from typing import Optional

from twilio.twiml.voice_response import VoiceResponse as TwimlResponse

from phone_booking.config import TelephonyConfig, settings
from phone_booking.schemas.voice_schema import Dial, Gather, Hangup, Say, VoiceResponse

TURN_PATH = "/voice/turn"


def render_twiml(
    response: VoiceResponse,
    config: Optional[TelephonyConfig] = None,
    action: str = TURN_PATH,
) -> str:
    """
    Translate abstract voice actions into a TwiML document.

    Every gather posts back to ``action``, including when nothing was
    heard, so the dialog engine decides how to re-prompt.
    """
    cfg = config or settings.telephony
    twiml = TwimlResponse()
    for item in response.actions:
        if isinstance(item, Say):
            twiml.say(item.text, voice=cfg.tts_voice, language=cfg.voice_language)
        elif isinstance(item, Gather):
            gather = twiml.gather(
                input=item.input.value,
                action=action,
                method="POST",
                language=cfg.voice_language,
                speech_timeout="auto",
                timeout=cfg.gather_timeout_sec,
                num_digits=item.num_digits,
                action_on_empty_result=True,
            )
            gather.say(item.prompt, voice=cfg.tts_voice, language=cfg.voice_language)
            twiml.redirect(action, method="POST")
        elif isinstance(item, Dial):
            twiml.dial(item.number)
        elif isinstance(item, Hangup):
            twiml.hangup()
    return str(twiml)
