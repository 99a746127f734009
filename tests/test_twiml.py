"""Tests for rendering voice responses as TwiML."""

from phone_booking.config import TelephonyConfig
from phone_booking.schemas.voice_schema import GatherInput, VoiceResponse
from phone_booking.web.twiml import TURN_PATH, render_twiml

CONFIG = TelephonyConfig(voice_language="fr-CA", tts_voice="Polly.Gabrielle-Neural",
                         gather_timeout_sec=6)


class TestVoiceResponse:
    def test_builders_chain(self):
        response = VoiceResponse().say("Bonjour").gather_speech("Quoi?")
        assert response.spoken_text == "Bonjour Quoi?"
        assert response.expects == GatherInput.SPEECH
        assert not response.ends_call
        assert not response.is_transfer

    def test_digit_gather(self):
        response = VoiceResponse().gather_digit("Appuie sur 1")
        assert response.expects == GatherInput.DTMF
        assert response.actions[0].num_digits == 1

    def test_hangup_expects_nothing(self):
        response = VoiceResponse().say("Au revoir").hangup()
        assert response.ends_call
        assert response.expects is None


class TestRenderTwiml:
    def test_say(self):
        xml = render_twiml(VoiceResponse().say("Bonjour"), CONFIG)
        assert xml.startswith("<?xml")
        assert 'voice="Polly.Gabrielle-Neural"' in xml
        assert 'language="fr-CA"' in xml
        assert ">Bonjour</Say>" in xml

    def test_speech_gather_posts_back_even_when_empty(self):
        xml = render_twiml(VoiceResponse().gather_speech("Bonjour"), CONFIG)
        assert "<Gather " in xml
        assert f'action="{TURN_PATH}"' in xml
        assert 'input="speech"' in xml
        assert 'language="fr-CA"' in xml
        assert 'speechTimeout="auto"' in xml
        assert 'actionOnEmptyResult="true"' in xml
        assert "numDigits" not in xml
        assert f"<Redirect method=\"POST\">{TURN_PATH}</Redirect>" in xml

    def test_prompt_is_spoken_inside_gather(self):
        xml = render_twiml(VoiceResponse().gather_speech("Bonjour"), CONFIG)
        gather = xml[xml.index("<Gather"):xml.index("</Gather>")]
        assert "Bonjour" in gather

    def test_digit_gather(self):
        xml = render_twiml(VoiceResponse().gather_digit("Appuie sur 1"), CONFIG)
        assert 'input="dtmf"' in xml
        assert 'numDigits="1"' in xml

    def test_dial(self):
        xml = render_twiml(VoiceResponse().say("Un instant").dial("+18195559999"), CONFIG)
        assert "<Dial>+18195559999</Dial>" in xml

    def test_hangup(self):
        xml = render_twiml(VoiceResponse().say("Au revoir").hangup(), CONFIG)
        assert "<Hangup" in xml
        assert "<Gather" not in xml

    def test_text_is_escaped(self):
        xml = render_twiml(VoiceResponse().say("Coupe & brushing <3"), CONFIG)
        assert "Coupe &amp; brushing &lt;3" in xml
