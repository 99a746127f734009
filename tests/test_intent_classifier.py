"""Tests for the fallback service classifier."""

import asyncio
from types import SimpleNamespace

import openai
import pytest

from phone_booking.config import ModelConfig
from phone_booking.tools.errors import IntentClassifierError
from phone_booking.tools.intent_classifier import (
    NullClassifier,
    OpenAIServiceClassifier,
    build_intent_classifier,
    parse_service_label,
)
from phone_booking.tools.services import Service

CONFIG = ModelConfig(openai_api_key="sk-test", intent_model="gpt-4o-mini", intent_timeout_sec=0.05)


class FakeCompletions:
    def __init__(self, answer: str = "", delay: float = 0.0, error: Exception = None) -> None:
        self.answer = answer
        self.delay = delay
        self.error = error
        self.requests: list[dict] = []

    async def create(self, **kwargs):
        self.requests.append(kwargs)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        message = SimpleNamespace(content=self.answer)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def make_classifier(completions: FakeCompletions) -> OpenAIServiceClassifier:
    client = SimpleNamespace(chat=SimpleNamespace(completions=completions))
    return OpenAIServiceClassifier(CONFIG, client=client)


class TestParseServiceLabel:
    @pytest.mark.parametrize("raw,expected", [
        ("homme", Service.MAN_CUT),
        ("Femme.", Service.WOMAN_CUT),
        (" nonbinaire\n", Service.NONBINARY_CUT),
        ("none", Service.NONE),
        ("je ne sais pas", Service.NONE),
        ("", Service.NONE),
    ])
    def test_labels(self, raw, expected):
        assert parse_service_label(raw) == expected


class TestOpenAIServiceClassifier:
    @pytest.mark.asyncio
    async def test_maps_answer_to_service(self):
        completions = FakeCompletions(answer="femme")
        service = await make_classifier(completions).classify_service("un carré plongeant")
        assert service == Service.WOMAN_CUT
        request = completions.requests[0]
        assert request["model"] == "gpt-4o-mini"
        assert request["messages"][-1] == {"role": "user", "content": "un carré plongeant"}

    @pytest.mark.asyncio
    async def test_slow_answer_counts_as_none(self):
        completions = FakeCompletions(answer="homme", delay=1.0)
        assert await make_classifier(completions).classify_service("un fade") == Service.NONE

    @pytest.mark.asyncio
    async def test_api_failure_raises(self):
        completions = FakeCompletions(error=openai.OpenAIError("quota exceeded"))
        with pytest.raises(IntentClassifierError):
            await make_classifier(completions).classify_service("un fade")


class TestNullClassifier:
    @pytest.mark.asyncio
    async def test_never_recognizes(self):
        assert await NullClassifier().classify_service("coupe homme") == Service.NONE

    def test_used_without_api_key(self):
        classifier = build_intent_classifier(ModelConfig(openai_api_key=""))
        assert isinstance(classifier, NullClassifier)
