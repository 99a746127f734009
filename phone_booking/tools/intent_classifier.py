"""
Fallback service classifier used when keyword matching finds no service.

The call is bounded: a timeout (local or reported by the API) counts as
"no service recognized". Any other API failure is raised so the dialog
engine can hand the caller to a human.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Optional

import openai
from openai import AsyncOpenAI

from phone_booking.config import ModelConfig, settings
from phone_booking.prompts.system_prompts import SERVICE_CLASSIFIER_PROMPT
from phone_booking.tools.errors import IntentClassifierError
from phone_booking.tools.services import Service

logger = logging.getLogger(__name__)


class IntentClassifier(ABC):
    """Contract for free-text service classification."""

    @abstractmethod
    async def classify_service(self, text: str) -> Service:
        """Return the service named in ``text`` or ``Service.NONE``."""


class NullClassifier(IntentClassifier):
    """Classifier used when no model is configured: never recognizes anything."""

    async def classify_service(self, text: str) -> Service:
        return Service.NONE


def parse_service_label(raw: str) -> Service:
    """Map the model's one-word answer onto a Service, defaulting to NONE."""
    answer = raw.strip().lower().strip(".\"' ")
    try:
        return Service(answer)
    except ValueError:
        logger.debug("Classifier answered unexpected label %r", raw)
        return Service.NONE


class OpenAIServiceClassifier(IntentClassifier):
    """Chat-completion based classifier with a hard timeout."""

    def __init__(
        self,
        config: Optional[ModelConfig] = None,
        client: Optional[AsyncOpenAI] = None,
    ) -> None:
        self._config = config or settings.model
        self._client = client or AsyncOpenAI(api_key=self._config.openai_api_key)

    async def aclose(self) -> None:
        await self._client.close()

    async def _complete(self, text: str) -> str:
        completion = await self._client.chat.completions.create(
            model=self._config.intent_model,
            temperature=0,
            max_tokens=5,
            messages=[
                {"role": "system", "content": SERVICE_CLASSIFIER_PROMPT},
                {"role": "user", "content": text},
            ],
        )
        return completion.choices[0].message.content or ""

    async def classify_service(self, text: str) -> Service:
        try:
            raw = await asyncio.wait_for(
                self._complete(text), timeout=self._config.intent_timeout_sec
            )
        except (asyncio.TimeoutError, openai.APITimeoutError):
            logger.warning(
                "Service classification timed out after %.1fs", self._config.intent_timeout_sec
            )
            return Service.NONE
        except openai.OpenAIError as exc:
            raise IntentClassifierError(f"Service classification failed: {exc}") from exc

        service = parse_service_label(raw)
        logger.info("Classifier mapped %r to '%s'", text, service.value)
        return service


def build_intent_classifier(config: Optional[ModelConfig] = None) -> IntentClassifier:
    """Return the OpenAI classifier when an API key is set, else the null classifier."""
    cfg = config or settings.model
    if cfg.openai_api_key:
        return OpenAIServiceClassifier(cfg)
    logger.warning("OPENAI_API_KEY not set; service classification limited to keywords")
    return NullClassifier()
