"""
Keyword intent matching as an ordered rule table.

Rules are evaluated top to bottom and the first rule with a matching
keyword wins, so more specific terms (service genders) sit above generic
ones (booking). Matching is case-insensitive; short service words are
matched as whole words so "appointment" never reads as "men".
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from phone_booking.tools.services import Service

logger = logging.getLogger(__name__)


class Intent(str, Enum):
    """What a caller utterance asks for."""
    SERVICE_MAN = "service_man"
    SERVICE_WOMAN = "service_woman"
    SERVICE_NONBINARY = "service_nonbinary"
    PRICE = "price"
    ADDRESS = "address"
    HOURS = "hours"
    BOOK = "book"
    NONE = "none"


INTENT_TO_SERVICE: dict[Intent, Service] = {
    Intent.SERVICE_MAN: Service.MAN_CUT,
    Intent.SERVICE_WOMAN: Service.WOMAN_CUT,
    Intent.SERVICE_NONBINARY: Service.NONBINARY_CUT,
}

INFO_INTENTS: frozenset[Intent] = frozenset({Intent.PRICE, Intent.ADDRESS, Intent.HOURS})


def _contains_any(*keywords: str) -> Callable[[str], bool]:
    def predicate(text: str) -> bool:
        return any(keyword in text for keyword in keywords)
    return predicate


def _has_word(*words: str) -> Callable[[str], bool]:
    pattern = re.compile(r"\b(?:" + "|".join(re.escape(w) for w in words) + r")\b")

    def predicate(text: str) -> bool:
        return pattern.search(text) is not None
    return predicate


@dataclass(frozen=True)
class IntentRule:
    """A single (predicate, outcome) pair."""
    intent: Intent
    predicate: Callable[[str], bool]


# Order matters: "non binaire" must be tested before "homme"/"femme"
INTENT_RULES: list[IntentRule] = [
    IntentRule(Intent.SERVICE_NONBINARY,
               _contains_any("non binaire", "non-binaire", "nonbinaire", "non binary",
                             "non-binary", "nonbinary", "neutre")),
    IntentRule(Intent.SERVICE_WOMAN,
               _has_word("femme", "femmes", "dame", "madame", "woman", "women")),
    IntentRule(Intent.SERVICE_MAN,
               _has_word("homme", "hommes", "monsieur", "man", "men")),
    IntentRule(Intent.PRICE,
               _contains_any("prix", "coût", "cout", "combien", "tarif", "price", "cost")),
    IntentRule(Intent.ADDRESS,
               _contains_any("adresse", "où êtes", "ou etes", "situé", "situe", "address",
                             "where")),
    IntentRule(Intent.HOURS,
               _contains_any("heure", "horaire", "ouvert", "fermé", "ferme", "hours", "open")),
    IntentRule(Intent.BOOK,
               _contains_any("rendez-vous", "rendez vous", "rdv", "réserv", "reserv",
                             "prendre", "coupe", "book", "appointment")),
]


def match_intent(text: Optional[str], rules: Optional[list[IntentRule]] = None) -> Intent:
    """Return the intent of the first matching rule, or ``Intent.NONE``."""
    normalized = (text or "").lower().strip()
    if not normalized:
        return Intent.NONE
    for rule in rules if rules is not None else INTENT_RULES:
        if rule.predicate(normalized):
            logger.debug("Intent matched: %s", rule.intent.value)
            return rule.intent
    return Intent.NONE


def match_service(text: Optional[str]) -> Service:
    """Keyword-only service recognition; ``Service.NONE`` when inconclusive."""
    return INTENT_TO_SERVICE.get(match_intent(text), Service.NONE)
