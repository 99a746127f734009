"""
Human-handoff guardrail.

Runs before any state-specific logic on every turn: when the caller asks
for a person, the dialog is abandoned in favour of a transfer, whatever
step the call is at.
"""

import logging
from typing import Optional

logger = logging.getLogger(__name__)


class HumanHandoffGuardrail:
    """Detects requests to speak with a human."""

    HANDOFF_KEYWORDS = [
        "humain", "human",
        "agent",
        "personne", "person",
        "transfert", "transférer", "transferer", "transfer",
        "parler à", "parler a", "speak to", "talk to",
    ]

    def matched_keyword(self, user_message: Optional[str]) -> Optional[str]:
        """Return the first handoff keyword found in the utterance, if any."""
        lower = (user_message or "").lower()
        for keyword in self.HANDOFF_KEYWORDS:
            if keyword in lower:
                logger.info("Human handoff keyword detected: '%s'", keyword)
                return keyword
        return None


_handoff_guardrail = HumanHandoffGuardrail()


def wants_human(user_message: Optional[str]) -> bool:
    """Pure predicate: does the utterance ask for a human?"""
    return _handoff_guardrail.matched_keyword(user_message) is not None
