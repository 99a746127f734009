"""
Canonicalizers for the open-ended values captured by voice.

Both return ``None`` when the input cannot be canonicalized; the dialog
engine turns that into a re-prompt.
"""

import re
from typing import Optional

DEFAULT_COUNTRY_CODE = "1"
NATIONAL_NUMBER_DIGITS = 10
MIN_NAME_TOKENS = 2


def canonicalize_phone(raw: Optional[str]) -> Optional[str]:
    """Normalize a spoken or typed North American number to ``+1XXXXXXXXXX``.

    Examples:
        >>> canonicalize_phone("514 555-1234")
        '+15145551234'
        >>> canonicalize_phone("1 (514) 555-1234")
        '+15145551234'
        >>> canonicalize_phone("+15145551234")
        '+15145551234'
        >>> canonicalize_phone("555-1234") is None
        True
    """
    if not raw:
        return None
    digits = re.sub(r"\D", "", raw)
    if len(digits) == NATIONAL_NUMBER_DIGITS:
        return f"+{DEFAULT_COUNTRY_CODE}{digits}"
    if len(digits) == NATIONAL_NUMBER_DIGITS + 1 and digits.startswith(DEFAULT_COUNTRY_CODE):
        return f"+{digits}"
    return None


def canonicalize_name(raw: Optional[str]) -> Optional[str]:
    """Capitalize each word of a full name; at least two words are required.

    Examples:
        >>> canonicalize_name("marie TREMBLAY")
        'Marie Tremblay'
        >>> canonicalize_name("Marie") is None
        True
    """
    if not raw:
        return None
    tokens = raw.split()
    if len(tokens) < MIN_NAME_TOKENS:
        return None
    return " ".join(token[:1].upper() + token[1:].lower() for token in tokens)


AFFIRMATIVE_WORDS = frozenset({"oui", "ouais", "ouin", "exact", "exactement", "correct", "yes"})
AFFIRMATIVE_PHRASES = ("c'est ça", "c'est bien ça", "c'est moi", "en plein")


def is_affirmative(raw: Optional[str]) -> bool:
    """True when the caller agrees ("oui", "c'est ça", ...).

    Examples:
        >>> is_affirmative("Oui, c'est moi")
        True
        >>> is_affirmative("Jean Gagnon")
        False
    """
    if not raw:
        return False
    text = raw.lower().replace("’", "'")
    if any(phrase in text for phrase in AFFIRMATIVE_PHRASES):
        return True
    return any(word in AFFIRMATIVE_WORDS for word in re.findall(r"[\w']+", text))
