"""
Centralized configuration with environment variable overrides.

Salon details, vendor credentials, timing windows and TTLs are all
configurable here. Nothing is hardcoded in dialog or adapter logic.
"""

import logging
import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

from phone_booking.logging_context import install_call_id_filter

load_dotenv()

logger = logging.getLogger(__name__)


def _env_str(env_var: str, default: str = "") -> str:
    """Read a string env var, stripping whitespace and surrounding quotes."""
    raw = os.getenv(env_var)
    if raw is None or not raw.strip():
        return default
    return raw.strip().strip("\"'")


def _safe_int(env_var: str, default: str) -> int:
    """Parse an integer from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return int(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid integer for {env_var}: {raw!r}"
        ) from None


def _safe_float(env_var: str, default: str) -> float:
    """Parse a float from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return float(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid float for {env_var}: {raw!r}"
        ) from None


@dataclass(frozen=True)
class BusinessConfig:
    """Salon details read back to callers."""

    name: str = _env_str("SALON_NAME", "Salon Coco")
    city: str = _env_str("SALON_CITY", "Magog")
    address: str = _env_str("SALON_ADDRESS", "Adresse non configurée")
    hours: str = _env_str("SALON_HOURS", "Heures non configurées")
    price_list: str = _env_str("SALON_PRICE_LIST", "Prix non configurés")
    fallback_number: str = _env_str("FALLBACK_NUMBER")
    public_base_url: str = _env_str("PUBLIC_BASE_URL", "http://localhost:3000")


@dataclass(frozen=True)
class TelephonyConfig:
    """Twilio voice and SMS settings."""

    account_sid: str = _env_str("TWILIO_ACCOUNT_SID")
    auth_token: str = _env_str("TWILIO_AUTH_TOKEN")
    caller_id: str = _env_str("TWILIO_CALLER_ID")
    voice_language: str = _env_str("VOICE_LANGUAGE", "fr-CA")
    tts_voice: str = _env_str("TTS_VOICE", "Polly.Gabrielle-Neural")
    gather_timeout_sec: int = _safe_int("GATHER_TIMEOUT", "6")


@dataclass(frozen=True)
class SchedulingConfig:
    """Calendly credentials, event types and slot search window."""

    api_token: str = _env_str("CALENDLY_API_TOKEN")
    api_base_url: str = _env_str("CALENDLY_API_BASE_URL", "https://api.calendly.com")
    timezone: str = _env_str("CALENDLY_TIMEZONE", "America/Toronto")
    event_type_uri_man: str = _env_str("CALENDLY_EVENT_TYPE_URI_HOMME")
    event_type_uri_woman: str = _env_str("CALENDLY_EVENT_TYPE_URI_FEMME")
    event_type_uri_nonbinary: str = _env_str("CALENDLY_EVENT_TYPE_URI_NONBINAIRE")
    slot_lead_minutes: int = _safe_int("SLOT_LEAD_MINUTES", "5")
    slot_window_days: int = _safe_int("SLOT_WINDOW_DAYS", "7")
    max_slots_offered: int = _safe_int("MAX_SLOTS_OFFERED", "3")
    request_timeout_sec: float = _safe_float("SCHEDULING_TIMEOUT", "10.0")


@dataclass(frozen=True)
class ModelConfig:
    """Fallback intent classifier settings."""

    openai_api_key: str = _env_str("OPENAI_API_KEY")
    intent_model: str = _env_str("INTENT_MODEL", "gpt-4o-mini")
    intent_timeout_sec: float = _safe_float("INTENT_TIMEOUT_SEC", "4.0")


@dataclass(frozen=True)
class ContactsConfig:
    """Google People API access for the salon's client address book."""

    client_id: str = _env_str("GOOGLE_CLIENT_ID")
    client_secret: str = _env_str("GOOGLE_CLIENT_SECRET")
    refresh_token: str = _env_str("GOOGLE_REFRESH_TOKEN")
    token_url: str = _env_str("GOOGLE_TOKEN_URL", "https://oauth2.googleapis.com/token")
    api_base_url: str = _env_str("GOOGLE_PEOPLE_API_BASE_URL", "https://people.googleapis.com/v1")
    request_timeout_sec: float = _safe_float("CONTACTS_TIMEOUT", "5.0")


@dataclass(frozen=True)
class SessionConfig:
    """Lifetimes of in-flight dialogs and web handoffs."""

    session_ttl_minutes: int = _safe_int("SESSION_TTL_MINUTES", "30")
    pending_ttl_minutes: int = _safe_int("PENDING_TTL_MINUTES", "20")
    max_phone_attempts: int = _safe_int("MAX_PHONE_ATTEMPTS", "3")
    call_log_size: int = _safe_int("CALL_LOG_SIZE", "200")


@dataclass(frozen=True)
class AppConfig:
    """Root configuration aggregating all sub-configs."""

    business: BusinessConfig = field(default_factory=BusinessConfig)
    telephony: TelephonyConfig = field(default_factory=TelephonyConfig)
    scheduling: SchedulingConfig = field(default_factory=SchedulingConfig)
    model: ModelConfig = field(default_factory=ModelConfig)
    contacts: ContactsConfig = field(default_factory=ContactsConfig)
    sessions: SessionConfig = field(default_factory=SessionConfig)
    log_level: str = _env_str("LOG_LEVEL", "INFO")
    port: int = _safe_int("PORT", "3000")


def _validate_config(config: AppConfig) -> None:
    """Validate configuration values are within acceptable ranges."""
    sched = config.scheduling
    if not 1 <= sched.max_slots_offered <= 9:
        raise ValueError(
            f"MAX_SLOTS_OFFERED must be between 1 and 9, got {sched.max_slots_offered}"
        )
    if sched.slot_lead_minutes < 0:
        raise ValueError(
            f"SLOT_LEAD_MINUTES must be >= 0, got {sched.slot_lead_minutes}"
        )
    if sched.slot_window_days < 1:
        raise ValueError(
            f"SLOT_WINDOW_DAYS must be >= 1, got {sched.slot_window_days}"
        )
    if sched.request_timeout_sec <= 0:
        raise ValueError(
            f"SCHEDULING_TIMEOUT must be > 0, got {sched.request_timeout_sec}"
        )
    if config.contacts.request_timeout_sec <= 0:
        raise ValueError(
            f"CONTACTS_TIMEOUT must be > 0, got {config.contacts.request_timeout_sec}"
        )
    if config.model.intent_timeout_sec <= 0:
        raise ValueError(
            f"INTENT_TIMEOUT_SEC must be > 0, got {config.model.intent_timeout_sec}"
        )

    for name, value in [
        ("SESSION_TTL_MINUTES", config.sessions.session_ttl_minutes),
        ("PENDING_TTL_MINUTES", config.sessions.pending_ttl_minutes),
        ("MAX_PHONE_ATTEMPTS", config.sessions.max_phone_attempts),
        ("CALL_LOG_SIZE", config.sessions.call_log_size),
    ]:
        if value < 1:
            raise ValueError(f"{name} must be >= 1, got {value}")

    if not config.business.public_base_url.startswith(("http://", "https://")):
        raise ValueError(
            f"PUBLIC_BASE_URL must be an http(s) URL, got {config.business.public_base_url!r}"
        )


def load_config() -> AppConfig:
    """Load and validate application configuration."""
    config = AppConfig()
    _validate_config(config)
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(name)s] %(levelname)s [%(call_id)s]: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    install_call_id_filter(logging.getLogger())
    logger.info("Configuration loaded for '%s'", config.business.name)
    return config


# Singleton instance
settings = load_config()
