"""Dynamic text construction for slot menus, read-backs and text messages."""

from datetime import datetime
from typing import Optional, Sequence

from phone_booking.config import settings
from phone_booking.schemas.booking_schema import PendingPayload
from phone_booking.tools.services import Service, service_label
from phone_booking.utils import format_phone_for_speech, format_slot_fr, parse_iso_instant


def build_slot_menu_prompt(service: Service, slots: Sequence[datetime], tz_name: str) -> str:
    """List the offered slots with their key digits."""
    parts = [f"Voici les prochaines disponibilités pour une {service_label(service)}."]
    for index, slot in enumerate(slots, start=1):
        parts.append(f"Pour {format_slot_fr(slot, tz_name)}, appuie sur {index}.")
    return " ".join(parts)


def build_phone_confirmation_prompt(phone: str) -> str:
    """Read the captured number back and ask for a keypad confirmation."""
    return (
        f"J'ai le numéro {format_phone_for_speech(phone)}. "
        "Appuie sur 1 pour confirmer, ou sur 2 pour le corriger."
    )


def build_known_name_prompt(name: str) -> str:
    """Offer the name on file for a returning client."""
    return (
        f"Parfait. Est-ce que je réserve au nom de {name}? "
        "Dis oui, ou bien dis ton prénom et ton nom de famille."
    )


def build_handoff_link(token: str, base_url: Optional[str] = None) -> str:
    """Build the single-use web link for a pending confirmation."""
    base = (base_url or settings.business.public_base_url).rstrip("/")
    return f"{base}/confirm-email/{token}"


def build_handoff_sms(payload: PendingPayload, link: str, ttl_minutes: int, tz_name: str) -> str:
    """Text message carrying the web handoff link."""
    when = format_slot_fr(parse_iso_instant(payload.start_time_iso), tz_name)
    return (
        f"{settings.business.name} — Bonjour {payload.name}!\n"
        f"Pour finaliser ton rendez-vous du {when}, "
        f"saisis ton courriel ici (lien valide {ttl_minutes} minutes) :\n{link}"
    )


def build_confirmation_sms(
    payload: PendingPayload,
    email: str,
    tz_name: str,
    reschedule_url: Optional[str] = None,
    cancel_url: Optional[str] = None,
) -> str:
    """Detailed confirmation text sent once the booking exists."""
    biz = settings.business
    when = format_slot_fr(parse_iso_instant(payload.start_time_iso), tz_name)
    lines = [
        f"Ton rendez-vous au {biz.name} est confirmé!",
        "",
        f"Nom : {payload.name}",
        f"Courriel : {email}",
        f"Service : {service_label(payload.service)}",
        f"Date et heure : {when}",
        f"Adresse : {biz.address}",
    ]
    if reschedule_url or cancel_url:
        lines.append("")
    if reschedule_url:
        lines.append(f"Modifier : {reschedule_url}")
    if cancel_url:
        lines.append(f"Annuler : {cancel_url}")
    lines.append("")
    lines.append(f"À bientôt! — {biz.name}")
    return "\n".join(lines)
