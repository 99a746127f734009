"""Minimal French HTML pages for the email confirmation link."""

from html import escape
from typing import Optional

from phone_booking.config import settings
from phone_booking.handoff.controller import HandoffOutcome, HandoffOutcomeKind


def _page(title: str, body: str) -> str:
    salon = escape(settings.business.name)
    return (
        "<!DOCTYPE html>\n"
        '<html lang="fr-CA">\n'
        "<head>\n"
        '<meta charset="utf-8">\n'
        '<meta name="viewport" content="width=device-width, initial-scale=1">\n'
        f"<title>{escape(title)} | {salon}</title>\n"
        "</head>\n"
        "<body>\n"
        f"<h1>{salon}</h1>\n"
        f"{body}\n"
        "</body>\n"
        "</html>\n"
    )


def _link(url: Optional[str], label: str) -> str:
    if not url:
        return ""
    return f'<p><a href="{escape(url, quote=True)}">{escape(label)}</a></p>'


def form_page(outcome: HandoffOutcome) -> str:
    error = f'<p role="alert"><strong>{escape(outcome.error)}</strong></p>' if outcome.error else ""
    slot = f"<p>Rendez-vous : {escape(outcome.slot_text)}</p>" if outcome.slot_text else ""
    body = (
        f"<h2>Bonjour {escape(outcome.name)}!</h2>\n"
        f"{slot}\n"
        "<p>Entre ton courriel pour confirmer ton rendez-vous.</p>\n"
        f"{error}\n"
        f'<form method="post" action="/confirm-email/{escape(outcome.token, quote=True)}">\n'
        '<label for="email">Courriel</label>\n'
        '<input type="email" id="email" name="email" required '
        f'value="{escape(outcome.email, quote=True)}">\n'
        '<button type="submit">Confirmer</button>\n'
        "</form>"
    )
    return _page("Confirme ton courriel", body)


def success_page(outcome: HandoffOutcome) -> str:
    slot = f" pour {escape(outcome.slot_text)}" if outcome.slot_text else ""
    body = (
        f"<h2>Merci {escape(outcome.name)}!</h2>\n"
        f"<p>Ton rendez-vous{slot} est confirmé. "
        f"Une confirmation a été envoyée par texto.</p>\n"
        f"{_link(outcome.reschedule_url, 'Modifier le rendez-vous')}\n"
        f"{_link(outcome.cancel_url, 'Annuler le rendez-vous')}"
    )
    return _page("Rendez-vous confirmé", body)


def error_page(outcome: HandoffOutcome) -> str:
    message = outcome.error or "Une erreur est survenue."
    body = f"<h2>Oups!</h2>\n<p>{escape(message)}</p>"
    return _page("Erreur", body)


def expired_page(outcome: Optional[HandoffOutcome] = None) -> str:
    body = (
        "<h2>Lien expiré</h2>\n"
        "<p>Ce lien n'est plus valide. Rappelle-nous pour prendre un nouveau rendez-vous.</p>"
    )
    return _page("Lien expiré", body)


_RENDERERS = {
    HandoffOutcomeKind.FORM: form_page,
    HandoffOutcomeKind.SUCCESS: success_page,
    HandoffOutcomeKind.ERROR: error_page,
    HandoffOutcomeKind.EXPIRED: expired_page,
}


def render_outcome(outcome: HandoffOutcome) -> str:
    """Pick the page matching the controller's outcome."""
    return _RENDERERS[outcome.kind](outcome)
