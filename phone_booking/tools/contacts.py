"""
Client address book: recognize returning callers and remember new clients.

``GoogleContacts`` talks to the Google People API with an OAuth refresh
token. Lookups and saves are best effort for the callers of this module;
failures are raised as ``ContactsError`` and never block a booking.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, Optional

import httpx

from phone_booking.config import ContactsConfig, settings
from phone_booking.conversation.normalizers import canonicalize_phone
from phone_booking.schemas.booking_schema import ClientContact
from phone_booking.tools.errors import ContactsError
from phone_booking.utils import Clock, mask_phone

logger = logging.getLogger(__name__)

READ_MASK = "names,emailAddresses,phoneNumbers"
# Refresh the access token this many seconds before Google expires it
TOKEN_REFRESH_MARGIN_SEC = 60


class ContactsAdapter(ABC):
    """Contract for the salon's client address book."""

    @abstractmethod
    async def find_by_phone(self, phone: str) -> Optional[ClientContact]:
        """Return the client whose number matches ``phone``, if any."""

    @abstractmethod
    async def save_contact(self, name: str, email: str, phone: str) -> None:
        """Create the client, or update the email of an existing one."""


def _same_phone(left: Optional[str], right: Optional[str]) -> bool:
    left_canonical = canonicalize_phone(left)
    return left_canonical is not None and left_canonical == canonicalize_phone(right)


def _first_value(person: dict[str, Any], field_name: str, key: str) -> Optional[str]:
    entries = person.get(field_name)
    if not isinstance(entries, list) or not entries or not isinstance(entries[0], dict):
        return None
    return entries[0].get(key) or None


class GoogleContacts(ContactsAdapter):
    """Google People API client."""

    def __init__(
        self,
        config: Optional[ContactsConfig] = None,
        client: Optional[httpx.AsyncClient] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        self._config = config or settings.contacts
        self._client = client or httpx.AsyncClient(timeout=self._config.request_timeout_sec)
        self._clock = clock or Clock()
        self._access_token: Optional[str] = None
        self._token_expires_at = 0.0
        self._token_lock = asyncio.Lock()

    @property
    def enabled(self) -> bool:
        cfg = self._config
        return bool(cfg.client_id and cfg.client_secret and cfg.refresh_token)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _get_access_token(self) -> str:
        async with self._token_lock:
            now = self._clock.monotonic()
            if self._access_token and now < self._token_expires_at - TOKEN_REFRESH_MARGIN_SEC:
                return self._access_token
            try:
                response = await self._client.post(
                    self._config.token_url,
                    data={
                        "client_id": self._config.client_id,
                        "client_secret": self._config.client_secret,
                        "refresh_token": self._config.refresh_token,
                        "grant_type": "refresh_token",
                    },
                )
                response.raise_for_status()
                data = response.json()
                token = data["access_token"]
                expires_in = float(data.get("expires_in", 3600))
            except httpx.HTTPError as exc:
                raise ContactsError(f"Google token refresh failed: {exc}") from exc
            except (KeyError, TypeError, AttributeError, ValueError) as exc:
                raise ContactsError(f"Google token response unusable: {exc!r}") from exc
            self._access_token = token
            self._token_expires_at = now + expires_in
            logger.debug("Google access token refreshed (valid %.0fs)", expires_in)
            return token

    async def _request(self, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        token = await self._get_access_token()
        url = f"{self._config.api_base_url.rstrip('/')}/{path.lstrip('/')}"
        try:
            response = await self._client.request(
                method, url, headers={"Authorization": f"Bearer {token}"}, **kwargs
            )
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as exc:
            raise ContactsError(
                f"People API {method} {path} returned {exc.response.status_code}"
            ) from exc
        except (httpx.HTTPError, ValueError) as exc:
            raise ContactsError(f"People API {method} {path} failed: {exc}") from exc
        if not isinstance(data, dict):
            raise ContactsError(f"People API {method} {path} returned a non-object body")
        return data

    async def _find_person(self, phone: str) -> Optional[dict[str, Any]]:
        # Contacts saved by hand often lack the +1 prefix
        for query in (phone, phone.removeprefix("+1")):
            data = await self._request(
                "GET", "/people:searchContacts", params={"query": query, "readMask": READ_MASK}
            )
            try:
                for result in data.get("results") or []:
                    person = result.get("person") or {}
                    numbers = person.get("phoneNumbers") or []
                    if any(_same_phone(number.get("value"), phone) for number in numbers):
                        return person
            except AttributeError as exc:
                raise ContactsError(f"People API search unreadable: {exc}") from exc
        return None

    async def find_by_phone(self, phone: str) -> Optional[ClientContact]:
        canonical = canonicalize_phone(phone)
        if not self.enabled or canonical is None:
            return None
        person = await self._find_person(canonical)
        if person is None:
            logger.info("No client on file for %s", mask_phone(canonical))
            return None
        try:
            contact = ClientContact(
                name=_first_value(person, "names", "displayName"),
                email=_first_value(person, "emailAddresses", "value"),
                resource_name=person.get("resourceName"),
            )
        except ValueError as exc:
            raise ContactsError(f"People API person unreadable: {exc}") from exc
        logger.info("Returning client found for %s", mask_phone(canonical))
        return contact

    async def save_contact(self, name: str, email: str, phone: str) -> None:
        if not self.enabled:
            logger.warning("Contact for %s not saved: Google not configured", mask_phone(phone))
            return
        canonical = canonicalize_phone(phone) or phone
        person = await self._find_person(canonical)

        if person is not None:
            if email and email != _first_value(person, "emailAddresses", "value"):
                await self._request(
                    "PATCH",
                    f"/{person.get('resourceName')}:updateContact",
                    params={"updatePersonFields": "emailAddresses"},
                    json={"etag": person.get("etag"), "emailAddresses": [{"value": email}]},
                )
                logger.info("Client email updated for %s", mask_phone(canonical))
            else:
                logger.info("Client %s already up to date", mask_phone(canonical))
            return

        given, _, family = name.partition(" ")
        await self._request(
            "POST",
            "/people:createContact",
            json={
                "names": [{"displayName": name, "givenName": given, "familyName": family}],
                "emailAddresses": [{"value": email}] if email else [],
                "phoneNumbers": [{"value": canonical, "type": "mobile"}],
            },
        )
        logger.info("New client saved for %s", mask_phone(canonical))


class InMemoryContacts(ContactsAdapter):
    """Address book kept in a dict keyed by canonical phone; used offline."""

    def __init__(self, contacts: Optional[dict[str, ClientContact]] = None) -> None:
        self.contacts: dict[str, ClientContact] = dict(contacts or {})

    async def find_by_phone(self, phone: str) -> Optional[ClientContact]:
        canonical = canonicalize_phone(phone)
        return self.contacts.get(canonical) if canonical else None

    async def save_contact(self, name: str, email: str, phone: str) -> None:
        canonical = canonicalize_phone(phone) or phone
        existing = self.contacts.get(canonical)
        self.contacts[canonical] = ClientContact(
            name=existing.name if existing and existing.name else name,
            email=email or (existing.email if existing else None),
        )


def build_contacts_adapter(config: Optional[ContactsConfig] = None) -> Optional[ContactsAdapter]:
    """Return the Google address book when credentials are configured."""
    cfg = config or settings.contacts
    if cfg.client_id and cfg.client_secret and cfg.refresh_token:
        return GoogleContacts(cfg)
    logger.info("Google contacts not configured; returning clients will not be recognized")
    return None
