import logging
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Protocol

import httpx
from pydantic import ValidationError

from review_hub.exceptions.custom import CredentialStoreNotConfiguredError
from review_hub.schemas.credentials import Credential

logger = logging.getLogger(__name__)

TOKENS_TABLE = "hostaway_tokens"

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _parse_timestamp(value: str) -> datetime:
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed


class CredentialStore(Protocol):
    """Key/value-with-expiry contract keyed by upstream client identity.

    ``get`` only returns credentials that are still valid. ``upsert`` and
    ``delete`` report failure with ``False`` instead of raising.
    """

    name: str

    async def get(self, client_id: str) -> Credential | None: ...

    async def upsert(self, client_id: str, token: str, expires_at: datetime) -> bool: ...

    async def delete(self, client_id: str | None = None) -> bool: ...

    async def expiries(self) -> dict[str, datetime] | None: ...


class InMemoryCredentialStore:
    name = "memory"

    def __init__(self, clock: Clock = utc_now) -> None:
        self._rows: dict[str, Credential] = {}
        self._clock = clock

    async def get(self, client_id: str) -> Credential | None:
        credential = self._rows.get(client_id)
        if credential is None or credential.expires_at <= self._clock():
            return None
        return credential

    async def upsert(self, client_id: str, token: str, expires_at: datetime) -> bool:
        self._rows[client_id] = Credential(
            client_id=client_id, token=token, expires_at=expires_at
        )
        return True

    async def delete(self, client_id: str | None = None) -> bool:
        if client_id is None:
            self._rows.clear()
        else:
            self._rows.pop(client_id, None)
        return True

    async def expiries(self) -> dict[str, datetime] | None:
        return {cid: row.expires_at for cid, row in sorted(self._rows.items())}


class SupabaseCredentialStore:
    """Credentials persisted in a Supabase table through its PostgREST API."""

    name = "supabase"

    def __init__(
        self,
        client: httpx.AsyncClient,
        url: str,
        api_key: str,
        table: str = TOKENS_TABLE,
        clock: Clock = utc_now,
    ):
        self._client = client
        self._configured = bool(url and api_key)
        self._table_url = f"{url.rstrip('/')}/rest/v1/{table}"
        self._headers = {
            "apikey": api_key,
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }
        self._clock = clock

    def _ensure_configured(self) -> None:
        if not self._configured:
            raise CredentialStoreNotConfiguredError(self.name)

    async def get(self, client_id: str) -> Credential | None:
        self._ensure_configured()
        params = {
            "select": "client_id,token,expires_at",
            "client_id": f"eq.{client_id}",
            "expires_at": f"gt.{self._clock().isoformat()}",
            "limit": "1",
        }
        try:
            resp = await self._client.get(self._table_url, params=params, headers=self._headers)
        except httpx.HTTPError as exc:
            logger.error("Credential store unreachable reading %s: %s", client_id, exc)
            return None

        if resp.status_code >= 400:
            logger.error("Credential store error reading %s: %s (status=%s)",
                         client_id, resp.text, resp.status_code)
            return None

        try:
            rows = resp.json()
            if not rows:
                logger.info("No valid access token stored for client %s", client_id)
                return None
            credential = Credential(**rows[0])
        except (ValueError, ValidationError, TypeError, KeyError) as exc:
            logger.error("Unreadable credential row for %s: %s", client_id, exc)
            return None

        logger.info("Retrieved stored token for client %s (expires at %s)",
                    client_id, credential.expires_at.isoformat())
        return credential

    async def upsert(self, client_id: str, token: str, expires_at: datetime) -> bool:
        self._ensure_configured()
        headers = {**self._headers, "Prefer": "resolution=merge-duplicates,return=minimal"}
        row = {"client_id": client_id, "token": token, "expires_at": expires_at.isoformat()}
        try:
            resp = await self._client.post(
                self._table_url,
                params={"on_conflict": "client_id"},
                json=[row],
                headers=headers,
            )
        except httpx.HTTPError as exc:
            logger.error("Credential store unreachable storing %s: %s", client_id, exc)
            return False

        if resp.status_code >= 400:
            logger.error("Credential store error storing %s: %s (status=%s)",
                         client_id, resp.text, resp.status_code)
            return False

        logger.info("Stored token for client %s (expires at %s)", client_id, expires_at.isoformat())
        return True

    async def delete(self, client_id: str | None = None) -> bool:
        self._ensure_configured()
        # PostgREST refuses unfiltered deletes, so "all" is expressed as a filter
        params = {"client_id": f"eq.{client_id}" if client_id else "neq."}
        try:
            resp = await self._client.delete(self._table_url, params=params, headers=self._headers)
        except httpx.HTTPError as exc:
            logger.error("Credential store unreachable clearing tokens: %s", exc)
            return False

        if resp.status_code >= 400:
            logger.error("Credential store error clearing tokens: %s (status=%s)",
                         resp.text, resp.status_code)
            return False

        logger.info("Cleared tokens %s", f"for client {client_id}" if client_id else "for all clients")
        return True

    async def expiries(self) -> dict[str, datetime] | None:
        """Expiry of every stored row, expired ones included, by client id."""
        self._ensure_configured()
        params = {"select": "client_id,expires_at", "order": "client_id.asc"}
        try:
            resp = await self._client.get(self._table_url, params=params, headers=self._headers)
        except httpx.HTTPError as exc:
            logger.error("Credential store unreachable listing tokens: %s", exc)
            return None

        if resp.status_code >= 400:
            logger.error("Credential store error listing tokens: %s (status=%s)",
                         resp.text, resp.status_code)
            return None

        try:
            return {
                row["client_id"]: _parse_timestamp(row["expires_at"])
                for row in resp.json()
            }
        except (ValueError, TypeError, KeyError) as exc:
            logger.error("Unreadable token rows: %s", exc)
            return None


def create_credential_store(
    kind: str,
    client: httpx.AsyncClient,
    supabase_url: str = "",
    supabase_key: str = "",
) -> CredentialStore:
    if kind == "supabase":
        return SupabaseCredentialStore(client, supabase_url, supabase_key)
    if kind == "memory":
        return InMemoryCredentialStore()
    raise ValueError(f"Unknown credential store: {kind}")
