import logging
from datetime import timedelta

from review_hub.exceptions.custom import CredentialStoreNotConfiguredError
from review_hub.schemas.credentials import TokenStats, TokenStatus
from review_hub.services.credential_store import Clock, CredentialStore, utc_now

logger = logging.getLogger(__name__)

# Hostaway access tokens are valid for 24 months
TOKEN_VALIDITY = timedelta(days=24 * 30)
SAFETY_MARGIN = timedelta(minutes=5)


def _require_client_id(client_id: str) -> None:
    if not client_id:
        raise ValueError("client_id is required")


class TokenManager:
    """Decides whether a usable Hostaway token exists for a client identity.

    Storage failures never escape as exceptions: a failed lookup reads as
    "no token" and a failed write is reported as ``False``. Only a store
    that is not configured at all raises, so the caller can abandon the
    live path. The read-only views ``has_valid_token`` and ``token_stats``
    treat it as empty instead.
    """

    def __init__(
        self,
        store: CredentialStore,
        validity: timedelta = TOKEN_VALIDITY,
        safety_margin: timedelta = SAFETY_MARGIN,
        clock: Clock = utc_now,
    ):
        self._store = store
        self._lifetime = validity - safety_margin
        self._clock = clock

    @property
    def store_name(self) -> str:
        return self._store.name

    async def get_valid_token(self, client_id: str) -> str | None:
        _require_client_id(client_id)
        credential = await self._store.get(client_id)
        if credential is None:
            logger.info("No valid access token for client %s", client_id)
            return None
        return credential.token

    async def has_valid_token(self, client_id: str) -> bool:
        try:
            return await self.get_valid_token(client_id) is not None
        except CredentialStoreNotConfiguredError:
            logger.warning("Credential store %s is not configured", self.store_name)
            return False

    async def store_token(self, client_id: str, token: str) -> bool:
        _require_client_id(client_id)
        expires_at = self._clock() + self._lifetime
        stored = await self._store.upsert(client_id, token, expires_at)
        if not stored:
            logger.warning("Could not cache access token for client %s", client_id)
        return stored

    async def clear_tokens(self, client_id: str | None = None) -> bool:
        cleared = await self._store.delete(client_id)
        if not cleared:
            logger.warning("Could not clear tokens %s",
                           f"for client {client_id}" if client_id else "for all clients")
        return cleared

    async def token_stats(self) -> TokenStats | None:
        """Debug view of every stored token's expiry. None if the store can't be read."""
        try:
            expiries = await self._store.expiries()
        except CredentialStoreNotConfiguredError:
            logger.warning("Credential store %s is not configured", self.store_name)
            return None
        if expiries is None:
            return None

        now = self._clock()
        tokens = [
            TokenStatus(client_id=client_id, expires_at=expires_at, is_valid=expires_at > now)
            for client_id, expires_at in expiries.items()
        ]
        return TokenStats(total_tokens=len(tokens), tokens=tokens)
