import logging
from typing import TypeVar

import httpx
from pydantic import BaseModel

from review_hub.exceptions.custom import (
    CredentialStoreNotConfiguredError,
    HostawayAuthError,
    HostawayError,
    ProviderContractError,
)
from review_hub.mappers.review_filters import apply_review_query, has_local_filters
from review_hub.repository import ReviewRepository
from review_hub.schemas.hostaway import (
    AccessTokenResponse,
    HostawayReviewResponse,
    HostawayReviewsResponse,
)
from review_hub.schemas.reviews import ReviewLookup, ReviewQuery
from review_hub.services.token_manager import TokenManager

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.hostaway.com/v1"

# ReviewQuery field -> Hostaway query parameter
QUERY_PARAMS = {
    "listing_id": "listingId",
    "status": "status",
    "type": "type",
    "limit": "limit",
    "offset": "offset",
    "sort_by": "sortBy",
    "sort_order": "sortOrder",
}

# Failures that send a read to the fixture data instead of the caller
_FALLBACK_ERRORS = (HostawayError, httpx.HTTPError, CredentialStoreNotConfiguredError)

ModelT = TypeVar("ModelT", bound=BaseModel)


def failure_kind(exc: Exception) -> str:
    """Classify a fallback cause so logs tell mock mode from a broken integration."""
    if isinstance(exc, CredentialStoreNotConfiguredError):
        return "credential_store_not_configured"
    if isinstance(exc, httpx.TimeoutException):
        return "timeout"
    if isinstance(exc, httpx.HTTPError):
        return "transport"
    if isinstance(exc, HostawayAuthError):
        return "auth"
    if isinstance(exc, HostawayError):
        if exc.status_code == 403:
            return "forbidden_after_refresh"
        if exc.status_code is not None and exc.status_code >= 500:
            return "server_error"
        return "client_error"
    return type(exc).__name__


class HostawayService:
    def __init__(
        self,
        client: httpx.AsyncClient,
        token_manager: TokenManager,
        fixtures: ReviewRepository,
        account_id: str,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        use_mock_data: bool = False,
    ):
        self._client = client
        self._tokens = token_manager
        self._fixtures = fixtures
        self._account_id = account_id
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self.mock_mode = use_mock_data or not account_id or not api_key
        logger.info("Hostaway service initialized (mock mode: %s)", self.mock_mode)

    @staticmethod
    def _parse(resp: httpx.Response, model: type[ModelT]) -> ModelT:
        try:
            return model(**resp.json())
        except (ValueError, TypeError) as exc:
            raise ProviderContractError(f"{resp.request.url}: {exc}") from exc

    async def _mint_token(self) -> str:
        """Exchange the client credentials for a new access token and cache it."""
        logger.info("Requesting new Hostaway access token")
        resp = await self._client.post(
            f"{self._base_url}/accessTokens",
            data={
                "grant_type": "client_credentials",
                "client_id": self._account_id,
                "client_secret": self._api_key,
                "scope": "general",
            },
            headers={"Cache-control": "no-cache"},
        )
        if resp.status_code >= 400:
            raise HostawayAuthError(resp.text, status_code=resp.status_code)

        token = self._parse(resp, AccessTokenResponse).access_token
        # An uncached token is still good for this request
        await self._tokens.store_token(self._account_id, token)
        return token

    async def _get_access_token(self, force_refresh: bool = False) -> str:
        if not force_refresh:
            token = await self._tokens.get_valid_token(self._account_id)
            if token:
                return token
        return await self._mint_token()

    async def _send(
        self, method: str, url: str, token: str, params: dict | None
    ) -> httpx.Response:
        headers = {"Authorization": f"Bearer {token}", "Accept": "application/json"}
        return await self._client.request(method, url, params=params, headers=headers)

    async def _request(
        self, method: str, url: str, params: dict | None = None
    ) -> httpx.Response:
        token = await self._get_access_token()
        resp = await self._send(method, url, token, params)

        if resp.status_code == 403:
            logger.warning("Hostaway rejected the access token (403), refreshing once")
            await self._tokens.clear_tokens(self._account_id)
            token = await self._get_access_token(force_refresh=True)
            resp = await self._send(method, url, token, params)

        if resp.status_code >= 400:
            raise HostawayError(resp.text, status_code=resp.status_code)
        return resp

    def _log_fallback(self, operation: str, exc: Exception) -> None:
        logger.warning(
            "Hostaway %s failed (%s: %s), falling back to fixture data",
            operation, failure_kind(exc), exc,
        )

    def _fixture_reviews(self, query: ReviewQuery) -> HostawayReviewsResponse:
        return apply_review_query(self._fixtures.list(), query)

    def _fixture_review(self, review_id: int) -> ReviewLookup:
        review = self._fixtures.find_by_id(review_id)
        if review is None:
            return ReviewLookup(status="not_found", review_id=review_id)
        return ReviewLookup(status="found", review_id=review_id, review=review)

    @staticmethod
    def _query_params(query: ReviewQuery, paginate: bool = True) -> dict[str, str]:
        values = query.model_dump()
        if not paginate:
            values.update(limit=None, offset=None)
        return {
            param: str(values[field])
            for field, param in QUERY_PARAMS.items()
            if values[field] is not None
        }

    async def fetch_reviews(self, query: ReviewQuery | None = None) -> HostawayReviewsResponse:
        """Fetch a page of raw reviews from Hostaway, or from the fixture data."""
        query = query or ReviewQuery()
        if self.mock_mode:
            logger.info("Serving reviews from fixture data (mock mode)")
            return self._fixture_reviews(query)

        # Filters Hostaway cannot apply need the unpaged set, narrowed and paged here
        local = has_local_filters(query)
        try:
            resp = await self._request(
                "GET", f"{self._base_url}/reviews",
                params=self._query_params(query, paginate=not local),
            )
        except _FALLBACK_ERRORS as exc:
            self._log_fallback("fetch_reviews", exc)
            return self._fixture_reviews(query)

        data = self._parse(resp, HostawayReviewsResponse)
        logger.info("Fetched %d of %d reviews from Hostaway", data.count, data.total)
        if local:
            data = apply_review_query(data.result, query)
        return data

    async def fetch_review_by_id(self, review_id: int) -> ReviewLookup:
        """Fetch one raw review. A missing id is reported as ``not_found``."""
        if self.mock_mode:
            return self._fixture_review(review_id)

        try:
            resp = await self._request("GET", f"{self._base_url}/reviews/{review_id}")
        except _FALLBACK_ERRORS as exc:
            if type(exc) is HostawayError and exc.status_code == 404:
                logger.info("Hostaway review %s not found", review_id)
                return ReviewLookup(status="not_found", review_id=review_id)
            self._log_fallback("fetch_review_by_id", exc)
            return self._fixture_review(review_id)

        payload = self._parse(resp, HostawayReviewResponse)
        if payload.result is None:
            return ReviewLookup(status="not_found", review_id=review_id)
        return ReviewLookup(status="found", review_id=review_id, review=payload.result)
