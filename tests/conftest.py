import httpx
import pytest
from httpx import ASGITransport

from review_hub.schemas.hostaway import HostawayReview


@pytest.fixture
def mock_env(monkeypatch):
    monkeypatch.setenv("USE_MOCK_DATA", "true")
    monkeypatch.setenv("CREDENTIAL_STORE", "memory")
    monkeypatch.delenv("HOSTAWAY_ACCOUNT_ID", raising=False)
    monkeypatch.delenv("HOSTAWAY_API_KEY", raising=False)
    monkeypatch.delenv("FIXTURE_PATH", raising=False)


@pytest.fixture
async def client(mock_env):
    from review_hub.main import app, lifespan

    async with lifespan(app):
        async with httpx.AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://test",
        ) as c:
            yield c


@pytest.fixture
def make_review():
    """Build a Hostaway review from its wire (camelCase) representation."""

    def _make(**overrides) -> HostawayReview:
        payload = {
            "id": 1,
            "type": "guest-to-host",
            "status": "published",
            "rating": 8,
            "publicReview": "Great stay",
            "reviewCategory": [],
            "submittedAt": "2024-01-01 12:00:00",
            "guestName": "Guest",
            "listingName": "Test Listing",
            "listingMapId": 1,
            "channelId": 2018,
        }
        payload.update(overrides)
        return HostawayReview(**payload)

    return _make
