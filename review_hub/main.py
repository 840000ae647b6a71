import logging
import sys
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI

from review_hub.config import Settings
from review_hub.exceptions.custom import ProviderContractError
from review_hub.exceptions.handlers import provider_contract_error_handler
from review_hub.repository import InMemoryReviewRepository, load_fixture_reviews
from review_hub.routers.reviews import router as reviews_router
from review_hub.services.credential_store import create_credential_store
from review_hub.services.hostaway import HostawayService
from review_hub.services.reviews import ReviewService
from review_hub.services.token_manager import TokenManager

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = Settings()

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stdout,
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)

    async with httpx.AsyncClient(timeout=settings.request_timeout) as client:
        store = create_credential_store(
            settings.credential_store,
            client,
            supabase_url=settings.supabase_url,
            supabase_key=settings.supabase_anon_key,
        )
        token_manager = TokenManager(store)

        repository = InMemoryReviewRepository(load_fixture_reviews(settings.fixture_path))

        hostaway = HostawayService(
            client,
            token_manager,
            repository,
            account_id=settings.hostaway_account_id,
            api_key=settings.hostaway_api_key,
            base_url=settings.hostaway_api_url,
            use_mock_data=settings.mock_mode,
        )

        app.state.token_manager = token_manager
        app.state.review_service = ReviewService(hostaway, repository)

        logger.info(
            "Review API ready: %s mode, %d fixture reviews, credential store '%s'",
            "mock" if hostaway.mock_mode else "live", len(repository), store.name,
        )
        yield


app = FastAPI(title="Flex Living Reviews API", lifespan=lifespan)

app.add_exception_handler(ProviderContractError, provider_contract_error_handler)

app.include_router(reviews_router)
