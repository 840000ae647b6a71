import logging

from review_hub.mappers.property_summary import summarize_by_property
from review_hub.mappers.review_filters import build_filter_options
from review_hub.mappers.review_normalizer import normalize_response, normalize_review
from review_hub.repository import ReviewRepository
from review_hub.schemas.hostaway import AWAITING_STATUS, PUBLISHED_STATUS
from review_hub.schemas.reviews import (
    FilterOptions,
    NormalizedReview,
    PropertySummary,
    ReviewQuery,
    ReviewsEnvelope,
)
from review_hub.services.hostaway import HostawayService

logger = logging.getLogger(__name__)


def approval_update(
    repository: ReviewRepository, review_id: int, is_approved: bool
) -> NormalizedReview | None:
    """Publish or unpublish a stored review and return it normalized.

    Returns None when the id is unknown. No history is kept.
    """
    review = repository.find_by_id(review_id)
    if review is None:
        return None

    status = PUBLISHED_STATUS if is_approved else AWAITING_STATUS
    updated = review.model_copy(update={"status": status})
    repository.update(updated)
    logger.info("Review %s status set to '%s'", review_id, status)
    return normalize_review(updated)


class ReviewService:
    """Read and moderation operations behind the dashboard and property pages."""

    def __init__(self, hostaway: HostawayService, repository: ReviewRepository):
        self._hostaway = hostaway
        self._repository = repository

    @property
    def mock_mode(self) -> bool:
        return self._hostaway.mock_mode

    async def list_reviews(self, query: ReviewQuery | None = None) -> ReviewsEnvelope:
        raw = await self._hostaway.fetch_reviews(query)
        return normalize_response(raw)

    async def get_review(self, review_id: int) -> NormalizedReview | None:
        lookup = await self._hostaway.fetch_review_by_id(review_id)
        if not lookup.found:
            return None
        return normalize_review(lookup.review)

    def normalized_reviews(self) -> list[NormalizedReview]:
        return [normalize_review(r) for r in self._repository.list()]

    def property_summaries(self) -> list[PropertySummary]:
        return summarize_by_property(self.normalized_reviews())

    def public_reviews(self, listing_id: int | None = None) -> list[NormalizedReview]:
        return [
            r for r in self.normalized_reviews()
            if r.is_approved and (listing_id is None or r.listing_id == listing_id)
        ]

    def set_approval(self, review_id: int, is_approved: bool) -> NormalizedReview | None:
        return approval_update(self._repository, review_id, is_approved)

    def filter_options(self) -> FilterOptions:
        return build_filter_options(self.normalized_reviews())
