from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Protocol

from pydantic import ValidationError

from review_hub.schemas.hostaway import HostawayReview, HostawayReviewsResponse

logger = logging.getLogger(__name__)


class ReviewRepository(Protocol):
    def find_by_id(self, review_id: int) -> HostawayReview | None: ...

    def update(self, review: HostawayReview) -> None: ...

    def list(self) -> list[HostawayReview]: ...


class InMemoryReviewRepository:
    """Raw Hostaway reviews keyed by id, kept in insertion order."""

    def __init__(self, reviews: list[HostawayReview] | None = None) -> None:
        self._reviews: dict[int, HostawayReview] = {}
        for review in reviews or []:
            self._reviews[review.id] = review

    def __len__(self) -> int:
        return len(self._reviews)

    def find_by_id(self, review_id: int) -> HostawayReview | None:
        return self._reviews.get(review_id)

    def update(self, review: HostawayReview) -> None:
        # Replaces the stored record; the last concurrent write wins
        self._reviews[review.id] = review

    def list(self) -> list[HostawayReview]:
        return list(self._reviews.values())


def load_fixture_reviews(path: Path) -> list[HostawayReview]:
    """Read the bundled Hostaway response. Returns [] if it is missing or malformed."""
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
        reviews = HostawayReviewsResponse(**raw).result
    except (OSError, ValueError, ValidationError, TypeError) as exc:
        logger.error("Fixture reviews at %s could not be loaded: %s", path, exc)
        return []

    logger.info("Loaded %d fixture reviews from %s", len(reviews), path)
    return reviews
