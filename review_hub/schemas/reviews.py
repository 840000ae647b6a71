from __future__ import annotations

from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from review_hub.schemas.hostaway import HostawayReview

SortField = Literal["submittedAt", "rating", "guestName"]
SortOrder = Literal["asc", "desc"]


class CategoryRating(BaseModel):
    category: str
    rating: int


class NormalizedReview(BaseModel):
    id: int
    listing_id: int | None
    listing_name: str
    guest_name: str
    rating: int | None
    review_date: datetime
    channel_id: int | None
    channel: str
    type: str
    status: str
    is_approved: bool
    comment: str | None = None
    review_categories: list[CategoryRating] = []


class PropertySummary(BaseModel):
    listing_id: int
    listing_name: str
    total_reviews: int = 0
    approved_reviews: int = 0
    average_rating: float = 0.0
    rating_distribution: dict[int, int] = Field(
        default_factory=lambda: {1: 0, 2: 0, 3: 0, 4: 0, 5: 0}
    )
    channel_breakdown: dict[str, int] = {}
    recent_reviews: list[NormalizedReview] = []


class ReviewQuery(BaseModel):
    listing_id: int | None = None
    listing_name: str | None = None
    type: str | None = None  # "guest-to-host" | "host-to-guest"
    status: str | None = None  # "published" | "awaiting" | ...
    channel: int | None = None
    start_date: date | None = None
    end_date: date | None = None
    sort_by: SortField = "submittedAt"
    sort_order: SortOrder = "desc"
    offset: int = Field(default=0, ge=0)
    limit: int = Field(default=50, ge=1)


class ReviewsEnvelope(BaseModel):
    total: int
    count: int
    offset: int
    limit: int
    reviews: list[NormalizedReview]
    reviews_by_listing: dict[str, list[NormalizedReview]]


class ReviewLookup(BaseModel):
    status: str  # "found" | "not_found"
    review_id: int
    review: HostawayReview | None = None

    @property
    def found(self) -> bool:
        return self.status == "found" and self.review is not None


class PropertyOption(BaseModel):
    id: int
    name: str


class FilterOptions(BaseModel):
    properties: list[PropertyOption]
    channels: list[str]
    categories: list[str]
    ratings: list[int] = [1, 2, 3, 4, 5]


class ReviewListResponse(BaseModel):
    status: str = "success"
    message: str
    data: ReviewsEnvelope


class ReviewDetailResponse(BaseModel):
    status: str = "success"
    message: str
    review: NormalizedReview


class PublicReviewsResponse(BaseModel):
    listing_id: int | None = None
    reviews: list[NormalizedReview]
    total: int


class ApprovalRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    is_approved: bool = Field(alias="isApproved")


class ApprovalResponse(BaseModel):
    message: str
    review: NormalizedReview


class HealthResponse(BaseModel):
    message: str
    status: str
    timestamp: datetime
    mock_mode: bool
    credential_store: str
