from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, field_validator

PUBLISHED_STATUS = "published"
AWAITING_STATUS = "awaiting"


class HostawayReviewCategory(BaseModel):
    model_config = ConfigDict(frozen=True)

    category: str
    rating: float


class HostawayReview(BaseModel):
    """A review exactly as Hostaway returns it (ratings on a 0-10 scale)."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: int
    listing_map_id: int | None = Field(default=None, alias="listingMapId")
    listing_name: str = Field(default="", alias="listingName")
    guest_name: str = Field(default="", alias="guestName")
    rating: float | None = None
    review_category: list[HostawayReviewCategory] = Field(
        default_factory=list, alias="reviewCategory"
    )
    submitted_at: datetime = Field(alias="submittedAt")
    channel_id: int | None = Field(default=None, alias="channelId")
    type: str = "guest-to-host"
    status: str = AWAITING_STATUS
    public_review: str | None = Field(default=None, alias="publicReview")

    @field_validator("submitted_at")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        # Hostaway sends "YYYY-MM-DD HH:MM:SS" without an offset
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @field_validator("review_category", mode="before")
    @classmethod
    def _none_to_empty(cls, value):
        return value or []

    @field_validator("listing_name", "guest_name", mode="before")
    @classmethod
    def _none_to_blank(cls, value):
        return "" if value is None else value


class HostawayReviewsResponse(BaseModel):
    status: str = "success"
    result: list[HostawayReview] = []
    count: int = 0
    total: int = 0
    offset: int = 0
    limit: int = 50


class HostawayReviewResponse(BaseModel):
    status: str = "success"
    result: HostawayReview | None = None


class AccessTokenResponse(BaseModel):
    token_type: str | None = None
    access_token: str
    expires_in: int | None = None
