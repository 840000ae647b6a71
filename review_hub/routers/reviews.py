import logging
from datetime import date, datetime, timezone

from fastapi import APIRouter, HTTPException, Query

from review_hub.dependencies import ReviewServiceDep, TokenManagerDep
from review_hub.schemas.reviews import (
    ApprovalRequest,
    ApprovalResponse,
    FilterOptions,
    HealthResponse,
    PropertySummary,
    PublicReviewsResponse,
    ReviewDetailResponse,
    ReviewListResponse,
    ReviewQuery,
    SortField,
    SortOrder,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/", response_model=HealthResponse)
async def health(service: ReviewServiceDep, tokens: TokenManagerDep) -> HealthResponse:
    return HealthResponse(
        message="Flex Living Reviews API",
        status="running",
        timestamp=datetime.now(timezone.utc),
        mock_mode=service.mock_mode,
        credential_store=tokens.store_name,
    )


@router.get("/api/reviews/hostaway", response_model=ReviewListResponse)
async def list_hostaway_reviews(
    service: ReviewServiceDep,
    listing_id: int | None = Query(default=None, alias="listingId"),
    listing_name: str | None = Query(default=None, alias="listingName"),
    type: str | None = None,
    status: str | None = None,
    channel: int | None = None,
    start_date: date | None = Query(default=None, alias="startDate"),
    end_date: date | None = Query(default=None, alias="endDate"),
    sort_by: SortField = Query(default="submittedAt", alias="sortBy"),
    sort_order: SortOrder = Query(default="desc", alias="sortOrder"),
    limit: int = Query(default=50, ge=1),
    offset: int = Query(default=0, ge=0),
) -> ReviewListResponse:
    query = ReviewQuery(
        listing_id=listing_id,
        listing_name=listing_name,
        type=type,
        status=status,
        channel=channel,
        start_date=start_date,
        end_date=end_date,
        sort_by=sort_by,
        sort_order=sort_order,
        limit=limit,
        offset=offset,
    )
    envelope = await service.list_reviews(query)
    return ReviewListResponse(
        message=f"Fetched and normalized {envelope.count} reviews from Hostaway",
        data=envelope,
    )


@router.get("/api/reviews/hostaway/{review_id}", response_model=ReviewDetailResponse)
async def get_hostaway_review(review_id: int, service: ReviewServiceDep) -> ReviewDetailResponse:
    review = await service.get_review(review_id)
    if review is None:
        raise HTTPException(status_code=404, detail="Review not found")
    return ReviewDetailResponse(
        message=f"Fetched and normalized review {review_id}",
        review=review,
    )


@router.get("/api/reviews/public", response_model=PublicReviewsResponse)
async def list_public_reviews(
    service: ReviewServiceDep,
    listing_id: int | None = Query(default=None, alias="listingId"),
) -> PublicReviewsResponse:
    reviews = service.public_reviews(listing_id)
    return PublicReviewsResponse(listing_id=listing_id, reviews=reviews, total=len(reviews))


@router.put("/api/reviews/{review_id}/approval", response_model=ApprovalResponse)
async def update_review_approval(
    review_id: int, request: ApprovalRequest, service: ReviewServiceDep
) -> ApprovalResponse:
    review = service.set_approval(review_id, request.is_approved)
    if review is None:
        raise HTTPException(status_code=404, detail="Review not found")
    return ApprovalResponse(
        message="Review approval status updated successfully",
        review=review,
    )


@router.get("/api/properties/summary", response_model=list[PropertySummary])
async def property_summary(service: ReviewServiceDep) -> list[PropertySummary]:
    return service.property_summaries()


@router.get(
    "/api/properties/{listing_id}/public-reviews",
    response_model=PublicReviewsResponse,
)
async def property_public_reviews(
    listing_id: int, service: ReviewServiceDep
) -> PublicReviewsResponse:
    reviews = service.public_reviews(listing_id)
    return PublicReviewsResponse(listing_id=listing_id, reviews=reviews, total=len(reviews))


@router.get("/api/filter-options", response_model=FilterOptions)
async def filter_options(service: ReviewServiceDep) -> FilterOptions:
    return service.filter_options()
