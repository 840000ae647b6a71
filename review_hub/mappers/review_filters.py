from review_hub.mappers.review_normalizer import source_rating
from review_hub.schemas.hostaway import HostawayReview, HostawayReviewsResponse
from review_hub.schemas.reviews import (
    FilterOptions,
    NormalizedReview,
    PropertyOption,
    ReviewQuery,
)

# ReviewQuery fields Hostaway has no query parameter for
LOCAL_FILTERS = ("listing_name", "channel", "start_date", "end_date")


def has_local_filters(query: ReviewQuery) -> bool:
    return any(getattr(query, field) is not None for field in LOCAL_FILTERS)


def _matches(review: HostawayReview, query: ReviewQuery) -> bool:
    if query.listing_id is not None and review.listing_map_id != query.listing_id:
        return False
    if query.listing_name and query.listing_name.lower() not in review.listing_name.lower():
        return False
    if query.type and review.type != query.type:
        return False
    if query.status and review.status != query.status:
        return False
    if query.channel is not None and review.channel_id != query.channel:
        return False
    submitted = review.submitted_at.date()
    if query.start_date and submitted < query.start_date:
        return False
    if query.end_date and submitted > query.end_date:
        return False
    return True


def _sort_key(sort_by: str):
    if sort_by == "rating":
        return lambda r: source_rating(r) or 0
    if sort_by == "guestName":
        return lambda r: r.guest_name.casefold()
    return lambda r: r.submitted_at


def apply_review_query(
    reviews: list[HostawayReview], query: ReviewQuery
) -> HostawayReviewsResponse:
    """Filter, sort and paginate reviews the way the Hostaway endpoint does.

    ``total`` is the size of the filtered set, before pagination.
    """
    matching = [r for r in reviews if _matches(r, query)]
    matching.sort(key=_sort_key(query.sort_by), reverse=query.sort_order == "desc")

    page = matching[query.offset:query.offset + query.limit]
    return HostawayReviewsResponse(
        result=page,
        count=len(page),
        total=len(matching),
        offset=query.offset,
        limit=query.limit,
    )


def build_filter_options(reviews: list[NormalizedReview]) -> FilterOptions:
    """Distinct dashboard filter values, in order of first appearance."""
    properties: dict[int, PropertyOption] = {}
    channels: dict[str, None] = {}
    categories: dict[str, None] = {}

    for review in reviews:
        if review.listing_id is not None and review.listing_id not in properties:
            properties[review.listing_id] = PropertyOption(
                id=review.listing_id, name=review.listing_name
            )
        channels.setdefault(review.channel)
        for category in review.review_categories:
            categories.setdefault(category.category)

    return FilterOptions(
        properties=list(properties.values()),
        channels=list(channels),
        categories=list(categories),
    )
