from decimal import ROUND_HALF_UP, Decimal

from review_hub.schemas.hostaway import PUBLISHED_STATUS, HostawayReview, HostawayReviewsResponse
from review_hub.schemas.reviews import CategoryRating, NormalizedReview, ReviewsEnvelope

UNKNOWN_CHANNEL = "unknown"

# Hostaway channel ids, bump the version when the table changes
CHANNEL_TABLE_VERSION = 1
CHANNEL_NAMES: dict[int, str] = {
    2000: "direct",
    2002: "homeaway",
    2005: "bookingcom",
    2007: "expedia",
    2009: "homeawayical",
    2010: "vrboical",
    2013: "bookingengine",
    2015: "customIcal",
    2016: "tripadvisorical",
    2017: "wordpress",
    2018: "airbnbOfficial",
    2019: "marriott",
    2020: "partner",
    2021: "gds",
    2022: "google",
}


def round_half_up(value: float, places: int = 0) -> Decimal:
    """Round half away from zero (``round()`` would round half to even)."""
    exponent = Decimal(1).scaleb(-places)
    return Decimal(str(value)).quantize(exponent, rounding=ROUND_HALF_UP)


def rescale_rating(rating10: float) -> int:
    """Convert a 0-10 Hostaway rating to the 0-5 scale."""
    return int(round_half_up(rating10 * 5 / 10))


def channel_name(channel_id: int | None) -> str:
    if channel_id is None:
        return UNKNOWN_CHANNEL
    return CHANNEL_NAMES.get(channel_id, UNKNOWN_CHANNEL)


def source_rating(review: HostawayReview) -> float | None:
    """The 0-10 rating of a review, derived from its categories when absent."""
    if review.rating is not None:
        return review.rating
    if review.review_category:
        ratings = [c.rating for c in review.review_category]
        return sum(ratings) / len(ratings)
    return None


def normalize_review(review: HostawayReview) -> NormalizedReview:
    rating10 = source_rating(review)
    return NormalizedReview(
        id=review.id,
        listing_id=review.listing_map_id,
        listing_name=review.listing_name,
        guest_name=review.guest_name,
        rating=rescale_rating(rating10) if rating10 is not None else None,
        review_date=review.submitted_at,
        channel_id=review.channel_id,
        channel=channel_name(review.channel_id),
        type=review.type,
        status=review.status,
        is_approved=review.status == PUBLISHED_STATUS,
        comment=review.public_review,
        # Rounded per category, so these need not average to ``rating``
        review_categories=[
            CategoryRating(category=c.category, rating=rescale_rating(c.rating))
            for c in review.review_category
        ],
    )


def normalize_response(response: HostawayReviewsResponse) -> ReviewsEnvelope:
    """Normalize a page of Hostaway reviews and group it by listing name."""
    reviews = [normalize_review(r) for r in response.result]

    by_listing: dict[str, list[NormalizedReview]] = {}
    for review in reviews:
        by_listing.setdefault(review.listing_name, []).append(review)

    return ReviewsEnvelope(
        total=response.total,
        count=len(reviews),
        offset=response.offset,
        limit=response.limit,
        reviews=reviews,
        reviews_by_listing=by_listing,
    )
