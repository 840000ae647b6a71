from review_hub.mappers.review_normalizer import round_half_up
from review_hub.schemas.reviews import NormalizedReview, PropertySummary

RECENT_REVIEWS = 5


def summarize_by_property(reviews: list[NormalizedReview]) -> list[PropertySummary]:
    """Roll normalized reviews up per listing, in order of first appearance.

    Reviews without a listing id cannot be attributed and are skipped.
    Reviews without a rating count towards ``total_reviews`` and pull the
    average down, but have no bucket in the distribution.
    """
    summaries: dict[int, PropertySummary] = {}
    members: dict[int, list[NormalizedReview]] = {}
    rating_sums: dict[int, int] = {}

    for review in reviews:
        listing_id = review.listing_id
        if listing_id is None:
            continue

        summary = summaries.get(listing_id)
        if summary is None:
            summary = PropertySummary(listing_id=listing_id, listing_name=review.listing_name)
            summaries[listing_id] = summary
            members[listing_id] = []
            rating_sums[listing_id] = 0

        members[listing_id].append(review)
        summary.total_reviews += 1
        if review.is_approved:
            summary.approved_reviews += 1

        if review.rating is not None:
            rating_sums[listing_id] += review.rating
            if review.rating in summary.rating_distribution:
                summary.rating_distribution[review.rating] += 1

        breakdown = summary.channel_breakdown
        breakdown[review.channel] = breakdown.get(review.channel, 0) + 1

    for listing_id, summary in summaries.items():
        summary.average_rating = float(
            round_half_up(rating_sums[listing_id] / summary.total_reviews, places=1)
        )
        summary.recent_reviews = sorted(
            members[listing_id], key=lambda r: r.review_date, reverse=True
        )[:RECENT_REVIEWS]

    return list(summaries.values())
