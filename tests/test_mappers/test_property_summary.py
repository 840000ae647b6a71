from review_hub.mappers.property_summary import summarize_by_property
from review_hub.mappers.review_normalizer import normalize_review


def _normalized(make_review, *overrides):
    return [normalize_review(make_review(**fields)) for fields in overrides]


def test_summary_counts_and_distribution(make_review):
    reviews = _normalized(
        make_review,
        {"id": 1, "listingMapId": 10, "listingName": "Loft", "rating": 10, "status": "published"},
        {"id": 2, "listingMapId": 10, "listingName": "Loft", "rating": 6, "status": "awaiting"},
        {"id": 3, "listingMapId": 10, "listingName": "Loft", "rating": 9, "status": "published",
         "channelId": 2005},
    )

    [summary] = summarize_by_property(reviews)

    assert summary.listing_id == 10
    assert summary.listing_name == "Loft"
    assert summary.total_reviews == 3
    assert summary.approved_reviews == 2
    assert summary.rating_distribution == {1: 0, 2: 0, 3: 1, 4: 0, 5: 2}
    assert summary.average_rating == 4.3
    assert summary.channel_breakdown == {"airbnbOfficial": 2, "bookingcom": 1}


def test_unrated_reviews_count_in_total_and_average(make_review):
    reviews = _normalized(
        make_review,
        {"id": 1, "rating": 8},
        {"id": 2, "rating": None},
    )

    [summary] = summarize_by_property(reviews)

    assert summary.total_reviews == 2
    assert sum(summary.rating_distribution.values()) == 1
    assert summary.rating_distribution[4] == 1
    assert summary.average_rating == 2.0


def test_reviews_without_listing_are_skipped(make_review):
    reviews = _normalized(
        make_review,
        {"id": 1, "listingMapId": None},
        {"id": 2, "listingMapId": 5},
    )

    summaries = summarize_by_property(reviews)

    assert [s.listing_id for s in summaries] == [5]


def test_summaries_keep_first_appearance_order(make_review):
    reviews = _normalized(
        make_review,
        {"id": 1, "listingMapId": 3},
        {"id": 2, "listingMapId": 1},
        {"id": 3, "listingMapId": 3},
        {"id": 4, "listingMapId": 2},
    )

    assert [s.listing_id for s in summarize_by_property(reviews)] == [3, 1, 2]


def test_recent_reviews_are_latest_five(make_review):
    reviews = _normalized(
        make_review,
        *({"id": i, "submittedAt": f"2024-01-{i:02d} 10:00:00"} for i in range(1, 8)),
    )

    [summary] = summarize_by_property(reviews)

    assert [r.id for r in summary.recent_reviews] == [7, 6, 5, 4, 3]


def test_invariants_hold(make_review):
    reviews = _normalized(
        make_review,
        {"id": 1, "listingMapId": 1, "rating": 4, "status": "awaiting"},
        {"id": 2, "listingMapId": 1, "rating": None},
        {"id": 3, "listingMapId": 2, "rating": 10, "status": "published"},
        {"id": 4, "listingMapId": 2, "rating": 3, "status": "pending"},
    )

    for summary in summarize_by_property(reviews):
        group = [r for r in reviews if r.listing_id == summary.listing_id]
        rated = [r for r in group if r.rating is not None]
        assert summary.approved_reviews <= summary.total_reviews
        assert sum(summary.rating_distribution.values()) == len(rated)


def test_summarize_does_not_mutate_input(make_review):
    reviews = _normalized(make_review, {"id": 2}, {"id": 1})
    before = [r.model_dump() for r in reviews]

    summarize_by_property(reviews)

    assert [r.model_dump() for r in reviews] == before


def test_empty_input():
    assert summarize_by_property([]) == []
