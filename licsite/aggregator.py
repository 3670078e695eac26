"""
Rating and review aggregation for the server-rendered home page.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal

from licsite.db import DbClient, ReviewRecord, StoreUnavailable

logger = logging.getLogger(__name__)

RECENT_REVIEW_LIMIT = 3
MIN_RATING = 1
MAX_RATING = 5


@dataclass(frozen=True)
class AggregateSnapshot:
    average_rating: float = 0.0
    rating_count: int = 0
    reviews: tuple[ReviewRecord, ...] = field(default_factory=tuple)
    # Set only when the store could not be read, so a zero snapshot caused by
    # an outage is never mistaken for a page with no ratings yet.
    degraded: bool = False

    @property
    def average_rating_text(self) -> str:
        return f"{self.average_rating:.1f}"

    def as_initial_data(self) -> dict:
        """Hydration payload picked up by the frontend as ``window.__INITIAL_DATA__``."""
        return {
            "averageRating": self.average_rating_text,
            "ratingCount": self.rating_count,
            "reviews": [review.as_dict() for review in self.reviews],
        }


def _is_valid_rating(value) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return MIN_RATING <= value <= MAX_RATING


def average_of(ratings: list) -> tuple[float, int]:
    valid = [r for r in ratings if _is_valid_rating(r)]
    if not valid:
        return 0.0, 0
    mean = Decimal(sum(valid)) / Decimal(len(valid))
    return float(mean.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)), len(valid)


def aggregate_ratings_and_reviews(db: DbClient) -> AggregateSnapshot:
    """
    Compute the average rating and fetch the most recent reviews.

    Store failures are not propagated: the caller gets an empty snapshot
    flagged as ``degraded`` and the failure is logged.
    """
    try:
        ratings = db.list_ratings()
        reviews = db.recent_reviews(limit=RECENT_REVIEW_LIMIT)
    except StoreUnavailable as exc:
        logger.warning("Ratings/reviews unavailable, rendering without them: %s", exc)
        return AggregateSnapshot(degraded=True)

    average, count = average_of([r.rating for r in ratings])
    return AggregateSnapshot(
        average_rating=average,
        rating_count=count,
        reviews=tuple(reviews[:RECENT_REVIEW_LIMIT]),
    )
