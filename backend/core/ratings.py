"""Rating aggregation helpers."""

from dataclasses import dataclass
from typing import Iterable

from sqlalchemy import func

from backend.models.rating import Rating


@dataclass(frozen=True)
class StoreRatingStats:
    """Average rating and number of ratings for one store."""

    average_rating: float
    total_ratings: int


def round_rating(value: float | None) -> float:
    """Round an average rating to two decimal places, treating None as 0."""
    return round(float(value or 0), 2)


def overall_average(stats: Iterable[StoreRatingStats]) -> float:
    """Average of per-store averages weighted by each store's rating count.

    Stores without ratings contribute nothing. Returns 0 when there are no
    ratings at all.

    Example:
        ```python
        overall_average([StoreRatingStats(4.0, 2), StoreRatingStats(5.0, 3)])  # 4.6
        ```
    """
    weighted_sum = 0.0
    total = 0
    for store in stats:
        if store.total_ratings > 0:
            weighted_sum += store.average_rating * store.total_ratings
            total += store.total_ratings
    if total == 0:
        return 0.0
    return round_rating(weighted_sum / total)


def store_stat_columns() -> tuple:
    """Aggregate columns for a stores LEFT JOIN ratings query grouped by store."""
    return (
        func.coalesce(func.avg(Rating.rating), 0).label("average_rating"),
        func.count(Rating.id).label("total_ratings"),
    )
