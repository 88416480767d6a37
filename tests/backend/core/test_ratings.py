"""Tests for rating aggregation helpers."""

from decimal import Decimal

from backend.core.ratings import StoreRatingStats, overall_average, round_rating


def test_overall_average_weights_by_count():
    """Test the weighted average across stores."""
    stats = [StoreRatingStats(4.0, 2), StoreRatingStats(5.0, 3)]

    assert overall_average(stats) == 4.6


def test_overall_average_no_stores():
    """Test that no stores means an average of 0."""
    assert overall_average([]) == 0


def test_overall_average_all_counts_zero():
    """Test that stores without ratings give an average of 0."""
    stats = [StoreRatingStats(0.0, 0), StoreRatingStats(0.0, 0)]

    assert overall_average(stats) == 0


def test_overall_average_ignores_unrated_stores():
    """Test that an unrated store does not pull the average down."""
    stats = [StoreRatingStats(3.0, 4), StoreRatingStats(0.0, 0)]

    assert overall_average(stats) == 3.0


def test_overall_average_rounds_to_two_places():
    """Test that the result is rounded to two decimal places."""
    stats = [StoreRatingStats(1.0, 1), StoreRatingStats(2.0, 2)]

    assert overall_average(stats) == 1.67


def test_round_rating():
    """Test rounding of database averages."""
    assert round_rating(None) == 0
    assert round_rating(Decimal("3.3333333")) == 3.33
    assert round_rating(4) == 4.0
