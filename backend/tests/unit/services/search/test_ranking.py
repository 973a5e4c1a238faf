"""Unit tests for the search and trending sort keys."""

from datetime import date, timedelta

import pytest

from venuefinder.services.search.ranking import (
    DateWindow,
    haversine_miles,
    order_search_results,
    order_trending,
    tier_rank,
)
from venuefinder.services.search.trending import weekend_window
from venuefinder.services.search.types import CompositeResultRow, TrendingCandidate


def _row(event_id: int, tier: str = "free", on: date = date(2024, 6, 8), distance=None, name="Venue"):
    return CompositeResultRow(
        venue_id=event_id,
        venue_name=name,
        city="Austin",
        state="TX",
        zipcode=None,
        lat=None,
        lng=None,
        website=None,
        image_url=None,
        venue_description=None,
        subscription_tier=tier,
        verification_status="UNVERIFIED",
        food_service_type="none",
        bar_service_type="none",
        event_id=event_id,
        event_date=on,
        category="music",
        event_description=None,
        distance=distance,
    )


def _candidate(event_id: int, on: date, saves: int) -> TrendingCandidate:
    return TrendingCandidate(
        event_id=event_id,
        event_date=on,
        category="music",
        event_description=None,
        venue_id=1,
        venue_name="Venue",
        city="Austin",
        state="TX",
        image_url=None,
        subscription_tier="free",
        save_count=saves,
    )


class TestSearchOrdering:
    def test_pro_outranks_closer_and_sooner(self) -> None:
        rows = [
            _row(1, "free", date(2024, 6, 1), distance=0.1),
            _row(2, "pro", date(2024, 6, 30), distance=20.0),
        ]

        ordered = order_search_results(rows, by_distance=True)

        assert [r.event_id for r in ordered] == [2, 1]

    def test_enterprise_has_no_priority(self) -> None:
        assert tier_rank("pro") == 0
        assert tier_rank("enterprise") == tier_rank("free") == 1

    def test_distance_then_date_within_tier(self) -> None:
        rows = [
            _row(1, distance=5.0, on=date(2024, 6, 1)),
            _row(2, distance=1.0, on=date(2024, 6, 9)),
            _row(3, distance=1.0, on=date(2024, 6, 2)),
        ]

        ordered = order_search_results(rows, by_distance=True)

        assert [r.event_id for r in ordered] == [3, 2, 1]

    def test_without_coordinates_distance_is_ignored(self) -> None:
        rows = [
            _row(1, distance=5.0, on=date(2024, 6, 1)),
            _row(2, distance=1.0, on=date(2024, 6, 9)),
        ]

        ordered = order_search_results(rows, by_distance=False)

        assert [r.event_id for r in ordered] == [1, 2]

    def test_missing_distance_sorts_last(self) -> None:
        rows = [_row(1, distance=None), _row(2, distance=24.9)]

        assert [r.event_id for r in order_search_results(rows, by_distance=True)] == [2, 1]

    def test_ties_break_on_venue_name_then_event_id(self) -> None:
        rows = [_row(3, name="b"), _row(2, name="A"), _row(1, name="b")]

        assert [r.event_id for r in order_search_results(rows, by_distance=False)] == [2, 1, 3]


class TestWeekendWindow:
    # 2024-06-03 is a Monday
    @pytest.mark.parametrize("offset", [0, 1, 2, 3])
    def test_monday_to_thursday_look_ahead(self, offset: int) -> None:
        today = date(2024, 6, 3) + timedelta(days=offset)

        assert weekend_window(today) == DateWindow(date(2024, 6, 7), date(2024, 6, 9))

    @pytest.mark.parametrize("offset", [4, 5, 6])
    def test_friday_to_sunday_use_current_weekend(self, offset: int) -> None:
        today = date(2024, 6, 3) + timedelta(days=offset)

        window = weekend_window(today)

        assert window == DateWindow(date(2024, 6, 7), date(2024, 6, 9))
        assert window.contains(today)


class TestTrendingOrdering:
    def test_weekend_event_beats_more_saved_weekday_event(self) -> None:
        window = weekend_window(date(2024, 6, 5))  # Wednesday
        saturday = _candidate(1, date(2024, 6, 8), saves=1)
        next_tuesday = _candidate(2, date(2024, 6, 11), saves=50)

        assert [c.event_id for c in order_trending([next_tuesday, saturday], window)] == [1, 2]

    def test_saves_then_date(self) -> None:
        window = DateWindow(date(2024, 6, 7), date(2024, 6, 9))
        candidates = [
            _candidate(1, date(2024, 6, 9), saves=3),
            _candidate(2, date(2024, 6, 8), saves=3),
            _candidate(3, date(2024, 6, 7), saves=9),
        ]

        assert [c.event_id for c in order_trending(candidates, window)] == [3, 2, 1]


class TestHaversine:
    def test_identical_points_are_zero(self) -> None:
        assert haversine_miles(30.2672, -97.7431, 30.2672, -97.7431) == pytest.approx(0.0, abs=1e-3)

    def test_austin_to_dallas(self) -> None:
        assert 170 < haversine_miles(30.2672, -97.7431, 32.7767, -96.7970) < 200
