# backend/venuefinder/services/search/ranking.py
"""
Ordering rules for search results and trending events.

Each rule is a plain sort key so it can be tested without a datastore:
- search:   pro tier first -> distance asc (coordinate searches) -> date asc
            -> venue name -> event id
- trending: inside the weekend window first -> save count desc -> date asc
            -> event id
"""
from __future__ import annotations

from dataclasses import dataclass
import datetime
import math
from typing import Iterable, List, Sequence, Tuple

from venuefinder.core.constants import EARTH_RADIUS_MILES
from venuefinder.core.enums import SubscriptionTier

from .types import CompositeResultRow, TrendingCandidate


@dataclass(frozen=True)
class DateWindow:
    """Inclusive date range."""

    start: datetime.date
    end: datetime.date

    def contains(self, day: datetime.date) -> bool:
        return self.start <= day <= self.end


def tier_rank(subscription_tier: str) -> int:
    """0 for pro venues, 1 for everything else."""
    return 0 if subscription_tier == SubscriptionTier.PRO.value else 1


def search_sort_key(
    row: CompositeResultRow, by_distance: bool
) -> Tuple[int, float, datetime.date, str, int]:
    # Rows without a distance sort after every measured one
    if by_distance:
        distance = row.distance if row.distance is not None else math.inf
    else:
        distance = 0.0
    return (
        tier_rank(row.subscription_tier),
        distance,
        row.event_date,
        row.venue_name.lower(),
        row.event_id,
    )


def order_search_results(
    rows: Iterable[CompositeResultRow], by_distance: bool
) -> List[CompositeResultRow]:
    return sorted(rows, key=lambda row: search_sort_key(row, by_distance))


def trending_sort_key(
    candidate: TrendingCandidate, window: DateWindow
) -> Tuple[int, int, datetime.date, int]:
    return (
        0 if window.contains(candidate.event_date) else 1,
        -candidate.save_count,
        candidate.event_date,
        candidate.event_id,
    )


def order_trending(
    candidates: Sequence[TrendingCandidate], window: DateWindow
) -> List[TrendingCandidate]:
    return sorted(candidates, key=lambda c: trending_sort_key(c, window))


def haversine_miles(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle distance in miles; same formula the datastore evaluates."""
    cos_angle = math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.cos(
        math.radians(lng2) - math.radians(lng1)
    ) + math.sin(math.radians(lat1)) * math.sin(math.radians(lat2))
    return EARTH_RADIUS_MILES * math.acos(max(-1.0, min(1.0, cos_angle)))
