# backend/venuefinder/services/search/trending.py
"""
Trending events: what people are saving, biased toward the upcoming weekend.
"""
from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime, timedelta
import logging
from typing import TYPE_CHECKING, List, Optional

import pytz

from .metrics import record_recommendation
from .ranking import DateWindow, order_trending
from .types import TrendingCandidate

if TYPE_CHECKING:
    from venuefinder.repositories.event_repository import EventRepository

logger = logging.getLogger(__name__)

DEFAULT_TRENDING_LIMIT = 10
FRIDAY = 4


def weekend_window(today: date) -> DateWindow:
    """
    Friday..Sunday window relevant to `today`.

    Monday-Thursday look ahead to the coming weekend; Friday-Sunday use the
    weekend already under way.
    """
    weekday = today.weekday()  # Monday == 0
    if weekday < FRIDAY:
        friday = today + timedelta(days=FRIDAY - weekday)
    else:
        friday = today - timedelta(days=weekday - FRIDAY)
    return DateWindow(start=friday, end=friday + timedelta(days=2))


def local_today(timezone_name: str) -> date:
    """Today's date in the given timezone."""
    return datetime.now(pytz.timezone(timezone_name)).date()


class TrendingRecommender:
    """Top upcoming events ranked by weekend proximity and save count."""

    def __init__(
        self,
        event_repository: "EventRepository",
        timezone_name: str = "America/Chicago",
        limit: int = DEFAULT_TRENDING_LIMIT,
    ) -> None:
        self.event_repository = event_repository
        self.timezone_name = timezone_name
        self.limit = limit

    def recommend(self, today: Optional[date] = None) -> List[TrendingCandidate]:
        """
        Return at most `limit` events dated today or later.

        Order: inside the weekend window first, then more saves, then sooner.
        """
        today = today or local_today(self.timezone_name)
        window = weekend_window(today)

        candidates = self.event_repository.get_upcoming_events(today)
        if not candidates:
            record_recommendation("trending")
            return []

        counts = self.event_repository.get_save_counts([c.event_id for c in candidates])
        scored = [replace(c, save_count=counts.get(c.event_id, 0)) for c in candidates]
        ranked = order_trending(scored, window)[: self.limit]
        logger.debug(
            f"Trending for {today.isoformat()}: {len(candidates)} candidates, "
            f"window {window.start.isoformat()}..{window.end.isoformat()}"
        )
        record_recommendation("trending")
        return ranked
