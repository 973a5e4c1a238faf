# backend/venuefinder/repositories/event_repository.py
"""
Repository for the event reads the recommenders need.

- upcoming published events with their venue fields (trending candidates)
- save counts per event (aggregate over saved_events)
- the anchor event of a pairing request, and same-city same-day complements
"""
from __future__ import annotations

import datetime
import logging
from typing import Dict, List, Optional, Sequence

from sqlalchemy import Date, bindparam, text
from sqlalchemy.orm import Session

from ..core.enums import EventStatus, SubscriptionTier
from ..services.search.types import EventContext, PairingCandidate, TrendingCandidate
from ..utils.time_helpers import as_date

logger = logging.getLogger(__name__)


class EventRepository:
    """Read-only event queries for trending and pairing."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def get_upcoming_events(self, today: datetime.date) -> List[TrendingCandidate]:
        """Published events dated today or later, with save count left at zero."""
        query = text(
            """
            SELECT
                e.id AS event_id,
                e.date AS event_date,
                e.category,
                e.description AS event_description,
                v.id AS venue_id,
                v.name AS venue_name,
                v.city,
                v.state,
                v.image_url,
                v.subscription_tier
            FROM events e
            JOIN venues v ON v.id = e.venue_id
            WHERE e.status = :status
              AND e.date >= :today
            """
        ).bindparams(bindparam("today", type_=Date()))

        result = self.db.execute(
            query, {"status": EventStatus.PUBLISHED.value, "today": today}
        )
        return [
            TrendingCandidate(
                event_id=row.event_id,
                event_date=as_date(row.event_date),
                category=row.category,
                event_description=row.event_description,
                venue_id=row.venue_id,
                venue_name=row.venue_name,
                city=row.city,
                state=row.state,
                image_url=row.image_url,
                subscription_tier=row.subscription_tier,
            )
            for row in result
        ]

    def get_save_counts(self, event_ids: Sequence[int]) -> Dict[int, int]:
        """
        Count of saves per event.

        Events nobody saved are absent from the result; callers treat a
        missing id as zero.
        """
        if not event_ids:
            return {}

        query = text(
            """
            SELECT event_id, COUNT(*) AS save_count
            FROM saved_events
            WHERE event_id IN :event_ids
            GROUP BY event_id
            """
        ).bindparams(bindparam("event_ids", expanding=True))

        result = self.db.execute(query, {"event_ids": list(event_ids)})
        return {row.event_id: int(row.save_count) for row in result}

    def get_event_context(self, event_id: int) -> Optional[EventContext]:
        query = text(
            """
            SELECT e.id AS event_id, e.venue_id, v.city, e.date AS event_date, e.category
            FROM events e
            JOIN venues v ON v.id = e.venue_id
            WHERE e.id = :event_id
            """
        )
        row = self.db.execute(query, {"event_id": event_id}).first()
        if row is None:
            return None
        return EventContext(
            event_id=row.event_id,
            venue_id=row.venue_id,
            city=row.city,
            event_date=as_date(row.event_date),
            category=row.category,
        )

    def find_pairings(
        self,
        city: str,
        event_date: datetime.date,
        categories: Sequence[str],
        exclude_event_id: int,
        limit: int,
    ) -> List[PairingCandidate]:
        """
        Published events in the same city on the same date whose category is
        one of `categories`, pro venues first, then by event id.
        """
        query = text(
            """
            SELECT
                e.id AS event_id,
                e.date AS event_date,
                e.category,
                e.description AS event_description,
                v.id AS venue_id,
                v.name AS venue_name,
                v.city,
                v.state,
                v.image_url,
                v.subscription_tier
            FROM events e
            JOIN venues v ON v.id = e.venue_id
            WHERE LOWER(v.city) = LOWER(:city)
              AND e.date = :event_date
              AND e.category IN :categories
              AND e.status = :status
              AND e.id <> :exclude_event_id
            ORDER BY CASE WHEN v.subscription_tier = :priority_tier THEN 0 ELSE 1 END, e.id
            LIMIT :limit
            """
        ).bindparams(
            bindparam("event_date", type_=Date()),
            bindparam("categories", expanding=True),
        )

        result = self.db.execute(
            query,
            {
                "city": city,
                "event_date": event_date,
                "categories": list(categories),
                "status": EventStatus.PUBLISHED.value,
                "exclude_event_id": exclude_event_id,
                "priority_tier": SubscriptionTier.PRO.value,
                "limit": limit,
            },
        )
        return [
            PairingCandidate(
                event_id=row.event_id,
                event_date=as_date(row.event_date),
                category=row.category,
                event_description=row.event_description,
                venue_id=row.venue_id,
                venue_name=row.venue_name,
                city=row.city,
                state=row.state,
                image_url=row.image_url,
                subscription_tier=row.subscription_tier,
            )
            for row in result
        ]
