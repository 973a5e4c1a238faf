# backend/venuefinder/services/search/pairing.py
"""
Pairing suggestions: the other half of a night out.

Given a music event, suggest meals in the same city on the same day, and the
reverse. Events offering both count as a complement either way.
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, List

from venuefinder.core.enums import EventCategory
from venuefinder.core.exceptions import NotFoundException

from .metrics import record_recommendation
from .types import PairingCandidate

if TYPE_CHECKING:
    from venuefinder.repositories.event_repository import EventRepository

logger = logging.getLogger(__name__)

DEFAULT_PAIRING_LIMIT = 3


def complementary_category(category: str) -> str:
    """
    music -> meals, meals -> music.

    A "both" event is paired with music. It arguably should pair with either
    category; kept as music until product decides otherwise.
    """
    if category == EventCategory.MUSIC.value:
        return EventCategory.MEALS.value
    return EventCategory.MUSIC.value


class PairingRecommender:
    """Same-city, same-day events of the complementary category."""

    def __init__(
        self,
        event_repository: "EventRepository",
        limit: int = DEFAULT_PAIRING_LIMIT,
    ) -> None:
        self.event_repository = event_repository
        self.limit = limit

    def recommend(self, event_id: int) -> List[PairingCandidate]:
        """
        Raises:
            NotFoundException: no event with this id
        """
        anchor = self.event_repository.get_event_context(event_id)
        if anchor is None:
            raise NotFoundException(
                f"Event {event_id} not found",
                code="EVENT_NOT_FOUND",
                details={"event_id": event_id},
            )

        target = complementary_category(anchor.category)
        pairings = self.event_repository.find_pairings(
            city=anchor.city,
            event_date=anchor.event_date,
            categories=[target, EventCategory.BOTH.value],
            exclude_event_id=anchor.event_id,
            limit=self.limit,
        )
        logger.debug(f"Pairing {anchor.category} event {event_id} with {target}: {len(pairings)} found")
        record_recommendation("pairing")
        return pairings
