# backend/venuefinder/repositories/venue_repository.py
"""
Venue reads exposed to collaborators outside the discovery core.
"""
from __future__ import annotations

from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..models.venue import Venue
from ..services.search.types import VenueOwnership


class VenueRepository:
    def __init__(self, db: Session) -> None:
        self.db = db

    def get_ownership(self, venue_id: int) -> Optional[VenueOwnership]:
        """venue id -> owner and subscription tier, or None for an unknown venue."""
        row = self.db.execute(
            select(Venue.id, Venue.owner_id, Venue.subscription_tier).where(Venue.id == venue_id)
        ).first()
        if row is None:
            return None
        return VenueOwnership(
            venue_id=row.id,
            owner_id=row.owner_id,
            subscription_tier=row.subscription_tier,
        )
