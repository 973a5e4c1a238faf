"""Data access for the venue discovery core."""

from .event_repository import EventRepository
from .search_repository import RankedSearchExecutor
from .venue_repository import VenueRepository

__all__ = ["EventRepository", "RankedSearchExecutor", "VenueRepository"]
