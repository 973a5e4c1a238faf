"""SQLAlchemy models; importing this module populates Base.metadata."""

from .event import Event, EventTag
from .saved_event import SavedEvent
from .venue import Venue

__all__ = ["Event", "EventTag", "SavedEvent", "Venue"]
