# backend/venuefinder/services/search/types.py
"""
Value types shared by the search pipeline, its cache and its executor.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass, field, replace
import datetime
from typing import Any, Dict, List, Optional

from venuefinder.core.constants import UNCONSTRAINED_CATEGORIES

# Type alias for date to avoid shadowing in dataclasses
DateType = datetime.date


@dataclass(frozen=True)
class SearchQuery:
    """A fully described venue search request. Every field participates in the cache key."""

    location: Optional[str] = None
    start_date: Optional[DateType] = None
    end_date: Optional[DateType] = None
    category: Optional[str] = None
    tag: Optional[str] = None
    name: Optional[str] = None
    lat: Optional[float] = None
    lng: Optional[float] = None
    limit: int = 20
    offset: int = 0

    @property
    def has_coordinates(self) -> bool:
        return self.lat is not None and self.lng is not None

    @property
    def has_criteria(self) -> bool:
        """True when at least one filter would narrow the result set."""
        category = (self.category or "").strip().lower()
        return any(
            (
                bool(self.location and self.location.strip()),
                self.start_date is not None,
                self.end_date is not None,
                category not in UNCONSTRAINED_CATEGORIES,
                bool(self.tag and self.tag.strip()),
                bool(self.name and self.name.strip()),
                self.has_coordinates,
            )
        )

    def clamped(self, max_limit: int) -> "SearchQuery":
        """Pin limit to [1, max_limit] and offset to >= 0."""
        return replace(
            self,
            limit=min(max(self.limit, 1), max_limit),
            offset=max(self.offset, 0),
        )

    def to_cache_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        for key in ("start_date", "end_date"):
            if data[key] is not None:
                data[key] = data[key].isoformat()
        return data


@dataclass(frozen=True)
class CompositeResultRow:
    """One venue plus its soonest matching event."""

    venue_id: int
    venue_name: str
    city: str
    state: str
    zipcode: Optional[str]
    lat: Optional[float]
    lng: Optional[float]
    website: Optional[str]
    image_url: Optional[str]
    venue_description: Optional[str]
    subscription_tier: str
    verification_status: str
    food_service_type: Optional[str]
    bar_service_type: Optional[str]
    event_id: int
    event_date: DateType
    category: str
    event_description: Optional[str]
    tags: List[str] = field(default_factory=list)
    distance: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["event_date"] = self.event_date.isoformat()
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CompositeResultRow":
        values = dict(data)
        values["event_date"] = datetime.date.fromisoformat(values["event_date"])
        values["tags"] = list(values.get("tags") or [])
        return cls(**values)


@dataclass(frozen=True)
class SearchPage:
    """A page of results plus the total match count before paging."""

    total_count: int
    rows: List[CompositeResultRow]
    limit: int
    offset: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_count": self.total_count,
            "rows": [row.to_dict() for row in self.rows],
            "limit": self.limit,
            "offset": self.offset,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SearchPage":
        return cls(
            total_count=int(data["total_count"]),
            rows=[CompositeResultRow.from_dict(row) for row in data["rows"]],
            limit=int(data["limit"]),
            offset=int(data["offset"]),
        )


@dataclass(frozen=True)
class TrendingCandidate:
    """An upcoming event considered for the trending list."""

    event_id: int
    event_date: DateType
    category: str
    event_description: Optional[str]
    venue_id: int
    venue_name: str
    city: str
    state: str
    image_url: Optional[str]
    subscription_tier: str
    save_count: int = 0


@dataclass(frozen=True)
class EventContext:
    """The fields of an anchor event that pairing looks at."""

    event_id: int
    venue_id: int
    city: str
    event_date: DateType
    category: str


@dataclass(frozen=True)
class PairingCandidate:
    event_id: int
    event_date: DateType
    category: str
    event_description: Optional[str]
    venue_id: int
    venue_name: str
    city: str
    state: str
    image_url: Optional[str]
    subscription_tier: str


@dataclass(frozen=True)
class VenueOwnership:
    venue_id: int
    owner_id: Optional[int]
    subscription_tier: str
