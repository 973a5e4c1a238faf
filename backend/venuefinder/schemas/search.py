"""
Response models for venue search and event recommendation endpoints.

These models ensure consistent API responses for discovery endpoints.
"""

from datetime import date
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class VenueSearchRow(BaseModel):
    """A venue together with its soonest matching event."""

    model_config = ConfigDict(from_attributes=True)

    venue_id: int = Field(description="Venue ID")
    venue_name: str = Field(description="Venue name")
    city: str
    state: str
    zipcode: Optional[str] = None
    lat: Optional[float] = None
    lng: Optional[float] = None
    website: Optional[str] = None
    image_url: Optional[str] = None
    venue_description: Optional[str] = None
    subscription_tier: str = Field(description="free | pro | enterprise")
    verification_status: str
    food_service_type: Optional[str] = None
    bar_service_type: Optional[str] = None
    event_id: int = Field(description="ID of the venue's soonest matching event")
    event_date: date
    category: str = Field(description="music | meals | both")
    event_description: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    distance: Optional[float] = Field(
        default=None, description="Miles from the search point (coordinate searches only)"
    )


class VenueSearchResponse(BaseModel):
    """One page of venue search results."""

    total_count: int = Field(description="Matching venues before paging")
    rows: List[VenueSearchRow]
    limit: int
    offset: int


class EventSummary(BaseModel):
    """Event card used by the trending and pairing feeds."""

    model_config = ConfigDict(from_attributes=True)

    event_id: int
    event_date: date
    category: str
    event_description: Optional[str] = None
    venue_id: int
    venue_name: str
    city: str
    state: str
    image_url: Optional[str] = None
    subscription_tier: str


class TrendingEvent(EventSummary):
    save_count: int = Field(description="Number of users who saved the event")


class TrendingResponse(BaseModel):
    events: List[TrendingEvent]


class PairingResponse(BaseModel):
    event_id: int = Field(description="The event pairings were computed for")
    pairings: List[EventSummary]
