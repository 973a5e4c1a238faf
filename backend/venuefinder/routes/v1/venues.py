# backend/venuefinder/routes/v1/venues.py
"""
Venue routes - API v1

Versioned venue endpoints under /api/v1/venues.
All business logic delegated to VenueSearchService.

Endpoints:
    GET /search    → Filtered, ranked, paginated venue search
"""

import asyncio
from datetime import date
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from ...api.dependencies import get_venue_search_service
from ...core.config import settings
from ...core.exceptions import DomainException, EmptyCriteriaException, ValidationException
from ...core.request_context import Deadline
from ...schemas.search import VenueSearchResponse, VenueSearchRow
from ...services.search.types import SearchQuery
from ...services.search.venue_search_service import VenueSearchService

logger = logging.getLogger(__name__)

# V1 router - no prefix here, will be added when mounting in main.py
router = APIRouter(tags=["venues-v1"])


@router.get("/search", response_model=VenueSearchResponse)
async def search_venues(
    location: Optional[str] = Query(
        default=None, max_length=200, description='Free text, e.g. "Austin, TX 78701" or "78701"'
    ),
    start_date: Optional[date] = Query(default=None, description="Earliest event date"),
    end_date: Optional[date] = Query(default=None, description="Latest event date"),
    category: Optional[str] = Query(default=None, description="music | meals | both"),
    tag: Optional[str] = Query(default=None, max_length=64, description="Exact event tag"),
    name: Optional[str] = Query(default=None, max_length=200, description="Venue name contains"),
    lat: Optional[float] = Query(default=None, ge=-90, le=90),
    lng: Optional[float] = Query(default=None, ge=-180, le=180),
    limit: int = Query(default=settings.search_default_limit, description="Page size"),
    offset: int = Query(default=0, description="Rows to skip"),
    search_service: VenueSearchService = Depends(get_venue_search_service),
) -> VenueSearchResponse:
    """
    Search venues by location, dates, category, tag, name and distance.

    Each venue appears once, with its soonest matching event. Pro venues
    rank first, then nearer venues (when lat/lng are given), then sooner
    events.

    Raises:
        HTTPException 400: no filter given, or only one of lat/lng
        HTTPException 500/503: the datastore failed
    """
    if (lat is None) != (lng is None):
        raise ValidationException(
            "lat and lng must be provided together", code="INCOMPLETE_COORDINATES"
        ).to_http_exception()

    query = SearchQuery(
        location=location,
        start_date=start_date,
        end_date=end_date,
        category=category,
        tag=tag,
        name=name,
        lat=lat,
        lng=lng,
        limit=limit,
        offset=offset,
    )
    if not query.has_criteria:
        raise EmptyCriteriaException().to_http_exception()

    deadline = (
        Deadline.after_ms(settings.search_statement_timeout_ms)
        if settings.search_statement_timeout_ms > 0
        else None
    )
    try:
        page = await asyncio.to_thread(search_service.search, query, deadline)
    except DomainException as exc:
        raise exc.to_http_exception()

    return VenueSearchResponse(
        total_count=page.total_count,
        rows=[VenueSearchRow.model_validate(row) for row in page.rows],
        limit=page.limit,
        offset=page.offset,
    )
