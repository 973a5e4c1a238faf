# backend/venuefinder/routes/v1/events.py
"""
Event routes - API v1

Versioned event recommendation endpoints under /api/v1/events.

Endpoints:
    GET /trending              → Top upcoming events, weekend first
    GET /pairings/{event_id}   → Complementary events for one event
"""

import asyncio
import logging

from fastapi import APIRouter, Depends, Path

from ...api.dependencies import get_pairing_recommender, get_trending_recommender
from ...core.exceptions import DomainException
from ...schemas.search import EventSummary, PairingResponse, TrendingEvent, TrendingResponse
from ...services.search.pairing import PairingRecommender
from ...services.search.trending import TrendingRecommender

logger = logging.getLogger(__name__)

# V1 router - no prefix here, will be added when mounting in main.py
router = APIRouter(tags=["events-v1"])


@router.get("/trending", response_model=TrendingResponse)
async def get_trending_events(
    recommender: TrendingRecommender = Depends(get_trending_recommender),
) -> TrendingResponse:
    """Upcoming events, this weekend's first, then most saved, then soonest."""
    try:
        events = await asyncio.to_thread(recommender.recommend)
    except DomainException as exc:
        raise exc.to_http_exception()
    return TrendingResponse(events=[TrendingEvent.model_validate(e) for e in events])


@router.get("/pairings/{event_id}", response_model=PairingResponse)
async def get_event_pairings(
    event_id: int = Path(..., ge=1),
    recommender: PairingRecommender = Depends(get_pairing_recommender),
) -> PairingResponse:
    """
    Same-city, same-day events of the complementary category.

    Raises:
        HTTPException 404: unknown event
    """
    try:
        pairings = await asyncio.to_thread(recommender.recommend, event_id)
    except DomainException as exc:
        raise exc.to_http_exception()
    return PairingResponse(
        event_id=event_id,
        pairings=[EventSummary.model_validate(p) for p in pairings],
    )
