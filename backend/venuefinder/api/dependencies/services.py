# backend/venuefinder/api/dependencies/services.py
"""
Service layer dependencies for dependency injection.

This module provides factory functions that create service instances
with their required dependencies properly injected.
"""

from functools import lru_cache
import logging

from fastapi import Depends
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from ...core.config import settings
from ...repositories.event_repository import EventRepository
from ...repositories.search_repository import RankedSearchExecutor
from ...services.cache_service import CacheStore, create_cache_store
from ...services.search.pairing import PairingRecommender
from ...services.search.search_cache import ResultCache
from ...services.search.trending import TrendingRecommender
from ...services.search.venue_search_service import VenueSearchService
from .database import get_db, get_engine

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_cache_store_singleton() -> CacheStore:
    """One cache store per process."""
    return create_cache_store(settings.redis_url)


def get_cache_store_dep() -> CacheStore:
    """Get cache store instance for dependency injection."""
    return get_cache_store_singleton()


def get_result_cache(store: CacheStore = Depends(get_cache_store_dep)) -> ResultCache:
    return ResultCache(store, ttl_seconds=settings.search_cache_ttl_seconds)


def get_venue_search_service(
    engine: Engine = Depends(get_engine),
    cache: ResultCache = Depends(get_result_cache),
) -> VenueSearchService:
    return VenueSearchService(
        executor=RankedSearchExecutor(engine),
        cache=cache,
        radius_miles=settings.search_radius_miles,
        max_limit=settings.search_max_limit,
    )


def get_trending_recommender(db: Session = Depends(get_db)) -> TrendingRecommender:
    return TrendingRecommender(
        EventRepository(db),
        timezone_name=settings.timezone,
        limit=settings.trending_limit,
    )


def get_pairing_recommender(db: Session = Depends(get_db)) -> PairingRecommender:
    return PairingRecommender(EventRepository(db), limit=settings.pairing_limit)
