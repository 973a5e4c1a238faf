# backend/venuefinder/api/dependencies/__init__.py
"""
Central export point for all dependencies.
"""

from .database import get_db, get_engine
from .services import (
    get_cache_store_dep,
    get_pairing_recommender,
    get_result_cache,
    get_trending_recommender,
    get_venue_search_service,
)

__all__ = [
    # Database
    "get_db",
    "get_engine",
    # Services
    "get_cache_store_dep",
    "get_result_cache",
    "get_venue_search_service",
    "get_trending_recommender",
    "get_pairing_recommender",
]
