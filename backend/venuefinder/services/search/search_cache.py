# backend/venuefinder/services/search/search_cache.py
"""
Result cache for venue search pages.

Keys are derived from every field of the search request, so two requests
share an entry only when they would run the identical query. Entries expire
after a fixed TTL and are never invalidated on write.

The cache is an optimisation, not a dependency: a store that cannot be read
counts as a miss, a store that cannot be written is skipped, and the search
carries on either way.
"""
from __future__ import annotations

import hashlib
import json
import logging
from typing import Callable, Optional, Tuple, Type

from redis.exceptions import RedisError

from venuefinder.core.exceptions import CacheUnavailableException
from venuefinder.services.cache_service import CacheStore

from .metrics import record_cache_error, record_cache_lookup
from .types import SearchPage, SearchQuery

logger = logging.getLogger(__name__)

RESULT_CACHE_TTL = 60 * 5  # 5 minutes
RESULT_PREFIX = "venue_search"
KEY_VERSION = "v1"

# Store failures that degrade to miss / no-op
_STORE_ERRORS: Tuple[Type[BaseException], ...] = (
    CacheUnavailableException,
    RedisError,
    ConnectionError,
    TimeoutError,
)

# Payloads that cannot be turned back into a SearchPage
_DECODE_ERRORS: Tuple[Type[BaseException], ...] = (ValueError, KeyError, TypeError)


class ResultCache:
    """Read-through cache of SearchPage values keyed by the full SearchQuery."""

    def __init__(
        self,
        store: Optional[CacheStore],
        ttl_seconds: int = RESULT_CACHE_TTL,
    ) -> None:
        self.store = store
        self.ttl_seconds = ttl_seconds

    @staticmethod
    def build_key(query: SearchQuery) -> str:
        """
        Deterministic key over every request field.

        Canonical JSON (sorted keys, no whitespace) keeps the hash stable
        regardless of field order; floats keep their full precision.
        """
        canonical = json.dumps(query.to_cache_dict(), sort_keys=True, separators=(",", ":"))
        digest = hashlib.sha256(canonical.encode("utf-8")).hexdigest()
        return f"{RESULT_PREFIX}:{KEY_VERSION}:{digest}"

    def get(self, query: SearchQuery) -> Optional[SearchPage]:
        """Return the cached page, or None on miss or any store/decode failure."""
        if self.store is None:
            return None
        key = self.build_key(query)
        try:
            cached = self.store.get(key)
        except _STORE_ERRORS as e:
            logger.warning(f"Result cache read failed, treating as miss: {e}")
            record_cache_error("get")
            return None

        if cached is None:
            record_cache_lookup("miss")
            return None

        try:
            page = SearchPage.from_dict(json.loads(cached))
        except _DECODE_ERRORS as e:
            logger.warning(f"Discarding undecodable cache entry {key[:40]}: {e}")
            record_cache_error("get")
            return None

        record_cache_lookup("hit")
        logger.debug(f"Result cache HIT: {key[:40]}")
        return page

    def set(self, query: SearchQuery, page: SearchPage) -> bool:
        """Store a page with the fixed TTL. Returns False if the write was dropped."""
        if self.store is None:
            return False
        key = self.build_key(query)
        payload = json.dumps(page.to_dict(), separators=(",", ":"))
        try:
            self.store.set_with_expiry(key, payload, self.ttl_seconds)
        except _STORE_ERRORS as e:
            logger.warning(f"Failed to cache search result: {e}")
            record_cache_error("set")
            return False
        logger.debug(f"Result cached: {key[:40]}")
        return True

    def get_or_compute(self, query: SearchQuery, compute: Callable[[], SearchPage]) -> SearchPage:
        """
        Return the cached page for `query`, computing and storing it on a miss.

        Errors raised by `compute` propagate untouched and nothing is cached.
        """
        cached = self.get(query)
        if cached is not None:
            return cached
        page = compute()
        self.set(query, page)
        return page
