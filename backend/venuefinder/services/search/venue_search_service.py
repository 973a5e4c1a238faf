# backend/venuefinder/services/search/venue_search_service.py
"""
Venue search orchestration.

Pipeline:
1. Clamp paging (limit to [1, max_limit], offset to >= 0)
2. Result cache lookup (hit -> return immediately)
3. Parse the location text
4. Assemble the predicate
5. Count + fetch through the executor
6. Cache the page (failures ignored)
"""
from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Optional

from .location_parser import LocationQueryParser
from .metrics import record_search_latency
from .predicate_builder import Predicate, PredicateBuilder
from .search_cache import ResultCache
from .types import SearchPage, SearchQuery

if TYPE_CHECKING:
    from venuefinder.core.request_context import Deadline
    from venuefinder.repositories.search_repository import RankedSearchExecutor

logger = logging.getLogger(__name__)

DEFAULT_RADIUS_MILES = 25.0
DEFAULT_MAX_LIMIT = 100


class VenueSearchService:
    """
    Entry point for venue search.

    Collaborators are passed in; nothing here reaches for globals, so tests
    can supply a fake executor or cache store.
    """

    def __init__(
        self,
        executor: "RankedSearchExecutor",
        cache: ResultCache,
        parser: Optional[LocationQueryParser] = None,
        radius_miles: float = DEFAULT_RADIUS_MILES,
        max_limit: int = DEFAULT_MAX_LIMIT,
    ) -> None:
        self.executor = executor
        self.cache = cache
        self.parser = parser or LocationQueryParser()
        self.radius_miles = radius_miles
        self.max_limit = max_limit

    def build_predicate(self, query: SearchQuery) -> Predicate:
        return (
            PredicateBuilder()
            .add_published_only()
            .add_location(self.parser.parse(query.location))
            .add_date_range(query.start_date, query.end_date)
            .add_category(query.category)
            .add_tag(query.tag)
            .add_name(query.name)
            .add_radius(query.lat, query.lng, self.radius_miles)
            .build()
        )

    def search(self, query: SearchQuery, deadline: Optional["Deadline"] = None) -> SearchPage:
        """
        Run a search, serving from the result cache when possible.

        Raises:
            QueryExecutionException: the datastore failed; nothing is cached
        """
        start_time = time.perf_counter()
        effective = query.clamped(self.max_limit)

        cached = self.cache.get(effective)
        if cached is not None:
            record_search_latency("total_cached", (time.perf_counter() - start_time) * 1000)
            return cached

        predicate = self.build_predicate(effective)
        page = self.executor.execute(
            predicate,
            limit=effective.limit,
            offset=effective.offset,
            by_distance=effective.has_coordinates,
            deadline=deadline,
        )
        self.cache.set(effective, page)

        total_ms = (time.perf_counter() - start_time) * 1000
        record_search_latency("total", total_ms)
        logger.info(
            f"Venue search: {page.total_count} matches, {len(page.rows)} returned "
            f"(limit={effective.limit}, offset={effective.offset}) in {total_ms:.1f}ms"
        )
        return page
