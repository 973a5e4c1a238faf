"""Tests for VenueSearchService orchestration: paging clamps and cache flow."""

from unittest.mock import MagicMock

import pytest
from redis.exceptions import RedisError

from venuefinder.core.exceptions import QueryExecutionException
from venuefinder.repositories.search_repository import RankedSearchExecutor
from venuefinder.services.search.search_cache import ResultCache
from venuefinder.services.search.types import SearchPage, SearchQuery
from venuefinder.services.search.venue_search_service import VenueSearchService


def _executor(total: int = 0) -> MagicMock:
    executor = MagicMock(spec=RankedSearchExecutor)
    executor.execute.side_effect = lambda predicate, limit, offset, **kwargs: SearchPage(
        total_count=total, rows=[], limit=limit, offset=offset
    )
    return executor


class TestPagingClamps:
    @pytest.mark.parametrize(
        "limit, offset, expected_limit, expected_offset",
        [
            (0, 0, 1, 0),
            (-5, -1, 1, 0),
            (20, 40, 20, 40),
            (1000, 0, 100, 0),
        ],
    )
    def test_limit_and_offset_are_clamped(
        self, memory_store, limit, offset, expected_limit, expected_offset
    ) -> None:
        executor = _executor()
        service = VenueSearchService(executor, ResultCache(memory_store), max_limit=100)

        page = service.search(SearchQuery(location="austin", limit=limit, offset=offset))

        kwargs = executor.execute.call_args.kwargs
        assert kwargs["limit"] == expected_limit
        assert kwargs["offset"] == expected_offset
        assert (page.limit, page.offset) == (expected_limit, expected_offset)


class TestCacheFlow:
    def test_hit_does_not_touch_executor(self, memory_store) -> None:
        executor = _executor(total=0)
        service = VenueSearchService(executor, ResultCache(memory_store))
        query = SearchQuery(location="austin")

        first = service.search(query)
        second = service.search(query)

        assert first == second
        executor.execute.assert_called_once()

    def test_distinct_queries_do_not_share_entries(self, memory_store) -> None:
        executor = _executor()
        service = VenueSearchService(executor, ResultCache(memory_store))

        service.search(SearchQuery(location="austin"))
        service.search(SearchQuery(location="austin", offset=20))

        assert executor.execute.call_count == 2

    def test_store_read_failure_falls_through_to_executor(self) -> None:
        store = MagicMock()
        store.get.side_effect = RedisError("down")
        store.set_with_expiry.side_effect = RedisError("down")
        executor = _executor(total=0)
        service = VenueSearchService(executor, ResultCache(store))

        page = service.search(SearchQuery(name="blue"))

        assert page.total_count == 0
        executor.execute.assert_called_once()

    def test_executor_failure_propagates_and_is_not_cached(self, memory_store) -> None:
        executor = MagicMock(spec=RankedSearchExecutor)
        executor.execute.side_effect = QueryExecutionException()
        cache = ResultCache(memory_store)
        service = VenueSearchService(executor, cache)
        query = SearchQuery(location="austin")

        with pytest.raises(QueryExecutionException):
            service.search(query)

        assert cache.get(query.clamped(100)) is None

    def test_deadline_is_forwarded(self, memory_store) -> None:
        executor = _executor()
        deadline = MagicMock()
        service = VenueSearchService(executor, ResultCache(memory_store))

        service.search(SearchQuery(tag="jazz"), deadline=deadline)

        assert executor.execute.call_args.kwargs["deadline"] is deadline


class TestPredicateAssembly:
    def test_coordinates_enable_distance_ordering(self, memory_store) -> None:
        executor = _executor()
        service = VenueSearchService(executor, ResultCache(memory_store), radius_miles=10.0)

        service.search(SearchQuery(lat=30.0, lng=-97.0))

        predicate = executor.execute.call_args.args[0]
        assert predicate.has_distance
        assert predicate.radius_miles == 10.0
        assert executor.execute.call_args.kwargs["by_distance"] is True

    def test_only_published_events_are_searched(self, memory_store) -> None:
        service = VenueSearchService(_executor(), ResultCache(memory_store))

        rendered = service.build_predicate(SearchQuery(location="austin")).render()

        assert rendered.where_sql.startswith("e.status = :p1")
        assert rendered.params["p1"] == "published"


class TestCriteria:
    @pytest.mark.parametrize(
        "query",
        [
            SearchQuery(),
            SearchQuery(location="   "),
            SearchQuery(category="both"),
            SearchQuery(category="all", tag=" "),
            SearchQuery(lat=30.0),
        ],
    )
    def test_queries_without_meaningful_filters(self, query: SearchQuery) -> None:
        assert query.has_criteria is False

    @pytest.mark.parametrize(
        "query",
        [
            SearchQuery(location="austin"),
            SearchQuery(category="music"),
            SearchQuery(lat=30.0, lng=-97.0),
            SearchQuery(name="blue"),
        ],
    )
    def test_queries_with_filters(self, query: SearchQuery) -> None:
        assert query.has_criteria is True
