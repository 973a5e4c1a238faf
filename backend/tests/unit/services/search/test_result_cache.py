"""Tests for ResultCache key derivation and failure absorption."""

from dataclasses import fields, replace
from datetime import date
from unittest.mock import MagicMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError, RedisError

from venuefinder.core.exceptions import CacheUnavailableException
from venuefinder.services.search.search_cache import ResultCache
from venuefinder.services.search.types import CompositeResultRow, SearchPage, SearchQuery

BASE_QUERY = SearchQuery(
    location="Austin, TX",
    start_date=date(2024, 6, 1),
    end_date=date(2024, 6, 30),
    category="music",
    tag="jazz",
    name="blue",
    lat=30.2672,
    lng=-97.7431,
    limit=20,
    offset=0,
)

# One alternative value per SearchQuery field
VARIANTS = {
    "location": "Austin, TX 78701",
    "start_date": date(2024, 6, 2),
    "end_date": date(2024, 7, 1),
    "category": "meals",
    "tag": "live",
    "name": "note",
    "lat": 30.26720001,
    "lng": -97.7432,
    "limit": 21,
    "offset": 20,
}


def _page(total: int = 1) -> SearchPage:
    rows = [
        CompositeResultRow(
            venue_id=1,
            venue_name="Blue Note",
            city="Austin",
            state="TX",
            zipcode="78701",
            lat=30.2672,
            lng=-97.7431,
            website=None,
            image_url=None,
            venue_description=None,
            subscription_tier="free",
            verification_status="UNVERIFIED",
            food_service_type="none",
            bar_service_type="full_bar",
            event_id=10,
            event_date=date(2024, 6, 8),
            category="music",
            event_description="Jazz night",
            tags=["jazz", "live"],
            distance=0.0,
        )
    ]
    return SearchPage(total_count=total, rows=rows[:total], limit=20, offset=0)


class TestCacheKey:
    def test_key_is_deterministic_and_prefixed(self) -> None:
        key = ResultCache.build_key(BASE_QUERY)

        assert key == ResultCache.build_key(replace(BASE_QUERY))
        assert key.startswith("venue_search:v1:")
        assert len(key.split(":")[-1]) == 64

    def test_variants_cover_every_field(self) -> None:
        assert set(VARIANTS) == {f.name for f in fields(SearchQuery)}

    @pytest.mark.parametrize("field_name", sorted(VARIANTS))
    def test_any_differing_field_changes_the_key(self, field_name: str) -> None:
        changed = replace(BASE_QUERY, **{field_name: VARIANTS[field_name]})

        assert ResultCache.build_key(changed) != ResultCache.build_key(BASE_QUERY)

    def test_absent_and_empty_values_differ(self) -> None:
        assert ResultCache.build_key(SearchQuery(tag=None)) != ResultCache.build_key(SearchQuery(tag=""))


class TestCacheReadsAndWrites:
    def test_round_trip_through_memory_store(self, memory_store) -> None:
        cache = ResultCache(memory_store, ttl_seconds=300)
        page = _page()

        assert cache.set(BASE_QUERY, page) is True
        assert cache.get(BASE_QUERY) == page

    def test_empty_results_are_cached(self, memory_store) -> None:
        cache = ResultCache(memory_store)
        empty = SearchPage(total_count=0, rows=[], limit=20, offset=0)

        cache.set(BASE_QUERY, empty)

        assert cache.get(BASE_QUERY) == empty

    def test_writes_use_fixed_ttl(self) -> None:
        store = MagicMock()
        ResultCache(store, ttl_seconds=300).set(BASE_QUERY, _page())

        key, payload, ttl = store.set_with_expiry.call_args.args
        assert key == ResultCache.build_key(BASE_QUERY)
        assert isinstance(payload, str)
        assert ttl == 300

    def test_no_store_is_always_a_miss(self) -> None:
        cache = ResultCache(None)

        assert cache.get(BASE_QUERY) is None
        assert cache.set(BASE_QUERY, _page()) is False

    @pytest.mark.parametrize(
        "error",
        [
            CacheUnavailableException("get", "circuit open"),
            RedisError("boom"),
            RedisConnectionError("refused"),
            ConnectionError("reset"),
            TimeoutError("slow"),
        ],
    )
    def test_read_failure_is_a_miss(self, error: Exception) -> None:
        store = MagicMock()
        store.get.side_effect = error

        assert ResultCache(store).get(BASE_QUERY) is None

    def test_write_failure_is_a_no_op(self) -> None:
        store = MagicMock()
        store.set_with_expiry.side_effect = RedisError("read only replica")

        assert ResultCache(store).set(BASE_QUERY, _page()) is False

    @pytest.mark.parametrize("payload", ["not json", "{}", '{"rows": 5}', "[]"])
    def test_undecodable_entry_is_a_miss(self, payload: str) -> None:
        store = MagicMock()
        store.get.return_value = payload

        assert ResultCache(store).get(BASE_QUERY) is None


class TestGetOrCompute:
    def test_hit_skips_compute(self, memory_store) -> None:
        cache = ResultCache(memory_store)
        cache.set(BASE_QUERY, _page())
        compute = MagicMock()

        assert cache.get_or_compute(BASE_QUERY, compute) == _page()
        compute.assert_not_called()

    def test_miss_computes_and_stores(self, memory_store) -> None:
        cache = ResultCache(memory_store)
        compute = MagicMock(return_value=_page())

        cache.get_or_compute(BASE_QUERY, compute)
        cache.get_or_compute(BASE_QUERY, compute)

        compute.assert_called_once_with()

    def test_compute_errors_propagate_and_nothing_is_cached(self, memory_store) -> None:
        cache = ResultCache(memory_store)

        with pytest.raises(RuntimeError):
            cache.get_or_compute(BASE_QUERY, MagicMock(side_effect=RuntimeError("db down")))

        assert cache.get(BASE_QUERY) is None
