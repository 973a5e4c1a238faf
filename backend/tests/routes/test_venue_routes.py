"""Tests for GET /api/v1/venues/search."""

from unittest.mock import MagicMock

from venuefinder.api.dependencies.services import get_venue_search_service
from venuefinder.core.exceptions import QueryExecutionException
from venuefinder.main import app
from venuefinder.services.search.venue_search_service import VenueSearchService

SEARCH_URL = "/api/v1/venues/search"


def test_search_requires_a_filter(client) -> None:
    response = client.get(SEARCH_URL)

    assert response.status_code == 400
    assert response.json()["detail"]["code"] == "EMPTY_CRITERIA"


def test_unconstrained_category_alone_is_not_a_filter(client) -> None:
    response = client.get(SEARCH_URL, params={"category": "both", "limit": 5})

    assert response.status_code == 400


def test_search_requires_lat_lng_pair(client) -> None:
    response = client.get(SEARCH_URL, params={"lat": 30.2})
    assert response.status_code == 400

    response = client.get(SEARCH_URL, params={"lng": -97.7})
    assert response.status_code == 400


def test_out_of_range_latitude_is_rejected(client) -> None:
    response = client.get(SEARCH_URL, params={"lat": 120, "lng": -97.7})

    assert response.status_code == 422


def test_search_returns_ranked_page(client, catalog) -> None:
    response = client.get(SEARCH_URL, params={"location": "Austin, TX", "limit": 2})

    assert response.status_code == 200
    body = response.json()
    assert body["total_count"] == 3
    assert body["limit"] == 2
    assert body["offset"] == 0
    assert [row["venue_name"] for row in body["rows"]] == ["Pro Hall", "Blue Note"]
    assert body["rows"][0]["subscription_tier"] == "pro"
    assert body["rows"][1]["event_date"] == "2024-06-08"
    assert body["rows"][1]["tags"] == ["jazz", "live"]


def test_limit_and_offset_are_clamped(client, catalog) -> None:
    response = client.get(SEARCH_URL, params={"location": "tx", "limit": 0, "offset": -3})

    assert response.status_code == 200
    body = response.json()
    assert body["limit"] == 1
    assert body["offset"] == 0
    assert len(body["rows"]) == 1


def test_repeat_search_is_served_from_cache(client, catalog, memory_store) -> None:
    params = {"tag": "jazz"}

    first = client.get(SEARCH_URL, params=params)
    assert len(memory_store._cache) == 1
    second = client.get(SEARCH_URL, params=params)

    assert first.json() == second.json()
    assert len(memory_store._cache) == 1


def test_datastore_failure_returns_generic_500(client) -> None:
    failing = MagicMock(spec=VenueSearchService)
    failing.search.side_effect = QueryExecutionException(details={"phase": "fetch"})
    app.dependency_overrides[get_venue_search_service] = lambda: failing

    response = client.get(SEARCH_URL, params={"location": "austin"})

    assert response.status_code == 500
    assert response.json()["detail"] == {"message": "Search failed", "code": "SEARCH_FAILED", "details": {}}


def test_pool_exhaustion_returns_503(client) -> None:
    failing = MagicMock(spec=VenueSearchService)
    failing.search.side_effect = QueryExecutionException(details={"pool_exhausted": True})
    app.dependency_overrides[get_venue_search_service] = lambda: failing

    response = client.get(SEARCH_URL, params={"location": "austin"})

    assert response.status_code == 503
    assert response.headers["Retry-After"] == "2"


def test_request_id_is_echoed(client, catalog) -> None:
    response = client.get(SEARCH_URL, params={"location": "austin"}, headers={"X-Request-ID": "abc-123"})

    assert response.headers["X-Request-ID"] == "abc-123"
