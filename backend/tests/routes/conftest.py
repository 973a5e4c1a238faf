"""Fixtures for API route tests."""

from typing import Iterable

from fastapi.testclient import TestClient
import pytest

from venuefinder.api.dependencies.database import get_db, get_engine
from venuefinder.api.dependencies.services import get_cache_store_dep
from venuefinder.main import app


@pytest.fixture
def client(db_engine, db, memory_store) -> Iterable[TestClient]:
    app.dependency_overrides[get_engine] = lambda: db_engine
    app.dependency_overrides[get_db] = lambda: db
    app.dependency_overrides[get_cache_store_dep] = lambda: memory_store
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.clear()
