# backend/venuefinder/services/search/metrics.py
"""
Prometheus metrics for venue search and the recommenders.

Provides observability for:
- Search latency by phase
- Result cache hits, misses and degraded operations
- Result counts
"""
from __future__ import annotations

from prometheus_client import Counter, Histogram

from venuefinder.monitoring.prometheus_metrics import REGISTRY

# Latency metrics
SEARCH_LATENCY = Histogram(
    "venuefinder_search_latency_ms",
    "Search latency in milliseconds",
    ["phase"],
    registry=REGISTRY,
    buckets=[5, 10, 25, 50, 100, 200, 500, 1000, 2000, 5000],
)

# Quality metrics
SEARCH_RESULT_COUNT = Histogram(
    "venuefinder_search_result_count",
    "Total matching venues per executed search",
    registry=REGISTRY,
    buckets=[0, 1, 5, 10, 20, 50, 100, 500],
)

SEARCH_ZERO_RESULTS = Counter(
    "venuefinder_search_zero_results_total",
    "Count of executed searches matching nothing",
    registry=REGISTRY,
)

SEARCH_FAILURES = Counter(
    "venuefinder_search_failures_total",
    "Count of searches that failed in the datastore",
    ["phase"],
    registry=REGISTRY,
)

# Cache metrics
CACHE_LOOKUPS = Counter(
    "venuefinder_search_cache_lookups_total",
    "Result cache lookups by outcome",
    ["outcome"],  # hit | miss
    registry=REGISTRY,
)

CACHE_ERRORS = Counter(
    "venuefinder_search_cache_errors_total",
    "Result cache operations that failed and were absorbed",
    ["operation"],  # get | set
    registry=REGISTRY,
)

# Recommenders
RECOMMENDATIONS_SERVED = Counter(
    "venuefinder_recommendations_served_total",
    "Recommendation requests by kind",
    ["kind"],  # trending | pairing
    registry=REGISTRY,
)


def record_search_latency(phase: str, latency_ms: float) -> None:
    SEARCH_LATENCY.labels(phase=phase).observe(latency_ms)


def record_search_result(total_count: int) -> None:
    SEARCH_RESULT_COUNT.observe(total_count)
    if total_count == 0:
        SEARCH_ZERO_RESULTS.inc()


def record_search_failure(phase: str) -> None:
    SEARCH_FAILURES.labels(phase=phase).inc()


def record_cache_lookup(outcome: str) -> None:
    CACHE_LOOKUPS.labels(outcome=outcome).inc()


def record_cache_error(operation: str) -> None:
    CACHE_ERRORS.labels(operation=operation).inc()


def record_recommendation(kind: str) -> None:
    RECOMMENDATIONS_SERVED.labels(kind=kind).inc()
