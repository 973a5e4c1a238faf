"""
Prometheus metrics for the venue discovery API.

All metrics register against a dedicated CollectorRegistry so that tests and
multiple app instances never collide with the process-global default registry.
"""

from typing import Tuple

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

# Create a custom registry to avoid conflicts with default metrics
REGISTRY = CollectorRegistry()

http_request_duration_seconds = Histogram(
    "venuefinder_http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint", "status_code"],
    registry=REGISTRY,
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)

http_requests_total = Counter(
    "venuefinder_http_requests_total",
    "Total number of HTTP requests",
    ["method", "endpoint", "status_code"],
    registry=REGISTRY,
)


def record_http_request(method: str, endpoint: str, status_code: int, duration: float) -> None:
    """Record one finished HTTP request."""
    labels = {"method": method, "endpoint": endpoint, "status_code": str(status_code)}
    http_request_duration_seconds.labels(**labels).observe(duration)
    http_requests_total.labels(**labels).inc()


def render_latest() -> Tuple[bytes, str]:
    """Return the exposition payload and its content type."""
    return generate_latest(REGISTRY), CONTENT_TYPE_LATEST
