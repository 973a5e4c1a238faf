# backend/venuefinder/services/cache_service.py
"""
Key/value cache stores used by the search result cache.

Two interchangeable stores are provided:
- RedisCacheStore: production store backed by redis-py, guarded by a circuit breaker
- InMemoryCacheStore: process-local store for development and tests

Both speak plain strings; serialization is the caller's business. Failures are
raised as CacheUnavailableException so callers can decide how to degrade.
"""

from datetime import datetime, timedelta
from enum import Enum
import logging
import threading
from typing import Any, Callable, Dict, Optional, Protocol, TypeVar

import redis
from redis import Redis
from redis.exceptions import RedisError

from ..core.exceptions import CacheUnavailableException

logger = logging.getLogger(__name__)


T = TypeVar("T")


class CircuitState(Enum):
    """Circuit breaker states."""

    CLOSED = "closed"  # Normal operation
    OPEN = "open"  # Failing, reject calls
    HALF_OPEN = "half_open"  # Testing if service recovered


class CircuitBreaker:
    """
    Circuit breaker for cache resilience.

    After `failure_threshold` consecutive failures the circuit opens and calls
    are rejected immediately until `recovery_timeout` seconds have passed.
    """

    def __init__(
        self,
        failure_threshold: int = 5,
        recovery_timeout: int = 60,
        expected_exception: type[BaseException] = RedisError,
    ) -> None:
        self.failure_threshold = failure_threshold
        self.recovery_timeout = recovery_timeout
        self.expected_exception = expected_exception

        self._failure_count: int = 0
        self._last_failure_time: Optional[datetime] = None
        self._state: CircuitState = CircuitState.CLOSED
        self._lock = threading.Lock()

    @property
    def state(self) -> CircuitState:
        """Get current circuit state."""
        with self._lock:
            if self._state == CircuitState.OPEN:
                # Check if we should try half-open
                if self._last_failure_time:
                    time_since_failure = (datetime.now() - self._last_failure_time).total_seconds()
                    if time_since_failure >= self.recovery_timeout:
                        self._state = CircuitState.HALF_OPEN
            return self._state

    def call(self, operation: str, func: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        """
        Execute func with circuit breaker protection.

        Raises:
            CacheUnavailableException: circuit is open or func raised the expected exception
        """
        if self.state == CircuitState.OPEN:
            logger.debug(f"Circuit breaker is OPEN, skipping cache {operation}")
            raise CacheUnavailableException(operation, "circuit open")

        try:
            result = func(*args, **kwargs)
        except self.expected_exception as exc:
            self._on_failure()
            raise CacheUnavailableException(operation, str(exc)) from exc
        self._on_success()
        return result

    def _on_success(self) -> None:
        with self._lock:
            self._failure_count = 0
            if self._state == CircuitState.HALF_OPEN:
                self._state = CircuitState.CLOSED
                logger.info("Circuit breaker recovered, closing circuit")

    def _on_failure(self) -> None:
        with self._lock:
            self._failure_count += 1
            self._last_failure_time = datetime.now()

            if self._failure_count >= self.failure_threshold:
                self._state = CircuitState.OPEN
                logger.warning(f"Circuit breaker opened after {self._failure_count} failures")


class CacheStore(Protocol):
    """Minimal string key/value store with per-key expiry."""

    def get(self, key: str) -> Optional[str]:
        ...

    def set_with_expiry(self, key: str, value: str, ttl_seconds: int) -> None:
        ...


class RedisCacheStore:
    """Cache store backed by Redis."""

    def __init__(
        self,
        redis_client: Redis,
        circuit_breaker: Optional[CircuitBreaker] = None,
    ) -> None:
        self.redis = redis_client
        self.circuit_breaker = circuit_breaker or CircuitBreaker()

    @classmethod
    def from_url(cls, redis_url: str) -> "RedisCacheStore":
        client = redis.from_url(
            redis_url,
            decode_responses=True,
            socket_connect_timeout=1,
            socket_timeout=1,
            health_check_interval=30,
        )
        return cls(client)

    def get(self, key: str) -> Optional[str]:
        value = self.circuit_breaker.call("get", self.redis.get, key)
        if value is None:
            return None
        if isinstance(value, bytes):
            return value.decode("utf-8")
        return str(value)

    def set_with_expiry(self, key: str, value: str, ttl_seconds: int) -> None:
        self.circuit_breaker.call("set", self.redis.setex, key, ttl_seconds, value)


class InMemoryCacheStore:
    """
    Process-local cache store.

    Mimics the Redis subset the search cache needs, including expiry, so
    development without Redis behaves the same way.
    """

    def __init__(self) -> None:
        self._cache: Dict[str, str] = {}
        self._expiry: Dict[str, datetime] = {}
        self._lock = threading.Lock()
        logger.info("InMemoryCacheStore initialized (development mode)")

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            if key not in self._cache:
                return None
            expires_at = self._expiry.get(key)
            if expires_at is not None and datetime.now() >= expires_at:
                # Expired - remove it
                del self._cache[key]
                del self._expiry[key]
                return None
            return self._cache[key]

    def set_with_expiry(self, key: str, value: str, ttl_seconds: int) -> None:
        with self._lock:
            self._evict_expired(datetime.now())
            self._cache[key] = value
            if ttl_seconds > 0:
                self._expiry[key] = datetime.now() + timedelta(seconds=ttl_seconds)
            else:
                self._expiry.pop(key, None)
        logger.debug(f"Cached {key} with TTL {ttl_seconds}s")

    def _evict_expired(self, now: datetime) -> None:
        # Caller holds the lock
        expired = [key for key, expires_at in self._expiry.items() if now >= expires_at]
        for key in expired:
            del self._expiry[key]
            self._cache.pop(key, None)


def create_cache_store(redis_url: Optional[str]) -> CacheStore:
    """Build the configured store: Redis when a URL is set, in-memory otherwise."""
    if redis_url:
        logger.info("Using Redis cache store")
        return RedisCacheStore.from_url(redis_url)
    logger.info("REDIS_URL not set; using in-memory cache store")
    return InMemoryCacheStore()
