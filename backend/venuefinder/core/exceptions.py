# backend/venuefinder/core/exceptions.py
"""
Domain-specific exceptions for the venue discovery core.

These exceptions provide clear, business-focused error messages
that can be caught and handled appropriately at the API layer.
"""

from typing import Any, Dict, Optional

from fastapi import HTTPException, status


class DomainException(Exception):
    """Base exception for all domain-specific errors."""

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_http_exception(self) -> HTTPException:
        """Default conversion to HTTPException (override in subclasses)."""
        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "message": self.message,
                "code": self.code,
                "details": self.details,
            },
        )


class ValidationException(DomainException):
    """Raised when business validation fails."""

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "message": self.message,
                "code": self.code,
                "details": self.details,
            },
        )


class NotFoundException(DomainException):
    """Raised when a requested resource is not found."""

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={
                "message": self.message,
                "code": self.code,
                "details": self.details,
            },
        )


class ServiceException(DomainException):
    """Raised when a service operation fails."""

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "message": self.message or "An error occurred processing your request",
                "code": self.code,
                "details": self.details if self.details else {},
            },
        )


# Search-specific exceptions


class QueryExecutionException(ServiceException):
    """Raised when the datastore fails during the count or fetch phase of a search."""

    def __init__(
        self,
        message: str = "Search failed",
        *,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, code="SEARCH_FAILED", details=details)

    def to_http_exception(self) -> HTTPException:
        # Pool exhaustion is transient; tell clients to retry instead of failing hard.
        if self.details.get("pool_exhausted"):
            return HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Service temporarily overloaded. Please retry.",
                headers={"Retry-After": "2"},
            )
        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"message": self.message, "code": self.code, "details": {}},
        )


class CacheUnavailableException(DomainException):
    """
    Raised by cache stores when the backing cache cannot be reached.

    Never surfaces to callers: the result cache logs it and degrades
    to a miss (reads) or a no-op (writes).
    """

    def __init__(self, operation: str, reason: str = "") -> None:
        super().__init__(
            f"Cache {operation} failed" + (f": {reason}" if reason else ""),
            code="CACHE_UNAVAILABLE",
            details={"operation": operation},
        )
        self.operation = operation


class EmptyCriteriaException(ValidationException):
    """Raised by the HTTP layer when a search carries no meaningful filter."""

    def __init__(self, message: str = "Provide at least one search filter") -> None:
        super().__init__(message, code="EMPTY_CRITERIA")


class LocationParseError(ValueError):
    """
    Internal signal from the location parser.

    Caught inside the parser, which degrades to "no location constraint";
    it must never escape the parser.
    """


class PredicateAssemblyError(RuntimeError):
    """Raised when rendered placeholders and bound values disagree (a bug, not user input)."""


def is_db_pool_exhaustion(exc: Exception) -> bool:
    """
    Check if an exception indicates DB connection pool exhaustion.

    This is a common failure mode under high load when all database
    connections are in use and new requests time out waiting.
    """
    error_str = str(exc).lower()
    return "queuepool" in error_str or (
        "timeout" in error_str and ("connection" in error_str or "pool" in error_str)
    )
