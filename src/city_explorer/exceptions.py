"""
Custom exception hierarchy for City Explorer.

Every error carries an ErrorKind and the HTTP status it maps to, so the
API layer can answer each failure class distinctly instead of collapsing
them into one generic message.
"""

from enum import Enum


class ErrorKind(str, Enum):
    """Failure classes surfaced to API clients."""

    VALIDATION = "validation"
    UPSTREAM_EMPTY = "upstream-empty"
    UPSTREAM_TRANSPORT = "upstream-transport"
    STORE_FAILURE = "store-failure"
    INTERNAL = "internal"


class CityExplorerError(Exception):
    """Base exception for all City Explorer errors."""

    kind: ErrorKind = ErrorKind.INTERNAL
    status_code: int = 500
    public_message: str = "Sorry we didn't catch that, please try again"

    def __init__(self, message: str = "", details: dict | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


# --- Provider Exceptions ---


class ProviderError(CityExplorerError):
    """Base exception for upstream provider errors."""

    kind = ErrorKind.UPSTREAM_TRANSPORT
    status_code = 502
    public_message = "Upstream provider request failed"


class UpstreamTransportError(ProviderError):
    """Raised on network failure, non-2xx status or an unreadable body."""
    pass


class UpstreamEmptyError(ProviderError):
    """Raised when the geocoder finds nothing for a query ("No Data")."""

    kind = ErrorKind.UPSTREAM_EMPTY
    status_code = 404

    def __init__(self, query: str):
        super().__init__(
            message=f"No results found for '{query}'",
            details={"query": query},
        )
        self.public_message = self.message


# --- Database Exceptions ---


class DatabaseError(CityExplorerError):
    """Base exception for database errors."""

    kind = ErrorKind.STORE_FAILURE
    status_code = 503
    public_message = "Storage unavailable"


class DatabaseConnectionError(DatabaseError):
    """Raised when the database connection fails."""
    pass


class StoreFailureError(DatabaseError):
    """Raised when a cache query or insert fails."""
    pass


# --- Validation Exceptions ---


class ValidationError(CityExplorerError):
    """Base exception for input validation errors."""

    kind = ErrorKind.VALIDATION
    status_code = 422

    def __init__(self, message: str = "", details: dict | None = None):
        super().__init__(message, details)
        self.public_message = message


class InvalidLocationError(ValidationError):
    """Raised when the `data` parameter does not describe a usable location."""

    def __init__(self, reason: str, raw: str | None = None):
        super().__init__(
            message=f"Invalid location data: {reason}",
            details={"data": raw},
        )
