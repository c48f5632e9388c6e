"""Error taxonomy for MarketTracker."""

from typing import Any, Optional


class MarketTrackerError(Exception):
    """Base class for all MarketTracker errors."""


class ValidationError(MarketTrackerError, ValueError):
    """Raised when a symbol, resolution or timestamp fails validation.

    Always raised before any network request is attempted.
    """

    def __init__(self, field: str, value: Any, message: Optional[str] = None):
        self.field = field
        self.value = value
        super().__init__(message or f"Invalid {field}: {value!r}")


class RateLimited(MarketTrackerError):
    """Raised when the local rate limiter denies a request."""

    def __init__(self, category: str):
        self.category = category
        super().__init__(f"Rate limit reached for '{category}' requests")


class UpstreamError(MarketTrackerError):
    """Raised when the quote service answers with a non-success status.

    ``status`` is None when the request never got a response
    (connection refused, timeout, ...).
    """

    def __init__(self, status: Optional[int], message: Optional[str] = None):
        self.status = status
        if message is None:
            message = (
                f"Upstream API error: {status}" if status is not None
                else "Upstream API unreachable"
            )
        super().__init__(message)


class StorageError(MarketTrackerError):
    """Raised when the alert backing store cannot be read or written."""
