"""Input validation and request throttling for outbound API calls."""

from markettracker.security.rate_limiter import RateLimiter, RateLimitWindow
from markettracker.security.validators import (
    VALID_RESOLUTIONS,
    is_valid_resolution,
    is_valid_symbol,
    is_valid_timestamp,
    sanitize_symbol,
)

__all__ = [
    "RateLimiter",
    "RateLimitWindow",
    "VALID_RESOLUTIONS",
    "is_valid_resolution",
    "is_valid_symbol",
    "is_valid_timestamp",
    "sanitize_symbol",
]
