"""Client-side fixed-window rate limiting for quote API requests.

Each request category has its own counter that resets once the window
has elapsed. A fixed window admits up to twice the capacity across a
window boundary; the upstream service tolerates that.
"""

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

logger = logging.getLogger(__name__)


DEFAULT_LIMITS = {
    "quotes": 60,
    "candles": 30,
}

DEFAULT_WINDOW_MS = 60_000


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass
class RateLimitWindow:
    """Request counter for one category."""

    count: int
    reset_time: int


class RateLimiter:
    """Fixed-window request throttle, one window per request category.

    One instance is shared by every provider in the process. All calls
    happen from the polling loop, so there is a single writer per
    category.
    """

    def __init__(
        self,
        limits: Optional[dict[str, int]] = None,
        window_ms: int = DEFAULT_WINDOW_MS,
        clock: Optional[Callable[[], int]] = None,
    ):
        """Initialize the rate limiter.

        Args:
            limits: Requests allowed per window, by category.
            window_ms: Window length in milliseconds.
            clock: Callable returning the current time in epoch milliseconds.
        """
        self._limits = dict(DEFAULT_LIMITS if limits is None else limits)
        for category, capacity in self._limits.items():
            if capacity < 0:
                raise ValueError(f"Negative capacity for '{category}': {capacity}")
        if window_ms <= 0:
            raise ValueError("Window length must be positive")

        self._window_ms = window_ms
        self._clock = clock or _now_ms

        now = self._clock()
        self._windows = {
            category: RateLimitWindow(count=0, reset_time=now + window_ms)
            for category in self._limits
        }

    @property
    def limits(self) -> dict[str, int]:
        return dict(self._limits)

    def is_request_allowed(self, category: str) -> bool:
        """Count a request against its category.

        Args:
            category: Request category ("quotes" or "candles").

        Returns:
            True if the request may proceed, False if the window is full.

        Raises:
            ValueError: If the category is unknown.
        """
        if category not in self._windows:
            raise ValueError(f"Unknown request category: {category}")

        window = self._windows[category]
        now = self._clock()

        if now > window.reset_time:
            window.count = 0
            window.reset_time = now + self._window_ms

        if window.count >= self._limits[category]:
            logger.debug("Rate limit reached for %s (%d requests)", category, window.count)
            return False

        window.count += 1
        return True

    def window(self, category: str) -> RateLimitWindow:
        """Get a snapshot of a category's current window."""
        if category not in self._windows:
            raise ValueError(f"Unknown request category: {category}")
        window = self._windows[category]
        return RateLimitWindow(count=window.count, reset_time=window.reset_time)
