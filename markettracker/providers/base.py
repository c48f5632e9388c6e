"""Base quote provider interface for MarketTracker."""

import time
from abc import ABC, abstractmethod
from typing import Any, Optional

from markettracker.errors import ValidationError
from markettracker.models import CandleSeries, NewsItem, Quote
from markettracker.security.validators import (
    is_valid_resolution,
    is_valid_timestamp,
    sanitize_symbol,
)


NEWS_CATEGORIES = ("general", "forex", "crypto", "merger")

DAY_SECONDS = 24 * 60 * 60

# Display period -> (resolution, lookback in days)
HISTORY_PERIODS = {
    "1M": ("D", 30),
    "6M": ("W", 180),
    "1Y": ("W", 365),
    "ALL": ("M", 5 * 365),
}


def validate_symbol(raw: Any) -> str:
    """Sanitize a symbol or raise ValidationError."""
    symbol = sanitize_symbol(raw)
    if symbol is None:
        raise ValidationError("symbol", raw)
    return symbol


def validate_candle_request(
    symbol: Any, resolution: Any, from_ts: Any, to_ts: Any, now: Optional[int] = None
) -> str:
    """Validate every input of a candle request.

    Returns:
        The sanitized symbol.

    Raises:
        ValidationError: On the first invalid input.
    """
    clean_symbol = validate_symbol(symbol)
    if not is_valid_resolution(resolution):
        raise ValidationError("resolution", resolution)
    if not is_valid_timestamp(from_ts, now=now):
        raise ValidationError("from", from_ts)
    if not is_valid_timestamp(to_ts, now=now):
        raise ValidationError("to", to_ts)
    if from_ts > to_ts:
        raise ValidationError("range", (from_ts, to_ts), "'from' must not be after 'to'")
    return clean_symbol


def history_window(period: str = "1M", now: Optional[int] = None) -> tuple[str, int, int]:
    """Translate a display period into a candle request.

    Args:
        period: One of 1M, 6M, 1Y, ALL. Unknown periods fall back to 1M.
        now: Reference epoch seconds.

    Returns:
        (resolution, from_ts, to_ts)
    """
    if now is None:
        now = int(time.time())
    resolution, days = HISTORY_PERIODS.get(period.upper(), HISTORY_PERIODS["1M"])
    return resolution, now - days * DAY_SECONDS, now


class BaseQuoteProvider(ABC):
    """Abstract base class for quote providers.

    Implementations must validate every input with the security
    predicates before doing any I/O, and raise ValidationError when one
    fails. Calls carry no implicit retry.
    """

    @abstractmethod
    async def get_quote(self, symbol: str) -> Quote:
        """Get the current quote for a symbol.

        Args:
            symbol: Upstream symbol (e.g. ^GSPC, BINANCE:BTCUSDT).

        Returns:
            Quote snapshot.

        Raises:
            ValidationError: If the symbol is invalid.
            RateLimited: If the local rate limiter denies the request.
            UpstreamError: If the service answers with a non-success status.
        """
        pass

    @abstractmethod
    async def get_candles(
        self, symbol: str, resolution: str, from_ts: int, to_ts: int
    ) -> CandleSeries:
        """Get historical candles.

        Args:
            symbol: Upstream symbol.
            resolution: One of 1, 5, 15, 30, 60, D, W, M.
            from_ts: Range start, UNIX seconds.
            to_ts: Range end, UNIX seconds.

        Returns:
            Candle series, empty when the service has no data.

        Raises:
            ValidationError: If any input is invalid.
            RateLimited: If the local rate limiter denies the request.
            UpstreamError: If the service answers with a non-success status.
        """
        pass

    @abstractmethod
    async def get_market_news(self, category: str = "general") -> list[NewsItem]:
        """Get market news headlines for a category."""
        pass

    @abstractmethod
    async def get_index_constituents(self, symbol: str) -> list[str]:
        """Get the constituent symbols of an index."""
        pass

    async def aclose(self) -> None:
        """Release any network resources."""
        pass

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
