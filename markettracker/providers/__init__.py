"""Quote providers for MarketTracker."""

from markettracker.providers.base import (
    NEWS_CATEGORIES,
    BaseQuoteProvider,
    history_window,
    validate_candle_request,
    validate_symbol,
)
from markettracker.providers.demo import DemoProvider
from markettracker.providers.finnhub import FinnhubProvider

__all__ = [
    "BaseQuoteProvider",
    "DemoProvider",
    "FinnhubProvider",
    "NEWS_CATEGORIES",
    "history_window",
    "validate_candle_request",
    "validate_symbol",
]
