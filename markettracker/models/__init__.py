"""Data models for MarketTracker."""

from markettracker.models.alert import Alert, AlertDraft, AlertType
from markettracker.models.quote import Candle, CandleSeries, NewsItem, Quote

__all__ = [
    "Alert",
    "AlertDraft",
    "AlertType",
    "Candle",
    "CandleSeries",
    "NewsItem",
    "Quote",
]
