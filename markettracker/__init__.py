"""MarketTracker - terminal market watcher with local price alerts."""

__version__ = "0.1.0"
