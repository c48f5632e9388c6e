"""Persistence layer for MarketTracker."""

from markettracker.db.alerts import ALERTS_KEY, AlertStore
from markettracker.db.kv import KeyValueStore, MemoryKeyValueStore, SqliteKeyValueStore

__all__ = [
    "ALERTS_KEY",
    "AlertStore",
    "KeyValueStore",
    "MemoryKeyValueStore",
    "SqliteKeyValueStore",
]
