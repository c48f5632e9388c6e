"""Alert evaluation, notification and the polling cycle."""

from markettracker.alerts.evaluator import AlertEvaluator
from markettracker.alerts.monitor import CycleResult, MarketMonitor, fetch_quote, fetch_quotes
from markettracker.alerts.notifier import ConsoleNotifier, Notifier

__all__ = [
    "AlertEvaluator",
    "ConsoleNotifier",
    "CycleResult",
    "MarketMonitor",
    "Notifier",
    "fetch_quote",
    "fetch_quotes",
]
