"""Matching of live prices against stored alerts."""

import logging
from datetime import datetime
from typing import Callable, Mapping, Optional

from markettracker.db.alerts import AlertStore
from markettracker.errors import StorageError
from markettracker.models import Alert, Quote

logger = logging.getLogger(__name__)


class AlertEvaluator:
    """Fires pending alerts whose threshold the current price has crossed.

    An alert fires at most once: it stays triggered until the store
    resets it. Intended to run once per polling cycle, never concurrently.
    """

    def __init__(
        self,
        store: AlertStore,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._store = store
        self._clock = clock or datetime.now

    def evaluate(self, current_prices: Mapping[str, Quote]) -> list[Alert]:
        """Check all pending alerts against a batch of quotes.

        Args:
            current_prices: Quotes keyed by display name.

        Returns:
            Alerts triggered by this call, in store order.
        """
        with self._store.locked():
            alerts = self._store.list()
            now = self._clock()

            updated: list[Alert] = []
            triggered: list[Alert] = []
            for alert in alerts:
                quote = current_prices.get(alert.name)
                if not alert.triggered and quote is not None and alert.should_trigger(quote.current):
                    alert = alert.mark_triggered(now)
                    triggered.append(alert)
                    logger.info(
                        "Alert %d triggered: %s %s %s (current %s)",
                        alert.id, alert.name, alert.type.value, alert.price, quote.current,
                    )
                updated.append(alert)

            if triggered:
                try:
                    self._store.replace_all(updated)
                except StorageError as e:
                    logger.error("Triggered alerts were not persisted: %s", e)

        return triggered
