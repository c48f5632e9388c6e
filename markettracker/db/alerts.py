"""Alert persistence on top of a key-value store."""

import json
import logging
import threading
from datetime import datetime
from typing import Callable, Iterable, List, Optional

from pydantic import ValidationError as PydanticValidationError

from markettracker.db.kv import KeyValueStore
from markettracker.errors import StorageError
from markettracker.models import Alert, AlertDraft

logger = logging.getLogger(__name__)


# Key of the JSON array holding every alert
ALERTS_KEY = "marketAlerts"


class AlertStore:
    """Owner of the alert collection.

    The whole collection is stored as one JSON array under ALERTS_KEY and
    every mutation is a read-modify-write of that array, serialized by a
    lock. Unreadable data is reported and treated as an empty collection
    so the watcher keeps running.
    """

    def __init__(
        self,
        kv_store: KeyValueStore,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """Initialize the alert store.

        Args:
            kv_store: Backing key-value store.
            clock: Callable returning the current time.
        """
        self._kv = kv_store
        self._clock = clock or datetime.now
        self._lock = threading.RLock()

    # ==================== Persistence ====================

    def _read(self) -> List[Alert]:
        """Load the collection, degrading to empty on any failure."""
        try:
            raw = self._kv.get(ALERTS_KEY)
        except StorageError as e:
            logger.error("Failed to read alerts: %s", e)
            return []

        if raw is None:
            return []

        try:
            records = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.error("Stored alerts are not valid JSON, ignoring them: %s", e)
            return []

        if not isinstance(records, list):
            logger.error("Stored alerts are not a list, ignoring them")
            return []

        try:
            return [Alert.model_validate(record) for record in records]
        except PydanticValidationError as e:
            logger.error("Stored alerts are invalid, ignoring them: %s", e)
            return []

    def _write(self, alerts: List[Alert]) -> None:
        """Persist the full collection.

        Raises:
            StorageError: If the backing store rejects the write.
        """
        blob = json.dumps([alert.to_record() for alert in alerts])
        try:
            self._kv.set(ALERTS_KEY, blob)
        except StorageError as e:
            logger.error("Failed to save alerts: %s", e)
            raise

    def _next_id(self, alerts: List[Alert]) -> int:
        candidate = int(self._clock().timestamp() * 1000)
        if alerts:
            candidate = max(candidate, max(alert.id for alert in alerts) + 1)
        return candidate

    # ==================== Operations ====================

    # Annotations in this class use typing.List: list() below shadows the
    # builtin inside the class body.
    def list(self) -> List[Alert]:
        """Get all alerts in creation order."""
        with self._lock:
            return self._read()

    def get(self, alert_id: int) -> Optional[Alert]:
        """Get an alert by ID, or None if absent."""
        for alert in self.list():
            if alert.id == alert_id:
                return alert
        return None

    def filter_by_symbol(self, symbol: str) -> List[Alert]:
        """Get the alerts watching a given upstream symbol."""
        return [alert for alert in self.list() if alert.symbol == symbol]

    def append(self, draft: AlertDraft) -> Alert:
        """Create an alert from a draft.

        Args:
            draft: User-supplied alert fields.

        Returns:
            The stored alert with its ID and creation time.

        Raises:
            StorageError: If the collection cannot be saved.
        """
        with self._lock:
            alerts = self._read()
            alert = Alert(
                id=self._next_id(alerts),
                symbol=draft.symbol,
                name=draft.name,
                type=draft.type,
                price=draft.price,
                created_at=self._clock(),
                triggered=False,
                triggered_at=None,
            )
            self._write(alerts + [alert])
            logger.info("Created alert %d: %s %s %s", alert.id, alert.name, alert.type.value, alert.price)
            return alert

    def remove(self, alert_id: int) -> None:
        """Delete an alert. Unknown IDs are ignored."""
        with self._lock:
            alerts = self._read()
            remaining = [alert for alert in alerts if alert.id != alert_id]
            if len(remaining) == len(alerts):
                return
            self._write(remaining)
            logger.info("Removed alert %d", alert_id)

    def replace_all(self, alerts: Iterable[Alert]) -> None:
        """Overwrite the whole collection in one write.

        Raises:
            ValueError: If two alerts share an ID.
            StorageError: If the collection cannot be saved.
        """
        alerts = list(alerts)
        ids = [alert.id for alert in alerts]
        if len(ids) != len(set(ids)):
            raise ValueError("Alert IDs must be unique")
        with self._lock:
            self._write(alerts)

    def reset(self, alert_id: int) -> None:
        """Re-arm a triggered alert. Unknown IDs are ignored."""
        with self._lock:
            alerts = self._read()
            found = False
            updated = []
            for alert in alerts:
                if alert.id == alert_id:
                    found = True
                    alert = alert.rearmed()
                updated.append(alert)
            if not found:
                return
            self._write(updated)
            logger.info("Reset alert %d", alert_id)

    def locked(self) -> threading.RLock:
        """Lock guarding read-modify-write cycles that span several calls."""
        return self._lock
