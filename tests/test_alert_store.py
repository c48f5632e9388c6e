"""Property-based tests for alert persistence.

**Feature: market-tracker**
"""

import json
import tempfile
import typing
from datetime import datetime
from pathlib import Path

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st
from pydantic import ValidationError as PydanticValidationError

from markettracker.db import ALERTS_KEY, AlertStore, MemoryKeyValueStore, SqliteKeyValueStore
from markettracker.errors import StorageError
from markettracker.models import Alert, AlertDraft, AlertType
from markettracker.symbols import CRYPTO_SYMBOLS, MARKET_INDICES

from conftest import CountingKeyValueStore, FakeDateClock


ALL_MARKETS = {**MARKET_INDICES, **CRYPTO_SYMBOLS}


def draft_strategy():
    """Generate valid AlertDraft objects for tracked markets."""
    return st.sampled_from(sorted(ALL_MARKETS)).flatmap(
        lambda name: st.builds(
            AlertDraft,
            symbol=st.just(ALL_MARKETS[name]),
            name=st.just(name),
            type=st.sampled_from(list(AlertType)),
            price=st.floats(min_value=0.0001, max_value=1e7, allow_nan=False, allow_infinity=False),
        )
    )


class FailingKeyValueStore(MemoryKeyValueStore):
    """Store whose reads and/or writes fail."""

    def __init__(self, fail_get=False, fail_set=False, initial=None):
        super().__init__(initial)
        self.fail_get = fail_get
        self.fail_set = fail_set

    def get(self, key):
        if self.fail_get:
            raise StorageError("disk unavailable")
        return super().get(key)

    def set(self, key, value):
        if self.fail_set:
            raise StorageError("disk full")
        super().set(key, value)


class TestAlertRoundTrip:
    """
    **Feature: market-tracker, Property 5: Alert Round Trip**

    *For any* list of drafts, appending then listing, and re-reading the
    serialized blob, gives the same alerts field for field.
    """

    @given(drafts=st.lists(draft_strategy(), min_size=1, max_size=15))
    @settings(max_examples=50)
    def test_append_list_blob_round_trip(self, drafts: list[AlertDraft]):
        kv = MemoryKeyValueStore()
        store = AlertStore(kv, clock=FakeDateClock())

        created = [store.append(draft) for draft in drafts]
        listed = store.list()
        assert listed == created

        records = json.loads(kv.get(ALERTS_KEY))
        reloaded = [Alert.model_validate(record) for record in records]
        assert reloaded == created

        for draft, alert in zip(drafts, reloaded):
            assert alert.symbol == draft.symbol
            assert alert.name == draft.name
            assert alert.type == draft.type
            assert alert.price == draft.price
            assert alert.triggered is False
            assert alert.triggered_at is None

    @given(drafts=st.lists(draft_strategy(), min_size=1, max_size=10))
    @settings(max_examples=20)
    def test_round_trip_through_sqlite(self, drafts: list[AlertDraft]):
        with tempfile.TemporaryDirectory() as tmpdir:
            db_path = Path(tmpdir) / "test.db"
            created = [AlertStore(SqliteKeyValueStore(db_path)).append(d) for d in drafts]

            # A fresh store on the same file sees the same collection
            assert AlertStore(SqliteKeyValueStore(db_path)).list() == created


class TestAlertIdentity:
    """
    **Feature: market-tracker, Property 6: Unique Creation-Order IDs**

    *For any* sequence of appends, IDs are unique and increasing even
    when the clock does not move.
    """

    @given(drafts=st.lists(draft_strategy(), min_size=2, max_size=20))
    @settings(max_examples=30)
    def test_ids_increase(self, drafts: list[AlertDraft]):
        store = AlertStore(MemoryKeyValueStore(), clock=FakeDateClock())
        ids = [store.append(draft).id for draft in drafts]
        assert ids == sorted(ids)
        assert len(set(ids)) == len(ids)

    def test_id_is_epoch_milliseconds(self, store, date_clock):
        draft = AlertDraft(symbol="^GSPC", name="S&P 500", type="below", price=5000)
        alert = store.append(draft)
        assert alert.id == int(date_clock.now.timestamp() * 1000)
        assert alert.created_at == date_clock.now


class TestAlertStoreOperations:
    """Unit tests for store mutations."""

    def _draft(self, name="Bitcoin", type="above", price=60000.0):
        return AlertDraft(symbol=CRYPTO_SYMBOLS.get(name, MARKET_INDICES.get(name)), name=name, type=type, price=price)

    def test_empty_store(self, store):
        assert store.list() == []
        assert store.get(1) is None

    def test_remove(self, store):
        first = store.append(self._draft())
        second = store.append(self._draft("Ethereum", price=4000))

        store.remove(first.id)

        assert store.list() == [second]

    def test_remove_missing_is_noop(self, store, kv):
        store.append(self._draft())
        writes = kv.writes

        store.remove(12345)

        assert len(store.list()) == 1
        assert kv.writes == writes

    def test_reset(self, store, date_clock):
        alert = store.append(self._draft())
        store.replace_all([alert.mark_triggered(date_clock())])
        assert store.get(alert.id).triggered

        store.reset(alert.id)

        reset = store.get(alert.id)
        assert reset.triggered is False
        assert reset.triggered_at is None

    def test_reset_missing_is_noop(self, store, kv):
        store.append(self._draft())
        writes = kv.writes

        store.reset(999)

        assert kv.writes == writes

    def test_replace_all_rejects_duplicate_ids(self, store):
        alert = store.append(self._draft())
        with pytest.raises(ValueError):
            store.replace_all([alert, alert])

    def test_filter_by_symbol(self, store):
        btc = store.append(self._draft())
        store.append(self._draft("Ethereum", price=4000))
        btc_below = store.append(self._draft(type="below", price=50000))

        assert store.filter_by_symbol("BINANCE:BTCUSDT") == [btc, btc_below]
        assert store.filter_by_symbol("^GSPC") == []

    def test_annotations_resolve_to_alert_lists(self, store):
        hints = typing.get_type_hints(AlertStore.filter_by_symbol)
        assert hints["return"] == typing.List[Alert]
        assert typing.get_type_hints(AlertStore.list)["return"] == typing.List[Alert]

        alert = store.append(self._draft())
        assert store.filter_by_symbol(alert.symbol) == [alert]


class TestAlertDraftValidation:
    """Drafts reject bad symbols and non-positive thresholds."""

    def test_symbol_is_sanitized(self):
        draft = AlertDraft(symbol=" binance:btcusdt ", name="Bitcoin", type="above", price=1)
        assert draft.symbol == "BINANCE:BTCUSDT"

    @pytest.mark.parametrize("symbol", ["", "<script>", "DROP TABLE alerts;", None])
    def test_invalid_symbol(self, symbol):
        with pytest.raises(PydanticValidationError):
            AlertDraft(symbol=symbol, name="Bitcoin", type="above", price=1)

    @pytest.mark.parametrize("price", [0, -1, -0.01])
    def test_non_positive_price(self, price):
        with pytest.raises(PydanticValidationError):
            AlertDraft(symbol="^GSPC", name="S&P 500", type="above", price=price)

    def test_invalid_type(self):
        with pytest.raises(PydanticValidationError):
            AlertDraft(symbol="^GSPC", name="S&P 500", type="sideways", price=1)

    def test_triggered_at_requires_triggered(self):
        with pytest.raises(PydanticValidationError):
            Alert(id=1, symbol="^GSPC", name="S&P 500", type="above", price=1,
                  triggered=False, triggered_at=datetime(2024, 1, 1))
        with pytest.raises(PydanticValidationError):
            Alert(id=1, symbol="^GSPC", name="S&P 500", type="above", price=1, triggered=True)


class TestDegradedStorage:
    """Corrupt or unavailable storage degrades instead of crashing."""

    @pytest.mark.parametrize("blob", [
        "not json",
        "{\"id\": 1}",
        "[{\"id\": 1, \"symbol\": \"^GSPC\"}]",
        "[{\"id\": 1, \"symbol\": \"^GSPC\", \"name\": \"S&P 500\", \"type\": \"above\", \"price\": -5,"
        " \"createdAt\": \"2024-01-01T00:00:00\", \"triggered\": false, \"triggeredAt\": null}]",
    ])
    def test_corrupt_blob_reads_as_empty(self, blob):
        store = AlertStore(MemoryKeyValueStore({ALERTS_KEY: blob}))
        assert store.list() == []

    def test_read_failure_reads_as_empty(self):
        store = AlertStore(FailingKeyValueStore(fail_get=True))
        assert store.list() == []

    def test_write_failure_is_raised(self):
        store = AlertStore(FailingKeyValueStore(fail_set=True))
        with pytest.raises(StorageError):
            store.append(AlertDraft(symbol="^GSPC", name="S&P 500", type="above", price=1))

    def test_reads_blob_written_by_web_dashboard(self):
        blob = json.dumps([{
            "id": 1714557600000,
            "symbol": "BINANCE:BTCUSDT",
            "name": "Bitcoin",
            "type": "above",
            "price": 60000,
            "createdAt": "2024-05-01T10:00:00.000Z",
            "triggered": False,
        }])
        alerts = AlertStore(MemoryKeyValueStore({ALERTS_KEY: blob})).list()

        assert len(alerts) == 1
        assert alerts[0].name == "Bitcoin"
        assert alerts[0].type is AlertType.ABOVE
        assert alerts[0].triggered_at is None


class TestSqliteKeyValueStore:
    """SQLite-backed key-value store."""

    def test_get_set_delete(self, temp_db):
        assert temp_db.get("k") is None
        temp_db.set("k", "v1")
        temp_db.set("k", "v2")
        assert temp_db.get("k") == "v2"
        assert temp_db.keys() == ["k"]
        temp_db.delete("k")
        assert temp_db.get("k") is None

    def test_creates_parent_directory(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            db_path = Path(tmpdir) / "nested" / "dir" / "kv.db"
            SqliteKeyValueStore(db_path).set("a", "b")
            assert db_path.exists()

    def test_unusable_parent_is_storage_error(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            blocker = Path(tmpdir) / "file"
            blocker.write_text("not a directory")
            with pytest.raises(StorageError):
                SqliteKeyValueStore(blocker / "sub" / "kv.db")
