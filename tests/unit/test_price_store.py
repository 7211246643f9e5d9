"""
Unit Tests for the SQLite Price Store

These tests verify that PriceStore:
- Creates its file, directory and schema and runs in WAL mode
- Upserts by symbol (one row, all fields replaced)
- Survives a restart (close + reopen)
- Reports failures instead of swallowing them

Run with:
    pytest tests/unit/test_price_store.py -v
"""

import sqlite3
from datetime import timedelta

import pytest

from core.errors import StoreClosedError, StoreInitError, StoreReadError, StoreWriteError
from core.schemas import CachedPrice
from storage.price_store import PriceStore
from tests.conftest import FIXED_TIME


def cached(price=42_500_000, name="طلای 18 عیار", fetched_at=FIXED_TIME, symbol="gold_18k"):
    return CachedPrice(symbol=symbol, name=name, price_minor_units=price, fetched_at=fetched_at)


class TestOpen:
    """Tests for store initialisation"""

    def test_open_creates_directory_and_table(self, db_path):
        store = PriceStore(db_path)
        store.open()

        with sqlite3.connect(db_path) as conn:
            tables = [r[0] for r in conn.execute("SELECT name FROM sqlite_master WHERE type='table'")]
        assert "gold_prices" in tables
        store.close()

    def test_open_enables_wal(self, store, db_path):
        with sqlite3.connect(db_path) as conn:
            mode = conn.execute("PRAGMA journal_mode").fetchone()[0]
        assert mode.lower() == "wal"

    def test_open_failure_raises_store_init_error(self, tmp_path):
        blocker = tmp_path / "not_a_dir"
        blocker.write_text("file in the way")

        store = PriceStore(str(blocker / "gold.db"))
        with pytest.raises(StoreInitError):
            store.open()


class TestUpsertAndGet:
    """Tests for the read/write contract"""

    def test_get_before_any_write_returns_none(self, store):
        assert store.get("gold_18k") is None

    def test_upsert_then_get_round_trips(self, store):
        store.upsert(cached())

        row = store.get("gold_18k")

        assert row.symbol == "gold_18k"
        assert row.name == "طلای 18 عیار"
        assert row.price_minor_units == 42_500_000
        assert row.fetched_at == FIXED_TIME

    def test_upsert_replaces_all_fields(self, store):
        store.upsert(cached())
        later = FIXED_TIME + timedelta(minutes=1)
        store.upsert(cached(price=43_000_000, name="Gold 18k", fetched_at=later))

        row = store.get("gold_18k")

        assert row.price_minor_units == 43_000_000
        assert row.name == "Gold 18k"
        assert row.fetched_at == later

    def test_upsert_keeps_a_single_row(self, store, db_path):
        for i in range(5):
            store.upsert(cached(price=1000 + i))

        with sqlite3.connect(db_path) as conn:
            count = conn.execute("SELECT COUNT(*) FROM gold_prices").fetchone()[0]
        assert count == 1

    def test_timestamp_is_stored_as_rfc3339_utc(self, store, db_path):
        store.upsert(cached())

        with sqlite3.connect(db_path) as conn:
            stored = conn.execute("SELECT fetched_at FROM gold_prices").fetchone()[0]
        assert stored == "2026-01-01T12:00:00Z"

    def test_value_survives_restart(self, db_path):
        first = PriceStore(db_path)
        first.open()
        first.upsert(cached(price=50_000_000))
        first.close()

        second = PriceStore(db_path)
        second.open()
        assert second.get("gold_18k").price_minor_units == 50_000_000
        second.close()

    @pytest.mark.asyncio
    async def test_async_wrappers(self, store):
        await store.aupsert(cached(price=12_340))
        row = await store.aget("gold_18k")
        assert row.price_minor_units == 12_340


class TestFailures:
    """Errors are reported to the caller"""

    def test_write_failure_raises_store_write_error(self, store, monkeypatch):
        def broken_connection():
            raise sqlite3.OperationalError("disk I/O error")

        monkeypatch.setattr(store, "_get_connection", broken_connection)

        with pytest.raises(StoreWriteError, match="disk I/O error"):
            store.upsert(cached())

    def test_read_failure_raises_store_read_error(self, store, monkeypatch):
        def broken_connection():
            raise sqlite3.OperationalError("database is locked")

        monkeypatch.setattr(store, "_get_connection", broken_connection)

        with pytest.raises(StoreReadError):
            store.get("gold_18k")

    def test_corrupt_timestamp_raises_store_read_error(self, store, db_path):
        with sqlite3.connect(db_path) as conn:
            conn.execute(
                "INSERT INTO gold_prices VALUES ('gold_18k', 'x', 10, 'yesterday')"
            )

        with pytest.raises(StoreReadError):
            store.get("gold_18k")

    def test_closed_store_refuses_operations(self, db_path):
        store = PriceStore(db_path)
        store.open()
        store.close()

        with pytest.raises(StoreClosedError):
            store.get("gold_18k")
        with pytest.raises(StoreClosedError):
            store.upsert(cached())
