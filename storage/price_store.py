"""
Durable Price Store

SQLite-backed cache holding one row per symbol (in practice only gold_18k).
The row is upserted on every successful fetch and never deleted, so the
last known good price survives restarts.

Durability / concurrency:
    - journal_mode=WAL so the single writer (the poller) never blocks
      concurrent readers (request handlers)
    - one short-lived connection per operation, busy timeout 10s
    - every upsert is a single INSERT ... ON CONFLICT statement committed in
      its own transaction, so a row is replaced entirely or not at all

Schema:
    gold_prices(symbol TEXT PRIMARY KEY, name TEXT, price_rial INTEGER, fetched_at TEXT)

Usage:
    store = PriceStore("/data/gold.db")
    store.open()
    await store.aupsert(CachedPrice(...))
    row = await store.aget("gold_18k")
    store.close()
"""

import asyncio
import sqlite3
import threading
from contextlib import closing
from pathlib import Path
from typing import Optional

from core.errors import StoreClosedError, StoreInitError, StoreReadError, StoreWriteError
from core.logging import get_logger
from core.schemas import CachedPrice
from core.utils.time import parse_rfc3339, to_rfc3339


_CREATE_TABLE = """
    CREATE TABLE IF NOT EXISTS gold_prices (
        symbol     TEXT PRIMARY KEY,
        name       TEXT NOT NULL,
        price_rial INTEGER NOT NULL,
        fetched_at TEXT NOT NULL
    )
"""

_UPSERT = """
    INSERT INTO gold_prices (symbol, name, price_rial, fetched_at)
    VALUES (?, ?, ?, ?)
    ON CONFLICT(symbol) DO UPDATE SET
        name = excluded.name,
        price_rial = excluded.price_rial,
        fetched_at = excluded.fetched_at
"""

_SELECT = "SELECT symbol, name, price_rial, fetched_at FROM gold_prices WHERE symbol = ?"


class PriceStore:
    """
    SQLite cache for the latest price per symbol.

    Blocking methods (`upsert`, `get`) are safe to call from any thread;
    the `a*` variants run them in a worker thread for use on the event loop.

    Attributes:
        db_path: Path to the SQLite database file
        busy_timeout: Seconds a connection waits on a locked database
    """

    def __init__(self, db_path: str, busy_timeout: float = 10.0):
        self.db_path = db_path
        self.busy_timeout = busy_timeout
        self.logger = get_logger(__name__)
        self._opened = False
        self._closed = False
        self._write_lock = threading.Lock()

    # ============================================
    # Lifecycle
    # ============================================

    def open(self) -> None:
        """
        Create the database file and schema if needed and enable WAL.

        Raises:
            StoreInitError: If the file cannot be created or the schema applied
        """
        try:
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
            with closing(self._get_connection()) as conn:
                mode = conn.execute("PRAGMA journal_mode=WAL").fetchone()[0]
                with conn:
                    conn.execute(_CREATE_TABLE)
        except (sqlite3.Error, OSError) as e:
            raise StoreInitError(f"Failed to open SQLite at {self.db_path}: {e}") from e

        if str(mode).lower() != "wal":
            self.logger.warning(f"WAL not available for {self.db_path}, journal_mode={mode}")

        self._opened = True
        self._closed = False
        self.logger.info(f"Price store ready at {self.db_path}")

    def close(self) -> None:
        """Checkpoint the WAL and refuse further operations."""
        if self._closed or not self._opened:
            self._closed = True
            return
        self._closed = True
        try:
            with closing(self._get_connection()) as conn:
                conn.execute("PRAGMA wal_checkpoint(TRUNCATE)")
        except sqlite3.Error as e:
            self.logger.warning(f"WAL checkpoint on close failed: {e}")
        self.logger.info("Price store closed")

    @property
    def is_open(self) -> bool:
        return self._opened and not self._closed

    def _get_connection(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path, timeout=self.busy_timeout, check_same_thread=False)
        conn.execute("PRAGMA synchronous=NORMAL")
        return conn

    def _ensure_open(self) -> None:
        if self._closed:
            raise StoreClosedError("Price store is closed")
        if not self._opened:
            raise StoreClosedError("Price store was never opened")

    # ============================================
    # Operations
    # ============================================

    def upsert(self, price: CachedPrice) -> None:
        """
        Insert the row for `price.symbol` or replace all of its fields.

        Raises:
            StoreWriteError: If the statement did not commit
        """
        self._ensure_open()
        params = (price.symbol, price.name, price.price_minor_units, to_rfc3339(price.fetched_at))
        try:
            with self._write_lock, closing(self._get_connection()) as conn:
                with conn:
                    conn.execute(_UPSERT, params)
        except sqlite3.Error as e:
            raise StoreWriteError(f"DB upsert failed: {e}") from e

    def get(self, symbol: str) -> Optional[CachedPrice]:
        """
        Read the cached row for `symbol`.

        Returns:
            The cached price, or None if nothing has been stored yet

        Raises:
            StoreReadError: If the database cannot be read or the row is corrupt
        """
        self._ensure_open()
        try:
            with closing(self._get_connection()) as conn:
                row = conn.execute(_SELECT, (symbol,)).fetchone()
        except sqlite3.Error as e:
            raise StoreReadError(f"DB read failed: {e}") from e

        if row is None:
            return None

        try:
            return CachedPrice(
                symbol=row[0],
                name=row[1],
                price_minor_units=row[2],
                fetched_at=parse_rfc3339(row[3]),
            )
        except ValueError as e:
            raise StoreReadError(f"Corrupt cache row for {symbol}: {e}") from e

    # ============================================
    # Async Wrappers
    # ============================================

    async def aupsert(self, price: CachedPrice) -> None:
        await asyncio.to_thread(self.upsert, price)

    async def aget(self, symbol: str) -> Optional[CachedPrice]:
        return await asyncio.to_thread(self.get, symbol)
