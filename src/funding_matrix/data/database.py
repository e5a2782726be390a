"""Async SQLite database manager for funding snapshots.

Uses aiosqlite for non-blocking database operations with WAL mode so the
history read path can run while a polling cycle is writing.
"""

import os
from typing import Self

import aiosqlite

from funding_matrix.logging import get_logger

logger = get_logger(__name__)

SCHEMA_VERSION = 1

_CREATE_TABLES_SQL = """
CREATE TABLE IF NOT EXISTS schema_version (
    version INTEGER PRIMARY KEY
);

CREATE TABLE IF NOT EXISTS funding_rates (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    exchange TEXT NOT NULL,
    symbol TEXT NOT NULL,
    venue_symbol TEXT NOT NULL DEFAULT '',
    raw_rate TEXT NOT NULL,
    period_hours INTEGER NOT NULL,
    hourly_rate TEXT NOT NULL,
    mark_price TEXT,
    next_funding_ms INTEGER,
    observed_at_ms INTEGER NOT NULL
);

CREATE TABLE IF NOT EXISTS spread_samples (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    symbol TEXT NOT NULL,
    exchange_a TEXT NOT NULL,
    exchange_b TEXT NOT NULL,
    hourly_rate_a TEXT NOT NULL,
    hourly_rate_b TEXT NOT NULL,
    observed_at_ms INTEGER NOT NULL
);
"""

_CREATE_INDEXES_SQL = """
CREATE INDEX IF NOT EXISTS idx_rates_symbol_exchange_ts
    ON funding_rates(symbol, exchange, observed_at_ms);

CREATE INDEX IF NOT EXISTS idx_samples_symbol_pair_ts
    ON spread_samples(symbol, exchange_a, exchange_b, observed_at_ms);
"""


class SnapshotDatabase:
    """Async SQLite connection manager for snapshot data.

    Usage:
        async with SnapshotDatabase("data/funding.db") as database:
            store = SqliteSnapshotStore(database)
    """

    def __init__(self, db_path: str = "data/funding.db") -> None:
        self._db_path = db_path
        self._connection: aiosqlite.Connection | None = None

    @property
    def db(self) -> aiosqlite.Connection:
        """Access the raw aiosqlite connection.

        Raises RuntimeError if not connected.
        """
        if self._connection is None:
            raise RuntimeError("Database not connected. Call connect() first.")
        return self._connection

    async def connect(self) -> None:
        """Open the connection, set pragmas, and create the schema."""
        if self._db_path != ":memory:":
            db_dir = os.path.dirname(self._db_path)
            if db_dir:
                os.makedirs(db_dir, exist_ok=True)

        self._connection = await aiosqlite.connect(self._db_path)

        await self._connection.execute("PRAGMA journal_mode=WAL")
        await self._connection.execute("PRAGMA synchronous=NORMAL")

        await self._create_tables()
        await self._ensure_schema_version()

        logger.info("snapshot_db_connected", db_path=self._db_path)

    async def close(self) -> None:
        if self._connection is not None:
            await self._connection.close()
            self._connection = None
            logger.info("snapshot_db_closed", db_path=self._db_path)

    async def _create_tables(self) -> None:
        assert self._connection is not None
        await self._connection.executescript(_CREATE_TABLES_SQL)
        await self._connection.executescript(_CREATE_INDEXES_SQL)
        await self._connection.commit()

    async def _ensure_schema_version(self) -> None:
        assert self._connection is not None
        cursor = await self._connection.execute("SELECT version FROM schema_version LIMIT 1")
        row = await cursor.fetchone()
        if row is None:
            await self._connection.execute(
                "INSERT INTO schema_version (version) VALUES (?)",
                (SCHEMA_VERSION,),
            )
            await self._connection.commit()
            logger.info("schema_version_set", version=SCHEMA_VERSION)

    async def __aenter__(self) -> Self:
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # type: ignore[no-untyped-def]
        await self.close()
