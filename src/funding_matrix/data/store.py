"""Snapshot persistence boundary and its SQLite implementation.

The orchestrator and the history services depend only on SnapshotStore:
append-only inserts plus time-range reads. SqliteSnapshotStore is the
bundled implementation.

CRITICAL: Rates and prices are stored as TEXT in SQLite and restored as Decimal on read.
"""

from collections.abc import Sequence
from decimal import Decimal
from typing import Protocol

from funding_matrix.data.database import SnapshotDatabase
from funding_matrix.logging import get_logger
from funding_matrix.models import (
    ExchangeId,
    ExchangePair,
    HistoricalSample,
    NormalizedFundingRate,
)

logger = get_logger(__name__)


class SnapshotStore(Protocol):
    """Durable append + range-by-time read."""

    async def insert_rates(self, rates: Sequence[NormalizedFundingRate]) -> int: ...

    async def insert_samples(self, samples: Sequence[HistoricalSample]) -> int: ...

    async def query_samples(
        self, symbol: str, pair: ExchangePair, since_ms: int
    ) -> list[HistoricalSample]: ...

    async def query_rates(
        self, symbol: str, exchange: ExchangeId, since_ms: int
    ) -> list[NormalizedFundingRate]: ...


def _optional_decimal(value: str | None) -> Decimal | None:
    return Decimal(value) if value is not None else None


class SqliteSnapshotStore:
    """SnapshotStore backed by SnapshotDatabase (aiosqlite).

    Samples are written under the canonical pair ordering; reads for the
    reversed pair swap the two rate columns so callers always get rates in
    the order they asked for.
    """

    def __init__(self, database: SnapshotDatabase) -> None:
        self._database = database

    # ──────────────────────────────────────────────
    # Write methods
    # ──────────────────────────────────────────────

    async def insert_rates(self, rates: Sequence[NormalizedFundingRate]) -> int:
        """Append funding rate observations. Returns the number of rows written."""
        if not rates:
            return 0

        data = [
            (
                r.exchange.value,
                r.symbol,
                r.venue_symbol,
                str(r.raw_rate),
                r.period_hours,
                str(r.hourly_rate),
                str(r.mark_price) if r.mark_price is not None else None,
                r.next_funding_time,
                r.observed_at,
            )
            for r in rates
        ]

        cursor = await self._database.db.executemany(
            "INSERT INTO funding_rates "
            "(exchange, symbol, venue_symbol, raw_rate, period_hours, hourly_rate, "
            "mark_price, next_funding_ms, observed_at_ms) "
            "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)",
            data,
        )
        await self._database.db.commit()

        logger.debug("inserted_funding_rates", total=len(rates), inserted=cursor.rowcount)
        return cursor.rowcount

    async def insert_samples(self, samples: Sequence[HistoricalSample]) -> int:
        """Append spread samples (normalized to canonical pair order)."""
        if not samples:
            return 0

        data = []
        for sample in samples:
            row = sample if sample.pair.is_canonical else sample.swapped()
            data.append(
                (
                    row.symbol,
                    row.pair.exchange_a.value,
                    row.pair.exchange_b.value,
                    str(row.hourly_rate_a),
                    str(row.hourly_rate_b),
                    row.observed_at,
                )
            )

        cursor = await self._database.db.executemany(
            "INSERT INTO spread_samples "
            "(symbol, exchange_a, exchange_b, hourly_rate_a, hourly_rate_b, observed_at_ms) "
            "VALUES (?, ?, ?, ?, ?, ?)",
            data,
        )
        await self._database.db.commit()

        logger.debug("inserted_spread_samples", total=len(samples), inserted=cursor.rowcount)
        return cursor.rowcount

    # ──────────────────────────────────────────────
    # Read methods
    # ──────────────────────────────────────────────

    async def query_samples(
        self, symbol: str, pair: ExchangePair, since_ms: int
    ) -> list[HistoricalSample]:
        """Samples for symbol and pair observed at or after since_ms, oldest first."""
        canonical = pair.canonical()
        cursor = await self._database.db.execute(
            "SELECT hourly_rate_a, hourly_rate_b, observed_at_ms FROM spread_samples "
            "WHERE symbol = ? AND exchange_a = ? AND exchange_b = ? AND observed_at_ms >= ? "
            "ORDER BY observed_at_ms ASC, id ASC",
            (symbol, canonical.exchange_a.value, canonical.exchange_b.value, since_ms),
        )
        rows = await cursor.fetchall()

        samples = [
            HistoricalSample(
                symbol=symbol,
                pair=canonical,
                hourly_rate_a=Decimal(row[0]),
                hourly_rate_b=Decimal(row[1]),
                observed_at=row[2],
            )
            for row in rows
        ]
        if canonical != pair:
            samples = [s.swapped() for s in samples]
        return samples

    async def query_rates(
        self, symbol: str, exchange: ExchangeId, since_ms: int
    ) -> list[NormalizedFundingRate]:
        """Rate observations for one symbol on one venue since since_ms, oldest first."""
        cursor = await self._database.db.execute(
            "SELECT venue_symbol, raw_rate, period_hours, mark_price, next_funding_ms, "
            "observed_at_ms FROM funding_rates "
            "WHERE symbol = ? AND exchange = ? AND observed_at_ms >= ? "
            "ORDER BY observed_at_ms ASC, id ASC",
            (symbol, exchange.value, since_ms),
        )
        rows = await cursor.fetchall()
        return [
            NormalizedFundingRate(
                exchange=exchange,
                symbol=symbol,
                raw_rate=Decimal(row[1]),
                period_hours=row[2],
                venue_symbol=row[0],
                mark_price=_optional_decimal(row[3]),
                next_funding_time=row[4],
                observed_at=row[5],
            )
            for row in rows
        ]
