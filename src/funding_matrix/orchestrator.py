"""Aggregation orchestrator -- one polling cycle, start to finish.

Each cycle:
  1. AUTHORIZE: check the trigger token (when a secret is configured)
  2. GUARD: take the single-flight lock or report SKIPPED
  3. FETCH: run every exchange adapter concurrently, settle all
  4. BUILD: spread matrix over the union of rates
  5. PERSIST: raw rates + one sample per venue pair per symbol
  6. RELEASE: always, even when every adapter failed

Adapter failures are recorded per venue and never cancel sibling adapters.
Persistence failures are logged and reported; the in-memory result stands
and the next cycle simply writes another snapshot.
"""

from __future__ import annotations

import asyncio
import itertools
import secrets
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from enum import Enum

from funding_matrix.config import AggregationSettings
from funding_matrix.data.store import SnapshotStore
from funding_matrix.exceptions import ExchangeFetchError
from funding_matrix.exchange.client import ExchangeAdapter
from funding_matrix.guard import ExecutionGuard
from funding_matrix.logging import bound_cycle_context, get_logger
from funding_matrix.market_data.spread_matrix import build_spread_matrix
from funding_matrix.models import (
    ExchangeId,
    ExchangePair,
    HistoricalSample,
    MultiExchangeSpread,
    NormalizedFundingRate,
)

logger = get_logger(__name__)


class CycleStatus(str, Enum):
    COMPLETED = "completed"
    SKIPPED = "skipped"  # another cycle holds the lock
    FAILED = "failed"  # no adapter produced data
    UNAUTHORIZED = "unauthorized"


@dataclass
class FetchResult:
    """Settled outcome of one fan-out across all adapters."""

    rates: dict[ExchangeId, list[NormalizedFundingRate]] = field(default_factory=dict)
    errors: dict[ExchangeId, str] = field(default_factory=dict)

    @property
    def all_rates(self) -> list[NormalizedFundingRate]:
        return [rate for rates in self.rates.values() for rate in rates]

    @property
    def exchange_counts(self) -> dict[str, int]:
        counts = {exchange.value: len(rates) for exchange, rates in self.rates.items()}
        for exchange in self.errors:
            counts.setdefault(exchange.value, 0)
        return counts


@dataclass
class CycleResult:
    """Structured outcome reported back to the trigger."""

    status: CycleStatus
    exchange_counts: dict[str, int] = field(default_factory=dict)
    spread_count: int = 0
    sample_count: int = 0
    errors: list[str] = field(default_factory=list)
    persistence_errors: list[str] = field(default_factory=list)
    started_at: int = 0  # Unix milliseconds
    duration_ms: int = 0
    spreads: list[MultiExchangeSpread] = field(default_factory=list, repr=False)

    @property
    def success(self) -> bool:
        return self.status is CycleStatus.COMPLETED


def build_samples(
    spreads: Sequence[MultiExchangeSpread], observed_at: int
) -> list[HistoricalSample]:
    """One HistoricalSample per unordered venue pair for every matrix row.

    Pairs are emitted in canonical (ExchangeId declaration) order.
    """
    samples: list[HistoricalSample] = []
    for spread in spreads:
        venues = sorted(spread.exchanges, key=lambda exchange: exchange.rank)
        for exchange_a, exchange_b in itertools.combinations(venues, 2):
            samples.append(
                HistoricalSample(
                    symbol=spread.symbol,
                    pair=ExchangePair(exchange_a, exchange_b),
                    hourly_rate_a=spread.exchanges[exchange_a].hourly_rate,
                    hourly_rate_b=spread.exchanges[exchange_b].hourly_rate,
                    observed_at=observed_at,
                )
            )
    return samples


class AggregationOrchestrator:
    """Runs aggregation cycles: adapters -> spread matrix -> persistence.

    Args:
        adapters: Enabled venue adapters.
        store: Snapshot persistence collaborator.
        guard: Single-flight lock table shared by every trigger in this process.
        settings: Lock key and trigger secret.
        clock: Seconds-since-epoch source.
    """

    def __init__(
        self,
        adapters: Sequence[ExchangeAdapter],
        store: SnapshotStore,
        guard: ExecutionGuard,
        settings: AggregationSettings,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._adapters = list(adapters)
        self._store = store
        self._guard = guard
        self._settings = settings
        self._clock = clock
        self._last_result: CycleResult | None = None

    @property
    def guard(self) -> ExecutionGuard:
        return self._guard

    @property
    def lock_key(self) -> str:
        return self._settings.lock_key

    @property
    def last_result(self) -> CycleResult | None:
        return self._last_result

    def authorize(self, token: str | None) -> bool:
        """True when no secret is configured or token matches it."""
        secret = self._settings.cron_secret.get_secret_value()
        if not secret:
            return True
        if token is None:
            return False
        return secrets.compare_digest(token.encode(), secret.encode())

    async def fetch_all(self) -> FetchResult:
        """Run every adapter concurrently and wait for all of them to settle."""
        outcomes = await asyncio.gather(
            *(adapter.fetch() for adapter in self._adapters),
            return_exceptions=True,
        )

        result = FetchResult()
        for adapter, outcome in zip(self._adapters, outcomes):
            exchange = adapter.exchange
            if isinstance(outcome, asyncio.CancelledError):
                raise outcome
            if isinstance(outcome, BaseException):
                message = (
                    str(outcome)
                    if isinstance(outcome, ExchangeFetchError)
                    else f"{exchange.value}: {type(outcome).__name__}: {outcome}"
                )
                result.errors[exchange] = message
                logger.warning("exchange_fetch_failed", exchange=exchange.value, error=message)
                continue
            result.rates[exchange] = outcome
        return result

    async def run_cycle(self, token: str | None = None) -> CycleResult:
        """Execute one aggregation cycle; never raises for venue or storage failures."""
        started = self._clock()
        started_ms = int(started * 1000)

        if not self.authorize(token):
            logger.warning("cycle_trigger_unauthorized")
            return CycleResult(status=CycleStatus.UNAUTHORIZED, started_at=started_ms)

        key = self._settings.lock_key
        if not self._guard.try_acquire(key):
            logger.info("cycle_skipped_already_running", key=key)
            return CycleResult(status=CycleStatus.SKIPPED, started_at=started_ms)

        try:
            with bound_cycle_context(lock_key=key):
                result = await self._run_locked(started_ms)
        finally:
            self._guard.release(key)

        result.duration_ms = int(self._clock() * 1000) - started_ms
        self._last_result = result
        logger.info(
            "cycle_finished",
            status=result.status.value,
            exchange_counts=result.exchange_counts,
            spreads=result.spread_count,
            samples=result.sample_count,
            errors=len(result.errors),
            duration_ms=result.duration_ms,
        )
        return result

    async def _run_locked(self, started_ms: int) -> CycleResult:
        logger.info("cycle_started", adapters=[a.exchange.value for a in self._adapters])
        fetched = await self.fetch_all()
        errors = list(fetched.errors.values())

        if not fetched.rates:
            if not self._adapters:
                errors.append("no exchange adapters configured")
            logger.error("cycle_failed_no_exchange_data", errors=errors)
            return CycleResult(
                status=CycleStatus.FAILED,
                exchange_counts=fetched.exchange_counts,
                errors=errors,
                started_at=started_ms,
            )

        rates = fetched.all_rates
        spreads = build_spread_matrix(rates, updated_at=started_ms)
        samples = build_samples(spreads, observed_at=started_ms)
        persistence_errors = await self._persist(rates, samples)

        return CycleResult(
            status=CycleStatus.COMPLETED,
            exchange_counts=fetched.exchange_counts,
            spread_count=len(spreads),
            sample_count=len(samples),
            errors=errors,
            persistence_errors=persistence_errors,
            started_at=started_ms,
            spreads=spreads,
        )

    async def _persist(
        self,
        rates: list[NormalizedFundingRate],
        samples: list[HistoricalSample],
    ) -> list[str]:
        """Write rates then samples; each write failing independently is logged, not raised."""
        errors: list[str] = []
        try:
            await self._store.insert_rates(rates)
        except Exception as e:
            logger.error("persist_rates_failed", count=len(rates), error=str(e), exc_info=True)
            errors.append(f"funding_rates: {type(e).__name__}: {e}")
        try:
            await self._store.insert_samples(samples)
        except Exception as e:
            logger.error("persist_samples_failed", count=len(samples), error=str(e), exc_info=True)
            errors.append(f"spread_samples: {type(e).__name__}: {e}")
        return errors
