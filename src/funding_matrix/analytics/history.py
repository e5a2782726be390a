"""Read path: persisted snapshots -> history points + statistics.

Runs on demand, independently of the polling cycle.
"""

import time
from collections.abc import Callable
from dataclasses import dataclass

from funding_matrix.analytics.price_spread import (
    PriceSpreadPoint,
    PriceSpreadStatistics,
    compute_price_spread_statistics,
    match_price_points,
)
from funding_matrix.analytics.statistics import SpreadStatistics, compute_spread_statistics
from funding_matrix.config import StatisticsSettings
from funding_matrix.data.store import SnapshotStore
from funding_matrix.logging import get_logger
from funding_matrix.models import ExchangeId, ExchangePair, HistoricalSample

logger = get_logger(__name__)

_MS_PER_HOUR = 60 * 60 * 1000


@dataclass(frozen=True)
class SpreadHistory:
    symbol: str
    pair: ExchangePair
    hours: int
    samples: list[HistoricalSample]
    statistics: SpreadStatistics | None  # None: no data in window


@dataclass(frozen=True)
class PriceSpreadHistory:
    symbol: str
    pair: ExchangePair
    hours: int
    points: list[PriceSpreadPoint]
    statistics: PriceSpreadStatistics | None


class SpreadHistoryService:
    """Funding and price spread history for one symbol and one venue pair.

    Args:
        store: Snapshot persistence.
        settings: Threshold, lookback bounds and price match tolerance.
        clock: Seconds-since-epoch source.
    """

    def __init__(
        self,
        store: SnapshotStore,
        settings: StatisticsSettings,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._store = store
        self._settings = settings
        self._clock = clock

    def clamp_hours(self, hours: int | None) -> int:
        """Lookback window in hours, defaulted and bounded by settings."""
        if hours is None or hours <= 0:
            return self._settings.default_lookback_hours
        return min(hours, self._settings.max_lookback_hours)

    def _since_ms(self, hours: int) -> int:
        return int(self._clock() * 1000) - hours * _MS_PER_HOUR

    async def get_spread_history(
        self,
        symbol: str,
        exchange_a: ExchangeId,
        exchange_b: ExchangeId,
        hours: int | None = None,
    ) -> SpreadHistory:
        """Samples and statistics of (rate_a - rate_b) over the last `hours`."""
        window = self.clamp_hours(hours)
        pair = ExchangePair(exchange_a, exchange_b)
        samples = await self._store.query_samples(symbol, pair, self._since_ms(window))
        statistics = compute_spread_statistics(
            samples, self._settings.profitability_threshold_pct
        )
        logger.debug(
            "spread_history_computed",
            symbol=symbol,
            pair=str(pair),
            hours=window,
            samples=len(samples),
        )
        return SpreadHistory(symbol, pair, window, samples, statistics)

    async def get_price_history(
        self,
        symbol: str,
        exchange_a: ExchangeId,
        exchange_b: ExchangeId,
        hours: int | None = None,
    ) -> PriceSpreadHistory:
        """Mark-price spread between two venues over the last `hours`."""
        window = self.clamp_hours(hours)
        pair = ExchangePair(exchange_a, exchange_b)
        since = self._since_ms(window)
        rates_a = await self._store.query_rates(symbol, exchange_a, since)
        rates_b = await self._store.query_rates(symbol, exchange_b, since)
        points = match_price_points(rates_a, rates_b, self._settings.price_match_tolerance_ms)
        return PriceSpreadHistory(
            symbol, pair, window, points, compute_price_spread_statistics(points)
        )
