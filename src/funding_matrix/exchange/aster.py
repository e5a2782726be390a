"""Aster DEX adapter with funding interval inference.

Aster does not publish the per-symbol funding interval. It is inferred from
the gap between the two most recent settlements in the symbol's funding
history:

    gap < 2h -> 1h,  gap < 6h -> 4h,  otherwise 8h

Inference costs one request per symbol, so results live in an IntervalCache
with a long TTL. Uncached symbols are inferred concurrently (bounded by a
semaphore); duplicate inference for the same symbol is harmless.
"""

import asyncio
import time
from collections.abc import Callable

from funding_matrix.exchange.client import ExchangeAdapter, to_decimal, to_int
from funding_matrix.exchange.http import JsonHttpClient
from funding_matrix.exchange.interval_cache import IntervalCache
from funding_matrix.exchange.symbols import (
    normalize_usdt_symbol,
    parse_usdt_symbol,
    per_unit_price,
    to_usdt_symbol,
)
from funding_matrix.logging import get_logger
from funding_matrix.models import ExchangeId, NormalizedFundingRate

logger = get_logger(__name__)

_FALLBACK_INTERVAL_HOURS = 8
_MS_PER_HOUR = 60 * 60 * 1000


def bucket_interval_hours(gap_ms: int) -> int:
    """Map an observed settlement gap onto the 1h/4h/8h interval set."""
    gap_hours = abs(gap_ms) / _MS_PER_HOUR
    if gap_hours < 2:
        return 1
    if gap_hours < 6:
        return 4
    return 8


class AsterAdapter(ExchangeAdapter):
    """premiumIndex plus one fundingRate history request per uncached symbol.

    Args:
        interval_cache: Shared cache of inferred intervals (kept across cycles).
        inference_concurrency: Max in-flight history requests per cycle.
    """

    exchange = ExchangeId.ASTER

    def __init__(
        self,
        http: JsonHttpClient,
        base_url: str,
        interval_cache: IntervalCache | None = None,
        inference_concurrency: int = 8,
        clock: Callable[[], float] = time.time,
    ) -> None:
        super().__init__(http, base_url, clock)
        self._interval_cache = (
            interval_cache if interval_cache is not None else IntervalCache(clock=clock)
        )
        self._inference_limit = asyncio.Semaphore(max(1, inference_concurrency))

    @property
    def interval_cache(self) -> IntervalCache:
        return self._interval_cache

    async def fetch_rates(self) -> list[NormalizedFundingRate]:
        premium = self._expect_list(
            await self._http.get_json(self.exchange.value, self._url("/fapi/v1/premiumIndex")),
            "premiumIndex",
        )
        candidates = [
            row
            for row in premium
            if isinstance(row, dict)
            and isinstance(row.get("symbol"), str)
            and normalize_usdt_symbol(row["symbol"]) is not None
            and to_decimal(row.get("lastFundingRate")) is not None
        ]

        intervals = await self.resolve_intervals([row["symbol"] for row in candidates])

        observed_at = self._now_ms()
        return self._collect(candidates, lambda row: self._parse(row, intervals, observed_at))

    async def resolve_intervals(self, venue_symbols: list[str]) -> dict[str, int]:
        """venue symbol -> interval hours; symbols whose inference failed are absent."""
        intervals: dict[str, int] = {}
        missing: list[str] = []
        for venue_symbol in venue_symbols:
            cached = self._interval_cache.get(venue_symbol)
            if cached is None:
                missing.append(venue_symbol)
            else:
                intervals[venue_symbol] = cached

        if missing:
            results = await asyncio.gather(
                *(self._infer_interval(venue_symbol) for venue_symbol in missing),
                return_exceptions=True,
            )
            failed = 0
            for venue_symbol, result in zip(missing, results):
                if isinstance(result, BaseException):
                    failed += 1
                    logger.warning(
                        "aster_interval_inference_failed",
                        symbol=venue_symbol,
                        error=str(result),
                    )
                    continue
                intervals[venue_symbol] = result
            logger.info(
                "aster_intervals_inferred",
                requested=len(missing),
                failed=failed,
                cached=len(self._interval_cache),
            )

        return intervals

    async def _infer_interval(self, venue_symbol: str) -> int:
        async with self._inference_limit:
            payload = await self._http.get_json(
                self.exchange.value,
                self._url("/fapi/v1/fundingRate"),
                params={"symbol": venue_symbol, "limit": 2},
            )
        history = self._expect_list(payload, f"fundingRate[{venue_symbol}]")
        times = sorted(
            t for t in (to_int(item.get("fundingTime")) for item in history if isinstance(item, dict))
            if t is not None
        )
        if len(times) < 2:
            # New listing: not enough history yet. Not cached so the next
            # cycle retries once a second settlement exists.
            return _FALLBACK_INTERVAL_HOURS

        interval = bucket_interval_hours(times[-1] - times[-2])
        self._interval_cache.put(venue_symbol, interval)
        return interval

    def _parse(
        self, row: dict, intervals: dict[str, int], observed_at: int
    ) -> NormalizedFundingRate | None:
        venue_symbol = row["symbol"]
        parsed = parse_usdt_symbol(venue_symbol)
        period_hours = intervals.get(venue_symbol)
        raw_rate = to_decimal(row.get("lastFundingRate"))
        if parsed is None or period_hours is None or raw_rate is None:
            return None

        return NormalizedFundingRate(
            exchange=self.exchange,
            symbol=parsed.symbol,
            raw_rate=raw_rate,
            period_hours=period_hours,
            venue_symbol=venue_symbol,
            mark_price=per_unit_price(to_decimal(row.get("markPrice")), parsed.multiplier),
            next_funding_time=to_int(row.get("nextFundingTime")) or None,
            observed_at=observed_at,
        )

    @classmethod
    def venue_symbol(cls, symbol: str) -> str:
        return to_usdt_symbol(symbol)

    @classmethod
    def trade_page_url(cls, venue_symbol: str) -> str:
        return f"https://app.asterdex.com/trade/{venue_symbol}"

