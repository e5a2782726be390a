"""Binance USDT-M futures adapter.

premiumIndex carries mark price and the current rate but can list stale or
delisted contracts; fundingInfo is the authoritative per-symbol interval
list. Only symbols present in both are trusted. A symbol missing from
fundingInfo is dropped, never defaulted to 8h.
"""

import asyncio
from typing import Any

from funding_matrix.exchange.client import ExchangeAdapter, to_decimal, to_int
from funding_matrix.exchange.symbols import parse_usdt_symbol, per_unit_price, to_usdt_symbol
from funding_matrix.models import ExchangeId, NormalizedFundingRate


class BinanceAdapter(ExchangeAdapter):
    """Two requests per cycle: premiumIndex and fundingInfo."""

    exchange = ExchangeId.BINANCE

    async def fetch_rates(self) -> list[NormalizedFundingRate]:
        premium_payload, info_payload = await asyncio.gather(
            self._http.get_json(self.exchange.value, self._url("/fapi/v1/premiumIndex")),
            self._http.get_json(self.exchange.value, self._url("/fapi/v1/fundingInfo")),
        )
        premium = self._expect_list(premium_payload, "premiumIndex")
        intervals = self.resolve_intervals(self._expect_list(info_payload, "fundingInfo"))

        observed_at = self._now_ms()
        return self._collect(premium, lambda row: self._parse(row, intervals, observed_at))

    @staticmethod
    def resolve_intervals(funding_info: list[Any]) -> dict[str, int]:
        """venue symbol -> fundingIntervalHours, ignoring unusable entries."""
        intervals: dict[str, int] = {}
        for item in funding_info:
            if not isinstance(item, dict):
                continue
            symbol = item.get("symbol")
            hours = to_int(item.get("fundingIntervalHours"))
            if symbol and hours and hours > 0:
                intervals[symbol] = hours
        return intervals

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
        return f"https://www.binance.com/en/futures/{venue_symbol}"
