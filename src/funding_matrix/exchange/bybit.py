"""Bybit linear perpetuals adapter.

BYBIT CONVENTION: the tickers endpoint reports the rate for the symbol's own
funding interval (fundingIntervalHour, 1/2/4/8). Missing interval -> 8h.
"""

from funding_matrix.exceptions import ExchangeFetchError
from funding_matrix.exchange.client import ExchangeAdapter, to_decimal, to_int
from funding_matrix.exchange.symbols import parse_usdt_symbol, per_unit_price, to_usdt_symbol
from funding_matrix.models import ExchangeId, NormalizedFundingRate

_DEFAULT_INTERVAL_HOURS = 8


class BybitAdapter(ExchangeAdapter):
    """Single request: /v5/market/tickers?category=linear."""

    exchange = ExchangeId.BYBIT

    async def fetch_rates(self) -> list[NormalizedFundingRate]:
        payload = self._expect_dict(
            await self._http.get_json(
                self.exchange.value,
                self._url("/v5/market/tickers"),
                params={"category": "linear"},
            ),
            "tickers",
        )
        if payload.get("retCode") != 0:
            raise ExchangeFetchError(
                self.exchange.value,
                f"retCode={payload.get('retCode')} retMsg={payload.get('retMsg')}",
            )

        result = self._expect_dict(payload.get("result"), "tickers.result")
        tickers = self._expect_list(result.get("list"), "tickers.result.list")

        observed_at = self._now_ms()
        return self._collect(tickers, lambda row: self._parse(row, observed_at))

    def _parse(self, ticker: dict, observed_at: int) -> NormalizedFundingRate | None:
        venue_symbol = ticker["symbol"]
        parsed = parse_usdt_symbol(venue_symbol)
        raw_rate = to_decimal(ticker.get("fundingRate"))
        if parsed is None or raw_rate is None:
            return None

        return NormalizedFundingRate(
            exchange=self.exchange,
            symbol=parsed.symbol,
            raw_rate=raw_rate,
            period_hours=self.resolve_period_hours(ticker),
            venue_symbol=venue_symbol,
            mark_price=per_unit_price(to_decimal(ticker.get("markPrice")), parsed.multiplier),
            next_funding_time=to_int(ticker.get("nextFundingTime")) or None,
            observed_at=observed_at,
        )

    @staticmethod
    def resolve_period_hours(ticker: dict) -> int:
        """Inline fundingIntervalHour, 8 only when the field is absent."""
        hours = to_int(ticker.get("fundingIntervalHour"))
        return hours if hours is not None else _DEFAULT_INTERVAL_HOURS

    @classmethod
    def venue_symbol(cls, symbol: str) -> str:
        return to_usdt_symbol(symbol)

    @classmethod
    def trade_page_url(cls, venue_symbol: str) -> str:
        return f"https://www.bybit.com/trade/usdt/{venue_symbol}"
