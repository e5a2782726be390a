"""Lighter DEX adapter.

Fixed 8h funding cycle settling at 00:00/08:00/16:00 UTC. The funding feed
carries no mark price. The feed may also echo other venues' rates tagged
with their own `exchange` field; only Lighter's own rows are kept.
"""

from funding_matrix.exchange.client import ExchangeAdapter, to_decimal
from funding_matrix.exchange.schedule import next_settlement_ms
from funding_matrix.exchange.symbols import strip_multiplier_prefix
from funding_matrix.models import ExchangeId, NormalizedFundingRate

_PERIOD_HOURS = 8


class LighterAdapter(ExchangeAdapter):
    """Single request: GET /api/v1/funding-rates."""

    exchange = ExchangeId.LIGHTER

    async def fetch_rates(self) -> list[NormalizedFundingRate]:
        payload = self._expect_dict(
            await self._http.get_json(self.exchange.value, self._url("/api/v1/funding-rates")),
            "funding-rates",
        )
        rows = self._expect_list(payload.get("funding_rates"), "funding_rates")

        now = self._clock()
        observed_at = int(now * 1000)
        next_funding = next_settlement_ms(now, _PERIOD_HOURS)
        return self._collect(rows, lambda row: self._parse(row, observed_at, next_funding))

    def _parse(self, row: dict, observed_at: int, next_funding: int) -> NormalizedFundingRate | None:
        source = row.get("exchange")
        if source and source != self.exchange.value:
            return None
        venue_symbol = row["symbol"]
        symbol = strip_multiplier_prefix(venue_symbol.strip().upper())
        raw_rate = to_decimal(row.get("rate"))
        if not symbol or raw_rate is None:
            return None

        return NormalizedFundingRate(
            exchange=self.exchange,
            symbol=symbol,
            raw_rate=raw_rate,
            period_hours=_PERIOD_HOURS,
            venue_symbol=venue_symbol,
            next_funding_time=next_funding,
            observed_at=observed_at,
        )

    @classmethod
    def venue_symbol(cls, symbol: str) -> str:
        return symbol.upper()

    @classmethod
    def trade_page_url(cls, venue_symbol: str) -> str:
        return f"https://app.lighter.xyz/trade/{venue_symbol}"
