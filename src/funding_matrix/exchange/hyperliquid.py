"""Hyperliquid perpetuals adapter.

The quoted `funding` is treated as an 8h-equivalent rate that is paid out
in hourly increments: it is normalized with period_hours=8, while the next
settlement is the top of the next UTC hour.

k-prefixed coins (kPEPE) are quoted per 1000 units; markPx is scaled to a
single unit so prices line up with other venues under the bare ticker.
"""

from funding_matrix.exceptions import MalformedPayloadError
from funding_matrix.exchange.client import ExchangeAdapter, to_decimal
from funding_matrix.exchange.schedule import next_settlement_ms
from funding_matrix.exchange.symbols import parse_hyperliquid_symbol, per_unit_price
from funding_matrix.models import ExchangeId, NormalizedFundingRate

_NORMALIZATION_PERIOD_HOURS = 8
_SETTLEMENT_CADENCE_HOURS = 1


class HyperliquidAdapter(ExchangeAdapter):
    """Single request: POST /info {"type": "metaAndAssetCtxs"}.

    The response is [meta, assetCtxs] where meta.universe[i] names the coin
    whose context is assetCtxs[i].
    """

    exchange = ExchangeId.HYPERLIQUID

    async def fetch_rates(self) -> list[NormalizedFundingRate]:
        payload = self._expect_list(
            await self._http.post_json(
                self.exchange.value, self._url("/info"), {"type": "metaAndAssetCtxs"}
            ),
            "metaAndAssetCtxs",
        )
        if len(payload) < 2:
            raise MalformedPayloadError(self.exchange.value, "metaAndAssetCtxs missing assetCtxs")
        meta = self._expect_dict(payload[0], "meta")
        universe = self._expect_list(meta.get("universe"), "meta.universe")
        contexts = self._expect_list(payload[1], "assetCtxs")

        now = self._clock()
        observed_at = int(now * 1000)
        next_funding = next_settlement_ms(now, _SETTLEMENT_CADENCE_HOURS)
        return self._collect(
            zip(universe, contexts),
            lambda pair: self._parse(pair[0], pair[1], observed_at, next_funding),
        )

    def _parse(
        self, asset: dict, ctx: dict, observed_at: int, next_funding: int
    ) -> NormalizedFundingRate | None:
        if asset.get("isDelisted"):
            return None
        coin = asset["name"]
        parsed = parse_hyperliquid_symbol(coin)
        raw_rate = to_decimal(ctx.get("funding"))
        if parsed is None or raw_rate is None:
            return None

        return NormalizedFundingRate(
            exchange=self.exchange,
            symbol=parsed.symbol,
            raw_rate=raw_rate,
            period_hours=_NORMALIZATION_PERIOD_HOURS,
            venue_symbol=coin,
            mark_price=per_unit_price(to_decimal(ctx.get("markPx")), parsed.multiplier),
            next_funding_time=next_funding,
            observed_at=observed_at,
        )

    @classmethod
    def venue_symbol(cls, symbol: str) -> str:
        return symbol.upper()

    @classmethod
    def trade_page_url(cls, venue_symbol: str) -> str:
        return f"https://app.hyperliquid.xyz/trade/{venue_symbol}"
