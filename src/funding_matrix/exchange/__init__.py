"""Exchange adapter layer -- one adapter per venue behind ExchangeAdapter."""

from funding_matrix.config import ExchangeSettings
from funding_matrix.exchange.aster import AsterAdapter
from funding_matrix.exchange.binance import BinanceAdapter
from funding_matrix.exchange.bybit import BybitAdapter
from funding_matrix.exchange.client import ExchangeAdapter
from funding_matrix.exchange.http import JsonHttpClient
from funding_matrix.exchange.hyperliquid import HyperliquidAdapter
from funding_matrix.exchange.interval_cache import IntervalCache
from funding_matrix.exchange.lighter import LighterAdapter
from funding_matrix.models import ExchangeId

ADAPTER_CLASSES: dict[ExchangeId, type[ExchangeAdapter]] = {
    ExchangeId.BINANCE: BinanceAdapter,
    ExchangeId.BYBIT: BybitAdapter,
    ExchangeId.HYPERLIQUID: HyperliquidAdapter,
    ExchangeId.LIGHTER: LighterAdapter,
    ExchangeId.ASTER: AsterAdapter,
}


def build_adapters(settings: ExchangeSettings, http: JsonHttpClient) -> list[ExchangeAdapter]:
    """Instantiate the enabled adapters in ExchangeId declaration order.

    Raises:
        ValueError: an enabled venue name is not a supported ExchangeId.
    """
    enabled = {ExchangeId(name.lower()) for name in settings.enabled}
    base_urls = {
        ExchangeId.BINANCE: settings.binance_base_url,
        ExchangeId.BYBIT: settings.bybit_base_url,
        ExchangeId.HYPERLIQUID: settings.hyperliquid_base_url,
        ExchangeId.LIGHTER: settings.lighter_base_url,
        ExchangeId.ASTER: settings.aster_base_url,
    }

    adapters: list[ExchangeAdapter] = []
    for exchange in ExchangeId:
        if exchange not in enabled:
            continue
        if exchange is ExchangeId.ASTER:
            adapters.append(
                AsterAdapter(
                    http,
                    base_urls[exchange],
                    interval_cache=IntervalCache(ttl_seconds=settings.aster_interval_ttl_seconds),
                    inference_concurrency=settings.aster_inference_concurrency,
                )
            )
        else:
            adapters.append(ADAPTER_CLASSES[exchange](http, base_urls[exchange]))
    return adapters


def trade_url(exchange: ExchangeId, symbol: str, venue_symbol: str = "") -> str:
    """Venue trading page for a canonical ticker, or for its captured venue spelling."""
    return ADAPTER_CLASSES[exchange].trade_url(symbol, venue_symbol)


__all__ = [
    "ADAPTER_CLASSES",
    "AsterAdapter",
    "BinanceAdapter",
    "BybitAdapter",
    "ExchangeAdapter",
    "HyperliquidAdapter",
    "IntervalCache",
    "JsonHttpClient",
    "LighterAdapter",
    "build_adapters",
    "trade_url",
]
