"""Tests for venue symbol normalization and trade URLs."""

from decimal import Decimal

import pytest

from funding_matrix.exchange import ADAPTER_CLASSES, trade_url
from funding_matrix.exchange.symbols import (
    ParsedSymbol,
    normalize_hyperliquid_symbol,
    normalize_usdt_symbol,
    parse_hyperliquid_symbol,
    parse_usdt_symbol,
    per_unit_price,
    strip_multiplier_prefix,
    to_usdt_symbol,
)
from funding_matrix.models import ExchangeId


class TestNormalizeUsdtSymbol:
    @pytest.mark.parametrize(
        "venue_symbol,expected",
        [
            ("BTCUSDT", "BTC"),
            ("ethusdt", "ETH"),
            ("1000PEPEUSDT", "PEPE"),
            ("10000LADYSUSDT", "LADYS"),
            ("1INCHUSDT", "1INCH"),
            ("BTCUSDC", None),
            ("BTCUSD", None),
            ("USDT", None),
        ],
    )
    def test_normalize(self, venue_symbol: str, expected: str | None) -> None:
        assert normalize_usdt_symbol(venue_symbol) == expected

    def test_strip_multiplier_leaves_plain_digits(self) -> None:
        assert strip_multiplier_prefix("1000SATS") == "SATS"
        assert strip_multiplier_prefix("100X") == "100X"


class TestNormalizeHyperliquidSymbol:
    @pytest.mark.parametrize(
        "coin,expected",
        [("BTC", "BTC"), ("kPEPE", "PEPE"), ("BTC-PERP", "BTC"), ("eth", "ETH")],
    )
    def test_normalize(self, coin: str, expected: str) -> None:
        assert normalize_hyperliquid_symbol(coin) == expected


class TestVenueSpelling:
    def test_to_usdt_symbol_is_idempotent(self) -> None:
        assert to_usdt_symbol("btc") == "BTCUSDT"
        assert to_usdt_symbol("BTCUSDT") == "BTCUSDT"

    @pytest.mark.parametrize(
        "exchange", [ExchangeId.BINANCE, ExchangeId.BYBIT, ExchangeId.ASTER]
    )
    def test_usdt_venue_round_trip(self, exchange: ExchangeId) -> None:
        adapter_cls = ADAPTER_CLASSES[exchange]
        assert normalize_usdt_symbol(adapter_cls.venue_symbol("SOL")) == "SOL"

    @pytest.mark.parametrize("exchange", [ExchangeId.HYPERLIQUID, ExchangeId.LIGHTER])
    def test_bare_ticker_venue_round_trip(self, exchange: ExchangeId) -> None:
        assert normalize_hyperliquid_symbol(ADAPTER_CLASSES[exchange].venue_symbol("sol")) == "SOL"

    @pytest.mark.parametrize(
        "exchange,expected",
        [
            (ExchangeId.BINANCE, "https://www.binance.com/en/futures/BTCUSDT"),
            (ExchangeId.BYBIT, "https://www.bybit.com/trade/usdt/BTCUSDT"),
            (ExchangeId.HYPERLIQUID, "https://app.hyperliquid.xyz/trade/BTC"),
            (ExchangeId.LIGHTER, "https://app.lighter.xyz/trade/BTC"),
            (ExchangeId.ASTER, "https://app.asterdex.com/trade/BTCUSDT"),
        ],
    )
    def test_trade_url(self, exchange: ExchangeId, expected: str) -> None:
        assert trade_url(exchange, "BTC") == expected

    @pytest.mark.parametrize(
        "exchange,venue_symbol,expected",
        [
            (ExchangeId.BINANCE, "1000PEPEUSDT", "https://www.binance.com/en/futures/1000PEPEUSDT"),
            (ExchangeId.BYBIT, "1000PEPEUSDT", "https://www.bybit.com/trade/usdt/1000PEPEUSDT"),
            (ExchangeId.HYPERLIQUID, "kPEPE", "https://app.hyperliquid.xyz/trade/kPEPE"),
            (ExchangeId.LIGHTER, "1000PEPE", "https://app.lighter.xyz/trade/1000PEPE"),
            (ExchangeId.ASTER, "1000PEPEUSDT", "https://app.asterdex.com/trade/1000PEPEUSDT"),
        ],
    )
    def test_multiplier_listing_round_trip(
        self, exchange: ExchangeId, venue_symbol: str, expected: str
    ) -> None:
        """The link is built from the captured spelling, not the stripped ticker."""
        if exchange is ExchangeId.HYPERLIQUID:
            symbol = normalize_hyperliquid_symbol(venue_symbol)
        elif exchange is ExchangeId.LIGHTER:
            symbol = strip_multiplier_prefix(venue_symbol)
        else:
            symbol = normalize_usdt_symbol(venue_symbol)
        assert symbol == "PEPE"
        assert trade_url(exchange, symbol, venue_symbol) == expected


class TestMultiplier:
    @pytest.mark.parametrize(
        "venue_symbol,expected",
        [
            ("BTCUSDT", ParsedSymbol("BTC", 1)),
            ("1000PEPEUSDT", ParsedSymbol("PEPE", 1000)),
            ("1000000MOGUSDT", ParsedSymbol("MOG", 1_000_000)),
            ("1INCHUSDT", ParsedSymbol("1INCH", 1)),
        ],
    )
    def test_parse_usdt_symbol(self, venue_symbol: str, expected: ParsedSymbol) -> None:
        assert parse_usdt_symbol(venue_symbol) == expected

    def test_parse_hyperliquid_kilo_prefix(self) -> None:
        assert parse_hyperliquid_symbol("kPEPE") == ParsedSymbol("PEPE", 1000)
        assert parse_hyperliquid_symbol("BTC") == ParsedSymbol("BTC", 1)

    def test_per_unit_price(self) -> None:
        assert per_unit_price(Decimal("0.0123"), 1000) == Decimal("0.0000123")
        assert per_unit_price(Decimal("50000"), 1) == Decimal("50000")
        assert per_unit_price(None, 1000) is None
