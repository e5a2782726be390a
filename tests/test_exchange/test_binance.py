"""Tests for BinanceAdapter.

All tests use a mocked JsonHttpClient to avoid real API calls.
"""

from decimal import Decimal

import pytest

from funding_matrix.exceptions import ExchangeFetchError, MalformedPayloadError
from funding_matrix.exchange.binance import BinanceAdapter
from funding_matrix.models import ExchangeId

from conftest import BASE_TIME, FakeClock, mock_http

# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

PREMIUM_INDEX = [
    {
        "symbol": "BTCUSDT",
        "markPrice": "50000.10",
        "lastFundingRate": "0.00010000",
        "nextFundingTime": 1700006400000,
    },
    {
        "symbol": "ETHUSDT",
        "markPrice": "3000.5",
        "lastFundingRate": "-0.00020000",
        "nextFundingTime": 1700002800000,
    },
    {"symbol": "1000PEPEUSDT", "markPrice": "0.0012", "lastFundingRate": "0.0004"},
    # Listed in premiumIndex only: stale or delisted
    {"symbol": "OLDUSDT", "markPrice": "1", "lastFundingRate": "0.0001"},
    {"symbol": "BTCUSDC", "markPrice": "50000", "lastFundingRate": "0.0001"},
    {"symbol": "XRPUSDT", "markPrice": "0.5", "lastFundingRate": ""},
]

FUNDING_INFO = [
    {"symbol": "BTCUSDT", "fundingIntervalHours": 8},
    {"symbol": "ETHUSDT", "fundingIntervalHours": 4},
    {"symbol": "1000PEPEUSDT", "fundingIntervalHours": 8},
    {"symbol": "BTCUSDC", "fundingIntervalHours": 8},
    {"symbol": "XRPUSDT", "fundingIntervalHours": 8},
    {"symbol": "BADUSDT", "fundingIntervalHours": 0},
]


@pytest.fixture
def adapter(clock: FakeClock) -> BinanceAdapter:
    http = mock_http(
        {"/fapi/v1/premiumIndex": PREMIUM_INDEX, "/fapi/v1/fundingInfo": FUNDING_INFO}
    )
    return BinanceAdapter(http, "https://fapi.binance.com", clock=clock)


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------


class TestBinanceAdapter:
    @pytest.mark.asyncio
    async def test_only_symbols_in_both_endpoints(self, adapter: BinanceAdapter) -> None:
        rates = await adapter.fetch()
        assert {r.symbol for r in rates} == {"BTC", "ETH", "PEPE"}

    @pytest.mark.asyncio
    async def test_uses_per_symbol_interval(self, adapter: BinanceAdapter) -> None:
        rates = {r.symbol: r for r in await adapter.fetch()}
        eth = rates["ETH"]
        assert eth.period_hours == 4
        assert eth.raw_rate == Decimal("-0.0002")
        assert eth.hourly_rate == Decimal("-0.00005")

        btc = rates["BTC"]
        assert btc.exchange is ExchangeId.BINANCE
        assert btc.period_hours == 8
        assert btc.mark_price == Decimal("50000.10")
        assert btc.next_funding_time == 1700006400000
        assert btc.venue_symbol == "BTCUSDT"
        assert btc.observed_at == int(BASE_TIME * 1000)

    @pytest.mark.asyncio
    async def test_missing_next_funding_time_is_none(self, adapter: BinanceAdapter) -> None:
        rates = {r.symbol: r for r in await adapter.fetch()}
        assert rates["PEPE"].next_funding_time is None
        assert rates["PEPE"].venue_symbol == "1000PEPEUSDT"
        assert rates["PEPE"].mark_price == Decimal("0.0000012")

    def test_resolve_intervals_skips_unusable(self) -> None:
        intervals = BinanceAdapter.resolve_intervals(FUNDING_INFO + ["junk", {"symbol": "X"}])
        assert "BADUSDT" not in intervals
        assert "X" not in intervals
        assert intervals["ETHUSDT"] == 4

    @pytest.mark.asyncio
    async def test_http_failure_propagates(self, clock: FakeClock) -> None:
        http = mock_http(
            {
                "/fapi/v1/premiumIndex": PREMIUM_INDEX,
                "/fapi/v1/fundingInfo": ExchangeFetchError("binance", "HTTP 503"),
            }
        )
        adapter = BinanceAdapter(http, "https://fapi.binance.com", clock=clock)
        with pytest.raises(ExchangeFetchError, match="binance"):
            await adapter.fetch()

    @pytest.mark.asyncio
    async def test_wrong_shape_is_malformed(self, clock: FakeClock) -> None:
        http = mock_http(
            {"/fapi/v1/premiumIndex": {"code": -1}, "/fapi/v1/fundingInfo": FUNDING_INFO}
        )
        adapter = BinanceAdapter(http, "https://fapi.binance.com", clock=clock)
        with pytest.raises(MalformedPayloadError):
            await adapter.fetch()
