"""Tests for BybitAdapter with a mocked transport."""

from decimal import Decimal

import pytest

from funding_matrix.exceptions import ExchangeFetchError, MalformedPayloadError
from funding_matrix.exchange.bybit import BybitAdapter

from conftest import FakeClock, mock_http

TICKERS = {
    "retCode": 0,
    "retMsg": "OK",
    "result": {
        "category": "linear",
        "list": [
            {
                "symbol": "BTCUSDT",
                "markPrice": "50010",
                "fundingRate": "0.0001",
                "nextFundingTime": "1700006400000",
                "fundingIntervalHour": "8",
            },
            {
                "symbol": "SOLUSDT",
                "markPrice": "60.1",
                "fundingRate": "0.0002",
                "nextFundingTime": "1700002800000",
                "fundingIntervalHour": "2",
            },
            {"symbol": "DOGEUSDT", "markPrice": "0.08", "fundingRate": "0.00005"},
            {"symbol": "BTCPERP", "markPrice": "50000", "fundingRate": "0.0001"},
            {"symbol": "ETHUSDT", "markPrice": "3000", "fundingRate": ""},
            {"markPrice": "1", "fundingRate": "0.1"},
        ],
    },
}


def _adapter(payload: object, clock: FakeClock) -> BybitAdapter:
    http = mock_http({"/v5/market/tickers": payload})
    return BybitAdapter(http, "https://api.bybit.com", clock=clock)


class TestBybitAdapter:
    @pytest.mark.asyncio
    async def test_parses_linear_usdt_tickers(self, clock: FakeClock) -> None:
        rates = {r.symbol: r for r in await _adapter(TICKERS, clock).fetch()}

        assert set(rates) == {"BTC", "SOL", "DOGE"}
        assert rates["BTC"].next_funding_time == 1700006400000
        assert rates["BTC"].mark_price == Decimal("50010")

    @pytest.mark.asyncio
    async def test_inline_interval_and_default(self, clock: FakeClock) -> None:
        rates = {r.symbol: r for r in await _adapter(TICKERS, clock).fetch()}

        assert rates["SOL"].period_hours == 2
        assert rates["SOL"].hourly_rate == Decimal("0.0001")
        assert rates["DOGE"].period_hours == 8

    @pytest.mark.asyncio
    async def test_requests_linear_category(self, clock: FakeClock) -> None:
        adapter = _adapter(TICKERS, clock)
        await adapter.fetch()
        args, kwargs = adapter._http.get_json.call_args
        assert args == ("bybit", "https://api.bybit.com/v5/market/tickers")
        assert kwargs["params"] == {"category": "linear"}

    @pytest.mark.asyncio
    async def test_nonzero_ret_code_fails_venue(self, clock: FakeClock) -> None:
        payload = {"retCode": 10006, "retMsg": "Too many visits!", "result": {}}
        with pytest.raises(ExchangeFetchError, match="retCode=10006"):
            await _adapter(payload, clock).fetch()

    @pytest.mark.asyncio
    async def test_missing_list_is_malformed(self, clock: FakeClock) -> None:
        payload = {"retCode": 0, "result": {"category": "linear"}}
        with pytest.raises(MalformedPayloadError):
            await _adapter(payload, clock).fetch()
