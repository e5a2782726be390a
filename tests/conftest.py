"""Shared test fixtures for the funding rate aggregator."""

from decimal import Decimal
from typing import Any
from unittest.mock import AsyncMock

import pytest

from funding_matrix.config import (
    AggregationSettings,
    AppSettings,
    ExchangeSettings,
    StatisticsSettings,
    StorageSettings,
)
from funding_matrix.exceptions import ExchangeFetchError
from funding_matrix.exchange.http import JsonHttpClient
from funding_matrix.models import ExchangeId, NormalizedFundingRate

BASE_TIME = 1_700_000_000.0  # 2023-11-14T22:13:20Z


class FakeClock:
    """Manually advanced seconds-since-epoch clock."""

    def __init__(self, start: float = BASE_TIME) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_rate(
    exchange: ExchangeId,
    symbol: str,
    raw_rate: str,
    period_hours: int = 8,
    mark_price: str | None = None,
    observed_at: int = int(BASE_TIME * 1000),
    venue_symbol: str = "",
) -> NormalizedFundingRate:
    """Build a NormalizedFundingRate with terse string inputs."""
    return NormalizedFundingRate(
        exchange=exchange,
        symbol=symbol,
        raw_rate=Decimal(raw_rate),
        period_hours=period_hours,
        venue_symbol=venue_symbol,
        mark_price=Decimal(mark_price) if mark_price is not None else None,
        observed_at=observed_at,
    )


def mock_http(routes: dict[str, Any]) -> AsyncMock:
    """AsyncMock JsonHttpClient answering by URL path suffix.

    A route value that is an Exception instance is raised instead of returned.
    """

    def _lookup(exchange: str, url: str, *args: Any, **kwargs: Any) -> Any:
        for suffix, payload in routes.items():
            if url.endswith(suffix):
                if isinstance(payload, Exception):
                    raise payload
                return payload
        raise ExchangeFetchError(exchange, f"HTTP 404 from {url}")

    http = AsyncMock(spec=JsonHttpClient)
    http.get_json.side_effect = _lookup
    http.post_json.side_effect = _lookup
    return http


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def mock_settings() -> AppSettings:
    """AppSettings with test defaults (in-memory DB, fixed trigger secret)."""
    return AppSettings(
        log_level="DEBUG",
        exchanges=ExchangeSettings(),
        aggregation=AggregationSettings(cron_secret="test-secret"),  # type: ignore[arg-type]
        statistics=StatisticsSettings(),
        storage=StorageSettings(db_path=":memory:"),
    )
