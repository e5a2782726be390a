"""Tests for spread history statistics."""

from decimal import Decimal

import pytest

from funding_matrix.analytics.statistics import (
    compute_spread_statistics,
    median,
    population_std_dev,
    spread_percent,
)
from funding_matrix.models import ExchangeId, ExchangePair, HistoricalSample

PAIR = ExchangePair(ExchangeId.BINANCE, ExchangeId.LIGHTER)


def _sample(rate_a: str, rate_b: str = "0", observed_at: int = 0) -> HistoricalSample:
    return HistoricalSample("BTC", PAIR, Decimal(rate_a), Decimal(rate_b), observed_at)


def _samples(*spreads_pct: str) -> list[HistoricalSample]:
    """Samples whose spread_percent equals each given value."""
    return [_sample(str(Decimal(s) / 100), observed_at=i) for i, s in enumerate(spreads_pct)]


class TestHelpers:
    def test_spread_percent_is_signed(self) -> None:
        assert spread_percent(_sample("0.0001", "0.0003")) == Decimal("-0.02")

    @pytest.mark.parametrize(
        "values,expected",
        [(["3", "1", "2"], "2"), (["4", "1", "3", "2"], "2.5"), (["7"], "7")],
    )
    def test_median(self, values: list[str], expected: str) -> None:
        assert median([Decimal(v) for v in values]) == Decimal(expected)

    def test_population_std_dev_uses_n(self) -> None:
        values = [Decimal(v) for v in ["2", "4", "4", "4", "5", "5", "7", "9"]]
        assert population_std_dev(values) == Decimal("2")


class TestComputeSpreadStatistics:
    def test_empty_is_no_data(self) -> None:
        assert compute_spread_statistics([]) is None

    def test_single_sample(self) -> None:
        stats = compute_spread_statistics(_samples("0.05"))
        assert stats is not None
        assert stats.avg_spread == stats.median_spread == Decimal("0.0500")
        assert stats.min_spread == stats.max_spread == Decimal("0.0500")
        assert stats.volatility == Decimal("0.0000")
        assert stats.total_samples == 1

    def test_summary_values(self) -> None:
        stats = compute_spread_statistics(_samples("0.02", "-0.04", "0.005", "0.015"))
        assert stats is not None
        assert stats.avg_spread == Decimal("0.0000")
        assert stats.median_spread == Decimal("0.0100")
        assert stats.min_spread == Decimal("-0.0400")
        assert stats.max_spread == Decimal("0.0200")
        assert stats.total_samples == 4

    def test_volatility_is_population_std_dev(self) -> None:
        stats = compute_spread_statistics(_samples("0.01", "0.03"))
        assert stats is not None
        # mean 0.02, deviations +-0.01 -> sqrt(0.0001) = 0.01
        assert stats.volatility == Decimal("0.0100")

    def test_stability_counts_abs_above_threshold(self) -> None:
        # |spread| > 0.01: 0.02 and -0.04 count, 0.01 (not strictly above) and 0.005 do not
        stats = compute_spread_statistics(_samples("0.02", "-0.04", "0.01", "0.005"))
        assert stats is not None
        assert stats.profitable_samples == 2
        assert stats.stability_score == Decimal("50.00")

    def test_stability_rounds_to_two_places(self) -> None:
        stats = compute_spread_statistics(_samples("0.5", "0", "0"))
        assert stats is not None
        assert stats.stability_score == Decimal("33.33")

    def test_custom_threshold(self) -> None:
        stats = compute_spread_statistics(
            _samples("0.02", "0.04"), profitability_threshold_pct=Decimal("0.03")
        )
        assert stats is not None
        assert stats.profitable_samples == 1

    def test_avg_rounds_half_up_to_four_places(self) -> None:
        stats = compute_spread_statistics(_samples("0.00005", "0.00005"))
        assert stats is not None
        assert stats.avg_spread == Decimal("0.0001")
