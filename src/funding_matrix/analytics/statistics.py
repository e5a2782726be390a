"""Spread history statistics.

Pure Decimal analytics over HistoricalSample sequences for one symbol and
one exchange pair. All intermediate values keep full precision; rounding to
display precision happens once, when the SpreadStatistics is built.

spread_percent = (hourly_rate_a - hourly_rate_b) * 100, sign preserved.
"""

from collections.abc import Sequence
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from funding_matrix.models import HistoricalSample

_HUNDRED = Decimal("100")
_PERCENT_PLACES = Decimal("0.0001")
_SCORE_PLACES = Decimal("0.01")
DEFAULT_PROFITABILITY_THRESHOLD_PCT = Decimal("0.01")


@dataclass(frozen=True)
class SpreadStatistics:
    """Descriptive statistics of spread_percent over a lookback window.

    Spread fields are percent with 4 decimal places; stability_score is the
    percentage of samples whose |spread| exceeded the threshold, 2 places.
    """

    avg_spread: Decimal
    median_spread: Decimal
    min_spread: Decimal
    max_spread: Decimal
    volatility: Decimal  # population standard deviation
    stability_score: Decimal
    profitable_samples: int
    total_samples: int


def spread_percent(sample: HistoricalSample) -> Decimal:
    """Signed hourly spread of a sample, in percent."""
    return (sample.hourly_rate_a - sample.hourly_rate_b) * _HUNDRED


def mean(values: Sequence[Decimal]) -> Decimal:
    return sum(values, Decimal("0")) / Decimal(len(values))


def median(values: Sequence[Decimal]) -> Decimal:
    """Standard median: middle value, or mean of the two middle values."""
    ordered = sorted(values)
    mid = len(ordered) // 2
    if len(ordered) % 2 == 0:
        return (ordered[mid - 1] + ordered[mid]) / Decimal("2")
    return ordered[mid]


def population_std_dev(values: Sequence[Decimal], center: Decimal | None = None) -> Decimal:
    """Standard deviation with an N denominator (not N-1)."""
    mu = mean(values) if center is None else center
    variance = sum(((v - mu) ** 2 for v in values), Decimal("0")) / Decimal(len(values))
    return variance.sqrt()


def _round(value: Decimal, places: Decimal) -> Decimal:
    return value.quantize(places, rounding=ROUND_HALF_UP)


def compute_spread_statistics(
    samples: Sequence[HistoricalSample],
    profitability_threshold_pct: Decimal = DEFAULT_PROFITABILITY_THRESHOLD_PCT,
) -> SpreadStatistics | None:
    """Compute avg/median/min/max/volatility/stability over a sample window.

    Args:
        samples: Time-ordered samples for one symbol and one pair, already
            restricted to the requested window.
        profitability_threshold_pct: |spread_percent| strictly above this
            counts toward the stability score.

    Returns:
        SpreadStatistics, or None when there are no samples (no data is a
        normal outcome, not an error).
    """
    if not samples:
        return None

    spreads = [spread_percent(s) for s in samples]
    n = len(spreads)
    avg = mean(spreads)
    profitable = sum(1 for s in spreads if abs(s) > profitability_threshold_pct)
    stability = Decimal(profitable) * _HUNDRED / Decimal(n)

    return SpreadStatistics(
        avg_spread=_round(avg, _PERCENT_PLACES),
        median_spread=_round(median(spreads), _PERCENT_PLACES),
        min_spread=_round(min(spreads), _PERCENT_PLACES),
        max_spread=_round(max(spreads), _PERCENT_PLACES),
        volatility=_round(population_std_dev(spreads, center=avg), _PERCENT_PLACES),
        stability_score=_round(stability, _SCORE_PLACES),
        profitable_samples=profitable,
        total_samples=n,
    )
