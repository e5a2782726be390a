"""Mark-price spread between two venues over persisted rate snapshots.

Observations from the two venues are paired when their capture instants are
within a tolerance (one minute by default; both venues are written by the
same polling cycle, so matching timestamps are normally identical).
"""

from bisect import bisect_left
from collections.abc import Sequence
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from funding_matrix.analytics.statistics import mean, population_std_dev
from funding_matrix.models import NormalizedFundingRate

_HUNDRED = Decimal("100")
_PRICE_PLACES = Decimal("0.00000001")
_PERCENT_PLACES = Decimal("0.0001")


@dataclass(frozen=True)
class PriceSpreadPoint:
    observed_at: int
    price_a: Decimal
    price_b: Decimal
    spread_absolute: Decimal  # price_a - price_b
    spread_percent: Decimal  # spread_absolute / price_b * 100


@dataclass(frozen=True)
class PriceSpreadStatistics:
    avg_spread_absolute: Decimal
    avg_spread_percent: Decimal
    min_spread_absolute: Decimal
    max_spread_absolute: Decimal
    min_spread_percent: Decimal
    max_spread_percent: Decimal
    volatility: Decimal  # population std dev of spread_percent
    total_points: int


def match_price_points(
    rates_a: Sequence[NormalizedFundingRate],
    rates_b: Sequence[NormalizedFundingRate],
    tolerance_ms: int = 60_000,
) -> list[PriceSpreadPoint]:
    """Pair each venue-A observation with the closest venue-B observation in tolerance.

    Observations without a positive mark price on either side are skipped.
    Venue-B observations are searched by bisection over their capture times,
    so a window costs O((n + m) log m). On an exact tie the earlier B
    observation wins.
    """
    priced_b = sorted(
        (r for r in rates_b if r.mark_price is not None and r.mark_price > 0),
        key=lambda r: r.observed_at,
    )
    times_b = [r.observed_at for r in priced_b]
    points: list[PriceSpreadPoint] = []

    for rate_a in rates_a:
        if rate_a.mark_price is None:
            continue
        closest = _closest_within(rate_a.observed_at, priced_b, times_b, tolerance_ms)
        if closest is None or closest.mark_price is None:
            continue

        spread_absolute = rate_a.mark_price - closest.mark_price
        points.append(
            PriceSpreadPoint(
                observed_at=rate_a.observed_at,
                price_a=rate_a.mark_price,
                price_b=closest.mark_price,
                spread_absolute=spread_absolute,
                spread_percent=spread_absolute / closest.mark_price * _HUNDRED,
            )
        )

    return points


def _closest_within(
    observed_at: int,
    candidates: Sequence[NormalizedFundingRate],
    times: Sequence[int],
    tolerance_ms: int,
) -> NormalizedFundingRate | None:
    # Only the neighbours around the insertion point can be closest
    index = bisect_left(times, observed_at)
    closest: NormalizedFundingRate | None = None
    closest_gap = tolerance_ms
    for i in (index - 1, index):
        if 0 <= i < len(times):
            gap = abs(observed_at - times[i])
            if gap <= tolerance_ms and (closest is None or gap < closest_gap):
                closest, closest_gap = candidates[i], gap
    return closest


def compute_price_spread_statistics(
    points: Sequence[PriceSpreadPoint],
) -> PriceSpreadStatistics | None:
    """Summary of matched price points, or None when nothing matched."""
    if not points:
        return None

    absolute = [p.spread_absolute for p in points]
    percent = [p.spread_percent for p in points]
    avg_percent = mean(percent)

    def price(value: Decimal) -> Decimal:
        return value.quantize(_PRICE_PLACES, rounding=ROUND_HALF_UP)

    def pct(value: Decimal) -> Decimal:
        return value.quantize(_PERCENT_PLACES, rounding=ROUND_HALF_UP)

    return PriceSpreadStatistics(
        avg_spread_absolute=price(mean(absolute)),
        avg_spread_percent=pct(avg_percent),
        min_spread_absolute=price(min(absolute)),
        max_spread_absolute=price(max(absolute)),
        min_spread_percent=pct(min(percent)),
        max_spread_percent=pct(max(percent)),
        volatility=pct(population_std_dev(percent, center=avg_percent)),
        total_points=len(points),
    )
