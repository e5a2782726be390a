"""Cross-exchange spread matrix builder.

For each symbol quoted by at least two venues, every unordered venue pair is
evaluated in both role assignments and the assignment with the largest
hourly spread wins:

  long X / short Y  ->  spread_hourly = Y.hourly_rate - X.hourly_rate

Paying the lower rate and receiving the higher one is what makes the
position collect funding, so the long leg is always the cheaper venue and
spread_hourly is never negative. k (venues per symbol) is at most the
number of supported exchanges, so the O(k^2) search is exhaustive and exact.

Pure and synchronous: no I/O, no shared state.
"""

from collections import defaultdict
from collections.abc import Iterable, Mapping

from funding_matrix.models import (
    ExchangeId,
    ExchangeRate,
    MultiExchangeSpread,
    NormalizedFundingRate,
    SpreadCandidate,
    now_ms,
)

_MIN_EXCHANGES = 2


def group_by_symbol(
    rates: Iterable[NormalizedFundingRate],
) -> dict[str, dict[ExchangeId, NormalizedFundingRate]]:
    """symbol -> exchange -> rate.

    If a venue reports the same canonical symbol twice (e.g. PEPEUSDT and
    1000PEPEUSDT), the first row seen is kept.
    """
    grouped: dict[str, dict[ExchangeId, NormalizedFundingRate]] = defaultdict(dict)
    for rate in rates:
        grouped[rate.symbol].setdefault(rate.exchange, rate)
    return dict(grouped)


def find_best_spread(
    exchange_rates: Mapping[ExchangeId, NormalizedFundingRate | ExchangeRate],
) -> SpreadCandidate | None:
    """Best long/short assignment across all venue pairs, or None for fewer than 2 venues.

    Venues are visited in ExchangeId declaration order; on an exact tie the
    first pair encountered is kept.
    """
    venues = sorted(exchange_rates, key=lambda exchange: exchange.rank)
    best: SpreadCandidate | None = None

    for i, first in enumerate(venues):
        for second in venues[i + 1 :]:
            diff = exchange_rates[second].hourly_rate - exchange_rates[first].hourly_rate
            if diff >= 0:
                candidate = SpreadCandidate(first, second, diff)
            else:
                candidate = SpreadCandidate(second, first, -diff)
            if best is None or candidate.spread_hourly > best.spread_hourly:
                best = candidate

    return best


def build_spread_matrix(
    rates: Iterable[NormalizedFundingRate],
    updated_at: int | None = None,
) -> list[MultiExchangeSpread]:
    """Build one MultiExchangeSpread per symbol quoted by >= 2 venues.

    Args:
        rates: Union of every adapter's rates for one polling cycle.
        updated_at: Cycle timestamp (Unix ms); defaults to now.

    Returns:
        Rows sorted by best_spread.spread_hourly descending (symbol ascending
        on ties, for a stable order).
    """
    stamp = updated_at if updated_at is not None else now_ms()
    spreads: list[MultiExchangeSpread] = []

    for symbol, by_exchange in group_by_symbol(rates).items():
        if len(by_exchange) < _MIN_EXCHANGES:
            continue
        best = find_best_spread(by_exchange)
        if best is None:
            continue
        spreads.append(
            MultiExchangeSpread(
                symbol=symbol,
                exchanges={
                    exchange: ExchangeRate.from_rate(by_exchange[exchange])
                    for exchange in sorted(by_exchange, key=lambda e: e.rank)
                },
                best_spread=best,
                updated_at=stamp,
            )
        )

    spreads.sort(key=lambda s: s.symbol)
    spreads.sort(key=lambda s: s.best_spread.spread_hourly, reverse=True)
    return spreads
