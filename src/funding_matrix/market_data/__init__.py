"""Market data layer -- cross-exchange spread matrix."""

from funding_matrix.market_data.spread_matrix import (
    build_spread_matrix,
    find_best_spread,
    group_by_symbol,
)

__all__ = ["build_spread_matrix", "find_best_spread", "group_by_symbol"]
