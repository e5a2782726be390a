"""Analytics over persisted snapshots -- spread statistics and price spreads."""

from funding_matrix.analytics.history import (
    PriceSpreadHistory,
    SpreadHistory,
    SpreadHistoryService,
)
from funding_matrix.analytics.price_spread import (
    PriceSpreadPoint,
    PriceSpreadStatistics,
    compute_price_spread_statistics,
    match_price_points,
)
from funding_matrix.analytics.statistics import (
    SpreadStatistics,
    compute_spread_statistics,
    spread_percent,
)

__all__ = [
    "PriceSpreadHistory",
    "PriceSpreadPoint",
    "PriceSpreadStatistics",
    "SpreadHistory",
    "SpreadHistoryService",
    "SpreadStatistics",
    "compute_price_spread_statistics",
    "compute_spread_statistics",
    "match_price_points",
    "spread_percent",
]
