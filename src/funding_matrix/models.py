"""Shared data models for cross-exchange funding rate aggregation.

CRITICAL: All rates and prices use Decimal. Never use float for funding math.
Every cross-exchange comparison works on hourly_rate, never on raw_rate.
"""

import time
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum

from funding_matrix.exceptions import InvalidFundingPeriodError

HOURS_PER_DAY = Decimal("24")
DAYS_PER_YEAR = Decimal("365")


class ExchangeId(str, Enum):
    """Supported venues.

    Declaration order is the deterministic iteration order used when
    searching for the best spread and when ordering an ExchangePair.
    """

    BINANCE = "binance"
    BYBIT = "bybit"
    HYPERLIQUID = "hyperliquid"
    LIGHTER = "lighter"
    ASTER = "aster"

    @property
    def rank(self) -> int:
        return _EXCHANGE_ORDER[self]


_EXCHANGE_ORDER = {exchange: index for index, exchange in enumerate(ExchangeId)}


class VenueType(str, Enum):
    CEX = "cex"
    DEX = "dex"


@dataclass(frozen=True)
class ExchangeInfo:
    """Static display metadata for a venue."""

    name: str
    venue_type: VenueType


EXCHANGE_INFO: dict[ExchangeId, ExchangeInfo] = {
    ExchangeId.BINANCE: ExchangeInfo("Binance", VenueType.CEX),
    ExchangeId.BYBIT: ExchangeInfo("Bybit", VenueType.CEX),
    ExchangeId.HYPERLIQUID: ExchangeInfo("Hyperliquid", VenueType.DEX),
    ExchangeId.LIGHTER: ExchangeInfo("Lighter", VenueType.DEX),
    ExchangeId.ASTER: ExchangeInfo("Aster", VenueType.DEX),
}


def now_ms() -> int:
    """Current wall-clock time in Unix milliseconds."""
    return int(time.time() * 1000)


@dataclass(frozen=True)
class NormalizedFundingRate:
    """One exchange's funding state for one symbol at one observation instant."""

    exchange: ExchangeId
    symbol: str  # canonical ticker, e.g. "BTC"
    raw_rate: Decimal  # as reported, for period_hours
    period_hours: int
    venue_symbol: str = ""  # native spelling, e.g. "1000PEPEUSDT"
    mark_price: Decimal | None = None
    next_funding_time: int | None = None  # Unix milliseconds
    observed_at: int = field(default_factory=now_ms)  # Unix milliseconds

    def __post_init__(self) -> None:
        if self.period_hours <= 0:
            raise InvalidFundingPeriodError(
                f"period_hours must be positive, got {self.period_hours} "
                f"for {self.exchange.value}:{self.symbol}"
            )

    @property
    def hourly_rate(self) -> Decimal:
        """Funding rate per hour: raw_rate / period_hours."""
        return self.raw_rate / Decimal(self.period_hours)


@dataclass(frozen=True)
class ExchangeRate:
    """Matrix-display subset of a NormalizedFundingRate. Build via from_rate()."""

    raw_rate: Decimal
    hourly_rate: Decimal
    period_hours: int
    mark_price: Decimal | None
    next_funding_time: int | None
    venue_symbol: str = ""
    available: bool = True

    @classmethod
    def from_rate(cls, rate: NormalizedFundingRate) -> "ExchangeRate":
        return cls(
            raw_rate=rate.raw_rate,
            hourly_rate=rate.hourly_rate,
            period_hours=rate.period_hours,
            mark_price=rate.mark_price,
            next_funding_time=rate.next_funding_time,
            venue_symbol=rate.venue_symbol,
        )


@dataclass(frozen=True)
class SpreadCandidate:
    """Long the cheaper venue, short the richer one.

    spread_hourly = short.hourly_rate - long.hourly_rate and is never
    negative: roles are assigned to make it so.
    """

    long_exchange: ExchangeId
    short_exchange: ExchangeId
    spread_hourly: Decimal

    @property
    def spread_daily(self) -> Decimal:
        return self.spread_hourly * HOURS_PER_DAY

    @property
    def spread_annual(self) -> Decimal:
        return self.spread_daily * DAYS_PER_YEAR


@dataclass
class MultiExchangeSpread:
    """Per-symbol matrix row: every quoting venue plus the best pairing.

    Rebuilt from scratch every polling cycle.
    """

    symbol: str
    exchanges: dict[ExchangeId, ExchangeRate]
    best_spread: SpreadCandidate
    updated_at: int = field(default_factory=now_ms)


@dataclass(frozen=True)
class ExchangePair:
    """Ordered pair of venues (exchange_a, exchange_b)."""

    exchange_a: ExchangeId
    exchange_b: ExchangeId

    def __post_init__(self) -> None:
        if self.exchange_a == self.exchange_b:
            raise ValueError(f"ExchangePair needs two distinct venues, got {self.exchange_a.value}")

    @property
    def is_canonical(self) -> bool:
        return self.exchange_a.rank < self.exchange_b.rank

    def canonical(self) -> "ExchangePair":
        """Return the pair ordered by ExchangeId declaration order."""
        if self.is_canonical:
            return self
        return ExchangePair(self.exchange_b, self.exchange_a)

    def __str__(self) -> str:
        return f"{self.exchange_a.value}/{self.exchange_b.value}"


@dataclass(frozen=True)
class HistoricalSample:
    """Persisted snapshot row for one symbol and one exchange pair. Append-only."""

    symbol: str
    pair: ExchangePair
    hourly_rate_a: Decimal
    hourly_rate_b: Decimal
    observed_at: int  # Unix milliseconds

    def swapped(self) -> "HistoricalSample":
        """Same observation seen from the reversed pair."""
        return HistoricalSample(
            symbol=self.symbol,
            pair=ExchangePair(self.pair.exchange_b, self.pair.exchange_a),
            hourly_rate_a=self.hourly_rate_b,
            hourly_rate_b=self.hourly_rate_a,
            observed_at=self.observed_at,
        )
