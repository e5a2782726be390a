"""Abstract exchange adapter interface.

Every venue adapter turns one venue's public funding feed into
NormalizedFundingRate objects. The orchestrator depends only on this
interface; venue response shapes stay inside the concrete adapters.

Failure contract: a network error, non-2xx response or wrong top-level
payload shape raises ExchangeFetchError for the whole venue. A single row
missing required fields is skipped, never raised.
"""

import time
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable
from decimal import Decimal, InvalidOperation
from typing import Any, ClassVar

from funding_matrix.exceptions import FundingMatrixError, MalformedPayloadError
from funding_matrix.exchange.http import JsonHttpClient
from funding_matrix.logging import get_logger
from funding_matrix.models import ExchangeId, NormalizedFundingRate

logger = get_logger(__name__)

# Row-level parse failures that mean "skip this symbol"
_ROW_ERRORS = (KeyError, IndexError, TypeError, ValueError, InvalidOperation, FundingMatrixError)


def to_decimal(value: Any) -> Decimal | None:
    """Parse a venue number (string or JSON number) into Decimal.

    Returns None for missing, empty or non-finite values.
    """
    if value is None or value == "":
        return None
    try:
        parsed = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None
    return parsed if parsed.is_finite() else None


def to_int(value: Any) -> int | None:
    """Parse an integer field (timestamps, interval hours); None when absent or invalid."""
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


class ExchangeAdapter(ABC):
    """Base class for venue adapters.

    Args:
        http: Shared JSON transport.
        base_url: Venue REST root (no trailing slash).
        clock: Seconds-since-epoch source, injectable for tests.
    """

    exchange: ClassVar[ExchangeId]

    def __init__(
        self,
        http: JsonHttpClient,
        base_url: str,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._http = http
        self._base_url = base_url.rstrip("/")
        self._clock = clock

    async def fetch(self) -> list[NormalizedFundingRate]:
        """Fetch and normalize current funding rates for every tradeable USDT perpetual.

        Raises:
            ExchangeFetchError: the venue could not be read this cycle.
        """
        rates = await self.fetch_rates()
        logger.debug("exchange_rates_fetched", exchange=self.exchange.value, count=len(rates))
        return rates

    @abstractmethod
    async def fetch_rates(self) -> list[NormalizedFundingRate]:
        """Venue-specific request(s) and parsing."""
        ...

    @classmethod
    @abstractmethod
    def venue_symbol(cls, symbol: str) -> str:
        """Venue spelling for a canonical ticker."""
        ...

    @classmethod
    @abstractmethod
    def trade_page_url(cls, venue_symbol: str) -> str:
        """Public trading page for a venue spelling."""
        ...

    @classmethod
    def trade_url(cls, symbol: str, venue_symbol: str = "") -> str:
        """Trading page for a rate; the captured venue spelling wins over a rebuilt one.

        Rebuilding from the canonical ticker cannot restore multiplier
        prefixes (1000PEPEUSDT, kPEPE), so callers holding a rate pass its
        venue_symbol.
        """
        return cls.trade_page_url(venue_symbol or cls.venue_symbol(symbol))

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    def _url(self, path: str) -> str:
        return f"{self._base_url}{path}"

    def _expect_list(self, payload: Any, what: str) -> list:
        if not isinstance(payload, list):
            raise MalformedPayloadError(
                self.exchange.value, f"expected a list for {what}, got {type(payload).__name__}"
            )
        return payload

    def _expect_dict(self, payload: Any, what: str) -> dict:
        if not isinstance(payload, dict):
            raise MalformedPayloadError(
                self.exchange.value, f"expected an object for {what}, got {type(payload).__name__}"
            )
        return payload

    def _collect(
        self,
        rows: Iterable[Any],
        parse: Callable[[Any], NormalizedFundingRate | None],
    ) -> list[NormalizedFundingRate]:
        """Apply parse to every row, skipping rows that return None or fail to parse."""
        rates: list[NormalizedFundingRate] = []
        skipped = 0
        for row in rows:
            try:
                rate = parse(row)
            except _ROW_ERRORS as e:
                logger.debug(
                    "exchange_row_skipped",
                    exchange=self.exchange.value,
                    error=f"{type(e).__name__}: {e}",
                )
                rate = None
            if rate is None:
                skipped += 1
                continue
            rates.append(rate)
        if skipped:
            logger.debug("exchange_rows_filtered", exchange=self.exchange.value, skipped=skipped)
        return rates
