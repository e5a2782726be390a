"""Custom exceptions for the funding rate aggregator.

Adapter-layer and model exceptions live here to avoid circular imports
between the exchange package and the rate model.
"""


class FundingMatrixError(Exception):
    """Base exception for all aggregator errors."""


class InvalidFundingPeriodError(FundingMatrixError, ValueError):
    """Raised when a funding rate is built with a non-positive period."""


class ExchangeFetchError(FundingMatrixError):
    """Raised when a venue request fails (network error, timeout, non-2xx).

    Scoped to a single exchange: the orchestrator records it and carries on
    with the remaining adapters.
    """

    def __init__(self, exchange: str, message: str) -> None:
        super().__init__(f"{exchange}: {message}")
        self.exchange = exchange
        self.message = message


class MalformedPayloadError(ExchangeFetchError):
    """Raised when a venue response does not have the expected top-level shape."""
