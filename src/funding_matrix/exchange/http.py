"""Shared aiohttp JSON transport for public venue endpoints.

One ClientSession is shared by every adapter. Every request carries the
session-level total timeout, so no adapter call can block indefinitely.
Failures are translated into ExchangeFetchError scoped to the calling venue.
"""

import asyncio
from typing import Any, Self

import aiohttp

from funding_matrix.exceptions import ExchangeFetchError
from funding_matrix.logging import get_logger

logger = get_logger(__name__)


class JsonHttpClient:
    """Thin async JSON client over aiohttp.ClientSession.

    Usage:
        async with JsonHttpClient(timeout_seconds=10) as http:
            payload = await http.get_json("binance", url)
    """

    def __init__(
        self,
        timeout_seconds: float = 10.0,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        self._timeout = aiohttp.ClientTimeout(total=timeout_seconds)
        self._session = session
        self._owns_session = session is None

    async def connect(self) -> None:
        """Create the underlying session if one was not injected."""
        if self._session is None:
            self._session = aiohttp.ClientSession(
                timeout=self._timeout,
                headers={"Accept": "application/json"},
            )
            logger.debug("http_session_opened", timeout=self._timeout.total)

    async def close(self) -> None:
        """Close the session if this client created it."""
        if self._session is not None and self._owns_session:
            await self._session.close()
            logger.debug("http_session_closed")
        self._session = None

    async def get_json(
        self, exchange: str, url: str, params: dict[str, Any] | None = None
    ) -> Any:
        """GET url and decode the JSON body."""
        return await self._request(exchange, "GET", url, params=params)

    async def post_json(self, exchange: str, url: str, payload: dict[str, Any]) -> Any:
        """POST a JSON payload and decode the JSON body."""
        return await self._request(exchange, "POST", url, json=payload)

    async def _request(self, exchange: str, method: str, url: str, **kwargs: Any) -> Any:
        if self._session is None:
            await self.connect()
        assert self._session is not None

        try:
            async with self._session.request(
                method, url, timeout=self._timeout, **kwargs
            ) as resp:
                if not 200 <= resp.status < 300:
                    raise ExchangeFetchError(exchange, f"HTTP {resp.status} from {url}")
                return await resp.json(content_type=None)
        except ExchangeFetchError:
            raise
        except asyncio.TimeoutError as e:
            raise ExchangeFetchError(exchange, f"timeout after {self._timeout.total}s: {url}") from e
        except aiohttp.ClientError as e:
            raise ExchangeFetchError(exchange, f"{type(e).__name__}: {e}") from e
        except ValueError as e:
            # json.JSONDecodeError
            raise ExchangeFetchError(exchange, f"invalid JSON from {url}: {e}") from e

    async def __aenter__(self) -> Self:
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # type: ignore[no-untyped-def]
        await self.close()
