"""Explicit TTL cache for inferred funding intervals.

Entries are (value, stored_at) keyed by venue symbol. The clock is injected
so tests can drive expiry without sleeping. Concurrent lookups for the same
missing key may both run the inference and both put(); the last write wins
and the cache converges, which is acceptable because inference is idempotent.
"""

import time
from collections.abc import Callable
from dataclasses import dataclass


@dataclass(frozen=True)
class CacheEntry:
    value: int
    stored_at: float


class IntervalCache:
    """symbol -> funding interval hours, each entry valid for ttl_seconds."""

    def __init__(
        self,
        ttl_seconds: float = 86400.0,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._ttl = ttl_seconds
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}

    @property
    def ttl_seconds(self) -> float:
        return self._ttl

    def get(self, symbol: str) -> int | None:
        """Return the cached interval, or None if missing or expired.

        Expired entries are evicted on read.
        """
        entry = self._entries.get(symbol)
        if entry is None:
            return None
        if self.is_stale(entry):
            del self._entries[symbol]
            return None
        return entry.value

    def put(self, symbol: str, interval_hours: int) -> None:
        self._entries[symbol] = CacheEntry(interval_hours, self._clock())

    def evict(self, symbol: str) -> bool:
        """Drop one entry. Returns True if it existed."""
        return self._entries.pop(symbol, None) is not None

    def purge_expired(self) -> int:
        """Drop every stale entry and return how many were removed."""
        stale = [symbol for symbol, entry in self._entries.items() if self.is_stale(entry)]
        for symbol in stale:
            del self._entries[symbol]
        return len(stale)

    def entry(self, symbol: str) -> CacheEntry | None:
        """Raw entry, stale or not (for inspection)."""
        return self._entries.get(symbol)

    def is_stale(self, entry: CacheEntry) -> bool:
        return self._clock() - entry.stored_at >= self._ttl

    def __contains__(self, symbol: object) -> bool:
        return isinstance(symbol, str) and self.get(symbol) is not None

    def __len__(self) -> int:
        return len(self._entries)
