"""In-process single-flight guard for aggregation cycles.

A named lock table keyed by job identifier. try_acquire() never blocks: a
second trigger while a cycle is in flight is rejected, not queued. Entries
older than the timeout are treated as abandoned (a crashed holder) and may
be taken over.

Advisory and per-process only. Two separate process instances each have
their own table and can run cycles concurrently.
"""

import threading
import time
from collections.abc import Callable
from dataclasses import dataclass

from funding_matrix.logging import get_logger

logger = get_logger(__name__)

DEFAULT_LOCK_TIMEOUT_SECONDS = 5 * 60


def is_lock_expired(now: float, acquired_at: float, timeout_seconds: float) -> bool:
    """True when a lock taken at acquired_at is past its timeout at now."""
    return now - acquired_at >= timeout_seconds


@dataclass(frozen=True)
class ExecutionLock:
    key: str
    acquired: bool
    acquired_at: float


@dataclass(frozen=True)
class LockStatus:
    key: str
    locked: bool  # held and not yet expired
    age_seconds: float


class ExecutionGuard:
    """Mutex-guarded lock table with time-based expiry.

    Args:
        timeout_seconds: Age after which a held lock self-heals.
        clock: Seconds-since-epoch source, injectable for tests.
    """

    def __init__(
        self,
        timeout_seconds: float = DEFAULT_LOCK_TIMEOUT_SECONDS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._timeout = timeout_seconds
        self._clock = clock
        self._locks: dict[str, ExecutionLock] = {}
        self._mutex = threading.Lock()

    @property
    def timeout_seconds(self) -> float:
        return self._timeout

    def try_acquire(self, key: str) -> bool:
        """Take the lock for key unless a live holder exists. Never blocks."""
        with self._mutex:
            now = self._clock()
            existing = self._locks.get(key)
            if (
                existing is not None
                and existing.acquired
                and not is_lock_expired(now, existing.acquired_at, self._timeout)
            ):
                logger.info(
                    "execution_lock_held",
                    key=key,
                    age_seconds=round(now - existing.acquired_at, 1),
                )
                return False

            if existing is not None:
                logger.warning(
                    "execution_lock_expired_takeover",
                    key=key,
                    age_seconds=round(now - existing.acquired_at, 1),
                )
            self._locks[key] = ExecutionLock(key=key, acquired=True, acquired_at=now)
            logger.debug("execution_lock_acquired", key=key)
            return True

    def release(self, key: str) -> None:
        """Unconditionally clear the entry for key."""
        with self._mutex:
            self._locks.pop(key, None)
        logger.debug("execution_lock_released", key=key)

    def status(self, key: str) -> LockStatus | None:
        """Current state of key, or None if no entry exists."""
        with self._mutex:
            existing = self._locks.get(key)
            if existing is None:
                return None
            now = self._clock()
            return LockStatus(
                key=key,
                locked=existing.acquired
                and not is_lock_expired(now, existing.acquired_at, self._timeout),
                age_seconds=now - existing.acquired_at,
            )
