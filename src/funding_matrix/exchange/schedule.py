"""Settlement schedule helpers for venues that do not report next funding time."""

_MS_PER_HOUR = 60 * 60 * 1000


def next_settlement_ms(now_seconds: float, period_hours: int) -> int:
    """Next UTC boundary of a period_hours grid, in Unix milliseconds.

    Boundaries are aligned to the epoch, so an 8h grid lands on 00:00,
    08:00 and 16:00 UTC and a 1h grid on the top of every hour. A time
    exactly on a boundary maps to the following boundary.
    """
    period_ms = period_hours * _MS_PER_HOUR
    now_ms = int(now_seconds * 1000)
    return (now_ms // period_ms + 1) * period_ms
