"""UTC datetime utilities."""

import threading
from collections.abc import Callable
from datetime import datetime, timezone

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Return timezone-aware UTC now."""
    return datetime.now(timezone.utc)


class MonotonicClock:
    """Wraps a wall clock so successive readings never go backwards.

    Order timestamps drive time priority, so a wall-clock step back (NTP
    adjustment) must not let a later order sort ahead of an earlier one.
    """

    def __init__(self, source: Clock = utc_now) -> None:
        self._source = source
        self._last: datetime | None = None
        self._lock = threading.Lock()

    def __call__(self) -> datetime:
        with self._lock:
            now = self._source()
            if self._last is not None and now < self._last:
                now = self._last
            self._last = now
            return now
