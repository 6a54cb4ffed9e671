from __future__ import annotations

import time
from collections.abc import Callable
from datetime import datetime, timedelta, timezone


Clock = Callable[[], int]

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def current_time_ms() -> int:
    """Wall-clock time in milliseconds since the Unix epoch."""
    return time.time_ns() // 1_000_000


def ms_to_iso(timestamp_ms: int) -> str:
    """
    Render epoch milliseconds as an ISO-8601 UTC string.

    The format is ``YYYY-MM-DDTHH:MM:SS.mmmZ``: millisecond precision and a
    ``Z`` suffix rather than ``+00:00``.
    """
    instant = _EPOCH + timedelta(milliseconds=timestamp_ms)
    return instant.isoformat(timespec="milliseconds").replace("+00:00", "Z")
