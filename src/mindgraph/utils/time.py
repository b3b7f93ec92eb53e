from __future__ import annotations

import time


def now_ms() -> int:
    """
    Returns the current time as integer epoch milliseconds.

    All persisted timestamps (created_at, updated_at, window_start) use this unit.
    """
    return time.time_ns() // 1_000_000
