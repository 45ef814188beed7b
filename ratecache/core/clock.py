"""Time sources for window arithmetic.

Rate limit windows are measured against a monotonic clock so wall-clock
adjustments (NTP steps, DST, manual changes) cannot shorten or stretch a window.
"""

from __future__ import annotations

import time
from typing import Callable

Clock = Callable[[], float]


class MonotonicClock:
    """Process-local monotonic clock returning seconds as a float.

    Successive calls never go backwards within one process.
    """

    def __call__(self) -> float:
        return time.monotonic()

    def __repr__(self) -> str:  # pragma: no cover - representation only
        return "MonotonicClock()"


monotonic_clock: Clock = MonotonicClock()
