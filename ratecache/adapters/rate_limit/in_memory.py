"""In-memory fixed-window rate limit tracker.

Notes:
- Per-process only: running multiple workers multiplies the effective limit.
- Thread-safe: each client's window is updated under that client's lock
  stripe, so checks for different clients rarely contend.
"""

from __future__ import annotations

import logging
import math
import threading
from contextlib import ExitStack
from dataclasses import replace

from ratecache.adapters.rate_limit.base import (
    AbstractRateLimitTracker,
    RateLimitResult,
    RateLimitWindow,
)
from ratecache.core.clock import Clock, monotonic_clock

logger = logging.getLogger(__name__)


class InMemoryRateLimitTracker(AbstractRateLimitTracker):
    """Fixed-window tracker keeping one :class:`RateLimitWindow` per client.

    A window opens on a client's first request (not on a wall-clock boundary)
    and lasts ``window_seconds``. The first request after it expires opens a
    fresh window.

    Important:
        This tracker is per-process only. If the API runs with multiple workers,
        each worker enforces its own independent limits.
    """

    def __init__(self, *, clock: Clock = monotonic_clock, stripes: int = 64) -> None:
        """Initialize the tracker.

        Args:
            clock: Monotonic time source returning seconds.
            stripes: Number of lock stripes keys are hashed onto.

        Raises:
            ValueError: If stripes is invalid.
        """
        if stripes < 1:
            raise ValueError("stripes must be >= 1")

        self._clock = clock
        self._locks = tuple(threading.Lock() for _ in range(stripes))
        self._windows: dict[str, RateLimitWindow] = {}

    def __len__(self) -> int:
        return len(self._windows)

    def _lock_for(self, client_id: str) -> threading.Lock:
        return self._locks[hash(client_id) % len(self._locks)]

    @staticmethod
    def _reset_seconds(window: RateLimitWindow, now: float) -> int:
        left = window.window_seconds - (now - window.window_start)
        return max(0, int(math.ceil(left)))

    def check(
        self,
        client_id: str,
        limit: int,
        window_seconds: int,
        now: float | None = None,
    ) -> RateLimitResult:
        """Count one request for the client and decide admission.

        Args:
            client_id: Caller identity.
            limit: Max admitted requests per window.
            window_seconds: Window length in seconds.
            now: Monotonic timestamp; defaults to the tracker clock.

        Returns:
            RateLimitResult with the admission decision and header values.

        Raises:
            ValueError: If client_id is empty or limit/window_seconds are invalid.
        """
        if not client_id:
            raise ValueError("client_id must be a non-empty string")
        if limit < 1:
            raise ValueError("limit must be >= 1")
        if window_seconds < 1:
            raise ValueError("window_seconds must be >= 1")

        if now is None:
            now = self._clock()

        with self._lock_for(client_id):
            window = self._windows.get(client_id)

            if window is None or window.expired(now):
                self._windows[client_id] = RateLimitWindow(
                    client_id=client_id,
                    window_start=now,
                    count=1,
                    limit=limit,
                    window_seconds=window_seconds,
                )
                return RateLimitResult(
                    admitted=True,
                    limit=limit,
                    remaining=limit - 1,
                    reset_seconds=window_seconds,
                )

            window.limit = limit
            admitted = window.count < limit
            if admitted:
                window.count += 1
            else:
                # Rejected requests are not counted past the limit
                window.count = limit

            return RateLimitResult(
                admitted=admitted,
                limit=limit,
                remaining=max(0, limit - window.count),
                reset_seconds=self._reset_seconds(window, now),
            )

    def window(self, client_id: str) -> RateLimitWindow | None:
        """Return a snapshot of the stored window for a client, if any."""

        with self._lock_for(client_id):
            window = self._windows.get(client_id)
            return replace(window) if window is not None else None

    def prune(self, now: float | None = None) -> int:
        """Remove expired windows.

        Takes every stripe so no check can observe a half-pruned store.

        Returns:
            Number of windows removed.
        """

        if now is None:
            now = self._clock()

        with ExitStack() as stack:
            for lock in self._locks:
                stack.enter_context(lock)
            expired = [cid for cid, w in self._windows.items() if w.expired(now)]
            for client_id in expired:
                del self._windows[client_id]
            remaining_windows = len(self._windows)

        if expired:
            logger.debug(
                "rate_limit.pruned",
                extra={"pruned": len(expired), "windows": remaining_windows},
            )
        return len(expired)
