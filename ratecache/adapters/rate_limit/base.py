"""Rate limit tracker interfaces.

The HTTP layer depends on this abstraction (not the concrete implementation)
so the window store can move to a shared backend without touching routes.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class RateLimitResult:
    """Outcome of a single admission check.

    Attributes:
        admitted: Whether the request may proceed.
        limit: Max requests per window.
        remaining: Requests left in the current window, in ``[0, limit]``.
        reset_seconds: Whole seconds until the window refills (never an epoch).
    """

    admitted: bool
    limit: int
    remaining: int
    reset_seconds: int


@dataclass
class RateLimitWindow:
    """Per-client accounting for one fixed window.

    ``count`` is held at ``limit`` once rejection begins, so it never exceeds it.
    """

    client_id: str
    window_start: float
    count: int
    limit: int
    window_seconds: int

    def expired(self, now: float) -> bool:
        return now >= self.window_start + self.window_seconds


class AbstractRateLimitTracker(ABC):
    """Interface for rate limit trackers."""

    @abstractmethod
    def check(
        self,
        client_id: str,
        limit: int,
        window_seconds: int,
        now: float | None = None,
    ) -> RateLimitResult:
        """Count one request for ``client_id`` and decide admission.

        Args:
            client_id: Opaque caller identity (token or IP based key).
            limit: Max admitted requests per window.
            window_seconds: Window length in seconds.
            now: Monotonic timestamp; the tracker's clock is used when omitted.

        Returns:
            RateLimitResult describing the decision.
        """
        raise NotImplementedError

    @abstractmethod
    def prune(self, now: float | None = None) -> int:
        """Drop expired windows and return how many were removed."""
        raise NotImplementedError
