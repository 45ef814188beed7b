"""Rate limit trackers.

The service starts with an in-memory tracker; the abstract interface lets a
shared store replace it without changing the API layer.
"""

from ratecache.adapters.rate_limit.base import (
    AbstractRateLimitTracker,
    RateLimitResult,
    RateLimitWindow,
)
from ratecache.adapters.rate_limit.in_memory import InMemoryRateLimitTracker

__all__ = [
    "AbstractRateLimitTracker",
    "InMemoryRateLimitTracker",
    "RateLimitResult",
    "RateLimitWindow",
]
