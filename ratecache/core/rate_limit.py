"""Rate limiting dependency for FastAPI routes.

This module wires the rate limit tracker into the HTTP layer.

Strategy:
- Fixed window per client, opened by the client's first request.
- Client identity is the X-API-Key value when present, otherwise the client IP.
  The key is not verified here; authentication happens elsewhere.
- A rejection is returned as data, not raised: routes turn it into a 429
  response carrying the same headers as an admitted one.
"""

from __future__ import annotations

import logging
import threading
from typing import Annotated

from fastapi import Depends, Header, Request

from ratecache.adapters.rate_limit.base import AbstractRateLimitTracker, RateLimitResult
from ratecache.adapters.rate_limit.in_memory import InMemoryRateLimitTracker
from ratecache.core.config import settings
from ratecache.core.logging import hash_client_key

logger = logging.getLogger(__name__)


_tracker: AbstractRateLimitTracker | None = None
_tracker_lock = threading.Lock()
_checks_since_prune = 0


def get_rate_limit_tracker() -> AbstractRateLimitTracker:
    """Return the process-wide tracker instance.

    The instance is cached in-module to preserve window state across requests.
    """

    global _tracker

    if _tracker is None:
        with _tracker_lock:
            if _tracker is None:
                _tracker = InMemoryRateLimitTracker()
    return _tracker


def reset_rate_limit_tracker() -> None:
    """Drop the cached tracker so the next request starts from empty windows."""

    global _tracker, _checks_since_prune

    with _tracker_lock:
        _tracker = None
        _checks_since_prune = 0


def build_client_id(request: Request, x_api_key: str | None) -> str:
    """Build the namespaced client identity for the current request.

    Args:
        request: FastAPI request.
        x_api_key: Value of the X-API-Key header, if sent.

    Returns:
        ``api_key:<key>`` or ``ip:<host>``.
    """

    if x_api_key:
        return f"api_key:{x_api_key}"

    client_host = request.client.host if request.client else "unknown"
    return f"ip:{client_host}"


def _maybe_prune(tracker: AbstractRateLimitTracker) -> None:
    global _checks_since_prune

    with _tracker_lock:
        _checks_since_prune += 1
        due = _checks_since_prune >= settings.app.rate_limit_prune_interval
        if due:
            _checks_since_prune = 0
    if due:
        tracker.prune()


async def check_rate_limit(
    request: Request,
    tracker: Annotated[AbstractRateLimitTracker, Depends(get_rate_limit_tracker)],
    x_api_key: Annotated[str | None, Header(alias="X-API-Key")] = None,
) -> RateLimitResult | None:
    """FastAPI dependency counting the request against the caller's window.

    Args:
        request: FastAPI request.
        tracker: Window store used for the decision.
        x_api_key: API key from the X-API-Key header.

    Returns:
        The admission decision, or None when rate limiting is disabled.
    """

    if not settings.app.rate_limit_enabled:
        return None

    client_id = build_client_id(request, x_api_key)
    limit = settings.app.rate_limit_requests
    window_seconds = settings.app.rate_limit_window_seconds

    result = tracker.check(client_id, limit, window_seconds)
    _maybe_prune(tracker)

    log_fields = {
        "key_type": "api_key" if x_api_key else "ip",
        "key_hash": hash_client_key(client_id),
        "limit": result.limit,
        "remaining": result.remaining,
        "window_s": window_seconds,
        "reset_s": result.reset_seconds,
    }
    if result.admitted:
        logger.info("rate_limit.allowed", extra=log_fields)
    else:
        logger.warning("rate_limit.exceeded", extra=log_fields)

    request.state.rate_limit = result
    return result
