"""HTTP middleware for request ID propagation and correlation.

Every request is handled inside a request-id context, so log lines written
anywhere downstream (rate limit decisions, error handlers) carry the same id
that is echoed back to the caller.

Usage:
    app.middleware("http")(request_id_middleware)
"""

from __future__ import annotations

import time
import uuid

from fastapi import Request, Response

from ratecache.core.config import settings
from ratecache.core.logging import request_id_context

DURATION_HEADER = "X-Request-Duration-ms"


def _incoming_request_id(request: Request, header_name: str) -> str:
    supplied = request.headers.get(header_name, "").strip()
    return supplied or str(uuid.uuid4())


async def request_id_middleware(request: Request, call_next) -> Response:
    """Attach a correlation id to the request, its logs and its response.

    The id comes from the configured header (``LOG_REQUEST_ID_HEADER``) when
    the caller sends one, otherwise a UUID4 is generated.

    Args:
        request: The incoming HTTP request object.
        call_next: The next middleware/route handler in the stack.

    Returns:
        Response: The downstream response with the request id header and
            ``X-Request-Duration-ms`` set.
    """

    header_name = settings.log.request_id_header
    request_id = _incoming_request_id(request, header_name)

    started = time.perf_counter()
    with request_id_context(request_id):
        response: Response = await call_next(request)
    elapsed_ms = (time.perf_counter() - started) * 1000

    response.headers[header_name] = request_id
    response.headers[DURATION_HEADER] = f"{elapsed_ms:.2f}"
    return response
