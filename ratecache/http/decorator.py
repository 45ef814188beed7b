"""Attach rate limit and caching headers to outgoing responses.

Header names are fixed by the public API contract:

- ``X-Rate-Limit-Limit``: requests allowed per window
- ``X-Rate-Limit-Remaining``: requests left in the current window
- ``X-Rate-Limit-Reset``: seconds until the window refills (not an epoch time)
- ``ETag`` / ``Last-Modified``: version of the returned resource
"""

from __future__ import annotations

from fastapi import Response, status

from ratecache.adapters.rate_limit.base import RateLimitResult
from ratecache.caching.conditional import ResourceVersion, format_http_date

RATE_LIMIT_LIMIT_HEADER = "X-Rate-Limit-Limit"
RATE_LIMIT_REMAINING_HEADER = "X-Rate-Limit-Remaining"
RATE_LIMIT_RESET_HEADER = "X-Rate-Limit-Reset"
RETRY_AFTER_HEADER = "Retry-After"
ETAG_HEADER = "ETag"
LAST_MODIFIED_HEADER = "Last-Modified"

_INTEGER_SCHEMA = {"type": "string", "pattern": r"^\d+$"}

# OpenAPI response header documentation
RATE_LIMIT_HEADERS_DOC = {
    RATE_LIMIT_LIMIT_HEADER: {
        "description": "Requests allowed per rate limit window",
        "schema": _INTEGER_SCHEMA,
    },
    RATE_LIMIT_REMAINING_HEADER: {
        "description": "Requests remaining in the current window",
        "schema": _INTEGER_SCHEMA,
    },
    RATE_LIMIT_RESET_HEADER: {
        "description": "Seconds until the current window refills",
        "schema": _INTEGER_SCHEMA,
    },
}

CACHING_HEADERS_DOC = {
    ETAG_HEADER: {
        "description": "Entity tag of the returned representation",
        "schema": {"type": "string"},
    },
    LAST_MODIFIED_HEADER: {
        "description": "Time the resource last changed (HTTP-date)",
        "schema": {"type": "string"},
    },
}


class ResponseDecorator:
    """Apply rate limit and caching metadata to a response in place.

    Decorating is idempotent: headers are assigned, never appended, so calling
    :meth:`decorate` twice with the same inputs yields the same header set.
    A throttled response (429) takes precedence over a not-modified one (304).
    """

    def decorate(
        self,
        response: Response,
        rate_limit_result: RateLimitResult | None = None,
        resource_version: ResourceVersion | None = None,
        *,
        not_modified: bool = False,
    ) -> Response:
        """Set headers and, where required, override the status code.

        Args:
            response: Outgoing response to modify.
            rate_limit_result: Admission decision, or None when limiting is off.
            resource_version: Current version of the returned resource, if any.
            not_modified: Whether conditional evaluation signalled a 304.

        Returns:
            The same response object, for chaining.
        """

        if rate_limit_result is not None:
            self._apply_rate_limit(response, rate_limit_result)

        if resource_version is not None:
            response.headers[ETAG_HEADER] = resource_version.entity_tag
            response.headers[LAST_MODIFIED_HEADER] = format_http_date(
                resource_version.last_modified
            )

        if rate_limit_result is not None and not rate_limit_result.admitted:
            response.status_code = status.HTTP_429_TOO_MANY_REQUESTS
            response.headers[RETRY_AFTER_HEADER] = str(rate_limit_result.reset_seconds)
        elif not_modified:
            response.status_code = status.HTTP_304_NOT_MODIFIED
            self._suppress_body(response)

        return response

    @staticmethod
    def _apply_rate_limit(response: Response, result: RateLimitResult) -> None:
        response.headers[RATE_LIMIT_LIMIT_HEADER] = str(result.limit)
        response.headers[RATE_LIMIT_REMAINING_HEADER] = str(result.remaining)
        response.headers[RATE_LIMIT_RESET_HEADER] = str(result.reset_seconds)

    @staticmethod
    def _suppress_body(response: Response) -> None:
        response.body = b""
        for header in ("content-length", "content-type"):
            if header in response.headers:
                del response.headers[header]


response_decorator = ResponseDecorator()
