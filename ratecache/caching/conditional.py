"""Conditional request evaluation (``If-None-Match`` / ``If-Modified-Since``).

Everything here is pure: the validator only compares the caller's
preconditions with the current :class:`ResourceVersion` supplied by the
resource owner. Malformed ``If-Modified-Since`` input never fails a request;
the precondition is simply treated as not satisfied and the full
representation is served.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from email.utils import format_datetime, parsedate_to_datetime
from hashlib import sha256
from typing import Mapping

logger = logging.getLogger(__name__)

ANY_ENTITY_TAG = "*"


@dataclass(frozen=True)
class ResourceVersion:
    """Version identity of a resource at request time.

    Attributes:
        entity_tag: Opaque tag, sent verbatim as the ``ETag`` header.
        last_modified: Time of the last change (naive values are taken as UTC).
    """

    entity_tag: str
    last_modified: datetime


@dataclass(frozen=True)
class ConditionalRequest:
    """Preconditions extracted from an incoming request.

    ``if_modified_since`` may hold a parsed datetime or the raw HTTP-date
    string; raw strings are parsed lazily during evaluation.
    """

    if_none_match: str | None = None
    if_modified_since: datetime | str | None = None


@dataclass(frozen=True)
class ConditionalResult:
    not_modified: bool


def _as_utc_second(value: datetime) -> datetime:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    # HTTP-dates carry whole seconds only
    return value.astimezone(timezone.utc).replace(microsecond=0)


def parse_http_date(value: datetime | str | None) -> datetime | None:
    """Parse an HTTP-date into an aware UTC datetime.

    Returns:
        The parsed timestamp, or None when the value is missing or malformed.
    """

    if value is None:
        return None
    try:
        if isinstance(value, datetime):
            return _as_utc_second(value)
        parsed = parsedate_to_datetime(value.strip())
        if parsed is None:
            return None
        # Offsets can push a valid-looking date past datetime.max
        return _as_utc_second(parsed)
    except (TypeError, ValueError, IndexError, OverflowError):
        return None


def format_http_date(value: datetime) -> str:
    """Format a timestamp as an IMF-fixdate (``Sun, 06 Nov 1994 08:49:37 GMT``)."""

    return format_datetime(_as_utc_second(value), usegmt=True)


def compute_entity_tag(content: bytes) -> str:
    """Derive a strong, quoted entity tag from representation bytes."""

    return f'"{sha256(content).hexdigest()[:32]}"'


def conditional_request_from_headers(headers: Mapping[str, str]) -> ConditionalRequest:
    """Extract preconditions from request headers.

    Header lookup follows the mapping's own semantics, so pass a
    case-insensitive mapping (such as Starlette's ``Headers``) for HTTP input.
    """

    if_none_match = headers.get("if-none-match")
    if if_none_match is not None:
        if_none_match = if_none_match.strip()
    return ConditionalRequest(
        if_none_match=if_none_match,
        if_modified_since=headers.get("if-modified-since"),
    )


def evaluate(current: ResourceVersion, conditional: ConditionalRequest) -> ConditionalResult:
    """Decide whether the caller's cached copy is still current.

    Args:
        current: Version of the resource as it is now.
        conditional: Preconditions sent by the caller.

    Returns:
        ConditionalResult with ``not_modified`` set when a 304 is appropriate.
    """

    if conditional.if_none_match is not None and (
        conditional.if_none_match == ANY_ENTITY_TAG
        or conditional.if_none_match == current.entity_tag
    ):
        return ConditionalResult(not_modified=True)

    if conditional.if_modified_since is not None:
        since = parse_http_date(conditional.if_modified_since)
        if since is None:
            logger.debug("conditional.malformed_if_modified_since")
            return ConditionalResult(not_modified=False)
        if _as_utc_second(current.last_modified) <= since:
            return ConditionalResult(not_modified=True)

    return ConditionalResult(not_modified=False)
