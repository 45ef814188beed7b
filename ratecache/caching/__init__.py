"""Conditional request caching (entity tags and modification times)."""

from ratecache.caching.conditional import (
    ConditionalRequest,
    ConditionalResult,
    ResourceVersion,
    compute_entity_tag,
    conditional_request_from_headers,
    evaluate,
    format_http_date,
    parse_http_date,
)

__all__ = [
    "ConditionalRequest",
    "ConditionalResult",
    "ResourceVersion",
    "compute_entity_tag",
    "conditional_request_from_headers",
    "evaluate",
    "format_http_date",
    "parse_http_date",
]
