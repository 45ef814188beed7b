from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse

from ratecache.adapters.rate_limit.base import RateLimitResult
from ratecache.adapters.resources.base import AbstractResourceStore
from ratecache.adapters.resources.in_memory import InMemoryResourceStore
from ratecache.caching.conditional import conditional_request_from_headers, evaluate
from ratecache.core.errors import NotFoundAppError
from ratecache.core.exception_handlers import error_body
from ratecache.core.rate_limit import check_rate_limit
from ratecache.http.decorator import (
    CACHING_HEADERS_DOC,
    RATE_LIMIT_HEADERS_DOC,
    RETRY_AFTER_HEADER,
    response_decorator,
)
from ratecache.schemas.resource import ErrorResponse, ResourceResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Resources"])

_store = InMemoryResourceStore()


def get_resource_store() -> AbstractResourceStore:
    """Return the resource store backing the read endpoints."""
    return _store


@router.get(
    "/resources/{resource_id}",
    response_model=ResourceResponse,
    responses={
        200: {"headers": {**RATE_LIMIT_HEADERS_DOC, **CACHING_HEADERS_DOC}},
        304: {
            "description": "Cached copy is still current; body omitted.",
            "headers": {**RATE_LIMIT_HEADERS_DOC, **CACHING_HEADERS_DOC},
        },
        404: {"model": ErrorResponse, "description": "Unknown resource."},
        429: {
            "model": ErrorResponse,
            "description": "Rate limit exceeded.",
            "headers": {
                **RATE_LIMIT_HEADERS_DOC,
                RETRY_AFTER_HEADER: {
                    "description": "Seconds to wait before retrying",
                    "schema": {"type": "string"},
                },
            },
        },
    },
)
async def get_resource(
    resource_id: str,
    request: Request,
    rate_limit: Annotated[RateLimitResult | None, Depends(check_rate_limit)],
    store: Annotated[AbstractResourceStore, Depends(get_resource_store)],
) -> Response:
    """Return a resource, honouring rate limits and conditional headers.

    Args:
        resource_id: Identifier of the resource to read.
        request: Incoming request (for If-None-Match / If-Modified-Since).
        rate_limit: Admission decision for the caller.
        store: Resource store supplying payload and version.

    Returns:
        200 with the representation, 304 with an empty body, or 429.

    Raises:
        NotFoundAppError: If the resource does not exist.
    """
    if rate_limit is not None and not rate_limit.admitted:
        throttled = JSONResponse(
            content=error_body("rate_limit_exceeded", "Rate limit exceeded. Try again later."),
        )
        return response_decorator.decorate(throttled, rate_limit)

    resource = store.get(resource_id)
    if resource is None:
        raise NotFoundAppError(
            code="resource_not_found",
            message=f"Resource '{resource_id}' was not found.",
            details={"resource_id": resource_id},
        )

    conditional = conditional_request_from_headers(request.headers)
    outcome = evaluate(resource.version, conditional)
    if outcome.not_modified:
        logger.debug(
            "conditional.not_modified",
            extra={"resource_id": resource_id, "etag": resource.version.entity_tag},
        )

    body = ResourceResponse(id=resource.resource_id, data=resource.payload)
    response = JSONResponse(content=body.model_dump(mode="json"))
    return response_decorator.decorate(
        response,
        rate_limit,
        resource.version,
        not_modified=outcome.not_modified,
    )
