"""Application factory for the FastAPI app.

Centralizes app construction (metadata, middleware, handlers, routers) so
tests can build isolated instances.
"""

from __future__ import annotations

from fastapi import FastAPI

from ratecache.api.routes import health_router, resources_router
from ratecache.core.config import settings
from ratecache.core.exception_handlers import setup_exception_handlers
from ratecache.core.logging import configure_logging
from ratecache.core.middleware import request_id_middleware
from ratecache.core.openapi import apply_openapi_customizations


def create_app() -> FastAPI:
    """Create and configure the FastAPI application instance.

    Returns:
        Configured FastAPI app with middleware, handlers, routers and docs.
    """
    # Logging first so subsequent init logs are formatted as desired
    configure_logging(settings.log)

    app = FastAPI(
        title="ratecache",
        description=(
            "Resource API with per-client rate limiting (X-Rate-Limit-* headers, "
            "429 Too Many Requests) and conditional requests (ETag, "
            "Last-Modified, 304 Not Modified)."
        ),
        version="0.1.0",
        debug=settings.app.debug,
    )

    app.middleware("http")(request_id_middleware)

    setup_exception_handlers(app)

    app.include_router(resources_router, prefix="/v1")
    app.include_router(health_router)

    apply_openapi_customizations(app)

    return app
