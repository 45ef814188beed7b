from __future__ import annotations

from ratecache.api.routes.health import router as health_router
from ratecache.api.routes.resources import router as resources_router

__all__ = ["health_router", "resources_router"]
