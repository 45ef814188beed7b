"""OpenAPI customization.

Adds tag metadata and documents the optional ``X-API-Key`` header used to
identify callers for rate limit accounting. The key only selects the
caller's budget; it is not an authentication requirement.
"""

from __future__ import annotations

from typing import Any, Dict

from fastapi import FastAPI

DESIRED_TAGS = [
    {
        "name": "Resources",
        "description": "Rate limited resource reads with conditional request support.",
    },
    {
        "name": "Health",
        "description": "Liveness checks (not rate limited).",
    },
]


def apply_openapi_customizations(app: FastAPI) -> None:
    """Patch FastAPI's OpenAPI generation to add tags and the client key scheme."""

    original_openapi = app.openapi

    def custom_openapi() -> Dict[str, Any]:
        schema = original_openapi()

        components = schema.setdefault("components", {})
        security_schemes = components.setdefault("securitySchemes", {})
        security_schemes.setdefault(
            "ClientKey",
            {
                "type": "apiKey",
                "in": "header",
                "name": "X-API-Key",
                "description": (
                    "Optional client key. Requests are counted per key, or per "
                    "client IP when no key is sent."
                ),
            },
        )

        tags = schema.setdefault("tags", [])
        existing_tag_names = {t.get("name") for t in tags}
        for tag in DESIRED_TAGS:
            if tag["name"] not in existing_tag_names:
                tags.append(tag)

        return schema

    app.openapi = custom_openapi  # type: ignore[assignment]
