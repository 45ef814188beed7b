"""Pydantic schemas for resource and error responses."""

from __future__ import annotations

from typing import Any, Dict

from pydantic import BaseModel, Field


class ResourceResponse(BaseModel):
    """Representation of a stored resource."""

    id: str = Field(..., description="Resource identifier.")
    data: Dict[str, Any] = Field(
        default_factory=dict,
        description="Resource payload as supplied by the resource owner.",
    )


class ErrorContent(BaseModel):
    code: str = Field(..., description="Stable, machine-readable error code.")
    message: str = Field(..., description="Human-readable error message.")
    request_id: str | None = Field(
        default=None, description="Correlation id of the failed request."
    )
    details: Dict[str, Any] | None = Field(
        default=None, description="Optional structured context."
    )


class ErrorResponse(BaseModel):
    """Error envelope shared by every non-2xx JSON response."""

    error: ErrorContent
