"""Tests for global exception handlers.

Validates that error types map to the right HTTP status codes, share one
error envelope, and never leak implementation details.
"""

import asyncio
import json
from unittest.mock import MagicMock

import pytest
from fastapi import FastAPI, Request
from fastapi.testclient import TestClient

from ratecache.adapters.rate_limit.base import RateLimitResult
from ratecache.core.errors import AppError, NotFoundAppError
from ratecache.core.exception_handlers import general_exception_handler, setup_exception_handlers


@pytest.fixture
def app_with_handlers() -> FastAPI:
    """Create FastAPI app with exception handlers registered."""
    app = FastAPI()
    setup_exception_handlers(app)
    return app


@pytest.fixture
def handler_client(app_with_handlers: FastAPI) -> TestClient:
    return TestClient(app_with_handlers, raise_server_exceptions=False)


class TestAppErrorHandler:
    """Test handler for AppError and subclasses."""

    def test_base_app_error_returns_500(self, handler_client: TestClient, app_with_handlers: FastAPI):
        @app_with_handlers.get("/test-app-error")
        async def endpoint():
            raise AppError(code="store_unavailable", message="Store unavailable")

        response = handler_client.get("/test-app-error")

        assert response.status_code == 500
        data = response.json()
        assert data["error"]["code"] == "store_unavailable"
        assert data["error"]["message"] == "Store unavailable"
        assert "request_id" in data["error"]
        assert "details" not in data["error"]

    def test_not_found_error_returns_404_with_details(
        self, handler_client: TestClient, app_with_handlers: FastAPI
    ):
        @app_with_handlers.get("/test-missing")
        async def endpoint():
            raise NotFoundAppError(
                code="resource_not_found",
                message="Nope",
                details={"resource_id": "r-9"},
            )

        response = handler_client.get("/test-missing")

        assert response.status_code == 404
        assert response.json()["error"]["details"] == {"resource_id": "r-9"}

    def test_rate_limit_state_is_reported_on_errors(
        self, handler_client: TestClient, app_with_handlers: FastAPI
    ):
        @app_with_handlers.get("/test-budget")
        async def endpoint(request: Request):
            request.state.rate_limit = RateLimitResult(
                admitted=True, limit=5, remaining=4, reset_seconds=30
            )
            raise NotFoundAppError(code="resource_not_found", message="Nope")

        response = handler_client.get("/test-budget")

        assert response.status_code == 404
        assert response.headers["X-Rate-Limit-Remaining"] == "4"
        assert response.headers["X-Rate-Limit-Reset"] == "30"


class TestGeneralExceptionHandler:
    """Test fallback handler for unexpected exceptions."""

    def test_unexpected_exception_returns_generic_500(
        self, handler_client: TestClient, app_with_handlers: FastAPI
    ):
        @app_with_handlers.get("/test-boom")
        async def endpoint():
            raise RuntimeError("database connection failed")

        response = handler_client.get("/test-boom")

        assert response.status_code == 500
        data = response.json()
        assert data["error"]["code"] == "internal_server_error"
        assert "database connection" not in data["error"]["message"]

    def test_general_exception_handler_never_leaks_stack_trace(self):
        request = MagicMock()
        request.url.path = "/test"
        request.method = "GET"

        response = asyncio.run(general_exception_handler(request, ValueError("Test error")))

        text = bytes(response.body).decode()
        assert "Traceback" not in text
        assert "ValueError" not in text
        assert json.loads(text)["error"]["code"] == "internal_server_error"


def test_setup_registers_handlers_and_is_repeatable():
    app = FastAPI()

    setup_exception_handlers(app)
    setup_exception_handlers(app)

    assert AppError in app.exception_handlers
    assert Exception in app.exception_handlers
