"""Pytest configuration and fixtures shared across all test modules.

This file is loaded by pytest before any test module, so the environment
below is in place before settings are first imported.
"""

import os

# CRITICAL: Set these before any imports that might load settings
os.environ["APP_ENV"] = "testing"
os.environ.setdefault("APP_RATE_LIMIT_ENABLED", "true")
os.environ.setdefault("APP_RATE_LIMIT_REQUESTS", "3")
os.environ.setdefault("APP_RATE_LIMIT_WINDOW_SECONDS", "60")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from fastapi.testclient import TestClient

from ratecache.adapters.rate_limit.in_memory import InMemoryRateLimitTracker
from ratecache.adapters.resources.in_memory import InMemoryResourceStore
from ratecache.api.routes.resources import get_resource_store
from ratecache.core.app_factory import create_app
from ratecache.core.rate_limit import get_rate_limit_tracker


class FakeClock:
    """Deterministic monotonic clock used to drive window arithmetic."""

    def __init__(self, start: float = 1_000.0) -> None:
        self.current = start

    def __call__(self) -> float:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current += seconds


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def tracker(fake_clock: FakeClock) -> InMemoryRateLimitTracker:
    return InMemoryRateLimitTracker(clock=fake_clock)


@pytest.fixture
def store() -> InMemoryResourceStore:
    resources = InMemoryResourceStore()
    resources.put("widget-1", {"name": "widget", "size": 3})
    return resources


@pytest.fixture
def app(tracker: InMemoryRateLimitTracker, store: InMemoryResourceStore):
    application = create_app()
    application.dependency_overrides[get_rate_limit_tracker] = lambda: tracker
    application.dependency_overrides[get_resource_store] = lambda: store
    return application


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)
