"""Shared test fixtures."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from httphealth.api.server import create_app
from httphealth.health.cache import Cache
from httphealth.health.models import CheckResponse, Status
from httphealth.health.registry import CheckRegistry


class FakeClock:
    """Manually advanced clock for deterministic TTL tests."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class CountingCheck:
    """Check that returns a fixed response and counts its invocations."""

    def __init__(self, status: int = Status.OK, text: str = "") -> None:
        self.status = status
        self.text = text
        self.calls = 0

    def __call__(self) -> CheckResponse:
        self.calls += 1
        return CheckResponse(status=self.status, text=self.text)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(clock: FakeClock) -> Cache:
    return Cache(clock=clock)


@pytest.fixture
def registry(cache: Cache) -> CheckRegistry:
    return CheckRegistry(cache=cache)


@pytest.fixture
def client(registry: CheckRegistry) -> TestClient:
    return TestClient(create_app(registry))
