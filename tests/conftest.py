"""Shared test fixtures for the trackers."""

import json
import sys
from pathlib import Path

import httpx
import pytest

# Ensure the trackers package is importable without installing
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from trackers.common.config import (
    HTTPSettings,
    MovieSettings,
    NotifySettings,
    ShippingSettings,
    ShoppingSettings,
)
from trackers.common.http_client import AsyncHTTPClient
from trackers.common.notify import Notifier
from trackers.common.storage import MemoryStore


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def fixtures_dir() -> Path:
    """Return the test fixtures directory."""
    return PROJECT_ROOT / "tests" / "fixtures"


@pytest.fixture
def load_fixture(fixtures_dir):
    """Load a JSON API response from tests/fixtures."""
    def _load(name: str):
        with open(fixtures_dir / name, encoding="utf-8") as f:
            return json.load(f)
    return _load


@pytest.fixture
def memory_store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def notifier() -> Notifier:
    return Notifier(NotifySettings(history_size=20))


@pytest.fixture
def http_settings() -> HTTPSettings:
    """No backoff and a generous rate limit so tests run instantly."""
    return HTTPSettings(
        timeout_seconds=5,
        max_retries=3,
        backoff_base=0,
        rate_limit_rpm=60_000,
    )


@pytest.fixture
def make_http(http_settings):
    """Build an AsyncHTTPClient whose requests go to a handler function.

    The handler receives an httpx.Request and returns an httpx.Response.
    """
    def _make(handler) -> AsyncHTTPClient:
        return AsyncHTTPClient(http_settings, transport=httpx.MockTransport(handler))
    return _make


@pytest.fixture
def shipping_settings() -> ShippingSettings:
    return ShippingSettings(demo_mode=True, simulated_delay_seconds=0)


@pytest.fixture
def shopping_settings() -> ShoppingSettings:
    return ShoppingSettings(search_debounce_seconds=0.05)


@pytest.fixture
def movie_settings() -> MovieSettings:
    return MovieSettings()
