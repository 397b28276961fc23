"""
Shared fixtures for Planning Center Listings tests.
"""

import pytest
from unittest.mock import AsyncMock, MagicMock

from pco_listings.config import clear_settings_cache
from pco_listings.service import ListingService, get_listing_service
from pco_listings.store import MemoryStore


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_item(name=None, html_url=None, starts_at=None, **extra):
    """Build a JSON:API resource with the given attributes."""
    attributes = dict(extra)
    if name is not None:
        attributes["name"] = name
    if html_url is not None:
        attributes["html_url"] = html_url
    if starts_at is not None:
        attributes["starts_at"] = starts_at
    return {"type": "Resource", "id": "1", "attributes": attributes}


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch, tmp_path):
    """Keep host environment and cached singletons out of tests."""
    for var in (
        "PCO_APP_ID",
        "PCO_APP_SECRET",
        "DATABASE_URL",
        "DEFAULT_LIMIT",
        "CACHE_TTL_SECONDS",
        "DATE_FORMAT",
    ):
        monkeypatch.delenv(var, raising=False)
    # No stray .env file from the working directory
    monkeypatch.chdir(tmp_path)
    clear_settings_cache()
    get_listing_service.cache_clear()
    yield
    clear_settings_cache()
    get_listing_service.cache_clear()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(clock):
    return MemoryStore(clock=clock)


@pytest.fixture
def fake_client():
    client = MagicMock()
    client.fetch = AsyncMock(return_value=[
        make_item("Easter Service", "https://example.org/easter", "2024-03-31T09:00:00Z"),
        make_item("Youth Night", "https://example.org/youth", "2024-04-05T18:30:00-05:00"),
    ])
    return client


@pytest.fixture
def service(fake_client, store):
    return ListingService(client=fake_client, store=store, cache_ttl=3600)
