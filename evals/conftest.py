"""
pytest conftest for the house_finder test suite.

Three responsibilities:
1. Clears upstream credentials from the environment so every test starts
   in mock mode unless it builds live Settings explicitly.
2. Provides FakeSource, an in-memory stand-in for an upstream listing
   source. No test touches the network; HTTP-level tests use
   httpx.MockTransport instead.
3. Provides a fixed "now" and a Property factory for the pure modules.

pytest-asyncio runs in STRICT mode (see pyproject.toml); async tests carry
@pytest.mark.asyncio.
"""

import os
import sys
from datetime import datetime, timedelta, timezone

# Make the project root importable from any working directory
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest

from house_finder.errors import QuotaExceededError
from house_finder.models import Property

FIXED_NOW = datetime(2024, 4, 15, 12, 0, tzinfo=timezone.utc)

_CREDENTIAL_VARS = ("RAPIDAPI_KEY", "RENTCAST_API_KEY", "REQUEST_TIMEOUT_SECONDS", "CACHE_TTL_SECONDS",
                    "CACHE_MAX_ENTRIES")


@pytest.fixture(autouse=True)
def clear_credentials(monkeypatch):
    for name in _CREDENTIAL_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def make_property():
    """Factory for Property values; list_date is given as days before FIXED_NOW."""

    def _make(days_listed: float = 10, **overrides) -> Property:
        fields = {
            "id": "prop-1",
            "address": "1 Test St",
            "city": "Nashville",
            "state": "TN",
            "postal_code": "37201",
            "list_date": FIXED_NOW - timedelta(days=days_listed),
            "last_updated": FIXED_NOW,
            "price": 300_000,
            "bedrooms": 3,
            "bathrooms": 2.0,
            "square_feet": 1_500,
            "property_type": "single_family",
        }
        fields.update(overrides)
        return Property(**fields)

    return _make


class FakeSource:
    """Upstream source double: returns canned records or raises a canned error."""

    def __init__(
        self,
        name: str = "primary",
        records: list | None = None,
        error: Exception | None = None,
        prefiltered: bool = False,
        recoverable: bool | None = None,
        configured: bool = True,
        details: dict | None = None,
    ):
        self.name = name
        self.records = records or []
        self.error = error
        self.prefiltered = prefiltered
        self.recoverable = recoverable
        self.configured = configured
        self.details = details
        self.calls = 0

    def is_recoverable(self, error) -> bool:
        if self.recoverable is None:
            return isinstance(error, QuotaExceededError)
        return self.recoverable

    async def fetch(self, query, location) -> list[dict]:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return list(self.records)

    async def fetch_details(self, property_id: str) -> dict:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.details or {}


@pytest.fixture
def fake_source():
    return FakeSource
