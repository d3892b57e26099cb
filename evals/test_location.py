"""
Unit tests for the Location Parser.

Tests cover:
  1. ZIP codes anywhere in the string (5-digit and ZIP+4)
  2. "City, ST" with the state uppercased
  3. Bare city names resolved through the city → state table
  4. Unparseable input returns None and never raises
  5. require_location raises LocationParseError
"""

import pytest

from house_finder.errors import LocationParseError
from house_finder.location import parse_location, require_location, split_city_state
from house_finder.models import ParsedLocation


# ---------------------------------------------------------------------------
# Test 1 — postal codes
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("text, expected", [
    ("78701", "78701"),
    ("Austin TX 78701", "78701"),
    ("homes near 37203-1234", "37203-1234"),
])
def test_postal_code_wins(text, expected):
    assert parse_location(text) == ParsedLocation(postal_code=expected)


def test_postal_code_label():
    assert parse_location("10001").label() == "10001"


# ---------------------------------------------------------------------------
# Test 2 — city and state
# ---------------------------------------------------------------------------

def test_city_state_uppercases_code():
    parsed = parse_location("Nashville, tn")
    assert parsed == ParsedLocation(city="Nashville", state="TN")
    assert parsed.label() == "Nashville, TN"


def test_city_state_tolerates_missing_space():
    assert parse_location("Denver,CO") == ParsedLocation(city="Denver", state="CO")


# ---------------------------------------------------------------------------
# Test 3 — bare city names
# ---------------------------------------------------------------------------

def test_known_city_resolves_state():
    assert parse_location("nashville") == ParsedLocation(city="nashville", state="TN")


def test_unknown_city_is_still_attemptable():
    parsed = parse_location("Smallville")
    assert parsed == ParsedLocation(city="Smallville")
    assert parsed.state is None


# ---------------------------------------------------------------------------
# Test 4 — unparseable input
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("text", [None, "", "   ", "a, b, c", "Springfield, Illinois"])
def test_unparseable_returns_none(text):
    assert parse_location(text) is None


def test_split_city_state_defaults():
    assert split_city_state(None, "Nashville", "TN") == ("Nashville", "TN")
    assert split_city_state("37201", "Nashville", "TN") == ("Nashville", "TN")
    assert split_city_state("Austin, TX", "Nashville", "TN") == ("Austin", "TX")
    assert split_city_state("Smallville", "Nashville", "TN") == ("Smallville", "TN")


# ---------------------------------------------------------------------------
# Test 5 — raising variant
# ---------------------------------------------------------------------------

def test_require_location_raises():
    with pytest.raises(LocationParseError):
        require_location("a, b, c")


def test_require_location_returns_parsed():
    assert require_location("Miami, FL") == ParsedLocation(city="Miami", state="FL")
