"""
Unit tests for the Property Normalizer.

Tests cover:
  1. Round trip — normalizing a Property's own to_dict() output is a no-op
  2. Primary nested records and secondary flat records
  3. Defaults for missing fields (malformed records are repaired, not dropped)
  4. Bathroom / price / date coercion
"""

from datetime import datetime, timezone

import pytest

from house_finder.mock_data import mock_records
from house_finder.models import PLACEHOLDER_PHOTO, UNKNOWN, UNKNOWN_AGENT, Property
from house_finder.normalizer import (
    normalize_properties,
    normalize_property,
    normalize_type,
    parse_bathrooms,
    parse_datetime,
    parse_price,
)

NOW = datetime(2024, 4, 15, 12, 0, tzinfo=timezone.utc)

RENTCAST_RECORD = {
    "id": "5500-Grand-Lake-Dr,-San-Antonio,-TX-78244",
    "formattedAddress": "5500 Grand Lake Dr, San Antonio, TX 78244",
    "addressLine1": "5500 Grand Lake Dr",
    "city": "San Antonio",
    "state": "TX",
    "zipCode": "78244",
    "latitude": 29.475962,
    "longitude": -98.351442,
    "propertyType": "Single Family",
    "bedrooms": 3,
    "bathrooms": 2,
    "squareFootage": 1878,
    "lotSize": 8843,
    "yearBuilt": 1973,
    "status": "Active",
    "price": 899000,
    "listedDate": "2024-04-01T00:00:00.000Z",
    "lastSeenDate": "2024-04-14T13:14:59.587Z",
    "listingAgent": {"name": "Jennifer Welch", "phone": "2103128765", "email": "jennifer@example.com"},
}


# ---------------------------------------------------------------------------
# Test 1 — round trip
# ---------------------------------------------------------------------------

def test_round_trip_is_stable():
    """
    GIVEN  a Property normalized from a primary-shaped record
    WHEN   its to_dict() output is normalized again
    THEN   the result equals the original Property
    """
    for record in mock_records("Austin, TX", limit=8, now=NOW):
        prop = normalize_property(record, source="mock", now=NOW)
        assert normalize_property(prop.to_dict(), now=NOW) == prop


def test_property_instance_returned_unchanged():
    prop = normalize_property(mock_records("Austin, TX", limit=1, now=NOW)[0], now=NOW)
    assert normalize_property(prop) is prop


# ---------------------------------------------------------------------------
# Test 2 — source shapes
# ---------------------------------------------------------------------------

def test_primary_nested_record():
    record = mock_records("Nashville, TN", limit=2, now=NOW)[1]
    prop = normalize_property(record, now=NOW)

    assert prop.address == "456 Oak Ave"
    assert prop.city == "Nashville"
    assert prop.state == "TN"
    assert prop.price == 275_000
    assert prop.bathrooms == 1.5
    assert prop.price_reduced_amount == 10_000
    assert prop.agent.name == "Mock Realty"
    assert prop.url.startswith("https://www.realtor.com/")
    assert prop.description == "Charming starter home with updated kitchen"


def test_secondary_flat_record():
    prop = normalize_property(RENTCAST_RECORD, source="secondary", now=NOW)

    assert prop.id == RENTCAST_RECORD["id"]
    assert prop.address == "5500 Grand Lake Dr"
    assert prop.postal_code == "78244"
    assert prop.square_feet == 1878
    assert prop.lot_size == 8843
    assert prop.property_type == "single_family"
    assert prop.status == "for_sale"
    assert prop.coordinates.lat == pytest.approx(29.475962)
    assert prop.list_date == datetime(2024, 4, 1, tzinfo=timezone.utc)
    assert prop.agent.phone == "2103128765"
    assert prop.source == "secondary"
    assert prop.photos == (PLACEHOLDER_PHOTO,)


def test_advertiser_agent_and_photo_dicts():
    record = {
        "property_id": "9001",
        "list_price": 410000,
        "photos": [{"href": "https://img.example.com/1.jpg"}, {"href": ""}],
        "advertisers": [{"name": "Pat Agent", "email": "pat@example.com", "phones": [{"number": "555-0100"}]}],
    }
    prop = normalize_property(record, now=NOW)
    assert prop.photos == ("https://img.example.com/1.jpg",)
    assert prop.agent.name == "Pat Agent"
    assert prop.agent.phone == "555-0100"
    assert prop.agent.email == "pat@example.com"


# ---------------------------------------------------------------------------
# Test 3 — defaults
# ---------------------------------------------------------------------------

def test_empty_record_gets_safe_defaults():
    prop = normalize_property({}, now=NOW)

    assert prop.id.startswith("generated-")
    assert prop.listing_id == prop.id
    assert prop.price == 0
    assert prop.bedrooms == 0
    assert prop.bathrooms == 0.0
    assert prop.square_feet == 0
    assert prop.photos == (PLACEHOLDER_PHOTO,)
    assert prop.agent.name == UNKNOWN_AGENT
    assert prop.agent.phone == UNKNOWN
    assert prop.agent.email == UNKNOWN
    assert prop.list_date == NOW


def test_generated_ids_are_not_stable():
    assert normalize_property({}, now=NOW).id != normalize_property({}, now=NOW).id


def test_batch_skips_only_non_records():
    records = [RENTCAST_RECORD, "junk", None, {}]
    props = normalize_properties(records, source="secondary", now=NOW)
    assert len(props) == 2
    assert all(isinstance(p, Property) for p in props)


# ---------------------------------------------------------------------------
# Test 4 — coercion
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("raw, expected", [
    ("2.5", 2.5),
    ("2 full, 1 half", 2.0),
    (3, 3.0),
    ("n/a", 0.0),
    (None, 0.0),
])
def test_parse_bathrooms(raw, expected):
    assert parse_bathrooms(raw) == expected


@pytest.mark.parametrize("raw, expected", [
    ("$350,000", 350_000),
    ("425000.00", 425_000),
    (199500, 199_500),
    ("call for price", 0),
    (None, 0),
    ("-5000", 0),
    ("$-5,000", 0),
    (-5000, 0),
    (float("nan"), 0),
    (float("inf"), 0),
])
def test_parse_price(raw, expected):
    assert parse_price(raw) == expected


@pytest.mark.parametrize("bad", [float("nan"), float("inf"), float("-inf"), "Infinity", "NaN"])
def test_non_finite_numbers_are_repaired(bad):
    """
    GIVEN  a record whose numeric fields hold NaN / Infinity (json.loads accepts both)
    WHEN   it is normalized
    THEN   the fields fall back to 0 instead of raising
    """
    record = {
        "property_id": "x",
        "list_price": bad,
        "price_reduced_amount": bad,
        "description": {"sqft": bad, "beds": bad, "baths": bad, "year_built": bad},
        "location": {"address": {"coordinate": {"lat": bad, "lon": bad}}},
    }
    prop = normalize_property(record, now=NOW)

    assert prop.price == 0
    assert prop.price_reduced_amount == 0
    assert prop.square_feet == 0
    assert prop.bedrooms == 0
    assert prop.year_built == 0
    assert prop.coordinates.lat == 0.0
    assert prop.coordinates.lng == 0.0


def test_negative_reduction_is_not_flipped():
    prop = normalize_property({"property_id": "x", "price_reduced_amount": "-15000"}, now=NOW)
    assert prop.price_reduced_amount == 0


def test_parse_datetime_variants():
    assert parse_datetime("2024-04-01T00:00:00Z", NOW) == datetime(2024, 4, 1, tzinfo=timezone.utc)
    assert parse_datetime("2024-04-01", NOW) == datetime(2024, 4, 1, tzinfo=timezone.utc)
    assert parse_datetime(1711929600, NOW) == datetime(2024, 4, 1, tzinfo=timezone.utc)
    assert parse_datetime(1711929600000, NOW) == datetime(2024, 4, 1, tzinfo=timezone.utc)
    assert parse_datetime("not a date", NOW) == NOW


@pytest.mark.parametrize("raw, expected", [
    ("Single Family", "single_family"),
    ("Townhouse", "townhomes"),
    ("Condo", "condo"),
    ("Multi-Family", "multi_family"),
    (None, "single_family"),
])
def test_normalize_type(raw, expected):
    assert normalize_type(raw) == expected
