"""
Mock listings — offline / demo data
===================================
Used when no primary credential is configured, when a location cannot be
parsed, and as the last step of the fallback chain.

The catalog is fixed; only the city/state (and ZIP, when the query was a
ZIP) are bound to the request, so output is deterministic for a given
(location, limit). Records are built in the primary source's nested shape
and go through the same normalizer as live data.

Identifiers are derived from address + price, so repeated mock calls
return the same ids.
"""

import hashlib
from datetime import datetime, timedelta, timezone
from typing import Optional

from house_finder.location import parse_location, split_city_state
from house_finder.models import Property
from house_finder.normalizer import normalize_properties

DEFAULT_CITY = "Nashville"
DEFAULT_STATE = "TN"

# Approximate downtown coordinates; unknown cities use Nashville's.
_CITY_CENTERS: dict[str, tuple[float, float]] = {
    "nashville": (36.1627, -86.7816),
    "new york": (40.7128, -74.0060),
    "los angeles": (34.0522, -118.2437),
    "chicago": (41.8781, -87.6298),
    "houston": (29.7604, -95.3698),
    "phoenix": (33.4484, -112.0740),
    "austin": (30.2672, -97.7431),
    "denver": (39.7392, -104.9903),
    "seattle": (47.6062, -122.3321),
    "miami": (25.7617, -80.1918),
}

# (line, zip suffix, price, beds, baths, sqft, lot, type, year, days listed,
#  price reduction, new construction, description)
_CATALOG = [
    ("123 Main St", "01", 350_000, 3, "2", 1_500, 8_000, "single_family", 2010, 2, 0, False,
     "Beautiful family home in great location"),
    ("456 Oak Ave", "02", 275_000, 2, "1.5", 1_200, 6_000, "single_family", 2005, 12, 10_000, False,
     "Charming starter home with updated kitchen"),
    ("789 Pine St", "03", 450_000, 4, "3", 2_200, 10_000, "condo", 2015, 5, 0, False,
     "Luxury home with modern amenities"),
    ("14 Willow Ct", "04", 389_000, 3, "2.5", 1_850, 2_400, "townhomes", 2021, 1, 0, True,
     "End-unit townhome with rooftop terrace"),
    ("2210 Elm Blvd #4B", "05", 229_000, 1, "1", 780, 0, "apartment", 1998, 41, 5_000, False,
     "Walkable one-bedroom close to transit"),
    ("88 Harbor View Dr", "06", 615_000, 4, "3.5", 2_950, 12_500, "single_family", 2018, 27, 0, False,
     "Spacious two-story with finished basement"),
    ("301 Cedar Ln", "07", 199_500, 2, "1", 1_050, 5_200, "single_family", 1962, 96, 15_000, False,
     "Solid brick ranch, ready for updates"),
    ("67 Park Terrace #12", "08", 510_000, 2, "2", 1_300, 0, "coop", 1931, 63, 0, False,
     "Pre-war co-op with high ceilings"),
]


def _mock_id(line: str, price: int) -> str:
    digest = hashlib.sha1(f"{line}|{price}".encode("utf-8")).hexdigest()[:10]
    return f"mock-{digest}"


def mock_records(location: Optional[str], limit: int = 5, now: Optional[datetime] = None) -> list[dict]:
    """Raw mock records in the primary source shape."""
    now = now or datetime.now(timezone.utc)
    city, state = split_city_state(location, DEFAULT_CITY, DEFAULT_STATE)
    parsed = parse_location(location)
    zip_override = parsed.postal_code if parsed and parsed.postal_code else None
    base_lat, base_lng = _CITY_CENTERS.get(city.lower(), _CITY_CENTERS["nashville"])

    records = []
    for index, entry in enumerate(_CATALOG[: max(0, limit)]):
        (line, zip_suffix, price, beds, baths, sqft, lot, ptype, year,
         days_listed, reduced, new_construction, description) = entry
        list_date = (now - timedelta(days=days_listed)).replace(microsecond=0)
        prop_id = _mock_id(line, price)
        records.append({
            "property_id": prop_id,
            "listing_id": prop_id,
            "location": {
                "address": {
                    "line": line,
                    "city": city,
                    "state_code": state,
                    "postal_code": zip_override or f"372{zip_suffix}",
                    "coordinate": {
                        "lat": round(base_lat + 0.01 * (index - 3), 4),
                        "lon": round(base_lng + 0.01 * (3 - index), 4),
                    },
                }
            },
            "list_price": price,
            "description": {
                "beds": beds,
                "baths_consolidated": baths,
                "sqft": sqft,
                "lot_sqft": lot,
                "type": ptype,
                "year_built": year,
                "name": description,
            },
            "status": "for_sale",
            "list_date": list_date.isoformat(),
            "last_update_date": list_date.isoformat(),
            "price_reduced_amount": reduced,
            "flags": {"is_new_construction": new_construction},
            "photos": [f"https://via.placeholder.com/400x300?text=Property+{index + 1}"],
            "branding": [{"name": "Mock Realty", "type": "Office"}],
            "permalink": f"mock-property-{index + 1}",
        })
    return records


def mock_properties(location: Optional[str], limit: int = 5, now: Optional[datetime] = None) -> list[Property]:
    """Normalized mock listings for a location."""
    return normalize_properties(mock_records(location, limit, now), source="mock", now=now)


def find_mock_record(property_id: str, location: Optional[str] = None) -> Optional[dict]:
    for record in mock_records(location, len(_CATALOG)):
        if record["property_id"] == property_id:
            return record
    return None
