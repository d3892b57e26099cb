"""
Property Normalizer
===================
Reconciles upstream records into the canonical Property.

Supported shapes (detected per field, not per record):
  - primary source:   nested realtor-style record
                      (location.address.*, list_price, description.*,
                       advertisers / branding, flags, photos as {"href"})
  - secondary source: flat RentCast-style record
                      (addressLine1, zipCode, squareFootage, listedDate,
                       listingAgent)
  - canonical:        Property.to_dict() output
  - Property:         returned unchanged

Each canonical field lists candidate paths in priority order; the first
usable value wins and everything missing falls back to a safe default.
Malformed records are repaired, never dropped.
"""

import logging
import math
import re
import uuid
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any, Iterable, Optional

from house_finder.models import (
    PLACEHOLDER_PHOTO,
    UNKNOWN,
    UNKNOWN_AGENT,
    Agent,
    Coordinates,
    Property,
)

logger = logging.getLogger(__name__)

_NUMBER_RE = re.compile(r"(\d+(?:\.\d+)?)")
_NEGATIVE_RE = re.compile(r"^[^\d]*-")
_LISTING_BASE_URL = "https://www.realtor.com/realestateandhomes-detail/"

# ---------------------------------------------------------------------------
# Candidate paths per canonical field
# ---------------------------------------------------------------------------

_PATHS: dict[str, tuple[str, ...]] = {
    "id": ("property_id", "id", "listing_id", "listingId"),
    "listing_id": ("listing_id", "listingId"),
    "address": ("location.address.line", "address", "addressLine1", "formattedAddress"),
    "city": ("location.address.city", "city"),
    "state": ("location.address.state_code", "state_code", "state"),
    "postal_code": ("location.address.postal_code", "postal_code", "zipCode", "zip"),
    "lat": ("location.address.coordinate.lat", "coordinates.lat", "latitude", "lat"),
    "lng": (
        "location.address.coordinate.lon",
        "location.address.coordinate.lng",
        "coordinates.lng",
        "coordinates.lon",
        "longitude",
        "lng",
    ),
    "price": ("list_price", "price", "listPrice"),
    "bedrooms": ("description.beds", "bedrooms", "beds"),
    "bathrooms": ("description.baths_consolidated", "description.baths", "bathrooms", "baths"),
    "square_feet": ("description.sqft", "square_feet", "squareFootage", "squareFeet", "sqft"),
    "lot_size": ("description.lot_sqft", "lot_size", "lotSize", "lot_sqft"),
    "property_type": ("description.type", "property_type", "propertyType", "type"),
    "year_built": ("description.year_built", "year_built", "yearBuilt"),
    "status": ("status",),
    "list_date": ("list_date", "listDate", "listedDate"),
    "last_updated": ("last_updated", "last_update_date", "lastSeenDate", "lastUpdated"),
    "url": ("href", "url", "permalink"),
    "price_reduced_amount": ("price_reduced_amount", "priceReducedAmount"),
    "description": ("description.text", "description.name", "description"),
    "is_new_construction": ("flags.is_new_construction", "is_new_construction"),
    "source": ("source",),
}

_TYPE_ALIASES = {
    "single_family_home": "single_family",
    "single_family_residence": "single_family",
    "house": "single_family",
    "townhouse": "townhomes",
    "townhome": "townhomes",
    "condos": "condo",
    "condominium": "condo",
    "co_op": "coop",
    "multi_family_home": "multi_family",
    "duplex_triplex": "multi_family",
    "apartments": "apartment",
    "manufactured": "mobile",
    "mobile_home": "mobile",
    "lot": "land",
    "lots_land": "land",
}

_STATUS_ALIASES = {
    "active": "for_sale",
    "for sale": "for_sale",
    "new_construction": "ready_to_build",
}


def _lookup(record: Mapping, path: str) -> Any:
    node: Any = record
    for part in path.split("."):
        if not isinstance(node, Mapping):
            return None
        node = node.get(part)
    return node


def _first(record: Mapping, key: str) -> Any:
    """First present, scalar, non-empty value among the candidate paths."""
    for path in _PATHS[key]:
        value = _lookup(record, path)
        if value is None or isinstance(value, (Mapping, list, tuple)):
            continue
        if isinstance(value, str) and not value.strip():
            continue
        return value
    return None


# ---------------------------------------------------------------------------
# Coercion helpers — every one returns a default instead of raising
# ---------------------------------------------------------------------------

def _finite(value: float) -> float:
    # json.loads accepts NaN and Infinity
    return value if math.isfinite(value) else 0.0


def parse_bathrooms(value: Any) -> float:
    """First numeric token: "2.5" → 2.5, "2 full, 1 half" → 2.0, junk → 0."""
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        return max(0.0, _finite(float(value)))
    match = _NUMBER_RE.search(str(value))
    return float(match.group(1)) if match else 0.0


def parse_price(value: Any) -> int:
    """Whole-dollar price; strings like "$350,000" keep only their digits.

    Negative amounts ("-5000", "$-5,000") clamp to 0.
    """
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        return max(0, int(_finite(float(value))))
    text = str(value).split(".")[0]
    if _NEGATIVE_RE.match(text):
        return 0
    digits = re.sub(r"\D", "", text)
    return int(digits) if digits else 0


def _to_int(value: Any) -> int:
    if value is None or isinstance(value, bool):
        return 0
    try:
        return max(0, int(_finite(float(value))))
    except (TypeError, ValueError, OverflowError):
        match = _NUMBER_RE.search(str(value))
        return int(float(match.group(1))) if match else 0


def _to_float(value: Any) -> float:
    try:
        return _finite(float(value))
    except (TypeError, ValueError, OverflowError):
        return 0.0


def parse_datetime(value: Any, default: datetime) -> datetime:
    """ISO strings, epoch seconds/milliseconds and datetimes; always timezone-aware."""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        seconds = value / 1000 if value > 1e12 else value
        try:
            parsed = datetime.fromtimestamp(seconds, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return default
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return default
    else:
        return default
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def normalize_type(value: Any) -> str:
    if not value:
        return "single_family"
    tag = re.sub(r"[\s\-/]+", "_", str(value).strip().lower())
    return _TYPE_ALIASES.get(tag, tag)


def _normalize_status(value: Any) -> str:
    if not value:
        return "for_sale"
    status = str(value).strip().lower()
    status = _STATUS_ALIASES.get(status, status)
    return status.replace(" ", "_")


def _listing_url(value: Any) -> str:
    if not value:
        return "#"
    url = str(value).strip()
    if url.startswith(("http://", "https://")) or url == "#":
        return url
    return _LISTING_BASE_URL + url.lstrip("/")


def _photos(record: Mapping) -> tuple[str, ...]:
    raw = record.get("photos") or record.get("images") or []
    if not raw and isinstance(record.get("primary_photo"), Mapping):
        raw = [record["primary_photo"]]
    urls = []
    if isinstance(raw, (list, tuple)):
        for item in raw:
            href = item.get("href") if isinstance(item, Mapping) else item
            if isinstance(href, str) and href.strip():
                urls.append(href.strip())
    return tuple(urls) or (PLACEHOLDER_PHOTO,)


def _text(value: Any, default: str) -> str:
    if value is None:
        return default
    text = str(value).strip()
    return text or default


def _agent(record: Mapping) -> Agent:
    agent = record.get("agent") or record.get("listingAgent")
    if isinstance(agent, Mapping):
        return Agent(
            name=_text(agent.get("name"), UNKNOWN_AGENT),
            phone=_text(agent.get("phone"), UNKNOWN),
            email=_text(agent.get("email"), UNKNOWN),
        )

    advertisers = record.get("advertisers")
    if isinstance(advertisers, list) and advertisers and isinstance(advertisers[0], Mapping):
        first = advertisers[0]
        phones = first.get("phones") or []
        phone = phones[0].get("number") if phones and isinstance(phones[0], Mapping) else None
        return Agent(
            name=_text(first.get("name"), UNKNOWN_AGENT),
            phone=_text(phone, UNKNOWN),
            email=_text(first.get("email"), UNKNOWN),
        )

    branding = record.get("branding")
    if isinstance(branding, list) and branding and isinstance(branding[0], Mapping):
        return Agent(name=_text(branding[0].get("name"), UNKNOWN_AGENT))

    return Agent()


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def normalize_property(
    record: Any,
    source: str = "primary",
    now: Optional[datetime] = None,
) -> Property:
    """Map one upstream record of unknown shape onto the canonical Property.

    A missing identifier gets a random id: fine for display, never use it
    as a cache or de-duplication key.
    """
    if isinstance(record, Property):
        return record
    if not isinstance(record, Mapping):
        record = {}
    now = now or datetime.now(timezone.utc)

    missing = [key for key in ("id", "price", "address", "list_date") if _first(record, key) is None]
    if missing:
        logger.debug("Repairing record with missing fields %s", missing)

    prop_id = _text(_first(record, "id"), "")
    if not prop_id:
        prop_id = f"generated-{uuid.uuid4().hex[:12]}"

    list_date = parse_datetime(_first(record, "list_date"), now)

    return Property(
        id=prop_id,
        listing_id=_text(_first(record, "listing_id"), prop_id),
        address=_text(_first(record, "address"), "Address not available"),
        city=_text(_first(record, "city"), "Unknown"),
        state=_text(_first(record, "state"), "Unknown"),
        postal_code=_text(_first(record, "postal_code"), "00000"),
        coordinates=Coordinates(
            lat=_to_float(_first(record, "lat")),
            lng=_to_float(_first(record, "lng")),
        ),
        price=parse_price(_first(record, "price")),
        bedrooms=_to_int(_first(record, "bedrooms")),
        bathrooms=parse_bathrooms(_first(record, "bathrooms")),
        square_feet=_to_int(_first(record, "square_feet")),
        lot_size=_to_int(_first(record, "lot_size")),
        property_type=normalize_type(_first(record, "property_type")),
        year_built=_to_int(_first(record, "year_built")),
        status=_normalize_status(_first(record, "status")),
        list_date=list_date,
        last_updated=parse_datetime(_first(record, "last_updated"), now),
        photos=_photos(record),
        agent=_agent(record),
        url=_listing_url(_first(record, "url")),
        price_reduced_amount=parse_price(_first(record, "price_reduced_amount")),
        description=_text(_first(record, "description"), ""),
        is_new_construction=bool(_first(record, "is_new_construction")),
        source=_text(_first(record, "source"), source),
    )


def normalize_properties(
    records: Iterable[Any],
    source: str = "primary",
    now: Optional[datetime] = None,
) -> list[Property]:
    """Normalize a batch with one shared "now"; non-record entries are skipped."""
    now = now or datetime.now(timezone.utc)
    normalized = []
    for record in records or []:
        if not isinstance(record, (Mapping, Property)):
            logger.warning("Skipping non-record entry of type %s", type(record).__name__)
            continue
        normalized.append(normalize_property(record, source=source, now=now))
    return normalized
