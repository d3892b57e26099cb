"""
Data model — canonical property record and search request
==========================================================
Property is the one shape every upstream record is reconciled into
(see normalizer.py). It is frozen: nothing downstream of the normalizer
mutates a listing.

SearchQuery is the validated request. Its fingerprint() covers every field
and is the cache key for a search.
"""

import json
from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, field_validator

NO_MAX_PRICE = 10_000_000
MAX_RESULT_LIMIT = 100
PLACEHOLDER_PHOTO = "https://via.placeholder.com/400x300?text=Property"
UNKNOWN_AGENT = "Unknown Agent"
UNKNOWN = "unknown"


@dataclass(frozen=True)
class Coordinates:
    lat: float = 0.0
    lng: float = 0.0


@dataclass(frozen=True)
class Agent:
    name: str = UNKNOWN_AGENT
    phone: str = UNKNOWN
    email: str = UNKNOWN


@dataclass(frozen=True)
class Property:
    """Canonical listing. Prices are whole dollars, areas are square feet."""

    id: str
    address: str
    city: str
    state: str
    postal_code: str
    list_date: datetime
    last_updated: datetime
    coordinates: Coordinates = field(default_factory=Coordinates)
    price: int = 0
    bedrooms: int = 0
    bathrooms: float = 0.0
    square_feet: int = 0
    lot_size: int = 0
    property_type: str = "single_family"
    year_built: int = 0
    status: str = "for_sale"
    photos: tuple[str, ...] = ()
    agent: Agent = field(default_factory=Agent)
    url: str = "#"
    price_reduced_amount: int = 0
    listing_id: str = ""
    description: str = ""
    is_new_construction: bool = False
    source: str = "primary"

    @property
    def full_address(self) -> str:
        parts = [p for p in (self.address, self.city, self.state, self.postal_code) if p]
        return ", ".join(parts) or "Address not available"

    def to_dict(self) -> dict:
        """Canonical record shape; normalize_property(p.to_dict()) == p."""
        return {
            "id": self.id,
            "listing_id": self.listing_id,
            "address": self.address,
            "city": self.city,
            "state": self.state,
            "postal_code": self.postal_code,
            "coordinates": {"lat": self.coordinates.lat, "lng": self.coordinates.lng},
            "price": self.price,
            "bedrooms": self.bedrooms,
            "bathrooms": self.bathrooms,
            "square_feet": self.square_feet,
            "lot_size": self.lot_size,
            "property_type": self.property_type,
            "year_built": self.year_built,
            "status": self.status,
            "list_date": self.list_date.isoformat(),
            "photos": list(self.photos),
            "agent": {"name": self.agent.name, "phone": self.agent.phone, "email": self.agent.email},
            "url": self.url,
            "price_reduced_amount": self.price_reduced_amount,
            "last_updated": self.last_updated.isoformat(),
            "description": self.description,
            "is_new_construction": self.is_new_construction,
            "source": self.source,
        }


@dataclass(frozen=True)
class ParsedLocation:
    """Structured location: a postal code, or a city with an optional state."""

    postal_code: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None

    def label(self) -> str:
        if self.postal_code:
            return self.postal_code
        if self.city and self.state:
            return f"{self.city}, {self.state}"
        return self.city or ""


def _disabled(value):
    """'any', '' and None all mean the refinement is off."""
    if value is None:
        return None
    if isinstance(value, str) and value.strip().lower() in ("", "any"):
        return None
    return value


class SearchQuery(BaseModel):
    """A listing search request. Values arrive from forms, so strings are coerced."""

    model_config = ConfigDict(frozen=True)

    location: str = ""
    property_type: str = "house"
    min_price: int = 0
    max_price: int = NO_MAX_PRICE
    bedrooms: int = 0
    bathrooms: float = 0
    limit: int = 50
    offset: int = 0
    date_range: Optional[int] = None
    price_change: Optional[Literal["reduced", "increased", "new"]] = None
    days_on_market: Optional[int] = None

    @field_validator("location", mode="before")
    @classmethod
    def _strip_location(cls, v):
        return (v or "").strip() if isinstance(v, str) or v is None else str(v)

    @field_validator("property_type", mode="before")
    @classmethod
    def _default_type(cls, v):
        if v is None or (isinstance(v, str) and not v.strip()):
            return "house"
        return str(v).strip().lower()

    @field_validator("min_price", "bedrooms", "offset", mode="before")
    @classmethod
    def _non_negative(cls, v):
        return max(0, int(float(v or 0)))

    @field_validator("bathrooms", mode="before")
    @classmethod
    def _non_negative_float(cls, v):
        return max(0.0, float(v or 0))

    @field_validator("max_price", mode="before")
    @classmethod
    def _max_price(cls, v):
        if v is None or v == "":
            return NO_MAX_PRICE
        return int(float(v))

    @field_validator("limit", mode="before")
    @classmethod
    def _bounded_limit(cls, v):
        if v is None or v == "":
            return 50
        return min(max(int(float(v)), 1), MAX_RESULT_LIMIT)

    @field_validator("date_range", "days_on_market", mode="before")
    @classmethod
    def _optional_days(cls, v):
        v = _disabled(v)
        return None if v is None else max(0, int(v))

    @field_validator("price_change", mode="before")
    @classmethod
    def _optional_change(cls, v):
        v = _disabled(v)
        return None if v is None else str(v).strip().lower()

    def fingerprint(self) -> str:
        """Deterministic cache key derived from every field."""
        return json.dumps(self.model_dump(), sort_keys=True, separators=(",", ":"))
