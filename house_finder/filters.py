"""
Filter Engine
=============
Client-side predicates over normalized listings. Pure: no I/O, no caching,
no mutation. All predicates are ANDed and every day-based check uses the
single "now" captured at the start of the call.

Known gap: price_change="increased" keeps everything. Upstream records
carry no price history, so there is nothing to compare against.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Iterable, Optional

from house_finder.metrics import days_on_market
from house_finder.models import NO_MAX_PRICE, Property, SearchQuery

logger = logging.getLogger(__name__)

NEW_LISTING_DAYS = 7

PROPERTY_TYPE_CATEGORIES: dict[str, frozenset[str]] = {
    "house": frozenset({"single_family", "townhomes", "condo", "coop", "apartment"}),
    "condo": frozenset({"condo", "townhomes", "coop"}),
    "townhouse": frozenset({"townhomes"}),
    "townhome": frozenset({"townhomes"}),
    "townhomes": frozenset({"townhomes"}),
    "single_family": frozenset({"single_family"}),
    "multi_family": frozenset({"multi_family", "apartment"}),
    "land": frozenset({"land"}),
}


def allowed_types(property_type: Optional[str]) -> Optional[frozenset[str]]:
    """Subtypes accepted for a requested type; None means no type filter."""
    if not property_type or property_type == "any":
        return None
    return PROPERTY_TYPE_CATEGORIES.get(property_type, frozenset({property_type}))


def apply_filters(
    properties: Iterable[Property],
    query: SearchQuery,
    now: Optional[datetime] = None,
) -> list[Property]:
    now = now or datetime.now(timezone.utc)
    types = allowed_types(query.property_type)
    cutoff = now - timedelta(days=query.date_range) if query.date_range is not None else None
    if query.price_change == "increased":
        logger.info("price_change=increased has no price history to check; filter skipped")

    def keep(prop: Property) -> bool:
        if query.min_price > 0 and prop.price < query.min_price:
            return False
        if 0 < query.max_price < NO_MAX_PRICE and prop.price > query.max_price:
            return False
        if query.bedrooms > 0 and prop.bedrooms < query.bedrooms:
            return False
        if query.bathrooms > 0 and prop.bathrooms < query.bathrooms:
            return False
        if types is not None and prop.property_type not in types:
            return False
        if cutoff is not None and prop.list_date < cutoff:
            return False
        if query.price_change == "reduced" and prop.price_reduced_amount <= 0:
            return False
        if query.price_change == "new" and days_on_market(prop, now) > NEW_LISTING_DAYS:
            return False
        if query.days_on_market is not None and days_on_market(prop, now) > query.days_on_market:
            return False
        return True

    return [prop for prop in properties if keep(prop)]
