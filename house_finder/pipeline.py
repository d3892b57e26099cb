"""
Report pipeline — search → build_report → export
================================================
The entry point for scheduled callers ("produce a report for location X").
Scheduling itself lives outside this package.
"""

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from house_finder.errors import UpstreamError
from house_finder.export import export_report
from house_finder.models import SearchQuery
from house_finder.reports import build_report
from house_finder.search import ListingSearch

logger = logging.getLogger(__name__)

WEEKLY_LOCATIONS = [
    "New York, NY",
    "Los Angeles, CA",
    "Chicago, IL",
    "Houston, TX",
    "Phoenix, AZ",
]


@dataclass(frozen=True)
class GeneratedReport:
    location: str
    variant: str
    fmt: str
    filename: str
    content: bytes
    property_count: int


def report_filename(location: str, variant: str, fmt: str, now: datetime) -> str:
    slug = re.sub(r"[^a-z0-9]+", "_", location.lower()).strip("_") or "report"
    return f"{variant}_{slug}_{now.strftime('%Y-%m-%d')}.{fmt}"


async def generate_report(
    location: str,
    variant: str = "property_listings",
    fmt: str = "xlsx",
    search: Optional[ListingSearch] = None,
    now: Optional[datetime] = None,
    **query_overrides,
) -> GeneratedReport:
    """
    Runs one report end to end.

    query_overrides are SearchQuery fields (property_type, min_price, limit,
    ...). UpstreamError from the search propagates; ReportError is raised for
    an unknown variant or format.
    """
    search = search or ListingSearch()
    now = now or datetime.now(timezone.utc)
    query = SearchQuery(location=location, **query_overrides)

    properties = await search.search(query)
    sheets = build_report(variant, properties, location, now=now)
    content = export_report(sheets, fmt)
    logger.info("Generated %s report for %s (%d properties)", variant, location, len(properties))
    return GeneratedReport(
        location=location,
        variant=variant,
        fmt=fmt,
        filename=report_filename(location, variant, fmt, now),
        content=content,
        property_count=len(properties),
    )


async def generate_weekly_reports(
    locations: Optional[list[str]] = None,
    variant: str = "property_listings",
    fmt: str = "xlsx",
    search: Optional[ListingSearch] = None,
) -> list[GeneratedReport]:
    """One report per location, sequentially. A location whose search fails is logged and skipped."""
    search = search or ListingSearch()
    reports = []
    for location in locations or WEEKLY_LOCATIONS:
        try:
            reports.append(await generate_report(location, variant, fmt, search=search))
        except UpstreamError as e:
            logger.error("Skipping weekly report for %s: %s", location, e)
    return reports
