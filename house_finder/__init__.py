from house_finder.cache import ResultCache
from house_finder.config import Settings
from house_finder.errors import (
    ConfigurationError,
    HouseFinderError,
    LocationParseError,
    QuotaExceededError,
    ReportError,
    UpstreamError,
)
from house_finder.export import export_report
from house_finder.filters import apply_filters
from house_finder.location import parse_location
from house_finder.models import ParsedLocation, Property, SearchQuery
from house_finder.normalizer import normalize_properties, normalize_property
from house_finder.pipeline import generate_report, generate_weekly_reports
from house_finder.recorder import InMemoryRecorder
from house_finder.reports import REPORT_VARIANTS, ReportSheet, build_report
from house_finder.search import ListingSearch

__version__ = "0.1.0"

OPERATION_REGISTRY = {
    "search": {
        "name": "search",
        "description": (
            "Finds listings for a location. Tries the primary source, falls back to the "
            "secondary source on quota or timeout, then to mock data. Results are cached "
            "for 30 minutes per query."
        ),
        "parameters": {
            "location": "ZIP, 'City, ST' or a bare city name",
            "property_type": "house | condo | townhouse | single_family | multi_family | land | any",
            "min_price": "minimum price in USD (default 0)",
            "max_price": "maximum price in USD (10,000,000 means no limit)",
            "bedrooms": "minimum bedrooms",
            "bathrooms": "minimum bathrooms",
            "limit": "max results (1-100, default 50)",
            "date_range": "optional: listed within the last N days",
            "price_change": "optional: reduced | increased | new",
            "days_on_market": "optional: at most N days listed",
        },
        "returns": "list of Property records",
    },
    "property_details": {
        "name": "property_details",
        "description": "Full record for one listing id from the primary source, or the mock catalog.",
        "parameters": {
            "property_id": "listing id returned by search",
        },
        "returns": "one Property",
    },
    "build_report": {
        "name": "build_report",
        "description": (
            "Builds the ordered sheets of a report variant from a property list: "
            "statistics, segmentation, investment scores and narrative text."
        ),
        "parameters": {
            "variant": "property_listings | market_intelligence | investment_analysis | listings_export",
            "properties": "list of Property",
            "location": "label used in titles and narrative",
        },
        "returns": "list of ReportSheet(name, rows)",
    },
    "export_report": {
        "name": "export_report",
        "description": "Serializes report sheets to bytes.",
        "parameters": {
            "sheets": "list of ReportSheet",
            "fmt": "xlsx | json",
        },
        "returns": "bytes",
    },
    "generate_report": {
        "name": "generate_report",
        "description": "search → build_report → export_report for one location.",
        "parameters": {
            "location": "ZIP, 'City, ST' or a bare city name",
            "variant": "report variant (default property_listings)",
            "fmt": "xlsx | json",
        },
        "returns": "GeneratedReport with filename and content bytes",
    },
}

__all__ = [
    "ConfigurationError",
    "HouseFinderError",
    "InMemoryRecorder",
    "ListingSearch",
    "LocationParseError",
    "OPERATION_REGISTRY",
    "ParsedLocation",
    "Property",
    "QuotaExceededError",
    "REPORT_VARIANTS",
    "ReportError",
    "ReportSheet",
    "ResultCache",
    "SearchQuery",
    "Settings",
    "UpstreamError",
    "apply_filters",
    "build_report",
    "export_report",
    "generate_report",
    "generate_weekly_reports",
    "normalize_properties",
    "normalize_property",
    "parse_location",
]
