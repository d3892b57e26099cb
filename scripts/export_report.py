"""
export_report.py — Write a listings report for one location to disk.

Usage:
    python scripts/export_report.py "Nashville, TN"
    python scripts/export_report.py 78701 --variant investment_analysis --format json
    python scripts/export_report.py --weekly --output-dir reports/

Environment variables:
    RAPIDAPI_KEY      (optional; without it the report uses mock listings)
    RENTCAST_API_KEY  (optional; fallback source)
    LOG_LEVEL / LOG_FORMAT
"""

import argparse
import asyncio
import sys
from pathlib import Path

from house_finder.config import Settings
from house_finder.errors import HouseFinderError
from house_finder.export import EXPORT_FORMATS
from house_finder.log_config import setup_logging
from house_finder.pipeline import generate_report, generate_weekly_reports
from house_finder.reports import REPORT_VARIANTS
from house_finder.search import ListingSearch


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Export a property market report.")
    parser.add_argument("location", nargs="?", help="ZIP, 'City, ST' or city name (default: DEFAULT_LOCATION)")
    parser.add_argument("--variant", choices=sorted(REPORT_VARIANTS), default="property_listings")
    parser.add_argument("--format", dest="fmt", choices=EXPORT_FORMATS, default="xlsx")
    parser.add_argument("--property-type", default="house")
    parser.add_argument("--limit", type=int, default=50)
    parser.add_argument("--output-dir", type=Path, default=Path("."))
    parser.add_argument("--weekly", action="store_true", help="one report per weekly location")
    return parser.parse_args(argv)


async def run(args: argparse.Namespace) -> int:
    settings = Settings.from_env()
    setup_logging(settings.log_level, settings.log_format)
    search = ListingSearch(settings)
    args.output_dir.mkdir(parents=True, exist_ok=True)

    if args.weekly:
        reports = await generate_weekly_reports(variant=args.variant, fmt=args.fmt, search=search)
    else:
        reports = [await generate_report(
            args.location or settings.default_location,
            args.variant,
            args.fmt,
            search=search,
            property_type=args.property_type,
            limit=args.limit,
        )]

    for report in reports:
        path = args.output_dir / report.filename
        path.write_bytes(report.content)
        print(f"  ✓ {report.location}: {report.property_count} properties → {path}")
    return 0 if reports else 1


def main(argv=None) -> int:
    args = parse_args(argv)
    try:
        return asyncio.run(run(args))
    except HouseFinderError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
