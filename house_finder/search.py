"""
Fetch-and-Fallback Orchestrator
===============================
ListingSearch.search(query) applies one retrieval policy:

  1. cache hit (query fingerprint, entry younger than the TTL) → returned as is
  2. no primary credential                                     → mock data
  3. location cannot be parsed                                 → mock data
  4. walk the configured sources in order:
       success         → normalize → Filter Engine (unless the source
                         pre-filters) → cache → return
       recoverable     → next source
       anything else   → UpstreamError with the original message
  5. every source exhausted → mock data, cached under the same key

Quota exhaustion, timeouts and unparseable locations never reach the
caller; they leave a log trail and a degraded (mock) result. UpstreamError
is the only exception that crosses this boundary.
"""

import logging
import time
from typing import Optional, Sequence

import httpx

from house_finder.cache import ResultCache
from house_finder.config import Settings
from house_finder.errors import LocationParseError, SourceError, UpstreamError
from house_finder.filters import apply_filters
from house_finder.location import require_location
from house_finder.mock_data import find_mock_record, mock_properties
from house_finder.models import Property, SearchQuery
from house_finder.normalizer import normalize_property, normalize_properties
from house_finder.recorder import InvocationRecorder, NullRecorder
from house_finder.sources import HttpSource, PrimarySource, SecondarySource

logger = logging.getLogger(__name__)


def default_sources(
    settings: Settings,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> list[HttpSource]:
    """Primary first, then the secondary fallback."""
    return [
        PrimarySource(settings, transport=transport),
        SecondarySource(settings, transport=transport),
    ]


class ListingSearch:
    """Owns the result cache and the ordered source chain."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        cache: Optional[ResultCache] = None,
        sources: Optional[Sequence[HttpSource]] = None,
        recorder: Optional[InvocationRecorder] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings or Settings.from_env()
        if cache is None:
            cache = ResultCache(
                ttl_seconds=self.settings.cache_ttl_seconds,
                max_entries=self.settings.cache_max_entries,
            )
        self.cache = cache
        self.sources = list(sources) if sources is not None else default_sources(self.settings, transport)
        self.recorder = recorder if recorder is not None else NullRecorder()

    def _record(self, function: str, query: str, start: float, success: bool, source: str) -> None:
        self.recorder.record(function, query, (time.time() - start) * 1000, success, source)

    def _mock(self, query: SearchQuery) -> list[Property]:
        location = query.location or self.settings.default_location
        return mock_properties(location, query.limit)

    async def search(self, query: SearchQuery) -> list[Property]:
        start = time.time()
        key = query.fingerprint()

        cached = self.cache.get(key)
        if cached is not None:
            logger.debug("Cache hit for %s", query.location)
            self._record("search", query.location, start, True, "cache")
            return cached

        if self.settings.mock_mode:
            logger.info("No primary credential configured; serving mock listings for %r", query.location)
            self._record("search", query.location, start, True, "mock")
            return self._mock(query)

        try:
            location = require_location(query.location)
        except LocationParseError as e:
            logger.warning("%s; serving mock listings", e)
            self._record("search", query.location, start, True, "mock")
            return self._mock(query)

        for index, source in enumerate(s for s in self.sources if s.configured):
            try:
                records = await source.fetch(query, location)
            except SourceError as e:
                if not source.is_recoverable(e):
                    logger.error("%s source failed for %s: %s", source.name, location.label(), e)
                    self._record("search", query.location, start, False, source.name)
                    if isinstance(e, UpstreamError):
                        raise
                    raise UpstreamError(e.message, source=source.name, status=e.status, body=e.body) from e
                logger.warning("%s source unavailable for %s (%s); trying next source", source.name, location.label(), e)
                continue

            # a fallback source coming back empty is treated like a failure
            if index > 0 and not records:
                logger.warning("%s source returned no listings for %s", source.name, location.label())
                continue

            properties = normalize_properties(records, source=source.name)
            if not source.prefiltered:
                properties = apply_filters(properties, query)
            logger.info("%s source returned %d listings for %s", source.name, len(properties), location.label())
            self.cache.set(key, properties)
            self._record("search", query.location, start, True, source.name)
            return properties

        logger.warning("All listing sources exhausted for %s; serving mock listings", location.label())
        properties = self._mock(query)
        self.cache.set(key, properties)
        self._record("search", query.location, start, True, "mock")
        return properties

    async def property_details(self, property_id: str) -> Property:
        """Full record for one listing; raises UpstreamError when it cannot be fetched."""
        start = time.time()
        property_id = property_id.strip()

        if self.settings.mock_mode:
            record = find_mock_record(property_id, self.settings.default_location)
            if record is None:
                self._record("property_details", property_id, start, False, "mock")
                raise UpstreamError(f"Listing '{property_id}' not found", source="mock", status=404)
            self._record("property_details", property_id, start, True, "mock")
            return normalize_property(record, source="mock")

        primary = self.sources[0]
        try:
            record = await primary.fetch_details(property_id)
        except SourceError as e:
            self._record("property_details", property_id, start, False, primary.name)
            if isinstance(e, UpstreamError):
                raise
            raise UpstreamError(e.message, source=primary.name, status=e.status, body=e.body) from e

        self._record("property_details", property_id, start, True, primary.name)
        return normalize_property(record, source=primary.name)
