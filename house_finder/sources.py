"""
Upstream listing sources
========================
Two HTTP sources, both async (httpx):

  PrimarySource    — RapidAPI realtor-data1, POST /property_list/
                     Structured query (ZIP or city+state), pagination,
                     status filter and sort. Results are NOT pre-filtered.
  SecondarySource  — RentCast, GET /listings/sale?city&state&limit
                     Used only as a fallback. Its query shape already
                     narrows results, so they skip the Filter Engine.

Failure classes (see errors.py):
  QuotaExceededError — quota/rate-limit text in the error, HTTP 429, or a
                       timeout. Recoverable: the search moves on.
  UpstreamError      — anything else.

Each source also says which failures it can recover from; the search
orchestrator walks the sources in order using only that contract.
"""

import logging
from typing import Any, Optional

import httpx

from house_finder.config import Settings
from house_finder.errors import QuotaExceededError, SourceError, UpstreamError
from house_finder.models import ParsedLocation, SearchQuery

logger = logging.getLogger(__name__)

UPSTREAM_PAGE_LIMIT = 50
_QUOTA_MARKERS = ("quota", "exceeded", "rate limit", "too many requests")


def is_quota_failure(*texts: Optional[str]) -> bool:
    """Substring check used to spot quota exhaustion in messages and bodies."""
    for text in texts:
        lowered = (text or "").lower()
        if any(marker in lowered for marker in _QUOTA_MARKERS):
            return True
    return False


def _error_message(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return response.text[:200]
    if isinstance(data, dict):
        return str(data.get("message") or data.get("error") or response.text[:200])
    return response.text[:200]


class HttpSource:
    """Shared request/response handling for the HTTP sources."""

    name = "http"
    prefiltered = False

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.settings = settings
        self._transport = transport

    @property
    def configured(self) -> bool:
        raise NotImplementedError

    def is_recoverable(self, error: SourceError) -> bool:
        """Whether the search may move on to the next source after this error."""
        return isinstance(error, QuotaExceededError)

    async def fetch(self, query: SearchQuery, location: ParsedLocation) -> list[dict]:
        raise NotImplementedError

    async def fetch_details(self, property_id: str) -> dict:
        raise UpstreamError(f"{self.name} source has no listing details", source=self.name)

    async def _request(self, method: str, url: str, **kwargs) -> Any:
        try:
            async with httpx.AsyncClient(
                timeout=self.settings.request_timeout,
                transport=self._transport,
            ) as client:
                response = await client.request(method, url, **kwargs)
        except httpx.TimeoutException as e:
            raise QuotaExceededError(
                f"{self.name} request timed out", source=self.name
            ) from e
        except httpx.RequestError as e:
            raise UpstreamError(f"Network error calling {self.name}: {e}", source=self.name) from e

        body = response.text[:500]
        if response.status_code >= 400:
            message = _error_message(response)
            error_cls = (
                QuotaExceededError
                if response.status_code == 429 or is_quota_failure(message, body)
                else UpstreamError
            )
            raise error_cls(message, source=self.name, status=response.status_code, body=body)

        try:
            data = response.json()
        except ValueError as e:
            raise UpstreamError(f"{self.name} response was not JSON", source=self.name, body=body) from e

        # RapidAPI reports plan limits as 200 + {"message": ...}
        if isinstance(data, dict) and "data" not in data and is_quota_failure(data.get("message")):
            raise QuotaExceededError(str(data["message"]), source=self.name, status=response.status_code, body=body)
        return data


class PrimarySource(HttpSource):
    name = "primary"
    prefiltered = False

    @property
    def configured(self) -> bool:
        return self.settings.primary_api_key is not None

    def _headers(self) -> dict[str, str]:
        return {
            "X-RapidAPI-Key": self.settings.primary_api_key or "",
            "X-RapidAPI-Host": self.settings.primary_host,
            "Content-Type": "application/json",
        }

    @staticmethod
    def build_payload(query: SearchQuery, location: ParsedLocation) -> dict:
        payload: dict[str, Any] = {
            "limit": min(query.limit, UPSTREAM_PAGE_LIMIT),
            "offset": query.offset,
            "status": ["for_sale", "ready_to_build"],
            "sort": {"direction": "desc", "field": "list_date"},
        }
        if location.postal_code:
            payload["postal_code"] = location.postal_code
        else:
            payload["city"] = location.city
            if location.state:
                payload["state_code"] = location.state
        return payload

    async def fetch(self, query: SearchQuery, location: ParsedLocation) -> list[dict]:
        data = await self._request(
            "POST",
            f"{self.settings.primary_base_url}/property_list/",
            json=self.build_payload(query, location),
            headers=self._headers(),
        )
        return extract_primary_results(data, source=self.name)

    async def fetch_details(self, property_id: str) -> dict:
        data = await self._request(
            "GET",
            f"{self.settings.primary_base_url}/property/{property_id}",
            headers=self._headers(),
        )
        if isinstance(data, dict):
            inner = data.get("data")
            if isinstance(inner, dict):
                return inner.get("home") or inner
            return data
        raise UpstreamError(f"Unexpected details payload for {property_id}", source=self.name)


def extract_primary_results(data: Any, source: str = "primary") -> list[dict]:
    """Listing records from a property_list payload; UpstreamError for any other shape."""

    def unexpected(what: str) -> UpstreamError:
        return UpstreamError(f"Unexpected {source} payload: {what}", source=source, body=str(data)[:500])

    if not isinstance(data, dict):
        raise unexpected(f"top level is {type(data).__name__}")

    inner = data.get("data")
    if inner is None:
        results = data.get("properties") or []
    elif not isinstance(inner, dict):
        raise unexpected(f"'data' is {type(inner).__name__}")
    else:
        home_search = inner.get("home_search") or {}
        if not isinstance(home_search, dict):
            raise unexpected(f"'home_search' is {type(home_search).__name__}")
        results = home_search.get("results") or home_search.get("properties") or data.get("properties") or []

    if not isinstance(results, list):
        raise unexpected(f"results are {type(results).__name__}")
    return results


class SecondarySource(HttpSource):
    name = "secondary"
    prefiltered = True

    @property
    def configured(self) -> bool:
        return self.settings.secondary_api_key is not None

    def is_recoverable(self, error: SourceError) -> bool:
        # last upstream before mock data: every failure degrades
        return True

    async def fetch(self, query: SearchQuery, location: ParsedLocation) -> list[dict]:
        params: dict[str, Any] = {"limit": min(query.limit, UPSTREAM_PAGE_LIMIT)}
        if location.postal_code:
            params["zipCode"] = location.postal_code
        else:
            params["city"] = location.city
            if location.state:
                params["state"] = location.state

        data = await self._request(
            "GET",
            f"{self.settings.secondary_base_url}/listings/sale",
            params=params,
            headers={"X-Api-Key": self.settings.secondary_api_key or "", "Accept": "application/json"},
        )
        if isinstance(data, dict):
            data = data.get("data") or data.get("listings") or []
        return data if isinstance(data, list) else []
