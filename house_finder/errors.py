"""Exception hierarchy for house_finder.

Only UpstreamError is meant to reach callers of a search; the others are
absorbed inside the pipeline or signal programming/configuration mistakes.
"""


class HouseFinderError(Exception):
    """Base exception for all house_finder errors."""


class ConfigurationError(HouseFinderError):
    """Raised when configuration is invalid."""


class LocationParseError(HouseFinderError):
    """Raised when a free-text location cannot be turned into a query."""


class SourceError(HouseFinderError):
    """Base for failures reported by an upstream listing source."""

    def __init__(self, message: str, *, source: str = "", status: int | None = None, body: str = ""):
        self.message = message
        self.source = source
        self.status = status
        self.body = body
        super().__init__(message)


class QuotaExceededError(SourceError):
    """Raised when a source is out of quota, rate limited, or timed out."""


class UpstreamError(SourceError):
    """Raised for upstream failures that have no safe fallback."""


class ReportError(HouseFinderError):
    """Raised for an unknown report variant or export format."""
