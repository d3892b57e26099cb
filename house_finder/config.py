"""
Configuration — environment-driven settings
============================================
Values come from the process environment, with a project-root .env file
loaded first (python-dotenv). Nothing here talks to the network.

Credential rules:
  - RAPIDAPI_KEY unset (or the literal "mock") → mock-data mode, always.
  - RENTCAST_API_KEY unset → no secondary source in the fallback chain.
"""

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from house_finder.errors import ConfigurationError

_PROJECT_ROOT = Path(__file__).resolve().parents[1]
_ENV_FILE = _PROJECT_ROOT / ".env"
if _ENV_FILE.exists():
    load_dotenv(dotenv_path=str(_ENV_FILE))

PRIMARY_HOST = "realtor-data1.p.rapidapi.com"
SECONDARY_BASE_URL = "https://api.rentcast.io/v1"
PLACEHOLDER_KEY = "mock"


def _credential(name: str) -> str | None:
    value = os.getenv(name, "").strip()
    if not value or value.lower() == PLACEHOLDER_KEY:
        return None
    return value


def _number(name: str, default: str, cast=float):
    raw = os.getenv(name, default).strip()
    try:
        return cast(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be numeric, got {raw!r}") from e


@dataclass(frozen=True)
class Settings:
    """Runtime settings for search, caching and logging."""

    primary_api_key: str | None = None
    primary_host: str = PRIMARY_HOST
    secondary_api_key: str | None = None
    secondary_base_url: str = SECONDARY_BASE_URL
    request_timeout: float = 20.0
    cache_ttl_seconds: float = 30 * 60
    cache_max_entries: int = 100
    default_location: str = "New York, NY"
    log_level: str = "INFO"
    log_format: str = "standard"

    @property
    def mock_mode(self) -> bool:
        """True when no primary credential is configured."""
        return self.primary_api_key is None

    @property
    def primary_base_url(self) -> str:
        return f"https://{self.primary_host}"

    @classmethod
    def from_env(cls) -> "Settings":
        """Create settings from environment variables."""
        max_entries = _number("CACHE_MAX_ENTRIES", "100", int)
        if max_entries < 1:
            raise ConfigurationError("CACHE_MAX_ENTRIES must be at least 1")

        return cls(
            primary_api_key=_credential("RAPIDAPI_KEY"),
            primary_host=os.getenv("RAPIDAPI_HOST", PRIMARY_HOST).strip() or PRIMARY_HOST,
            secondary_api_key=_credential("RENTCAST_API_KEY"),
            secondary_base_url=os.getenv("RENTCAST_BASE_URL", SECONDARY_BASE_URL).rstrip("/"),
            request_timeout=_number("REQUEST_TIMEOUT_SECONDS", "20"),
            cache_ttl_seconds=_number("CACHE_TTL_SECONDS", "1800"),
            cache_max_entries=max_entries,
            default_location=os.getenv("DEFAULT_LOCATION", "New York, NY"),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_format=os.getenv("LOG_FORMAT", "standard"),
        )

    def describe(self) -> dict:
        """Safe summary for logs: credentials are reported as present/missing only."""
        return {
            "primary": "present" if self.primary_api_key else "missing",
            "primary_host": self.primary_host,
            "secondary": "present" if self.secondary_api_key else "missing",
            "request_timeout": self.request_timeout,
            "cache_ttl_seconds": self.cache_ttl_seconds,
            "cache_max_entries": self.cache_max_entries,
        }
