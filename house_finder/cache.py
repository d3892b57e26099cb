"""
In-memory result cache
======================
Maps a SearchQuery fingerprint to the listings that search produced.

  - entries live for ttl_seconds (30 minutes by default)
  - an expired entry is evicted when it is read
  - once more than max_entries are held, the oldest write is evicted

Single-process, single event loop; no locking. Two concurrent searches for
the same key can both miss and both call upstream. That costs a duplicate
request, never a wrong answer.
"""

import time
from dataclasses import dataclass
from typing import Callable, Optional

from house_finder.models import Property

DEFAULT_TTL_SECONDS = 30 * 60
DEFAULT_MAX_ENTRIES = 100


@dataclass(frozen=True)
class CacheEntry:
    key: str
    payload: tuple[Property, ...]
    timestamp: float


class ResultCache:
    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        clock: Callable[[], float] = time.time,
    ):
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def get(self, key: str) -> Optional[list[Property]]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() - entry.timestamp >= self.ttl_seconds:
            del self._entries[key]
            return None
        return list(entry.payload)

    def set(self, key: str, properties: list[Property]) -> None:
        # re-inserting moves the key to the newest position
        self._entries.pop(key, None)
        self._entries[key] = CacheEntry(key=key, payload=tuple(properties), timestamp=self._clock())
        while len(self._entries) > self.max_entries:
            oldest = next(iter(self._entries))
            del self._entries[oldest]

    def clear(self) -> None:
        """Clears every entry. Used in tests."""
        self._entries.clear()
