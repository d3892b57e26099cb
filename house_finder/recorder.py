"""
Invocation recording  (in-memory, no sensitive data stored)
===========================================================
ListingSearch reports every call here instead of keeping process-wide
counters. The default recorder drops everything; InMemoryRecorder keeps a
bounded list that a caller can inspect.
"""

from datetime import datetime, timezone
from typing import Protocol

_MAX_LOG_ENTRIES = 500
_MAX_QUERY_CHARS = 80


class InvocationRecorder(Protocol):
    def record(
        self,
        function: str,
        query: str,
        duration_ms: float,
        success: bool,
        source: str,
    ) -> None: ...


class NullRecorder:
    """Records nothing."""

    def record(self, function: str, query: str, duration_ms: float, success: bool, source: str) -> None:
        return None


class InMemoryRecorder:
    def __init__(self, max_entries: int = _MAX_LOG_ENTRIES):
        self.max_entries = max_entries
        self._entries: list[dict] = []

    def record(
        self,
        function: str,
        query: str,
        duration_ms: float,
        success: bool,
        source: str,
    ) -> None:
        """
        Records a single call. query is truncated to 80 chars, so a full
        request body never ends up in the log.
        """
        self._entries.append({
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "function": function,
            "query": query[:_MAX_QUERY_CHARS],
            "duration_ms": round(duration_ms, 1),
            "success": success,
            "source": source,
        })
        if len(self._entries) > self.max_entries:
            del self._entries[: len(self._entries) - self.max_entries]

    def entries(self) -> list[dict]:
        """Returns a copy of the log."""
        return list(self._entries)

    def clear(self) -> None:
        self._entries.clear()
