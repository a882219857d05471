"""
Bounded cache of loaded windows keyed by zoom and time range.

Eviction is by insertion order: reading an entry does not refresh it.
"""

from __future__ import annotations

import logging
from collections import OrderedDict
from typing import Any

from ..types import CacheEntry, CacheKey, TimeRange, Zoom

logger = logging.getLogger(__name__)


class RangeCache:
    """
    Insertion-ordered cache of timeline windows.

    Features:
    - Oldest-inserted entry evicted when full, regardless of reads
    - Structural keys (zoom + range bounds compared by value)
    - Owned per controller, never shared module-wide
    """

    def __init__(self, max_entries: int = 5):
        """
        Initialize range cache.

        Args:
            max_entries: Maximum number of windows to keep
        """
        if max_entries < 1:
            raise ValueError(f"max_entries must be >= 1, got {max_entries}")

        self.max_entries = max_entries
        self._entries: OrderedDict[CacheKey, CacheEntry] = OrderedDict()

    def get(self, zoom: Zoom, time_range: TimeRange) -> CacheEntry | None:
        """
        Get the cached window for a key.

        Args:
            zoom: Query granularity
            time_range: Range the window was fetched for

        Returns:
            Cached entry or None if absent
        """
        return self._entries.get(CacheKey.for_range(zoom, time_range))

    def put(self, zoom: Zoom, time_range: TimeRange, entry: CacheEntry) -> None:
        """
        Store a window.

        Re-putting an existing key counts as a fresh insertion. If the
        cache is over capacity afterwards, the oldest insertion is evicted.

        Args:
            zoom: Query granularity
            time_range: Range the window was fetched for
            entry: Window snapshot
        """
        key = CacheKey.for_range(zoom, time_range)

        if key in self._entries:
            del self._entries[key]

        self._entries[key] = entry

        if len(self._entries) > self.max_entries:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug(
                f"Evicted cached window {evicted.zoom.value} "
                f"{evicted.start.isoformat()}..{evicted.end.isoformat()}"
            )

    def discard(self, zoom: Zoom, time_range: TimeRange) -> bool:
        """Remove a key if present. Returns True if something was removed."""
        return self._entries.pop(CacheKey.for_range(zoom, time_range), None) is not None

    def keys(self) -> list[CacheKey]:
        """Keys from oldest to newest insertion."""
        return list(self._entries)

    def clear(self) -> None:
        """Clear all cached windows."""
        self._entries.clear()

    def size(self) -> int:
        """Get current number of cached windows."""
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def stats(self) -> dict[str, Any]:
        """
        Get cache statistics.

        Returns:
            Dict with cache metrics
        """
        return {
            "size": len(self._entries),
            "max_entries": self.max_entries,
            "utilization": len(self._entries) / self.max_entries,
        }
