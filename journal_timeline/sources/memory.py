"""
In-memory event source.

Holds a sorted list of events and answers queries exactly as a remote
source would, including the 500-item request cap. Used for tests, demos,
and as the serving layer behind the JSON Lines source.
"""

from __future__ import annotations

import bisect
from collections.abc import Iterable, Mapping
from typing import Any

from ..types import Event, EventQuery, MonthlyAggregateQuery, SortOrder
from .base import MAX_PAGE_LIMIT, EventSource, build_response, timestamp_row


def _sort_key(event: Event) -> tuple:
    return (event.created_at, event.id)


class InMemoryEventSource(EventSource):
    """Event source backed by a sorted in-process list."""

    def __init__(self, events: Iterable[Event] = ()):
        self._events: list[Event] = sorted(events, key=_sort_key)
        self._ids = {e.id for e in self._events}

    def add_events(self, events: Iterable[Event]) -> int:
        """Insert events, skipping ids already present. Returns count added."""
        added = 0
        for event in events:
            if event.id in self._ids:
                continue
            bisect.insort(self._events, event, key=_sort_key)
            self._ids.add(event.id)
            added += 1
        return added

    def __len__(self) -> int:
        return len(self._events)

    async def query(self, query: EventQuery) -> Mapping[str, Any]:
        lo = bisect.bisect_left(self._events, query.range.start, key=lambda e: e.created_at)
        hi = bisect.bisect_left(self._events, query.range.end, key=lambda e: e.created_at)
        matched = self._events[lo:hi]

        if isinstance(query, MonthlyAggregateQuery):
            return build_response(query, [timestamp_row(e) for e in matched], len(matched))

        ordered = matched if query.order is SortOrder.ASCENDING else matched[::-1]
        limit = min(query.limit, MAX_PAGE_LIMIT)
        page = ordered[query.offset : query.offset + limit]
        return build_response(query, [e.to_dict() for e in page], len(matched))
