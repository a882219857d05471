"""
Abstract event source and response validation.

An event source answers range + pagination queries and returns the raw
``{"events": [...], "meta": {...}}`` payload. The pagination engine never
trusts that payload: ``parse_page`` validates it into an ``EventPage``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from typing import Any

from ..exceptions import InvalidResponseShapeError
from ..types import (
    Event,
    EventPage,
    EventQuery,
    MonthlyAggregateQuery,
    PagedQuery,
    PageMeta,
    format_instant,
)

# Upper bound on any single paged request
MAX_PAGE_LIMIT = 500


class EventSource(ABC):
    """Abstract base for anything that can answer timeline queries."""

    @abstractmethod
    async def query(self, query: EventQuery) -> Mapping[str, Any]:
        """
        Run a query.

        Args:
            query: PagedQuery for day/week/month zoom, MonthlyAggregateQuery
                for year zoom (unbounded, timestamps only)

        Returns:
            Payload with an ``events`` list and a ``meta`` mapping
        """
        pass

    async def close(self) -> None:
        """Release resources. Sources without resources need not override."""
        return None

    async def __aenter__(self) -> EventSource:
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit."""
        await self.close()


def build_response(
    query: EventQuery,
    rows: Sequence[Mapping[str, Any]],
    total: int,
) -> dict[str, Any]:
    """Assemble a payload in the documented wire shape."""
    params = query.to_params()
    if isinstance(query, PagedQuery):
        limit = min(query.limit, MAX_PAGE_LIMIT)
        offset = query.offset
        has_more = offset + len(rows) < total
    else:
        limit = len(rows)
        offset = 0
        has_more = False

    return {
        "events": list(rows),
        "meta": {
            "total": total,
            "returned": len(rows),
            "offset": offset,
            "limit": limit,
            "hasMore": has_more,
            "start": params["start"],
            "end": params["end"],
            "zoom": params["zoom"],
        },
    }


def timestamp_row(event: Event) -> dict[str, Any]:
    """Minimal row used for aggregate queries."""
    return {"id": event.id, "createdAt": format_instant(event.created_at)}


def _meta_count(meta: Mapping[str, Any], key: str, default: int | None = None) -> int:
    """Non-negative integer ``meta[key]``; ``default`` when absent, required if None."""
    value = meta.get(key, default)
    if not isinstance(value, int) or isinstance(value, bool) or value < 0:
        raise InvalidResponseShapeError(f"meta.{key} must be a non-negative integer, got {value!r}")
    return value


def parse_page(payload: Any, query: EventQuery) -> EventPage:
    """
    Validate a raw payload into an EventPage.

    Args:
        payload: Whatever the source returned
        query: The query it answers (aggregate pages need no ``meta.total``)

    Returns:
        Validated page

    Raises:
        InvalidResponseShapeError: If the payload is malformed
    """
    if not isinstance(payload, Mapping):
        raise InvalidResponseShapeError(f"expected a mapping, got {type(payload).__name__}")

    raw_events = payload.get("events")
    if not isinstance(raw_events, list):
        raise InvalidResponseShapeError("missing events array", sorted(map(str, payload)))

    events: list[Event] = []
    for index, raw in enumerate(raw_events):
        if not isinstance(raw, Mapping):
            raise InvalidResponseShapeError(f"event {index} is not a mapping")
        try:
            events.append(Event.from_dict(dict(raw)))
        except (KeyError, TypeError, ValueError) as e:
            raise InvalidResponseShapeError(f"event {index} is invalid: {e}") from e

    raw_meta = payload.get("meta")
    if raw_meta is None:
        raw_meta = {}
    if not isinstance(raw_meta, Mapping):
        raise InvalidResponseShapeError("meta is not a mapping")

    if isinstance(query, MonthlyAggregateQuery):
        meta = PageMeta(total=len(events), returned=len(events), zoom=query.zoom.value)
    else:
        meta = PageMeta(
            total=_meta_count(raw_meta, "total"),
            returned=len(events),
            offset=_meta_count(raw_meta, "offset", query.offset),
            limit=_meta_count(raw_meta, "limit", query.limit),
            has_more=bool(raw_meta.get("hasMore", False)),
            start=raw_meta.get("start"),
            end=raw_meta.get("end"),
            zoom=raw_meta.get("zoom", query.zoom.value),
        )

    return EventPage(events=events, meta=meta)
