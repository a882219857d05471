"""Client-side monthly aggregation for year zoom."""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable

from ..types import Event, Role, parse_instant

AGGREGATE_LABEL = "Monthly aggregate"


def month_key(event: Event) -> str:
    """``YYYY-MM`` prefix of the event's UTC creation instant."""
    return event.created_at.strftime("%Y-%m")


def aggregate_by_month(
    events: Iterable[Event],
    limit: int = 12,
    user_id: str = "",
) -> list[Event]:
    """
    Collapse events into one synthetic entry per month.

    Args:
        events: Raw events (only ``created_at`` is used)
        limit: Maximum number of months to keep
        user_id: Owner stamped on the synthetic entries

    Returns:
        Synthetic events with ids ``month_<YYYY-MM>``, newest month first
    """
    counts = Counter(month_key(e) for e in events)
    months = sorted(counts, reverse=True)[:limit]
    return [
        Event(
            id=f"month_{month}",
            created_at=parse_instant(f"{month}-01T00:00:00Z"),
            role=Role.SYSTEM,
            content_preview=f"{counts[month]} events",
            thread_id="",
            thread_label=AGGREGATE_LABEL,
            user_id=user_id,
            count=counts[month],
        )
        for month in months
    ]
