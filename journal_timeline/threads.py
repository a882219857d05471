"""Thread view: group loaded events by conversation."""

from __future__ import annotations

from collections.abc import Iterable

from .types import Event, ThreadSummary

UNTITLED_THREAD = "Untitled"


def summarize_threads(events: Iterable[Event]) -> list[ThreadSummary]:
    """
    Roll up events per thread.

    Monthly aggregates and events without a thread are skipped. The label
    is taken from the most recent event of each thread.

    Returns:
        Summaries ordered by last activity, most recent first
    """
    latest: dict[str, Event] = {}
    counts: dict[str, int] = {}
    for event in events:
        if event.is_aggregate or not event.thread_id:
            continue
        counts[event.thread_id] = counts.get(event.thread_id, 0) + 1
        current = latest.get(event.thread_id)
        if current is None or event.created_at >= current.created_at:
            latest[event.thread_id] = event

    summaries = [
        ThreadSummary(
            id=thread_id,
            label=event.thread_label or UNTITLED_THREAD,
            message_count=counts[thread_id],
            last_activity=event.created_at,
        )
        for thread_id, event in latest.items()
    ]
    summaries.sort(key=lambda s: (s.last_activity, s.id), reverse=True)
    return summaries
