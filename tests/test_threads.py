"""Tests for thread summaries."""

from datetime import timedelta

from journal_timeline.pagination import aggregate_by_month
from journal_timeline.threads import UNTITLED_THREAD, summarize_threads
from journal_timeline.types import Event

from .factories import BASE, make_event


class TestSummarizeThreads:
    """Tests for summarize_threads."""

    def test_counts_and_order(self):
        """Threads are counted and ordered by last activity."""
        events = [
            make_event(1, thread="alpha"),
            make_event(2, thread="beta"),
            make_event(3, thread="alpha"),
        ]

        summaries = summarize_threads(events)

        assert [s.id for s in summaries] == ["alpha", "beta"]
        assert summaries[0].message_count == 2
        assert summaries[0].last_activity == BASE + timedelta(hours=3)

    def test_label_from_latest_event(self):
        """A renamed thread shows its newest label."""
        events = [
            Event("e1", BASE, thread_id="t", thread_label="Old name"),
            Event("e2", BASE + timedelta(hours=1), thread_id="t", thread_label="New name"),
        ]

        (summary,) = summarize_threads(events)

        assert summary.label == "New name"

    def test_missing_label(self):
        """Threads without a label get the placeholder."""
        (summary,) = summarize_threads([Event("e1", BASE, thread_id="t")])

        assert summary.label == UNTITLED_THREAD

    def test_skips_aggregates_and_unthreaded(self):
        """Monthly aggregates and thread-less events are ignored."""
        events = aggregate_by_month([make_event(1)]) + [Event("e1", BASE)]

        assert summarize_threads(events) == []
