"""Tests for the insertion-ordered window cache."""

from datetime import timedelta

import pytest

from journal_timeline.cache import RangeCache
from journal_timeline.types import CacheEntry, CacheKey, TimeRange, Zoom

from .factories import BASE, make_events


def day_range(day: int) -> TimeRange:
    return TimeRange(BASE + timedelta(days=day), BASE + timedelta(days=day + 1))


def entry(n: int = 3) -> CacheEntry:
    return CacheEntry(events=tuple(make_events(n)), total=n, offset=n, has_more=False)


class TestRangeCache:
    """Tests for RangeCache."""

    def test_basic_get_put(self):
        """Stored windows come back for the same key."""
        cache = RangeCache(max_entries=5)
        stored = entry()

        cache.put(Zoom.DAY, day_range(0), stored)

        assert cache.get(Zoom.DAY, day_range(0)) == stored

    def test_cache_miss(self):
        """Unknown keys return None."""
        cache = RangeCache()

        assert cache.get(Zoom.DAY, day_range(0)) is None

    def test_keys_compare_structurally(self):
        """Distinct but equal ranges hit the same entry."""
        cache = RangeCache()
        cache.put(Zoom.WEEK, TimeRange(BASE, BASE + timedelta(days=7)), entry())

        lookup = TimeRange(BASE + timedelta(0), BASE + timedelta(days=7))
        assert cache.get(Zoom.WEEK, lookup) is not None
        assert CacheKey.for_range(Zoom.WEEK, lookup) in cache

    def test_zoom_is_part_of_key(self):
        """Same range under different zooms is cached separately."""
        cache = RangeCache()
        cache.put(Zoom.DAY, day_range(0), entry(1))
        cache.put(Zoom.MONTH, day_range(0), entry(2))

        assert len(cache.get(Zoom.DAY, day_range(0)).events) == 1
        assert len(cache.get(Zoom.MONTH, day_range(0)).events) == 2

    def test_sixth_insert_evicts_first_inserted_even_if_read(self):
        """Eviction follows insertion order, not read recency."""
        cache = RangeCache(max_entries=5)
        for day in range(5):
            cache.put(Zoom.DAY, day_range(day), entry())

        # Read the oldest entry; it must still be the one evicted
        assert cache.get(Zoom.DAY, day_range(0)) is not None

        cache.put(Zoom.DAY, day_range(5), entry())

        assert cache.size() == 5
        assert cache.get(Zoom.DAY, day_range(0)) is None
        for day in range(1, 6):
            assert cache.get(Zoom.DAY, day_range(day)) is not None

    def test_reinsert_moves_key_to_newest(self):
        """Putting an existing key again counts as a fresh insertion."""
        cache = RangeCache(max_entries=3)
        cache.put(Zoom.DAY, day_range(0), entry())
        cache.put(Zoom.DAY, day_range(1), entry())
        cache.put(Zoom.DAY, day_range(2), entry())

        cache.put(Zoom.DAY, day_range(0), entry(5))
        cache.put(Zoom.DAY, day_range(3), entry())

        assert cache.size() == 3
        assert cache.get(Zoom.DAY, day_range(1)) is None
        assert len(cache.get(Zoom.DAY, day_range(0)).events) == 5
        assert [k.start for k in cache.keys()] == [
            day_range(2).start,
            day_range(0).start,
            day_range(3).start,
        ]

    def test_discard(self):
        """Discard removes a single key and reports whether it existed."""
        cache = RangeCache()
        cache.put(Zoom.DAY, day_range(0), entry())

        assert cache.discard(Zoom.DAY, day_range(0)) is True
        assert cache.discard(Zoom.DAY, day_range(0)) is False
        assert cache.size() == 0

    def test_clear(self):
        """Clear removes all entries."""
        cache = RangeCache()
        cache.put(Zoom.DAY, day_range(0), entry())
        cache.put(Zoom.DAY, day_range(1), entry())

        cache.clear()

        assert cache.size() == 0
        assert cache.get(Zoom.DAY, day_range(0)) is None

    def test_stats(self):
        """Stats report size and utilization."""
        cache = RangeCache(max_entries=4)
        cache.put(Zoom.DAY, day_range(0), entry())

        stats = cache.stats()
        assert stats["size"] == 1
        assert stats["max_entries"] == 4
        assert stats["utilization"] == 0.25

    def test_invalid_max_entries(self):
        """Non-positive capacity raises ValueError."""
        with pytest.raises(ValueError, match="max_entries must be >= 1"):
            RangeCache(max_entries=0)
