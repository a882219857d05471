"""Tests for viewport windowing and prefetch triggers."""

import math

import pytest

from journal_timeline import TimelineConfig
from journal_timeline.types import PrefetchAction, VisibleWindow
from journal_timeline.viewport import Virtualizer, compute_visible_window


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self):
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def virtualizer(clock):
    return Virtualizer(TimelineConfig(), clock=clock)


class TestComputeVisibleWindow:
    """Tests for compute_visible_window."""

    def test_buffered_window(self):
        """Five items of buffer on each side of the viewport."""
        window = compute_visible_window(1200, 600, 120, 100, buffer=5)

        assert (window.start, window.end) == (5, 20)
        assert window.size == 15

    def test_condensed_rows(self):
        """60px rows at offset 600 in a 300px viewport render 5..20."""
        window = compute_visible_window(600, 300, 60, 100, buffer=5)

        assert (window.start, window.end) == (5, 20)

    def test_clamped_to_count(self):
        """The end never exceeds the item count."""
        window = compute_visible_window(1200, 600, 120, 12, buffer=5)

        assert window.end == 12

    def test_top_of_list(self):
        """The start never goes negative."""
        assert compute_visible_window(0, 600, 120, 100).start == 0

    @pytest.mark.parametrize(
        "item_height, item_count",
        [(0, 100), (-10, 100), (120, 0), (math.nan, 100)],
    )
    def test_degenerate_geometry(self, item_height, item_count):
        """Bad heights or no items give an empty window."""
        assert compute_visible_window(0, 600, item_height, item_count) == VisibleWindow(0, 0)

    def test_non_finite_scroll(self):
        """A NaN scroll offset is treated as the top."""
        window = compute_visible_window(math.nan, 600, 120, 100)

        assert (window.start, window.end) == (0, 10)

    def test_scrolled_past_end(self):
        """Offsets beyond the content still yield a valid window."""
        window = compute_visible_window(100_000, 600, 120, 10)

        assert window.start <= window.end == 10


class TestOnScroll:
    """Tests for prefetch decisions."""

    def test_load_more_near_bottom(self, virtualizer):
        """Scrolling down in small steps triggers load-more past 80%."""
        actions = {}
        for top in range(400, 4800, 400):
            actions[top] = virtualizer.on_scroll(top, 600, 6000, has_more=True)

        assert actions[4000] is PrefetchAction.NONE
        assert actions[4400] is PrefetchAction.LOAD_MORE

    def test_no_load_more_when_exhausted(self, virtualizer):
        """Nothing forward is requested once has_more is False."""
        for top in range(400, 5600, 400):
            assert virtualizer.on_scroll(top, 600, 6000, has_more=False) is PrefetchAction.NONE

    def test_load_previous_near_top(self, virtualizer):
        """Scrolling up inside the top 20% triggers load-previous."""
        for top in (400, 800, 1200):
            virtualizer.on_scroll(top, 600, 6000, has_more=True)

        assert virtualizer.on_scroll(1000, 600, 6000, has_more=True) is PrefetchAction.LOAD_PREVIOUS

    def test_direction_matters(self, virtualizer):
        """Scrolling down near the top does not load previous."""
        assert virtualizer.on_scroll(200, 600, 6000, has_more=True) is PrefetchAction.NONE

    def test_drag_suppresses_prefetch(self, virtualizer, clock):
        """A large jump suppresses prefetch until the hold expires."""
        assert virtualizer.on_scroll(5000, 600, 6000, has_more=True) is PrefetchAction.NONE
        assert virtualizer.is_dragging

        clock.now = 0.1
        assert virtualizer.on_scroll(5100, 600, 6000, has_more=True) is PrefetchAction.NONE

        clock.now = 0.5
        assert not virtualizer.is_dragging
        assert virtualizer.on_scroll(5200, 600, 6000, has_more=True) is PrefetchAction.LOAD_MORE

    def test_reset_forgets_history(self, virtualizer, clock):
        """After reset the next sample is measured from the top."""
        virtualizer.on_scroll(5000, 600, 6000, has_more=True)
        virtualizer.reset()

        assert not virtualizer.is_dragging
        assert virtualizer.on_scroll(300, 600, 6000, has_more=True) is PrefetchAction.NONE

    def test_empty_content(self, virtualizer):
        """Zero total height never triggers a fetch backwards."""
        assert virtualizer.on_scroll(0, 600, 0, has_more=False) is PrefetchAction.NONE
