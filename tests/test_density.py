"""Tests for scroll re-anchoring across density levels."""

import math

import pytest

from journal_timeline import TimelineConfig
from journal_timeline.types import DensityLevel
from journal_timeline.viewport import DensityTransitionEngine, anchor_index, remap_scroll_top


@pytest.fixture
def density():
    return DensityTransitionEngine(TimelineConfig())


class TestRemapScrollTop:
    """Tests for the anchoring formula."""

    def test_compacting(self):
        """Item 15 stays centered when going from 120px to 30px."""
        assert anchor_index(1500, 600, 120) == 15
        assert remap_scroll_top(1500, 600, 120, 30) == 150

    def test_never_negative(self):
        """Offsets near the top clamp to zero."""
        assert remap_scroll_top(0, 600, 120, 30) == 0

    def test_degenerate_heights(self):
        """Non-positive heights leave the offset alone."""
        assert remap_scroll_top(700, 600, 0, 30) == 700
        assert remap_scroll_top(700, 600, 120, 0) == 700

    @pytest.mark.parametrize("bad", [math.nan, math.inf, -math.inf])
    def test_non_finite_scroll(self, bad):
        """A non-finite offset is treated as the top."""
        assert anchor_index(bad, 600, 120) == 2
        assert remap_scroll_top(bad, 600, 120, 30) == 0

    def test_non_finite_heights(self):
        """Non-finite heights count as degenerate."""
        assert remap_scroll_top(700, 600, math.nan, 30) == 700
        assert remap_scroll_top(700, 600, 120, math.inf) == 700
        assert anchor_index(700, 600, math.inf) == 0


class TestDensityTransitionEngine:
    """Tests for level-based transitions."""

    def test_detailed_to_dense(self, density):
        """Level 0 to 2 at offset 1200 with a 600px viewport lands at 60."""
        assert density.transition(0, 2, 1200, 600) == 60

    def test_dense_to_detailed(self, density):
        """Expanding from 30px to 120px keeps the centered item."""
        # center = floor((60 + 300) / 30) = 12; 12 * 120 - 300 = 1140
        assert density.transition(2, 0, 60, 600) == 1140

    def test_same_level_noop(self, density):
        """Equal levels return the offset unchanged."""
        assert density.transition(DensityLevel.BARS, DensityLevel.BARS, 777, 600) == 777

    def test_levels_clamped(self, density):
        """Out-of-range levels behave like the nearest valid one."""
        assert density.transition(-1, 9, 1200, 600) == density.transition(0, 4, 1200, 600)

    def test_non_finite_offset(self, density):
        """Transitions from a non-finite offset land at the top."""
        assert density.transition(0, 2, math.inf, 600) == 0
        assert density.transition(2, 0, math.nan, math.nan) == 0

    def test_item_height(self, density):
        """Heights come from the configured table."""
        assert [density.item_height(level) for level in range(5)] == [120, 60, 30, 15, 8]

    def test_custom_table(self):
        """A custom density table drives the remap."""
        engine = DensityTransitionEngine(TimelineConfig(density_heights=(100, 50, 25, 12, 6)))

        assert engine.transition(0, 1, 1000, 400) == 400
