"""Scroll re-anchoring when the per-item height changes.

Non-finite pixel inputs are read as 0, so nothing here raises.
"""

from __future__ import annotations

import math

from ..config import TimelineConfig
from ..types import DensityLevel
from .geometry import finite


def anchor_index(scroll_top: float, client_height: float, item_height: float) -> int:
    """Index of the item under the viewport's vertical center."""
    item_height = finite(item_height)
    if item_height <= 0:
        return 0
    center = finite(scroll_top) + finite(client_height) / 2
    return max(0, math.floor(center / item_height))


def remap_scroll_top(
    scroll_top: float,
    client_height: float,
    old_item_height: float,
    new_item_height: float,
) -> float:
    """
    Scroll offset that keeps the centered item centered after a height change.

    ``center = floor((top + h/2) / old)``; ``new_top = max(0, center * new - h/2)``.
    Degenerate heights leave the offset unchanged.
    """
    scroll_top = finite(scroll_top)
    client_height = finite(client_height)
    old_item_height = finite(old_item_height)
    new_item_height = finite(new_item_height)
    if old_item_height <= 0 or new_item_height <= 0:
        return scroll_top
    center = anchor_index(scroll_top, client_height, old_item_height)
    return max(0.0, center * new_item_height - client_height / 2)


class DensityTransitionEngine:
    """Maps resolution changes onto scroll offsets using the density table."""

    def __init__(self, config: TimelineConfig | None = None):
        self.config = config or TimelineConfig()

    def item_height(self, level: int) -> int:
        return self.config.item_height(DensityLevel.clamp(level))

    def transition(
        self,
        old_level: int,
        new_level: int,
        scroll_top: float,
        client_height: float,
    ) -> float:
        """New scroll offset for a change from ``old_level`` to ``new_level``.

        Levels outside 0..4 are clamped; equal levels are a no-op.
        """
        old = DensityLevel.clamp(old_level)
        new = DensityLevel.clamp(new_level)
        if old == new:
            return scroll_top
        return remap_scroll_top(
            scroll_top, client_height, self.item_height(old), self.item_height(new)
        )
