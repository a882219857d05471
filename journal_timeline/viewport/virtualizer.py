"""
Windowed virtualization and scroll-driven prefetch decisions.

Only items in ``[start, end)`` are materialized, so rendering cost does not
grow with the number of loaded events. Every function here is total: bad
geometry yields an empty window or no prefetch, never an exception.
"""

from __future__ import annotations

import math
import time
from collections.abc import Callable

from ..config import TimelineConfig
from ..types import PrefetchAction, VisibleWindow
from .geometry import finite


def compute_visible_window(
    scroll_top: float,
    client_height: float,
    item_height: float,
    item_count: int,
    buffer: int = 5,
) -> VisibleWindow:
    """
    Index range to render for a viewport.

    Args:
        scroll_top: Pixel offset of the viewport's top edge
        client_height: Viewport height in pixels
        item_height: Height of one item in pixels
        item_count: Number of items loaded
        buffer: Extra items rendered on each side

    Returns:
        Window with ``start = max(0, floor(top / h) - buffer)`` and
        ``end = min(count, ceil((top + height) / h) + buffer)``
    """
    item_height = finite(item_height)
    item_count = max(0, int(finite(item_count)))
    if item_height <= 0 or item_count == 0:
        return VisibleWindow(0, 0)

    scroll_top = max(0.0, finite(scroll_top))
    client_height = max(0.0, finite(client_height))
    buffer = max(0, int(buffer))

    start = max(0, math.floor(scroll_top / item_height) - buffer)
    end = min(item_count, math.ceil((scroll_top + client_height) / item_height) + buffer)
    return VisibleWindow(min(start, end), end)


class Virtualizer:
    """
    Viewport windowing plus prefetch triggers.

    Keeps the last scroll sample to infer direction, and treats any jump
    larger than ``drag_threshold_px`` as a scrollbar drag that suppresses
    prefetch for ``drag_hold_seconds``.
    """

    def __init__(
        self,
        config: TimelineConfig | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.config = config or TimelineConfig()
        self._clock = clock
        self._last_scroll_top = 0.0
        self._drag_until = float("-inf")

    @property
    def is_dragging(self) -> bool:
        return self._clock() < self._drag_until

    def reset(self) -> None:
        """Forget scroll history (new range or zoom)."""
        self._last_scroll_top = 0.0
        self._drag_until = float("-inf")

    def visible_window(
        self,
        scroll_top: float,
        client_height: float,
        item_height: float,
        item_count: int,
    ) -> VisibleWindow:
        return compute_visible_window(
            scroll_top, client_height, item_height, item_count, self.config.buffer_items
        )

    def on_scroll(
        self,
        scroll_top: float,
        client_height: float,
        total_height: float,
        has_more: bool,
    ) -> PrefetchAction:
        """
        Record a scroll sample and decide whether to prefetch.

        Args:
            scroll_top: Current top offset
            client_height: Viewport height
            total_height: Full scrollable height of the loaded window
            has_more: Whether the forward direction has anything left

        Returns:
            LOAD_PREVIOUS near the top while scrolling up, LOAD_MORE near the
            bottom while scrolling down, NONE otherwise or while dragging
        """
        now = self._clock()
        scroll_top = max(0.0, finite(scroll_top))
        client_height = max(0.0, finite(client_height))
        total_height = max(0.0, finite(total_height))

        delta = scroll_top - self._last_scroll_top
        self._last_scroll_top = scroll_top

        if abs(delta) > self.config.drag_threshold_px:
            self._drag_until = now + self.config.drag_hold_seconds
        if now < self._drag_until:
            return PrefetchAction.NONE

        if delta < 0 and scroll_top < total_height * self.config.prefetch_previous_ratio:
            return PrefetchAction.LOAD_PREVIOUS

        scroll_bottom = scroll_top + client_height
        if (
            delta > 0
            and has_more
            and scroll_bottom > total_height * self.config.prefetch_more_ratio
        ):
            return PrefetchAction.LOAD_MORE

        return PrefetchAction.NONE
