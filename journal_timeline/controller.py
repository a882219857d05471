"""
Timeline controller.

Composition root consumed by the rendering layer. It owns one cache, one
pagination engine, one virtualizer and one density engine, so independent
timelines never share eviction or scroll state.

Data concerns (range, zoom) trigger reset fetches; resolution is purely
visual and only moves the scroll offset.

Example:
    >>> controller = TimelineController(source)
    >>> await controller.set_range(TimeRange.last_days(30))
    >>> window = controller.get_visible_window(scroll_top=0, client_height=600)
    >>> task = controller.on_scroll(4200, 600)  # may schedule a prefetch
"""

from __future__ import annotations

import asyncio
import time
import uuid
from collections.abc import Callable
from datetime import datetime

from .cache import RangeCache
from .config import TimelineConfig
from .exceptions import TimelineError
from .logging_utils import TimelineLoggerAdapter, get_timeline_logger
from .pagination import ErrorListener, PaginationEngine
from .sources.base import EventSource
from .threads import summarize_threads
from .types import (
    DensityLevel,
    Event,
    PrefetchAction,
    ThreadSummary,
    TimeRange,
    VisibleWindow,
    Zoom,
)
from .viewport import DensityTransitionEngine, Virtualizer


class TimelineController:
    """Public operations of the temporal event browser."""

    def __init__(
        self,
        source: EventSource,
        config: TimelineConfig | None = None,
        cache: RangeCache | None = None,
        *,
        time_range: TimeRange | None = None,
        zoom: Zoom = Zoom.MONTH,
        resolution: int = DensityLevel.DETAILED,
        error_listener: ErrorListener | None = None,
        clock: Callable[[], float] = time.monotonic,
        timeline_id: str | None = None,
    ):
        """Initialize the controller.

        Args:
            source: Event source to page through
            config: Policy constants (defaults if omitted)
            cache: Window cache; a private one is created if omitted
            time_range: Initial range (trailing 30 days if omitted)
            zoom: Initial zoom
            resolution: Initial density level
            error_listener: Notified of every surfaced fetch failure
            clock: Monotonic clock used for drag detection
            timeline_id: Identifier stamped on log records
        """
        self.config = config or TimelineConfig()
        self.cache = cache if cache is not None else RangeCache(self.config.cache_max_size)
        self.timeline_id = timeline_id or uuid.uuid4().hex[:12]
        self._range = time_range or TimeRange.last_days(30)
        self._zoom = zoom
        self._resolution = DensityLevel.clamp(resolution)
        self._selected: dict[str, None] = {}
        self._tasks: set[asyncio.Task[None]] = set()

        self.log = TimelineLoggerAdapter(
            get_timeline_logger("controller"),
            {"timeline_id": self.timeline_id, "zoom": zoom.value},
        )
        self.engine = PaginationEngine(
            source,
            cache=self.cache,
            config=self.config,
            error_listener=error_listener,
            log=self.log,
        )
        self.virtualizer = Virtualizer(self.config, clock=clock)
        self.density = DensityTransitionEngine(self.config)

    # =========================================================================
    # State
    # =========================================================================

    @property
    def range(self) -> TimeRange:
        return self._range

    @property
    def zoom(self) -> Zoom:
        return self._zoom

    @property
    def resolution(self) -> DensityLevel:
        return self._resolution

    @property
    def item_height(self) -> int:
        return self.density.item_height(self._resolution)

    @property
    def events(self) -> tuple[Event, ...]:
        return tuple(self.engine.events)

    @property
    def total(self) -> int:
        return self.engine.total

    @property
    def offset_cursor(self) -> int:
        return self.engine.offset_cursor

    @property
    def has_more(self) -> bool:
        return self.engine.has_more

    @property
    def is_loading(self) -> bool:
        return self.engine.is_loading

    @property
    def error(self) -> TimelineError | None:
        """Failure of the last reset fetch, shown in place of the timeline."""
        return self.engine.error

    @property
    def transient_error(self) -> TimelineError | None:
        """Failure of the last continuation fetch, shown as a toast."""
        return self.engine.transient_error

    @property
    def total_height(self) -> float:
        return len(self.engine.events) * self.item_height

    # =========================================================================
    # Data: range and zoom
    # =========================================================================

    async def set_range(self, time_range: TimeRange) -> None:
        """Browse a new range. Always refetches."""
        self._range = time_range
        await self._reload(reset=True)

    async def set_zoom(self, zoom: Zoom) -> None:
        """Switch query granularity. Always refetches."""
        self._zoom = zoom
        await self._reload(reset=True)

    async def load_events(
        self,
        time_range: TimeRange | None = None,
        zoom: Zoom | None = None,
        reset: bool = False,
    ) -> None:
        """Navigate to a range/zoom, reusing a cached window unless ``reset``."""
        if time_range is not None:
            self._range = time_range
        if zoom is not None:
            self._zoom = zoom
        await self._reload(reset=reset)

    async def refresh(self) -> None:
        """Refetch the current range and zoom."""
        await self._reload(reset=True)

    async def _reload(self, reset: bool) -> None:
        self.virtualizer.reset()
        self._selected.clear()
        self.log.extra["zoom"] = self._zoom.value
        self.log.info(
            f"Loading {self._range.start.isoformat()}..{self._range.end.isoformat()}",
            extra={"reset": reset},
        )
        await self.engine.load_events(self._range, self._zoom, reset=reset)

    async def load_more(self) -> None:
        await self.engine.load_more()

    async def load_previous(self) -> None:
        await self.engine.load_previous()

    # =========================================================================
    # Rendering: window, scroll, resolution
    # =========================================================================

    def get_visible_window(self, scroll_top: float, client_height: float) -> VisibleWindow:
        """Slice of loaded events to materialize for this viewport."""
        events = self.engine.events
        window = self.virtualizer.visible_window(
            scroll_top, client_height, self.item_height, len(events)
        )
        return VisibleWindow(window.start, window.end, tuple(events[window.start : window.end]))

    def on_scroll(self, scroll_top: float, client_height: float) -> asyncio.Task[None] | None:
        """
        Feed a scroll sample; schedule a prefetch if one is due.

        Must be called from within the running event loop.

        Returns:
            The scheduled fetch task, or None when nothing was triggered
        """
        action = self.virtualizer.on_scroll(
            scroll_top, client_height, self.total_height, self.engine.has_more
        )
        if action is PrefetchAction.LOAD_MORE:
            coro = self.engine.load_more()
        elif action is PrefetchAction.LOAD_PREVIOUS:
            coro = self.engine.load_previous()
        else:
            return None

        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def set_resolution(self, level: int) -> None:
        """Change density without fetching or moving the scroll offset."""
        self._resolution = DensityLevel.clamp(level)

    def on_resolution_change(
        self,
        old_level: int,
        new_level: int,
        scroll_top: float,
        client_height: float,
    ) -> float:
        """Apply a density change and return the re-anchored scroll offset."""
        new_scroll_top = self.density.transition(old_level, new_level, scroll_top, client_height)
        self._resolution = DensityLevel.clamp(new_level)
        return new_scroll_top

    def density_in(self, scroll_top: float, client_height: float) -> float:
        """One level more detailed (taller items)."""
        return self.on_resolution_change(
            self._resolution, self._resolution - 1, scroll_top, client_height
        )

    def density_out(self, scroll_top: float, client_height: float) -> float:
        """One level more compact (shorter items)."""
        return self.on_resolution_change(
            self._resolution, self._resolution + 1, scroll_top, client_height
        )

    # =========================================================================
    # Derived views and selection
    # =========================================================================

    def threads(self) -> list[ThreadSummary]:
        return summarize_threads(self.engine.events)

    def bounds(self) -> tuple[datetime, datetime]:
        """Earliest and latest loaded instants, or the range when empty."""
        events = self.engine.events
        if not events:
            return self._range.start, self._range.end
        instants = [e.created_at for e in events]
        return min(instants), max(instants)

    @property
    def selected_ids(self) -> list[str]:
        return list(self._selected)

    def toggle_selection(self, event_id: str) -> bool:
        """Flip selection of an event. Returns True if now selected."""
        if event_id in self._selected:
            del self._selected[event_id]
            return False
        self._selected[event_id] = None
        return True

    def clear_selection(self) -> None:
        self._selected.clear()
