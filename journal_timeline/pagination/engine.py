"""
Bidirectional pagination over an event source.

The engine owns the in-memory window for one (range, zoom) at a time:
- Reset fetches replace the window and rewind the offset cursor
- ``load_more`` appends the next page at the cursor
- ``load_previous`` re-fetches the page before the cursor and prepends
  whatever is not already in memory
- Year zoom bypasses pagination and aggregates timestamps per month

Concurrency: one forward and one backward fetch may be in flight at a
time (two flags, requests arriving while busy are dropped). Every fetch
carries the generation token current when it was issued; resets bump the
token so superseded responses are discarded on arrival.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable

from ..cache import RangeCache
from ..config import TimelineConfig
from ..exceptions import (
    FetchFailedError,
    InvalidResponseShapeError,
    StaleRequestError,
    TimelineError,
)
from ..sources.base import EventSource, parse_page
from ..types import (
    CacheEntry,
    Event,
    EventPage,
    EventQuery,
    FetchDirection,
    MonthlyAggregateQuery,
    PagedQuery,
    SortOrder,
    TimeRange,
    Zoom,
)
from .aggregation import aggregate_by_month

logger = logging.getLogger(__name__)

ErrorListener = Callable[[TimelineError, FetchDirection], None]


def _created(event: Event):
    return event.created_at


def _unique(events: Iterable[Event], seen: set[str]) -> list[Event]:
    """Events whose id is not in ``seen``, in order; ``seen`` is updated."""
    fresh: list[Event] = []
    for event in events:
        if event.id in seen:
            continue
        seen.add(event.id)
        fresh.append(event)
    return fresh


class PaginationEngine:
    """Translates range/zoom/direction into fetches and maintains the window."""

    def __init__(
        self,
        source: EventSource,
        cache: RangeCache | None = None,
        config: TimelineConfig | None = None,
        error_listener: ErrorListener | None = None,
        log: logging.Logger | logging.LoggerAdapter | None = None,
    ):
        """Initialize the engine.

        Args:
            source: Event source answering queries
            cache: Window cache (a private one is created if omitted)
            config: Policy constants
            error_listener: Called with (error, direction) on every surfaced failure
            log: Logger or adapter to log through
        """
        self.source = source
        self.config = config or TimelineConfig()
        self.cache = cache if cache is not None else RangeCache(self.config.cache_max_size)
        self.error_listener = error_listener
        self.log = log or logger

        # Window state
        self.events: list[Event] = []
        self.offset_cursor = 0
        self.total = 0
        self.has_more = False
        self.range: TimeRange | None = None
        self.zoom: Zoom | None = None

        # Errors surfaced to the UI
        self.error: TimelineError | None = None
        self.transient_error: TimelineError | None = None

        # In-flight bookkeeping
        self._loading_forward = False
        self._loading_backward = False
        self._resets_in_flight = 0
        self._generation = 0

    # =========================================================================
    # State
    # =========================================================================

    @property
    def page_size(self) -> int:
        return min(self.config.page_size, self.config.max_page_limit)

    @property
    def generation(self) -> int:
        """Token of the current (range, zoom); bumped by every reset."""
        return self._generation

    @property
    def is_loading(self) -> bool:
        """True while a reset fetch is outstanding."""
        return self._resets_in_flight > 0

    @property
    def is_loading_more(self) -> bool:
        return self._loading_forward

    @property
    def is_loading_previous(self) -> bool:
        return self._loading_backward

    def build_query(self, time_range: TimeRange, zoom: Zoom, offset: int = 0) -> EventQuery:
        """Map a zoom onto its query mode."""
        if zoom is Zoom.YEAR:
            return MonthlyAggregateQuery(range=time_range)
        return PagedQuery(
            range=time_range,
            zoom=zoom,
            limit=self.page_size,
            offset=offset,
            order=SortOrder.ASCENDING,
        )

    def reset(self) -> None:
        """Drop the window and invalidate every outstanding fetch."""
        self._generation += 1
        self.events = []
        self.offset_cursor = 0
        self.total = 0
        self.has_more = False
        self.range = None
        self.zoom = None
        self.error = None
        self.transient_error = None

    # =========================================================================
    # Fetching
    # =========================================================================

    async def _fetch(self, query: EventQuery, direction: FetchDirection, token: int) -> EventPage:
        self.log.debug(
            f"Fetching {direction.value} page",
            extra={"query": query.to_params(), "token": token},
        )
        try:
            payload = await self.source.query(query)
        except TimelineError:
            raise
        except Exception as e:
            raise FetchFailedError(direction.value, e) from e

        if token != self._generation:
            raise StaleRequestError(token, self._generation)

        try:
            page = parse_page(payload, query)
        except (TypeError, ValueError) as e:
            raise InvalidResponseShapeError(str(e)) from e
        if isinstance(query, PagedQuery) and query.offset + len(page.events) > page.meta.total:
            raise InvalidResponseShapeError(
                f"page at offset {query.offset} with {len(page.events)} events "
                f"overruns total {page.meta.total}"
            )
        return page

    def _report(self, error: TimelineError, direction: FetchDirection) -> None:
        if self.error_listener is not None:
            self.error_listener(error, direction)

    def _snapshot(self) -> None:
        if self.range is None or self.zoom is None:
            return
        self.cache.put(
            self.zoom,
            self.range,
            CacheEntry(
                events=tuple(self.events),
                total=self.total,
                offset=self.offset_cursor,
                has_more=self.has_more,
            ),
        )

    def _restore(self, entry: CacheEntry) -> None:
        self.events = list(entry.events)
        self.total = entry.total
        self.offset_cursor = entry.offset
        self.has_more = entry.has_more

    async def load_events(self, time_range: TimeRange, zoom: Zoom, reset: bool = True) -> None:
        """
        Load the first window for a range and zoom.

        With ``reset`` the cached window for the key is discarded and the
        source is queried. Without it, a cached window is restored with no
        network call.

        Errors clear the window and are stored on ``error``.
        """
        self._generation += 1
        token = self._generation
        self.range = time_range
        self.zoom = zoom
        self.events = []
        self.offset_cursor = 0
        self.total = 0
        self.has_more = False
        self.error = None
        self.transient_error = None

        if reset:
            self.cache.discard(zoom, time_range)
        else:
            cached = self.cache.get(zoom, time_range)
            if cached is not None:
                self.log.debug(f"Restored {len(cached.events)} events from cache")
                self._restore(cached)
                return

        query = self.build_query(time_range, zoom)
        self._resets_in_flight += 1
        try:
            page = await self._fetch(query, FetchDirection.RESET, token)
        except StaleRequestError as e:
            self.log.debug(f"Discarded stale reset response: {e.message}")
            return
        except TimelineError as e:
            if token != self._generation:
                self.log.debug(f"Discarded stale reset failure: {e.message}")
                return
            self.events = []
            self.offset_cursor = 0
            self.total = 0
            self.has_more = False
            self.error = e
            self.log.error(f"Timeline load failed: {e.message}", extra={"details": e.details})
            self._report(e, FetchDirection.RESET)
            return
        finally:
            self._resets_in_flight -= 1

        if isinstance(query, MonthlyAggregateQuery):
            self.events = aggregate_by_month(page.events, limit=self.config.aggregate_month_limit)
            self.total = len(self.events)
            self.offset_cursor = self.total
            self.has_more = False
        else:
            ordered = sorted(page.events, key=_created)
            self.events = _unique(ordered, set())[-self.config.max_window_size :]
            self.total = page.meta.total
            self.offset_cursor = len(page.events)
            self.has_more = self.offset_cursor < self.total

        self.log.debug(
            f"Loaded {len(self.events)} of {self.total} events",
            extra={"zoom": zoom.value, "has_more": self.has_more},
        )
        self._snapshot()

    async def load_more(self) -> None:
        """Append the next page at the offset cursor.

        No-op when nothing remains, a forward fetch is in flight, or a reset
        is pending. Failures leave the window untouched.
        """
        if (
            not self.has_more
            or self._loading_forward
            or self._resets_in_flight
            or self.range is None
            or self.zoom is None
        ):
            return

        token = self._generation
        query = self.build_query(self.range, self.zoom, self.offset_cursor)
        self._loading_forward = True
        try:
            page = await self._fetch(query, FetchDirection.FORWARD, token)
        except StaleRequestError as e:
            self.log.debug(f"Discarded stale forward page: {e.message}")
            return
        except TimelineError as e:
            if token != self._generation:
                return
            self.transient_error = e
            self.log.warning(f"Loading more events failed: {e.message}")
            self._report(e, FetchDirection.FORWARD)
            return
        finally:
            self._loading_forward = False

        received = len(page.events)
        fresh = _unique(sorted(page.events, key=_created), {e.id for e in self.events})
        merged = self.events + fresh
        merged.sort(key=_created)
        if len(merged) > self.config.max_window_size:
            # Keep the just-fetched tail, drop the oldest
            merged = merged[-self.config.max_window_size :]

        self.events = merged
        self.total = page.meta.total
        self.offset_cursor = min(self.total, self.offset_cursor + received)
        # An empty page means the source has nothing further, whatever total says
        self.has_more = received > 0 and self.offset_cursor < self.total
        self.transient_error = None
        self._snapshot()

    async def load_previous(self) -> None:
        """Prepend the page before the offset cursor.

        No-op at the start of the range, in year zoom, while a backward fetch
        is in flight, or while a reset is pending. Failures leave the window
        untouched.
        """
        if (
            self.offset_cursor <= 0
            or self._loading_backward
            or self._resets_in_flight
            or self.range is None
            or self.zoom is None
            or self.zoom is Zoom.YEAR
        ):
            return

        token = self._generation
        previous_offset = max(0, self.offset_cursor - self.page_size)
        query = self.build_query(self.range, self.zoom, previous_offset)
        self._loading_backward = True
        try:
            page = await self._fetch(query, FetchDirection.BACKWARD, token)
        except StaleRequestError as e:
            self.log.debug(f"Discarded stale backward page: {e.message}")
            return
        except TimelineError as e:
            if token != self._generation:
                return
            self.transient_error = e
            self.log.warning(f"Loading previous events failed: {e.message}")
            self._report(e, FetchDirection.BACKWARD)
            return
        finally:
            self._loading_backward = False

        fresh = _unique(sorted(page.events, key=_created), {e.id for e in self.events})
        merged = fresh + self.events
        merged.sort(key=_created)
        if len(merged) > self.config.max_window_size:
            # Keep the just-fetched head, drop the newest
            merged = merged[: self.config.max_window_size]

        self.events = merged
        self.total = page.meta.total
        self.offset_cursor = min(previous_offset, self.total)
        self.has_more = self.offset_cursor < self.total
        self.transient_error = None
        self._snapshot()
