"""
Journal Timeline

Virtualized, bidirectionally paginated browser over a journal's events.

Provides:
- Bounded window cache keyed by zoom and time range
- Forward/backward pagination with offset bookkeeping and dedup
- Client-side monthly aggregation for year zoom
- Viewport windowing with drag-aware prefetch triggers
- Scroll re-anchoring across five density levels

Usage:

    >>> from journal_timeline import TimelineController, TimeRange, Zoom
    >>> from journal_timeline.sources import SQLiteEventSource
    >>> async with await SQLiteEventSource.create() as source:
    ...     timeline = TimelineController(source)
    ...     await timeline.set_range(TimeRange.last_days(30))
    ...     window = timeline.get_visible_window(scroll_top=0, client_height=600)
    ...     await timeline.load_more()
"""

from .cache import RangeCache
from .config import TimelineConfig
from .controller import TimelineController
from .exceptions import (
    FetchFailedError,
    InvalidResponseShapeError,
    SourceNotInitializedError,
    StaleRequestError,
    TimelineError,
    ValidationError,
)
from .logging_utils import (
    StructuredJsonFormatter,
    TimelineLoggerAdapter,
    configure_structured_logging,
    get_timeline_logger,
)
from .pagination import PaginationEngine, aggregate_by_month
from .sources import EventSource, InMemoryEventSource
from .threads import summarize_threads
from .types import (
    DENSITY_HEIGHTS,
    CacheEntry,
    DensityLevel,
    Event,
    FetchDirection,
    MonthlyAggregateQuery,
    PagedQuery,
    PrefetchAction,
    Role,
    SortOrder,
    ThreadSummary,
    TimeRange,
    VisibleWindow,
    Zoom,
)
from .viewport import DensityTransitionEngine, Virtualizer, compute_visible_window

__all__ = [
    # Composition root
    "TimelineController",
    "TimelineConfig",
    # Components
    "RangeCache",
    "PaginationEngine",
    "Virtualizer",
    "DensityTransitionEngine",
    "compute_visible_window",
    "aggregate_by_month",
    "summarize_threads",
    # Sources
    "EventSource",
    "InMemoryEventSource",
    # Types
    "Event",
    "Role",
    "Zoom",
    "SortOrder",
    "DensityLevel",
    "DENSITY_HEIGHTS",
    "TimeRange",
    "CacheEntry",
    "PagedQuery",
    "MonthlyAggregateQuery",
    "FetchDirection",
    "PrefetchAction",
    "ThreadSummary",
    "VisibleWindow",
    # Logging
    "StructuredJsonFormatter",
    "TimelineLoggerAdapter",
    "configure_structured_logging",
    "get_timeline_logger",
    # Exceptions
    "TimelineError",
    "FetchFailedError",
    "InvalidResponseShapeError",
    "StaleRequestError",
    "ValidationError",
    "SourceNotInitializedError",
]

__version__ = "0.1.0"
