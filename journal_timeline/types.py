"""
Core types for the timeline browser.

Events are immutable once fetched. Everything the browser keeps in memory
(windows, cache entries, thread summaries) is built from these records.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from enum import Enum, IntEnum
from typing import Any

from .exceptions import ValidationError


class Role(Enum):
    """Author of a journal event."""

    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


class Zoom(Enum):
    """Temporal granularity governing the query shape."""

    YEAR = "year"
    MONTH = "month"
    WEEK = "week"
    DAY = "day"


class SortOrder(Enum):
    """Ordering requested from the event source."""

    ASCENDING = "asc"
    DESCENDING = "desc"


class FetchDirection(Enum):
    """Which pagination path issued a fetch."""

    RESET = "reset"
    FORWARD = "forward"
    BACKWARD = "backward"


class PrefetchAction(Enum):
    """Prefetch decision taken for a scroll sample."""

    NONE = "none"
    LOAD_MORE = "load_more"
    LOAD_PREVIOUS = "load_previous"


# Pixel height of one item per density level (0 = tallest).
DENSITY_HEIGHTS: tuple[int, ...] = (120, 60, 30, 15, 8)

_DENSITY_LABELS = ("Detailed", "Condensed", "Dense", "Bars", "Ultra-dense")


class DensityLevel(IntEnum):
    """Discrete rendering compactness, purely visual."""

    DETAILED = 0
    CONDENSED = 1
    DENSE = 2
    BARS = 3
    ULTRA_DENSE = 4

    @property
    def label(self) -> str:
        return _DENSITY_LABELS[self.value]

    @property
    def item_height(self) -> int:
        """Default pixel height for this level."""
        return DENSITY_HEIGHTS[self.value]

    @classmethod
    def clamp(cls, level: int) -> DensityLevel:
        """Coerce any integer into the valid level range."""
        return cls(max(cls.DETAILED.value, min(cls.ULTRA_DENSE.value, int(level))))


def parse_instant(value: datetime | str) -> datetime:
    """Parse an ISO-8601 string or datetime into an aware UTC datetime.

    Naive values are assumed to be UTC.
    """
    if isinstance(value, datetime):
        instant = value
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        instant = datetime.fromisoformat(text)
    else:
        raise TypeError(f"Cannot parse instant from {type(value).__name__}")

    if instant.tzinfo is None:
        return instant.replace(tzinfo=UTC)
    return instant.astimezone(UTC)


def format_instant(instant: datetime) -> str:
    """Render an instant as ISO-8601 with a trailing Z."""
    return parse_instant(instant).isoformat().replace("+00:00", "Z")


@dataclass(frozen=True)
class Event:
    """A single timestamped journal event.

    Attributes:
        id: Opaque unique identifier
        created_at: Creation instant (not guaranteed unique)
        role: Who wrote the event
        content_preview: Bounded display-only excerpt
        thread_id: Conversation group the event belongs to
        thread_label: Denormalized thread display name
        user_id: Owner
        user_name: Optional owner display name
        count: Number of events summarized, set only on monthly aggregates
    """

    id: str
    created_at: datetime
    role: Role = Role.USER
    content_preview: str = ""
    thread_id: str = ""
    thread_label: str = ""
    user_id: str = ""
    user_name: str | None = None
    count: int | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "created_at", parse_instant(self.created_at))

    @property
    def is_aggregate(self) -> bool:
        """True for synthetic month entries produced in year zoom."""
        return self.count is not None

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the camelCase wire format."""
        data: dict[str, Any] = {
            "id": self.id,
            "createdAt": format_instant(self.created_at),
            "role": self.role.value,
            "contentPreview": self.content_preview,
            "threadId": self.thread_id,
            "threadLabel": self.thread_label,
            "userId": self.user_id,
        }
        if self.user_name is not None:
            data["userName"] = self.user_name
        if self.count is not None:
            data["count"] = self.count
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Event:
        """Deserialize from the camelCase wire format.

        Only ``id`` and ``createdAt`` are required; the rest default.
        """
        role = data.get("role") or Role.USER.value
        return cls(
            id=str(data["id"]),
            created_at=parse_instant(data["createdAt"]),
            role=Role(role),
            content_preview=data.get("contentPreview") or "",
            thread_id=data.get("threadId") or "",
            thread_label=data.get("threadLabel") or "",
            user_id=data.get("userId") or "",
            user_name=data.get("userName"),
            count=data.get("count"),
        )


@dataclass(frozen=True)
class TimeRange:
    """Half-open interval ``[start, end)`` of instants."""

    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        # Normalize to aware UTC so keys compare structurally
        object.__setattr__(self, "start", parse_instant(self.start))
        object.__setattr__(self, "end", parse_instant(self.end))
        if self.end < self.start:
            raise ValidationError(
                "range", "end must not precede start", f"{self.start} > {self.end}"
            )

    def contains(self, instant: datetime) -> bool:
        return self.start <= parse_instant(instant) < self.end

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    @classmethod
    def last_days(cls, days: int = 30, now: datetime | None = None) -> TimeRange:
        """Range covering the trailing ``days`` days up to ``now``."""
        end = parse_instant(now) if now is not None else datetime.now(UTC)
        return cls(start=end - timedelta(days=days), end=end)


@dataclass(frozen=True)
class CacheKey:
    """Structural cache key: zoom plus both range bounds."""

    zoom: Zoom
    start: datetime
    end: datetime

    @classmethod
    def for_range(cls, zoom: Zoom, time_range: TimeRange) -> CacheKey:
        return cls(zoom=zoom, start=time_range.start, end=time_range.end)


@dataclass(frozen=True)
class CacheEntry:
    """Snapshot of a loaded window at the time of fetch."""

    events: tuple[Event, ...]
    total: int
    offset: int
    has_more: bool


@dataclass(frozen=True)
class PagedQuery:
    """Offset/limit query used for day, week and month zoom."""

    range: TimeRange
    zoom: Zoom
    limit: int
    offset: int = 0
    order: SortOrder = SortOrder.ASCENDING

    def to_params(self) -> dict[str, Any]:
        return {
            "start": format_instant(self.range.start),
            "end": format_instant(self.range.end),
            "zoom": self.zoom.value,
            "limit": self.limit,
            "offset": self.offset,
            "order": self.order.value,
        }


@dataclass(frozen=True)
class MonthlyAggregateQuery:
    """Unbounded timestamp query aggregated client-side for year zoom."""

    range: TimeRange

    @property
    def zoom(self) -> Zoom:
        return Zoom.YEAR

    def to_params(self) -> dict[str, Any]:
        return {
            "start": format_instant(self.range.start),
            "end": format_instant(self.range.end),
            "zoom": Zoom.YEAR.value,
        }


EventQuery = PagedQuery | MonthlyAggregateQuery


@dataclass
class PageMeta:
    """Pagination metadata returned alongside a page."""

    total: int
    returned: int
    offset: int = 0
    limit: int = 0
    has_more: bool = False
    start: str | None = None
    end: str | None = None
    zoom: str | None = None


@dataclass
class EventPage:
    """A validated page of events."""

    events: list[Event]
    meta: PageMeta


@dataclass(frozen=True)
class ThreadSummary:
    """Per-thread rollup of the events currently in memory."""

    id: str
    label: str
    message_count: int
    last_activity: datetime


@dataclass(frozen=True)
class VisibleWindow:
    """Inclusive-exclusive index range ``[start, end)`` to materialize."""

    start: int
    end: int
    events: tuple[Event, ...] = field(default=())

    @property
    def size(self) -> int:
        return max(0, self.end - self.start)
