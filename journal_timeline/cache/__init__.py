"""Window cache for the timeline browser."""

from .range_cache import RangeCache

__all__ = ["RangeCache"]
