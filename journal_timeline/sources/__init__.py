"""
Event sources answering the timeline query contract.

Provides:
- Abstract EventSource interface and payload validation
- In-memory source (tests, demos)
- SQLite source (local journals)
- JSON Lines source (journal exports)
"""

from .base import MAX_PAGE_LIMIT, EventSource, build_response, parse_page
from .jsonl import JsonlEventSource
from .memory import InMemoryEventSource
from .sqlite import SQLiteEventSource, SQLiteSourceConfig

__all__ = [
    "MAX_PAGE_LIMIT",
    "EventSource",
    "build_response",
    "parse_page",
    "InMemoryEventSource",
    "JsonlEventSource",
    "SQLiteEventSource",
    "SQLiteSourceConfig",
]
