"""
SQLite event source.

Stores journal events in a single table indexed by creation time and
answers timeline queries with LIMIT/OFFSET. Ideal for local journals,
embedded use, and integration tests.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import aiosqlite

from ..exceptions import SourceNotInitializedError
from ..types import Event, EventQuery, MonthlyAggregateQuery, Role, SortOrder, parse_instant
from .base import MAX_PAGE_LIMIT, EventSource, build_response

logger = logging.getLogger(__name__)

EVENT_COLUMNS = (
    "id",
    "created_at",
    "role",
    "content",
    "thread_id",
    "thread_label",
    "user_id",
    "user_name",
)


def _to_db_instant(value: Any) -> str:
    # Fixed-width UTC text so lexicographic order matches time order
    return parse_instant(value).strftime("%Y-%m-%dT%H:%M:%S.%fZ")


def preview(content: str | None, length: int) -> str:
    """Truncate content for display, marking truncation with an ellipsis."""
    if not content:
        return ""
    if len(content) > length:
        return content[:length] + "..."
    return content


@dataclass
class SQLiteSourceConfig:
    """Configuration for the SQLite event source."""

    db_path: str | Path = ":memory:"
    preview_length: int = 50
    untitled_label: str = "Untitled"

    @classmethod
    def from_env(cls) -> SQLiteSourceConfig:
        """Create config from environment variables."""
        return cls(
            db_path=os.environ.get("JOURNAL_TIMELINE_SQLITE_PATH", ":memory:"),
            preview_length=int(os.environ.get("JOURNAL_TIMELINE_PREVIEW_LENGTH", "50")),
        )


class SQLiteEventSource(EventSource):
    """
    aiosqlite-backed event source.

    Usage:
        async with await SQLiteEventSource.create(config) as source:
            await source.add_events(events)
            payload = await source.query(query)
    """

    def __init__(self, config: SQLiteSourceConfig | None = None):
        self.config = config or SQLiteSourceConfig()
        self.conn: aiosqlite.Connection | None = None
        self._initialized = False

    @classmethod
    async def create(cls, config: SQLiteSourceConfig | None = None) -> SQLiteEventSource:
        """Create and initialize a source."""
        source = cls(config or SQLiteSourceConfig.from_env())
        await source.initialize()
        return source

    async def initialize(self) -> None:
        """Open the connection and create the schema."""
        if self._initialized:
            return

        self.conn = await aiosqlite.connect(str(self.config.db_path))
        await self.conn.execute("""
            CREATE TABLE IF NOT EXISTS events (
                id TEXT PRIMARY KEY,
                created_at TEXT NOT NULL,
                role TEXT NOT NULL,
                content TEXT,
                thread_id TEXT,
                thread_label TEXT,
                user_id TEXT,
                user_name TEXT
            )
        """)
        await self.conn.execute(
            "CREATE INDEX IF NOT EXISTS idx_events_created_at ON events(created_at, id)"
        )
        await self.conn.commit()
        self._initialized = True
        logger.info(f"SQLite event source initialized: {self.config.db_path}")

    async def close(self) -> None:
        if self.conn is not None:
            await self.conn.close()
            self.conn = None
        self._initialized = False

    def _require_conn(self) -> aiosqlite.Connection:
        if self.conn is None:
            raise SourceNotInitializedError(f"sqlite:{self.config.db_path}")
        return self.conn

    async def add_events(
        self,
        events: Iterable[Event],
        contents: Mapping[str, str] | None = None,
    ) -> int:
        """
        Insert events, ignoring ids that already exist.

        Args:
            events: Events to store
            contents: Optional full content per event id; defaults to the
                event's own preview

        Returns:
            Number of rows inserted
        """
        conn = self._require_conn()
        contents = contents or {}
        rows = [
            (
                e.id,
                _to_db_instant(e.created_at),
                e.role.value,
                contents.get(e.id, e.content_preview),
                e.thread_id,
                e.thread_label,
                e.user_id,
                e.user_name,
            )
            for e in events
        ]
        placeholders = ", ".join("?" for _ in EVENT_COLUMNS)
        before = conn.total_changes
        await conn.executemany(
            f"INSERT OR IGNORE INTO events ({', '.join(EVENT_COLUMNS)}) VALUES ({placeholders})",
            rows,
        )
        await conn.commit()
        return conn.total_changes - before

    async def query(self, query: EventQuery) -> Mapping[str, Any]:
        conn = self._require_conn()
        bounds = [_to_db_instant(query.range.start), _to_db_instant(query.range.end)]
        where = "created_at >= ? AND created_at < ?"

        if isinstance(query, MonthlyAggregateQuery):
            async with conn.execute(
                f"SELECT id, created_at FROM events WHERE {where} ORDER BY created_at DESC",
                bounds,
            ) as cursor:
                rows = await cursor.fetchall()
            payload_rows = [{"id": r[0], "createdAt": r[1]} for r in rows]
            return build_response(query, payload_rows, len(payload_rows))

        async with conn.execute(f"SELECT COUNT(*) FROM events WHERE {where}", bounds) as cursor:
            row = await cursor.fetchone()
            total = row[0] if row else 0

        direction = "ASC" if query.order is SortOrder.ASCENDING else "DESC"
        limit = min(query.limit, MAX_PAGE_LIMIT)
        async with conn.execute(
            f"""
            SELECT {", ".join(EVENT_COLUMNS)}
            FROM events
            WHERE {where}
            ORDER BY created_at {direction}, id {direction}
            LIMIT ? OFFSET ?
            """,
            [*bounds, limit, query.offset],
        ) as cursor:
            rows = await cursor.fetchall()

        return build_response(query, [self._row_to_payload(r) for r in rows], total)

    def _row_to_payload(self, row: Any) -> dict[str, Any]:
        record = dict(zip(EVENT_COLUMNS, row))
        payload: dict[str, Any] = {
            "id": record["id"],
            "createdAt": record["created_at"],
            "role": Role(record["role"]).value,
            "contentPreview": preview(record["content"], self.config.preview_length),
            "threadId": record["thread_id"] or "",
            "threadLabel": record["thread_label"] or self.config.untitled_label,
            "userId": record["user_id"] or "",
        }
        if record["user_name"]:
            payload["userName"] = record["user_name"]
        return payload
