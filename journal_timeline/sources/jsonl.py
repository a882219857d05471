"""
JSON Lines event source.

Reads a journal export (one wire-format event per line) on first use and
serves queries from memory.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import aiofiles
import aiofiles.os

from ..exceptions import InvalidResponseShapeError
from ..types import Event, EventQuery
from .base import EventSource
from .memory import InMemoryEventSource

logger = logging.getLogger(__name__)


class JsonlEventSource(EventSource):
    """Event source over a ``.jsonl`` journal export."""

    def __init__(self, path: Path | str):
        self.path = Path(path)
        self._memory: InMemoryEventSource | None = None

    async def load(self) -> int:
        """Read the file (again) and return the number of events loaded."""
        return len(await self._build())

    async def _build(self) -> InMemoryEventSource:
        events: list[Event] = []
        if await aiofiles.os.path.exists(self.path):
            async with aiofiles.open(self.path, encoding="utf-8") as f:
                line_no = 0
                async for line in f:
                    line_no += 1
                    line = line.strip()
                    if not line:
                        continue
                    try:
                        events.append(Event.from_dict(json.loads(line)))
                    except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
                        raise InvalidResponseShapeError(f"{self.path}:{line_no}: {e}") from e
        else:
            logger.warning(f"Journal export not found, serving empty timeline: {self.path}")

        self._memory = InMemoryEventSource(events)
        logger.debug(f"Loaded {len(events)} events from {self.path}")
        return self._memory

    async def query(self, query: EventQuery) -> Mapping[str, Any]:
        memory = self._memory
        if memory is None:
            memory = await self._build()
        return await memory.query(query)

    async def close(self) -> None:
        self._memory = None
