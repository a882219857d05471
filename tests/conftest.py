"""
Shared test fixtures.

Factories and the recording source live in ``tests/factories.py``.
"""

from __future__ import annotations

from datetime import timedelta

import pytest

from journal_timeline import TimelineConfig
from journal_timeline.sources import InMemoryEventSource
from journal_timeline.types import Event, TimeRange

from .factories import BASE, RecordingSource, make_events


@pytest.fixture
def sample_events() -> list[Event]:
    """250 hourly events starting at BASE."""
    return make_events(250)


@pytest.fixture
def full_range() -> TimeRange:
    return TimeRange(BASE, BASE + timedelta(days=365))


@pytest.fixture
def source(sample_events) -> RecordingSource:
    return RecordingSource(InMemoryEventSource(sample_events))


@pytest.fixture
def config() -> TimelineConfig:
    return TimelineConfig(page_size=100)
