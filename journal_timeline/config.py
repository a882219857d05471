"""
Timeline configuration.

Policy constants (cache size, prefetch thresholds, drag heuristic, density
table) live here so hosts can tune them without touching the engines.
Defaults reproduce the browser's stock behavior.

Configuration in ~/.journal/settings.yaml:

```yaml
timeline:
  cache_max_size: 5
  page_size: 100
  prefetch_previous_ratio: 0.2
  prefetch_more_ratio: 0.8
  drag_threshold_px: 500
  drag_hold_seconds: 0.3
  density_heights: [120, 60, 30, 15, 8]
```
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

import yaml

from .exceptions import ValidationError
from .types import DENSITY_HEIGHTS

logger = logging.getLogger(__name__)

ENV_PREFIX = "JOURNAL_TIMELINE_"
DEFAULT_SETTINGS_PATH = Path.home() / ".journal" / "settings.yaml"


@dataclass
class TimelineConfig:
    """Configuration for a timeline controller and its engines."""

    # Cache
    cache_max_size: int = 5

    # Pagination
    page_size: int = 100
    max_page_limit: int = 500  # hard cap on any single request
    max_window_size: int = 500  # soft cap on events held in memory
    aggregate_month_limit: int = 12

    # Virtualization
    buffer_items: int = 5
    prefetch_previous_ratio: float = 0.2
    prefetch_more_ratio: float = 0.8

    # Drag heuristic
    drag_threshold_px: float = 500.0
    drag_hold_seconds: float = 0.3

    # Pixel height per density level, most detailed first
    density_heights: tuple[int, ...] = field(default=DENSITY_HEIGHTS)

    def __post_init__(self) -> None:
        self.density_heights = tuple(int(h) for h in self.density_heights)
        self.validate()

    def validate(self) -> None:
        """Check invariants, raising ValidationError on the first violation."""
        for name in (
            "cache_max_size",
            "page_size",
            "max_page_limit",
            "max_window_size",
            "aggregate_month_limit",
        ):
            value = getattr(self, name)
            if value < 1:
                raise ValidationError(name, "must be >= 1", str(value))

        if self.buffer_items < 0:
            raise ValidationError("buffer_items", "must be >= 0", str(self.buffer_items))

        for name in ("prefetch_previous_ratio", "prefetch_more_ratio"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValidationError(name, "must be within [0, 1]", str(value))

        if self.prefetch_previous_ratio >= self.prefetch_more_ratio:
            raise ValidationError(
                "prefetch_previous_ratio",
                "must be below prefetch_more_ratio",
                str(self.prefetch_previous_ratio),
            )

        if self.drag_threshold_px <= 0:
            raise ValidationError(
                "drag_threshold_px", "must be > 0", str(self.drag_threshold_px)
            )
        if self.drag_hold_seconds < 0:
            raise ValidationError(
                "drag_hold_seconds", "must be >= 0", str(self.drag_hold_seconds)
            )

        heights = self.density_heights
        if len(heights) != len(DENSITY_HEIGHTS):
            raise ValidationError(
                "density_heights",
                f"expected {len(DENSITY_HEIGHTS)} levels, got {len(heights)}",
            )
        if any(h <= 0 for h in heights) or any(a <= b for a, b in zip(heights, heights[1:])):
            raise ValidationError(
                "density_heights", "must be strictly decreasing positive heights", str(heights)
            )

    def item_height(self, level: int) -> int:
        """Pixel height of one item at ``level``, clamped to the table."""
        index = max(0, min(len(self.density_heights) - 1, int(level)))
        return self.density_heights[index]

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TimelineConfig:
        """Build config from a mapping, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            logger.warning(f"Ignoring unknown timeline settings: {', '.join(unknown)}")
        return cls(**{k: v for k, v in data.items() if k in known})

    @classmethod
    def from_env(cls) -> TimelineConfig:
        """Create config from JOURNAL_TIMELINE_* environment variables."""
        values: dict[str, Any] = {}
        for f in fields(cls):
            raw = os.environ.get(f"{ENV_PREFIX}{f.name.upper()}")
            if raw is None:
                continue
            try:
                if f.name == "density_heights":
                    values[f.name] = tuple(int(p) for p in raw.split(",") if p.strip())
                elif f.name.endswith(("_ratio", "_px", "_seconds")):
                    values[f.name] = float(raw)
                else:
                    values[f.name] = int(raw)
            except ValueError as e:
                raise ValidationError(f.name, "not a number", raw) from e
        return cls(**values)

    @classmethod
    def from_yaml(cls, path: Path | None = None) -> TimelineConfig:
        """Load the ``timeline`` section of a YAML settings file.

        A missing file or section yields the defaults.
        """
        config_path = path or DEFAULT_SETTINGS_PATH
        if not config_path.exists():
            return cls()

        with open(config_path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        section = data.get("timeline") or {}
        if not isinstance(section, dict):
            raise ValidationError("timeline", "settings section must be a mapping")
        return cls.from_dict(section)
