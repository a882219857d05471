"""Pixel-geometry coercion shared by the viewport engines."""

from __future__ import annotations

import math


def finite(value: float, default: float = 0.0) -> float:
    """``value`` as a float, or ``default`` when it is NaN, infinite or not a number."""
    try:
        value = float(value)
    except (TypeError, ValueError):
        return default
    return value if math.isfinite(value) else default
