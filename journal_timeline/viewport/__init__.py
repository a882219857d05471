"""Viewport math: virtualization, prefetch triggers, density re-anchoring."""

from .density import DensityTransitionEngine, anchor_index, remap_scroll_top
from .virtualizer import Virtualizer, compute_visible_window

__all__ = [
    "DensityTransitionEngine",
    "anchor_index",
    "remap_scroll_top",
    "Virtualizer",
    "compute_visible_window",
]
