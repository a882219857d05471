"""Bidirectional pagination and year-zoom aggregation."""

from .aggregation import AGGREGATE_LABEL, aggregate_by_month, month_key
from .engine import ErrorListener, PaginationEngine

__all__ = [
    "AGGREGATE_LABEL",
    "aggregate_by_month",
    "month_key",
    "ErrorListener",
    "PaginationEngine",
]
