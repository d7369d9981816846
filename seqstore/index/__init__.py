"""Identifier-to-byte-range bookkeeping."""

from .interval_index import Interval, IntervalIndex, MergeKind

__all__ = ["Interval", "IntervalIndex", "MergeKind"]
