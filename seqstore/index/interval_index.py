"""Ordered, merge-aware index of identifier runs and their byte ranges."""

from __future__ import annotations

import bisect
from dataclasses import dataclass, replace
from enum import Enum
from typing import Iterator, List, Optional, Tuple

from seqstore.errors import DuplicateIdentifier
from seqstore.logging_utils import get_logger

LOGGER = get_logger(__name__)


@dataclass(frozen=True)
class Interval:
    """A maximal run of consecutive identifiers stored contiguously on disk.

    Only the exclusive end offset of the run is recorded. The start offset is
    the previous interval's ``end_offset`` (or 0 for the first one), so the
    byte size of an individual identifier inside a merged run is not
    recoverable.
    """

    start_id: int
    end_id: int
    end_offset: int

    def __post_init__(self) -> None:
        if self.start_id > self.end_id:
            raise ValueError(
                f"Interval start_id ({self.start_id}) must be <= end_id ({self.end_id})"
            )

    def __contains__(self, identifier: object) -> bool:
        return isinstance(identifier, int) and self.start_id <= identifier <= self.end_id

    def __str__(self) -> str:
        return f"Interval({self.start_id:#06x}..{self.end_id:#06x}, end={self.end_offset})"


class MergeKind(str, Enum):
    """How a committed identifier joined the existing runs."""

    NONE = "none"
    LEFT = "left"
    RIGHT = "right"
    BOTH = "both"


class IntervalIndex:
    """In-memory ordered set of non-overlapping, non-adjacent intervals.

    Intervals are kept in a plain list sorted by ``start_id``. Lookups are
    binary searches, but every commit shifts the end offsets of all following
    intervals, so commits are linear in the number of intervals. That is fine
    while runs stay few (they are bounded by the 16-bit identifier space); an
    order-statistics tree would be the replacement if it ever shows up in a
    profile.
    """

    def __init__(self) -> None:
        self._intervals: List[Interval] = []

    def __len__(self) -> int:
        return len(self._intervals)

    def __contains__(self, identifier: object) -> bool:
        if not isinstance(identifier, int):
            return False
        return self.find(identifier) is not None

    def __iter__(self) -> Iterator[Interval]:
        return iter(tuple(self._intervals))

    @property
    def total_length(self) -> int:
        """Byte length the backing file must have."""

        return self._intervals[-1].end_offset if self._intervals else 0

    def intervals(self) -> Tuple[Interval, ...]:
        return tuple(self._intervals)

    def spans(self) -> Iterator[Tuple[Interval, int]]:
        """Yield ``(interval, start_offset)`` pairs in identifier order."""

        start = 0
        for interval in self._intervals:
            yield interval, start
            start = interval.end_offset

    def find(self, identifier: int) -> Optional[Interval]:
        """Return the interval whose run contains ``identifier``, if any."""

        position = bisect.bisect_right(self._intervals, identifier, key=_start_key)
        if position == 0:
            return None
        candidate = self._intervals[position - 1]
        return candidate if identifier in candidate else None

    def locate(self, identifier: int) -> int:
        """Return the position a new interval for ``identifier`` would take.

        Every interval before the returned position has a smaller ``start_id``
        and every interval from it onward a larger one. Raises
        ``DuplicateIdentifier`` when ``identifier`` starts an existing run or
        lies anywhere inside one.
        """

        position = bisect.bisect_left(self._intervals, identifier, key=_start_key)
        if position < len(self._intervals) and self._intervals[position].start_id == identifier:
            raise DuplicateIdentifier(identifier, self._intervals[position])
        if position > 0 and self._intervals[position - 1].end_id >= identifier:
            raise DuplicateIdentifier(identifier, self._intervals[position - 1])
        return position

    def insertion_offset(self, position: int) -> int:
        """Byte offset at which the payload for ``position`` must be written."""

        if position == 0:
            return 0
        return self._intervals[position - 1].end_offset

    def commit(self, identifier: int, payload_size: int, position: int) -> MergeKind:
        """Record ``identifier`` once its payload has been written to disk."""

        if payload_size <= 0:
            raise ValueError(f"payload_size must be positive, got {payload_size}")
        count = len(self._intervals)
        if not 0 <= position <= count:
            raise ValueError(f"position {position} outside 0..{count}")

        left = self._intervals[position - 1] if position > 0 else None
        right = self._intervals[position] if position < count else None
        left_adjacent = left is not None and left.end_id == identifier - 1
        right_adjacent = right is not None and right.start_id == identifier + 1

        if left_adjacent and right_adjacent:
            merged = Interval(
                start_id=left.start_id,
                end_id=right.end_id,
                end_offset=right.end_offset + payload_size,
            )
            self._intervals[position - 1 : position + 1] = [merged]
            kind = MergeKind.BOTH
            shift_from = position
        elif left_adjacent:
            self._intervals[position - 1] = replace(
                left, end_id=identifier, end_offset=left.end_offset + payload_size
            )
            kind = MergeKind.LEFT
            shift_from = position
        elif right_adjacent:
            self._intervals[position] = replace(
                right, start_id=identifier, end_offset=right.end_offset + payload_size
            )
            kind = MergeKind.RIGHT
            shift_from = position + 1
        else:
            end_offset = self.insertion_offset(position) + payload_size
            self._intervals.insert(position, Interval(identifier, identifier, end_offset))
            kind = MergeKind.NONE
            shift_from = position + 1

        # bytes after the insertion point moved right on disk
        for idx in range(shift_from, len(self._intervals)):
            shifted = self._intervals[idx]
            self._intervals[idx] = replace(shifted, end_offset=shifted.end_offset + payload_size)

        LOGGER.debug(
            "Committed id=%#06x size=%s at position %s (merge=%s, intervals=%s)",
            identifier,
            payload_size,
            position,
            kind.value,
            len(self._intervals),
        )
        return kind


def _start_key(interval: Interval) -> int:
    return interval.start_id


__all__ = ["Interval", "IntervalIndex", "MergeKind"]
