"""Locating complete data segments among the data shreds of a slot."""

from __future__ import annotations

from typing import NamedTuple, Optional

from .status import ShredStatus
from .tracker import ShredsStateTracker


class Segment(NamedTuple):
    """Inclusive range of data shred positions that ends in a data-complete shred.

    ``unknown_start`` is True when the start is a guess, because the shred
    before it has not been received.
    """

    start: int
    end: int
    unknown_start: bool = False

    @property
    def positions(self) -> range:
        """All shred positions covered by the segment."""
        return range(self.start, self.end + 1)


def _find_end(tracker: ShredsStateTracker, index: int) -> Optional[int]:
    """Position of the first data-complete shred at or after ``index``."""
    for end in range(index, len(tracker)):
        if tracker.already_deshredded[end]:
            return None
        status = tracker.data_status[end]
        if status is ShredStatus.UNKNOWN:
            return None
        if status is ShredStatus.DATA_COMPLETE:
            return end
    return None


def get_indexes(tracker: ShredsStateTracker, index: int) -> Optional[Segment]:
    """Return the complete segment that holds position ``index``, or None.

    The segment ends at the first data-complete shred at or after ``index``;
    an unknown or already deshredded shred on the way there discards it.
    It starts just after the previous data-complete shred, or at position 0
    when there is none. An unknown shred to the left is accepted, since whole
    FEC sets are sometimes never sent, and the start is then flagged as a guess.
    """
    if not 0 <= index < len(tracker):
        return None

    end = _find_end(tracker, index)
    if end is None:
        return None
    if end == 0:
        return Segment(0, 0, False)
    if index == 0:
        return Segment(0, end, False)

    start = index
    for previous in range(index - 1, -1, -1):
        status = tracker.data_status[previous]
        if status is ShredStatus.DATA_COMPLETE:
            return Segment(start, end, False)
        if status is ShredStatus.UNKNOWN:
            return Segment(start, end, True)
        if tracker.already_deshredded[previous]:
            return None
        start = previous
    return Segment(0, end, False)