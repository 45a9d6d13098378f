"""Shred header information and per-shred completion status."""

from __future__ import annotations

import enum
from dataclasses import dataclass

SLOT_LOOKBACK = 50
MAX_DATA_SHREDS_PER_SLOT = 32_768
MAX_PROCESSING_AGE = 150


class ShredStatus(enum.Enum):
    """What is known about one data shred position in a slot."""

    UNKNOWN = "unknown"
    NOT_DATA_COMPLETE = "not_data_complete"
    DATA_COMPLETE = "data_complete"


@dataclass(frozen=True)
class ShredInfo:
    """Header fields and data of a data or coding shred.

    Two shreds compare equal when their headers and data match.
    """

    slot: int
    index: int
    fec_set_index: int
    is_data: bool = True
    data_complete: bool = False
    last_in_slot: bool = False
    num_data_shreds: int = 0
    num_coding_shreds: int = 0
    data: bytes = b""

    def __post_init__(self) -> None:
        for name in ("slot", "index", "fec_set_index", "num_data_shreds", "num_coding_shreds"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must not be negative")
        if self.is_data and self.index < self.fec_set_index:
            raise ValueError("data shred index precedes its FEC set index")

    @property
    def is_code(self) -> bool:
        return not self.is_data

    def is_data_complete(self) -> bool:
        """True for a data shred that ends a data block or the slot."""
        return self.is_data and (self.data_complete or self.last_in_slot)

    @property
    def status(self) -> ShredStatus:
        """Status this shred gives its position once received."""
        if not self.is_data:
            return ShredStatus.UNKNOWN
        if self.is_data_complete():
            return ShredStatus.DATA_COMPLETE
        return ShredStatus.NOT_DATA_COMPLETE


def is_stale_slot(slot: int, highest_slot_seen: int) -> bool:
    """True when ``slot`` lies further behind the highest slot than the lookback allows."""
    return max(highest_slot_seen - SLOT_LOOKBACK, 0) > slot