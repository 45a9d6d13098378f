"""Per-slot record of which data shreds have arrived and been consumed."""

from __future__ import annotations

from typing import Optional

from .status import MAX_DATA_SHREDS_PER_SLOT, ShredInfo, ShredStatus


class ShredsStateTracker:
    """Tracks the data shreds of one slot.

    Every per-position list holds exactly ``size`` items, one for each
    possible shred index (or FEC set index) in the slot.
    """

    def __init__(self, size=MAX_DATA_SHREDS_PER_SLOT):
        if size <= 0:
            raise ValueError("tracker size must be positive")
        self.size = size
        self.data_status: list[ShredStatus] = [ShredStatus.UNKNOWN] * size
        self.data_shreds: list[Optional[ShredInfo]] = [None] * size
        self.already_recovered_fec_sets: list[bool] = [False] * size
        self.already_deshredded: list[bool] = [False] * size

    def __len__(self) -> int:
        return self.size

    def _check_position(self, name: str, value: int) -> None:
        if not 0 <= value < self.size:
            raise ValueError(f"{name} {value} outside slot range 0..{self.size - 1}")

    def update(self, shred: ShredInfo) -> Optional[int]:
        """Record a newly received or recovered shred.

        Returns the shred's index when it is new, or None when its FEC set was
        already recovered or the data position is already filled.
        """
        self._check_position("fec_set_index", shred.fec_set_index)
        if shred.is_data:
            self._check_position("index", shred.index)
        if self.already_recovered_fec_sets[shred.fec_set_index]:
            return None
        if shred.is_data:
            index = shred.index
            if (
                self.data_shreds[index] is not None
                or self.data_status[index] is not ShredStatus.UNKNOWN
            ):
                return None
            self.data_shreds[index] = shred
            self.data_status[index] = shred.status
        return shred.index

    def is_completed(self, shred: ShredInfo) -> bool:
        """True when the shred's FEC set was recovered or its position deshredded."""
        self._check_position("fec_set_index", shred.fec_set_index)
        if self.already_recovered_fec_sets[shred.fec_set_index]:
            return True
        return 0 <= shred.index < self.size and self.already_deshredded[shred.index]

    def mark_deshredded(self, shred: ShredInfo) -> None:
        """Mark the shred's position and its FEC set as finished."""
        self._check_position("fec_set_index", shred.fec_set_index)
        self._check_position("index", shred.index)
        self.already_recovered_fec_sets[shred.fec_set_index] = True
        self.already_deshredded[shred.index] = True