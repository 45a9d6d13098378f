"""Shred counts of one FEC set and whether erasure recovery is worth trying."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from .status import ShredInfo


@dataclass(frozen=True)
class FecSetInfo:
    """Expected and received shred counts for one FEC set.

    The expected data count comes from a coding shred header when one has
    been seen. Otherwise it comes from a data-complete shred, which closes
    the set.
    """

    num_expected_data_shreds: int = 0
    num_expected_coding_shreds: int = 0
    num_data_shreds: int = 0
    num_coding_shreds: int = 0

    @property
    def received(self) -> int:
        """Number of data and coding shreds counted."""
        return self.num_data_shreds + self.num_coding_shreds

    def ready_to_recover(self, received: Optional[int] = None) -> bool:
        """True when recovery may succeed and there is something to recover.

        ``received`` is the number of distinct shreds held for the set and
        defaults to the counted data and coding shreds. Recovery needs the
        expected data count to be known and at least that many shreds on
        hand, with some data shreds still missing.
        """
        if received is None:
            received = self.received
        if received < 0:
            raise ValueError("received shred count must not be negative")
        expected = self.num_expected_data_shreds
        if expected == 0:
            return False
        if received < expected:
            return False
        return self.num_data_shreds != expected


def get_data_shred_info(shreds: Iterable[ShredInfo]) -> FecSetInfo:
    """Count the data and coding shreds of one FEC set.

    A coding shred's header sets the expected counts. A data-complete shred
    sets the expected data count only while no count is known yet.
    """
    expected_data = 0
    expected_coding = 0
    data_count = 0
    coding_count = 0
    for shred in shreds:
        if shred.is_code:
            coding_count += 1
            expected_data = shred.num_data_shreds
            expected_coding = shred.num_coding_shreds
        else:
            data_count += 1
            if expected_data == 0 and shred.is_data_complete():
                expected_data = shred.index - shred.fec_set_index + 1
    return FecSetInfo(
        num_expected_data_shreds=expected_data,
        num_expected_coding_shreds=expected_coding,
        num_data_shreds=data_count,
        num_coding_shreds=coding_count,
    )