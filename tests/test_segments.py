import pytest

from shredproxy.segments import Segment, get_indexes
from shredproxy.status import ShredInfo, ShredStatus
from shredproxy.tracker import ShredsStateTracker

NDC = ShredStatus.NOT_DATA_COMPLETE
DC = ShredStatus.DATA_COMPLETE
UNK = ShredStatus.UNKNOWN


def make_tracker(statuses, size=64):
    tracker = ShredsStateTracker(size)
    tracker.data_status[: len(statuses)] = statuses
    return tracker


def test_start_at_index_zero():
    assert get_indexes(make_tracker([NDC, NDC, DC]), 0) == Segment(0, 2, False)
    assert get_indexes(make_tracker([DC, NDC, DC]), 0) == Segment(0, 0, False)
    assert get_indexes(make_tracker([UNK, NDC, DC]), 0) is None


def test_start_just_after_data_complete():
    tracker = make_tracker([DC, NDC, NDC, DC])
    assert get_indexes(tracker, 1) == Segment(1, 3, False)


def test_start_just_before_data_complete():
    tracker = make_tracker([DC, NDC, DC])
    assert get_indexes(tracker, 1) == Segment(1, 2, False)


def test_two_consecutive_data_complete():
    tracker = make_tracker([NDC, DC, DC])
    assert get_indexes(tracker, 1) == Segment(0, 1, False)
    assert get_indexes(tracker, 2) == Segment(2, 2, False)


def test_three_consecutive_data_complete():
    tracker = make_tracker([NDC, DC, DC, DC, NDC])
    assert get_indexes(tracker, 1) == Segment(0, 1, False)
    assert get_indexes(tracker, 2) == Segment(2, 2, False)
    assert get_indexes(tracker, 3) == Segment(3, 3, False)


def test_unknown_discards_segment():
    assert get_indexes(make_tracker([NDC, UNK, DC]), 0) is None
    assert get_indexes(make_tracker([UNK, NDC, DC]), 1) == Segment(1, 2, True)


def test_unknown():
    tracker = make_tracker([UNK, DC, DC, NDC, DC])
    assert get_indexes(tracker, 0) is None
    assert get_indexes(tracker, 1) == Segment(1, 1, True)
    assert get_indexes(tracker, 2) == Segment(2, 2, False)
    assert get_indexes(tracker, 3) == Segment(3, 4, False)


def test_full_size_tracker_matches_small_one():
    tracker = make_tracker([UNK, NDC, DC], size=ShredsStateTracker().size)
    assert get_indexes(tracker, 1) == Segment(1, 2, True)


def test_segment_compares_as_tuple():
    tracker = make_tracker([NDC, NDC, DC])
    assert get_indexes(tracker, 0) == (0, 2, False)
    assert list(get_indexes(tracker, 0).positions) == [0, 1, 2]


@pytest.mark.parametrize("index", [-1, 3, 100])
def test_index_out_of_range(index):
    tracker = make_tracker([NDC, NDC, DC], size=3)
    assert get_indexes(tracker, index) is None


def test_no_data_complete_before_end_of_slot():
    tracker = make_tracker([NDC, NDC, NDC], size=3)
    assert get_indexes(tracker, 0) is None
    assert get_indexes(tracker, 2) is None


def test_already_deshredded_to_the_right_discards():
    tracker = make_tracker([NDC, NDC, DC])
    tracker.already_deshredded[2] = True
    assert get_indexes(tracker, 0) is None


def test_already_deshredded_to_the_left_discards():
    tracker = make_tracker([NDC, NDC, DC])
    tracker.already_deshredded[0] = True
    assert get_indexes(tracker, 1) is None


def test_segment_from_tracker_updates_and_marking():
    tracker = ShredsStateTracker(32)
    shreds = [
        ShredInfo(slot=5, index=0, fec_set_index=0),
        ShredInfo(slot=5, index=1, fec_set_index=0),
        ShredInfo(slot=5, index=2, fec_set_index=0, data_complete=True),
        ShredInfo(slot=5, index=3, fec_set_index=0, last_in_slot=True),
    ]
    for shred in shreds:
        assert tracker.update(shred) == shred.index

    assert get_indexes(tracker, 1) == Segment(0, 2, False)
    assert get_indexes(tracker, 3) == Segment(3, 3, False)

    for shred in shreds[:3]:
        tracker.mark_deshredded(shred)
    assert get_indexes(tracker, 0) is None
    assert get_indexes(tracker, 3) == Segment(3, 3, False)