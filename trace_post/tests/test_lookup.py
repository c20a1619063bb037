"""Tests for the temporal lookup functions.

Run directly on parsed records: the functions only need ``.name``.
"""

from __future__ import annotations

import pytest

from trace_post.program import lookup
from trace_post.trace.parser import EventRecord

#        0    1    2    3    4    5
NAMES = ["A", "B", "A", "C", "A", "B"]
EVENTS = [EventRecord(n, i, {}) for i, n in enumerate(NAMES)]


def _index(event: EventRecord | None) -> int | None:
    return None if event is None else event.index


class TestNeighbours:
    def test_next_and_previous(self) -> None:
        assert _index(lookup.next_event(EVENTS, 2)) == 3
        assert _index(lookup.previous_event(EVENTS, 2)) == 1

    def test_boundaries(self) -> None:
        assert lookup.previous_event(EVENTS, 0) is None
        assert lookup.next_event(EVENTS, len(EVENTS) - 1) is None

    def test_empty_sequence(self) -> None:
        assert lookup.next_event([], 0) is None
        assert lookup.find_nearest_event([], 0, "A") is None


class TestNamedLookups:
    def test_nearest_skips_current(self) -> None:
        assert _index(lookup.find_nearest_event(EVENTS, 0, "A")) == 2
        assert _index(lookup.find_nearest_event(EVENTS, 2, "A")) == 4

    def test_last_scans_backward(self) -> None:
        assert _index(lookup.find_last_event(EVENTS, 4, "A")) == 2
        assert _index(lookup.find_last_event(EVENTS, 5, "C")) == 3

    def test_not_found(self) -> None:
        assert lookup.find_nearest_event(EVENTS, 3, "C") is None
        assert lookup.find_last_event(EVENTS, 0, "A") is None
        assert lookup.find_nearest_event(EVENTS, 0, "Z") is None

    def test_nth_next(self) -> None:
        assert _index(lookup.find_nth_next_event(EVENTS, 0, "A", 1)) == 2
        assert _index(lookup.find_nth_next_event(EVENTS, 0, "A", 2)) == 4
        assert lookup.find_nth_next_event(EVENTS, 0, "A", 3) is None

    def test_nth_previous(self) -> None:
        assert _index(lookup.find_nth_previous_event(EVENTS, 5, "A", 1)) == 4
        assert _index(lookup.find_nth_previous_event(EVENTS, 5, "A", 3)) == 0
        assert lookup.find_nth_previous_event(EVENTS, 5, "A", 4) is None

    @pytest.mark.parametrize("n", [0, -1])
    def test_n_must_be_positive(self, n: int) -> None:
        with pytest.raises(ValueError, match="1-indexed"):
            lookup.find_nth_next_event(EVENTS, 0, "A", n)
        with pytest.raises(ValueError, match="1-indexed"):
            lookup.find_nth_previous_event(EVENTS, 5, "A", n)

    def test_detached_index(self) -> None:
        assert lookup.next_event(EVENTS, None) is None
        assert lookup.previous_event(EVENTS, None) is None
        assert lookup.find_last_event(EVENTS, None, "A") is None
        assert lookup.find_nth_next_event(EVENTS, None, "A", 1) is None
