"""Temporal lookups over a loaded event sequence.

Pure functions of ``(events, index, name[, n])``: they scan the sequence
relative to *index* and never look at *index* itself.  Anything with a
``name`` attribute works as an event, so these are usable on parsed
records as well as on loaded program events.

An *index* of ``None`` means "not positioned in the sequence" (a manual
trigger) and every lookup returns ``None``.
"""

from __future__ import annotations

from typing import Optional, Protocol, Sequence, TypeVar


class Named(Protocol):
    name: str


E = TypeVar("E", bound=Named)


def _check_n(n: int) -> None:
    if n < 1:
        raise ValueError(f"n is 1-indexed and must be >= 1, got {n}")


def next_event(events: Sequence[E], index: Optional[int]) -> Optional[E]:
    """Event right after *index*, or ``None`` at the end."""
    if index is None or index + 1 >= len(events):
        return None
    return events[index + 1]


def previous_event(events: Sequence[E], index: Optional[int]) -> Optional[E]:
    """Event right before *index*, or ``None`` at the start."""
    if index is None or index <= 0:
        return None
    return events[index - 1]


def find_nth_next_event(
    events: Sequence[E], index: Optional[int], name: str, n: int,
) -> Optional[E]:
    """The *n*-th event named *name* after *index* (1-indexed)."""
    _check_n(n)
    if index is None:
        return None
    seen = 0
    for event in events[index + 1:]:
        if event.name == name:
            seen += 1
            if seen == n:
                return event
    return None


def find_nth_previous_event(
    events: Sequence[E], index: Optional[int], name: str, n: int,
) -> Optional[E]:
    """The *n*-th event named *name* before *index*, scanning backward."""
    _check_n(n)
    if index is None:
        return None
    seen = 0
    for i in range(min(index, len(events)) - 1, -1, -1):
        if events[i].name == name:
            seen += 1
            if seen == n:
                return events[i]
    return None


def find_nearest_event(
    events: Sequence[E], index: Optional[int], name: str,
) -> Optional[E]:
    """Closest following event named *name*."""
    return find_nth_next_event(events, index, name, 1)


def find_last_event(
    events: Sequence[E], index: Optional[int], name: str,
) -> Optional[E]:
    """Closest preceding event named *name*."""
    return find_nth_previous_event(events, index, name, 1)
