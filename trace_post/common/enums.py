"""Enumerated symbols that appear as bare tokens in trace logs.

Members subclass ``str`` so parsed values compare equal to their raw
spelling (``Direction.CW == "cw"``) and serialise to JSON unchanged.
"""

from __future__ import annotations

from enum import Enum


class Direction(str, Enum):
    """Spindle / tool rotation and feed direction."""

    CW = "cw"
    CWT = "cwT"
    CWF = "cwF"
    CCW = "ccw"
    CCWT = "ccwT"
    CCWF = "ccwF"
    FORWARD = "forward"
    BACKWARD = "backward"

    def __str__(self) -> str:
        return self.value


class State(str, Enum):
    """On/off switch state (coolant, etc.)."""

    ON = "on"
    OFF = "off"

    def __str__(self) -> str:
        return self.value


class Plane(str, Enum):
    """Working plane."""

    XY = "xy"
    XZ = "xz"
    YZ = "yz"

    def __str__(self) -> str:
        return self.value


VOCABULARY: tuple[type[Enum], ...] = (Direction, State, Plane)
"""Enums consulted, in order, when typing a bare trace token."""


def lookup_symbol(token: str) -> Enum | None:
    """Return the vocabulary member spelled *token*, or ``None``."""
    for enum_cls in VOCABULARY:
        try:
            return enum_cls(token)
        except ValueError:
            continue
    return None
