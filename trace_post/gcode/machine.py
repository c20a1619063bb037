"""Machine model -- the modal state behind the G-code builder.

Each tracked parameter is an :class:`~trace_post.gcode.emitter.Emitter`.
Setters translate domain values (direction, plane enums) into machine
codes, delegate to the emitter and return the rendered word, which is
empty when the parameter did not change.

Code sets:
    motion mode       G0 rapid, G1 linear
    machine plane     G17 XY, G18 XZ, G19 YZ
    unit system       G700 inch, G710 metric
    positioning mode  G90 absolute, G91 incremental
    feed-rate mode    G94 per minute, G95 per revolution
    home number       G54 .. G59
    spindle direction M3 clockwise, M4 counter-clockwise
"""

from __future__ import annotations

import re

from trace_post.common.enums import Direction, Plane
from trace_post.gcode.emitter import Emitter

AXES: tuple[str, ...] = ("x", "y", "z", "a", "b", "c")

MOTION_MODES = frozenset({0, 1})
UNIT_SYSTEMS = frozenset({700, 710})
POSITIONING_MODES = frozenset({90, 91})
FEED_RATE_MODES = frozenset({94, 95})
HOME_NUMBERS = frozenset({54, 55, 56, 57, 58, 59})

_DIRECTION_CODES: dict[Direction, int] = {
    Direction.CW: 3,
    Direction.CWT: 3,
    Direction.CWF: 3,
    Direction.CCW: 4,
    Direction.CCWT: 4,
    Direction.CCWF: 4,
}

_PLANE_CODES: dict[Plane, int] = {
    Plane.XY: 17,
    Plane.XZ: 18,
    Plane.YZ: 19,
}

_WHITESPACE = re.compile(r"\s+")


def _tool_word(name: str) -> str:
    return f'="{name}"'


def _check_code(label: str, value: int, allowed: frozenset[int]) -> int:
    # True == 1, so bools would pass the membership test.
    if isinstance(value, bool) or value not in allowed:
        raise ValueError(
            f"{label} must be one of {sorted(allowed)}, got {value!r}"
        )
    return value


def direction_code(direction: Direction | str) -> int:
    """Map a spindle direction to its M code (3 or 4).

    Raises
    ------
    ValueError
        If *direction* is not a clockwise or counter-clockwise symbol.
    """
    try:
        return _DIRECTION_CODES[Direction(direction)]
    except (KeyError, ValueError):
        raise ValueError(
            f"Not a spindle direction: {direction!r}"
        ) from None


def plane_code(plane: Plane | str) -> int:
    """Map a working plane to its G code (17, 18 or 19)."""
    try:
        return _PLANE_CODES[Plane(plane)]
    except ValueError:
        raise ValueError(f"Not a machine plane: {plane!r}") from None


class Machine:
    """Modal state of a CNC machine.

    One instance per :class:`~trace_post.gcode.builder.Builder`; nothing
    here is shared between builders.
    """

    def __init__(self) -> None:
        self._position: dict[str, Emitter[float]] = {
            axis: Emitter(axis.upper()) for axis in AXES
        }
        self._machine_plane: Emitter[int] = Emitter("G")
        self._motion_mode: Emitter[int] = Emitter("G")
        self._unit_system: Emitter[int] = Emitter("G")
        self._positioning_mode: Emitter[int] = Emitter("G")
        self._feed_rate_mode: Emitter[int] = Emitter("G")
        self._home_number: Emitter[int] = Emitter("G")
        self._feed_rate: Emitter[float] = Emitter("F")
        self._spindle_speed: Emitter[float] = Emitter("S")
        self._spindle_direction: Emitter[int] = Emitter("M")
        self._current_tool: Emitter[str] = Emitter("T", _tool_word)

    # ------------------------------------------------------------------
    # Position
    # ------------------------------------------------------------------

    def set_position(
        self,
        *,
        x: float | None = None,
        y: float | None = None,
        z: float | None = None,
        a: float | None = None,
        b: float | None = None,
        c: float | None = None,
        force_print: bool = False,
    ) -> str:
        """Render the axis words that changed.

        Omitted axes render nothing.  Words are joined by single spaces,
        e.g. ``"X10 Y20 Z5"``.
        """
        values = {"x": x, "y": y, "z": z, "a": a, "b": b, "c": c}
        output = " ".join(
            self._position[axis].render(values[axis], force_print)
            for axis in AXES
        )
        return _WHITESPACE.sub(" ", output).strip()

    def get_position(self) -> dict[str, float | None]:
        """Last emitted value of every axis."""
        return {axis: self._position[axis].value for axis in AXES}

    # ------------------------------------------------------------------
    # Modes
    # ------------------------------------------------------------------

    def set_machine_plane(
        self, value: Plane | str, force_print: bool = False,
    ) -> str:
        return self._machine_plane.render(plane_code(value), force_print)

    def set_motion_mode(self, value: int, force_print: bool = False) -> str:
        """``0`` for G0 (rapid), ``1`` for G1 (linear feed)."""
        _check_code("motion mode", value, MOTION_MODES)
        return self._motion_mode.render(value, force_print)

    def set_unit_system(self, value: int, force_print: bool = False) -> str:
        _check_code("unit system", value, UNIT_SYSTEMS)
        return self._unit_system.render(value, force_print)

    def set_positioning_mode(
        self, value: int, force_print: bool = False,
    ) -> str:
        _check_code("positioning mode", value, POSITIONING_MODES)
        return self._positioning_mode.render(value, force_print)

    def set_feed_rate_mode(
        self, value: int, force_print: bool = False,
    ) -> str:
        _check_code("feed rate mode", value, FEED_RATE_MODES)
        return self._feed_rate_mode.render(value, force_print)

    def set_home_number(self, value: int, force_print: bool = False) -> str:
        """Work offset, ``54`` .. ``59``."""
        _check_code("home number", value, HOME_NUMBERS)
        return self._home_number.render(value, force_print)

    # ------------------------------------------------------------------
    # Feed, spindle, tool
    # ------------------------------------------------------------------

    def set_feed_rate(self, value: float, force_print: bool = False) -> str:
        return self._feed_rate.render(value, force_print)

    def set_spindle_speed(
        self, value: float, force_print: bool = False,
    ) -> str:
        return self._spindle_speed.render(value, force_print)

    def set_spindle_direction(
        self, value: Direction | str, force_print: bool = False,
    ) -> str:
        """Render ``M3`` for any clockwise symbol, ``M4`` otherwise."""
        return self._spindle_direction.render(direction_code(value), force_print)

    def select_tool(self, value: str, force_print: bool = False) -> str:
        """Render ``T="<name>"``."""
        return self._current_tool.render(value, force_print)

    @property
    def current_tool(self) -> str | None:
        return self._current_tool.value

    # ------------------------------------------------------------------

    def reset(self) -> None:
        """Forget all modal state."""
        for emitter in self._position.values():
            emitter.reset()
        for emitter in (
            self._machine_plane,
            self._motion_mode,
            self._unit_system,
            self._positioning_mode,
            self._feed_rate_mode,
            self._home_number,
            self._feed_rate,
            self._spindle_speed,
            self._spindle_direction,
            self._current_tool,
        ):
            emitter.reset()
