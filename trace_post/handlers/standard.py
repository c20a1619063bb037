"""Standard listeners -- the default trace-to-G-code mapping.

Covers the events every milling trace contains.  Post-processor authors
register these first and then add or override listeners for their
machine with :meth:`~trace_post.program.Program.on` / ``off``.

Event parameters used:
    MFeedSpin     spin, spin_direction
    RapidMove     xpos, ypos, zpos
    Line          xpos, ypos, zpos, feed
    MachinePlane  machine_plane
    ChangeTool    tool_id_string (falls back to tool_number)
    Message       message
"""

from __future__ import annotations

import logging
from typing import Mapping

from trace_post.gcode.builder import Builder
from trace_post.gcode.emitter import format_number
from trace_post.gcode.machine import direction_code
from trace_post.program.events import EventMetadata
from trace_post.program.program import Listener, Program

logger = logging.getLogger(__name__)

PROGRAM_END_WORD = "M30"


def _axes(params: Mapping) -> dict:
    return {
        "x": params.get("xpos"),
        "y": params.get("ypos"),
        "z": params.get("zpos"),
    }


def on_m_feed_spin(params: Mapping, b: Builder, meta: EventMetadata) -> None:
    """Spindle speed and direction on one line, e.g. ``S8000 M3``.

    Feed directions (``forward``/``backward``) carry no spindle code and
    are skipped with a warning.
    """
    b.set_spindle_speed(params.get("spin"), no_flush=True)
    direction = params.get("spin_direction")
    if direction is not None:
        try:
            direction_code(direction)
        except ValueError:
            logger.warning(
                "MFeedSpin spin_direction %s is not a spindle direction",
                direction,
            )
        else:
            b.set_spindle_direction(direction, no_flush=True)
    b.flush()


def on_rapid_move(params: Mapping, b: Builder, meta: EventMetadata) -> None:
    b.rapid(**_axes(params))


def on_line(params: Mapping, b: Builder, meta: EventMetadata) -> None:
    b.line(**_axes(params), feed=params.get("feed"))


def on_absolute_mode(params: Mapping, b: Builder, meta: EventMetadata) -> None:
    b.set_positioning_mode(90)


def on_machine_plane(params: Mapping, b: Builder, meta: EventMetadata) -> None:
    plane = params.get("machine_plane")
    if plane is None:
        logger.warning("MachinePlane event without machine_plane")
        return
    b.set_machine_plane(plane)


def on_change_tool(params: Mapping, b: Builder, meta: EventMetadata) -> None:
    tool = params.get("tool_id_string") or params.get("tool_number")
    if tool is None:
        logger.warning("ChangeTool event without tool_id_string or tool_number")
        return
    b.change_tool(tool if isinstance(tool, str) else format_number(tool))


def on_message(params: Mapping, b: Builder, meta: EventMetadata) -> None:
    b.comment(str(params.get("message", "")))


def on_end_of_file(params: Mapping, b: Builder, meta: EventMetadata) -> None:
    b.put(PROGRAM_END_WORD, flush_line=True)


STANDARD_HANDLERS: dict[str, Listener] = {
    "MFeedSpin": on_m_feed_spin,
    "RapidMove": on_rapid_move,
    "Line": on_line,
    "AbsoluteMode": on_absolute_mode,
    "MachinePlane": on_machine_plane,
    "ChangeTool": on_change_tool,
    "Message": on_message,
    "EndOfFile": on_end_of_file,
}


def register_standard_handlers(program: Program) -> None:
    """Register every listener in :data:`STANDARD_HANDLERS` on *program*."""
    for name, listener in STANDARD_HANDLERS.items():
        program.on(name, listener)
    logger.debug("Registered %d standard handlers", len(STANDARD_HANDLERS))
