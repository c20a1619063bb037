"""G-code builder -- listener verbs to numbered instruction lines.

The builder owns a :class:`~trace_post.gcode.machine.Machine` and a set of
file buffers.  Verbs (``rapid``, ``line``, ``set_spindle_speed`` ...) ask the
machine for the words that changed, ``put`` them on the current line and
flush the line unless told otherwise::

    b = Builder()
    b.rapid(x=0, y=0, z=100)        # N10 G0 X0 Y0 Z100
    b.line(x=10, feed=500)          # N20 G1 X10 F500
    b.line(x=20)                    # N30 X20

Files:
    Output starts in the main file.  ``new_subprogram(name)`` opens a named
    subprogram buffer and makes it current; ``end_subprogram()`` closes it
    and returns to main.  Subprograms do not nest.  Each file is numbered
    independently from ``numbering.start``.

Modal state lives in the one machine shared by all files: a word emitted in
a subprogram is not repeated in main afterwards.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from trace_post.common.enums import Direction, Plane
from trace_post.configs.loader import PostConfig
from trace_post.gcode.machine import Machine

logger = logging.getLogger(__name__)

TOOL_CHANGE_WORD = "M6"


class FileContextError(Exception):
    """Raised when a subprogram is opened or closed from the wrong file."""

    pass


# ---------------------------------------------------------------------------
# File buffers
# ---------------------------------------------------------------------------


@dataclass
class LineBuffer:
    """Flushed lines and the pending line of one output file."""

    name: str
    next_number: int
    lines: list[str] = field(default_factory=list)
    pending: list[str] = field(default_factory=list)

    @property
    def text(self) -> str:
        return "\n".join(self.lines)


@dataclass(frozen=True)
class GeneratedFile:
    """One generated program: file name and newline-joined text."""

    name: str
    text: str


# ---------------------------------------------------------------------------
# Builder
# ---------------------------------------------------------------------------


class Builder:
    """Accumulate G-code lines for a main program and its subprograms.

    Parameters
    ----------
    config : PostConfig | None
        Numbering and file settings.  ``None`` uses the defaults
        (numbering on, start 10, step 10, main file ``"main"``).
    """

    def __init__(self, config: PostConfig | None = None) -> None:
        self._cfg = config or PostConfig()
        self._machine = Machine()
        main = self._cfg.files.main_name
        self._files: dict[str, LineBuffer] = {
            main: LineBuffer(main, self._cfg.numbering.start),
        }
        self._main_name = main
        self._current = main

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def machine(self) -> Machine:
        return self._machine

    @property
    def current_file(self) -> str:
        """Name of the file receiving output."""
        return self._current

    @property
    def in_subprogram(self) -> bool:
        return self._current != self._main_name

    @property
    def gcode(self) -> str:
        """Flushed text of the main file."""
        return self._files[self._main_name].text

    @property
    def _buffer(self) -> LineBuffer:
        return self._files[self._current]

    # ------------------------------------------------------------------
    # Low-level line assembly
    # ------------------------------------------------------------------

    def put(self, word: str, flush_line: bool = False) -> None:
        """Append *word* to the current line.

        Blank words are ignored.  With ``flush_line=True`` the line is
        flushed right after.
        """
        word = word.strip() if word else ""
        if word:
            self._buffer.pending.append(word)
        if flush_line:
            self.flush()

    def flush(self) -> None:
        """Finalize the current line.

        A no-op when nothing was put since the last flush; the line
        counter only advances when a line is written.
        """
        self._flush_buffer(self._buffer)

    def flush_all(self) -> None:
        """Flush the pending line of every file, not only the current one."""
        for buf in self._files.values():
            self._flush_buffer(buf)

    def _flush_buffer(self, buf: LineBuffer) -> None:
        if not buf.pending:
            return
        body = " ".join(buf.pending).strip()
        numbering = self._cfg.numbering
        if numbering.enabled:
            buf.lines.append(f"N{buf.next_number} {body}")
        else:
            buf.lines.append(body)
        buf.pending = []
        buf.next_number += numbering.increment

    def _emit(self, *words: str, no_flush: bool = False) -> None:
        for word in words:
            self.put(word)
        if not no_flush:
            self.flush()

    # ------------------------------------------------------------------
    # Motion
    # ------------------------------------------------------------------

    def rapid(
        self,
        *,
        x: float | None = None,
        y: float | None = None,
        z: float | None = None,
        a: float | None = None,
        b: float | None = None,
        c: float | None = None,
        force_print: bool = False,
        no_flush: bool = False,
    ) -> None:
        """Rapid positioning move (G0) to the given axes."""
        self._emit(
            self._machine.set_motion_mode(0, force_print),
            self._machine.set_position(
                x=x, y=y, z=z, a=a, b=b, c=c, force_print=force_print,
            ),
            no_flush=no_flush,
        )

    def line(
        self,
        *,
        x: float | None = None,
        y: float | None = None,
        z: float | None = None,
        a: float | None = None,
        b: float | None = None,
        c: float | None = None,
        feed: float | None = None,
        force_print: bool = False,
        no_flush: bool = False,
    ) -> None:
        """Linear feed move (G1); *feed* adds an F word on the same line."""
        self._emit(
            self._machine.set_motion_mode(1, force_print),
            self._machine.set_position(
                x=x, y=y, z=z, a=a, b=b, c=c, force_print=force_print,
            ),
            self._machine.set_feed_rate(feed, force_print),
            no_flush=no_flush,
        )

    # ------------------------------------------------------------------
    # Modal settings
    # ------------------------------------------------------------------

    def set_spindle_speed(
        self, speed: float, *, force_print: bool = False, no_flush: bool = False,
    ) -> None:
        self._emit(
            self._machine.set_spindle_speed(speed, force_print),
            no_flush=no_flush,
        )

    def set_spindle_direction(
        self,
        direction: Direction | str,
        *,
        force_print: bool = False,
        no_flush: bool = False,
    ) -> None:
        self._emit(
            self._machine.set_spindle_direction(direction, force_print),
            no_flush=no_flush,
        )

    def set_feed_rate(
        self, feed: float, *, force_print: bool = False, no_flush: bool = False,
    ) -> None:
        self._emit(
            self._machine.set_feed_rate(feed, force_print), no_flush=no_flush,
        )

    def set_feed_rate_mode(
        self, mode: int, *, force_print: bool = False, no_flush: bool = False,
    ) -> None:
        self._emit(
            self._machine.set_feed_rate_mode(mode, force_print),
            no_flush=no_flush,
        )

    def set_unit_system(
        self, units: int, *, force_print: bool = False, no_flush: bool = False,
    ) -> None:
        self._emit(
            self._machine.set_unit_system(units, force_print),
            no_flush=no_flush,
        )

    def set_positioning_mode(
        self, mode: int, *, force_print: bool = False, no_flush: bool = False,
    ) -> None:
        self._emit(
            self._machine.set_positioning_mode(mode, force_print),
            no_flush=no_flush,
        )

    def set_machine_plane(
        self,
        plane: Plane | str,
        *,
        force_print: bool = False,
        no_flush: bool = False,
    ) -> None:
        self._emit(
            self._machine.set_machine_plane(plane, force_print),
            no_flush=no_flush,
        )

    def set_home_number(
        self, number: int, *, force_print: bool = False, no_flush: bool = False,
    ) -> None:
        self._emit(
            self._machine.set_home_number(number, force_print),
            no_flush=no_flush,
        )

    # ------------------------------------------------------------------
    # Tools
    # ------------------------------------------------------------------

    def select_tool(
        self, tool: str, *, force_print: bool = False, no_flush: bool = False,
    ) -> None:
        """Preselect *tool* (``T="<tool>"``) without changing it."""
        self._emit(
            self._machine.select_tool(tool, force_print), no_flush=no_flush,
        )

    def change_tool(
        self, tool: str, *, force_print: bool = False, no_flush: bool = False,
    ) -> None:
        """Select *tool* and load it into the spindle (``M6``).

        ``M6`` is an action, not a modal value, so it is written on every
        call even when the tool word is suppressed.
        """
        self._emit(
            self._machine.select_tool(tool, force_print),
            TOOL_CHANGE_WORD,
            no_flush=no_flush,
        )

    # ------------------------------------------------------------------
    # Program flow
    # ------------------------------------------------------------------

    def call(self, name: str, *, no_flush: bool = False) -> None:
        """Call a subprogram by name."""
        self._emit(name, no_flush=no_flush)

    def ext_call(self, name: str, *, no_flush: bool = False) -> None:
        """Call an external program (``EXTCALL "<name>"``)."""
        self._emit(f'EXTCALL "{name}"', no_flush=no_flush)

    def comment(self, text: str, *, no_flush: bool = False) -> None:
        """Write ``; text``."""
        if text and text.strip():
            self._emit(f"; {text.strip()}", no_flush=no_flush)

    def new_subprogram(self, name: str) -> None:
        """Open subprogram *name* and direct output to it.

        Raises
        ------
        FileContextError
            If a subprogram is already open or *name* is taken.
        """
        if self.in_subprogram:
            raise FileContextError(
                f"Cannot open subprogram '{name}' inside subprogram "
                f"'{self._current}'"
            )
        if name in self._files:
            raise FileContextError(f"File '{name}' already exists")
        self._files[name] = LineBuffer(name, self._cfg.numbering.start)
        self._current = name
        logger.debug("Opened subprogram %s", name)

    def end_subprogram(self) -> None:
        """Close the open subprogram and return to the main file.

        The pending line is flushed and the configured end word (``M17``
        by default) is written as the last line of the subprogram.

        Raises
        ------
        FileContextError
            If the main file is current.
        """
        if not self.in_subprogram:
            raise FileContextError(
                f"Cannot end subprogram: '{self._current}' is the main file"
            )
        self.flush()
        self.put(self._cfg.files.subprogram_end_word, flush_line=True)
        logger.debug("Closed subprogram %s", self._current)
        self._current = self._main_name

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    def build(self) -> list[GeneratedFile]:
        """Return every file, main first, then subprograms in creation order."""
        return [
            GeneratedFile(buf.name, buf.text) for buf in self._files.values()
        ]
