"""Event dispatch engine.

A :class:`Program` holds the loaded trace events, a registry of listeners
keyed by event name, and the :class:`~trace_post.gcode.builder.Builder`
the listeners write to::

    program = Program.from_text(trace_text)

    @program.listener("RapidMove")
    def rapid(params, b, meta):
        b.rapid(x=params["xpos"], y=params["ypos"], z=params["zpos"])

    program.process()
    print(program.generate())

Dispatch is sequential and synchronous.  Listeners run in registration
order and receive ``(params, builder, metadata)``.  A listener exception
propagates out of :meth:`Program.trigger` and :meth:`Program.process`
unchanged; lines already flushed stay in the builder.
"""

from __future__ import annotations

import logging
from typing import Callable, Iterable, Mapping, Optional

from trace_post.configs.loader import PostConfig
from trace_post.gcode.builder import Builder, GeneratedFile
from trace_post.program.events import Event, EventMetadata
from trace_post.trace.parser import EventRecord, Scalar, parse

logger = logging.getLogger(__name__)

Listener = Callable[[dict[str, Scalar], Builder, EventMetadata], None]
"""``listener(params, builder, metadata)``."""


class Program:
    """Load events, register listeners and drive G-code generation.

    Parameters
    ----------
    config : PostConfig | None
        Passed to the builder created for this program.
    builder : Builder | None
        Use an existing builder instead of creating one.
    """

    def __init__(
        self,
        config: PostConfig | None = None,
        builder: Builder | None = None,
    ) -> None:
        self._builder = builder if builder is not None else Builder(config)
        self._events: list[Event] = []
        self._listeners: dict[str, list[Listener]] = {}

    @classmethod
    def from_text(
        cls, text: str, config: PostConfig | None = None,
    ) -> "Program":
        """Parse *text* and load the resulting events."""
        program = cls(config)
        program.load_events(parse(text))
        return program

    @property
    def builder(self) -> Builder:
        return self._builder

    @property
    def events(self) -> tuple[Event, ...]:
        return tuple(self._events)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load_events(self, records: Iterable[EventRecord]) -> None:
        """Append parsed records as events bound to this program."""
        count = 0
        for record in records:
            self._events.append(
                Event(
                    program=self,
                    name=record.name,
                    params=dict(record.parameters),
                    position=len(self._events),
                )
            )
            count += 1
        logger.debug("Loaded %d events (%d total)", count, len(self._events))

    def list_events(self) -> list[str]:
        """Names of the loaded events in load order."""
        return [event.name for event in self._events]

    # ------------------------------------------------------------------
    # Listener registry
    # ------------------------------------------------------------------

    def on(self, name: str, listener: Listener) -> None:
        """Register *listener* for events named *name*.

        Listeners for one name run in registration order.
        """
        self._listeners.setdefault(name, []).append(listener)

    def off(self, name: str, listener: Listener) -> None:
        """Unregister *listener*; unknown names or listeners are ignored."""
        listeners = self._listeners.get(name)
        if listeners:
            self._listeners[name] = [l for l in listeners if l is not listener]

    def listener(self, name: str) -> Callable[[Listener], Listener]:
        """Decorator form of :meth:`on`."""

        def register(fn: Listener) -> Listener:
            self.on(name, fn)
            return fn

        return register

    def listeners(self, name: str) -> list[Listener]:
        """Snapshot of the listeners registered for *name*."""
        return list(self._listeners.get(name, ()))

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def trigger(
        self,
        name: str,
        params: Optional[Mapping[str, Scalar]] = None,
        metadata: Optional[EventMetadata] = None,
    ) -> None:
        """Run the listeners registered for *name*.

        Parameters
        ----------
        name : str
            Event name.
        params : Mapping[str, Scalar] | None
            Parameters handed to every listener.
        metadata : EventMetadata | None
            Position of the event in the loaded sequence.  Manual
            triggers may omit it; lookups then return ``None``.

        Raises
        ------
        Exception
            Whatever a listener raises, unchanged.
        """
        listeners = self.listeners(name)
        if not listeners:
            logger.debug("No listeners for %s", name)
            return
        if metadata is None:
            metadata = EventMetadata()
        params = dict(params) if params is not None else {}
        for listener in listeners:
            listener(params, self._builder, metadata)

    def process(self) -> None:
        """Dispatch every loaded event in order."""
        events = tuple(self._events)
        for i, event in enumerate(events):
            event.trigger(EventMetadata(events, i))
        logger.info("Processed %d events", len(events))

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    def generate(self) -> str:
        """Flush pending lines and return the main program text."""
        self._builder.flush_all()
        return self._builder.gcode

    def generate_files(self) -> list[GeneratedFile]:
        """Flush pending lines and return every generated file."""
        if self._builder.in_subprogram:
            logger.warning(
                "Subprogram %s still open at end of output",
                self._builder.current_file,
            )
        self._builder.flush_all()
        return self._builder.build()
