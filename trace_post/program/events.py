"""Loaded events and the metadata handed to every listener."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional, Sequence

from trace_post.program import lookup
from trace_post.trace.parser import Scalar

if TYPE_CHECKING:
    from trace_post.program.program import Program


@dataclass(frozen=True, eq=False)
class Event:
    """A trace event loaded into a :class:`Program`.

    Parameters
    ----------
    program : Program
        Owning program; :meth:`trigger` dispatches through it.
    name : str
        PascalCase event name.
    params : dict[str, Scalar]
        Event parameters without the name/index framing.
    position : int
        Position in the program's event list.
    """

    program: "Program" = field(repr=False)
    name: str
    params: dict[str, Scalar]
    position: int

    def trigger(self, metadata: Optional["EventMetadata"] = None) -> None:
        """Run every listener registered for this event's name."""
        self.program.trigger(self.name, self.params, metadata)


@dataclass(frozen=True)
class EventMetadata:
    """Where the event being dispatched sits in the loaded sequence.

    ``index`` is ``None`` for manual triggers; every lookup then
    returns ``None``.
    """

    events: Sequence[Event] = field(default=(), repr=False)
    index: Optional[int] = None

    @property
    def event(self) -> Optional[Event]:
        """The event being dispatched."""
        if self.index is None or not 0 <= self.index < len(self.events):
            return None
        return self.events[self.index]

    @property
    def next_event(self) -> Optional[Event]:
        return lookup.next_event(self.events, self.index)

    @property
    def previous_event(self) -> Optional[Event]:
        return lookup.previous_event(self.events, self.index)

    def find_last_event(self, name: str) -> Optional[Event]:
        return lookup.find_last_event(self.events, self.index, name)

    def find_nearest_event(self, name: str) -> Optional[Event]:
        return lookup.find_nearest_event(self.events, self.index, name)

    def find_nth_next_event(self, name: str, n: int) -> Optional[Event]:
        return lookup.find_nth_next_event(self.events, self.index, name, n)

    def find_nth_previous_event(self, name: str, n: int) -> Optional[Event]:
        return lookup.find_nth_previous_event(self.events, self.index, name, n)
