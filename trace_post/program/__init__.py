"""
Event dispatch module.

Loads parsed trace events, runs registered listeners in order and exposes
temporal lookups (previous / next / n-th occurrence) to each listener.
"""

from trace_post.program.events import Event, EventMetadata
from trace_post.program.program import Listener, Program

__all__ = ["Event", "EventMetadata", "Listener", "Program"]
