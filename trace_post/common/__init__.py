"""Vocabulary shared by the parser and the machine model."""

from trace_post.common.enums import Direction, Plane, State

__all__ = ["Direction", "Plane", "State"]
