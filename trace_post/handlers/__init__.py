"""Listener wiring for common trace events."""

from trace_post.handlers.standard import (
    STANDARD_HANDLERS,
    register_standard_handlers,
)

__all__ = ["STANDARD_HANDLERS", "register_standard_handlers"]
