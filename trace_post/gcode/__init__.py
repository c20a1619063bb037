"""
G-code generation module.

Change-tracking emitters, the machine model built from them, and the
builder that turns listener verbs into numbered instruction lines.
"""

from trace_post.gcode.builder import (
    Builder,
    FileContextError,
    GeneratedFile,
    LineBuffer,
)
from trace_post.gcode.emitter import Emitter, format_number
from trace_post.gcode.machine import Machine

__all__ = [
    "Builder",
    "Emitter",
    "FileContextError",
    "GeneratedFile",
    "LineBuffer",
    "Machine",
    "format_number",
]
