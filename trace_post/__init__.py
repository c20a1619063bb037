"""
Trace Post-Processor Package.

Converts a CAM tool's textual trace log into a numbered G-code instruction
stream.  Trace text is parsed into event records, each record is dispatched
to user-registered listeners, and listeners emit G-code through a
state-aware builder that suppresses redundant words.

Subpackages:
    common: Trace vocabulary enums (direction, state, plane)
    trace: Trace text parser and event records
    gcode: Emitters, machine model and the instruction builder
    program: Event dispatch engine with temporal lookups
    handlers: Standard listener wiring for common trace events
    configs: Post-processor configuration loading and validation
"""

__all__ = ["common", "trace", "gcode", "program", "handlers", "configs"]
