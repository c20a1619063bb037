"""
Trace parsing module.

Turns CAM trace text into an ordered list of typed event records.
"""

from trace_post.trace.parser import EventRecord, Parser, Scalar, parse

__all__ = ["EventRecord", "Parser", "Scalar", "parse"]
