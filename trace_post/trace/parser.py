"""Trace parser -- CAM trace text to event records.

A trace log is a sequence of event blocks.  Each block opens with a
marker line carrying a sequential number and a snake_case event name,
followed (on the same line or the lines below) by ``key: value``
parameters::

    (0)@start_of_file
        program_number: '1234'
        part_name: 'TEST_PART'
    (1)@m_feed_spin feed: 1200 spin: 8000rpm spin_direction: cw
    (2)@end_of_file

Value typing:
    ``'...'``              -> ``str`` (quotes stripped, content verbatim)
    ``true`` / ``false``   -> ``bool``
    ``12.5`` / ``1000rpm`` -> ``float`` (trailing unit letters stripped)
    ``cw`` / ``on`` / ``xy`` -> vocabulary enum member
    anything else          -> the raw token

The parser never raises on malformed input: unrecognised values fall
through as raw strings and lines outside any event block are ignored.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Union

from trace_post.common.enums import lookup_symbol

logger = logging.getLogger(__name__)

Scalar = Union[str, float, bool]
"""A typed trace parameter value."""

# ---------------------------------------------------------------------------
# Patterns
# ---------------------------------------------------------------------------

_EVENT_MARKER = re.compile(r"^\s*\((\d+)\)@(\w+)")
_KEY_VALUE = re.compile(r"(\w+)\s?:\s?'([^']*)'|(\w+)\s?:\s?(\S+)")
_NUMBER_WITH_UNIT = re.compile(
    r"^([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)[A-Za-z]*$"
)


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class EventRecord:
    """One parsed trace block.

    Parameters
    ----------
    name : str
        Event name in PascalCase (``start_of_file`` -> ``StartOfFile``).
    index : int
        Zero-based position of the block within one parse call.
    parameters : dict[str, Scalar]
        Typed key/value parameters of the block.
    """

    name: str
    index: int
    parameters: dict[str, Scalar] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Flat JSON-friendly form (``_eventName`` / ``_index`` framing)."""
        data: dict[str, Any] = {"_eventName": self.name, "_index": self.index}
        data.update(self.parameters)
        return data


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def to_pascal_case(identifier: str) -> str:
    """Convert a snake_case identifier to PascalCase."""
    return "".join(
        word[:1].upper() + word[1:].lower() for word in identifier.split("_")
    )


def coerce_value(token: str) -> Scalar:
    """Type an unquoted trace token (see module docstring)."""
    if token == "true":
        return True
    if token == "false":
        return False
    match = _NUMBER_WITH_UNIT.match(token)
    if match:
        return float(match.group(1))
    symbol = lookup_symbol(token)
    if symbol is not None:
        return symbol
    return token


def _scan_parameters(line: str, into: dict[str, Scalar]) -> None:
    for match in _KEY_VALUE.finditer(line):
        quoted_key, quoted_value, key, token = match.groups()
        if quoted_key is not None:
            into[quoted_key] = quoted_value
        else:
            into[key] = coerce_value(token)


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


class Parser:
    """Parse trace text into :class:`EventRecord` objects.

    Parameters
    ----------
    text : str
        Complete trace log contents.
    """

    def __init__(self, text: str) -> None:
        self._text = text

    def parse(self) -> list[EventRecord]:
        """Parse the trace text.

        Returns
        -------
        list[EventRecord]
            Records in order of appearance, indexed ``0..N-1``.
        """
        records: list[EventRecord] = []
        name: str | None = None
        params: dict[str, Scalar] = {}

        for line in self._text.splitlines():
            marker = _EVENT_MARKER.match(line)
            if marker:
                if name is not None:
                    records.append(EventRecord(name, len(records), params))
                name = to_pascal_case(marker.group(2))
                params = {}

            if name is not None:
                _scan_parameters(line, params)

        if name is not None:
            records.append(EventRecord(name, len(records), params))

        logger.debug("Parsed %d trace events", len(records))
        return records


def parse(text: str) -> list[EventRecord]:
    """Shorthand for ``Parser(text).parse()``."""
    return Parser(text).parse()
