"""Change-tracking G-code word emitter.

An :class:`Emitter` remembers the last value it rendered for one machine
parameter and only produces a word (``X100``, ``S8000``, ``M3``) when the
value changes, or when the caller forces it.  This is what keeps modal
words from being repeated on every line.
"""

from __future__ import annotations

import math
from decimal import Decimal
from typing import Callable, Generic, TypeVar

T = TypeVar("T", str, float, int)


def format_number(value: object) -> str:
    """Render a word value.

    Integral floats drop the trailing ``.0`` (``100.0`` -> ``"100"``) and
    other finite floats are written in fixed-point notation with their
    shortest round-trip digits (``1e-05`` -> ``"0.00001"``).  Everything
    else uses ``str()``.
    """
    if isinstance(value, float) and math.isfinite(value):
        if value.is_integer():
            return str(int(value))
        return format(Decimal(repr(value)), "f")
    return str(value)


def _same(a: object, b: object) -> bool:
    # bool is an int subclass; True must not suppress a 1.
    if isinstance(a, bool) or isinstance(b, bool):
        return type(a) is type(b) and a == b
    return a == b


class Emitter(Generic[T]):
    """One tracked machine parameter.

    Parameters
    ----------
    prefix : str
        Word address letter(s), e.g. ``"X"``, ``"G"``, ``"M"``.
    transform : Callable[[T], str] | None
        Optional value formatter.  Defaults to :func:`format_number`.
    """

    def __init__(
        self,
        prefix: str,
        transform: Callable[[T], str] | None = None,
    ) -> None:
        self._prefix = prefix
        self._transform = transform or format_number
        self._value: T | None = None

    @property
    def prefix(self) -> str:
        return self._prefix

    @property
    def value(self) -> T | None:
        """Last rendered value, ``None`` until the first render."""
        return self._value

    def render(self, new_value: T | None = None, force_print: bool = False) -> str:
        """Render *new_value* if it differs from the last rendered value.

        Parameters
        ----------
        new_value : T | None
            Value to emit.  ``None`` renders nothing and keeps state.
        force_print : bool
            Emit even when *new_value* equals the stored value.

        Returns
        -------
        str
            ``prefix + transform(new_value)``, or ``""`` when suppressed.
        """
        if new_value is None:
            return ""
        if not force_print and _same(self._value, new_value):
            return ""
        self._value = new_value
        return f"{self._prefix}{self._transform(new_value)}"

    def reset(self) -> None:
        """Forget the stored value so the next render always emits."""
        self._value = None

    def __repr__(self) -> str:
        return f"Emitter(prefix={self._prefix!r}, value={self._value!r})"
