"""Rendering of Python values as SQL literals for query arguments."""

from __future__ import annotations

import dataclasses
import enum
import math
from collections.abc import Mapping
from decimal import Decimal

from . import escape

__all__ = ["UnsupportedValueError", "Identifier", "write_arg"]


class UnsupportedValueError(TypeError):
    """Raised when a value has no SQL literal form."""

    def __init__(self, kind: str) -> None:
        super().__init__(f"{kind} is unsupported")
        self.kind = kind


@dataclasses.dataclass(frozen=True)
class Identifier:
    """A name bound as a quoted identifier, e.g. a table name."""

    name: str


def _format_float(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "inf" if value > 0 else "-inf"
    text = format(Decimal(repr(value)), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def _join(items, opening: str, closing: str) -> str:
    return opening + ",".join(write_arg(item) for item in items) + closing


def write_arg(value: object) -> str:
    """Render ``value`` as SQL text suitable for a bound argument."""
    if value is None:
        return "NULL"
    if isinstance(value, Identifier):
        return escape.identifier(value.name)
    if isinstance(value, enum.Enum):
        return escape.string(value.name)
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(int(value))
    if isinstance(value, float):
        return _format_float(float(value))
    if isinstance(value, str):
        return escape.string(value)
    if isinstance(value, (bytes, bytearray, memoryview)):
        raise UnsupportedValueError("bytes")
    if isinstance(value, tuple):
        if hasattr(type(value), "_fields"):
            raise UnsupportedValueError("tuple struct")
        return _join(value, "(", ")")
    if isinstance(value, (list, set, frozenset)):
        return _join(value, "[", "]")
    if isinstance(value, Mapping):
        raise UnsupportedValueError("map")
    if dataclasses.is_dataclass(value):
        raise UnsupportedValueError("struct")
    raise UnsupportedValueError(type(value).__name__)