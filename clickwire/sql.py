"""Building SQL text from templates with ``?`` placeholders."""

from __future__ import annotations

import copy
import enum
from typing import Any

from .row import join_column_names
from .sqlvalue import UnsupportedValueError, write_arg

__all__ = ["InvalidParamsError", "SqlBuilder"]


class InvalidParamsError(ValueError):
    """Raised when a query cannot be built from its template and arguments."""


class _Slot(enum.Enum):
    ARG = "?"
    FIELDS = "?fields"


def _parse(template: str) -> list[str | _Slot]:
    parts: list[str | _Slot] = []
    rest = template
    while (idx := rest.find("?")) >= 0:
        if rest[idx + 1 :].startswith("?"):
            parts.append(rest[: idx + 1])
            rest = rest[idx + 2 :]
            continue
        if idx != 0:
            parts.append(rest[:idx])
        rest = rest[idx + 1 :]
        if rest.startswith("fields"):
            parts.append(_Slot.FIELDS)
            rest = rest[len("fields") :]
        else:
            parts.append(_Slot.ARG)
    if rest:
        parts.append(rest)
    return parts


class SqlBuilder:
    """A SQL template whose ``?`` and ``?fields`` slots are filled in turn.

    ``??`` stands for a literal question mark. Errors are remembered and
    reported by :meth:`finish`.
    """

    def __init__(self, template: str) -> None:
        self._parts = _parse(template)
        self._error: str | None = None

    def _fail(self, message: str) -> None:
        self._error = f"invalid SQL: {message}"
        self._parts = []

    def __copy__(self) -> SqlBuilder:
        clone = SqlBuilder.__new__(SqlBuilder)
        clone._parts = list(self._parts)
        clone._error = self._error
        return clone

    def copy(self) -> SqlBuilder:
        return copy.copy(self)

    def bind_arg(self, value: Any) -> None:
        """Fill the next unbound ``?`` with ``value`` rendered as SQL."""
        if self._error is not None:
            return
        try:
            idx = self._parts.index(_Slot.ARG)
        except ValueError:
            self._fail("unexpected bind(), all arguments are already bound")
            return
        try:
            text = write_arg(value)
        except UnsupportedValueError as err:
            self._fail(f"invalid argument: {err}")
            return
        self._parts[idx] = text

    def bind_fields(self, row_type: Any) -> None:
        """Fill every ``?fields`` with the quoted column names of ``row_type``."""
        if self._error is not None:
            return
        fields = join_column_names(row_type)
        if fields is not None:
            self._parts = [fields if p is _Slot.FIELDS else p for p in self._parts]
        elif _Slot.FIELDS in self._parts:
            self._fail("argument ?fields cannot be used with non-struct row types")

    def append(self, suffix: str) -> None:
        """Append literal text to the end of the query."""
        if self._error is None:
            self._parts.append(suffix)

    def finish(self) -> str:
        """Return the complete SQL text, raising InvalidParamsError on failure."""
        if self._error is not None:
            raise InvalidParamsError(self._error)
        for part in self._parts:
            if part is _Slot.ARG:
                raise InvalidParamsError("invalid SQL: unbound query argument")
            if part is _Slot.FIELDS:
                raise InvalidParamsError("invalid SQL: unbound query argument ?fields")
        return "".join(self._parts)  # type: ignore[arg-type]

    def __str__(self) -> str:
        if self._error is not None:
            return self._error
        return "".join(p.value if isinstance(p, _Slot) else p for p in self._parts)