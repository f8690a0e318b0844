"""Column names of row types described as dataclasses."""

from __future__ import annotations

import dataclasses
from typing import Any

from . import escape

__all__ = ["column", "column_names", "join_column_names"]

_RENAME = "clickwire.rename"
_SKIP_SERIALIZING = "clickwire.skip_serializing"
_SKIP_DESERIALIZING = "clickwire.skip_deserializing"


def column(
    rename: str | None = None,
    skip_serializing: bool = False,
    skip_deserializing: bool = False,
    **kwargs: Any,
) -> Any:
    """Declare a dataclass field with a column name or skip flags.

    Extra keyword arguments go to :func:`dataclasses.field`.
    """
    metadata = dict(kwargs.pop("metadata", None) or {})
    metadata[_RENAME] = rename
    metadata[_SKIP_SERIALIZING] = skip_serializing
    metadata[_SKIP_DESERIALIZING] = skip_deserializing
    return dataclasses.field(metadata=metadata, **kwargs)


def column_names(row_type: Any) -> tuple[str, ...]:
    """Return the column names of a row type.

    A dataclass gives its fields; a tuple ``(RowType, P1, ...)`` gives the
    names of its first element; anything else has no names.
    """
    if isinstance(row_type, tuple):
        return column_names(row_type[0]) if row_type else ()
    if not dataclasses.is_dataclass(row_type):
        return ()
    names = []
    for field in dataclasses.fields(row_type):
        meta = field.metadata
        if meta.get(_SKIP_SERIALIZING) or meta.get(_SKIP_DESERIALIZING):
            continue
        names.append(meta.get(_RENAME) or field.name)
    return tuple(names)


def join_column_names(row_type: Any) -> str | None:
    """Join the quoted column names with commas, or None if there are none."""
    names = column_names(row_type)
    if not names:
        return None
    return ",".join(escape.identifier(name) for name in names)