"""Quoting of string literals and identifiers for SQL text."""

from __future__ import annotations

__all__ = ["string", "identifier"]


def _escape(src: str, quote: str) -> str:
    escaped = src.replace("\\", "\\\\").replace(quote, "\\" + quote)
    return f"{quote}{escaped}{quote}"


def string(src: str) -> str:
    """Return ``src`` as a single-quoted SQL string literal."""
    return _escape(src, "'")


def identifier(src: str) -> str:
    """Return ``src`` as a backtick-quoted SQL identifier."""
    return _escape(src, "`")