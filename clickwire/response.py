"""Error detection in responses from the database's HTTP interface."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from http import HTTPStatus

__all__ = [
    "BadResponseError",
    "extract_exception",
    "stringify_status",
    "bad_response_reason",
    "detect_exceptions",
]

_EXCEPTION_TAIL = b"))\n"
_CODE_MARKER = b"Code:"
_EXCEPTION_MARKER = b"DB::Exception:"


class BadResponseError(RuntimeError):
    """Raised when the server reports an error instead of data."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


def extract_exception(chunk: bytes) -> tuple[bytes, BadResponseError | None]:
    """Split a trailing server exception off ``chunk``.

    The server appends ``Code: <code>. DB::Exception: <desc> (version ...)``
    and a newline to the data when a query fails mid-stream. Returns the data
    before the exception and the error, or the whole chunk and None.
    """
    chunk = bytes(chunk)
    # "))\n" is rare in real data, so it makes a cheap first check.
    if not chunk.endswith(_EXCEPTION_TAIL):
        return chunk, None
    index = chunk.rfind(_CODE_MARKER)
    if index < 0 or _EXCEPTION_MARKER not in chunk[index:]:
        return chunk, None
    text = chunk[index:-1].decode("utf-8", errors="replace")
    return chunk[:index], BadResponseError(text)


def stringify_status(status: int) -> str:
    """Return the status code followed by its standard reason phrase."""
    try:
        phrase = HTTPStatus(status).phrase
    except ValueError:
        phrase = "<unknown>"
    return f"{status} {phrase}"


def bad_response_reason(status: int, body: bytes | None) -> str:
    """Return the reason to report for a response with a non-OK status.

    ``body`` is the collected response body, or None if it could not be
    read. A body that is not valid UTF-8 falls back to the status text.
    """
    if body is None:
        return stringify_status(status)
    try:
        return bytes(body).decode("utf-8").strip()
    except UnicodeDecodeError:
        return stringify_status(status)


def detect_exceptions(chunks: Iterable[bytes]) -> Iterator[bytes]:
    """Yield the chunks of a response body, raising on a server exception.

    The data before an exception is yielded first (it may be empty), then
    BadResponseError is raised and no further chunks are read.
    """
    for chunk in chunks:
        data, error = extract_exception(chunk)
        yield data
        if error is not None:
            raise error