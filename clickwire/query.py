"""Queries against the database's HTTP interface, built as plain requests."""

from __future__ import annotations

import copy
import dataclasses
import enum
from typing import Any
from urllib.parse import parse_qsl, quote_plus, urlsplit, urlunsplit

from .sql import InvalidParamsError, SqlBuilder

__all__ = ["Compression", "HttpRequest", "Query"]

MAX_QUERY_LEN_TO_USE_GET = 8192


class Compression(enum.Enum):
    """Compression of the transferred data."""

    NONE = "none"
    LZ4 = "lz4"

    @property
    def is_lz4(self) -> bool:
        return self is Compression.LZ4


@dataclasses.dataclass(frozen=True)
class HttpRequest:
    """An HTTP request ready to be sent to the server."""

    method: str
    url: str
    headers: dict[str, str]
    body: bytes
    compression: Compression

    @property
    def params(self) -> list[tuple[str, str]]:
        """The decoded query-string pairs of the URL."""
        return parse_qsl(urlsplit(self.url).query, keep_blank_values=True)


def _quote(text: str) -> str:
    return quote_plus(text, safe="*").replace("~", "%7E")


def _encode_pairs(pairs: list[tuple[str, str]]) -> str:
    return "&".join(f"{_quote(k)}={_quote(v)}" for k, v in pairs)


class Query:
    """A SQL query with bound arguments and per-query settings."""

    def __init__(
        self,
        url: str,
        template: str,
        database: str | None = None,
        options: dict[str, str] | None = None,
        user: str | None = None,
        password: str | None = None,
        compression: Compression = Compression.NONE,
    ) -> None:
        self.url = url
        self.database = database
        self.options = dict(options or {})
        self.user = user
        self.password = password
        self.compression = compression
        self._sql = SqlBuilder(template)

    def bind(self, value: Any) -> Query:
        """Bind ``value`` to the next ``?`` in the query; ``??`` is a plain ``?``.

        Errors surface as InvalidParamsError when the request is built.
        """
        self._sql.bind_arg(value)
        return self

    def with_option(self, name: str, value: str) -> Query:
        """Set a server setting for this query only."""
        self.options[name] = value
        return self

    def sql_display(self) -> str:
        """The SQL text as it stands, with unbound slots shown."""
        return str(self._sql)

    def build_request(self, read_only: bool) -> HttpRequest:
        """Build the HTTP request carrying the finished SQL."""
        return self._build(self._sql, read_only)

    def execute_request(self) -> HttpRequest:
        """The request that runs the query without reading rows."""
        return self._build(self._sql, read_only=False)

    def fetch_request(self, row_type: Any) -> HttpRequest:
        """The read-only request that returns rows of ``row_type`` as RowBinary."""
        sql = copy.copy(self._sql)
        sql.bind_fields(row_type)
        sql.append(" FORMAT RowBinary")
        return self._build(sql, read_only=True)

    def _build(self, sql: SqlBuilder, read_only: bool) -> HttpRequest:
        query = sql.finish()
        try:
            parts = urlsplit(self.url)
        except ValueError as err:
            raise InvalidParamsError(f"invalid URL: {err}") from err
        if not parts.scheme or not parts.netloc:
            raise InvalidParamsError(f"invalid URL: {self.url!r}")

        pairs: list[tuple[str, str]] = []
        if self.database is not None:
            pairs.append(("database", self.database))

        encoded = query.encode("utf-8")
        if not read_only or len(encoded) > MAX_QUERY_LEN_TO_USE_GET:
            if read_only:
                pairs.append(("readonly", "1"))
            method, body = "POST", encoded
        else:
            pairs.append(("query", query))
            method, body = "GET", b""

        if self.compression.is_lz4:
            pairs.append(("compress", "1"))
        pairs.extend(self.options.items())

        url = urlunsplit(parts._replace(query=_encode_pairs(pairs)))
        headers = {"Content-Length": str(len(body))}
        if self.user is not None:
            headers["X-ClickHouse-User"] = self.user
        if self.password is not None:
            headers["X-ClickHouse-Key"] = self.password

        return HttpRequest(method, url, headers, body, self.compression)