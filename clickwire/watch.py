"""Live views: planning the statements that watch a query for changes."""

from __future__ import annotations

import dataclasses
import hashlib
import re
from datetime import timedelta
from typing import Any

from .row import column_names
from .sql import SqlBuilder

__all__ = ["WatchPlan", "Watch", "is_table_name", "make_live_view_name"]

WATCH_OPTIONS = {
    "max_execution_time": "0",
    "allow_experimental_live_view": "1",
    "output_format_json_quote_64bit_integers": "0",
}

_ASCII_WHITESPACE = re.compile("[ \t\n\f\r]+")


@dataclasses.dataclass(frozen=True)
class WatchPlan:
    """What is needed to watch a live view: an optional view query and the view."""

    sql: str | None
    view: str
    refresh: timedelta | None = None
    limit: int | None = None
    only_events: bool = False
    options: dict[str, str] = dataclasses.field(default_factory=lambda: dict(WATCH_OPTIONS))

    def statements(self) -> list[str]:
        """The statements to run in order: CREATE LIVE VIEW if needed, then WATCH."""
        statements = []
        if self.sql is not None:
            refresh = ""
            if self.refresh is not None:
                refresh = f" REFRESH {int(self.refresh.total_seconds())}"
            statements.append(
                f"CREATE LIVE VIEW IF NOT EXISTS {self.view}{refresh} AS {self.sql}"
            )
        watch = f"WATCH {self.view}"
        if self.only_events:
            watch += " EVENTS"
        if self.limit is not None:
            watch += f" LIMIT {self.limit}"
        watch += " FORMAT JSONEachRowWithProgress"
        statements.append(watch)
        return statements


class Watch:
    """A query or table name to watch for changes."""

    def __init__(self, template: str) -> None:
        self._sql = SqlBuilder(template)
        self._refresh: timedelta | None = None
        self._limit: int | None = None
        self._only_events = False

    def bind(self, value: Any) -> Watch:
        """Bind ``value`` to the next ``?`` in the query."""
        self._sql.bind_arg(value)
        return self

    def limit(self, limit: int | None) -> Watch:
        """Limit the number of updates after the initial one."""
        self._limit = limit
        return self

    def refresh(self, interval: timedelta | float | None) -> Watch:
        """Set the refresh interval of the live view; only for SQL queries."""
        if interval is not None and not isinstance(interval, timedelta):
            interval = timedelta(seconds=interval)
        self._refresh = interval
        return self

    def only_events(self) -> Watch:
        """Report only new versions instead of rows."""
        self._only_events = True
        return self

    def plan(self, row_type: Any = None) -> WatchPlan:
        """Finish the query and describe how to watch it.

        Unless only events are watched, ``row_type`` must have column names.
        """
        if not self._only_events and not column_names(row_type):
            raise TypeError("only structs are supported in the watch API")
        sql_builder = self._sql.copy()
        sql_builder.bind_fields(row_type)
        sql = sql_builder.finish()
        if is_table_name(sql):
            view_sql, view = None, sql
        else:
            view_sql, view = sql, make_live_view_name(sql)
        return WatchPlan(
            sql=view_sql,
            view=view,
            refresh=self._refresh,
            limit=self._limit,
            only_events=self._only_events,
        )


def is_table_name(sql: str) -> bool:
    """Whether ``sql`` is a single word, taken to be a view or table name."""
    return len([word for word in _ASCII_WHITESPACE.split(sql) if word]) == 1


def make_live_view_name(sql: str) -> str:
    """A stable live view name derived from the query text."""
    return "lv_" + hashlib.sha1(sql.encode("utf-8")).hexdigest()