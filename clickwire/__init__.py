"""SQL templating, request building, RowBinary encoding and response checks for ClickHouse over HTTP."""

__version__ = "0.1.0"