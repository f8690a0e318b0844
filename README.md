# clickwire

clickwire provides the building blocks of a ClickHouse HTTP client. It uses
only the standard library.

## What it covers

- **SQL templating** (`clickwire.sql`). `SqlBuilder` takes a template with
  `?` placeholders and `?fields` slots. `??` stands for a literal `?`.
  `bind_arg` fills the next `?`. `bind_fields` fills every `?fields` with the
  quoted column names of a row type. `append` adds text at the end, and
  `finish` returns the SQL. Errors are remembered along the way and raised
  from `finish` as `InvalidParamsError`.
- **SQL literals** (`clickwire.sqlvalue`). `write_arg` renders a value as SQL
  text:
  - `None` becomes `NULL`.
  - Booleans, integers and floats become plain literals.
  - Strings become quoted literals.
  - Enum members become their quoted name.
  - Lists and sets become `[...]`.
  - Tuples become `(...)`.
  - `Identifier(name)` becomes a backtick-quoted name.

  Bytes, mappings, dataclasses and named tuples raise
  `UnsupportedValueError`.
- **Quoting** (`clickwire.escape`). `string` and `identifier` quote text and
  backslash-escape it.
- **Row types** (`clickwire.row`). Rows are described as dataclasses. A field
  declared with `column(rename=..., skip_serializing=..., skip_deserializing=...)`
  can be renamed or skipped. `column_names` returns a row type's column names.
  A tuple `(RowType, P1, ...)` gives the names of its first element.
  `join_column_names` returns the names quoted and comma-joined, or `None`
  when there are none.
- **Requests** (`clickwire.query`). `Query` holds a server URL and a template.
  It can also hold a database, options, a user, a password and a
  `Compression` setting. `bind` and `with_option` return the query, so calls
  can be chained. `sql_display` shows the SQL as it stands.

  Three methods return an `HttpRequest`, which has `method`, `url`,
  `headers`, `body`, `compression` and decoded `params`:
  - `build_request(read_only)` builds the request for the SQL as it stands.
  - `execute_request()` is the request that runs the query without reading
    rows.
  - `fetch_request(row_type)` fills `?fields` and appends
    ` FORMAT RowBinary`.

  A read-only query of at most 8192 bytes goes as a GET with a `query`
  parameter. Anything else goes as a POST with the SQL as the body, and
  read-only queries sent as a POST add `readonly=1`. `Compression.LZ4` adds
  `compress=1`. A user and a password are sent in the `X-ClickHouse-User`
  and `X-ClickHouse-Key` headers.
- **Live views** (`clickwire.watch`). `Watch` is built from a query or a
  table name and takes `bind`, `limit`, `refresh` and `only_events`.
  `plan(row_type)` returns a `WatchPlan`, whose `statements()` lists the
  `CREATE LIVE VIEW IF NOT EXISTS ...` statement, when one is needed, and
  then the `WATCH ... FORMAT JSONEachRowWithProgress` statement. A query gets
  a view named `lv_` followed by the SHA-1 of its text
  (`make_live_view_name`). A single word is taken as a view name
  (`is_table_name`). Unless only events are watched, the row type must have
  column names; otherwise `plan` raises `TypeError`.
- **RowBinary** (`clickwire.rowbinary`). `serialize(types, values)` encodes one
  row and `deserialize(types, data)` decodes one. Types are given by name:
  - integers from `Int8`/`UInt8` up to `Int256`/`UInt256`;
  - `Float32`, `Float64`, `Bool`, `String` and `FixedString(n)`;
  - `Date`, `Date32`, `DateTime`, `DateTime64(p)`, `IPv4`, `Enum8`,
    `Enum16` and the `Decimal` types, all as raw integers;
  - `Nullable(...)`, `LowCardinality(...)`, `Array(...)` and `Tuple(...)`.

  `Map` is rejected. `parse_type` parses a type name, and `encode_leb128` and
  `decode_leb128` handle length prefixes. Short input raises
  `NotEnoughDataError`, and a bad tag byte raises `InvalidTagEncodingError`.
  Both are subclasses of `RowBinaryError`.
- **Conversions** (`clickwire.convert`). These functions convert between
  Python values and the integers of the wire format:
  - IPv4 addresses: `ipv4_to_int`, `ipv4_from_int`.
  - UUIDs, as a pair of 64-bit halves: `uuid_to_pair`, `uuid_from_pair`.
  - `DateTime`: `datetime_to_int`, `datetime_from_int`.
  - `DateTime64` at precision 0, 3, 6 or 9: `datetime64_to_int`,
    `datetime64_from_int`.
  - `Date`: `date_to_days`, `date_from_days`.
  - `Date32`: `date32_to_days`, `date32_from_days`.

  Values out of range raise `ConversionError`.
- **Periodic deadlines** (`clickwire.ticks`). `Ticks` schedules deadlines
  every period, shifted by up to a bias fraction of a period. Its methods are
  `set_period`, `set_period_bias`, `reschedule`, `time_left` and `reached`.
  A period of `None`, zero, or a year or longer disables the deadlines. The
  clock can be injected.
- **Responses** (`clickwire.response`). `extract_exception` splits a trailing
  `Code: ... DB::Exception: ...` message off a chunk. `detect_exceptions`
  yields chunks and raises `BadResponseError` when the server reports an
  error mid-stream. `bad_response_reason` and `stringify_status` give the
  reason for a non-OK status.

## Example

```python
from dataclasses import dataclass

from clickwire.query import Query
from clickwire.rowbinary import deserialize


@dataclass
class Item:
    no: int
    name: str


query = Query("http://localhost:8123", "SELECT ?fields FROM items WHERE no > ?").bind(500)
request = query.fetch_request(Item)
print(request.method, request.url)  # GET with the SQL in the query parameter

row = deserialize(["UInt32", "String"], b"\x2a\x00\x00\x00\x03foo")
assert row == (42, "foo")
```

## What it does not do

clickwire does not open connections or send requests. `HttpRequest` is a
description that you pass to an HTTP library of your choice. Likewise, it
has no cursors that read rows from a live response. There is no insert or
batching API. No LZ4 compression or decompression is performed:
`Compression.LZ4` only sets the URL parameter. `WatchPlan` gives the
statements to run, but parsing the JSON rows that the server streams back is
left to the caller.

## Running the tests

```
pip install -e ".[test]"
pytest
```