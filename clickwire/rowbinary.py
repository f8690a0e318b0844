"""Encoding and decoding of rows in the RowBinary format.

Column types are given by their server-side names, e.g. ``"UInt32"``,
``"Nullable(String)"`` or ``"Array(Tuple(Int8, String))"``. Date, time and
decimal types travel as their raw integers (days, seconds, ticks or scaled
values).
"""

from __future__ import annotations

import dataclasses
import re
import struct
from collections.abc import Sequence
from typing import Any, Union

__all__ = [
    "RowBinaryError",
    "NotEnoughDataError",
    "InvalidTagEncodingError",
    "parse_type",
    "encode_leb128",
    "decode_leb128",
    "serialize",
    "deserialize",
]


class RowBinaryError(ValueError):
    """Raised when a row cannot be encoded or decoded."""


class NotEnoughDataError(RowBinaryError):
    """Raised when the input ends before a value is complete."""

    def __init__(self) -> None:
        super().__init__("not enough data, probably a row type mismatches a database schema")


class InvalidTagEncodingError(RowBinaryError):
    """Raised when a boolean or nullable tag byte has an unexpected value."""

    def __init__(self, tag: int) -> None:
        super().__init__(f"encountered an invalid tag encoding: {tag}")
        self.tag = tag


# === LEB128 ===


def encode_leb128(value: int) -> bytes:
    """Encode an unsigned 64-bit integer as unsigned LEB128."""
    if not isinstance(value, int) or value < 0 or value >= 1 << 64:
        raise RowBinaryError(f"cannot encode {value!r} as unsigned LEB128")
    out = bytearray()
    while True:
        byte = value & 0x7F
        value >>= 7
        if value:
            out.append(byte | 0x80)
        else:
            out.append(byte)
            return bytes(out)


def decode_leb128(buf: bytes, pos: int = 0) -> tuple[int, int]:
    """Decode an unsigned LEB128 integer at ``pos``; return it and the next position."""
    value = 0
    shift = 0
    while True:
        if pos >= len(buf):
            raise NotEnoughDataError()
        byte = buf[pos]
        pos += 1
        value |= (byte & 0x7F) << shift
        if not byte & 0x80:
            return value, pos
        shift += 7
        if shift > 57:
            raise NotEnoughDataError()


# === Reading ===


class _Reader:
    def __init__(self, data: bytes) -> None:
        self.data = bytes(data)
        self.pos = 0

    def take(self, size: int) -> bytes:
        end = self.pos + size
        if end > len(self.data):
            raise NotEnoughDataError()
        chunk = self.data[self.pos : end]
        self.pos = end
        return chunk

    def size(self) -> int:
        value, self.pos = decode_leb128(self.data, self.pos)
        return value


# === Types ===


@dataclasses.dataclass(frozen=True)
class _Int:
    name: str
    size: int
    signed: bool

    def __str__(self) -> str:
        return self.name

    def encode(self, value: Any, out: bytearray) -> None:
        if not isinstance(value, int):
            raise RowBinaryError(f"{self.name} expects an integer, got {value!r}")
        try:
            out += int(value).to_bytes(self.size, "little", signed=self.signed)
        except OverflowError as err:
            raise RowBinaryError(f"{value} does not fit into {self.name}") from err

    def decode(self, reader: _Reader) -> int:
        return int.from_bytes(reader.take(self.size), "little", signed=self.signed)


@dataclasses.dataclass(frozen=True)
class _Float:
    name: str
    fmt: str

    def __str__(self) -> str:
        return self.name

    def encode(self, value: Any, out: bytearray) -> None:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise RowBinaryError(f"{self.name} expects a number, got {value!r}")
        try:
            out += struct.pack(self.fmt, value)
        except (OverflowError, struct.error) as err:
            raise RowBinaryError(f"{value} does not fit into {self.name}") from err

    def decode(self, reader: _Reader) -> float:
        size = struct.calcsize(self.fmt)
        return struct.unpack(self.fmt, reader.take(size))[0]


@dataclasses.dataclass(frozen=True)
class _Bool:
    def __str__(self) -> str:
        return "Bool"

    def encode(self, value: Any, out: bytearray) -> None:
        if value not in (True, False) or not isinstance(value, int):
            raise RowBinaryError(f"Bool expects a boolean, got {value!r}")
        out.append(1 if value else 0)

    def decode(self, reader: _Reader) -> bool:
        tag = reader.take(1)[0]
        if tag == 0:
            return False
        if tag == 1:
            return True
        raise InvalidTagEncodingError(tag)


@dataclasses.dataclass(frozen=True)
class _String:
    def __str__(self) -> str:
        return "String"

    def encode(self, value: Any, out: bytearray) -> None:
        if isinstance(value, str):
            raw = value.encode("utf-8")
        elif isinstance(value, (bytes, bytearray, memoryview)):
            raw = bytes(value)
        else:
            raise RowBinaryError(f"String expects str or bytes, got {value!r}")
        out += encode_leb128(len(raw))
        out += raw

    def decode(self, reader: _Reader) -> str:
        raw = reader.take(reader.size())
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as err:
            raise RowBinaryError(f"invalid UTF-8 in String: {err}") from err


@dataclasses.dataclass(frozen=True)
class _FixedString:
    length: int

    def __str__(self) -> str:
        return f"FixedString({self.length})"

    def encode(self, value: Any, out: bytearray) -> None:
        if isinstance(value, str):
            raw = value.encode("utf-8")
        elif isinstance(value, (bytes, bytearray, memoryview)):
            raw = bytes(value)
        else:
            raise RowBinaryError(f"{self} expects str or bytes, got {value!r}")
        if len(raw) > self.length:
            raise RowBinaryError(f"{len(raw)} bytes do not fit into {self}")
        out += raw.ljust(self.length, b"\x00")

    def decode(self, reader: _Reader) -> bytes:
        return reader.take(self.length)


@dataclasses.dataclass(frozen=True)
class _Nullable:
    inner: _Type

    def __str__(self) -> str:
        return f"Nullable({self.inner})"

    def encode(self, value: Any, out: bytearray) -> None:
        if value is None:
            out.append(1)
        else:
            out.append(0)
            self.inner.encode(value, out)

    def decode(self, reader: _Reader) -> Any:
        tag = reader.take(1)[0]
        if tag == 0:
            return self.inner.decode(reader)
        if tag == 1:
            return None
        raise InvalidTagEncodingError(tag)


@dataclasses.dataclass(frozen=True)
class _Array:
    inner: _Type

    def __str__(self) -> str:
        return f"Array({self.inner})"

    def encode(self, value: Any, out: bytearray) -> None:
        if isinstance(value, (str, bytes, bytearray)) or not isinstance(value, Sequence):
            raise RowBinaryError(f"{self} expects a sequence, got {value!r}")
        out += encode_leb128(len(value))
        for item in value:
            self.inner.encode(item, out)

    def decode(self, reader: _Reader) -> list[Any]:
        return [self.inner.decode(reader) for _ in range(reader.size())]


@dataclasses.dataclass(frozen=True)
class _Tuple:
    items: tuple[_Type, ...]

    def __str__(self) -> str:
        return f"Tuple({', '.join(str(item) for item in self.items)})"

    def encode(self, value: Any, out: bytearray) -> None:
        if isinstance(value, (str, bytes, bytearray)) or not isinstance(value, Sequence):
            raise RowBinaryError(f"{self} expects a sequence, got {value!r}")
        if len(value) != len(self.items):
            raise RowBinaryError(f"{self} expects {len(self.items)} items, got {len(value)}")
        for item_type, item in zip(self.items, value):
            item_type.encode(item, out)

    def decode(self, reader: _Reader) -> tuple[Any, ...]:
        return tuple(item.decode(reader) for item in self.items)


_Type = Union[_Int, _Float, _Bool, _String, _FixedString, _Nullable, _Array, _Tuple]

_INTS = {
    "Int8": (1, True),
    "Int16": (2, True),
    "Int32": (4, True),
    "Int64": (8, True),
    "Int128": (16, True),
    "Int256": (32, True),
    "UInt8": (1, False),
    "UInt16": (2, False),
    "UInt32": (4, False),
    "UInt64": (8, False),
    "UInt128": (16, False),
    "UInt256": (32, False),
    "Date": (2, False),
    "Date32": (4, True),
    "IPv4": (4, False),
}
# Integer-backed types whose arguments do not change the encoding.
_INTS_WITH_ARGS = {
    "DateTime": (4, False),
    "DateTime64": (8, True),
    "Enum8": (1, True),
    "Enum16": (2, True),
}
_DECIMALS = {"Decimal32": 4, "Decimal64": 8, "Decimal128": 16, "Decimal256": 32}
_FLOATS = {"Float32": "<f", "Float64": "<d"}

_TYPE_RE = re.compile(r"(\w+)\s*(?:\((.*)\))?", re.DOTALL)
_NAMED_ITEM_RE = re.compile(r"([A-Za-z_]\w*)\s+(\S.*)", re.DOTALL)


def _split_args(text: str) -> list[str]:
    args: list[str] = []
    current: list[str] = []
    depth = 0
    quote: str | None = None
    for ch in text:
        if quote is not None:
            current.append(ch)
            if ch == quote:
                quote = None
            continue
        if ch in "'\"":
            quote = ch
        elif ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
        elif ch == "," and depth == 0:
            args.append("".join(current).strip())
            current = []
            continue
        current.append(ch)
    tail = "".join(current).strip()
    if tail or args:
        args.append(tail)
    return args


def _decimal_size(args: list[str], name: str) -> int:
    if len(args) != 2 or not args[0].isdigit():
        raise RowBinaryError(f"invalid type: {name!r}")
    precision = int(args[0])
    for limit, size in ((9, 4), (18, 8), (38, 16), (76, 32)):
        if 1 <= precision <= limit:
            return size
    raise RowBinaryError(f"invalid decimal precision: {name!r}")


def _single(args: list[str], name: str) -> str:
    if len(args) != 1 or not args[0]:
        raise RowBinaryError(f"invalid type: {name!r}")
    return args[0]


def parse_type(name: str) -> _Type:
    """Parse a column type name into a codec for its values."""
    match = _TYPE_RE.fullmatch(name.strip())
    if match is None:
        raise RowBinaryError(f"unknown type: {name!r}")
    base, inner = match.group(1), match.group(2)
    args = _split_args(inner) if inner is not None else []
    display = base if inner is None else f"{base}({', '.join(args)})"

    if base in _INTS and inner is None:
        size, signed = _INTS[base]
        return _Int(base, size, signed)
    if base in _INTS_WITH_ARGS:
        size, signed = _INTS_WITH_ARGS[base]
        return _Int(display, size, signed)
    if base in _DECIMALS and inner is not None:
        return _Int(display, _DECIMALS[base], True)
    if base == "Decimal" and inner is not None:
        return _Int(display, _decimal_size(args, name), True)
    if base in _FLOATS and inner is None:
        return _Float(base, _FLOATS[base])
    if base == "Bool" and inner is None:
        return _Bool()
    if base == "String" and inner is None:
        return _String()
    if base == "FixedString":
        length = _single(args, name)
        if not length.isdigit():
            raise RowBinaryError(f"invalid type: {name!r}")
        return _FixedString(int(length))
    if base == "Nullable":
        return _Nullable(parse_type(_single(args, name)))
    if base == "LowCardinality":
        return parse_type(_single(args, name))
    if base == "Array":
        return _Array(parse_type(_single(args, name)))
    if base == "Tuple":
        if not args or not all(args):
            raise RowBinaryError(f"invalid type: {name!r}")
        return _Tuple(tuple(_parse_tuple_item(arg) for arg in args))
    if base == "Map":
        raise RowBinaryError("maps are unsupported, use Array(Tuple(K, V)) instead")
    raise RowBinaryError(f"unknown type: {name!r}")


def _parse_tuple_item(text: str) -> _Type:
    named = _NAMED_ITEM_RE.fullmatch(text)
    if named is not None:
        return parse_type(named.group(2))
    return parse_type(text)


def _resolve(types: Sequence[str | _Type]) -> list[_Type]:
    return [parse_type(t) if isinstance(t, str) else t for t in types]


# === Rows ===


def serialize(types: Sequence[str | _Type], values: Sequence[Any]) -> bytes:
    """Encode one row whose columns have ``types`` and hold ``values``."""
    resolved = _resolve(types)
    if len(resolved) != len(values):
        raise RowBinaryError(f"expected {len(resolved)} values, got {len(values)}")
    out = bytearray()
    for column_type, value in zip(resolved, values):
        column_type.encode(value, out)
    return bytes(out)


def deserialize(types: Sequence[str | _Type], data: bytes) -> tuple[Any, ...]:
    """Decode one row whose columns have ``types`` from the start of ``data``."""
    reader = _Reader(data)
    return tuple(column_type.decode(reader) for column_type in _resolve(types))