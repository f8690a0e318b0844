"""Conversions between Python values and the raw integers of server types.

IPv4 addresses travel as ``UInt32``, UUIDs as a pair of ``UInt64``,
``DateTime`` as seconds in ``UInt32``, ``DateTime64(p)`` as ticks in
``Int64``, ``Date`` as days in ``UInt16`` and ``Date32`` as days in ``Int32``.
Naive datetimes are taken to be in UTC.
"""

from __future__ import annotations

import ipaddress
import uuid
from datetime import date, datetime, timedelta, timezone

__all__ = [
    "ConversionError",
    "ipv4_to_int",
    "ipv4_from_int",
    "uuid_to_pair",
    "uuid_from_pair",
    "datetime_to_int",
    "datetime_from_int",
    "datetime64_to_int",
    "datetime64_from_int",
    "date_to_days",
    "date_from_days",
    "date32_to_days",
    "date32_from_days",
]

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_DATE_ORIGIN = date(1970, 1, 1)
# Older servers accept a narrower range (1925 up to 2283).
_DATE32_MIN = date(1900, 1, 1)
_DATE32_MAX = date(2299, 12, 31)

_DIVISORS = {0: 1_000_000_000, 3: 1_000_000, 6: 1_000, 9: 1}

_U16_MAX = (1 << 16) - 1
_U32_MAX = (1 << 32) - 1
_U64_MAX = (1 << 64) - 1
_I32_MIN, _I32_MAX = -(1 << 31), (1 << 31) - 1
_I64_MIN, _I64_MAX = -(1 << 63), (1 << 63) - 1


class ConversionError(ValueError):
    """Raised when a value cannot be represented in the target type."""


def _check_int(value: object, low: int, high: int, what: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or not low <= value <= high:
        raise ConversionError(f"{value!r} is not a valid {what}")
    return int(value)


def _divisor(precision: int) -> int:
    try:
        return _DIVISORS[precision]
    except (KeyError, TypeError):
        raise ValueError(f"unsupported DateTime64 precision: {precision!r}") from None


def _aware(dt: datetime) -> datetime:
    return dt.replace(tzinfo=timezone.utc) if dt.tzinfo is None else dt


def _unix_nanos(dt: datetime) -> int:
    delta = _aware(dt) - _EPOCH
    seconds = delta.days * 86_400 + delta.seconds
    return seconds * 1_000_000_000 + delta.microseconds * 1_000


# === IPv4 ===


def ipv4_to_int(addr: ipaddress.IPv4Address | str) -> int:
    """Return an IPv4 address as its ``UInt32`` value."""
    try:
        return int(ipaddress.IPv4Address(addr))
    except ipaddress.AddressValueError as err:
        raise ConversionError(str(err)) from err


def ipv4_from_int(value: int) -> ipaddress.IPv4Address:
    """Return the IPv4 address held in a ``UInt32`` value."""
    return ipaddress.IPv4Address(_check_int(value, 0, _U32_MAX, "UInt32"))


# === UUID ===


def uuid_to_pair(value: uuid.UUID | str) -> tuple[int, int]:
    """Return a UUID as its high and low 64-bit halves."""
    if not isinstance(value, uuid.UUID):
        try:
            value = uuid.UUID(value)
        except ValueError as err:
            raise ConversionError(str(err)) from err
    number = value.int
    return number >> 64, number & _U64_MAX


def uuid_from_pair(high: int, low: int) -> uuid.UUID:
    """Return the UUID made of high and low 64-bit halves."""
    high = _check_int(high, 0, _U64_MAX, "UInt64")
    low = _check_int(low, 0, _U64_MAX, "UInt64")
    return uuid.UUID(int=(high << 64) | low)


# === DateTime ===


def datetime_to_int(dt: datetime) -> int:
    """Return a datetime as whole seconds since the epoch for ``DateTime``."""
    seconds = _unix_nanos(dt) // 1_000_000_000
    if not 0 <= seconds <= _U32_MAX:
        raise ConversionError(f"{dt} cannot be represented as DateTime")
    return seconds


def datetime_from_int(ts: int) -> datetime:
    """Return the UTC datetime of a ``DateTime`` value."""
    return _EPOCH + timedelta(seconds=_check_int(ts, 0, _U32_MAX, "UInt32"))


def datetime64_to_int(dt: datetime, precision: int) -> int:
    """Return a datetime as ``DateTime64(precision)`` ticks, truncated toward zero."""
    divisor = _divisor(precision)
    nanos = _unix_nanos(dt)
    ticks = abs(nanos) // divisor
    if nanos < 0:
        ticks = -ticks
    if not _I64_MIN <= ticks <= _I64_MAX:
        raise ConversionError(f"{dt} cannot be represented as DateTime64")
    return ticks


def datetime64_from_int(ts: int, precision: int) -> datetime:
    """Return the UTC datetime of ``DateTime64(precision)`` ticks.

    Sub-microsecond parts are dropped.
    """
    multiplier = _divisor(precision)
    ts = _check_int(ts, _I64_MIN, _I64_MAX, "Int64")
    micros = (ts * multiplier) // 1_000
    try:
        return _EPOCH + timedelta(microseconds=micros)
    except OverflowError as err:
        raise ConversionError(f"{ts} is out of the supported datetime range") from err


# === Date ===


def date_to_days(d: date) -> int:
    """Return a date as days since 1970-01-01 for ``Date``."""
    if d < _DATE_ORIGIN:
        raise ConversionError(f"{d} cannot be represented as Date")
    days = (d - _DATE_ORIGIN).days
    if days > _U16_MAX:
        raise ConversionError(f"{d} cannot be represented as Date")
    return days


def date_from_days(days: int) -> date:
    """Return the date of a ``Date`` value."""
    return _DATE_ORIGIN + timedelta(days=_check_int(days, 0, _U16_MAX, "UInt16"))


def date32_to_days(d: date) -> int:
    """Return a date as days since 1970-01-01 for ``Date32``."""
    if d < _DATE32_MIN or d > _DATE32_MAX:
        raise ConversionError(f"{d} cannot be represented as Date")
    return (d - _DATE_ORIGIN).days


def date32_from_days(days: int) -> date:
    """Return the date of a ``Date32`` value."""
    days = _check_int(days, _I32_MIN, _I32_MAX, "Int32")
    try:
        return _DATE_ORIGIN + timedelta(days=days)
    except OverflowError as err:
        raise ConversionError(f"{days} is out of the supported date range") from err