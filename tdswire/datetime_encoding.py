"""Decoding of SQL Server date and time wire formats."""

from __future__ import annotations

import struct
from datetime import date, datetime, time, timedelta, timezone

DAYS_FROM_0001_TO_EPOCH = 719162
DAYS_FROM_1900_TO_EPOCH = 25567
MICROS_PER_DAY = 86_400_000_000

_EPOCH = datetime(1970, 1, 1)
_DATETIME = struct.Struct("<ii")
_SMALL_DATETIME = struct.Struct("<HH")
_DATE_SIZE = 3
_OFFSET_SIZE = 2


def _require(data: bytes, size: int, what: str) -> bytes:
    data = bytes(data)
    if len(data) < size:
        raise ValueError(f"{what} value needs {size} bytes, got {len(data)}")
    return data


def _unsigned_le(data: bytes) -> int:
    return int.from_bytes(data, "little")


def _timestamp(unix_days: int, microseconds: int) -> datetime:
    return _EPOCH + timedelta(days=unix_days, microseconds=microseconds)


def time_byte_length(scale: int) -> int:
    """Byte length of the time part for a TIME/DATETIME2/DATETIMEOFFSET scale."""
    if scale <= 2:
        return 3
    if scale <= 4:
        return 4
    return 5


def convert_date(data: bytes) -> date:
    """Decode DATE: 3-byte little-endian days since 0001-01-01."""
    data = _require(data, _DATE_SIZE, "DATE")
    days = _unsigned_le(data[:_DATE_SIZE])
    return _EPOCH.date() + timedelta(days=days - DAYS_FROM_0001_TO_EPOCH)


def convert_time(data: bytes, scale: int) -> time:
    """Decode TIME: 3-5 little-endian bytes of 100ns ticks since midnight."""
    size = time_byte_length(scale)
    data = _require(data, size, "TIME")
    microseconds = _unsigned_le(data[:size]) // 10
    if microseconds >= MICROS_PER_DAY:
        raise ValueError("TIME value out of range")
    seconds, micros = divmod(microseconds, 1_000_000)
    minutes, second = divmod(seconds, 60)
    hour, minute = divmod(minutes, 60)
    return time(hour, minute, second, micros)


def convert_datetime(data: bytes) -> datetime:
    """Decode DATETIME: int32 days since 1900-01-01 and int32 ticks of 1/300 s."""
    data = _require(data, _DATETIME.size, "DATETIME")
    days, ticks = _DATETIME.unpack_from(data)
    scaled = ticks * 10000
    microseconds = abs(scaled) // 3
    if scaled < 0:
        microseconds = -microseconds
    return _timestamp(days - DAYS_FROM_1900_TO_EPOCH, microseconds)


def convert_datetime2(data: bytes, scale: int) -> datetime:
    """Decode DATETIME2: time ticks (3-5 bytes) followed by a 3-byte date."""
    time_len = time_byte_length(scale)
    data = _require(data, time_len + _DATE_SIZE, "DATETIME2")
    ticks = _unsigned_le(data[:time_len])
    days = _unsigned_le(data[time_len : time_len + _DATE_SIZE])
    return _timestamp(days - DAYS_FROM_0001_TO_EPOCH, ticks // 10)


def convert_small_datetime(data: bytes) -> datetime:
    """Decode SMALLDATETIME: uint16 days since 1900-01-01 and uint16 minutes."""
    data = _require(data, _SMALL_DATETIME.size, "SMALLDATETIME")
    days, minutes = _SMALL_DATETIME.unpack_from(data)
    return _timestamp(days - DAYS_FROM_1900_TO_EPOCH, minutes * 60 * 1_000_000)


def convert_datetime_offset(data: bytes, scale: int) -> datetime:
    """Decode DATETIMEOFFSET as an aware UTC datetime.

    The time and date parts are already in UTC on the wire; the trailing
    2-byte offset only matters for display and is ignored.
    """
    time_len = time_byte_length(scale)
    data = _require(data, time_len + _DATE_SIZE + _OFFSET_SIZE, "DATETIMEOFFSET")
    ticks = _unsigned_le(data[:time_len])
    days = _unsigned_le(data[time_len : time_len + _DATE_SIZE])
    if scale <= 6:
        microseconds = ticks * 10 ** (6 - scale)
    else:
        microseconds = ticks // 10
    stamp = _timestamp(days - DAYS_FROM_0001_TO_EPOCH, microseconds)
    return stamp.replace(tzinfo=timezone.utc)