"""Mapping of SQL Server column types to DuckDB types and decoding of raw values."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Optional

from .column_metadata import ColumnMetadata
from .datetime_encoding import (
    convert_date,
    convert_datetime,
    convert_datetime2,
    convert_datetime_offset,
    convert_small_datetime,
    convert_time,
)
from .decimal_encoding import convert_decimal, convert_money, convert_small_money
from .guid_encoding import convert_guid
from .types import TdsType
from .utf16 import utf16le_decode

_MONEY_SCALE = 4


class TypeConversionError(ValueError):
    """Raised when a column type or value cannot be converted."""


@dataclass(frozen=True)
class LogicalType:
    """A DuckDB logical type; width and scale are set for DECIMAL only."""

    name: str
    width: Optional[int] = None
    scale: Optional[int] = None

    @classmethod
    def decimal(cls, width: int, scale: int) -> "LogicalType":
        return cls("DECIMAL", width, scale)

    def __str__(self) -> str:
        if self.width is None:
            return self.name
        return f"{self.name}({self.width},{self.scale})"


UTINYINT = LogicalType("UTINYINT")
SMALLINT = LogicalType("SMALLINT")
INTEGER = LogicalType("INTEGER")
BIGINT = LogicalType("BIGINT")
BOOLEAN = LogicalType("BOOLEAN")
FLOAT = LogicalType("FLOAT")
DOUBLE = LogicalType("DOUBLE")
VARCHAR = LogicalType("VARCHAR")
BLOB = LogicalType("BLOB")
DATE = LogicalType("DATE")
TIME = LogicalType("TIME")
TIMESTAMP = LogicalType("TIMESTAMP")
TIMESTAMP_TZ = LogicalType("TIMESTAMP WITH TIME ZONE")
UUID = LogicalType("UUID")

_FIXED_TYPES = {
    TdsType.TINYINT: UTINYINT,  # SQL Server TINYINT is unsigned
    TdsType.SMALLINT: SMALLINT,
    TdsType.INT: INTEGER,
    TdsType.BIGINT: BIGINT,
    TdsType.BIT: BOOLEAN,
    TdsType.BITN: BOOLEAN,
    TdsType.REAL: FLOAT,
    TdsType.FLOAT: DOUBLE,
    TdsType.MONEY: LogicalType.decimal(19, 4),
    TdsType.SMALLMONEY: LogicalType.decimal(10, 4),
    TdsType.BIGCHAR: VARCHAR,
    TdsType.BIGVARCHAR: VARCHAR,
    TdsType.NCHAR: VARCHAR,
    TdsType.NVARCHAR: VARCHAR,
    TdsType.BIGBINARY: BLOB,
    TdsType.BIGVARBINARY: BLOB,
    TdsType.DATE: DATE,
    TdsType.TIME: TIME,
    TdsType.DATETIME: TIMESTAMP,
    TdsType.SMALLDATETIME: TIMESTAMP,
    TdsType.DATETIME2: TIMESTAMP,
    TdsType.DATETIMEN: TIMESTAMP,
    TdsType.DATETIMEOFFSET: TIMESTAMP_TZ,
    TdsType.UNIQUEIDENTIFIER: UUID,
}

_INTN_TYPES = {1: UTINYINT, 2: SMALLINT, 4: INTEGER, 8: BIGINT}

_UNSUPPORTED = frozenset(
    {TdsType.XML, TdsType.UDT, TdsType.SQL_VARIANT, TdsType.IMAGE, TdsType.TEXT, TdsType.NTEXT}
)

_SUPPORTED = frozenset(
    set(_FIXED_TYPES)
    | {TdsType.INTN, TdsType.FLOATN, TdsType.MONEYN, TdsType.DECIMAL, TdsType.NUMERIC}
)

_TYPE_NAMES = {
    TdsType.TINYINT: "TINYINT",
    TdsType.SMALLINT: "SMALLINT",
    TdsType.INT: "INT",
    TdsType.BIGINT: "BIGINT",
    TdsType.INTN: "INTN",
    TdsType.BIT: "BIT",
    TdsType.BITN: "BITN",
    TdsType.REAL: "REAL",
    TdsType.FLOAT: "FLOAT",
    TdsType.FLOATN: "FLOATN",
    TdsType.DECIMAL: "DECIMAL",
    TdsType.NUMERIC: "NUMERIC",
    TdsType.MONEY: "MONEY",
    TdsType.SMALLMONEY: "SMALLMONEY",
    TdsType.MONEYN: "MONEYN",
    TdsType.BIGCHAR: "CHAR",
    TdsType.BIGVARCHAR: "VARCHAR",
    TdsType.NCHAR: "NCHAR",
    TdsType.NVARCHAR: "NVARCHAR",
    TdsType.BIGBINARY: "BINARY",
    TdsType.BIGVARBINARY: "VARBINARY",
    TdsType.DATE: "DATE",
    TdsType.TIME: "TIME",
    TdsType.DATETIME: "DATETIME",
    TdsType.SMALLDATETIME: "SMALLDATETIME",
    TdsType.DATETIME2: "DATETIME2",
    TdsType.DATETIMEN: "DATETIMEN",
    TdsType.DATETIMEOFFSET: "DATETIMEOFFSET",
    TdsType.UNIQUEIDENTIFIER: "UNIQUEIDENTIFIER",
    TdsType.XML: "XML",
    TdsType.UDT: "UDT",
    TdsType.SQL_VARIANT: "SQL_VARIANT",
    TdsType.IMAGE: "IMAGE",
    TdsType.TEXT: "TEXT",
    TdsType.NTEXT: "NTEXT",
}

_INTEGER_FORMATS = {1: "<B", 2: "<h", 4: "<i", 8: "<q"}
_FLOAT_FORMATS = {4: "<f", 8: "<d"}

_INTEGERS = frozenset(
    {TdsType.TINYINT, TdsType.SMALLINT, TdsType.INT, TdsType.BIGINT, TdsType.INTN}
)
_BOOLEANS = frozenset({TdsType.BIT, TdsType.BITN})
_FLOATS = frozenset({TdsType.REAL, TdsType.FLOAT, TdsType.FLOATN})
_DECIMALS = frozenset({TdsType.DECIMAL, TdsType.NUMERIC})
_MONEYS = frozenset({TdsType.MONEY, TdsType.SMALLMONEY, TdsType.MONEYN})
_WIDE_STRINGS = frozenset({TdsType.NCHAR, TdsType.NVARCHAR})
_STRINGS = _WIDE_STRINGS | {TdsType.BIGCHAR, TdsType.BIGVARCHAR}
_PADDED_STRINGS = frozenset({TdsType.BIGCHAR, TdsType.NCHAR})
_BINARIES = frozenset({TdsType.BIGBINARY, TdsType.BIGVARBINARY})


def type_name(type_id: int) -> str:
    """Human-readable name of a wire type id, "UNKNOWN" if it has none."""
    return _TYPE_NAMES.get(type_id, "UNKNOWN")


def is_supported(type_id: int) -> bool:
    """True if values of this wire type can be converted."""
    return type_id in _SUPPORTED


def duckdb_type(column: ColumnMetadata) -> LogicalType:
    """Return the DuckDB type a column maps to.

    Raises TypeConversionError for unsupported or unknown types and for an
    INTN column of invalid length.
    """
    type_id = column.type_id
    if type_id in _FIXED_TYPES:
        return _FIXED_TYPES[type_id]
    if type_id == TdsType.INTN:
        try:
            return _INTN_TYPES[column.max_length]
        except KeyError:
            raise TypeConversionError(f"Invalid INTN length: {column.max_length}") from None
    if type_id == TdsType.FLOATN:
        return FLOAT if column.max_length == 4 else DOUBLE
    if type_id in _DECIMALS:
        return LogicalType.decimal(column.precision, column.scale)
    if type_id == TdsType.MONEYN:
        return LogicalType.decimal(19, 4) if column.max_length == 8 else LogicalType.decimal(10, 4)
    if type_id in _UNSUPPORTED:
        raise TypeConversionError(
            f"MSSQL Error: Unsupported SQL Server type '{type_name(type_id)}' "
            f"(0x{type_id:02X}) for column '{column.name}'. "
            "Consider casting to VARCHAR or excluding this column."
        )
    raise TypeConversionError(
        f"MSSQL Error: Unknown SQL Server type (0x{type_id:02X}) for column '{column.name}'."
    )


def _scaled_decimal(unscaled: int, scale: int) -> Decimal:
    digits = tuple(int(d) for d in str(abs(unscaled)))
    return Decimal((1 if unscaled < 0 else 0, digits, -scale))


def _convert_integer(value: bytes) -> int:
    fmt = _INTEGER_FORMATS.get(len(value))
    if fmt is None:
        raise TypeConversionError(f"Invalid integer length: {len(value)}")
    return struct.unpack(fmt, value)[0]


def _convert_float(value: bytes) -> float:
    fmt = _FLOAT_FORMATS.get(len(value))
    if fmt is None:
        raise TypeConversionError(f"Invalid float length: {len(value)}")
    return struct.unpack(fmt, value)[0]


def _convert_money(value: bytes) -> Decimal:
    if len(value) == 8:
        unscaled = convert_money(value)
    elif len(value) == 4:
        unscaled = convert_small_money(value)
    else:
        raise TypeConversionError(f"Invalid MONEY length: {len(value)}")
    return _scaled_decimal(unscaled, _MONEY_SCALE)


def _convert_string(value: bytes, type_id: int) -> str:
    if type_id in _WIDE_STRINGS:
        text = utf16le_decode(value)
    else:
        text = value.decode("utf-8", "replace")
    if type_id in _PADDED_STRINGS:
        text = text.rstrip(" ")
    return text


def _convert_timestamp(value: bytes, column: ColumnMetadata):
    type_id = column.type_id
    if type_id == TdsType.DATETIME:
        return convert_datetime(value)
    if type_id == TdsType.SMALLDATETIME:
        return convert_small_datetime(value)
    if type_id == TdsType.DATETIME2:
        return convert_datetime2(value, column.scale)
    if len(value) == 8:
        return convert_datetime(value)
    if len(value) == 4:
        return convert_small_datetime(value)
    raise TypeConversionError(f"Invalid DATETIMEN length: {len(value)}")


def convert_value(value: bytes, is_null: bool, column: ColumnMetadata) -> Any:
    """Decode the raw bytes of one column value to a Python object.

    NULL gives None. Integers, floats and booleans become int, float and
    bool; DECIMAL and MONEY become Decimal; strings become str with CHAR
    and NCHAR padding removed; binaries become bytes; date and time types
    become date, time or datetime (aware UTC for DATETIMEOFFSET); GUIDs
    become uuid.UUID.
    """
    if is_null:
        return None
    value = bytes(value)
    type_id = column.type_id

    if type_id in _INTEGERS:
        return _convert_integer(value)
    if type_id in _BOOLEANS:
        return bool(value) and value[0] != 0
    if type_id in _FLOATS:
        return _convert_float(value)
    if type_id in _DECIMALS:
        return _scaled_decimal(convert_decimal(value), column.scale)
    if type_id in _MONEYS:
        return _convert_money(value)
    if type_id in _STRINGS:
        return _convert_string(value, type_id)
    if type_id in _BINARIES:
        return value
    if type_id == TdsType.DATE:
        return convert_date(value)
    if type_id == TdsType.TIME:
        return convert_time(value, column.scale)
    if type_id in (TdsType.DATETIME, TdsType.SMALLDATETIME, TdsType.DATETIME2, TdsType.DATETIMEN):
        return _convert_timestamp(value, column)
    if type_id == TdsType.DATETIMEOFFSET:
        return convert_datetime_offset(value, column.scale)
    if type_id == TdsType.UNIQUEIDENTIFIER:
        return convert_guid(value)
    raise TypeConversionError(f"Type conversion not implemented for type 0x{type_id:02X}")