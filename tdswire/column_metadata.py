"""Column descriptions from the COLMETADATA token and their parser."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

from .types import (
    COL_FLAG_COMPUTED,
    COL_FLAG_IDENTITY,
    COL_FLAG_NULLABLE,
    TdsType,
)
from .utf16 import utf16le_decode

_NO_METADATA = 0xFFFF
_PLP_MAX_LENGTH = 0xFFFF

_TYPE_NAMES = {t.value: t.name for t in TdsType}
_TYPE_NAMES.update(
    {
        TdsType.BIGCHAR: "CHAR",
        TdsType.BIGVARCHAR: "VARCHAR",
        TdsType.BIGBINARY: "BINARY",
        TdsType.BIGVARBINARY: "VARBINARY",
    }
)

_VARIABLE_LENGTH = frozenset(
    {
        TdsType.BIGCHAR,
        TdsType.BIGVARCHAR,
        TdsType.NCHAR,
        TdsType.NVARCHAR,
        TdsType.BIGBINARY,
        TdsType.BIGVARBINARY,
    }
)

_NULLABLE_VARIANTS = frozenset(
    {TdsType.INTN, TdsType.BITN, TdsType.FLOATN, TdsType.MONEYN, TdsType.DATETIMEN}
)

_FIXED_SIZES = {
    TdsType.TINYINT: 1,
    TdsType.BIT: 1,
    TdsType.SMALLINT: 2,
    TdsType.INT: 4,
    TdsType.BIGINT: 8,
    TdsType.REAL: 4,
    TdsType.FLOAT: 8,
    TdsType.MONEY: 8,
    TdsType.SMALLMONEY: 4,
    TdsType.DATETIME: 8,
    TdsType.SMALLDATETIME: 4,
    TdsType.DATE: 3,
}

_NO_EXTRA_INFO = frozenset(
    {
        TdsType.NULL,
        TdsType.TINYINT,
        TdsType.BIT,
        TdsType.SMALLINT,
        TdsType.INT,
        TdsType.BIGINT,
        TdsType.REAL,
        TdsType.FLOAT,
        TdsType.MONEY,
        TdsType.SMALLMONEY,
        TdsType.DATETIME,
        TdsType.SMALLDATETIME,
        TdsType.DATE,
    }
)

_ONE_BYTE_LENGTH = _NULLABLE_VARIANTS | {TdsType.UNIQUEIDENTIFIER}
_DECIMALS = frozenset({TdsType.DECIMAL, TdsType.NUMERIC})
_STRINGS = frozenset({TdsType.BIGCHAR, TdsType.BIGVARCHAR, TdsType.NCHAR, TdsType.NVARCHAR})
_BINARIES = frozenset({TdsType.BIGBINARY, TdsType.BIGVARBINARY})
_SCALED_TIMES = frozenset({TdsType.TIME, TdsType.DATETIME2, TdsType.DATETIMEOFFSET})


class UnsupportedTypeError(ValueError):
    """Raised when a column uses a type the parser cannot describe."""


@dataclass
class ColumnMetadata:
    """A single result column described by a COLMETADATA token."""

    name: str = ""
    type_id: int = 0
    max_length: int = 0
    precision: int = 0
    scale: int = 0
    collation: int = 0
    flags: int = 0

    def type_name(self) -> str:
        """Human-readable name of the column's type."""
        known = _TYPE_NAMES.get(self.type_id)
        if known is not None:
            return known
        return f"UNKNOWN(0x{self.type_id})"

    def is_nullable(self) -> bool:
        return bool(self.flags & COL_FLAG_NULLABLE)

    def is_identity(self) -> bool:
        return bool(self.flags & COL_FLAG_IDENTITY)

    def is_computed(self) -> bool:
        return bool(self.flags & COL_FLAG_COMPUTED)

    def is_variable_length(self) -> bool:
        return self.type_id in _VARIABLE_LENGTH

    def is_nullable_variant(self) -> bool:
        """True for INTN, BITN, FLOATN, MONEYN and DATETIMEN."""
        return self.type_id in _NULLABLE_VARIANTS

    def is_plp_type(self) -> bool:
        """True for MAX types, which use partially length-prefixed encoding."""
        return self.max_length == _PLP_MAX_LENGTH and self.type_id in _VARIABLE_LENGTH

    def fixed_size(self) -> int:
        """Byte size of a fixed-length type, 0 for anything else."""
        return _FIXED_SIZES.get(self.type_id, 0)


class _Incomplete(Exception):
    """Internal signal that the buffer ends before the token does."""


class _Reader:
    def __init__(self, data: bytes) -> None:
        self.data = bytes(data)
        self.pos = 0

    def need(self, count: int) -> None:
        if self.pos + count > len(self.data):
            raise _Incomplete

    def take(self, count: int) -> bytes:
        self.need(count)
        chunk = self.data[self.pos : self.pos + count]
        self.pos += count
        return chunk

    def u8(self) -> int:
        return self.take(1)[0]

    def u16(self) -> int:
        return int.from_bytes(self.take(2), "little")


def _read_type_info(reader: _Reader, column: ColumnMetadata) -> None:
    column.type_id = reader.u8()
    type_id = column.type_id

    if type_id in _NO_EXTRA_INFO:
        return
    if type_id in _ONE_BYTE_LENGTH:
        column.max_length = reader.u8()
    elif type_id in _DECIMALS:
        reader.need(3)
        column.max_length = reader.u8()
        column.precision = reader.u8()
        column.scale = reader.u8()
    elif type_id in _STRINGS:
        reader.need(7)
        column.max_length = reader.u16()
        # Collation is 5 bytes; only the first 4 are kept.
        column.collation = int.from_bytes(reader.take(5)[:4], "little")
    elif type_id in _BINARIES:
        column.max_length = reader.u16()
    elif type_id in _SCALED_TIMES:
        column.scale = reader.u8()
    else:
        raise UnsupportedTypeError(f"Unsupported SQL Server type: {column.type_name()}")


def _read_column(reader: _Reader) -> ColumnMetadata:
    column = ColumnMetadata()
    reader.take(4)  # legacy UserType
    column.flags = reader.u16()
    _read_type_info(reader, column)
    char_count = reader.u8()
    column.name = utf16le_decode(reader.take(char_count * 2))
    return column


def parse_column_metadata(data: bytes) -> Optional[Tuple[List[ColumnMetadata], int]]:
    """Parse a COLMETADATA token body (without the token byte).

    Returns the columns and the number of bytes consumed, or None when
    data ends before the token does. Raises UnsupportedTypeError for a
    column of a type that cannot be described.
    """
    reader = _Reader(data)
    try:
        count = reader.u16()
        if count == _NO_METADATA:
            return [], reader.pos
        columns = [_read_column(reader) for _ in range(count)]
    except _Incomplete:
        return None
    return columns, reader.pos