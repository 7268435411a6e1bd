# tdswire

Pure-Python building blocks for the Tabular Data Stream (TDS) protocol spoken by
SQL Server. It has no runtime dependencies.

## What it covers

- `tdswire.types`: protocol enumerations `PacketType`, `PacketStatus`,
  `ConnectionState`, `PreloginOption`, `EncryptionOption`, `TokenType`,
  `DoneStatus`, the wire type identifiers in `TdsType`, and constants such as
  `TDS_HEADER_SIZE`, `TDS_MAX_PACKET_SIZE` and the pool defaults.
- `tdswire.utf16`: `utf16le_encode`, `utf16le_decode` and `utf16le_byte_length`.
  Decoding is lenient: a trailing odd byte or a lone high surrogate at the end is
  dropped, and broken surrogate pairs become U+FFFD.
- `tdswire.packet`: `TdsPacket`, a dataclass holding the 8-byte header fields
  (`packet_type`, `status`, `spid`, `packet_id`, `window`) and a `payload`. It has
  `append_*` helpers, `serialize()`, `set_end_of_message()`, and the static
  methods `parse()`, `has_complete_header()` and `packet_length()`. `parse()`
  returns `(packet, bytes_consumed)`, or `None` when more data is needed, and
  raises `PacketError` for a length outside 8..32767.
- `tdswire.column_metadata`: `parse_column_metadata(data)` reads the body of a
  COLMETADATA token into a list of `ColumnMetadata` records and returns
  `(columns, bytes_consumed)`, or `None` when the data is incomplete. A column
  of a type it cannot describe raises `UnsupportedTypeError`.
- `tdswire.decimal_encoding`: `convert_decimal`, `convert_money` and
  `convert_small_money` return unscaled integers.
- `tdswire.guid_encoding`: `reorder_guid_bytes` and `convert_guid`, which
  returns a `uuid.UUID`.
- `tdswire.datetime_encoding`: `convert_date`, `convert_time`,
  `convert_datetime`, `convert_datetime2`, `convert_small_datetime`,
  `convert_datetime_offset` (an aware UTC `datetime`) and `time_byte_length`.
- `tdswire.type_converter`: `duckdb_type(column)` maps a column to a
  `LogicalType` (such as `INTEGER`, `VARCHAR` or `DECIMAL(19,4)`);
  `convert_value(value, is_null, column)` turns raw bytes into Python values
  (`int`, `float`, `bool`, `Decimal`, `str`, `bytes`, `date`, `time`,
  `datetime`, `UUID`, or `None` for NULL). `is_supported` and `type_name`
  describe type ids. Unsupported or unknown types raise `TypeConversionError`.
- `tdswire.pool`: `ConnectionPool`, a thread-safe pool that hands out
  connections made by a factory you supply, configured by `PoolConfiguration`
  and reporting `PoolStatistics`. A background thread closes connections idle
  longer than `idle_timeout` seconds while keeping `min_connections`.

## Install

```
pip install .
pip install ".[test]"   # with the test dependencies
```

## Examples

Build a packet and read it back:

```python
from tdswire.packet import TdsPacket
from tdswire.types import PacketType

packet = TdsPacket(PacketType.SQL_BATCH)
packet.append_utf16le("SELECT 1")
raw = packet.serialize()

parsed, consumed = TdsPacket.parse(raw)
assert consumed == len(raw)
```

Decode text:

```python
from tdswire.utf16 import utf16le_encode, utf16le_decode

assert utf16le_decode(utf16le_encode("héllo")) == "héllo"
```

Use a connection pool:

```python
from tdswire.pool import ConnectionPool, PoolConfiguration

with ConnectionPool("main", PoolConfiguration(connection_limit=4), make_connection) as pool:
    conn = pool.acquire(1000)
    if conn is not None:
        try:
            ...
        finally:
            pool.release(conn)
    print(pool.stats())
```

`make_connection` is any callable that returns an object following the
`PooledConnection` protocol (`is_alive`, `is_long_idle`, `validate_with_ping`,
`update_last_used`, `close`), or `None` when it cannot connect. `acquire()`
returns `None` on timeout or after `shutdown()`.

## What it does not do

This package handles bytes and values only. It opens no sockets, performs no
PRELOGIN or LOGIN7 handshake, offers no TLS, and contains no connection class
to pass to the pool. It does not parse the rest of the token stream (ROW,
DONE, ERROR, INFO, ENVCHANGE) or run queries.

## Running the tests

```
pytest
```