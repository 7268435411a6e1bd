"""Protocol enumerations and constants for the TDS wire format."""

from enum import IntEnum, IntFlag

TDS_VERSION_7_4 = 0x74000004


class PacketType(IntEnum):
    """Type byte of a TDS packet header."""

    SQL_BATCH = 1
    RPC = 3
    TABULAR_RESULT = 4
    ATTENTION = 6
    BULK_LOAD = 7
    TRANSACTION = 14
    LOGIN7 = 16
    SSPI = 17
    PRELOGIN = 18


class PacketStatus(IntFlag):
    """Status bits of a TDS packet header."""

    NORMAL = 0x00
    END_OF_MESSAGE = 0x01
    IGNORE_EVENT = 0x02
    RESET_CONNECTION = 0x08
    RESET_SKIP_TRAN = 0x10


class ConnectionState(IntEnum):
    """States of a connection's life cycle."""

    DISCONNECTED = 0
    AUTHENTICATING = 1
    IDLE = 2
    EXECUTING = 3
    CANCELLING = 4


class PreloginOption(IntEnum):
    """Option tokens of a PRELOGIN message."""

    VERSION = 0
    ENCRYPTION = 1
    INSTOPT = 2
    THREADID = 3
    MARS = 4
    TRACEID = 5
    FEDAUTHREQUIRED = 6
    NONCEOPT = 7
    TERMINATOR = 0xFF


class EncryptionOption(IntEnum):
    """Encryption values negotiated during PRELOGIN."""

    ENCRYPT_OFF = 0x00
    ENCRYPT_ON = 0x01
    ENCRYPT_NOT_SUP = 0x02
    ENCRYPT_REQ = 0x03


class TokenType(IntEnum):
    """Token identifiers in a tabular result stream."""

    TABNAME = 0x04
    COLINFO = 0xA5
    DONE = 0xFD
    DONEPROC = 0xFE
    DONEINPROC = 0xFF
    ERROR_TOKEN = 0xAA
    INFO = 0xAB
    LOGINACK = 0xAD
    ENVCHANGE = 0xE3
    COLMETADATA = 0x81
    ROW = 0xD1
    NBCROW = 0xD2
    RETURNSTATUS = 0x79
    ORDER = 0xA9
    RETURNVALUE = 0xAC


class DoneStatus(IntFlag):
    """Status bits of DONE, DONEPROC and DONEINPROC tokens."""

    DONE_FINAL = 0x0000
    DONE_MORE = 0x0001
    DONE_ERROR = 0x0002
    DONE_INXACT = 0x0004
    DONE_COUNT = 0x0010
    DONE_ATTN = 0x0020
    DONE_SRVERROR = 0x0100


class TdsType(IntEnum):
    """SQL Server data type identifiers as sent on the wire."""

    # Fixed-length types
    NULL = 0x1F
    TINYINT = 0x30
    BIT = 0x32
    SMALLINT = 0x34
    INT = 0x38
    SMALLDATETIME = 0x3A
    REAL = 0x3B
    MONEY = 0x3C
    DATETIME = 0x3D
    FLOAT = 0x3E
    SMALLMONEY = 0x7A
    BIGINT = 0x7F

    # Nullable fixed-length types
    INTN = 0x26
    BITN = 0x68
    FLOATN = 0x6D
    MONEYN = 0x6E
    DATETIMEN = 0x6F

    DECIMAL = 0x6A
    NUMERIC = 0x6C

    UNIQUEIDENTIFIER = 0x24

    # String types
    BIGCHAR = 0xAF
    BIGVARCHAR = 0xA7
    NCHAR = 0xEF
    NVARCHAR = 0xE7

    # Binary types
    BIGBINARY = 0xAD
    BIGVARBINARY = 0xA5

    # Date/time types
    DATE = 0x28
    TIME = 0x29
    DATETIME2 = 0x2A
    DATETIMEOFFSET = 0x2B

    # Unsupported types
    XML = 0xF1
    UDT = 0xF0
    SQL_VARIANT = 0x62
    IMAGE = 0x22
    TEXT = 0x23
    NTEXT = 0x63


# Column flags (from COLMETADATA)
COL_FLAG_NULLABLE = 0x0001
COL_FLAG_CASE_SENSITIVE = 0x0002
COL_FLAG_IDENTITY = 0x0010
COL_FLAG_COMPUTED = 0x0020

TDS_HEADER_SIZE = 8

TDS_MIN_PACKET_SIZE = 512
TDS_DEFAULT_PACKET_SIZE = 4096
TDS_MAX_PACKET_SIZE = 32767

# Timeouts, in seconds
DEFAULT_CONNECTION_TIMEOUT = 30
DEFAULT_IDLE_TIMEOUT = 300
DEFAULT_ACQUIRE_TIMEOUT = 30
DEFAULT_QUERY_TIMEOUT = 30
CANCELLATION_TIMEOUT = 5

# Pool defaults
DEFAULT_CONNECTION_LIMIT = 64
DEFAULT_MIN_CONNECTIONS = 0
DEFAULT_CONNECTION_CACHE = True

LONG_IDLE_THRESHOLD = 60