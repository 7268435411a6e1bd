"""TDS wire-format building blocks: packets, column metadata, value decoding and a connection pool."""

__version__ = "0.1.0"

__all__ = [
    "types",
    "utf16",
    "packet",
    "column_metadata",
    "decimal_encoding",
    "guid_encoding",
    "datetime_encoding",
    "pool",
    "type_converter",
]