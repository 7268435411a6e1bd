"""Decoding of UNIQUEIDENTIFIER wire values."""

import uuid

_GUID_SIZE = 16


def reorder_guid_bytes(data: bytes) -> bytes:
    """Turn the mixed-endian wire GUID into standard big-endian order.

    The first three fields (4, 2 and 2 bytes) are byte-reversed; the last
    8 bytes stay as they are.
    """
    data = bytes(data)
    if len(data) < _GUID_SIZE:
        raise ValueError("GUID value needs 16 bytes")
    return data[3::-1] + data[5:3:-1] + data[7:5:-1] + data[8:16]


def convert_guid(data: bytes) -> uuid.UUID:
    """Return the UUID held by a 16-byte wire GUID."""
    return uuid.UUID(bytes=reorder_guid_bytes(data))