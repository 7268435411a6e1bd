import uuid

import pytest

from tdswire.guid_encoding import convert_guid, reorder_guid_bytes

WIRE = bytes.fromhex("67452301ab89efcd0123456789abcdef")
CANONICAL = "01234567-89ab-cdef-0123-456789abcdef"


def test_reorder_known_layout():
    assert reorder_guid_bytes(WIRE) == bytes.fromhex("0123456789abcdef0123456789abcdef")


def test_convert_known_guid():
    assert convert_guid(WIRE) == uuid.UUID(CANONICAL)


def test_tail_unchanged():
    data = bytes(range(16))
    assert reorder_guid_bytes(data)[8:] == data[8:]


def test_reorder_is_involution():
    data = bytes(range(100, 116))
    assert reorder_guid_bytes(reorder_guid_bytes(data)) == data


def test_convert_matches_little_endian_fields():
    data = bytes(range(16))
    assert convert_guid(data).bytes_le == data


def test_short_data_raises():
    with pytest.raises(ValueError):
        reorder_guid_bytes(b"\x00" * 15)
    with pytest.raises(ValueError):
        convert_guid(b"")