"""Decoding of DECIMAL/NUMERIC and MONEY wire values to unscaled integers."""

import struct

_MONEY = struct.Struct("<iI")
_SMALL_MONEY = struct.Struct("<i")


def convert_decimal(data: bytes) -> int:
    """Return the unscaled integer of a DECIMAL/NUMERIC value.

    The first byte is the sign (0 negative, otherwise positive) and the
    rest is a little-endian magnitude. Empty data gives 0.
    """
    data = bytes(data)
    if not data:
        return 0
    magnitude = int.from_bytes(data[1:], "little")
    return -magnitude if data[0] == 0 else magnitude


def convert_money(data: bytes) -> int:
    """Return the MONEY value times 10000.

    The 8 bytes hold the signed high 32 bits followed by the low 32 bits,
    each little-endian.
    """
    if len(data) < _MONEY.size:
        raise ValueError("MONEY value needs 8 bytes")
    high, low = _MONEY.unpack_from(data)
    return (high << 32) | low


def convert_small_money(data: bytes) -> int:
    """Return the SMALLMONEY value times 10000 (little-endian int32)."""
    if len(data) < _SMALL_MONEY.size:
        raise ValueError("SMALLMONEY value needs 4 bytes")
    return _SMALL_MONEY.unpack_from(data)[0]