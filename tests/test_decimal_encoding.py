import struct

import pytest

from tdswire.decimal_encoding import convert_decimal, convert_money, convert_small_money


def test_decimal_empty_is_zero():
    assert convert_decimal(b"") == 0


def test_decimal_sign_only_is_zero():
    assert convert_decimal(b"\x01") == 0


@pytest.mark.parametrize("value", [0, 1, 12345, 10**20, 10**38 - 1])
def test_decimal_positive_round_trip(value):
    data = b"\x01" + value.to_bytes(16, "little")
    assert convert_decimal(data) == value


@pytest.mark.parametrize("value", [1, 987654321, 10**30])
def test_decimal_negative_round_trip(value):
    data = b"\x00" + value.to_bytes(16, "little")
    assert convert_decimal(data) == -value


def test_decimal_short_magnitude():
    data = b"\x01" + (500).to_bytes(4, "little")
    assert convert_decimal(data) == 500


def test_money_low_word_only():
    data = struct.pack("<iI", 0, 10000)
    assert convert_money(data) == 10000


def test_money_minus_one():
    assert convert_money(b"\xff" * 8) == -1


def test_money_high_word():
    data = struct.pack("<iI", 1, 0)
    assert convert_money(data) == 1 << 32


@pytest.mark.parametrize("value", [-(2**63), -123456789, 0, 2**63 - 1])
def test_money_round_trip(value):
    high, low = value >> 32, value & 0xFFFFFFFF
    assert convert_money(struct.pack("<iI", high, low)) == value


def test_money_short_data():
    with pytest.raises(ValueError):
        convert_money(b"\x00" * 7)


@pytest.mark.parametrize("value", [-(2**31), -5, 0, 2**31 - 1])
def test_small_money_round_trip(value):
    assert convert_small_money(struct.pack("<i", value)) == value


def test_small_money_short_data():
    with pytest.raises(ValueError):
        convert_small_money(b"\x00\x00")