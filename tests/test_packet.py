import pytest

from tdswire.packet import PacketError, TdsPacket
from tdswire.types import PacketStatus, PacketType


def test_serialize_header_layout():
    packet = TdsPacket(PacketType.PRELOGIN)
    packet.append_byte(0xFF)
    assert packet.serialize() == bytes([18, 1, 0, 9, 0, 0, 1, 0, 0xFF])


def test_defaults():
    packet = TdsPacket()
    assert packet.packet_type is PacketType.SQL_BATCH
    assert packet.is_end_of_message
    assert packet.length == 8


def test_round_trip():
    packet = TdsPacket(PacketType.LOGIN7, PacketStatus.NORMAL, spid=0x1234, packet_id=7)
    packet.append_payload(b"payload-bytes")
    parsed, consumed = TdsPacket.parse(packet.serialize())
    assert consumed == packet.length
    assert parsed == packet


def test_parse_ignores_trailing_bytes():
    packet = TdsPacket(PacketType.TABULAR_RESULT)
    packet.append_string("abc")
    data = packet.serialize() + b"\x99\x99"
    parsed, consumed = TdsPacket.parse(data)
    assert consumed == len(data) - 2
    assert bytes(parsed.payload) == b"abc"


def test_parse_incomplete_header():
    assert TdsPacket.parse(b"\x04\x01\x00") is None


def test_parse_incomplete_body():
    data = TdsPacket(PacketType.SQL_BATCH, payload=bytearray(b"xyz")).serialize()
    assert TdsPacket.parse(data[:-1]) is None


@pytest.mark.parametrize("length", [0, 7, 32768])
def test_parse_invalid_length(length):
    header = bytes([4, 1]) + length.to_bytes(2, "big") + bytes(4)
    with pytest.raises(PacketError):
        TdsPacket.parse(header + bytes(40000))


def test_unknown_type_kept_as_int():
    data = bytes([0x63, 1, 0, 8, 0, 0, 1, 0])
    parsed, _ = TdsPacket.parse(data)
    assert parsed.packet_type == 0x63


def test_integer_appends_byte_order():
    packet = TdsPacket()
    packet.append_uint16_be(0x1234)
    packet.append_uint16_le(0x1234)
    packet.append_uint32_be(0x01020304)
    packet.append_uint32_le(0x01020304)
    assert bytes(packet.payload) == (
        b"\x12\x34" + b"\x34\x12" + b"\x01\x02\x03\x04" + b"\x04\x03\x02\x01"
    )


def test_append_utf16le_widens_ascii():
    packet = TdsPacket()
    packet.append_utf16le("AB")
    assert bytes(packet.payload) == b"A\x00B\x00"


def test_clear_payload():
    packet = TdsPacket()
    packet.append_payload(b"data")
    packet.clear_payload()
    assert packet.length == 8


def test_set_end_of_message_toggles_only_eom():
    packet = TdsPacket(status=PacketStatus.RESET_CONNECTION)
    packet.set_end_of_message(True)
    assert packet.is_end_of_message
    assert PacketStatus.RESET_CONNECTION in packet.status
    packet.set_end_of_message(False)
    assert not packet.is_end_of_message
    assert PacketStatus.RESET_CONNECTION in packet.status


def test_header_helpers():
    data = TdsPacket(payload=bytearray(b"12345")).serialize()
    assert TdsPacket.has_complete_header(data)
    assert not TdsPacket.has_complete_header(data[:7])
    assert TdsPacket.packet_length(data) == len(data)


def test_packet_length_short_data_raises():
    with pytest.raises(PacketError):
        TdsPacket.packet_length(b"\x01\x01")