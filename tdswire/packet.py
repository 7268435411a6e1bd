"""TDS packets: an 8-byte big-endian header followed by a payload."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from typing import Optional, Tuple, Union

from .types import TDS_HEADER_SIZE, TDS_MAX_PACKET_SIZE, PacketStatus, PacketType

_HEADER = struct.Struct(">BBHHBB")


class PacketError(ValueError):
    """Raised when bytes do not form a valid TDS packet."""


def _packet_type(value: int) -> Union[PacketType, int]:
    try:
        return PacketType(value)
    except ValueError:
        return value


@dataclass
class TdsPacket:
    """A single TDS packet.

    Header layout: type, status, length (including header), SPID,
    packet id and window, all multi-byte fields big-endian.
    """

    packet_type: Union[PacketType, int] = PacketType.SQL_BATCH
    status: PacketStatus = PacketStatus.END_OF_MESSAGE
    spid: int = 0
    packet_id: int = 1
    window: int = 0
    payload: bytearray = field(default_factory=bytearray)

    @property
    def length(self) -> int:
        """Total packet length as written in the header."""
        return (TDS_HEADER_SIZE + len(self.payload)) & 0xFFFF

    @property
    def is_end_of_message(self) -> bool:
        return bool(int(self.status) & PacketStatus.END_OF_MESSAGE)

    def set_end_of_message(self, eom: bool) -> None:
        """Set or clear the end-of-message status bit."""
        bits = int(self.status)
        if eom:
            bits |= PacketStatus.END_OF_MESSAGE
        else:
            bits &= ~int(PacketStatus.END_OF_MESSAGE) & 0xFF
        self.status = PacketStatus(bits)

    def append_payload(self, data: bytes) -> None:
        self.payload += data

    def append_byte(self, value: int) -> None:
        self.payload.append(value & 0xFF)

    def append_uint16_be(self, value: int) -> None:
        self.payload += (value & 0xFFFF).to_bytes(2, "big")

    def append_uint32_be(self, value: int) -> None:
        self.payload += (value & 0xFFFFFFFF).to_bytes(4, "big")

    def append_uint16_le(self, value: int) -> None:
        self.payload += (value & 0xFFFF).to_bytes(2, "little")

    def append_uint32_le(self, value: int) -> None:
        self.payload += (value & 0xFFFFFFFF).to_bytes(4, "little")

    def append_string(self, text: str) -> None:
        """Append text as UTF-8 bytes."""
        self.payload += text.encode("utf-8")

    def append_utf16le(self, text: str) -> None:
        """Append text with each UTF-8 byte widened to a 16-bit unit."""
        self.payload += text.encode("utf-8").decode("latin-1").encode("utf-16-le")

    def clear_payload(self) -> None:
        self.payload.clear()

    def serialize(self) -> bytes:
        """Return header plus payload as bytes."""
        header = _HEADER.pack(
            int(self.packet_type) & 0xFF,
            int(self.status) & 0xFF,
            self.length,
            self.spid & 0xFFFF,
            self.packet_id & 0xFF,
            self.window & 0xFF,
        )
        return header + bytes(self.payload)

    @staticmethod
    def has_complete_header(data: bytes) -> bool:
        return len(data) >= TDS_HEADER_SIZE

    @staticmethod
    def packet_length(data: bytes) -> int:
        """Read the length field from a packet header."""
        if len(data) < 4:
            raise PacketError("not enough data for packet length")
        return int.from_bytes(data[2:4], "big")

    @staticmethod
    def parse(data: bytes) -> Optional[Tuple["TdsPacket", int]]:
        """Parse one packet from the front of data.

        Returns the packet and the number of bytes consumed, or None when
        more data is needed. Raises PacketError on an invalid length.
        """
        if not TdsPacket.has_complete_header(data):
            return None
        size = TdsPacket.packet_length(data)
        if size < TDS_HEADER_SIZE or size > TDS_MAX_PACKET_SIZE:
            raise PacketError("Invalid TDS packet length")
        if len(data) < size:
            return None
        ptype, status, _, spid, packet_id, window = _HEADER.unpack_from(data)
        packet = TdsPacket(
            packet_type=_packet_type(ptype),
            status=PacketStatus(status),
            spid=spid,
            packet_id=packet_id,
            window=window,
            payload=bytearray(data[TDS_HEADER_SIZE:size]),
        )
        return packet, size