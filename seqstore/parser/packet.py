"""Fixed-header packet parsing."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import Optional

HEADER_SIZE = 12
ID_OFFSET = 2
MAX_IDENTIFIER = 0xFFFF
_ID_FORMAT = struct.Struct(">H")


@dataclass(frozen=True)
class Packet:
    """Identifier and payload extracted from a raw packet."""

    identifier: int
    payload: bytes
    header: bytes = b""

    @property
    def size(self) -> int:
        return len(self.payload)


def parse_packet(data: bytes) -> Optional[Packet]:
    """Split a raw packet into identifier and payload.

    Bytes 2-3 of the 12-byte header carry a big-endian identifier; the rest of
    the header is ignored. Packets of ``HEADER_SIZE`` bytes or fewer carry no
    payload and yield ``None``.
    """

    raw = bytes(data)
    if len(raw) <= HEADER_SIZE:
        return None
    (identifier,) = _ID_FORMAT.unpack_from(raw, ID_OFFSET)
    return Packet(identifier=identifier, payload=raw[HEADER_SIZE:], header=raw[:HEADER_SIZE])


def build_packet(identifier: int, payload: bytes, filler: bytes = b"z") -> bytes:
    """Assemble a raw packet with ``filler`` in the ignored header bytes."""

    if not 0 <= identifier <= MAX_IDENTIFIER:
        raise ValueError(f"identifier {identifier} does not fit in 16 bits")
    if len(filler) != 1:
        raise ValueError("filler must be a single byte")
    trailing = HEADER_SIZE - ID_OFFSET - _ID_FORMAT.size
    return filler * ID_OFFSET + _ID_FORMAT.pack(identifier) + filler * trailing + bytes(payload)


__all__ = ["HEADER_SIZE", "MAX_IDENTIFIER", "Packet", "build_packet", "parse_packet"]
