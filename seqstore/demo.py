"""Sample packets for demonstrating out-of-order writes."""

from __future__ import annotations

import random
from typing import List, Optional, Sequence, Tuple

from seqstore.parser import build_packet, parse_packet

SAMPLE_ID_BASE = 0x0161
SAMPLE_PAYLOADS: Tuple[bytes, ...] = (
    b"aaa",
    b"bb",
    b"ccc",
    b"dddd",
    b"eeeeee",
    b"fffff",
    b"gggggggggg",
    b"h",
    b"iiiiiiiiiiiiiii",
    b"jjjj",
    b"kkkkkk",
    b"lll",
    b"mm",
    b"nnnn",
    b"oooooo",
    b"ppp",
    b"qqqqq",
    b"r",
    b"sssssssssssssssssssssss",
    b"ttt",
)


def sample_packets() -> List[bytes]:
    """The sample packets in identifier order (0x0161 through 0x0174)."""

    return [
        build_packet(SAMPLE_ID_BASE + offset, payload)
        for offset, payload in enumerate(SAMPLE_PAYLOADS)
    ]


def shuffled_packets(seed: Optional[int] = None) -> List[bytes]:
    packets = sample_packets()
    random.Random(seed).shuffle(packets)
    return packets


def expected_contents() -> bytes:
    return b"".join(SAMPLE_PAYLOADS)


def format_contents(data: bytes) -> str:
    """Render backing-file bytes for the console, one character per byte."""

    return "FILE CONTENT:\n" + data.decode("latin-1")


def describe_packets(packets: Sequence[bytes]) -> List[str]:
    """One line per packet: identifier and payload text."""

    lines: List[str] = []
    for raw in packets:
        packet = parse_packet(raw)
        if packet is None:
            lines.append(f"<dropped {len(raw)} byte packet>")
            continue
        lines.append(f"{packet.identifier:#06x} {packet.payload.decode('latin-1')}")
    return lines


__all__ = [
    "SAMPLE_ID_BASE",
    "SAMPLE_PAYLOADS",
    "describe_packets",
    "expected_contents",
    "format_contents",
    "sample_packets",
    "shuffled_packets",
]
