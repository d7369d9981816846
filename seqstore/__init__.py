"""Persist out-of-order packet payloads to one file in identifier order."""

from .errors import DuplicateIdentifier, IOFailure, SeqStoreError
from .index import Interval, IntervalIndex, MergeKind
from .parser import Packet, build_packet, parse_packet
from .store import SpliceStore
from .writer import PacketWriter, WriteResult, WriteStatus

__all__ = [
    "DuplicateIdentifier",
    "IOFailure",
    "Interval",
    "IntervalIndex",
    "MergeKind",
    "Packet",
    "PacketWriter",
    "SeqStoreError",
    "SpliceStore",
    "WriteResult",
    "WriteStatus",
    "build_packet",
    "parse_packet",
]
