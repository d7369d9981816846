"""Orchestrates parsing, index lookups and splices for incoming packets."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple

from seqstore.errors import DuplicateIdentifier
from seqstore.index import Interval, IntervalIndex, MergeKind
from seqstore.logging_utils import get_logger
from seqstore.parser import parse_packet
from seqstore.store import DEFAULT_CHUNK_SIZE, SpliceStore

LOGGER = get_logger(__name__)


class WriteStatus(str, Enum):
    ACCEPTED = "accepted"
    DROPPED = "dropped"
    DUPLICATE = "duplicate"


@dataclass(frozen=True)
class WriteResult:
    """Outcome of writing one packet.

    Attributes:
        status: Whether the payload was stored, ignored or rejected
        identifier: Packet identifier, None for dropped packets
        offset: Byte offset the payload was written at, None unless accepted
        size: Payload size in bytes
        merge: How the identifier joined existing runs, None unless accepted
        error: The DuplicateIdentifier for rejected packets
    """

    status: WriteStatus
    identifier: Optional[int] = None
    offset: Optional[int] = None
    size: int = 0
    merge: Optional[MergeKind] = None
    error: Optional[DuplicateIdentifier] = None

    @property
    def success(self) -> bool:
        return self.status is WriteStatus.ACCEPTED


class PacketWriter:
    """Stores packet payloads in ascending identifier order in one file.

    The index lives only in memory, so a non-empty backing file left over from
    an earlier process cannot be described by it and is truncated on startup.
    """

    def __init__(self, path: str | Path, chunk_size: int = DEFAULT_CHUNK_SIZE) -> None:
        self.store = SpliceStore(path, chunk_size=chunk_size)
        self.index = IntervalIndex()
        self._counts: Dict[str, int] = {status.value: 0 for status in WriteStatus}

        if self.store.size() > 0:
            LOGGER.warning("Truncating stale backing file %s", self.store.path)
            self.store.truncate()

    @property
    def path(self) -> Path:
        return self.store.path

    def write(self, data: bytes) -> WriteResult:
        """Store the payload of one raw packet.

        ``IOFailure`` from the store propagates; the index is only updated
        after the bytes are on disk.
        """

        packet = parse_packet(data)
        if packet is None:
            LOGGER.debug("Dropping undersized packet (%s bytes)", len(data))
            return self._record(WriteResult(status=WriteStatus.DROPPED))

        try:
            position = self.index.locate(packet.identifier)
        except DuplicateIdentifier as exc:
            LOGGER.warning("Rejecting packet: %s", exc)
            return self._record(
                WriteResult(
                    status=WriteStatus.DUPLICATE,
                    identifier=packet.identifier,
                    size=packet.size,
                    error=exc,
                )
            )

        offset = self.index.insertion_offset(position)
        self.store.insert_payload(offset, packet.payload, self.index.total_length)
        merge = self.index.commit(packet.identifier, packet.size, position)

        return self._record(
            WriteResult(
                status=WriteStatus.ACCEPTED,
                identifier=packet.identifier,
                offset=offset,
                size=packet.size,
                merge=merge,
            )
        )

    def write_many(self, packets: Iterable[bytes]) -> List[WriteResult]:
        return [self.write(packet) for packet in packets]

    def contents(self) -> bytes:
        return self.store.read_all()

    def intervals(self) -> Tuple[Interval, ...]:
        return self.index.intervals()

    def stats(self) -> Dict[str, Any]:
        """Counters for the packets seen so far plus the index shape."""

        return {
            **self._counts,
            "intervals": len(self.index),
            "total_bytes": self.index.total_length,
        }

    def _record(self, result: WriteResult) -> WriteResult:
        self._counts[result.status.value] += 1
        return result


__all__ = ["PacketWriter", "WriteResult", "WriteStatus"]
