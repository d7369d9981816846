"""In-place insertion of bytes into the middle of the backing file."""

from __future__ import annotations

import tempfile
from pathlib import Path
from typing import BinaryIO, Optional

from seqstore.errors import IOFailure
from seqstore.logging_utils import get_logger

LOGGER = get_logger(__name__)
DEFAULT_CHUNK_SIZE = 512
SPOOL_PREFIX = "seqstore-tail-"


def copy_range(
    source: BinaryIO,
    target: BinaryIO,
    read_offset: int,
    write_offset: int,
    length: int,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> int:
    """Copy ``length`` bytes between two seekable streams in bounded chunks.

    The last chunk is exactly the remainder. Returns the number of chunks
    written and raises ``OSError`` if the source runs dry early.
    """

    if chunk_size <= 0:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")

    source.seek(read_offset)
    target.seek(write_offset)
    remaining = length
    chunks = 0
    while remaining > 0:
        wanted = min(chunk_size, remaining)
        block = source.read(wanted)
        if len(block) != wanted:
            raise OSError(f"short read: expected {wanted} bytes, got {len(block)}")
        target.write(block)
        remaining -= wanted
        chunks += 1
    return chunks


class SpliceStore:
    """Stateless splicer bound to one backing file path.

    The file is opened and closed inside every call. The tail that has to move
    is spooled into an anonymous temporary file next to the backing file
    before anything is overwritten.
    """

    def __init__(self, path: str | Path, chunk_size: int = DEFAULT_CHUNK_SIZE) -> None:
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")
        self.path = Path(path)
        self.chunk_size = chunk_size

    def insert_payload(self, offset: int, payload: bytes, current_length: int) -> None:
        """Insert ``payload`` at ``offset``, shifting the following bytes right."""

        payload = bytes(payload)
        if not payload:
            raise ValueError("payload must not be empty")
        if not 0 <= offset <= current_length:
            raise ValueError(f"offset {offset} outside 0..{current_length}")

        if not self.path.exists():
            if current_length != 0:
                raise IOFailure(
                    self.path,
                    "splice",
                    f"backing file is missing but {current_length} bytes are indexed",
                )
            self._create(payload)
            return

        on_disk = self.size()
        if on_disk != current_length:
            raise IOFailure(
                self.path,
                "splice",
                f"file holds {on_disk} bytes but {current_length} are indexed",
            )

        tail_length = current_length - offset
        try:
            with self.path.open("r+b") as backing:
                if tail_length == 0:
                    self._append(backing, offset, payload, current_length)
                else:
                    self._splice(backing, offset, payload, tail_length, current_length)
        except OSError as exc:
            raise IOFailure(self.path, "splice", str(exc)) from exc

        LOGGER.debug(
            "Inserted %s bytes at offset %s of %s (tail=%s bytes)",
            len(payload),
            offset,
            self.path,
            tail_length,
        )

    def _append(self, backing: BinaryIO, offset: int, payload: bytes, current_length: int) -> None:
        try:
            backing.seek(offset)
            backing.write(payload)
            backing.flush()
        except OSError:
            self._rollback(backing, None, offset, 0, current_length)
            raise

    def _splice(
        self,
        backing: BinaryIO,
        offset: int,
        payload: bytes,
        tail_length: int,
        current_length: int,
    ) -> None:
        with tempfile.TemporaryFile(prefix=SPOOL_PREFIX, dir=self.path.parent) as spool:
            chunks = copy_range(backing, spool, offset, 0, tail_length, self.chunk_size)
            spool.flush()
            LOGGER.debug("Spooled %s tail bytes in %s chunks", tail_length, chunks)

            # nothing in the backing file has changed up to here
            try:
                backing.seek(offset)
                backing.write(payload)
                copy_range(spool, backing, 0, offset + len(payload), tail_length, self.chunk_size)
                backing.flush()
            except OSError:
                self._rollback(backing, spool, offset, tail_length, current_length)
                raise

    def _rollback(
        self,
        backing: BinaryIO,
        spool: Optional[BinaryIO],
        offset: int,
        tail_length: int,
        current_length: int,
    ) -> None:
        """Put the spooled tail back at ``offset`` and cut the file to its old length."""

        try:
            if spool is not None:
                copy_range(spool, backing, 0, offset, tail_length, self.chunk_size)
            backing.truncate(current_length)
            backing.flush()
        except OSError as exc:
            LOGGER.error("Could not restore %s after a failed write: %s", self.path, exc)
        else:
            LOGGER.warning("Restored %s after a failed write at offset %s", self.path, offset)

    def _create(self, payload: bytes) -> None:
        try:
            with self.path.open("xb") as handle:
                handle.write(payload)
        except FileExistsError as exc:
            raise IOFailure(self.path, "create", "backing file appeared concurrently") from exc
        except OSError as exc:
            self.path.unlink(missing_ok=True)
            raise IOFailure(self.path, "create", str(exc)) from exc
        LOGGER.debug("Created %s with %s bytes", self.path, len(payload))

    def size(self) -> int:
        """Current on-disk size; 0 when the file does not exist."""

        try:
            return self.path.stat().st_size
        except FileNotFoundError:
            return 0
        except OSError as exc:
            raise IOFailure(self.path, "stat", str(exc)) from exc

    def read_all(self) -> bytes:
        try:
            return self.path.read_bytes()
        except FileNotFoundError:
            return b""
        except OSError as exc:
            raise IOFailure(self.path, "read", str(exc)) from exc

    def truncate(self) -> None:
        """Empty the backing file in place if it exists."""

        if not self.path.exists():
            return
        try:
            with self.path.open("r+b") as handle:
                handle.truncate(0)
        except OSError as exc:
            raise IOFailure(self.path, "truncate", str(exc)) from exc

    def reset(self) -> None:
        try:
            self.path.unlink(missing_ok=True)
        except OSError as exc:
            raise IOFailure(self.path, "reset", str(exc)) from exc


__all__ = ["DEFAULT_CHUNK_SIZE", "SpliceStore", "copy_range"]
