"""Exception types raised by the index and the splice store."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from seqstore.index.interval_index import Interval


class SeqStoreError(Exception):
    """Base class for seqstore failures."""


class DuplicateIdentifier(SeqStoreError):
    """Raised when an identifier is already stored in the backing file."""

    def __init__(self, identifier: int, existing: Optional["Interval"] = None) -> None:
        self.identifier = identifier
        self.existing = existing
        if existing is None:
            message = f"packet ID {identifier:#06x} already exists"
        else:
            message = (
                f"packet ID {identifier:#06x} already exists "
                f"(run {existing.start_id:#06x}..{existing.end_id:#06x})"
            )
        super().__init__(message)


class IOFailure(SeqStoreError):
    """Raised when the backing file or the tail spool cannot be read or written."""

    def __init__(self, path: str | Path, operation: str, detail: str | None = None) -> None:
        self.path = Path(path)
        self.operation = operation
        message = f"{operation} failed for {self.path}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


__all__ = ["SeqStoreError", "DuplicateIdentifier", "IOFailure"]
