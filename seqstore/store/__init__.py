"""Backing-file mutation."""

from .splice import DEFAULT_CHUNK_SIZE, SpliceStore, copy_range

__all__ = ["DEFAULT_CHUNK_SIZE", "SpliceStore", "copy_range"]
