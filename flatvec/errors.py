"""Exception hierarchy for flat-file vector store operations."""

from __future__ import annotations


class FlatvecError(Exception):
    """Base class for errors raised by flatvec."""


class InvalidArgumentError(FlatvecError, ValueError):
    """Caller-supplied vector, metric, or metadata violates the store contract."""


class CorruptionError(FlatvecError, RuntimeError):
    """On-disk data is internally inconsistent."""


class EndOfStore(Exception):
    """Short read at a record boundary.

    Raised by the record codec and consumed by the scan loop; a truncated
    trailing write ends the scan instead of failing it.
    """
