"""Binary layout of the store header and records.

A store file is a 4-byte big-endian dimension header followed by records::

    [dimension * float32, native order][uint32 BE length][length bytes of JSON]

No index of record offsets is kept; readers recover offsets by decoding
records sequentially.
"""

from __future__ import annotations

import struct
from collections.abc import Sequence
from dataclasses import dataclass
from typing import BinaryIO

import numpy as np

from flatvec.errors import CorruptionError, EndOfStore, InvalidArgumentError

HEADER_SIZE = 4
LENGTH_SIZE = 4
FLOAT_SIZE = 4

_U32_BE = struct.Struct(">I")
_FLOAT32 = np.dtype(np.float32)  # native byte order
_FLOAT32_MAX = float(np.finfo(np.float32).max)
MAX_DIMENSION = 0xFFFFFFFF


def encode_header(dimension: int) -> bytes:
    """Return the 4-byte header announcing ``dimension``."""
    if dimension <= 0:
        raise InvalidArgumentError(f"Dimension must be positive; got {dimension}")
    if dimension > MAX_DIMENSION:
        raise InvalidArgumentError(
            f"Dimension {dimension} does not fit the 4-byte header (max {MAX_DIMENSION})"
        )
    return _U32_BE.pack(dimension)


def decode_header(raw: bytes) -> int:
    """Return the dimension stored in a header."""
    if len(raw) < HEADER_SIZE:
        raise CorruptionError(
            f"Store header is {len(raw)} bytes; expected {HEADER_SIZE}"
        )
    (dimension,) = _U32_BE.unpack(raw[:HEADER_SIZE])
    return dimension


@dataclass(frozen=True, slots=True)
class RecordCodec:
    """Encode and decode records for a fixed vector dimension."""

    dimension: int

    @property
    def vector_size(self) -> int:
        return self.dimension * FLOAT_SIZE

    def record_size(self, metadata_length: int) -> int:
        """Total on-disk size of a record carrying ``metadata_length`` bytes."""
        return self.vector_size + LENGTH_SIZE + metadata_length

    def check_vector(self, vector: Sequence[float] | np.ndarray) -> np.ndarray:
        """Coerce ``vector`` to a flat float32 array of the codec's dimension.

        Components must be finite and representable as float32.
        """
        try:
            wide = np.asarray(vector, dtype=np.float64)
        except (TypeError, ValueError, OverflowError) as exc:
            raise InvalidArgumentError(f"Vector is not numeric: {exc}") from exc

        if wide.ndim != 1 or wide.shape[0] != self.dimension:
            raise InvalidArgumentError(
                f"Vector dimension {wide.shape[0] if wide.ndim == 1 else wide.shape} "
                f"does not match store dimension {self.dimension}"
            )
        if not np.isfinite(wide).all():
            raise InvalidArgumentError("Vector components must be finite (no NaN or infinity)")
        if np.abs(wide).max(initial=0.0) > _FLOAT32_MAX:
            raise InvalidArgumentError(
                f"Vector components must lie within float32 range (|x| <= {_FLOAT32_MAX:.6g})"
            )
        return wide.astype(_FLOAT32)

    def encode(self, vector: Sequence[float] | np.ndarray, metadata: bytes) -> bytes:
        """Encode one record.

        Raises:
            InvalidArgumentError: If the vector length differs from the
                dimension or the metadata payload is empty.
        """
        array = self.check_vector(vector)
        if not metadata:
            raise InvalidArgumentError("Metadata payload must not be empty")
        return array.tobytes() + _U32_BE.pack(len(metadata)) + metadata

    def read_vector(self, reader: BinaryIO) -> np.ndarray:
        """Read the next vector, raising ``EndOfStore`` on a short read."""
        raw = reader.read(self.vector_size)
        if len(raw) < self.vector_size:
            raise EndOfStore()
        return np.frombuffer(raw, dtype=_FLOAT32)

    def read_metadata_length(
        self,
        reader: BinaryIO,
        *,
        remaining: int,
        max_length: int,
    ) -> int:
        """Read a metadata length prefix and check it against its bounds.

        Args:
            reader: Binary stream positioned on the length prefix.
            remaining: Bytes left in the file after the length prefix.
            max_length: Largest plausible metadata payload.

        Raises:
            EndOfStore: On a short read, or when the payload runs past the end
                of the file (an interrupted trailing append).
            CorruptionError: When the length is zero or exceeds ``max_length``.
        """
        raw = reader.read(LENGTH_SIZE)
        if len(raw) < LENGTH_SIZE:
            raise EndOfStore()

        (length,) = _U32_BE.unpack(raw)
        if length <= 0:
            raise CorruptionError(f"Invalid metadata length: {length}")
        if length > max_length:
            raise CorruptionError(
                f"Metadata length {length} exceeds the {max_length}-byte limit"
            )
        if length > remaining:
            raise EndOfStore()
        return length
