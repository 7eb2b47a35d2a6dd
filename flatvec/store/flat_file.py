"""Append-only flat-file vector store with exhaustive k-NN search."""

from __future__ import annotations

import logging
import math
import os
from collections.abc import Iterable, Iterator, Mapping, Sequence
from pathlib import Path
from typing import Any, BinaryIO

import numpy as np

from flatvec.config import Settings, get_settings
from flatvec.errors import CorruptionError, EndOfStore, InvalidArgumentError
from flatvec.ports.vector_store import SearchHit, VectorStorePort
from flatvec.store.codec import (
    HEADER_SIZE,
    LENGTH_SIZE,
    RecordCodec,
    decode_header,
    encode_header,
)
from flatvec.store.distance import normalize_metric, resolve_metric
from flatvec.store.topk import BoundedTopK, Candidate
from flatvec.utils.paths import ensure_parent_dir
from flatvec.utils.serialization import decode_metadata, encode_metadata

logger = logging.getLogger(__name__)

VectorLike = Sequence[float] | np.ndarray


class FlatFileVectorStore(VectorStorePort):
    """Vector store persisted as a single append-only file.

    The store keeps no open handle between calls: each operation opens the
    file, does its work inside a ``with`` block and closes it again, so a
    failure part-way through never leaks a descriptor.
    """

    def __init__(
        self,
        path: Path | str,
        dimension: int,
        *,
        verify_dimension: bool | None = None,
        settings: Settings | None = None,
    ) -> None:
        """Open the store at ``path``, creating it when absent.

        Args:
            path: Store file location.
            dimension: Length of every vector in the store.
            verify_dimension: Check an existing header against ``dimension``
                (defaults to ``Settings.verify_dimension``).
            settings: Settings to read defaults from (defaults to the global
                instance).

        Raises:
            InvalidArgumentError: If ``dimension`` is not positive, or the
                existing header disagrees with it while verification is on.
            CorruptionError: If an existing file is too short to hold a header.
        """
        settings = settings or get_settings()
        header = encode_header(int(dimension))

        self._path = Path(path)
        self._dimension = int(dimension)
        self._codec = RecordCodec(self._dimension)
        self._max_metadata_bytes = settings.max_metadata_bytes
        self._default_metric = settings.default_metric
        verify = settings.verify_dimension if verify_dimension is None else verify_dimension

        if self._create(header):
            return
        if verify:
            stored = self.read_dimension(self._path)
            if stored != self._dimension:
                raise InvalidArgumentError(
                    f"Store {self._path} holds {stored}-dimensional vectors; "
                    f"opened with dimension {self._dimension}"
                )

    def __repr__(self) -> str:
        return f"{type(self).__name__}(path={str(self._path)!r}, dimension={self._dimension})"

    @property
    def path(self) -> Path:
        return self._path

    @property
    def dimension(self) -> int:
        return self._dimension

    # ------------------------------------------------------------------#
    # Internal helpers
    # ------------------------------------------------------------------#

    def _create(self, header: bytes) -> bool:
        """Write the header if the file does not exist yet."""
        if self._path.exists():
            return False

        ensure_parent_dir(self._path)
        try:
            with open(self._path, "xb") as handle:
                handle.write(header)
        except FileExistsError:
            return False

        logger.info("Created store %s (dimension=%d)", self._path, self._dimension)
        return True

    def _walk(self, handle: BinaryIO) -> Iterator[tuple[np.ndarray, int, int]]:
        """Yield ``(vector, metadata_offset, metadata_length)`` for each record.

        Metadata bytes are skipped, not read. The handle is repositioned on
        the next record before each step, so consumers may read from it
        between iterations.
        """
        total_size = os.fstat(handle.fileno()).st_size
        decode_header(handle.read(HEADER_SIZE))
        offset = HEADER_SIZE

        while True:
            handle.seek(offset)
            try:
                vector = self._codec.read_vector(handle)
                metadata_offset = offset + self._codec.vector_size + LENGTH_SIZE
                metadata_length = self._codec.read_metadata_length(
                    handle,
                    remaining=total_size - metadata_offset,
                    max_length=self._max_metadata_bytes,
                )
            except EndOfStore:
                dropped = total_size - offset
                # Past this record's prefix there is room for another record ("{}").
                if dropped > self._codec.vector_size + LENGTH_SIZE + self._codec.record_size(2):
                    logger.error(
                        "Dropping %d bytes from offset %d in %s; the length prefix there "
                        "runs past the end of the file",
                        dropped,
                        offset,
                        self._path,
                    )
                elif dropped > 0:
                    logger.warning(
                        "Ignoring truncated trailing record at offset %d in %s (%d bytes)",
                        offset,
                        self._path,
                        dropped,
                    )
                return
            except CorruptionError as exc:
                raise CorruptionError(f"{exc} (record at offset {offset} in {self._path})") from exc

            yield vector, metadata_offset, metadata_length
            offset = metadata_offset + metadata_length

    def _validate_query(self, query: VectorLike) -> np.ndarray:
        return self._codec.check_vector(query)

    # ------------------------------------------------------------------#
    # Public API
    # ------------------------------------------------------------------#

    @staticmethod
    def read_dimension(path: Path | str) -> int:
        """Return the dimension recorded in the header of ``path``."""
        with open(path, "rb") as handle:
            return decode_header(handle.read(HEADER_SIZE))

    def add_vector(self, vector: VectorLike, metadata: Mapping[str, Any]) -> None:
        """Append one ``(vector, metadata)`` record to the end of the file.

        Raises:
            InvalidArgumentError: If the vector length differs from the store
                dimension or the metadata cannot be serialized. The file is
                left untouched.
        """
        self._codec.check_vector(vector)
        record = self._codec.encode(vector, encode_metadata(metadata))

        with open(self._path, "r+b") as handle:
            handle.seek(0, os.SEEK_END)
            handle.write(record)

        logger.debug("Appended %d-byte record to %s", len(record), self._path)

    def add_vectors(self, items: Iterable[tuple[VectorLike, Mapping[str, Any]]]) -> int:
        """Append several records in a single write.

        Every item is validated and encoded before the file is opened, so one
        bad item leaves the store unchanged.

        Returns:
            Number of records appended.
        """
        encoded: list[bytes] = []
        for position, (vector, metadata) in enumerate(items):
            try:
                self._codec.check_vector(vector)
                encoded.append(self._codec.encode(vector, encode_metadata(metadata)))
            except InvalidArgumentError as exc:
                raise InvalidArgumentError(f"Item {position}: {exc}") from exc

        if not encoded:
            return 0

        payload = b"".join(encoded)
        with open(self._path, "r+b") as handle:
            handle.seek(0, os.SEEK_END)
            handle.write(payload)

        logger.debug("Appended %d records (%d bytes) to %s", len(encoded), len(payload), self._path)
        return len(encoded)

    def search(
        self,
        query: VectorLike,
        k: int,
        metric: str | None = None,
    ) -> list[SearchHit]:
        """Return the ``k`` stored vectors nearest to ``query``, nearest first.

        Euclidean distances are ranked squared and reported as true distances.

        Raises:
            InvalidArgumentError: Unknown metric or wrong query length; raised
                before the file is opened.
            CorruptionError: A record carries an invalid length prefix or
                undecodable metadata. No partial results are returned.
        """
        metric_name = normalize_metric(metric or self._default_metric)
        kernel = resolve_metric(metric_name)
        query_vector = self._validate_query(query)

        if k <= 0:
            return []

        selector = BoundedTopK(k)
        scanned = 0
        with open(self._path, "rb") as handle:
            for vector, metadata_offset, metadata_length in self._walk(handle):
                scanned += 1
                selector.offer(
                    Candidate(
                        distance=kernel(query_vector, vector),
                        metadata_offset=metadata_offset,
                        metadata_length=metadata_length,
                    )
                )

        survivors = selector.drain_ascending()
        hits: list[SearchHit] = []
        if survivors:
            with open(self._path, "rb") as handle:
                for candidate in survivors:
                    handle.seek(candidate.metadata_offset)
                    raw = handle.read(candidate.metadata_length)
                    if len(raw) != candidate.metadata_length:
                        raise CorruptionError(
                            f"Metadata at offset {candidate.metadata_offset} in {self._path} "
                            f"is {len(raw)} bytes; expected {candidate.metadata_length}"
                        )
                    distance = candidate.distance
                    if metric_name == "euclidean":
                        distance = math.sqrt(distance)
                    hits.append(
                        SearchHit(
                            distance=distance,
                            metadata=decode_metadata(raw, offset=candidate.metadata_offset),
                        )
                    )

        logger.debug(
            "Search over %s scanned %d records, returned %d (metric=%s, k=%d)",
            self._path,
            scanned,
            len(hits),
            metric_name,
            k,
        )
        return hits

    def iter_records(self) -> Iterator[tuple[np.ndarray, dict[str, Any]]]:
        """Yield every complete ``(vector, metadata)`` pair in append order."""
        with open(self._path, "rb") as handle:
            for vector, metadata_offset, metadata_length in self._walk(handle):
                handle.seek(metadata_offset)
                raw = handle.read(metadata_length)
                yield vector.copy(), decode_metadata(raw, offset=metadata_offset)

    def count(self) -> int:
        """Return the number of complete records in the store."""
        with open(self._path, "rb") as handle:
            return sum(1 for _ in self._walk(handle))
