"""Flat-file vector storage and exhaustive search."""

from flatvec.store.codec import RecordCodec
from flatvec.store.distance import METRICS, cosine_distance, euclidean_squared
from flatvec.store.flat_file import FlatFileVectorStore
from flatvec.store.topk import BoundedTopK, Candidate

__all__ = [
    "METRICS",
    "BoundedTopK",
    "Candidate",
    "FlatFileVectorStore",
    "RecordCodec",
    "cosine_distance",
    "euclidean_squared",
]
