"""Utility modules for common operations."""

from flatvec.utils.hashing import compute_sha256_file
from flatvec.utils.paths import ensure_dir, ensure_parent_dir, file_size
from flatvec.utils.serialization import decode_metadata, encode_metadata

__all__ = [
    "compute_sha256_file",
    "decode_metadata",
    "encode_metadata",
    "ensure_dir",
    "ensure_parent_dir",
    "file_size",
]
