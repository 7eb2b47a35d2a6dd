"""flatvec - append-only flat-file vector store.

Stores fixed-dimension float vectors with JSON metadata in a single binary
file and answers k-nearest-neighbour queries by exhaustive scan.
"""

__version__ = "0.1.0"
__author__ = "flatvec Contributors"

from flatvec.config import Settings, get_settings
from flatvec.errors import CorruptionError, FlatvecError, InvalidArgumentError
from flatvec.ports import SearchHit
from flatvec.store import FlatFileVectorStore

__all__ = [
    "CorruptionError",
    "FlatFileVectorStore",
    "FlatvecError",
    "InvalidArgumentError",
    "SearchHit",
    "Settings",
    "get_settings",
    "__version__",
]
