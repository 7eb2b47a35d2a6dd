"""Port interfaces implemented by storage backends."""

from flatvec.ports.vector_store import SearchHit, VectorStorePort

__all__ = ["SearchHit", "VectorStorePort"]
