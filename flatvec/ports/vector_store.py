"""Vector store port interface for k-nearest-neighbour search."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Protocol

import numpy as np
from pydantic import BaseModel, Field


class SearchHit(BaseModel):
    """Single nearest-neighbour result."""

    distance: float = Field(..., description="Distance from the query (lower is nearer)")
    metadata: dict[str, Any] = Field(
        default_factory=dict, description="Metadata stored alongside the vector"
    )


class VectorStorePort(Protocol):
    """Port interface for vector stores answering k-NN queries.

    Implementations should provide:
    - Fixed-dimension vectors paired with string-keyed metadata
    - Results ordered nearest first
    - ``euclidean`` and ``cosine`` metrics

    Side effects: ``add_vector`` writes to the backing storage.
    """

    dimension: int

    def add_vector(
        self,
        vector: Sequence[float] | np.ndarray,
        metadata: Mapping[str, Any],
    ) -> None:
        """Persist ``vector`` together with ``metadata``."""
        ...

    def search(
        self,
        query: Sequence[float] | np.ndarray,
        k: int,
        metric: str = "euclidean",
    ) -> list[SearchHit]:
        """Return up to ``k`` nearest neighbours of ``query``."""
        ...
