"""Distance kernels used to rank stored vectors against a query."""

from __future__ import annotations

from collections.abc import Callable

import numpy as np

from flatvec.errors import InvalidArgumentError

DistanceFn = Callable[[np.ndarray, np.ndarray], float]


def euclidean_squared(a: np.ndarray, b: np.ndarray) -> float:
    """Return the squared Euclidean distance between ``a`` and ``b``."""
    diff = np.asarray(a, dtype=np.float64) - np.asarray(b, dtype=np.float64)
    return float(np.dot(diff, diff))


def cosine_distance(a: np.ndarray, b: np.ndarray) -> float:
    """Return ``1 - cos(a, b)``.

    A zero-norm operand has no direction, so the distance is ``1.0``.
    """
    a64 = np.asarray(a, dtype=np.float64)
    b64 = np.asarray(b, dtype=np.float64)
    norm_a = float(np.linalg.norm(a64))
    norm_b = float(np.linalg.norm(b64))
    if norm_a == 0.0 or norm_b == 0.0:
        return 1.0
    return 1.0 - float(np.dot(a64, b64)) / (norm_a * norm_b)


METRICS: dict[str, DistanceFn] = {
    "euclidean": euclidean_squared,
    "cosine": cosine_distance,
}


def normalize_metric(name: str) -> str:
    """Return the canonical metric name, rejecting unknown ones."""
    normalized = name.strip().lower() if isinstance(name, str) else ""
    if normalized not in METRICS:
        raise InvalidArgumentError(
            f"Unknown distance metric {name!r}. Choose from: {', '.join(sorted(METRICS))}"
        )
    return normalized


def resolve_metric(name: str) -> DistanceFn:
    """Look up the kernel registered under ``name``."""
    return METRICS[normalize_metric(name)]
