"""Path utilities for directory and file operations."""

from __future__ import annotations

from pathlib import Path


def ensure_dir(path: Path) -> Path:
    """Ensure directory exists, creating if necessary."""
    path.mkdir(parents=True, exist_ok=True)
    return path


def ensure_parent_dir(path: Path) -> Path:
    """Ensure the directory holding ``path`` exists and return ``path``."""
    ensure_dir(path.parent)
    return path


def file_size(path: Path) -> int:
    """Return the size of ``path`` in bytes, or 0 when it does not exist."""
    try:
        return path.stat().st_size
    except FileNotFoundError:
        return 0
