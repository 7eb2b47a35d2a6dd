"""Pytest configuration and fixtures."""

import gc
import logging
import shutil
import tempfile
from collections.abc import Generator
from pathlib import Path

import pytest

from flatvec.config import Settings
from flatvec.store import FlatFileVectorStore


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    tmpdir = tempfile.mkdtemp()
    try:
        yield Path(tmpdir)
    finally:
        # Force garbage collection to release any file handles
        gc.collect()
        shutil.rmtree(tmpdir, ignore_errors=True)


@pytest.fixture
def override_settings(temp_dir: Path) -> Generator[Settings, None, None]:
    """Provide isolated flatvec settings scoped to tests."""

    import flatvec.config as config_module

    original_settings = getattr(config_module, "_settings", None)

    data_dir = temp_dir / "appdata"
    data_dir.mkdir(parents=True, exist_ok=True)

    settings = config_module.Settings(data_dir=data_dir)
    config_module._settings = settings

    try:
        yield settings
    finally:
        config_module._settings = original_settings


@pytest.fixture(autouse=True)
def _reset_package_logger() -> Generator[None, None, None]:
    """Drop handlers the CLI attaches so they never outlive a captured stream."""
    yield
    logger = logging.getLogger("flatvec")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def store_path(temp_dir: Path) -> Path:
    return temp_dir / "vectors.dat"


@pytest.fixture
def store(store_path: Path, override_settings: Settings) -> FlatFileVectorStore:
    """Empty three-dimensional store."""
    return FlatFileVectorStore(store_path, 3, settings=override_settings)


@pytest.fixture
def unit_store(store: FlatFileVectorStore) -> FlatFileVectorStore:
    """Store holding the three unit vectors tagged with ids 1, 2 and 3."""
    store.add_vector([1.0, 0.0, 0.0], {"id": 1})
    store.add_vector([0.0, 1.0, 0.0], {"id": 2})
    store.add_vector([0.0, 0.0, 1.0], {"id": 3})
    return store
