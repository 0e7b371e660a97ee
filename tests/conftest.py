# tests/conftest.py

"""Shared pytest fixtures for all price history tests."""

from collections.abc import Generator
from pathlib import Path

import pytest

from src.config.settings import Settings


@pytest.fixture(autouse=True)
def isolated_paths(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch,
) -> Generator[None, None, None]:
    """Keep log files and the default catalog DB inside a temp dir."""
    monkeypatch.setattr(Settings, "LOGS_DIR", tmp_path / "logs")
    monkeypatch.setattr(
        Settings, "CATALOG_DB_PATH", tmp_path / "data" / "catalog.db",
    )
    yield
