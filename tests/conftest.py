"""Shared pytest fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest


@pytest.fixture
def root(tmp_path: Path) -> Path:
    """Return a fully resolved scratch directory for file-system tests."""
    directory = tmp_path.resolve() / "photos"
    directory.mkdir()
    return directory
