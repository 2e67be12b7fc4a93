"""Shared fixtures for core tests."""

from collections.abc import Iterator
from pathlib import Path

import pytest


@pytest.fixture
def temp_state_file(tmp_path: Path) -> Path:
    """Create a temporary state file path for testing.

    Args:
        tmp_path: pytest's temporary directory fixture

    Returns:
        Path to temporary carbonquest.json file
    """
    return tmp_path / "carbonquest.json"


@pytest.fixture(autouse=True)
def reset_settings_cache() -> Iterator[None]:
    """Reset the global settings cache before and after each test."""
    import carbonquest.core.config

    carbonquest.core.config._settings = None
    yield
    carbonquest.core.config._settings = None
