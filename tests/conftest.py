"""Shared pytest fixtures for CarbonQuest tests."""

from collections.abc import Iterator
from pathlib import Path

import pytest

from carbonquest.core.config import Settings


@pytest.fixture
def temp_state_file(tmp_path: Path) -> Path:
    """Create a temporary state file path for testing.

    Args:
        tmp_path: pytest's temporary directory fixture

    Returns:
        Path to temporary carbonquest.json file
    """
    return tmp_path / "data" / "carbonquest.json"


@pytest.fixture
def mock_settings(temp_state_file: Path) -> Settings:
    """Create Settings instance with test values.

    Args:
        temp_state_file: Temporary state file path

    Returns:
        Settings instance configured for testing
    """
    return Settings(
        log_level="INFO",
        state_file_path=str(temp_state_file),
        timezone="UTC",
        app_version="0.1.0",
        environment="test",
    )


@pytest.fixture(autouse=True)
def reset_globals() -> Iterator[None]:
    """Reset the cached settings and tracker singletons around each test."""
    import carbonquest.core.config
    import carbonquest.progress.tracker

    carbonquest.core.config._settings = None
    carbonquest.progress.tracker._tracker = None

    yield

    carbonquest.core.config._settings = None
    carbonquest.progress.tracker._tracker = None
