"""Tracker snapshot persistence using a JSON file with atomic writes."""

from __future__ import annotations

import json
from pathlib import Path
from threading import Lock

from pydantic import ValidationError

from carbonquest.core.logging import get_logger
from carbonquest.progress.models import TrackerSnapshot
from carbonquest.shared.exceptions import StateError

logger = get_logger(__name__)


class StateManager:
    """Thread-safe snapshot persistence using a JSON file."""

    def __init__(self, file_path: str | Path) -> None:
        """Initialize StateManager with file path.

        Args:
            file_path: Path to JSON state file
        """
        self.file_path = Path(file_path)
        self.lock = Lock()

    def load_snapshot(self) -> TrackerSnapshot | None:
        """Read the persisted snapshot.

        Returns:
            TrackerSnapshot, or None if the file is missing, empty or corrupted

        Raises:
            StateError: If the file exists but cannot be read

        Note:
            Returns None instead of raising on decode or validation errors
            so a corrupted file falls back to a fresh seed.
        """
        with self.lock:
            if not self.file_path.exists():
                return None
            try:
                content = self.file_path.read_text(encoding="utf-8")
            except OSError as e:
                logger.error(
                    "state.file.read_failed",
                    path=str(self.file_path),
                    error=str(e),
                    exc_info=True,
                )
                raise StateError(f"Failed to read state file: {e}") from e

        if not content.strip():
            return None

        try:
            return TrackerSnapshot.model_validate(json.loads(content))
        except (json.JSONDecodeError, ValidationError) as e:
            logger.warning(
                "state.file.corrupted",
                path=str(self.file_path),
                error=str(e),
            )
            return None

    def save_snapshot(self, snapshot: TrackerSnapshot) -> None:
        """Write the snapshot atomically.

        Args:
            snapshot: Snapshot to persist

        Raises:
            StateError: If the file cannot be written

        Note:
            Uses atomic write (temp file + rename) to prevent corruption.
        """
        with self.lock:
            try:
                self.file_path.parent.mkdir(parents=True, exist_ok=True)
                temp_path = self.file_path.with_suffix(".tmp")
                temp_path.write_text(snapshot.model_dump_json(indent=2), encoding="utf-8")

                # Atomic rename (POSIX-safe)
                temp_path.replace(self.file_path)
            except OSError as e:
                logger.error(
                    "state.file.write_failed",
                    path=str(self.file_path),
                    error=str(e),
                    exc_info=True,
                )
                raise StateError(f"Failed to write state file: {e}") from e

        logger.debug(
            "state.snapshot.saved",
            path=str(self.file_path),
            habits=len(snapshot.habits),
            history=len(snapshot.achievement_history),
        )
