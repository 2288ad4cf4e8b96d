"""
JSON file storage for the consolidated payload.

Writes go to a temporary file in the same directory which then replaces
the data file, so readers never see a partially written payload.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Optional

import structlog

from .core.errors import PersistenceError

logger = structlog.get_logger(__name__)


class DataStore:
    """Load/save of the persisted payload as a single JSON document."""

    def __init__(self, path: str):
        """
        Initialize data store.

        Args:
            path: Path of the JSON data file
        """
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.is_file()

    def file_size(self) -> Optional[int]:
        """Size of the data file in bytes, None if missing."""
        try:
            return self.path.stat().st_size
        except FileNotFoundError:
            return None

    def load(self) -> Optional[dict]:
        """
        Read the persisted payload.

        Returns:
            Payload dict or None if nothing has been saved yet

        Raises:
            PersistenceError: File unreadable or not valid JSON
        """
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return None
        except (OSError, ValueError) as e:
            logger.error("data_load_failed", path=str(self.path), error=str(e))
            raise PersistenceError(str(self.path), "read", e) from e

        if not isinstance(data, dict):
            raise PersistenceError(
                str(self.path), "read", ValueError("payload is not a JSON object")
            )

        logger.debug("data_loaded", path=str(self.path))
        return data

    def save(self, payload: dict) -> None:
        """
        Atomically replace the data file with payload.

        Raises:
            PersistenceError: Payload could not be written
        """
        directory = self.path.parent
        tmp_path = None

        try:
            directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix=".tmp", dir=directory
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(payload, f, ensure_ascii=False, indent=2)
            os.replace(tmp_path, self.path)
        except (OSError, TypeError, ValueError) as e:
            if tmp_path and os.path.exists(tmp_path):
                os.unlink(tmp_path)
            logger.error("data_save_failed", path=str(self.path), error=str(e))
            raise PersistenceError(str(self.path), "write", e) from e

        logger.info("saved_json", path=str(self.path))
