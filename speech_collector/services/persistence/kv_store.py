"""Durable key-value store with atomic JSON persistence.

Each named slot is one JSON file in the data directory. Writes use a
temp file + fsync + os.replace so a crash during write leaves the old
value intact.
"""

import json
import logging
import os
import re
import tempfile
from pathlib import Path
from typing import Any, Optional

from speech_collector.lib.exceptions import DecodeFailure, PersistenceError

logger = logging.getLogger(__name__)

_SLOT_NAME = re.compile(r"^[A-Za-z0-9_.-]+$")


class FileKeyValueStore:
    """
    Named JSON slots on the local filesystem.

    Example:
        kv = FileKeyValueStore(Path("./collector_data"))
        kv.set("theme", "dark")
        kv.get("theme")  # "dark"
    """

    def __init__(self, data_dir: Path):
        """
        Initialize the store.

        Args:
            data_dir: Directory holding one file per slot
        """
        self.data_dir = data_dir
        self.data_dir.mkdir(parents=True, exist_ok=True)

    def slot_path(self, key: str) -> Path:
        if not _SLOT_NAME.match(key):
            raise ValueError(f"Invalid slot name: {key!r}")
        return self.data_dir / f"{key}.json"

    def exists(self, key: str) -> bool:
        return self.slot_path(key).exists()

    def read_text(self, key: str) -> Optional[str]:
        """
        Read a slot's raw content.

        Returns:
            Raw JSON text, or None if the slot is absent

        Raises:
            PersistenceError: If the file exists but cannot be read
        """
        path = self.slot_path(key)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise PersistenceError(f"Failed to read slot '{key}': {e}", path=str(path), operation="read") from e

    def get(self, key: str) -> Any:
        """
        Load and parse a slot.

        Returns:
            Parsed JSON value, or None if the slot is absent

        Raises:
            DecodeFailure: If the content is not valid JSON
        """
        raw = self.read_text(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            logger.error(f"Corrupted slot '{key}': {e}")
            raise DecodeFailure(f"Corrupted slot '{key}': {e}") from e

    def set(self, key: str, value: Any) -> None:
        """
        Persist a value atomically.

        Raises:
            PersistenceError: If the write fails
        """
        path = self.slot_path(key)
        content = json.dumps(value, indent=2, ensure_ascii=False)

        try:
            temp_fd, temp_path = tempfile.mkstemp(dir=self.data_dir, prefix=f".{key}_", suffix=".tmp")
        except OSError as e:
            raise PersistenceError(f"Cannot write to {self.data_dir}: {e}", path=str(path), operation="write") from e

        try:
            with os.fdopen(temp_fd, "w", encoding="utf-8") as f:
                f.write(content)
                f.flush()
                os.fsync(f.fileno())
            os.replace(temp_path, path)
            logger.debug(f"Saved slot '{key}' ({len(content)} chars)")
        except OSError as e:
            try:
                os.unlink(temp_path)
            except OSError:
                pass
            raise PersistenceError(f"Failed to save slot '{key}': {e}", path=str(path), operation="write") from e

    def delete(self, key: str) -> bool:
        """
        Remove a slot.

        Returns:
            True if deleted, False if it did not exist
        """
        path = self.slot_path(key)
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as e:
            raise PersistenceError(f"Failed to delete slot '{key}': {e}", path=str(path), operation="delete") from e
        logger.debug(f"Deleted slot '{key}'")
        return True
