"""JSON file key/value store.

A flat JSON object on disk. Values are held in memory after load and only
written back on `save()`.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


class JsonFileStore:
    """Key/value store backed by a single JSON file.

    Handles:
    - Loading the file once at construction (missing or corrupt → empty)
    - Get/set/delete of top-level keys
    - Atomic save via temp file + rename
    """

    def __init__(self, path: str | Path):
        """Initialize the store.

        Args:
            path: Path to the JSON file. Parent directories are created.
        """
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._values: dict[str, Any] = self._read()

    def _read(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}

        try:
            with open(self.path, encoding="utf-8") as f:
                raw = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Error reading store file {self.path}: {e}, starting empty")
            return {}

        if not isinstance(raw, dict):
            logger.warning(f"Store file {self.path} is not a JSON object, starting empty")
            return {}
        return raw

    def get(self, key: str, default: Any = None) -> Any:
        return self._values.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._values[key] = value

    def delete(self, key: str) -> bool:
        """Remove a key. Returns True if it existed."""
        return self._values.pop(key, None) is not None

    def keys(self) -> list[str]:
        return list(self._values.keys())

    def save(self) -> None:
        """Write all values to disk.

        Raises:
            OSError: If the file cannot be written.
        """
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(self._values, f, ensure_ascii=False, indent=2)
            os.replace(tmp_name, self.path)
        except OSError:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise
