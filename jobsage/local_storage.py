"""Key-value snapshot storage.

Each key maps to one serialized text blob, the way a browser's local storage
holds one string per key. The file-backed store writes ``<key>.json`` into a
directory (the config dir by default).
"""

import logging
import os
import re
from pathlib import Path
from typing import Optional, Protocol

from .config import STORAGE_KEY_PATTERN
from .errors import PersistenceError

logger = logging.getLogger(__name__)

_KEY_PATTERN = re.compile(STORAGE_KEY_PATTERN)


class KeyValueStore(Protocol):
    def load_snapshot(self, key: str) -> Optional[str]: ...

    def save_snapshot(self, key: str, text: str) -> None: ...


class JsonFileKeyValueStore:
    def __init__(self, directory: Path):
        self.directory = Path(directory)

    def _path_for(self, key: str) -> Path:
        if not _KEY_PATTERN.match(key):
            raise ValueError(f"Invalid storage key: {key!r}")
        return self.directory / f"{key}.json"

    def load_snapshot(self, key: str) -> Optional[str]:
        path = self._path_for(key)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Failed to read %s: %s", path.name, e)
            return None

    def save_snapshot(self, key: str, text: str) -> None:
        path = self._path_for(key)
        tmp_path = path.with_suffix(".json.tmp")
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(text, encoding="utf-8")
            os.replace(tmp_path, path)
        except OSError as e:
            logger.error("Failed to write %s: %s", path.name, e)
            raise PersistenceError(key, str(e)) from e


class InMemoryKeyValueStore:
    """Process-local store, used for ephemeral runs and tests."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._data: dict[str, str] = dict(initial or {})

    def load_snapshot(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def save_snapshot(self, key: str, text: str) -> None:
        self._data[key] = text
