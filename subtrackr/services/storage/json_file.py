"""
Local JSON File Storage

Keeps every key in one JSON object on disk:

    {"subscriptions": "[{\"id\": 1700000000000, ...}]"}

Writes go to a temporary file that is then moved over the original,
so a crash mid-write never leaves a truncated data file behind.
"""

import json
import os
from pathlib import Path
from typing import Optional, Union

from subtrackr.services.storage.interface import KeyValueStore, StorageError


class JsonFileKeyValueStore(KeyValueStore):
    """Key-value store backed by a single local JSON file."""

    def __init__(self, path: Union[str, Path]):
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def _read_all(self) -> dict[str, str]:
        """Read the whole file. A missing file is an empty store."""
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise StorageError(f"Failed to read {self._path}: {e}")
        if not isinstance(data, dict):
            raise StorageError(f"Unexpected content in {self._path}: not a JSON object")
        return data

    async def get(self, key: str) -> Optional[str]:
        value = self._read_all().get(key)
        if value is not None and not isinstance(value, str):
            raise StorageError(f"Value for '{key}' in {self._path} is not a string")
        return value

    async def set(self, key: str, value: str) -> None:
        data = self._read_all()
        data[key] = value

        tmp_path = self._path.with_name(self._path.name + ".tmp")
        try:
            if self._path.parent and not self._path.parent.exists():
                self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(json.dumps(data, ensure_ascii=False), encoding="utf-8")
            os.replace(tmp_path, self._path)
        except OSError as e:
            raise StorageError(f"Failed to write {self._path}: {e}")
