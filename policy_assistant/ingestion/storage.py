"""
Key-value persistence backends for the document store.

The document store keeps its whole collection under one fixed key as a
serialized JSON blob; backends only need to get, set and remove blobs.
"""

import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional

from ..exceptions import StorageError


class KeyValueStore(ABC):
    """Abstract base class for blob storage backends."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the blob stored under key, or None if absent."""
        pass

    @abstractmethod
    def set(self, key: str, blob: str) -> None:
        """Store a blob under key, replacing any previous value."""
        pass

    @abstractmethod
    def remove(self, key: str) -> None:
        """Delete the blob under key. Missing keys are ignored."""
        pass


class InMemoryStore(KeyValueStore):
    """Volatile store, useful for tests and throwaway sessions."""

    def __init__(self):
        self._data: Dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, blob: str) -> None:
        self._data[key] = blob

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def __contains__(self, key: str) -> bool:
        return key in self._data


class JSONFileStore(KeyValueStore):
    """
    Stores each key as ``<directory>/<key>.json``.

    Writes go to a temporary file in the same directory which then
    replaces the target, so readers never see a half-written blob.
    """

    def __init__(self, directory: Path):
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def get(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not path.exists():
            return None
        with open(path, "r", encoding="utf-8") as f:
            return f.read()

    def set(self, key: str, blob: str) -> None:
        path = self._path(key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=str(path.parent), prefix=f".{key}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(blob)
                os.replace(tmp_name, path)
            except BaseException:
                if os.path.exists(tmp_name):
                    os.unlink(tmp_name)
                raise
        except OSError as e:
            raise StorageError(f"Could not write {path}: {e}") from e

    def remove(self, key: str) -> None:
        path = self._path(key)
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            raise StorageError(f"Could not remove {path}: {e}") from e

    def __repr__(self) -> str:
        return f"JSONFileStore(directory={str(self.directory)!r})"
