# schemaflow/registry/store.py
from __future__ import annotations

import copy
import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional

from schemaflow.utils.io import PathLike, read_json, to_path, write_json


class StoreError(Exception):
    """Durable storage could not be read or written."""


class KeyValueStore(ABC):
    """
    Minimal durable key-value interface the registry persists through.
    Values are plain JSON-compatible data.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[Any]:
        """Stored value for `key`, or None when absent."""

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        """Replace the value stored under `key`."""


class MemoryStore(KeyValueStore):
    """Process-local store; used by tests and throwaway sessions."""

    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        self._data: Dict[str, Any] = copy.deepcopy(initial or {})

    def get(self, key: str) -> Optional[Any]:
        return copy.deepcopy(self._data.get(key))

    def set(self, key: str, value: Any) -> None:
        self._data[key] = copy.deepcopy(value)


class JsonFileStore(KeyValueStore):
    """
    All keys live in one JSON object on disk. Writes go through a temp file
    and an atomic replace, so a crash never leaves a half-written store.
    """

    def __init__(self, path: PathLike):
        self.path: Path = to_path(path)

    def _load(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            data = read_json(self.path)
        except (OSError, json.JSONDecodeError) as e:
            raise StoreError(f"cannot read store {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise StoreError(f"store {self.path} does not hold a JSON object")
        return data

    def get(self, key: str) -> Optional[Any]:
        return self._load().get(key)

    def set(self, key: str, value: Any) -> None:
        data = self._load()
        data[key] = value
        try:
            write_json(self.path, data)
        except (OSError, TypeError) as e:
            raise StoreError(f"cannot write store {self.path}: {e}") from e
