from abc import ABC, abstractmethod
import copy
import json
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Optional

from partsflow.core.exceptions import StoreError
from partsflow.utils.logger import get_logger

logger = get_logger(__name__)

class Repository(ABC):
    """
    Key-value persistence for the three record collections and scalar flags.

    Each key holds one JSON document, the way the browser build kept one
    localStorage entry per key.
    """

    @abstractmethod
    def load(self, name: str) -> List[Dict[str, Any]]:
        """Return the records stored under ``name`` (empty when absent)."""
        pass

    @abstractmethod
    def save(self, name: str, records: List[Dict[str, Any]]) -> None:
        """Replace the records stored under ``name``."""
        pass

    @abstractmethod
    def get_flag(self, name: str) -> Optional[str]:
        """Return a scalar string value, or None when absent."""
        pass

    @abstractmethod
    def set_flag(self, name: str, value: str) -> None:
        pass

    @abstractmethod
    def remove(self, name: str) -> None:
        """Delete a key; missing keys are ignored."""
        pass


class InMemoryRepository(Repository):
    """Dict-backed repository, mainly for tests."""

    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        self._data: Dict[str, Any] = copy.deepcopy(initial) if initial else {}

    def load(self, name: str) -> List[Dict[str, Any]]:
        return copy.deepcopy(self._data.get(name, []))

    def save(self, name: str, records: List[Dict[str, Any]]) -> None:
        self._data[name] = copy.deepcopy(records)

    def get_flag(self, name: str) -> Optional[str]:
        value = self._data.get(name)
        return None if value is None else str(value)

    def set_flag(self, name: str, value: str) -> None:
        self._data[name] = value

    def remove(self, name: str) -> None:
        self._data.pop(name, None)


class JsonFileRepository(Repository):
    """Stores each key as ``<data_dir>/<key>.json``."""

    def __init__(self, data_dir: str):
        self.data_dir = Path(data_dir)
        self.data_dir.mkdir(parents=True, exist_ok=True)

    def _path(self, name: str) -> Path:
        return self.data_dir / f"{name}.json"

    def _read(self, name: str) -> Any:
        path = self._path(name)
        if not path.exists():
            return None
        try:
            with open(path, 'r', encoding='utf-8') as f:
                return json.load(f)
        except json.JSONDecodeError as e:
            logger.error(f"❌ Corrupt store document {path}: {e}")
            raise StoreError(f"Stored '{name}' is not valid JSON: {e}") from e
        except OSError as e:
            raise StoreError(f"Cannot read '{name}' from {path}: {e}") from e

    def _write(self, name: str, value: Any) -> None:
        path = self._path(name)
        # Write to a sibling temp file, then swap it in
        fd, tmp_name = tempfile.mkstemp(dir=self.data_dir, prefix=f".{name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                json.dump(value, f, indent=2)
            os.replace(tmp_name, path)
        except OSError as e:
            Path(tmp_name).unlink(missing_ok=True)
            raise StoreError(f"Cannot write '{name}' to {path}: {e}") from e
        logger.debug(f"Saved {name} to {path}")

    def load(self, name: str) -> List[Dict[str, Any]]:
        value = self._read(name)
        if value is None:
            return []
        if not isinstance(value, list):
            raise StoreError(f"Stored '{name}' is not a list of records")
        return value

    def save(self, name: str, records: List[Dict[str, Any]]) -> None:
        self._write(name, records)

    def get_flag(self, name: str) -> Optional[str]:
        value = self._read(name)
        if value is None:
            return None
        if isinstance(value, bool):
            return "true" if value else "false"
        return str(value)

    def set_flag(self, name: str, value: str) -> None:
        self._write(name, value)

    def remove(self, name: str) -> None:
        self._path(name).unlink(missing_ok=True)
