"""Key-value storage slots for persisted storefront state."""

import json
import logging
import os
from pathlib import Path
from typing import Optional, Protocol

logger = logging.getLogger(__name__)


class KeyValueStorage(Protocol):
    """A string-valued key-value slot store."""

    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...


class MemoryStorage:
    """In-process key-value storage, mostly for tests and ephemeral sessions."""

    def __init__(self, initial: Optional[dict[str, str]] = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)


class FileStorage:
    """Key-value storage backed by a JSON file.

    Every value is a string, like browser local storage. The whole file is
    rewritten on each ``set`` so a write never leaves a partial snapshot.
    """

    def __init__(self, path: Optional[str] = None) -> None:
        """
        Initialize file storage.

        Args:
            path: Path to the storage file (default: ~/.storefront_cart.json)
        """
        if path is None:
            path = str(Path.home() / ".storefront_cart.json")
        self.path = path

    def _read_all(self) -> dict[str, str]:
        """Read every slot; an unreadable file counts as empty."""
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path) as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Could not read storage file {self.path}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Ignoring storage file {self.path}: expected a JSON object")
            return {}
        return data

    def _write_all(self, data: dict[str, str]) -> None:
        tmp_path = f"{self.path}.tmp"
        with open(tmp_path, "w") as f:
            json.dump(data, f, indent=2)
        os.chmod(tmp_path, 0o600)
        os.replace(tmp_path, self.path)

    def get(self, key: str) -> Optional[str]:
        value = self._read_all().get(key)
        if value is not None and not isinstance(value, str):
            # Older files may hold the decoded value instead of a string
            return json.dumps(value)
        return value

    def set(self, key: str, value: str) -> None:
        data = self._read_all()
        data[key] = value
        self._write_all(data)
        logger.debug(f"Saved '{key}' to {self.path}")

    def remove(self, key: str) -> None:
        data = self._read_all()
        if key in data:
            del data[key]
            self._write_all(data)
