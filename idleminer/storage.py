from __future__ import annotations

import logging
import os
import re
from abc import ABC, abstractmethod
from pathlib import Path

logger = logging.getLogger(__name__)

_KEY_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")


def default_save_dir() -> Path:
    """``$IDLEMINER_HOME`` if set, else ``~/.idleminer``."""
    env = os.getenv("IDLEMINER_HOME", "").strip()
    if env:
        return Path(env).expanduser()
    return Path.home() / ".idleminer"


class KeyValueStore(ABC):
    """Durable string storage addressed by key."""

    @abstractmethod
    def get(self, key: str) -> str | None: ...

    @abstractmethod
    def set(self, key: str, value: str) -> None: ...

    @abstractmethod
    def delete(self, key: str) -> None: ...


class MemoryStore(KeyValueStore):
    """Process-local store; contents vanish with the process."""

    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)


class FileStore(KeyValueStore):
    """One ``<key>.json`` file per key inside a directory.

    Writes go to a temporary sibling first and are renamed into place.
    """

    def __init__(self, directory: str | Path) -> None:
        self.directory = Path(directory)

    def path_for(self, key: str) -> Path:
        if not _KEY_PATTERN.match(key):
            raise ValueError(f"Invalid storage key: {key!r}")
        return self.directory / f"{key}.json"

    def get(self, key: str) -> str | None:
        path = self.path_for(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None

    def set(self, key: str, value: str) -> None:
        path = self.path_for(key)
        self.directory.mkdir(parents=True, exist_ok=True)
        tmp = path.with_suffix(".json.tmp")
        tmp.write_text(value, encoding="utf-8")
        os.replace(tmp, path)
        logger.debug("Wrote %d bytes to %s", len(value), path)

    def delete(self, key: str) -> None:
        self.path_for(key).unlink(missing_ok=True)
