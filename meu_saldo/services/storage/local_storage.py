"""
Local Storage Implementations

FileLocalStorage keeps one UTF-8 file per key inside a data directory,
the closest thing a desktop process has to browser local storage.
InMemoryLocalStorage is used by tests; nothing it holds survives the
process.

TRADEOFFS:
- Writes are synchronous and not atomic across keys
- No locking; a single process owns the directory
"""

import re
from pathlib import Path
from typing import Optional

from meu_saldo.config import get_settings
from meu_saldo.services.storage.interface import (
    LocalStorageInterface,
    StorageReadError,
    StorageWriteError,
)


_SAFE_KEY = re.compile(r"[^A-Za-z0-9_.-]")


class FileLocalStorage(LocalStorageInterface):
    """File-backed key-value storage."""

    def __init__(self, data_dir: Optional[Path] = None):
        self._data_dir = Path(data_dir) if data_dir else get_settings().storage.data_path

    def _path_for(self, key: str) -> Path:
        return self._data_dir / f"{_SAFE_KEY.sub('_', key)}.json"

    def get_item(self, key: str) -> Optional[str]:
        path = self._path_for(key)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except OSError as e:
            raise StorageReadError(f"Failed to read {key}: {e}")

    def set_item(self, key: str, value: str) -> None:
        try:
            self._data_dir.mkdir(parents=True, exist_ok=True)
            self._path_for(key).write_text(value, encoding="utf-8")
        except OSError as e:
            raise StorageWriteError(f"Failed to write {key}: {e}")

    def remove_item(self, key: str) -> None:
        try:
            self._path_for(key).unlink(missing_ok=True)
        except OSError as e:
            raise StorageWriteError(f"Failed to remove {key}: {e}")


class InMemoryLocalStorage(LocalStorageInterface):
    """Dictionary-backed storage; contents vanish with the process."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._items: dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._items)
