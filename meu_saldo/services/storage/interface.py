"""
Abstract Storage Interface

DESIGN DECISION: State is persisted to a string key-value store with the
semantics of browser local storage. This allows us to:
1. Keep the same two-key layout as the browser version
2. Use in-memory storage for testing
3. Swap the file backend for something else without touching the store

The interface is intentionally tiny: get, set, remove. No transactions,
no versioning, no partial updates.
"""

from abc import ABC, abstractmethod
from typing import Optional


class LocalStorageInterface(ABC):
    """
    Abstract interface for local key-value storage.

    Values are always strings (JSON documents in practice).
    """

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        """
        Read the value stored under a key.

        Returns:
            The stored string, or None when the key is absent

        Raises:
            StorageReadError: If the backend cannot be read
        """
        pass

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """
        Store a value, replacing any previous one.

        Raises:
            StorageWriteError: If the value could not be written
        """
        pass

    @abstractmethod
    def remove_item(self, key: str) -> None:
        """
        Remove a key. Removing a missing key is not an error.

        Raises:
            StorageWriteError: If the key could not be removed
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class StorageReadError(StorageError):
    """The backend could not be read."""
    pass


class StorageWriteError(StorageError):
    """The backend rejected a write (disk full, permissions...)."""
    pass
