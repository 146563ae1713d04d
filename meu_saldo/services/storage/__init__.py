"""
Storage Services Package

Provides the abstract local-storage interface and its implementations.
"""

from meu_saldo.services.storage.interface import (
    LocalStorageInterface,
    StorageError,
    StorageReadError,
    StorageWriteError,
)
from meu_saldo.services.storage.local_storage import (
    FileLocalStorage,
    InMemoryLocalStorage,
)

__all__ = [
    # Interface
    "LocalStorageInterface",
    # Exceptions
    "StorageError",
    "StorageReadError",
    "StorageWriteError",
    # Implementations
    "FileLocalStorage",
    "InMemoryLocalStorage",
]
