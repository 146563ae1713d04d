"""
External Services Package

Contains the boundaries to the outside world:
- Local key-value storage (browser-style localStorage on disk)
- Due-date reminder notifications
"""

from meu_saldo.services.storage import (
    FileLocalStorage,
    InMemoryLocalStorage,
    LocalStorageInterface,
    StorageError,
    StorageReadError,
    StorageWriteError,
)
from meu_saldo.services.notifications import (
    CollectingNotifier,
    LogNotifier,
    NotificationPayload,
    Notifier,
    ReminderScheduler,
)

__all__ = [
    # Storage
    "FileLocalStorage",
    "InMemoryLocalStorage",
    "LocalStorageInterface",
    "StorageError",
    "StorageReadError",
    "StorageWriteError",
    # Notifications
    "CollectingNotifier",
    "LogNotifier",
    "NotificationPayload",
    "Notifier",
    "ReminderScheduler",
]
