"""
Notification Services Package

Due-date reminders: delivery channels and the timer registry.
"""

from meu_saldo.services.notifications.notifier import (
    CollectingNotifier,
    LogNotifier,
    NotificationPayload,
    Notifier,
)
from meu_saldo.services.notifications.scheduler import (
    ReminderScheduler,
    build_payload,
)

__all__ = [
    "CollectingNotifier",
    "LogNotifier",
    "NotificationPayload",
    "Notifier",
    "ReminderScheduler",
    "build_payload",
]
