"""
Notification Delivery

A Notifier shows one reminder to the user. Delivery is best-effort: there
is no acknowledgement, no retry and no record of what was shown.
"""

from abc import ABC, abstractmethod

import structlog
from pydantic import BaseModel, Field


logger = structlog.get_logger(__name__)


class NotificationPayload(BaseModel):
    """What the user sees when a reminder fires."""

    title: str
    body: str
    tag: str = Field(
        ...,
        description="expense-{id}; lets the OS replace a duplicate reminder"
    )


class Notifier(ABC):
    """Abstract reminder delivery channel."""

    @abstractmethod
    def request_permission(self) -> bool:
        """
        Ask the platform for permission to notify.

        Returns False when the user (or platform) refused.
        """
        pass

    @abstractmethod
    def send(self, payload: NotificationPayload) -> None:
        pass


class LogNotifier(Notifier):
    """Writes reminders to the structured log; always permitted."""

    def request_permission(self) -> bool:
        return True

    def send(self, payload: NotificationPayload) -> None:
        logger.info(
            "reminder_notification",
            title=payload.title,
            body=payload.body,
            tag=payload.tag,
        )


class CollectingNotifier(Notifier):
    """
    Keeps delivered payloads in memory.

    The Streamlit app drains it on every rerun and shows each payload as a
    toast.
    """

    def __init__(self, permitted: bool = True):
        self._permitted = permitted
        self._outbox: list[NotificationPayload] = []

    def request_permission(self) -> bool:
        return self._permitted

    def send(self, payload: NotificationPayload) -> None:
        self._outbox.append(payload)

    def drain(self) -> list[NotificationPayload]:
        delivered, self._outbox = self._outbox, []
        return delivered
