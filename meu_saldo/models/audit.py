"""
Audit Models for Meu Saldo

Every state change and every failure at a system boundary (storage,
notifications, the insight service) produces one structured event.
Events are written to the structured log only; they are not persisted.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we log."""
    # Income
    INCOME_ADDED = "income_added"
    INCOME_UPDATED = "income_updated"
    INCOME_DELETED = "income_deleted"

    # Expenses
    EXPENSE_ADDED = "expense_added"
    EXPENSE_UPDATED = "expense_updated"
    EXPENSE_DELETED = "expense_deleted"
    EXPENSE_PAYMENT_TOGGLED = "expense_payment_toggled"

    # Goals
    GOAL_CREATED = "goal_created"
    GOAL_CONTRIBUTION = "goal_contribution"
    GOAL_REACHED = "goal_reached"
    GOAL_DELETED = "goal_deleted"

    # Profile and presentation
    USERNAME_UPDATED = "username_updated"
    COLORS_CUSTOMIZED = "colors_customized"

    # Lifecycle
    STATE_LOADED = "state_loaded"
    STATE_RESET = "state_reset"
    FORM_REJECTED = "form_rejected"

    # Storage
    STORAGE_READ_FAILED = "storage_read_failed"
    STORAGE_WRITE_FAILED = "storage_write_failed"

    # Reminders
    REMINDER_SCHEDULED = "reminder_scheduled"
    REMINDER_SENT = "reminder_sent"
    NOTIFICATION_PERMISSION_DENIED = "notification_permission_denied"

    # Insight service
    INSIGHT_GENERATED = "insight_generated"
    INSIGHT_FAILED = "insight_failed"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class AuditEvent(BaseModel):
    """A single audit event."""

    event_id: UUID = Field(default_factory=uuid4)
    timestamp: datetime = Field(default_factory=datetime.utcnow)

    event_type: AuditEventType
    severity: AuditSeverity = AuditSeverity.INFO

    # What entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'income', 'expense', 'goal')"
    )
    entity_id: Optional[str] = None

    description: str = Field(..., max_length=500)
    details: dict[str, Any] = Field(default_factory=dict)
    error_message: Optional[str] = None

    is_user_action: bool = False

    def to_log_dict(self) -> dict:
        """Convert to a dictionary suitable for structured logging."""
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.storage_write_failed(key, error)
    """

    @staticmethod
    def mutation_applied(
        event_type: AuditEventType,
        entity_type: str,
        entity_ids: list[str],
        message: str,
        details: Optional[dict] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=event_type,
            entity_type=entity_type,
            entity_id=entity_ids[0] if len(entity_ids) == 1 else None,
            description=message or event_type.value.replace("_", " "),
            details={"entity_ids": entity_ids, **(details or {})},
            is_user_action=True,
        )

    @staticmethod
    def goal_reached(goal_id: str, goal_name: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.GOAL_REACHED,
            entity_type="goal",
            entity_id=goal_id,
            description=f"Goal reached: {goal_name}",
            details={"goal_name": goal_name},
        )

    @staticmethod
    def state_loaded(
        income_count: int,
        expense_count: int,
        goal_count: int,
        warnings: list[str],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STATE_LOADED,
            severity=AuditSeverity.WARNING if warnings else AuditSeverity.INFO,
            entity_type="state",
            description=(
                f"State loaded: {income_count} income, "
                f"{expense_count} expenses, {goal_count} goals"
            ),
            details={"warnings": warnings},
        )

    @staticmethod
    def form_rejected(form: str, issues: list[dict]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.FORM_REJECTED,
            severity=AuditSeverity.DEBUG,
            entity_type="form",
            description=f"{form} form rejected with {len(issues)} issues",
            details={"form": form, "issues": issues},
            is_user_action=True,
        )

    @staticmethod
    def storage_read_failed(key: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORAGE_READ_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="storage",
            description=f"Could not read storage key {key}; using defaults",
            details={"key": key},
            error_message=error_message,
        )

    @staticmethod
    def storage_write_failed(key: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORAGE_WRITE_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="storage",
            description=f"Could not write storage key {key}",
            details={"key": key},
            error_message=error_message,
        )

    @staticmethod
    def reminder_scheduled(
        expense_id: str,
        offset_days: int,
        fire_at: datetime,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.REMINDER_SCHEDULED,
            severity=AuditSeverity.DEBUG,
            entity_type="expense",
            entity_id=expense_id,
            description=f"Reminder scheduled {offset_days} day(s) before due date",
            details={"offset_days": offset_days, "fire_at": fire_at.isoformat()},
        )

    @staticmethod
    def reminder_sent(expense_id: str, title: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.REMINDER_SENT,
            entity_type="expense",
            entity_id=expense_id,
            description=title,
        )

    @staticmethod
    def notification_permission_denied() -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.NOTIFICATION_PERMISSION_DENIED,
            severity=AuditSeverity.WARNING,
            entity_type="notification",
            description="Notification permission denied; reminders disabled",
        )

    @staticmethod
    def insight_generated(flow: str, item_count: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.INSIGHT_GENERATED,
            entity_type="insight",
            description=f"Insight flow {flow} returned {item_count} item(s)",
            details={"flow": flow},
        )

    @staticmethod
    def insight_failed(flow: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.INSIGHT_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="insight",
            description=f"Insight flow {flow} failed",
            details={"flow": flow},
            error_message=error_message,
        )
