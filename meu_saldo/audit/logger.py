"""
Audit Logger

DESIGN DECISION: Every applied mutation is logged as a structured event.
This provides:
1. Traceability of what the user changed
2. Debugging capability for storage and reminder problems

The audit logger:
- Subscribes to the Store like any other listener
- Gracefully handles failures (doesn't crash the app if logging fails)
- Writes to the structured log only; events are not persisted
"""

import logging
from typing import TYPE_CHECKING

import structlog

from meu_saldo.config import get_settings
from meu_saldo.models.audit import AuditEvent, AuditEventBuilder

if TYPE_CHECKING:
    from meu_saldo.models.records import AppState
    from meu_saldo.state.mutations import Mutation, MutationResult


logging.basicConfig(
    format="%(message)s",
    level=getattr(logging, get_settings().app.log_level, logging.INFO),
)

# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer(ensure_ascii=False)
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class AuditLogger:
    """
    Central audit logging service.

    Usage:
        audit = AuditLogger()
        store.subscribe(audit)
        audit.log(AuditEventBuilder.notification_permission_denied())
    """

    def __init__(self):
        self._logger = structlog.get_logger("meu_saldo.audit")

    def log(self, event: AuditEvent) -> None:
        """Log an audit event at the level matching its severity."""
        log_dict = event.to_log_dict()

        try:
            if event.severity.value == "error":
                self._logger.error("audit_event", **log_dict)
            elif event.severity.value == "warning":
                self._logger.warning("audit_event", **log_dict)
            elif event.severity.value == "debug":
                self._logger.debug("audit_event", **log_dict)
            else:
                self._logger.info("audit_event", **log_dict)
        except Exception as e:
            # Logging must never break a user action
            self._logger.error(
                "audit_log_failed",
                error=str(e),
                event_id=str(event.event_id),
            )

    def __call__(
        self,
        state: 'AppState',
        mutation: 'Mutation',
        result: 'MutationResult',
    ) -> None:
        """Store listener: one event per applied mutation."""
        self.log(AuditEventBuilder.mutation_applied(
            event_type=mutation.event_type,
            entity_type=mutation.entity_type,
            entity_ids=result.affected_ids,
            message=result.message,
        ))

        if result.goal_reached:
            goal = state.find_goal(result.affected_ids[0])
            self.log(AuditEventBuilder.goal_reached(
                goal_id=result.affected_ids[0],
                goal_name=goal.name if goal else "",
            ))

    def log_form_rejected(self, form: str, issues: list[dict]) -> None:
        self.log(AuditEventBuilder.form_rejected(form=form, issues=issues))

    def log_insight_generated(self, flow: str, item_count: int) -> None:
        self.log(AuditEventBuilder.insight_generated(flow=flow, item_count=item_count))

    def log_insight_failed(self, flow: str, error_message: str) -> None:
        self.log(AuditEventBuilder.insight_failed(flow=flow, error_message=error_message))
