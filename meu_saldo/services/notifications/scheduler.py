"""
Due-Date Reminder Scheduler

DESIGN DECISION: Reminders are in-process timers, nothing more.
Each expense id owns a list of threading.Timer objects in a registry held
by the scheduler. The registry is never persisted: after a restart it is
empty, and timers come back only if reschedule_all() is called (see the
reschedule_reminders_on_load setting).

A reminder for offset N fires at reminder_hour on (due_date - N days)
and leaves the registry once it has fired.
Times already in the past are skipped, never fired late.

If the notifier refuses permission, the scheduler logs one warning and
every operation becomes a no-op.
"""

import threading
from datetime import datetime, time, timedelta
from typing import TYPE_CHECKING, Callable, Iterable, Optional

import structlog

from meu_saldo.models.audit import AuditEventBuilder
from meu_saldo.models.records import AppState, ExpenseEntry
from meu_saldo.services.notifications.notifier import NotificationPayload, Notifier
from meu_saldo.state.mutations import (
    AddExpense,
    DeleteExpense,
    EditExpense,
    Mutation,
    MutationResult,
    ResetState,
    ToggleExpensePaid,
)
from meu_saldo.utils.formatting import format_currency, format_days_until

if TYPE_CHECKING:
    from meu_saldo.audit.logger import AuditLogger


TimerFactory = Callable[[float, Callable[[], None]], threading.Timer]

logger = structlog.get_logger(__name__)


def build_payload(expense: ExpenseEntry, offset_days: int) -> NotificationPayload:
    """Reminder text for one expense and offset."""
    return NotificationPayload(
        title=f"Reminder: {expense.name}",
        body=(
            f"{format_currency(expense.amount)} vence "
            f"{format_days_until(offset_days)} ({expense.due_date.strftime('%d/%m/%Y')})."
        ),
        tag=f"expense-{expense.id}",
    )


def _daemon_timer(interval: float, function: Callable[[], None]) -> threading.Timer:
    timer = threading.Timer(interval, function)
    timer.daemon = True
    return timer


class ReminderScheduler:
    """
    Registry of pending reminder timers keyed by expense id.

    Usage:
        scheduler = ReminderScheduler(LogNotifier())
        store.subscribe(scheduler)
    """

    def __init__(
        self,
        notifier: Notifier,
        reminder_hour: int = 9,
        clock: Callable[[], datetime] = datetime.now,
        timer_factory: TimerFactory = _daemon_timer,
        audit_logger: Optional['AuditLogger'] = None,
        on_warning: Optional[Callable[[str], None]] = None,
    ):
        self._notifier = notifier
        self._reminder_hour = reminder_hour
        self._clock = clock
        self._timer_factory = timer_factory
        self._audit = audit_logger
        self._on_warning = on_warning
        self._registry: dict[str, list[threading.Timer]] = {}
        self._lock = threading.Lock()
        self._enabled: Optional[bool] = None

    @property
    def enabled(self) -> bool:
        """Ask for permission once; remember the answer."""
        if self._enabled is None:
            self._enabled = self._notifier.request_permission()
            if not self._enabled:
                logger.warning("notification_permission_denied")
                if self._audit:
                    self._audit.log(AuditEventBuilder.notification_permission_denied())
                if self._on_warning:
                    self._on_warning(
                        "Notificações bloqueadas. Os lembretes de vencimento estão desativados."
                    )
        return self._enabled

    def fire_time(self, expense: ExpenseEntry, offset_days: int) -> datetime:
        day = expense.due_date - timedelta(days=offset_days)
        return datetime.combine(day, time(hour=self._reminder_hour))

    def schedule_expense(self, expense: ExpenseEntry) -> int:
        """
        (Re)schedule every reminder of an expense.

        Existing timers for the id are cancelled first. Returns the number
        of timers started.
        """
        self.cancel(expense.id)
        if expense.paid or not expense.alarm_offsets or not self.enabled:
            return 0

        now = self._clock()
        timers = []
        for offset in expense.alarm_offsets:
            fire_at = self.fire_time(expense, offset)
            delay = (fire_at - now).total_seconds()
            if delay < 0:
                continue

            timers.append(self._make_timer(expense.id, delay, build_payload(expense, offset)))

            if self._audit:
                self._audit.log(AuditEventBuilder.reminder_scheduled(
                    expense_id=expense.id,
                    offset_days=offset,
                    fire_at=fire_at,
                ))

        if not timers:
            return 0

        # registered before starting so an immediate fire finds its entry
        with self._lock:
            self._registry[expense.id] = list(timers)
        for timer in timers:
            timer.start()
        return len(timers)

    def _make_timer(
        self,
        expense_id: str,
        delay: float,
        payload: NotificationPayload,
    ) -> threading.Timer:
        def fire() -> None:
            self._fire(expense_id, timer, payload)

        timer = self._timer_factory(delay, fire)
        return timer

    def cancel(self, expense_id: str) -> None:
        with self._lock:
            timers = self._registry.pop(expense_id, [])
        for timer in timers:
            timer.cancel()

    def cancel_all(self) -> None:
        with self._lock:
            registry, self._registry = self._registry, {}
        for timers in registry.values():
            for timer in timers:
                timer.cancel()

    def reschedule_all(self, expenses: Iterable[ExpenseEntry]) -> int:
        """Drop every timer and schedule the given expenses from scratch."""
        self.cancel_all()
        return sum(self.schedule_expense(expense) for expense in expenses)

    def pending_count(self, expense_id: Optional[str] = None) -> int:
        with self._lock:
            if expense_id is not None:
                return len(self._registry.get(expense_id, []))
            return sum(len(timers) for timers in self._registry.values())

    def _fire(
        self,
        expense_id: str,
        timer: threading.Timer,
        payload: NotificationPayload,
    ) -> None:
        with self._lock:
            timers = self._registry.get(expense_id)
            if timers is None or timer not in timers:
                # cancelled or replaced in the meantime
                return
            timers.remove(timer)
            if not timers:
                del self._registry[expense_id]

        try:
            self._notifier.send(payload)
        except Exception as e:
            logger.error("reminder_send_failed", expense_id=expense_id, error=str(e))
            return
        if self._audit:
            self._audit.log(AuditEventBuilder.reminder_sent(expense_id, payload.title))

    def __call__(self, state: AppState, mutation: Mutation, result: MutationResult) -> None:
        """Store listener keeping timers in line with the expense list."""
        if isinstance(mutation, ResetState):
            self.cancel_all()
        elif isinstance(mutation, DeleteExpense):
            self.cancel(mutation.expense_id)
        elif isinstance(mutation, (AddExpense, EditExpense, ToggleExpensePaid)):
            for expense_id in result.affected_ids:
                expense = state.find_expense(expense_id)
                if expense is None:
                    self.cancel(expense_id)
                else:
                    self.schedule_expense(expense)
