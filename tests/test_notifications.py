"""Tests for due-date reminders."""

from datetime import date, datetime
from decimal import Decimal

import pytest

from conftest import make_expense
from meu_saldo.models import Recurrence
from meu_saldo.services.notifications import (
    CollectingNotifier,
    ReminderScheduler,
    build_payload,
)
from meu_saldo.state import (
    AddExpense,
    DeleteExpense,
    EditExpense,
    ResetState,
    ToggleExpensePaid,
)


NOW = datetime(2025, 1, 10, 8, 0)


class FakeTimer:
    """Records its delay instead of sleeping."""

    def __init__(self, delay, function):
        self.delay = delay
        self.function = function
        self.started = False
        self.cancelled = False

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True


class ImmediateTimer:
    """Runs its function as soon as it is started."""

    def __init__(self, function):
        self.function = function

    def start(self):
        self.function()

    def cancel(self):
        pass


class TimerRecorder:
    def __init__(self):
        self.timers = []

    def __call__(self, delay, function):
        timer = FakeTimer(delay, function)
        self.timers.append(timer)
        return timer


@pytest.fixture
def timers():
    return TimerRecorder()


@pytest.fixture
def notifier():
    return CollectingNotifier()


@pytest.fixture
def scheduler(notifier, timers):
    return ReminderScheduler(notifier, reminder_hour=9, clock=lambda: NOW, timer_factory=timers)


class TestBuildPayload:
    """Tests for the reminder text."""

    def test_payload_fields(self):
        expense = make_expense(entry_id="42", amount="1234.5", due=date(2025, 1, 15), name="Aluguel")
        payload = build_payload(expense, 3)
        assert payload.title == "Reminder: Aluguel"
        assert payload.tag == "expense-42"
        assert payload.body == "R$ 1.234,50 vence em 3 dia(s) (15/01/2025)."

    def test_due_today(self):
        payload = build_payload(make_expense(due=date(2025, 1, 15)), 0)
        assert "vence hoje" in payload.body


class TestScheduleExpense:
    """Tests for timer scheduling."""

    def test_past_offsets_are_skipped(self, scheduler, timers):
        """Due on the 15th, now the 10th at 08:00: the 7-day reminder is gone."""
        expense = make_expense(due=date(2025, 1, 15), offsets=[0, 3, 7])
        assert scheduler.schedule_expense(expense) == 2
        assert sorted(t.delay for t in timers.timers) == [
            (datetime(2025, 1, 12, 9) - NOW).total_seconds(),
            (datetime(2025, 1, 15, 9) - NOW).total_seconds(),
        ]
        assert all(t.started for t in timers.timers)
        assert scheduler.pending_count("e1") == 2

    def test_same_day_reminder_later_today(self, scheduler):
        """08:00 is before the reminder hour, so today's reminder still counts."""
        expense = make_expense(due=date(2025, 1, 10), offsets=[0])
        assert scheduler.schedule_expense(expense) == 1

    def test_paid_expense_has_no_timers(self, scheduler):
        assert scheduler.schedule_expense(make_expense(paid=True, offsets=[0])) == 0

    def test_no_offsets_no_timers(self, scheduler):
        assert scheduler.schedule_expense(make_expense()) == 0

    def test_reschedule_cancels_previous(self, scheduler, timers):
        expense = make_expense(due=date(2025, 1, 15), offsets=[0])
        scheduler.schedule_expense(expense)
        scheduler.schedule_expense(expense)
        assert timers.timers[0].cancelled is True
        assert scheduler.pending_count() == 1

    def test_firing_sends_payload(self, scheduler, notifier, timers):
        scheduler.schedule_expense(make_expense(due=date(2025, 1, 15), offsets=[0]))
        timers.timers[0].function()
        delivered = notifier.drain()
        assert [p.tag for p in delivered] == ["expense-e1"]
        assert notifier.drain() == []

    def test_fired_timer_leaves_registry(self, scheduler, timers):
        """Only reminders still waiting to fire are counted as pending."""
        scheduler.schedule_expense(make_expense(due=date(2025, 1, 15), offsets=[0, 3]))
        assert scheduler.pending_count("e1") == 2
        timers.timers[0].function()
        assert scheduler.pending_count("e1") == 1
        timers.timers[1].function()
        assert scheduler.pending_count("e1") == 0
        assert scheduler.pending_count() == 0

    def test_timers_registered_before_start(self, notifier):
        """A timer that fires as soon as it starts is still delivered and removed."""
        scheduler = ReminderScheduler(
            notifier,
            clock=lambda: NOW,
            timer_factory=lambda delay, function: ImmediateTimer(function),
        )
        assert scheduler.schedule_expense(make_expense(due=date(2025, 1, 15), offsets=[0])) == 1
        assert [p.tag for p in notifier.drain()] == ["expense-e1"]
        assert scheduler.pending_count() == 0

    def test_replaced_timer_does_not_send(self, scheduler, notifier, timers):
        expense = make_expense(due=date(2025, 1, 15), offsets=[0])
        scheduler.schedule_expense(expense)
        scheduler.schedule_expense(expense)
        timers.timers[0].function()
        assert notifier.drain() == []
        assert scheduler.pending_count("e1") == 1

    def test_reschedule_all(self, scheduler):
        expenses = [
            make_expense("a", due=date(2025, 1, 15), offsets=[0, 1]),
            make_expense("b", due=date(2025, 1, 20), offsets=[0]),
            make_expense("c", due=date(2025, 1, 1), offsets=[0]),
        ]
        assert scheduler.reschedule_all(expenses) == 3
        assert scheduler.pending_count("c") == 0

    def test_cancel_all(self, scheduler, timers):
        scheduler.schedule_expense(make_expense("a", due=date(2025, 1, 15), offsets=[0]))
        scheduler.schedule_expense(make_expense("b", due=date(2025, 1, 16), offsets=[0]))
        scheduler.cancel_all()
        assert scheduler.pending_count() == 0
        assert all(t.cancelled for t in timers.timers)


class TestPermission:
    """Tests for a notifier that refuses permission."""

    def test_denied_permission_warns_once(self, timers):
        warnings = []
        scheduler = ReminderScheduler(
            CollectingNotifier(permitted=False),
            clock=lambda: NOW,
            timer_factory=timers,
            on_warning=warnings.append,
        )
        expense = make_expense(due=date(2025, 1, 15), offsets=[0])
        assert scheduler.schedule_expense(expense) == 0
        assert scheduler.schedule_expense(expense) == 0
        assert timers.timers == []
        assert warnings == ["Notificações bloqueadas. Os lembretes de vencimento estão desativados."]
        assert scheduler.enabled is False


class TestStoreListener:
    """Tests for the scheduler reacting to store mutations."""

    @pytest.fixture
    def wired(self, store, scheduler):
        store.subscribe(scheduler)
        return store

    def test_monthly_expense_schedules_every_instance(self, wired, scheduler):
        wired.dispatch(AddExpense(
            name="Aluguel", category="Moradia", amount=Decimal("1200"),
            due_date=date(2025, 1, 15), recurrence=Recurrence.MONTHLY, alarm_offsets=(0,),
        ))
        assert scheduler.pending_count() == 12

    def test_delete_cancels(self, wired, scheduler):
        ids = wired.dispatch(AddExpense(
            name="Aluguel", category="Moradia", amount=Decimal("1200"),
            due_date=date(2025, 1, 15), recurrence=Recurrence.MONTHLY, alarm_offsets=(0,),
        )).created_ids
        wired.dispatch(DeleteExpense(expense_id=ids[0]))
        assert scheduler.pending_count() == 11
        assert scheduler.pending_count(ids[0]) == 0

    def test_toggle_paid_cancels_and_unpaid_restores(self, wired, scheduler):
        expense_id = wired.dispatch(AddExpense(
            name="Luz", category="Contas", amount=Decimal("80"),
            due_date=date(2025, 1, 20), alarm_offsets=(0, 1),
        )).created_ids[0]
        assert scheduler.pending_count(expense_id) == 2
        wired.dispatch(ToggleExpensePaid(expense_id=expense_id))
        assert scheduler.pending_count(expense_id) == 0
        wired.dispatch(ToggleExpensePaid(expense_id=expense_id))
        assert scheduler.pending_count(expense_id) == 2

    def test_edit_reschedules(self, wired, scheduler):
        expense_id = wired.dispatch(AddExpense(
            name="Luz", category="Contas", amount=Decimal("80"),
            due_date=date(2025, 1, 20), alarm_offsets=(0,),
        )).created_ids[0]
        wired.dispatch(EditExpense(
            expense_id=expense_id, name="Luz", category="Contas", amount=Decimal("80"),
            due_date=date(2025, 1, 20), alarm_offsets=(0, 1, 2),
        ))
        assert scheduler.pending_count(expense_id) == 3

    def test_reset_clears_registry(self, wired, scheduler):
        wired.dispatch(AddExpense(
            name="Luz", category="Contas", amount=Decimal("80"),
            due_date=date(2025, 1, 20), alarm_offsets=(0,),
        ))
        wired.dispatch(ResetState())
        assert scheduler.pending_count() == 0
