"""
Main Orchestrator for Meu Saldo

This module ties together all the components and defines the flows the
pages call:
1. Form submission (form → validate → mutation → store → subscribers)
2. Derived views (month summary, reports, alarms)
3. Insight requests (state snapshot → insight flow)
4. Lifecycle (load on start, reset, backup export)

DESIGN DECISION: The orchestrator enforces the boundaries:
- No mutation is dispatched from an invalid form
- Every applied mutation is persisted and audited by store subscribers
- Storage and notification problems become warnings, never exceptions

This is the "glue"; the Streamlit pages only talk to FinanceApp.
"""

from datetime import date
from typing import Optional

import structlog

from meu_saldo.agents import InsightFlow, build_spending_request
from meu_saldo.audit import AuditLogger
from meu_saldo.config import get_settings
from meu_saldo.colors import hsl_to_hex
from meu_saldo.models.forms import (
    ContributionForm,
    ExpenseForm,
    GoalForm,
    IncomeForm,
    ValidationResult,
)
from meu_saldo.models.insight import InsightResult, SpendingAnalysisRequest
from meu_saldo.models.records import AppState
from meu_saldo.reports import (
    CategorySlice,
    DueAlarm,
    MonthlyTotals,
    ReportCategory,
    category_report,
    expenses_for_month,
    income_for_month,
    report_categories,
    totals_for_month,
    upcoming_alarms,
)
from meu_saldo.services.notifications import LogNotifier, Notifier, ReminderScheduler
from meu_saldo.services.storage import FileLocalStorage, LocalStorageInterface
from meu_saldo.state import (
    AddExpense,
    AddGoal,
    AddIncome,
    ContributeToGoal,
    CustomColor,
    DeleteExpense,
    DeleteGoal,
    DeleteIncome,
    EditExpense,
    EditIncome,
    MutationResult,
    ResetState,
    SaveCustomColors,
    StatePersister,
    Store,
    ToggleExpensePaid,
    UpdateUsername,
    backup_filename,
    export_backup,
    load_state,
)
from meu_saldo.utils.dates import today as current_date
from meu_saldo.validation import EntryValidator


logger = structlog.get_logger(__name__)


class FinanceApp:
    """
    Facade over the store, its subscribers and the insight flow.

    Submit methods return the MutationResult, or None when the form was
    declined (the page simply stays as it was).
    """

    def __init__(
        self,
        store: Store,
        insight_flow: InsightFlow,
        audit_logger: AuditLogger,
        validator: Optional[EntryValidator] = None,
        essential_categories: Optional[list[str]] = None,
    ):
        self._store = store
        self._insight_flow = insight_flow
        self._audit = audit_logger
        self._validator = validator or EntryValidator()
        self._essential_categories = (
            essential_categories
            if essential_categories is not None
            else get_settings().app.essential_categories_list
        )
        self._warnings: list[str] = []
        self.scheduler: Optional[ReminderScheduler] = None

    # -------------------------------------------------------------------------
    # State access
    # -------------------------------------------------------------------------

    @property
    def store(self) -> Store:
        return self._store

    @property
    def state(self) -> AppState:
        return self._store.get_state()

    def add_warning(self, message: str) -> None:
        if message not in self._warnings:
            self._warnings.append(message)

    def drain_warnings(self) -> list[str]:
        """Warnings collected since the last call (shown once by the UI)."""
        warnings, self._warnings = self._warnings, []
        return warnings

    # -------------------------------------------------------------------------
    # Form submission
    # -------------------------------------------------------------------------

    def _decline(self, result: ValidationResult) -> None:
        self._audit.log_form_rejected(
            result.form,
            [issue.model_dump() for issue in result.issues],
        )

    def submit_income(
        self,
        form: IncomeForm,
        income_id: Optional[str] = None,
    ) -> Optional[MutationResult]:
        """Add an income entry, or replace one when income_id is given."""
        validation = self._validator.validate_income_form(form)
        if not validation.is_valid:
            self._decline(validation)
            return None

        if income_id is None:
            mutation = AddIncome(
                name=form.name,
                category=form.category,
                amount=form.amount,
                date=form.date,
            )
        else:
            mutation = EditIncome(
                income_id=income_id,
                name=form.name,
                category=form.category,
                amount=form.amount,
                date=form.date,
            )
        return self._store.dispatch(mutation)

    def submit_expense(
        self,
        form: ExpenseForm,
        expense_id: Optional[str] = None,
    ) -> Optional[MutationResult]:
        """
        Add an expense, or replace one when expense_id is given.

        Editing never expands a monthly expense again; it changes only the
        selected instance.
        """
        validation = self._validator.validate_expense_form(form)
        if not validation.is_valid:
            self._decline(validation)
            return None

        fields = dict(
            name=form.name,
            category=form.category,
            amount=form.amount,
            due_date=form.due_date,
            paid=form.paid,
            recurrence=form.recurrence,
            alarm_offsets=tuple(form.alarm_offsets),
        )
        if expense_id is None:
            return self._store.dispatch(AddExpense(**fields))
        return self._store.dispatch(EditExpense(expense_id=expense_id, **fields))

    def submit_goal(self, form: GoalForm) -> Optional[MutationResult]:
        validation = self._validator.validate_goal_form(form)
        if not validation.is_valid:
            self._decline(validation)
            return None

        return self._store.dispatch(AddGoal(
            name=form.name,
            target_value=form.target_value,
            duration=form.duration,
            unit=form.unit,
        ))

    def contribute(self, form: ContributionForm) -> Optional[MutationResult]:
        validation = self._validator.validate_contribution_form(form)
        if not validation.is_valid:
            self._decline(validation)
            return None

        return self._store.dispatch(ContributeToGoal(goal_id=form.goal_id, value=form.value))

    def delete_income(self, income_id: str) -> MutationResult:
        return self._store.dispatch(DeleteIncome(income_id=income_id))

    def delete_expense(self, expense_id: str) -> MutationResult:
        return self._store.dispatch(DeleteExpense(expense_id=expense_id))

    def toggle_paid(self, expense_id: str) -> MutationResult:
        return self._store.dispatch(ToggleExpensePaid(expense_id=expense_id))

    def delete_goal(self, goal_id: str) -> MutationResult:
        return self._store.dispatch(DeleteGoal(goal_id=goal_id))

    def update_username(self, username: str) -> Optional[MutationResult]:
        validation = self._validator.validate_username(username)
        if not validation.is_valid:
            self._decline(validation)
            return None

        return self._store.dispatch(UpdateUsername(username=username.strip()))

    def save_custom_colors(self, colors: list[tuple[str, str]]) -> MutationResult:
        """Persist user-picked colors given as (category, "#rrggbb") pairs."""
        return self._store.dispatch(SaveCustomColors(
            colors=tuple(CustomColor(category=c, color=hex_color) for c, hex_color in colors)
        ))

    def reset(self) -> MutationResult:
        """Erase everything: storage keys, state and pending reminders."""
        return self._store.dispatch(ResetState())

    # -------------------------------------------------------------------------
    # Derived views
    # -------------------------------------------------------------------------

    def month_summary(self, month: date) -> MonthlyTotals:
        state = self.state
        return totals_for_month(state.income_list, state.expense_list, month)

    def alarms(self, today: Optional[date] = None) -> list[DueAlarm]:
        return upcoming_alarms(self.state.expense_list, today or current_date())

    def month_report(self, month: date) -> tuple[list[CategorySlice], list[CategorySlice]]:
        """(revenue slices, expense slices) for the report pies."""
        state = self.state
        revenue = category_report(
            income_for_month(state.income_list, month),
            True,
            self._store.color_for,
        )
        expense = category_report(
            expenses_for_month(state.expense_list, month),
            False,
            self._store.color_for,
        )
        return revenue, expense

    def color_editor_categories(self) -> list[ReportCategory]:
        state = self.state
        categories = report_categories(state.income_list, state.expense_list)
        for category in categories:
            category.color = hsl_to_hex(self._store.color_for(category.name, category.is_revenue))
        return categories

    # -------------------------------------------------------------------------
    # Insights and backup
    # -------------------------------------------------------------------------

    def spending_request(self) -> Optional[SpendingAnalysisRequest]:
        return build_spending_request(self.state, self._essential_categories)

    async def analyze_spending(
        self,
        request: Optional[SpendingAnalysisRequest] = None,
    ) -> Optional[InsightResult]:
        """
        Run the spending analysis on the current state.

        Returns None when there is no data to analyze.
        """
        request = request or self.spending_request()
        if request is None:
            return None
        return await self._insight_flow.analyze(request)

    async def generate_insights(self, today: Optional[date] = None) -> InsightResult:
        return await self._insight_flow.insights(self.state, today)

    def export(self, today: Optional[date] = None) -> tuple[str, str]:
        """(filename, JSON content) of a full backup."""
        return backup_filename(today or current_date()), export_backup(self.state)


def create_app_components(
    storage: Optional[LocalStorageInterface] = None,
    notifier: Optional[Notifier] = None,
    insight_flow: Optional[InsightFlow] = None,
) -> FinanceApp:
    """
    Factory function to create all application components.

    Args:
        storage: Storage backend. Defaults to files under the configured
                 data directory.
        notifier: Reminder delivery channel. Defaults to the log.
        insight_flow: Insight boundary. Defaults to the Gemini agent.

    Returns:
        A FinanceApp with state loaded and subscribers attached.
    """
    settings = get_settings()
    storage_settings = settings.storage
    app_settings = settings.app

    storage = storage or FileLocalStorage(storage_settings.data_path)
    audit_logger = AuditLogger()

    loaded = load_state(
        storage,
        data_key=storage_settings.data_key,
        color_key=storage_settings.color_key,
        default_username=app_settings.default_username,
        audit_logger=audit_logger,
    )

    store = Store(initial_state=loaded.state, default_username=app_settings.default_username)
    app = FinanceApp(
        store=store,
        insight_flow=insight_flow or InsightFlow(audit_logger=audit_logger),
        audit_logger=audit_logger,
        essential_categories=app_settings.essential_categories_list,
    )
    for warning in loaded.warnings:
        app.add_warning(warning)

    persister = StatePersister(
        storage,
        data_key=storage_settings.data_key,
        color_key=storage_settings.color_key,
        on_warning=app.add_warning,
        audit_logger=audit_logger,
    )
    scheduler = ReminderScheduler(
        notifier or LogNotifier(),
        reminder_hour=app_settings.reminder_hour,
        audit_logger=audit_logger,
        on_warning=app.add_warning,
    )
    app.scheduler = scheduler

    store.subscribe(persister)
    store.subscribe(audit_logger)
    store.subscribe(scheduler)

    if app_settings.reschedule_reminders_on_load:
        scheduled = scheduler.reschedule_all(loaded.state.expense_list)
        logger.info("reminders_rescheduled", count=scheduled)

    return app
