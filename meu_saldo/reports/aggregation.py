"""
Derived Views

Pure functions that turn the state lists into what the pages display:
month totals, category breakdowns, due-date alarms, calendar dues and goal
progress. Nothing here mutates its inputs or touches storage.

Months are compared by (year, month) of the entry's calendar date; no
timezone is involved.
"""

from datetime import date
from decimal import Decimal
from typing import Callable, Iterable, Sequence

from pydantic import BaseModel, Field

from meu_saldo.colors import hsl_to_hex
from meu_saldo.models.records import ExpenseEntry, Goal, IncomeEntry, Transaction
from meu_saldo.utils.dates import is_same_month


UNCLASSIFIED = "Não Classificado"

ColorResolver = Callable[[str, bool], str]


# =============================================================================
# RESULT MODELS
# =============================================================================

class MonthlyTotals(BaseModel):
    """Summary card of the home page."""

    total_income: Decimal = Decimal("0")
    total_expenses: Decimal = Decimal("0")
    total_paid: Decimal = Decimal("0")

    @property
    def current_balance(self) -> Decimal:
        """Income minus what was actually paid."""
        return self.total_income - self.total_paid

    @property
    def total_pending(self) -> Decimal:
        return self.total_expenses - self.total_paid

    @property
    def is_empty(self) -> bool:
        return self.total_income == 0 and self.total_expenses == 0


class CategorySlice(BaseModel):
    """One slice of a report pie."""

    name: str
    value: Decimal
    fill: str = Field(..., description="Hex color, e.g. #d94a26")


class ReportCategory(BaseModel):
    """A category listed in the color editor."""

    name: str
    is_revenue: bool
    color: str = Field(default="", description="Current hex color")


class DueAlarm(BaseModel):
    """An unpaid expense whose reminder day is today."""

    expense: ExpenseEntry
    days_until_due: int = Field(..., ge=0)


# =============================================================================
# MONTH FILTERS AND TOTALS
# =============================================================================

def income_for_month(entries: Iterable[IncomeEntry], month: date) -> list[IncomeEntry]:
    return [entry for entry in entries if is_same_month(entry.date, month)]


def expenses_for_month(entries: Iterable[ExpenseEntry], month: date) -> list[ExpenseEntry]:
    return [entry for entry in entries if is_same_month(entry.due_date, month)]


def totals_for_month(
    income: Iterable[IncomeEntry],
    expenses: Iterable[ExpenseEntry],
    month: date,
) -> MonthlyTotals:
    """
    Totals of the month containing the given date.

    Example: income 100 + 50, expenses 30 (paid) + 20 (unpaid)
    gives income 150, expenses 50, paid 30, balance 120.
    """
    month_income = income_for_month(income, month)
    month_expenses = expenses_for_month(expenses, month)
    return MonthlyTotals(
        total_income=sum((e.amount for e in month_income), Decimal("0")),
        total_expenses=sum((e.amount for e in month_expenses), Decimal("0")),
        total_paid=sum((e.amount for e in month_expenses if e.paid), Decimal("0")),
    )


# =============================================================================
# CATEGORIES
# =============================================================================

def category_label(category: str) -> str:
    """Blank categories are reported under a fixed sentinel."""
    return category.strip() or UNCLASSIFIED


def category_breakdown(entries: Iterable[Transaction]) -> dict[str, Decimal]:
    """Sum amounts per category, in first-seen order."""
    totals: dict[str, Decimal] = {}
    for entry in entries:
        label = category_label(entry.category)
        totals[label] = totals.get(label, Decimal("0")) + entry.amount
    return totals


def category_report(
    entries: Iterable[Transaction],
    is_revenue: bool,
    color_resolver: ColorResolver,
) -> list[CategorySlice]:
    """Pie slices with the category's display color converted to hex."""
    return [
        CategorySlice(
            name=name,
            value=value,
            fill=hsl_to_hex(color_resolver(name, is_revenue)),
        )
        for name, value in category_breakdown(entries).items()
    ]


def report_categories(
    income: Sequence[IncomeEntry],
    expenses: Sequence[ExpenseEntry],
) -> list[ReportCategory]:
    """
    Every category in use, for the color editor.

    A category counts as revenue only when it appears in income and never
    in expenses.
    """
    expense_labels = list(dict.fromkeys(category_label(e.category) for e in expenses))
    income_labels = list(dict.fromkeys(category_label(e.category) for e in income))
    expense_set = set(expense_labels)
    income_set = set(income_labels)

    return [
        ReportCategory(
            name=name,
            is_revenue=name in income_set and name not in expense_set,
        )
        for name in dict.fromkeys(expense_labels + income_labels)
    ]


# =============================================================================
# DUE DATES AND ALARMS
# =============================================================================

def days_until_due(expense: ExpenseEntry, today: date) -> int:
    """Calendar days from today to the due date (negative when overdue)."""
    return (expense.due_date - today).days


def is_overdue(expense: ExpenseEntry, today: date) -> bool:
    return not expense.paid and expense.due_date < today


def upcoming_alarms(expenses: Iterable[ExpenseEntry], today: date) -> list[DueAlarm]:
    """
    Unpaid expenses whose alarm offsets include today's distance to the due date.

    Overdue expenses never alarm. Sorted by days until due, soonest first.
    """
    alarms = []
    for expense in expenses:
        if expense.paid or not expense.alarm_offsets:
            continue
        days = days_until_due(expense, today)
        if days < 0:
            continue
        if days in expense.alarm_offsets:
            alarms.append(DueAlarm(expense=expense, days_until_due=days))
    return sorted(alarms, key=lambda alarm: alarm.days_until_due)


def unpaid_due_dates(expenses: Iterable[ExpenseEntry]) -> set[date]:
    """Dates to highlight on the calendar."""
    return {expense.due_date for expense in expenses if not expense.paid}


def dues_for_month(expenses: Iterable[ExpenseEntry], month: date) -> list[ExpenseEntry]:
    """Unpaid expenses due in the month, earliest first."""
    return sorted(
        (e for e in expenses_for_month(expenses, month) if not e.paid),
        key=lambda e: e.due_date,
    )


def dues_on_day(expenses: Iterable[ExpenseEntry], day: date) -> list[ExpenseEntry]:
    return [e for e in expenses if e.due_date == day and not e.paid]


# =============================================================================
# GOALS
# =============================================================================

def goal_progress(goal: Goal) -> float:
    """Percentage of the target already saved (0-100)."""
    return goal.progress_percent


def total_goal_commitment(goals: Iterable[Goal]) -> Decimal:
    """Sum of every goal's monthly commitment."""
    return sum((goal.monthly_commitment for goal in goals), Decimal("0"))
