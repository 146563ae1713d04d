"""Derived views over the application state."""

from meu_saldo.reports.aggregation import (
    UNCLASSIFIED,
    CategorySlice,
    DueAlarm,
    MonthlyTotals,
    ReportCategory,
    category_breakdown,
    category_label,
    category_report,
    days_until_due,
    dues_for_month,
    dues_on_day,
    expenses_for_month,
    goal_progress,
    income_for_month,
    is_overdue,
    report_categories,
    total_goal_commitment,
    totals_for_month,
    unpaid_due_dates,
    upcoming_alarms,
)

__all__ = [
    "UNCLASSIFIED",
    "CategorySlice",
    "DueAlarm",
    "MonthlyTotals",
    "ReportCategory",
    "category_breakdown",
    "category_label",
    "category_report",
    "days_until_due",
    "dues_for_month",
    "dues_on_day",
    "expenses_for_month",
    "goal_progress",
    "income_for_month",
    "is_overdue",
    "report_categories",
    "total_goal_commitment",
    "totals_for_month",
    "unpaid_due_dates",
    "upcoming_alarms",
]
