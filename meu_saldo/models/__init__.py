"""
Data Models Package

This package contains all Pydantic models used in Meu Saldo.
All data flowing through the system must conform to these schemas.
"""

from meu_saldo.models.records import (
    DEFAULT_USERNAME,
    AppState,
    ColorCache,
    ColorCacheEntry,
    DurationUnit,
    ExpenseEntry,
    Goal,
    IncomeEntry,
    Recurrence,
    Transaction,
    UserProfile,
    months_in_plan,
)
from meu_saldo.models.insight import (
    GENERIC_FAILURE_MESSAGE,
    FinancialInsights,
    InsightResult,
    SpendingAnalysis,
    SpendingAnalysisRequest,
    SpendingLimits,
    split_advice,
)
from meu_saldo.models.forms import (
    ContributionForm,
    ExpenseForm,
    GoalForm,
    IncomeForm,
    ValidationIssue,
    ValidationResult,
)
from meu_saldo.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Records
    "DEFAULT_USERNAME",
    "AppState",
    "ColorCache",
    "ColorCacheEntry",
    "DurationUnit",
    "ExpenseEntry",
    "Goal",
    "IncomeEntry",
    "Recurrence",
    "Transaction",
    "UserProfile",
    "months_in_plan",
    # Insight models
    "GENERIC_FAILURE_MESSAGE",
    "FinancialInsights",
    "InsightResult",
    "SpendingAnalysis",
    "SpendingAnalysisRequest",
    "SpendingLimits",
    "split_advice",
    # Forms
    "ContributionForm",
    "ExpenseForm",
    "GoalForm",
    "IncomeForm",
    "ValidationIssue",
    "ValidationResult",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
