"""
Form Models

Raw user input as it arrives from the UI, before validation.

DESIGN DECISION: Every field is optional here.
A half-filled form is a normal situation, not a parsing error, so these
models never raise for missing values. The EntryValidator decides whether
the form may become a mutation.
"""

import datetime
from datetime import date
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from meu_saldo.models.records import DurationUnit, Recurrence


class FormModel(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)


class IncomeForm(FormModel):
    """Fields of the "Novo ganho" form."""

    name: Optional[str] = None
    category: Optional[str] = None
    amount: Optional[Decimal] = None
    date: Optional[datetime.date] = None


class ExpenseForm(FormModel):
    """Fields of the "Nova despesa" form."""

    name: Optional[str] = None
    category: Optional[str] = None
    amount: Optional[Decimal] = None
    due_date: Optional[date] = None
    paid: bool = False
    recurrence: Recurrence = Recurrence.ONCE
    alarm_offsets: list[int] = Field(default_factory=list)


class GoalForm(FormModel):
    """Fields of the "Nova meta" form."""

    name: Optional[str] = None
    target_value: Optional[Decimal] = None
    duration: Optional[Decimal] = None
    unit: DurationUnit = DurationUnit.MONTHS


class ContributionForm(FormModel):
    """Value typed into a goal card's contribution box."""

    goal_id: str
    value: Optional[Decimal] = None


class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_value')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        default="error",
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )


class ValidationResult(BaseModel):
    """Outcome of validating one form."""

    form: str = Field(
        ...,
        description="Which form was validated (income, expense, goal, contribution)"
    )
    is_valid: bool
    issues: list[ValidationIssue] = Field(default_factory=list)

    @property
    def errors(self) -> list[ValidationIssue]:
        return [issue for issue in self.issues if issue.severity == "error"]
