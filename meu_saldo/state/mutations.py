"""
State Mutations

Every change to the application state is described by one of these
immutable models and applied through Store.dispatch().

DESIGN DECISION: Mutations are data, not callbacks.
Subscribers (persistence, audit log, reminders) can inspect exactly what
happened without the store knowing they exist.
"""

from datetime import date
from decimal import Decimal
from typing import ClassVar

from pydantic import BaseModel, ConfigDict, Field

from meu_saldo.models.audit import AuditEventType
from meu_saldo.models.records import (
    CATEGORY_MAX_LENGTH,
    NAME_MAX_LENGTH,
    USERNAME_MAX_LENGTH,
    DurationUnit,
    Recurrence,
)


class Mutation(BaseModel):
    """Base class for all state mutations."""

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    event_type: ClassVar[AuditEventType]
    entity_type: ClassVar[str]


# =============================================================================
# INCOME
# =============================================================================

class AddIncome(Mutation):
    event_type: ClassVar[AuditEventType] = AuditEventType.INCOME_ADDED
    entity_type: ClassVar[str] = "income"

    name: str = Field(..., min_length=1, max_length=NAME_MAX_LENGTH)
    category: str = Field(..., min_length=1, max_length=CATEGORY_MAX_LENGTH)
    amount: Decimal = Field(..., gt=0)
    date: date


class EditIncome(Mutation):
    """Replace every field of an income entry, keeping its id."""

    event_type: ClassVar[AuditEventType] = AuditEventType.INCOME_UPDATED
    entity_type: ClassVar[str] = "income"

    income_id: str
    name: str = Field(..., min_length=1, max_length=NAME_MAX_LENGTH)
    category: str = Field(..., min_length=1, max_length=CATEGORY_MAX_LENGTH)
    amount: Decimal = Field(..., gt=0)
    date: date


class DeleteIncome(Mutation):
    event_type: ClassVar[AuditEventType] = AuditEventType.INCOME_DELETED
    entity_type: ClassVar[str] = "income"

    income_id: str


# =============================================================================
# EXPENSES
# =============================================================================

class AddExpense(Mutation):
    """
    Add an expense.

    A MONTHLY recurrence expands into twelve independent entries.
    """

    event_type: ClassVar[AuditEventType] = AuditEventType.EXPENSE_ADDED
    entity_type: ClassVar[str] = "expense"

    name: str = Field(..., min_length=1, max_length=NAME_MAX_LENGTH)
    category: str = Field(..., min_length=1, max_length=CATEGORY_MAX_LENGTH)
    amount: Decimal = Field(..., gt=0)
    due_date: date
    paid: bool = False
    recurrence: Recurrence = Recurrence.ONCE
    alarm_offsets: tuple[int, ...] = ()


class EditExpense(Mutation):
    """Replace every field of one expense entry, keeping its id."""

    event_type: ClassVar[AuditEventType] = AuditEventType.EXPENSE_UPDATED
    entity_type: ClassVar[str] = "expense"

    expense_id: str
    name: str = Field(..., min_length=1, max_length=NAME_MAX_LENGTH)
    category: str = Field(..., min_length=1, max_length=CATEGORY_MAX_LENGTH)
    amount: Decimal = Field(..., gt=0)
    due_date: date
    paid: bool = False
    recurrence: Recurrence = Recurrence.ONCE
    alarm_offsets: tuple[int, ...] = ()


class DeleteExpense(Mutation):
    event_type: ClassVar[AuditEventType] = AuditEventType.EXPENSE_DELETED
    entity_type: ClassVar[str] = "expense"

    expense_id: str


class ToggleExpensePaid(Mutation):
    event_type: ClassVar[AuditEventType] = AuditEventType.EXPENSE_PAYMENT_TOGGLED
    entity_type: ClassVar[str] = "expense"

    expense_id: str


# =============================================================================
# GOALS
# =============================================================================

class AddGoal(Mutation):
    event_type: ClassVar[AuditEventType] = AuditEventType.GOAL_CREATED
    entity_type: ClassVar[str] = "goal"

    name: str = Field(..., min_length=1, max_length=NAME_MAX_LENGTH)
    target_value: Decimal = Field(..., gt=0)
    duration: Decimal = Field(..., gt=0)
    unit: DurationUnit = DurationUnit.MONTHS


class ContributeToGoal(Mutation):
    event_type: ClassVar[AuditEventType] = AuditEventType.GOAL_CONTRIBUTION
    entity_type: ClassVar[str] = "goal"

    goal_id: str
    value: Decimal = Field(..., gt=0)


class DeleteGoal(Mutation):
    event_type: ClassVar[AuditEventType] = AuditEventType.GOAL_DELETED
    entity_type: ClassVar[str] = "goal"

    goal_id: str


# =============================================================================
# PROFILE, COLORS, LIFECYCLE
# =============================================================================

class UpdateUsername(Mutation):
    event_type: ClassVar[AuditEventType] = AuditEventType.USERNAME_UPDATED
    entity_type: ClassVar[str] = "user"

    username: str = Field(..., min_length=1, max_length=USERNAME_MAX_LENGTH)


class CustomColor(BaseModel):
    """A user-picked color for one category."""

    model_config = ConfigDict(frozen=True)

    category: str
    color: str = Field(..., pattern=r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")


class SaveCustomColors(Mutation):
    event_type: ClassVar[AuditEventType] = AuditEventType.COLORS_CUSTOMIZED
    entity_type: ClassVar[str] = "color_cache"

    colors: tuple[CustomColor, ...]


class ResetState(Mutation):
    """Wipe everything: storage keys, in-memory state, reminders."""

    event_type: ClassVar[AuditEventType] = AuditEventType.STATE_RESET
    entity_type: ClassVar[str] = "state"


class MutationResult(BaseModel):
    """
    Outcome of a dispatch.

    applied is False when the mutation targeted an id that does not
    exist; in that case nothing changed and no subscriber was called.
    """

    applied: bool
    message: str = ""
    created_ids: list[str] = Field(default_factory=list)
    affected_ids: list[str] = Field(default_factory=list)
    goal_reached: bool = Field(
        default=False,
        description="A contribution crossed the goal target for the first time"
    )

    @classmethod
    def not_found(cls, entity_id: str) -> 'MutationResult':
        return cls(applied=False, message=f"Registro {entity_id} não encontrado.")
