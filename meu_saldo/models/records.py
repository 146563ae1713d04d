"""
Core Domain Records for Meu Saldo

These models define the entities owned by the application state:
income entries, expense entries, savings goals, the user profile and the
category color cache.

DESIGN DECISION: We use Pydantic v2 models with camelCase aliases.
Python code reads snake_case attributes while the persisted JSON uses their
camelCase names (isRevenue, dueDate, targetValue...).
Amounts are Decimal in memory and plain JSON numbers on disk.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Annotated, Any, Literal

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PlainSerializer,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel


DEFAULT_USERNAME = "Usuário"

# Fixed conversion constants used to normalize a goal duration to months
DAYS_PER_MONTH = Decimal("30.44")
WEEKS_PER_MONTH = Decimal("4.345")
MONTHS_PER_YEAR = Decimal("12")

# Number of entries a monthly expense expands into
MONTHLY_EXPANSION_COUNT = 12

# Text limits shared by the records, the mutations and the form validator
NAME_MAX_LENGTH = 200
CATEGORY_MAX_LENGTH = 100
USERNAME_MAX_LENGTH = 100


Amount = Annotated[
    Decimal,
    PlainSerializer(float, return_type=float, when_used="json"),
]


class RecordModel(BaseModel):
    """Shared configuration for every persisted record."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        extra="ignore",
    )

    def to_document(self) -> dict[str, Any]:
        """Serialize with the persisted (camelCase) field names."""
        return self.model_dump(mode="json", by_alias=True)


# =============================================================================
# ENUMS
# =============================================================================

class Recurrence(str, Enum):
    """How an expense repeats when it is created."""
    ONCE = "once"
    MONTHLY = "monthly"


class DurationUnit(str, Enum):
    """Units accepted when planning a savings goal."""
    DAYS = "days"
    WEEKS = "weeks"
    MONTHS = "months"
    YEARS = "years"


# =============================================================================
# TRANSACTIONS
# =============================================================================

class Transaction(RecordModel):
    """
    Fields shared by income and expense entries.

    The category is a free-text label typed by the user.
    """

    id: str = Field(
        ...,
        min_length=1,
        description="Unique id derived from the creation timestamp"
    )
    name: str = Field(
        ...,
        min_length=1,
        max_length=NAME_MAX_LENGTH,
    )
    category: str = Field(
        default="",
        max_length=CATEGORY_MAX_LENGTH,
        description="Free-text category label"
    )
    amount: Annotated[Amount, Field(gt=0)]
    is_revenue: bool


class IncomeEntry(Transaction):
    """A recorded inflow of money ("ganho")."""

    is_revenue: Literal[True] = True
    date: date


class ExpenseEntry(Transaction):
    """
    A recorded outflow with a due date ("despesa").

    alarm_offsets holds the days-before-due at which a reminder fires.
    It behaves as a set: duplicates are dropped and values kept sorted.
    """

    is_revenue: Literal[False] = False
    due_date: date
    paid: bool = False
    recurrence: Recurrence = Recurrence.ONCE
    alarm_offsets: list[Annotated[int, Field(ge=0)]] = Field(
        default_factory=list,
        description="Days before the due date to send a reminder"
    )

    @field_validator('alarm_offsets')
    @classmethod
    def normalize_offsets(cls, v: list[int]) -> list[int]:
        return sorted(set(v))


# =============================================================================
# GOALS
# =============================================================================

def months_in_plan(duration: Decimal, unit: DurationUnit) -> Decimal:
    """Normalize a goal duration to a number of months."""
    duration = Decimal(str(duration))
    if unit == DurationUnit.DAYS:
        return duration / DAYS_PER_MONTH
    if unit == DurationUnit.WEEKS:
        return duration / WEEKS_PER_MONTH
    if unit == DurationUnit.YEARS:
        return duration * MONTHS_PER_YEAR
    return duration


class Goal(RecordModel):
    """
    A savings target with a monthly contribution plan.

    saved_amount only grows (through contributions) and never exceeds
    target_value.
    """

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, max_length=NAME_MAX_LENGTH)
    target_value: Annotated[Amount, Field(gt=0)]
    saved_amount: Annotated[Amount, Field(ge=0)] = Decimal("0")
    months_in_plan: Annotated[Amount, Field(gt=0)]
    monthly_commitment: Annotated[Amount, Field(ge=0)]

    @model_validator(mode='after')
    def validate_saved_amount(self) -> 'Goal':
        if self.saved_amount > self.target_value:
            raise ValueError("Saved amount cannot exceed the target value")
        return self

    @classmethod
    def plan(
        cls,
        goal_id: str,
        name: str,
        target_value: Decimal,
        duration: Decimal,
        unit: DurationUnit,
    ) -> 'Goal':
        """Create a new goal, deriving months and monthly commitment."""
        months = months_in_plan(duration, unit)
        target = Decimal(str(target_value))
        return cls(
            id=goal_id,
            name=name,
            target_value=target,
            saved_amount=Decimal("0"),
            months_in_plan=months,
            monthly_commitment=target / months,
        )

    @property
    def is_reached(self) -> bool:
        return self.saved_amount >= self.target_value

    @property
    def remaining(self) -> Decimal:
        return self.target_value - self.saved_amount

    @property
    def progress_percent(self) -> float:
        """Saved amount as a percentage of the target (0-100)."""
        return float(self.saved_amount / self.target_value * 100)


# =============================================================================
# PROFILE, COLORS AND STATE
# =============================================================================

class UserProfile(RecordModel):
    """The single user of this installation."""

    username: str = Field(default=DEFAULT_USERNAME, min_length=1, max_length=USERNAME_MAX_LENGTH)


class ColorCacheEntry(RecordModel):
    """
    Cached display color for a category.

    is_custom_override is True when the user picked the color.
    """

    color: str = Field(..., min_length=1)
    is_custom_override: bool = False


ColorCache = dict[str, ColorCacheEntry]


class AppState(RecordModel):
    """
    The whole application state.

    Owned by the Store; every entity lives in exactly one of these lists.
    """

    income_list: list[IncomeEntry] = Field(default_factory=list)
    expense_list: list[ExpenseEntry] = Field(default_factory=list)
    goal_list: list[Goal] = Field(default_factory=list)
    user: UserProfile = Field(default_factory=UserProfile)
    color_cache: ColorCache = Field(default_factory=dict)

    @classmethod
    def initial(cls, username: str = DEFAULT_USERNAME) -> 'AppState':
        """Empty state for a fresh install."""
        return cls(user=UserProfile(username=username))

    def data_document(self) -> dict[str, Any]:
        """
        Document stored under the data key.

        Shape: {incomeList, expenseList, goalList, username}
        """
        return {
            "incomeList": [entry.to_document() for entry in self.income_list],
            "expenseList": [entry.to_document() for entry in self.expense_list],
            "goalList": [goal.to_document() for goal in self.goal_list],
            "username": self.user.username,
        }

    def color_document(self) -> dict[str, Any]:
        """Document stored under the color key."""
        return {
            key: entry.to_document()
            for key, entry in self.color_cache.items()
        }

    def find_income(self, income_id: str) -> IncomeEntry | None:
        return next((e for e in self.income_list if e.id == income_id), None)

    def find_expense(self, expense_id: str) -> ExpenseEntry | None:
        return next((e for e in self.expense_list if e.id == expense_id), None)

    def find_goal(self, goal_id: str) -> Goal | None:
        return next((g for g in self.goal_list if g.id == goal_id), None)
