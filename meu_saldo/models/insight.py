"""
Insight Service Models

Schemas exchanged with the generative-text service.

DESIGN DECISION: The spending analysis request uses absolute currency
amounts (income, expenses, essential/discretionary split, savings goal).
A percentage-based request is NOT supported; the two shapes are not
interchangeable without conversion.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


GENERIC_FAILURE_MESSAGE = "Falha ao gerar os insights. Tente novamente mais tarde."


class SpendingAnalysisRequest(BaseModel):
    """Aggregated totals sent to the spending-analysis prompt."""

    total_income: float = Field(
        ...,
        ge=0,
        description="The total monthly income of the user"
    )
    total_expenses: float = Field(
        ...,
        ge=0,
        description="The total monthly expenses of the user"
    )
    essential_expenses: float = Field(
        ...,
        ge=0,
        description="Essential expenses (housing, bills, health, transport, food)"
    )
    discretionary_expenses: float = Field(
        ...,
        description="Everything that is not essential"
    )
    savings_goal: float = Field(
        ...,
        ge=0,
        description="The amount the user wants to save each month"
    )

    def cache_key(self) -> str:
        """Stable key used to file the response in a result slot."""
        return self.model_dump_json()


class SpendingAnalysis(BaseModel):
    """
    Spending limits and advice returned by the service.

    Numbers are used exactly as returned.
    """

    daily_spending_limit: float
    weekly_spending_limit: float
    spending_advice: str = Field(
        ...,
        description="Portuguese advice, sentences separated by '. '"
    )

    @property
    def advice_sentences(self) -> list[str]:
        return split_advice(self.spending_advice)


class SpendingLimits(BaseModel):
    """Deterministic limits computed locally from raw entries."""

    daily_spending_limit: float
    weekly_spending_limit: float
    goal_progress_summary: str
    days_remaining: int = Field(ge=0)


class FinancialInsights(BaseModel):
    """Free-text insights produced from the raw lists."""

    insights: list[str] = Field(default_factory=list)


class InsightResult(BaseModel):
    """
    Tagged result returned across the adapter boundary.

    On failure, error holds a human-readable retry-later message and the
    payload fields are None.
    """

    success: bool
    requested_at: datetime = Field(default_factory=datetime.now)
    analysis: Optional[SpendingAnalysis] = None
    insights: Optional[FinancialInsights] = None
    error: Optional[str] = None

    @classmethod
    def failure(cls, message: str = GENERIC_FAILURE_MESSAGE) -> 'InsightResult':
        return cls(success=False, error=message)


def split_advice(text: str) -> list[str]:
    """Split advice into sentences on the literal '. ' separator."""
    return [sentence for sentence in text.split(". ") if sentence]
