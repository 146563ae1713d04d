"""
Insight Agent ("Contadora IA")

DESIGN DECISION: The LLM writes advice, it does not do arithmetic we
can do ourselves.

CRITICAL BOUNDARIES:

1. SPENDING ANALYSIS:
   - Input: five aggregated totals (SpendingAnalysisRequest)
   - Output: daily/weekly limits and Portuguese advice
   - The numbers the model returns are shown as returned

2. FINANCIAL INSIGHTS:
   - Spending limits are computed locally (compute_spending_limits)
     and handed to the model as facts
   - The model only turns those facts and the raw lists into short
     Portuguese insights

FAILURE HANDLING:
- Transport errors are retried (tenacity, bounded exponential backoff)
- Malformed responses raise InsightServiceError
- InsightFlow turns every failure into InsightResult.failure(); callers
  never see an exception
"""

import json
from datetime import date
from decimal import Decimal
from typing import Any, Callable, Iterable, Optional, Sequence

import google.generativeai as genai
import structlog
from pydantic import ValidationError
from tenacity import retry, stop_after_attempt, wait_exponential

from meu_saldo.config import get_settings
from meu_saldo.models.insight import (
    FinancialInsights,
    InsightResult,
    SpendingAnalysis,
    SpendingAnalysisRequest,
    SpendingLimits,
)
from meu_saldo.models.records import AppState, ExpenseEntry, Goal, IncomeEntry
from meu_saldo.reports.aggregation import total_goal_commitment
from meu_saldo.utils.dates import days_remaining_in_month, today as current_date


logger = structlog.get_logger(__name__)


class InsightServiceError(Exception):
    """The insight service failed or answered with something unusable."""
    pass


# =============================================================================
# DETERMINISTIC INPUTS
# =============================================================================

def build_spending_request(
    state: AppState,
    essential_categories: Iterable[str],
) -> Optional[SpendingAnalysisRequest]:
    """
    Aggregate the whole state into the spending-analysis request.

    Returns None when there is neither income nor expense to analyze.
    """
    essential = {category.lower() for category in essential_categories}

    total_income = sum((e.amount for e in state.income_list), Decimal("0"))
    total_expenses = sum((e.amount for e in state.expense_list), Decimal("0"))
    if total_income == 0 and total_expenses == 0:
        return None

    essential_expenses = sum(
        (e.amount for e in state.expense_list if e.category.lower() in essential),
        Decimal("0"),
    )

    return SpendingAnalysisRequest(
        total_income=float(total_income),
        total_expenses=float(total_expenses),
        essential_expenses=float(essential_expenses),
        discretionary_expenses=float(total_expenses - essential_expenses),
        savings_goal=float(total_goal_commitment(state.goal_list)),
    )


def compute_spending_limits(
    income: Sequence[IncomeEntry],
    expenses: Sequence[ExpenseEntry],
    goals: Sequence[Goal],
    today: Optional[date] = None,
) -> SpendingLimits:
    """
    Spending limits for the rest of the month.

    daily = (income - paid - pending) / days left until the last day of the
    month, or 0 on the last day itself. weekly = daily * 7.
    """
    today = today or current_date()

    total_income = sum((e.amount for e in income), Decimal("0"))
    total_paid = sum((e.amount for e in expenses if e.paid), Decimal("0"))
    total_pending = sum((e.amount for e in expenses if not e.paid), Decimal("0"))
    balance_remaining = total_income - total_paid

    days_remaining = days_remaining_in_month(today)
    daily = (
        (balance_remaining - total_pending) / days_remaining
        if days_remaining > 0
        else Decimal("0")
    )

    commitment = total_goal_commitment(goals)
    return SpendingLimits(
        daily_spending_limit=float(daily),
        weekly_spending_limit=float(daily * 7),
        goal_progress_summary=(
            f"Você está comprometido a economizar {commitment:.2f} "
            f"mensalmente para suas metas."
        ),
        days_remaining=days_remaining,
    )


def extract_json(text: str) -> dict[str, Any]:
    """Pull the first JSON object out of a model response."""
    start = text.find("{")
    end = text.rfind("}") + 1
    if start < 0 or end <= start:
        raise InsightServiceError("Response did not contain a JSON object")
    try:
        return json.loads(text[start:end])
    except ValueError as e:
        raise InsightServiceError(f"Response JSON could not be parsed: {e}")


# =============================================================================
# AGENT
# =============================================================================

class InsightAgent:
    """
    Gemini-backed budgeting advisor.

    RESPONSIBILITIES:
    - Suggest daily/weekly spending limits from aggregated totals
    - Write short Portuguese insights grounded on locally computed limits

    BOUNDARIES:
    - NEVER mutates application state
    - NEVER invents the spending limits used in the insights prompt
    """

    def __init__(self, model: Optional[Any] = None):
        """
        Initialize the agent.

        Args:
            model: Object with an async generate_content_async(prompt).
                   If None, a Gemini model is configured from settings.
        """
        if model is None:
            model = self._configure_genai()
        self._model = model

    def _configure_genai(self):
        """Configure Google Generative AI."""
        settings = get_settings().gemini
        genai.configure(api_key=settings.api_key)
        return genai.GenerativeModel(
            model_name=settings.model_name,
            generation_config={
                "temperature": settings.temperature,
                "max_output_tokens": settings.max_tokens,
            }
        )

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    async def _generate_text(self, prompt: str) -> str:
        response = await self._model.generate_content_async(prompt)
        return response.text.strip()

    async def analyze_spending(
        self,
        request: SpendingAnalysisRequest,
    ) -> SpendingAnalysis:
        """Ask for spending limits and advice for the given totals."""
        prompt = f"""Você é um consultor de finanças pessoais. Seu objetivo é dar conselhos práticos com base nos dados financeiros do usuário. Analise os padrões de gastos e sugira limites de gastos personalizados.

Dados financeiros do usuário:
- Receita total: {request.total_income:.2f}
- Despesas totais: {request.total_expenses:.2f}
- Despesas essenciais: {request.essential_expenses:.2f}
- Despesas não essenciais: {request.discretionary_expenses:.2f}
- Meta de economia mensal: {request.savings_goal:.2f}

Com base nessas informações, calcule e sugira um limite de gastos diário e um semanal. Dê conselhos encorajadores e práticos para o usuário atingir suas metas de economia. Escreva os conselhos em português, em frases separadas por ". ".

Responda APENAS com um objeto JSON neste formato exato:
{{"daily_spending_limit": 50.0, "weekly_spending_limit": 350.0, "spending_advice": "conselho"}}"""

        data = extract_json(await self._generate_text(prompt))
        try:
            return SpendingAnalysis(**data)
        except (TypeError, ValidationError) as e:
            raise InsightServiceError(f"Unexpected analysis shape: {e}")

    async def generate_insights(
        self,
        income: Sequence[IncomeEntry],
        expenses: Sequence[ExpenseEntry],
        goals: Sequence[Goal],
        today: Optional[date] = None,
    ) -> FinancialInsights:
        """Short insights grounded on compute_spending_limits()."""
        limits = compute_spending_limits(income, expenses, goals, today)

        income_lines = "\n".join(f"  - {e.name} ({e.amount})" for e in income) or "  (nenhum)"
        expense_lines = "\n".join(f"  - {e.name} ({e.amount})" for e in expenses) or "  (nenhuma)"
        goal_lines = "\n".join(f"  - {g.name} ({g.target_value})" for g in goals) or "  (nenhuma)"

        prompt = f"""Você é um consultor financeiro pessoal especializado em insights financeiros acionáveis. Analise os dados abaixo e escreva insights concisos e práticos sobre como o usuário pode melhorar sua saúde financeira. Inclua sugestões sobre limites de gastos e o progresso das metas de economia.

Use SOMENTE estes limites já calculados, não recalcule:
- Limite de gastos diário: {limits.daily_spending_limit:.2f}
- Limite de gastos semanal: {limits.weekly_spending_limit:.2f}
- Dias restantes no mês: {limits.days_remaining}
- {limits.goal_progress_summary}

Ganhos:
{income_lines}
Despesas:
{expense_lines}
Metas:
{goal_lines}

Escreva em português. Responda APENAS com um objeto JSON neste formato exato:
{{"insights": ["insight 1", "insight 2"]}}"""

        data = extract_json(await self._generate_text(prompt))
        try:
            return FinancialInsights(**data)
        except (TypeError, ValidationError) as e:
            raise InsightServiceError(f"Unexpected insights shape: {e}")


# =============================================================================
# FLOW BOUNDARY
# =============================================================================

class InsightFlow:
    """
    Adapter used by the UI.

    Builds the agent lazily (a missing API key only fails this page) and
    converts every failure into a tagged InsightResult.
    """

    def __init__(
        self,
        agent_factory: Callable[[], InsightAgent] = InsightAgent,
        audit_logger: Optional[Any] = None,
    ):
        self._agent_factory = agent_factory
        self._agent: Optional[InsightAgent] = None
        self._audit = audit_logger

    def _get_agent(self) -> InsightAgent:
        if self._agent is None:
            self._agent = self._agent_factory()
        return self._agent

    def _failed(self, flow: str, error: Exception) -> InsightResult:
        logger.error("insight_flow_failed", flow=flow, error=str(error))
        if self._audit:
            self._audit.log_insight_failed(flow, str(error))
        return InsightResult.failure()

    async def analyze(self, request: SpendingAnalysisRequest) -> InsightResult:
        try:
            analysis = await self._get_agent().analyze_spending(request)
        except Exception as e:
            return self._failed("analyze_spending", e)

        if self._audit:
            self._audit.log_insight_generated("analyze_spending", len(analysis.advice_sentences))
        return InsightResult(success=True, analysis=analysis)

    async def insights(self, state: AppState, today: Optional[date] = None) -> InsightResult:
        try:
            insights = await self._get_agent().generate_insights(
                state.income_list,
                state.expense_list,
                state.goal_list,
                today,
            )
        except Exception as e:
            return self._failed("generate_insights", e)

        if self._audit:
            self._audit.log_insight_generated("generate_insights", len(insights.insights))
        return InsightResult(success=True, insights=insights)
