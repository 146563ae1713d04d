"""
AI Agents Package

The budgeting advisor and the flow boundary used by the UI.
"""

from meu_saldo.agents.insight_agent import (
    InsightAgent,
    InsightFlow,
    InsightServiceError,
    build_spending_request,
    compute_spending_limits,
    extract_json,
)

__all__ = [
    "InsightAgent",
    "InsightFlow",
    "InsightServiceError",
    "build_spending_request",
    "compute_spending_limits",
    "extract_json",
]
