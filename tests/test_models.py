"""
Tests for Meu Saldo

Test strategy:
1. Unit tests for individual components (models, colors, derivations)
2. Integration tests for flows (with in-memory storage and fake services)
3. No real API calls in tests (use fakes)
"""

import pytest
from datetime import date
from decimal import Decimal

from meu_saldo.models import (
    AppState,
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
    ColorCacheEntry,
    DurationUnit,
    ExpenseEntry,
    Goal,
    IncomeEntry,
    InsightResult,
    Recurrence,
    SpendingAnalysis,
    ValidationIssue,
    ValidationResult,
    months_in_plan,
    split_advice,
)


class TestTransactionModels:
    """Tests for income and expense records."""

    def test_income_entry_is_revenue(self):
        """Income entries are always revenue."""
        entry = IncomeEntry(id="1", name="Salário", category="Salário", amount=Decimal("100"), date=date(2025, 1, 1))
        assert entry.is_revenue is True

    def test_expense_entry_defaults(self):
        """Missing optional fields fall back to permissive defaults."""
        entry = ExpenseEntry(id="1", name="Luz", amount=Decimal("80"), due_date=date(2025, 1, 5))
        assert entry.is_revenue is False
        assert entry.paid is False
        assert entry.recurrence == Recurrence.ONCE
        assert entry.alarm_offsets == []
        assert entry.category == ""

    def test_amount_must_be_positive(self):
        """Zero and negative amounts are rejected."""
        with pytest.raises(ValueError):
            IncomeEntry(id="1", name="X", amount=Decimal("0"), date=date(2025, 1, 1))
        with pytest.raises(ValueError):
            ExpenseEntry(id="1", name="X", amount=Decimal("-5"), due_date=date(2025, 1, 1))

    def test_alarm_offsets_behave_as_a_set(self):
        """Duplicates are dropped and offsets are kept sorted."""
        entry = ExpenseEntry(
            id="1", name="Luz", amount=Decimal("80"), due_date=date(2025, 1, 5),
            alarm_offsets=[7, 1, 7, 0],
        )
        assert entry.alarm_offsets == [0, 1, 7]

    def test_negative_alarm_offset_rejected(self):
        with pytest.raises(ValueError):
            ExpenseEntry(
                id="1", name="Luz", amount=Decimal("80"), due_date=date(2025, 1, 5),
                alarm_offsets=[-1],
            )

    def test_name_strips_whitespace(self):
        entry = IncomeEntry(id="1", name="  Freela  ", amount=Decimal("10"), date=date(2025, 1, 1))
        assert entry.name == "Freela"

    def test_document_uses_camel_case(self):
        """Persisted field names are camelCase."""
        entry = ExpenseEntry(
            id="1", name="Luz", amount=Decimal("80.5"), due_date=date(2025, 1, 5),
            alarm_offsets=[3],
        )
        doc = entry.to_document()
        assert doc["dueDate"] == "2025-01-05"
        assert doc["isRevenue"] is False
        assert doc["alarmOffsets"] == [3]
        assert doc["amount"] == 80.5

    def test_document_round_trip(self):
        entry = ExpenseEntry(
            id="1", name="Luz", amount=Decimal("80.5"), due_date=date(2025, 1, 5),
            paid=True, recurrence=Recurrence.MONTHLY,
        )
        restored = ExpenseEntry.model_validate(entry.to_document())
        assert restored == entry


class TestGoalModel:
    """Tests for savings goals."""

    @pytest.mark.parametrize("duration,unit,expected", [
        ("6", DurationUnit.MONTHS, Decimal("6")),
        ("2", DurationUnit.YEARS, Decimal("24")),
        ("30.44", DurationUnit.DAYS, Decimal("1")),
        ("4.345", DurationUnit.WEEKS, Decimal("1")),
    ])
    def test_months_in_plan(self, duration, unit, expected):
        """Durations are normalized to months with fixed constants."""
        assert months_in_plan(Decimal(duration), unit) == expected

    def test_plan_derives_monthly_commitment(self):
        goal = Goal.plan("g1", "Viagem", Decimal("1200"), Decimal("1"), DurationUnit.YEARS)
        assert goal.months_in_plan == Decimal("12")
        assert goal.monthly_commitment == Decimal("100")
        assert goal.saved_amount == Decimal("0")
        assert goal.is_reached is False

    def test_saved_amount_cannot_exceed_target(self):
        with pytest.raises(ValueError):
            Goal(
                id="g1", name="Viagem", target_value=Decimal("100"),
                saved_amount=Decimal("150"), months_in_plan=Decimal("1"),
                monthly_commitment=Decimal("100"),
            )

    def test_progress_percent(self):
        goal = Goal.plan("g1", "Viagem", Decimal("400"), Decimal("4"), DurationUnit.MONTHS)
        goal.saved_amount = Decimal("100")
        assert goal.progress_percent == 25.0
        assert goal.remaining == Decimal("300")


class TestAppState:
    """Tests for the whole-state container."""

    def test_initial_state(self):
        state = AppState.initial()
        assert state.user.username == "Usuário"
        assert state.income_list == []
        assert state.color_cache == {}

    def test_data_document_shape(self):
        state = AppState.initial("Ana")
        doc = state.data_document()
        assert set(doc) == {"incomeList", "expenseList", "goalList", "username"}
        assert doc["username"] == "Ana"

    def test_color_document(self):
        state = AppState.initial()
        state.color_cache["moradia"] = ColorCacheEntry(color="hsl(10, 70%, 50%)")
        assert state.color_document() == {
            "moradia": {"color": "hsl(10, 70%, 50%)", "isCustomOverride": False}
        }


class TestInsightModels:
    """Tests for insight service schemas."""

    def test_split_advice(self):
        """Advice splits on the literal '. ' and drops empty pieces."""
        assert split_advice("Economize. Corte gastos. ") == ["Economize", "Corte gastos"]
        assert split_advice("") == []

    def test_advice_sentences(self):
        analysis = SpendingAnalysis(
            daily_spending_limit=50,
            weekly_spending_limit=350,
            spending_advice="Evite delivery. Cozinhe em casa.",
        )
        assert analysis.advice_sentences == ["Evite delivery", "Cozinhe em casa."]

    def test_failure_result(self):
        result = InsightResult.failure()
        assert result.success is False
        assert result.error == "Falha ao gerar os insights. Tente novamente mais tarde."
        assert result.analysis is None


class TestValidationModels:
    """Tests for form validation results."""

    def test_errors_filter(self):
        result = ValidationResult(
            form="income",
            is_valid=False,
            issues=[
                ValidationIssue(field="name", issue_type="missing", message="Descrição é obrigatório"),
                ValidationIssue(field="date", issue_type="hint", message="Hoje", severity="info"),
            ],
        )
        assert len(result.errors) == 1
        assert result.errors[0].field == "name"


class TestAuditModels:
    """Tests for audit event models."""

    def test_audit_event_to_log_dict(self):
        event = AuditEvent(
            event_type=AuditEventType.INCOME_ADDED,
            entity_type="income",
            entity_id="123",
            description="Ganho adicionado!",
        )
        log_dict = event.to_log_dict()
        assert log_dict["event_type"] == "income_added"
        assert log_dict["entity_id"] == "123"
        assert log_dict["severity"] == "info"

    def test_mutation_applied_single_entity(self):
        event = AuditEventBuilder.mutation_applied(
            AuditEventType.EXPENSE_DELETED, "expense", ["e1"], "Despesa excluída."
        )
        assert event.entity_id == "e1"
        assert event.is_user_action is True

    def test_mutation_applied_many_entities(self):
        event = AuditEventBuilder.mutation_applied(
            AuditEventType.EXPENSE_ADDED, "expense", ["a-0", "a-1"], "ok"
        )
        assert event.entity_id is None
        assert event.details["entity_ids"] == ["a-0", "a-1"]

    def test_storage_write_failed_is_error(self):
        event = AuditEventBuilder.storage_write_failed("meuSaldoData", "disk full")
        assert event.severity == AuditSeverity.ERROR
        assert event.error_message == "disk full"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
