"""
Form Validation

DESIGN DECISION: Invalid forms are declined, not rejected loudly.
The browser version simply ignored a submit with missing fields; we keep
that behavior. The validator reports issues, the orchestrator declines to
dispatch, and no partially built entity ever reaches the store.

Checks per form:
- income: name, category, positive amount, date
- expense: name, category, positive amount, due date, sane alarm offsets
- goal: name, positive target, positive duration
- contribution: positive value
- username: present, at most USERNAME_MAX_LENGTH characters

Text fields are also held to the same length limits as the records they
become.

IMPORTANT: Validation NEVER silently fixes issues.
"""

from decimal import Decimal
from typing import Optional

from meu_saldo.models.forms import (
    ContributionForm,
    ExpenseForm,
    GoalForm,
    IncomeForm,
    ValidationIssue,
    ValidationResult,
)
from meu_saldo.models.records import (
    CATEGORY_MAX_LENGTH,
    NAME_MAX_LENGTH,
    USERNAME_MAX_LENGTH,
)


class EntryValidator:
    """Precondition checks for every user-facing form."""

    def _require_text(
        self,
        field: str,
        value: Optional[str],
        label: str,
        max_length: int,
    ) -> list[ValidationIssue]:
        if value is None or not value.strip():
            return [ValidationIssue(
                field=field,
                issue_type="missing",
                message=f"{label} é obrigatório",
            )]
        if len(value.strip()) > max_length:
            return [ValidationIssue(
                field=field,
                issue_type="too_long",
                message=f"{label} deve ter no máximo {max_length} caracteres",
            )]
        return []

    def _require_positive(
        self,
        field: str,
        value: Optional[Decimal],
        label: str,
    ) -> list[ValidationIssue]:
        if value is None:
            return [ValidationIssue(
                field=field,
                issue_type="missing",
                message=f"{label} é obrigatório",
            )]
        if value <= 0:
            return [ValidationIssue(
                field=field,
                issue_type="invalid_value",
                message=f"{label} deve ser maior que zero",
            )]
        return []

    def _result(self, form: str, issues: list[ValidationIssue]) -> ValidationResult:
        is_valid = not any(issue.severity == "error" for issue in issues)
        return ValidationResult(form=form, is_valid=is_valid, issues=issues)

    def validate_income_form(self, form: IncomeForm) -> ValidationResult:
        issues = []
        issues.extend(self._require_text("name", form.name, "Descrição", NAME_MAX_LENGTH))
        issues.extend(self._require_text("category", form.category, "Categoria", CATEGORY_MAX_LENGTH))
        issues.extend(self._require_positive("amount", form.amount, "Valor"))

        if form.date is None:
            issues.append(ValidationIssue(
                field="date",
                issue_type="missing",
                message="Data é obrigatória",
            ))

        return self._result("income", issues)

    def validate_expense_form(self, form: ExpenseForm) -> ValidationResult:
        issues = []
        issues.extend(self._require_text("name", form.name, "Descrição", NAME_MAX_LENGTH))
        issues.extend(self._require_text("category", form.category, "Categoria", CATEGORY_MAX_LENGTH))
        issues.extend(self._require_positive("amount", form.amount, "Valor"))

        if form.due_date is None:
            issues.append(ValidationIssue(
                field="due_date",
                issue_type="missing",
                message="Data de vencimento é obrigatória",
            ))

        if any(offset < 0 for offset in form.alarm_offsets):
            issues.append(ValidationIssue(
                field="alarm_offsets",
                issue_type="invalid_value",
                message="Alarmes devem ser em dias antes do vencimento",
            ))

        return self._result("expense", issues)

    def validate_goal_form(self, form: GoalForm) -> ValidationResult:
        issues = []
        issues.extend(self._require_text("name", form.name, "Nome da meta", NAME_MAX_LENGTH))
        issues.extend(self._require_positive("target_value", form.target_value, "Valor alvo"))
        issues.extend(self._require_positive("duration", form.duration, "Prazo"))
        return self._result("goal", issues)

    def validate_contribution_form(self, form: ContributionForm) -> ValidationResult:
        issues = self._require_positive("value", form.value, "Valor")
        return self._result("contribution", issues)

    def validate_username(self, username: Optional[str]) -> ValidationResult:
        issues = self._require_text("username", username, "Nome", USERNAME_MAX_LENGTH)
        return self._result("username", issues)

    def get_user_friendly_summary(self, result: ValidationResult) -> str:
        """One line per problem, for the optional form hint."""
        if result.is_valid:
            return ""
        return "\n".join(f"• {issue.message}" for issue in result.errors)
