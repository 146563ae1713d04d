"""Tests for the state store and its mutations."""

from datetime import date
from decimal import Decimal

import pytest

from conftest import FIXED_EPOCH, make_expense, make_income
from meu_saldo.models import AppState, DurationUnit, Recurrence
from meu_saldo.state import (
    AddExpense,
    AddGoal,
    AddIncome,
    ContributeToGoal,
    CustomColor,
    DeleteExpense,
    DeleteGoal,
    DeleteIncome,
    EditExpense,
    EditIncome,
    ResetState,
    SaveCustomColors,
    Store,
    TimestampIdFactory,
    ToggleExpensePaid,
    UpdateUsername,
)


BASE_ID = str(int(FIXED_EPOCH * 1000))


def monthly_rent(due=date(2025, 1, 15)):
    return AddExpense(
        name="Aluguel",
        category="Moradia",
        amount=Decimal("1200"),
        due_date=due,
        recurrence=Recurrence.MONTHLY,
        alarm_offsets=(3,),
    )


class Recorder:
    """Listener that remembers every call."""

    def __init__(self):
        self.calls = []

    def __call__(self, state, mutation, result):
        self.calls.append((state, mutation, result))


class TestTimestampIdFactory:
    """Tests for id generation."""

    def test_ids_are_millisecond_timestamps(self, id_factory):
        assert id_factory() == BASE_ID

    def test_same_millisecond_never_collides(self, id_factory):
        first = id_factory()
        second = id_factory()
        assert int(second) == int(first) + 1


class TestStoreBasics:
    """Tests for snapshots and subscriptions."""

    def test_initial_state_is_empty(self, store):
        state = store.get_state()
        assert state.income_list == []
        assert state.user.username == "Usuário"

    def test_get_state_returns_copy(self, store):
        """Changing a snapshot never changes the store."""
        store.dispatch(AddIncome(name="Salário", category="Salário", amount=Decimal("100"), date=date(2025, 1, 5)))
        snapshot = store.get_state()
        snapshot.income_list.clear()
        assert len(store.get_state().income_list) == 1

    def test_initial_state_is_copied(self):
        initial = AppState(income_list=[make_income()])
        store = Store(initial_state=initial)
        initial.income_list.clear()
        assert len(store.get_state().income_list) == 1

    def test_subscriber_called_with_new_state(self, store):
        recorder = Recorder()
        store.subscribe(recorder)
        result = store.dispatch(UpdateUsername(username="Ana"))
        assert len(recorder.calls) == 1
        state, mutation, passed = recorder.calls[0]
        assert state.user.username == "Ana"
        assert isinstance(mutation, UpdateUsername)
        assert passed == result

    def test_unsubscribe(self, store):
        recorder = Recorder()
        unsubscribe = store.subscribe(recorder)
        unsubscribe()
        store.dispatch(UpdateUsername(username="Ana"))
        assert recorder.calls == []

    def test_failing_listener_is_isolated(self, store):
        """A listener error is logged; the mutation and later listeners still run."""
        def broken(state, mutation, result):
            raise RuntimeError("boom")

        recorder = Recorder()
        store.subscribe(broken)
        store.subscribe(recorder)
        result = store.dispatch(UpdateUsername(username="Ana"))
        assert result.applied is True
        assert store.get_state().user.username == "Ana"
        assert len(recorder.calls) == 1

    def test_unknown_mutation_type(self, store):
        with pytest.raises(TypeError):
            store.dispatch(object())

    def test_missing_id_changes_nothing(self, store):
        """Targeting a missing id is a no-op and nobody is notified."""
        recorder = Recorder()
        store.subscribe(recorder)
        for mutation in (
            DeleteIncome(income_id="nope"),
            DeleteExpense(expense_id="nope"),
            ToggleExpensePaid(expense_id="nope"),
            DeleteGoal(goal_id="nope"),
            ContributeToGoal(goal_id="nope", value=Decimal("10")),
        ):
            result = store.dispatch(mutation)
            assert result.applied is False
        assert recorder.calls == []


class TestIncomeMutations:
    """Tests for income add/edit/delete."""

    def test_add_income(self, store):
        result = store.dispatch(AddIncome(
            name="Freela", category="Extra", amount=Decimal("250.50"), date=date(2025, 1, 3),
        ))
        assert result.message == "Ganho adicionado!"
        assert result.created_ids == [BASE_ID]
        entry = store.get_state().income_list[0]
        assert entry.amount == Decimal("250.50")
        assert entry.is_revenue is True

    def test_edit_income_keeps_id(self, store):
        created = store.dispatch(AddIncome(
            name="Freela", category="Extra", amount=Decimal("100"), date=date(2025, 1, 3),
        )).created_ids[0]
        result = store.dispatch(EditIncome(
            income_id=created, name="Freela", category="Extra", amount=Decimal("300"), date=date(2025, 1, 4),
        ))
        assert result.message == "Ganho atualizado!"
        entry = store.get_state().find_income(created)
        assert entry.amount == Decimal("300")
        assert entry.date == date(2025, 1, 4)

    def test_delete_income(self, store):
        created = store.dispatch(AddIncome(
            name="Freela", category="Extra", amount=Decimal("100"), date=date(2025, 1, 3),
        )).created_ids[0]
        result = store.dispatch(DeleteIncome(income_id=created))
        assert result.message == "Ganho excluído."
        assert store.get_state().income_list == []


class TestExpenseMutations:
    """Tests for expense add/edit/delete/toggle."""

    def test_once_expense(self, store):
        result = store.dispatch(AddExpense(
            name="Luz", category="Contas", amount=Decimal("80"), due_date=date(2025, 2, 1), paid=True,
        ))
        assert result.message == "Despesa adicionada!"
        assert result.created_ids == [BASE_ID]
        assert store.get_state().expense_list[0].paid is True

    def test_monthly_expands_into_twelve(self, store):
        """One monthly expense becomes twelve unpaid entries a month apart."""
        result = store.dispatch(monthly_rent())
        assert result.message == "Despesa mensal adicionada para o próximo ano."
        assert result.created_ids == [f"{BASE_ID}-{i}" for i in range(12)]

        expenses = store.get_state().expense_list
        assert len(expenses) == 12
        assert expenses[0].due_date == date(2025, 1, 15)
        assert expenses[-1].due_date == date(2025, 12, 15)
        assert all(not e.paid for e in expenses)
        assert all(e.alarm_offsets == [3] for e in expenses)

    def test_monthly_clamps_to_month_end(self, store):
        store.dispatch(monthly_rent(due=date(2025, 1, 31)))
        dues = [e.due_date for e in store.get_state().expense_list]
        assert dues[1] == date(2025, 2, 28)
        assert dues[3] == date(2025, 4, 30)
        assert dues[2] == date(2025, 3, 31)

    def test_monthly_ignores_paid_flag(self, store):
        store.dispatch(monthly_rent().model_copy(update={"paid": True}))
        assert not any(e.paid for e in store.get_state().expense_list)

    def test_expenses_sorted_by_due_date(self, store):
        store.dispatch(AddExpense(name="B", category="X", amount=Decimal("1"), due_date=date(2025, 3, 1)))
        store.dispatch(AddExpense(name="A", category="X", amount=Decimal("1"), due_date=date(2025, 1, 1)))
        store.dispatch(AddExpense(name="C", category="X", amount=Decimal("1"), due_date=date(2025, 2, 1)))
        assert [e.name for e in store.get_state().expense_list] == ["A", "C", "B"]

    def test_delete_one_instance_of_monthly(self, store):
        """Deleting one generated entry leaves the other eleven alone."""
        store.dispatch(monthly_rent())
        store.dispatch(DeleteExpense(expense_id=f"{BASE_ID}-3"))
        ids = [e.id for e in store.get_state().expense_list]
        assert len(ids) == 11
        assert f"{BASE_ID}-3" not in ids
        assert f"{BASE_ID}-4" in ids

    def test_edit_one_instance_resorts(self, store):
        store.dispatch(monthly_rent())
        target = f"{BASE_ID}-0"
        result = store.dispatch(EditExpense(
            expense_id=target, name="Aluguel", category="Moradia",
            amount=Decimal("1300"), due_date=date(2025, 6, 20),
        ))
        assert result.message == "Despesa atualizada!"
        expenses = store.get_state().expense_list
        edited = store.get_state().find_expense(target)
        assert edited.amount == Decimal("1300")
        assert [e.due_date for e in expenses] == sorted(e.due_date for e in expenses)
        assert expenses[0].id == f"{BASE_ID}-1"

    def test_toggle_paid(self, store):
        created = store.dispatch(AddExpense(
            name="Luz", category="Contas", amount=Decimal("80"), due_date=date(2025, 2, 1),
        )).created_ids[0]
        first = store.dispatch(ToggleExpensePaid(expense_id=created))
        assert first.message == "Conta marcada como paga!"
        assert store.get_state().find_expense(created).paid is True
        second = store.dispatch(ToggleExpensePaid(expense_id=created))
        assert second.message == "Pagamento desmarcado."
        assert store.get_state().find_expense(created).paid is False


class TestGoalMutations:
    """Tests for goals and contributions."""

    def add_goal(self, store, target="500"):
        return store.dispatch(AddGoal(
            name="Viagem", target_value=Decimal(target), duration=Decimal("5"), unit=DurationUnit.MONTHS,
        )).created_ids[0]

    def test_add_goal(self, store):
        goal_id = self.add_goal(store)
        goal = store.get_state().find_goal(goal_id)
        assert goal.monthly_commitment == Decimal("100")
        assert goal.saved_amount == Decimal("0")

    def test_contribution_clamps_at_target(self, store):
        """Saved amount never exceeds the target; goal_reached fires once."""
        goal_id = self.add_goal(store)
        result = store.dispatch(ContributeToGoal(goal_id=goal_id, value=Decimal("600")))
        assert result.goal_reached is True
        assert result.message == 'Parabéns! Meta "Viagem" atingida!'
        assert store.get_state().find_goal(goal_id).saved_amount == Decimal("500")

        again = store.dispatch(ContributeToGoal(goal_id=goal_id, value=Decimal("10")))
        assert again.applied is True
        assert again.goal_reached is False
        assert store.get_state().find_goal(goal_id).saved_amount == Decimal("500")

    def test_partial_contribution(self, store):
        goal_id = self.add_goal(store)
        result = store.dispatch(ContributeToGoal(goal_id=goal_id, value=Decimal("120")))
        assert result.goal_reached is False
        assert result.message == 'Valor adicionado à meta "Viagem"'

    def test_delete_goal(self, store):
        goal_id = self.add_goal(store)
        assert store.dispatch(DeleteGoal(goal_id=goal_id)).message == "Meta excluída."
        assert store.get_state().goal_list == []


class TestProfileAndLifecycle:
    """Tests for username, colors and reset."""

    def test_save_custom_colors(self, store):
        result = store.dispatch(SaveCustomColors(colors=(CustomColor(category="Lazer", color="#2626d9"),)))
        assert result.affected_ids == ["lazer"]
        entry = store.get_state().color_cache["lazer"]
        assert entry.color == "hsl(240, 70%, 50%)"
        assert entry.is_custom_override is True
        assert store.color_for("LAZER", True) == "hsl(240, 70%, 50%)"

    def test_color_for_populates_live_cache(self, store):
        color = store.color_for("Moradia", False)
        assert store.get_state().color_cache["moradia"].color == color

    def test_reset(self, store):
        store.dispatch(monthly_rent())
        store.dispatch(UpdateUsername(username="Ana"))
        store.color_for("Moradia", False)
        result = store.dispatch(ResetState())
        assert result.message == "Todos os dados foram apagados."
        state = store.get_state()
        assert state.expense_list == []
        assert state.color_cache == {}
        assert state.user.username == "Usuário"

    def test_reset_uses_configured_default_username(self):
        store = Store(initial_state=AppState(), default_username="Visitante")
        store.dispatch(ResetState())
        assert store.get_state().user.username == "Visitante"

    def test_replace_state_does_not_notify(self, store):
        recorder = Recorder()
        store.subscribe(recorder)
        store.replace_state(AppState(expense_list=[make_expense()]))
        assert recorder.calls == []
        assert len(store.get_state().expense_list) == 1

    def test_ids_unique_across_mutations(self):
        store = Store(id_factory=TimestampIdFactory(clock=lambda: FIXED_EPOCH))
        first = store.dispatch(AddIncome(name="A", category="A", amount=Decimal("1"), date=date(2025, 1, 1)))
        second = store.dispatch(AddIncome(name="B", category="B", amount=Decimal("1"), date=date(2025, 1, 1)))
        assert first.created_ids != second.created_ids
