"""
Application State Store

The Store owns the single AppState object. Every change goes through
dispatch(), which:
1. Applies the mutation to a deep copy of the state
2. Swaps the copy in (the old state is never partially modified)
3. Calls every subscriber with (state, mutation, result)

DESIGN DECISION: Persistence is NOT built into the store.
It is an ordinary subscriber (see state.persistence.StatePersister),
which keeps the side effect visible and testable in isolation.

All mutations run synchronously to completion; there is no locking
because a single thread of control owns the store.
"""

import time
from typing import Callable, Optional

import structlog

from meu_saldo.colors import color_for, set_custom_colors
from meu_saldo.models.records import (
    MONTHLY_EXPANSION_COUNT,
    AppState,
    ExpenseEntry,
    Goal,
    IncomeEntry,
    Recurrence,
)
from meu_saldo.state.mutations import (
    AddExpense,
    AddGoal,
    AddIncome,
    ContributeToGoal,
    DeleteExpense,
    DeleteGoal,
    DeleteIncome,
    EditExpense,
    EditIncome,
    Mutation,
    MutationResult,
    ResetState,
    SaveCustomColors,
    ToggleExpensePaid,
    UpdateUsername,
)
from meu_saldo.utils.dates import add_months


Listener = Callable[[AppState, Mutation, MutationResult], None]

logger = structlog.get_logger(__name__)


class TimestampIdFactory:
    """
    Ids from the creation time in milliseconds.

    Monotonic within the process: two ids requested in the same
    millisecond never collide.
    """

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock
        self._last = 0

    def next_base(self) -> int:
        candidate = int(self._clock() * 1000)
        if candidate <= self._last:
            candidate = self._last + 1
        self._last = candidate
        return candidate

    def __call__(self) -> str:
        return str(self.next_base())


def _sort_expenses(expenses: list[ExpenseEntry]) -> list[ExpenseEntry]:
    return sorted(expenses, key=lambda e: e.due_date)


class Store:
    """
    In-memory application state with explicit mutation dispatch.

    Usage:
        store = Store()
        store.subscribe(persister)
        store.dispatch(AddIncome(...))
    """

    def __init__(
        self,
        initial_state: Optional[AppState] = None,
        id_factory: Optional[TimestampIdFactory] = None,
        default_username: Optional[str] = None,
    ):
        """
        Initialize the store.

        Args:
            initial_state: State to start from (e.g. loaded from storage).
            id_factory: Id generator; tests inject a fake clock here.
            default_username: Placeholder username used after a reset.
        """
        self._default_state = (
            AppState.initial(default_username) if default_username else AppState.initial()
        )
        if initial_state is None:
            initial_state = self._default_state
        self._state = initial_state.model_copy(deep=True)
        self._ids = id_factory or TimestampIdFactory()
        self._listeners: list[Listener] = []
        self._handlers: dict[type, Callable[[AppState, Mutation], MutationResult]] = {
            AddIncome: self._add_income,
            EditIncome: self._edit_income,
            DeleteIncome: self._delete_income,
            AddExpense: self._add_expense,
            EditExpense: self._edit_expense,
            DeleteExpense: self._delete_expense,
            ToggleExpensePaid: self._toggle_expense_paid,
            AddGoal: self._add_goal,
            ContributeToGoal: self._contribute_to_goal,
            DeleteGoal: self._delete_goal,
            UpdateUsername: self._update_username,
            SaveCustomColors: self._save_custom_colors,
            ResetState: self._reset,
        }

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    def get_state(self) -> AppState:
        """Snapshot of the current state; changing it does not affect the store."""
        return self._state.model_copy(deep=True)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register a listener called after every applied mutation.

        Returns a function that removes the listener.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def dispatch(self, mutation: Mutation) -> MutationResult:
        """Apply a mutation and notify subscribers."""
        handler = self._handlers.get(type(mutation))
        if handler is None:
            raise TypeError(f"Unsupported mutation: {type(mutation).__name__}")

        draft = self._state.model_copy(deep=True)
        result = handler(draft, mutation)

        if not result.applied:
            logger.debug(
                "mutation_skipped",
                mutation=type(mutation).__name__,
                message=result.message,
            )
            return result

        self._state = draft
        self._notify(mutation, result)
        return result

    def replace_state(self, state: AppState) -> None:
        """Hydrate the store (after loading); subscribers are not called."""
        self._state = state.model_copy(deep=True)

    def color_for(self, category: str, is_revenue: bool) -> str:
        """
        Display color of a category.

        New entries land in the live cache and are persisted with the
        next saved mutation.
        """
        return color_for(category, is_revenue, self._state.color_cache)

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _notify(self, mutation: Mutation, result: MutationResult) -> None:
        snapshot = self.get_state()
        for listener in list(self._listeners):
            try:
                listener(snapshot, mutation, result)
            except Exception as e:
                # A broken subscriber must not undo an applied mutation
                logger.error(
                    "listener_failed",
                    listener=getattr(listener, "__qualname__", repr(listener)),
                    mutation=type(mutation).__name__,
                    error=str(e),
                )

    def _add_income(self, state: AppState, m: AddIncome) -> MutationResult:
        entry = IncomeEntry(
            id=self._ids(),
            name=m.name,
            category=m.category,
            amount=m.amount,
            date=m.date,
        )
        state.income_list.append(entry)
        return MutationResult(
            applied=True,
            message="Ganho adicionado!",
            created_ids=[entry.id],
            affected_ids=[entry.id],
        )

    def _edit_income(self, state: AppState, m: EditIncome) -> MutationResult:
        for index, entry in enumerate(state.income_list):
            if entry.id == m.income_id:
                state.income_list[index] = IncomeEntry(
                    id=entry.id,
                    name=m.name,
                    category=m.category,
                    amount=m.amount,
                    date=m.date,
                )
                return MutationResult(
                    applied=True,
                    message="Ganho atualizado!",
                    affected_ids=[entry.id],
                )
        return MutationResult.not_found(m.income_id)

    def _delete_income(self, state: AppState, m: DeleteIncome) -> MutationResult:
        remaining = [e for e in state.income_list if e.id != m.income_id]
        if len(remaining) == len(state.income_list):
            return MutationResult.not_found(m.income_id)
        state.income_list = remaining
        return MutationResult(
            applied=True,
            message="Ganho excluído.",
            affected_ids=[m.income_id],
        )

    def _add_expense(self, state: AppState, m: AddExpense) -> MutationResult:
        base_id = self._ids.next_base()
        new_entries: list[ExpenseEntry] = []

        if m.recurrence == Recurrence.MONTHLY:
            for i in range(MONTHLY_EXPANSION_COUNT):
                new_entries.append(ExpenseEntry(
                    id=f"{base_id}-{i}",
                    name=m.name,
                    category=m.category,
                    amount=m.amount,
                    due_date=add_months(m.due_date, i),
                    paid=False,
                    recurrence=m.recurrence,
                    alarm_offsets=list(m.alarm_offsets),
                ))
            message = "Despesa mensal adicionada para o próximo ano."
        else:
            new_entries.append(ExpenseEntry(
                id=str(base_id),
                name=m.name,
                category=m.category,
                amount=m.amount,
                due_date=m.due_date,
                paid=m.paid,
                recurrence=m.recurrence,
                alarm_offsets=list(m.alarm_offsets),
            ))
            message = "Despesa adicionada!"

        state.expense_list = _sort_expenses(state.expense_list + new_entries)
        ids = [entry.id for entry in new_entries]
        return MutationResult(
            applied=True,
            message=message,
            created_ids=ids,
            affected_ids=ids,
        )

    def _edit_expense(self, state: AppState, m: EditExpense) -> MutationResult:
        if state.find_expense(m.expense_id) is None:
            return MutationResult.not_found(m.expense_id)

        updated = ExpenseEntry(
            id=m.expense_id,
            name=m.name,
            category=m.category,
            amount=m.amount,
            due_date=m.due_date,
            paid=m.paid,
            recurrence=m.recurrence,
            alarm_offsets=list(m.alarm_offsets),
        )
        state.expense_list = _sort_expenses([
            updated if e.id == m.expense_id else e
            for e in state.expense_list
        ])
        return MutationResult(
            applied=True,
            message="Despesa atualizada!",
            affected_ids=[m.expense_id],
        )

    def _delete_expense(self, state: AppState, m: DeleteExpense) -> MutationResult:
        remaining = [e for e in state.expense_list if e.id != m.expense_id]
        if len(remaining) == len(state.expense_list):
            return MutationResult.not_found(m.expense_id)
        state.expense_list = remaining
        return MutationResult(
            applied=True,
            message="Despesa excluída.",
            affected_ids=[m.expense_id],
        )

    def _toggle_expense_paid(self, state: AppState, m: ToggleExpensePaid) -> MutationResult:
        expense = state.find_expense(m.expense_id)
        if expense is None:
            return MutationResult.not_found(m.expense_id)

        expense.paid = not expense.paid
        return MutationResult(
            applied=True,
            message="Conta marcada como paga!" if expense.paid else "Pagamento desmarcado.",
            affected_ids=[expense.id],
        )

    def _add_goal(self, state: AppState, m: AddGoal) -> MutationResult:
        goal = Goal.plan(
            goal_id=self._ids(),
            name=m.name,
            target_value=m.target_value,
            duration=m.duration,
            unit=m.unit,
        )
        state.goal_list.append(goal)
        return MutationResult(
            applied=True,
            message=f'Meta "{goal.name}" criada!',
            created_ids=[goal.id],
            affected_ids=[goal.id],
        )

    def _contribute_to_goal(self, state: AppState, m: ContributeToGoal) -> MutationResult:
        goal = state.find_goal(m.goal_id)
        if goal is None:
            return MutationResult.not_found(m.goal_id)

        was_reached = goal.is_reached
        goal.saved_amount = min(goal.saved_amount + m.value, goal.target_value)
        reached_now = goal.is_reached and not was_reached

        message = f'Valor adicionado à meta "{goal.name}"'
        if reached_now:
            message = f'Parabéns! Meta "{goal.name}" atingida!'

        return MutationResult(
            applied=True,
            message=message,
            affected_ids=[goal.id],
            goal_reached=reached_now,
        )

    def _delete_goal(self, state: AppState, m: DeleteGoal) -> MutationResult:
        remaining = [g for g in state.goal_list if g.id != m.goal_id]
        if len(remaining) == len(state.goal_list):
            return MutationResult.not_found(m.goal_id)
        state.goal_list = remaining
        return MutationResult(
            applied=True,
            message="Meta excluída.",
            affected_ids=[m.goal_id],
        )

    def _update_username(self, state: AppState, m: UpdateUsername) -> MutationResult:
        state.user.username = m.username
        return MutationResult(applied=True, message="Nome de usuário atualizado!")

    def _save_custom_colors(self, state: AppState, m: SaveCustomColors) -> MutationResult:
        set_custom_colors(
            state.color_cache,
            [(item.category, item.color) for item in m.colors],
        )
        return MutationResult(
            applied=True,
            message="Cores personalizadas salvas!",
            affected_ids=[item.category.lower() for item in m.colors],
        )

    def _reset(self, state: AppState, m: ResetState) -> MutationResult:
        fresh = self._default_state.model_copy(deep=True)
        state.income_list = fresh.income_list
        state.expense_list = fresh.expense_list
        state.goal_list = fresh.goal_list
        state.user = fresh.user
        state.color_cache = fresh.color_cache
        return MutationResult(
            applied=True,
            message="Todos os dados foram apagados.",
        )
