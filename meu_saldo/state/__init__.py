"""
State Package

The Store, its mutation types and the persistence subscriber.
"""

from meu_saldo.state.mutations import (
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
    Mutation,
    MutationResult,
    ResetState,
    SaveCustomColors,
    ToggleExpensePaid,
    UpdateUsername,
)
from meu_saldo.state.store import Store, TimestampIdFactory
from meu_saldo.state.persistence import (
    COLOR_KEY,
    DATA_KEY,
    LoadResult,
    StatePersister,
    backup_filename,
    export_backup,
    load_state,
)

__all__ = [
    # Mutations
    "AddExpense",
    "AddGoal",
    "AddIncome",
    "ContributeToGoal",
    "CustomColor",
    "DeleteExpense",
    "DeleteGoal",
    "DeleteIncome",
    "EditExpense",
    "EditIncome",
    "Mutation",
    "MutationResult",
    "ResetState",
    "SaveCustomColors",
    "ToggleExpensePaid",
    "UpdateUsername",
    # Store
    "Store",
    "TimestampIdFactory",
    # Persistence
    "COLOR_KEY",
    "DATA_KEY",
    "LoadResult",
    "StatePersister",
    "backup_filename",
    "export_backup",
    "load_state",
]
