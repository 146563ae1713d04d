"""Tests for loading, saving, resetting and exporting state."""

import json
from datetime import date
from decimal import Decimal

from conftest import make_expense, make_income
from meu_saldo.models import AppState, ColorCacheEntry, DurationUnit, Goal, UserProfile
from meu_saldo.services.storage import (
    FileLocalStorage,
    InMemoryLocalStorage,
    StorageReadError,
    StorageWriteError,
)
from meu_saldo.state import (
    COLOR_KEY,
    DATA_KEY,
    ResetState,
    StatePersister,
    Store,
    UpdateUsername,
    backup_filename,
    export_backup,
    load_state,
)
from meu_saldo.state.persistence import LOAD_COLORS_WARNING, LOAD_DATA_WARNING, SAVE_WARNING


def sample_state():
    return AppState(
        income_list=[make_income()],
        expense_list=[make_expense(offsets=[1, 3])],
        goal_list=[Goal.plan("g1", "Viagem", Decimal("600"), Decimal("6"), DurationUnit.MONTHS)],
        user=UserProfile(username="Ana"),
        color_cache={"moradia": ColorCacheEntry(color="hsl(12, 70%, 50%)")},
    )


class FailingWrites(InMemoryLocalStorage):
    """Storage whose writes always fail."""

    def set_item(self, key, value):
        raise StorageWriteError("quota exceeded")

    def remove_item(self, key):
        raise StorageWriteError("quota exceeded")


class FailingReads(InMemoryLocalStorage):
    def get_item(self, key):
        raise StorageReadError("unavailable")


class TestLoadState:
    """Tests for building the initial state from storage."""

    def test_empty_storage_gives_defaults(self, storage):
        result = load_state(storage)
        assert result.warnings == []
        assert result.state.income_list == []
        assert result.state.user.username == "Usuário"

    def test_round_trip(self, storage):
        """What the persister writes, load_state reads back."""
        state = sample_state()
        assert StatePersister(storage).save(state) is True
        loaded = load_state(storage)
        assert loaded.warnings == []
        assert loaded.state == state

    def test_stored_layout_uses_camel_case(self, storage):
        StatePersister(storage).save(sample_state())
        data = json.loads(storage.get_item(DATA_KEY))
        assert set(data) == {"incomeList", "expenseList", "goalList", "username"}
        assert data["expenseList"][0]["dueDate"] == "2025-01-20"
        assert data["goalList"][0]["monthlyCommitment"] == 100.0
        colors = json.loads(storage.get_item(COLOR_KEY))
        assert colors == {"moradia": {"color": "hsl(12, 70%, 50%)", "isCustomOverride": False}}

    def test_missing_fields_default(self, storage):
        storage.set_item(DATA_KEY, json.dumps({"incomeList": []}))
        result = load_state(storage, default_username="Visitante")
        assert result.warnings == []
        assert result.state.expense_list == []
        assert result.state.user.username == "Visitante"

    def test_expense_without_optional_fields(self, storage):
        storage.set_item(DATA_KEY, json.dumps({
            "expenseList": [{"id": "1", "name": "Luz", "amount": 80, "dueDate": "2025-01-05"}],
        }))
        expense = load_state(storage).state.expense_list[0]
        assert expense.paid is False
        assert expense.alarm_offsets == []

    def test_malformed_data_keeps_colors(self, storage):
        """A corrupt data key is reported; the color key still loads."""
        storage.set_item(DATA_KEY, "{not json")
        storage.set_item(COLOR_KEY, json.dumps({"lazer": {"color": "hsl(30, 70%, 50%)"}}))
        result = load_state(storage)
        assert result.warnings == [LOAD_DATA_WARNING]
        assert result.state.income_list == []
        assert result.state.color_cache["lazer"].color == "hsl(30, 70%, 50%)"

    def test_malformed_colors_keep_data(self, storage):
        StatePersister(storage).save(sample_state())
        storage.set_item(COLOR_KEY, "[1, 2")
        result = load_state(storage)
        assert result.warnings == [LOAD_COLORS_WARNING]
        assert result.state.user.username == "Ana"
        assert result.state.color_cache == {}

    def test_invalid_records_fall_back(self, storage):
        """Valid JSON with an impossible goal is treated like a corrupt key."""
        storage.set_item(DATA_KEY, json.dumps({
            "goalList": [{
                "id": "g1", "name": "X", "targetValue": 100, "savedAmount": 150,
                "monthsInPlan": 1, "monthlyCommitment": 100,
            }],
        }))
        result = load_state(storage)
        assert result.warnings == [LOAD_DATA_WARNING]
        assert result.state.goal_list == []

    def test_unreadable_storage(self):
        result = load_state(FailingReads())
        assert result.warnings == [LOAD_DATA_WARNING, LOAD_COLORS_WARNING]
        assert result.state.income_list == []


class TestStatePersister:
    """Tests for the save-after-mutation subscriber."""

    def test_saves_after_every_mutation(self, store, storage):
        store.subscribe(StatePersister(storage))
        store.dispatch(UpdateUsername(username="Bia"))
        assert json.loads(storage.get_item(DATA_KEY))["username"] == "Bia"

    def test_write_failure_warns_and_keeps_state(self, store):
        warnings = []
        store.subscribe(StatePersister(FailingWrites(), on_warning=warnings.append))
        result = store.dispatch(UpdateUsername(username="Bia"))
        assert result.applied is True
        assert store.get_state().user.username == "Bia"
        assert warnings == [SAVE_WARNING]

    def test_save_returns_false_on_failure(self):
        assert StatePersister(FailingWrites()).save(sample_state()) is False

    def test_reset_removes_keys(self, storage):
        persister = StatePersister(storage)
        store = Store(initial_state=sample_state())
        store.subscribe(persister)
        persister.save(store.get_state())
        store.dispatch(ResetState())
        assert storage.get_item(DATA_KEY) is None
        assert storage.get_item(COLOR_KEY) is None

    def test_custom_keys(self, storage):
        StatePersister(storage, data_key="d", color_key="c").save(sample_state())
        assert set(storage.keys()) == {"d", "c"}
        assert load_state(storage, data_key="d", color_key="c").state.user.username == "Ana"

    def test_file_storage_round_trip(self, tmp_path):
        storage = FileLocalStorage(tmp_path / "dados")
        StatePersister(storage).save(sample_state())
        assert (tmp_path / "dados" / f"{DATA_KEY}.json").exists()
        assert load_state(storage).state == sample_state()


class TestBackup:
    """Tests for backup export."""

    def test_export_contains_everything(self):
        document = json.loads(export_backup(sample_state()))
        assert set(document) == {"incomeList", "expenseList", "goalList", "username", "colorCache"}
        assert document["colorCache"]["moradia"]["color"] == "hsl(12, 70%, 50%)"

    def test_export_is_pretty_printed(self):
        assert "\n  " in export_backup(AppState.initial())

    def test_export_keeps_accents(self):
        assert "Usuário" in export_backup(AppState.initial())

    def test_backup_filename(self):
        assert backup_filename(date(2025, 3, 7)) == "meu-saldo-backup-2025-03-07.json"
