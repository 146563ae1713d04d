"""
State Persistence

Load-on-start, save-after-every-mutation, reset and backup export.

The state is split across two storage keys:
- data key: {incomeList, expenseList, goalList, username}
- color key: the category color cache

DESIGN DECISION: The two keys are read independently.
A corrupted color cache must not cost the user their transactions, so a
bad key falls back to defaults on its own and produces a warning instead
of an exception.

Writes always re-serialize the whole state. There is no diffing and no
retry: a failed write leaves the in-memory state correct and the user is
warned.
"""

import json
from datetime import date
from typing import TYPE_CHECKING, Callable, Optional

import structlog
from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from meu_saldo.models.audit import AuditEventBuilder
from meu_saldo.models.records import (
    DEFAULT_USERNAME,
    AppState,
    ColorCache,
    ExpenseEntry,
    Goal,
    IncomeEntry,
    UserProfile,
)
from meu_saldo.services.storage import LocalStorageInterface, StorageError
from meu_saldo.state.mutations import Mutation, MutationResult, ResetState

if TYPE_CHECKING:
    from meu_saldo.audit.logger import AuditLogger


DATA_KEY = "meuSaldoData"
COLOR_KEY = "meuSaldoColors"

LOAD_DATA_WARNING = "Não foi possível carregar seus dados."
LOAD_COLORS_WARNING = "Não foi possível carregar as cores das categorias."
SAVE_WARNING = "Não foi possível salvar seus dados."

logger = structlog.get_logger(__name__)

_color_cache_adapter = TypeAdapter(ColorCache)


class StoredData(BaseModel):
    """Document under the data key."""

    income_list: list[IncomeEntry] = Field(
        default_factory=list,
        alias="incomeList",
    )
    expense_list: list[ExpenseEntry] = Field(
        default_factory=list,
        alias="expenseList",
    )
    goal_list: list[Goal] = Field(
        default_factory=list,
        alias="goalList",
    )
    username: Optional[str] = None


class LoadResult(BaseModel):
    """State read from storage plus any user-visible warnings."""

    state: AppState
    warnings: list[str] = Field(default_factory=list)


def _read_key(
    storage: LocalStorageInterface,
    key: str,
    audit_logger: Optional['AuditLogger'],
) -> tuple[Optional[object], Optional[str]]:
    """Return (parsed JSON or None, error message or None)."""
    try:
        raw = storage.get_item(key)
        if raw is None:
            return None, None
        return json.loads(raw), None
    except (StorageError, ValueError) as e:
        logger.warning("storage_read_failed", key=key, error=str(e))
        if audit_logger:
            audit_logger.log(AuditEventBuilder.storage_read_failed(key, str(e)))
        return None, str(e)


def load_state(
    storage: LocalStorageInterface,
    data_key: str = DATA_KEY,
    color_key: str = COLOR_KEY,
    default_username: str = DEFAULT_USERNAME,
    audit_logger: Optional['AuditLogger'] = None,
) -> LoadResult:
    """
    Build the initial state from storage.

    Never raises: unreadable or invalid keys fall back to defaults.
    """
    state = AppState.initial(default_username)
    warnings: list[str] = []

    document, error = _read_key(storage, data_key, audit_logger)
    if error:
        warnings.append(LOAD_DATA_WARNING)
    elif document is not None:
        try:
            stored = StoredData.model_validate(document)
            state.income_list = stored.income_list
            state.expense_list = stored.expense_list
            state.goal_list = stored.goal_list
            state.user = UserProfile(username=stored.username or default_username)
        except ValidationError as e:
            logger.warning("stored_data_invalid", key=data_key, errors=e.error_count())
            if audit_logger:
                audit_logger.log(AuditEventBuilder.storage_read_failed(data_key, str(e)))
            warnings.append(LOAD_DATA_WARNING)

    colors, error = _read_key(storage, color_key, audit_logger)
    if error:
        warnings.append(LOAD_COLORS_WARNING)
    elif colors is not None:
        try:
            state.color_cache = _color_cache_adapter.validate_python(colors)
        except ValidationError as e:
            logger.warning("stored_colors_invalid", key=color_key, errors=e.error_count())
            if audit_logger:
                audit_logger.log(AuditEventBuilder.storage_read_failed(color_key, str(e)))
            warnings.append(LOAD_COLORS_WARNING)

    if audit_logger:
        audit_logger.log(AuditEventBuilder.state_loaded(
            income_count=len(state.income_list),
            expense_count=len(state.expense_list),
            goal_count=len(state.goal_list),
            warnings=warnings,
        ))

    return LoadResult(state=state, warnings=warnings)


class StatePersister:
    """
    Store subscriber that writes the whole state after every mutation.

    Usage:
        persister = StatePersister(storage, on_warning=show_toast)
        store.subscribe(persister)
    """

    def __init__(
        self,
        storage: LocalStorageInterface,
        data_key: str = DATA_KEY,
        color_key: str = COLOR_KEY,
        on_warning: Optional[Callable[[str], None]] = None,
        audit_logger: Optional['AuditLogger'] = None,
    ):
        self._storage = storage
        self._data_key = data_key
        self._color_key = color_key
        self._on_warning = on_warning
        self._audit = audit_logger

    def __call__(self, state: AppState, mutation: Mutation, result: MutationResult) -> None:
        if isinstance(mutation, ResetState):
            self.clear()
        else:
            self.save(state)

    def save(self, state: AppState) -> bool:
        """Write both keys. Returns False (and warns) if any write failed."""
        writes = (
            (self._data_key, state.data_document()),
            (self._color_key, state.color_document()),
        )
        ok = True
        for key, document in writes:
            try:
                self._storage.set_item(key, json.dumps(document, ensure_ascii=False))
            except StorageError as e:
                ok = False
                self._write_failed(key, e)
        if not ok:
            self._warn(SAVE_WARNING)
        return ok

    def clear(self) -> None:
        """Remove both keys from storage."""
        for key in (self._data_key, self._color_key):
            try:
                self._storage.remove_item(key)
            except StorageError as e:
                self._write_failed(key, e)
                self._warn(SAVE_WARNING)

    def _write_failed(self, key: str, error: Exception) -> None:
        logger.error("storage_write_failed", key=key, error=str(error))
        if self._audit:
            self._audit.log(AuditEventBuilder.storage_write_failed(key, str(error)))

    def _warn(self, message: str) -> None:
        if self._on_warning:
            self._on_warning(message)


def export_backup(state: AppState) -> str:
    """
    Serialize the whole state for download.

    Pretty-printed JSON with incomeList, expenseList, goalList, username
    and colorCache.
    """
    document = state.data_document()
    document["colorCache"] = state.color_document()
    return json.dumps(document, indent=2, ensure_ascii=False)


def backup_filename(today: date) -> str:
    return f"meu-saldo-backup-{today.isoformat()}.json"
