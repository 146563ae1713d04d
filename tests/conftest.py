"""Shared fixtures for the Meu Saldo test suite."""

from datetime import date
from decimal import Decimal

import pytest

from meu_saldo.models import ExpenseEntry, IncomeEntry
from meu_saldo.services.storage import InMemoryLocalStorage
from meu_saldo.state import Store, TimestampIdFactory


FIXED_EPOCH = 1736942400.0  # 2025-01-15T12:00:00Z


@pytest.fixture
def id_factory():
    return TimestampIdFactory(clock=lambda: FIXED_EPOCH)


@pytest.fixture
def store(id_factory):
    return Store(id_factory=id_factory)


@pytest.fixture
def storage():
    return InMemoryLocalStorage()


def make_income(entry_id="i1", amount="100", on=date(2025, 1, 10), category="Salário", name="Salário"):
    return IncomeEntry(
        id=entry_id,
        name=name,
        category=category,
        amount=Decimal(amount),
        date=on,
    )


def make_expense(
    entry_id="e1",
    amount="30",
    due=date(2025, 1, 20),
    paid=False,
    category="Moradia",
    name="Aluguel",
    offsets=(),
):
    return ExpenseEntry(
        id=entry_id,
        name=name,
        category=category,
        amount=Decimal(amount),
        due_date=due,
        paid=paid,
        alarm_offsets=list(offsets),
    )
