"""Shared fixtures for the BudgetSaver test suite."""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from budgetsaver.config import StorageSettings
from budgetsaver.ledger import LedgerState
from budgetsaver.models import (
    Account,
    Budget,
    RecurringTransaction,
    Transaction,
)
from budgetsaver.services.storage import (
    InMemoryRecordStore,
    JsonFileRecordStore,
    LedgerRepository,
)


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


@pytest.fixture
def now() -> datetime:
    return utc(2024, 4, 1)


@pytest.fixture
def storage_settings() -> StorageSettings:
    return StorageSettings()


@pytest.fixture
def memory_store() -> InMemoryRecordStore:
    return InMemoryRecordStore()


@pytest.fixture
def json_store(tmp_path) -> JsonFileRecordStore:
    return JsonFileRecordStore(tmp_path / "data")


@pytest.fixture
def repository(memory_store, storage_settings) -> LedgerRepository:
    return LedgerRepository(memory_store, storage_settings)


@pytest.fixture
def account() -> Account:
    return Account(id="acc-1", name="Main UPI")


@pytest.fixture
def budget() -> Budget:
    return Budget(id="bud-1", name="Groceries", limit=Decimal("5000"), color="#0088FE")


@pytest.fixture
def make_schedule():
    """Factory for schedules; keyword overrides win."""
    def _make(**overrides) -> RecurringTransaction:
        fields = dict(
            id="rt-1",
            description="Rent",
            amount=Decimal("1200"),
            budget_id="bud-1",
            account_id="acc-1",
            frequency="monthly",
            start_date=utc(2024, 1, 15),
        )
        fields.update(overrides)
        return RecurringTransaction(**fields)
    return _make


@pytest.fixture
def make_transaction():
    def _make(**overrides) -> Transaction:
        fields = dict(
            id="tx-1",
            description="Coffee",
            amount=Decimal("250"),
            date=utc(2024, 3, 1),
            budget_id="bud-1",
            account_id="acc-1",
        )
        fields.update(overrides)
        return Transaction(**fields)
    return _make


@pytest.fixture
def populated_state(account, budget, make_schedule, make_transaction) -> LedgerState:
    return LedgerState(
        accounts=(account,),
        budgets=(budget,),
        transactions=(
            make_transaction(id="tx-1"),
            make_transaction(id="tx-2", amount=Decimal("100")),
        ),
        recurring_transactions=(make_schedule(),),
    )
