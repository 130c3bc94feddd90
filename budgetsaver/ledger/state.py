"""
Ledger State

An explicit, immutable container for the four entity collections, and
the pure transitions that produce a new state from an old one.

DESIGN DECISION: Every mutation is a function (state, ...) -> state.
Nothing here touches storage; the session layer decides what to persist.

Cascade rules:
- Deleting a budget or an account deletes the transactions that reference it.
- Schedules referencing a deleted budget or account are left in place (orphaned).
- Deleting a schedule keeps the transactions it already generated.
"""

from collections.abc import Callable
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from budgetsaver.models.entities import (
    Account,
    Budget,
    RecurringTransaction,
    Transaction,
)
from budgetsaver.models.results import MaterializationResult


class LedgerState(BaseModel):
    """Snapshot of every collection the app stores."""
    
    model_config = ConfigDict(frozen=True)
    
    accounts: tuple[Account, ...] = ()
    budgets: tuple[Budget, ...] = ()
    transactions: tuple[Transaction, ...] = ()
    recurring_transactions: tuple[RecurringTransaction, ...] = ()
    # Stored schedule records that failed to parse, kept verbatim so
    # saving the schedules collection never drops them
    unreadable_schedules: tuple[dict[str, Any], ...] = ()
    
    @property
    def transaction_ids(self) -> set[str]:
        return {t.id for t in self.transactions}
    
    def find_budget(self, budget_id: str) -> Optional[Budget]:
        return next((b for b in self.budgets if b.id == budget_id), None)
    
    def find_account(self, account_id: str) -> Optional[Account]:
        return next((a for a in self.accounts if a.id == account_id), None)


class DeletionReport(BaseModel):
    """What a delete removed, for logging."""
    
    entity_type: str
    entity_id: str
    found: bool
    cascaded_transactions: int = 0
    orphaned_schedules: list[str] = Field(default_factory=list)
    
    @property
    def changed(self) -> bool:
        """Whether the delete removed anything at all."""
        return self.found or self.cascaded_transactions > 0


def _without(items: tuple, predicate: Callable) -> tuple:
    return tuple(item for item in items if not predicate(item))


# =============================================================================
# ACCOUNTS
# =============================================================================

def add_account(state: LedgerState, account: Account) -> LedgerState:
    return state.model_copy(update={"accounts": state.accounts + (account,)})


def delete_account(
    state: LedgerState,
    account_id: str,
) -> tuple[LedgerState, DeletionReport]:
    """Delete an account and every transaction paid from it."""
    transactions = _without(state.transactions, lambda t: t.account_id == account_id)
    report = DeletionReport(
        entity_type="account",
        entity_id=account_id,
        found=state.find_account(account_id) is not None,
        cascaded_transactions=len(state.transactions) - len(transactions),
        orphaned_schedules=[
            s.id for s in state.recurring_transactions if s.account_id == account_id
        ],
    )
    new_state = state.model_copy(update={
        "accounts": _without(state.accounts, lambda a: a.id == account_id),
        "transactions": transactions,
    })
    return new_state, report


# =============================================================================
# BUDGETS
# =============================================================================

def add_budget(state: LedgerState, budget: Budget) -> LedgerState:
    return state.model_copy(update={"budgets": state.budgets + (budget,)})


def delete_budget(
    state: LedgerState,
    budget_id: str,
) -> tuple[LedgerState, DeletionReport]:
    """Delete a budget and every transaction filed under it."""
    transactions = _without(state.transactions, lambda t: t.budget_id == budget_id)
    report = DeletionReport(
        entity_type="budget",
        entity_id=budget_id,
        found=state.find_budget(budget_id) is not None,
        cascaded_transactions=len(state.transactions) - len(transactions),
        orphaned_schedules=[
            s.id for s in state.recurring_transactions if s.budget_id == budget_id
        ],
    )
    new_state = state.model_copy(update={
        "budgets": _without(state.budgets, lambda b: b.id == budget_id),
        "transactions": transactions,
    })
    return new_state, report


# =============================================================================
# TRANSACTIONS
# =============================================================================

def add_transaction(state: LedgerState, transaction: Transaction) -> LedgerState:
    return state.model_copy(
        update={"transactions": state.transactions + (transaction,)}
    )


def delete_transaction(
    state: LedgerState,
    transaction_id: str,
) -> tuple[LedgerState, DeletionReport]:
    transactions = _without(state.transactions, lambda t: t.id == transaction_id)
    report = DeletionReport(
        entity_type="transaction",
        entity_id=transaction_id,
        found=len(transactions) != len(state.transactions),
    )
    return state.model_copy(update={"transactions": transactions}), report


# =============================================================================
# RECURRING SCHEDULES
# =============================================================================

def add_recurring_transaction(
    state: LedgerState,
    schedule: RecurringTransaction,
) -> LedgerState:
    return state.model_copy(update={
        "recurring_transactions": state.recurring_transactions + (schedule,)
    })


def delete_recurring_transaction(
    state: LedgerState,
    schedule_id: str,
) -> tuple[LedgerState, DeletionReport]:
    schedules = _without(state.recurring_transactions, lambda s: s.id == schedule_id)
    unreadable = _without(
        state.unreadable_schedules,
        lambda record: record.get("id") == schedule_id,
    )
    report = DeletionReport(
        entity_type="recurring_transaction",
        entity_id=schedule_id,
        found=(
            len(schedules) != len(state.recurring_transactions)
            or len(unreadable) != len(state.unreadable_schedules)
        ),
    )
    new_state = state.model_copy(update={
        "recurring_transactions": schedules,
        "unreadable_schedules": unreadable,
    })
    return new_state, report


def apply_materialization(
    state: LedgerState,
    result: MaterializationResult,
) -> LedgerState:
    """
    Merge a materialization pass into the state.
    
    New transactions are appended unless their id is already present.
    Schedules are replaced by id; schedules deleted since the pass was
    computed stay deleted.
    """
    existing = state.transaction_ids
    fresh = tuple(t for t in result.new_transactions if t.id not in existing)
    
    updated = {s.id: s for s in result.updated_schedules}
    schedules = tuple(updated.get(s.id, s) for s in state.recurring_transactions)
    
    return state.model_copy(update={
        "transactions": state.transactions + fresh,
        "recurring_transactions": schedules,
    })
