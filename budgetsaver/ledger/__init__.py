"""Ledger state container and its transitions."""

from budgetsaver.ledger.state import (
    DeletionReport,
    LedgerState,
    add_account,
    add_budget,
    add_recurring_transaction,
    add_transaction,
    apply_materialization,
    delete_account,
    delete_budget,
    delete_recurring_transaction,
    delete_transaction,
)

__all__ = [
    "DeletionReport",
    "LedgerState",
    "add_account",
    "add_budget",
    "add_recurring_transaction",
    "add_transaction",
    "apply_materialization",
    "delete_account",
    "delete_budget",
    "delete_recurring_transaction",
    "delete_transaction",
]
