"""
Data Models Package

This package contains all Pydantic models used in BudgetSaver.
All data flowing through the system must conform to these schemas.
"""

from budgetsaver.models.entities import (
    Account,
    AccountCreate,
    Budget,
    BudgetCreate,
    EnteredMoney,
    Frequency,
    Instant,
    LedgerRecord,
    Money,
    RecurringTransaction,
    RecurringTransactionCreate,
    Transaction,
    TransactionCreate,
    new_entity_id,
)
from budgetsaver.models.results import (
    MaterializationResult,
    ScheduleIssue,
    ScheduleIssueKind,
    ValidationIssue,
    ValidationResult,
)

__all__ = [
    # Entities
    "Account",
    "Budget",
    "EnteredMoney",
    "Frequency",
    "Instant",
    "LedgerRecord",
    "Money",
    "RecurringTransaction",
    "Transaction",
    "new_entity_id",
    # Creation payloads
    "AccountCreate",
    "BudgetCreate",
    "RecurringTransactionCreate",
    "TransactionCreate",
    # Results
    "MaterializationResult",
    "ScheduleIssue",
    "ScheduleIssueKind",
    "ValidationIssue",
    "ValidationResult",
]
