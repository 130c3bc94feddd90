"""
Core Data Models for BudgetSaver

These models define the strict schemas for every record the ledger stores.
They are designed to:
1. Enforce type safety at runtime
2. Round-trip losslessly through the record store
3. Keep absent optional fields absent (never "" or 0)

DESIGN DECISION: Field names follow the stored record shape (camelCase)
through aliases, while Python code uses snake_case attributes. Records
written by earlier versions of the app load without migration.
"""

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Annotated, Any, Optional
from uuid import uuid4

from pydantic import (
    AfterValidator,
    BaseModel,
    ConfigDict,
    Field,
    PlainSerializer,
    model_validator,
)


def _as_utc(value: datetime) -> datetime:
    # Naive instants are taken to be UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


Instant = Annotated[datetime, AfterValidator(_as_utc)]

# Stored as a plain JSON number
Money = Annotated[
    Decimal,
    Field(ge=0),
    PlainSerializer(float, return_type=float, when_used="json"),
]

# Entered amounts are held to what a JSON number carries exactly:
# 15 significant digits, 2 of them after the point.
EnteredMoney = Annotated[
    Decimal,
    Field(ge=0, max_digits=15, decimal_places=2),
    PlainSerializer(float, return_type=float, when_used="json"),
]


def new_entity_id() -> str:
    """Generate an id for a user-created entity."""
    return str(uuid4())


# =============================================================================
# ENUMS
# =============================================================================

class Frequency(str, Enum):
    """How often a recurring transaction falls due."""
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


# =============================================================================
# STORED ENTITIES
# =============================================================================

class LedgerRecord(BaseModel):
    """
    Base class for everything persisted in a collection.
    
    Stored text is taken as-is: no stripping and no length limits.
    Those rules belong to the creation payloads below.
    """
    
    model_config = ConfigDict(
        populate_by_name=True,
        frozen=True,
    )
    
    id: str
    
    def to_record(self) -> dict[str, Any]:
        """Serialize to the stored record shape."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
    
    @classmethod
    def from_record(cls, record: dict[str, Any]):
        """Parse a stored record."""
        return cls.model_validate(record)


class Account(LedgerRecord):
    """A place money is paid from (e.g. 'Main UPI', 'Savings Account')."""
    
    name: str


class Budget(LedgerRecord):
    """A spending category with a limit."""
    
    name: str
    limit: Money
    color: str


class Transaction(LedgerRecord):
    """
    A concrete ledger entry.
    
    Immutable once created. When recurring_transaction_id is set the
    transaction was materialized from that schedule.
    """
    
    description: str
    amount: Money
    date: Instant
    budget_id: str = Field(..., alias="budgetId")
    account_id: str = Field(..., alias="accountId")
    recurring_transaction_id: Optional[str] = Field(
        default=None,
        alias="recurringTransactionId",
    )


class RecurringTransaction(LedgerRecord):
    """
    A schedule that produces one transaction per occurrence.
    
    CRITICAL: last_generated_date is the materialization checkpoint.
    Only the materialization engine moves it.
    
    frequency is kept as the stored string rather than a Frequency so a
    corrupt record still loads and can be reported instead of
    failing the whole collection.
    """
    
    description: str
    amount: Money
    budget_id: str = Field(..., alias="budgetId")
    account_id: str = Field(..., alias="accountId")
    frequency: str
    start_date: Instant = Field(..., alias="startDate")
    end_date: Optional[Instant] = Field(default=None, alias="endDate")
    last_generated_date: Optional[Instant] = Field(
        default=None,
        alias="lastGeneratedDate",
    )
    
    @property
    def cadence(self) -> Optional[Frequency]:
        """The parsed frequency, or None when the stored value is unknown."""
        try:
            return Frequency(self.frequency)
        except ValueError:
            return None


# =============================================================================
# CREATION PAYLOADS
# =============================================================================

class CreatePayload(BaseModel):
    """Validated user input for a new entity (no id yet)."""
    
    model_config = ConfigDict(
        populate_by_name=True,
        str_strip_whitespace=True,
    )


class AccountCreate(CreatePayload):
    name: str = Field(..., min_length=1, max_length=200)
    
    def with_id(self, entity_id: str) -> Account:
        return Account(id=entity_id, name=self.name)


class BudgetCreate(CreatePayload):
    name: str = Field(..., min_length=1, max_length=200)
    limit: EnteredMoney
    color: str = Field(default="#0088FE", pattern=r"^#[0-9a-fA-F]{6}$")
    
    def with_id(self, entity_id: str) -> Budget:
        return Budget(id=entity_id, name=self.name, limit=self.limit, color=self.color)


class TransactionCreate(CreatePayload):
    description: str = Field(..., min_length=1, max_length=500)
    amount: EnteredMoney
    date: Instant
    budget_id: str = Field(..., alias="budgetId", min_length=1)
    account_id: str = Field(..., alias="accountId", min_length=1)
    
    def with_id(self, entity_id: str) -> Transaction:
        return Transaction(
            id=entity_id,
            description=self.description,
            amount=self.amount,
            date=self.date,
            budget_id=self.budget_id,
            account_id=self.account_id,
        )


class RecurringTransactionCreate(CreatePayload):
    description: str = Field(..., min_length=1, max_length=500)
    amount: EnteredMoney
    budget_id: str = Field(..., alias="budgetId", min_length=1)
    account_id: str = Field(..., alias="accountId", min_length=1)
    frequency: Frequency = Frequency.MONTHLY
    start_date: Instant = Field(..., alias="startDate")
    end_date: Optional[Instant] = Field(default=None, alias="endDate")
    
    @model_validator(mode="after")
    def validate_dates(self) -> "RecurringTransactionCreate":
        if self.end_date is not None and self.end_date < self.start_date:
            raise ValueError("End date cannot be before start date")
        return self
    
    def with_id(self, entity_id: str) -> RecurringTransaction:
        return RecurringTransaction(
            id=entity_id,
            description=self.description,
            amount=self.amount,
            budget_id=self.budget_id,
            account_id=self.account_id,
            frequency=self.frequency.value,
            start_date=self.start_date,
            end_date=self.end_date,
        )
