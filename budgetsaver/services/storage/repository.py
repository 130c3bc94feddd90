"""
Ledger Repository

Binds the four logical collection keys to their entity models and
loads/saves a whole LedgerState through any RecordStoreInterface.

A key that was never saved loads as an empty collection.
"""

from collections.abc import Iterable
from typing import NamedTuple, Optional

from pydantic import ValidationError

from budgetsaver.config import StorageSettings, get_settings
from budgetsaver.ledger.state import LedgerState
from budgetsaver.models.entities import (
    Account,
    Budget,
    LedgerRecord,
    RecurringTransaction,
    Transaction,
)
from budgetsaver.models.results import ScheduleIssue, ScheduleIssueKind
from budgetsaver.services.storage.interface import (
    CorruptCollectionError,
    Record,
    RecordStoreInterface,
)


# LedgerState attribute -> (settings key attribute, model)
COLLECTIONS: dict[str, tuple[str, type[LedgerRecord]]] = {
    "accounts": ("accounts_key", Account),
    "budgets": ("budgets_key", Budget),
    "transactions": ("transactions_key", Transaction),
    "recurring_transactions": ("recurring_key", RecurringTransaction),
}


class LedgerSnapshot(NamedTuple):
    """One load of every collection."""
    
    state: LedgerState
    absent: list[str]
    issues: list[ScheduleIssue]


def _describe(error: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(part) for part in err['loc']) or 'record'}: {err['msg']}"
        for err in error.errors()
    )


class LedgerRepository:
    """Loads and saves LedgerState collections."""
    
    def __init__(
        self,
        store: RecordStoreInterface,
        settings: Optional[StorageSettings] = None,
    ):
        self._store = store
        self._settings = settings or get_settings().storage
    
    @property
    def store(self) -> RecordStoreInterface:
        return self._store
    
    def key_for(self, collection: str) -> str:
        key_attr, _ = COLLECTIONS[collection]
        return getattr(self._settings, key_attr)
    
    def _parse(self, collection: str, records: list[Record]) -> tuple:
        _, model = COLLECTIONS[collection]
        try:
            return tuple(model.from_record(record) for record in records)
        except ValidationError as e:
            raise CorruptCollectionError(
                f"Collection {self.key_for(collection)!r} has an invalid record: {e}"
            )
    
    def _parse_schedules(
        self,
        records: list[Record],
    ) -> tuple[tuple, tuple, list[ScheduleIssue]]:
        """Split schedule records into parsed models and unreadable raw records."""
        schedules, unreadable, issues = [], [], []
        for record in records:
            try:
                schedules.append(RecurringTransaction.from_record(record))
            except ValidationError as e:
                unreadable.append(record)
                issues.append(ScheduleIssue(
                    schedule_id=str(record.get("id", "")),
                    kind=ScheduleIssueKind.MALFORMED_RECORD,
                    message=f"Stored schedule could not be read: {_describe(e)}",
                ))
        return tuple(schedules), tuple(unreadable), issues
    
    def load_snapshot(self) -> LedgerSnapshot:
        """
        Load every collection once.
        
        A schedule record that does not parse is reported as an issue and
        kept aside; the other collections must parse in full.
        
        Raises:
            CorruptCollectionError: If a stored account, budget or
                transaction record does not match its model
        """
        collections, absent, issues = {}, [], []
        for name in COLLECTIONS:
            records = self._store.load(self.key_for(name))
            if records is None:
                absent.append(name)
                records = []
            
            if name == "recurring_transactions":
                schedules, unreadable, issues = self._parse_schedules(records)
                collections[name] = schedules
                collections["unreadable_schedules"] = unreadable
            else:
                collections[name] = self._parse(name, records)
        
        return LedgerSnapshot(LedgerState(**collections), absent, issues)
    
    def load_state(self) -> LedgerState:
        return self.load_snapshot().state
    
    def save_collections(
        self,
        state: LedgerState,
        collections: Iterable[str],
    ) -> None:
        """Persist only the named collections, in the order given."""
        for name in collections:
            records = [item.to_record() for item in getattr(state, name)]
            if name == "recurring_transactions":
                records.extend(dict(record) for record in state.unreadable_schedules)
            self._store.save(self.key_for(name), records)
    
    def save_state(self, state: LedgerState) -> None:
        self.save_collections(state, COLLECTIONS)
