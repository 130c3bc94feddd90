"""
Session Orchestration for BudgetSaver

Ties the components together and defines the two flows:
1. Session start (load -> materialize -> merge -> persist)
2. Ledger edits (validate -> transition -> persist)

DESIGN DECISION: The engine never sees storage. This module loads a
snapshot, hands it to the engine, and persists what comes back.

Persistence order on session start is transactions first, schedules
second. If the process dies in between, the next start walks from the
old checkpoint again, regenerates the same ids, and the existing-id
filter drops them. Concurrent sessions against one data directory
must be serialized by the caller.
"""

from collections import Counter
from datetime import datetime, timezone
from typing import Any, Optional
from uuid import uuid4

from pydantic import BaseModel, Field

from budgetsaver.config import get_settings
from budgetsaver.ledger import state as transitions
from budgetsaver.ledger.state import DeletionReport, LedgerState
from budgetsaver.log import LedgerLogger
from budgetsaver.models.entities import (
    Account,
    Budget,
    LedgerRecord,
    RecurringTransaction,
    Transaction,
)
from budgetsaver.models.results import ScheduleIssue
from budgetsaver.schedule import materialize
from budgetsaver.services.storage import (
    JsonFileRecordStore,
    LedgerRepository,
    RecordStoreInterface,
)
from budgetsaver.validation import EntityValidationError, EntityValidator


class SessionReport(BaseModel):
    """What one session-start pass did."""
    
    session_id: str
    now: datetime
    new_transactions: list[Transaction] = Field(default_factory=list)
    advanced_schedules: list[str] = Field(default_factory=list)
    issues: list[ScheduleIssue] = Field(default_factory=list)
    state: LedgerState = Field(exclude=True)
    
    def to_log_dict(self) -> dict[str, Any]:
        return {
            "session_id": self.session_id,
            "now": self.now.isoformat(),
            "new_transactions": len(self.new_transactions),
            "advanced_schedules": self.advanced_schedules,
            "issues": [issue.model_dump(mode="json") for issue in self.issues],
        }


class SessionStartFlow:
    """
    Orchestrates the session-start materialization pass.
    
    Flow:
    1. Load → full ledger snapshot (absent collections are empty)
    2. Materialize → engine computes due transactions and checkpoints
    3. Merge → new transactions appended, schedules replaced by id
    4. Persist → transactions, then schedules, only if something changed
    """
    
    def __init__(
        self,
        repository: LedgerRepository,
        logger: Optional[LedgerLogger] = None,
    ):
        self._repository = repository
        self._session_id = str(uuid4())
        self._logger = logger or LedgerLogger(self._session_id)
    
    def run(self, now: Optional[datetime] = None) -> SessionReport:
        now = now or datetime.now(timezone.utc)
        
        snapshot = self._repository.load_snapshot()
        for collection in snapshot.absent:
            self._logger.collection_absent(collection)
        
        state = snapshot.state
        self._logger.session_started(
            now=now.isoformat(),
            schedule_count=len(state.recurring_transactions),
            transaction_count=len(state.transactions),
        )
        
        result = materialize(state.recurring_transactions, now, state.transaction_ids)
        
        issues = snapshot.issues + result.issues
        for issue in issues:
            self._logger.schedule_skipped(issue)
        
        generated = Counter(t.recurring_transaction_id for t in result.new_transactions)
        for schedule in result.changed_schedules:
            self._logger.schedule_materialized(schedule, generated[schedule.id])
        
        new_state = transitions.apply_materialization(state, result)
        
        to_save = []
        if result.new_transactions:
            to_save.append("transactions")
        if result.advanced_ids:
            to_save.append("recurring_transactions")
        if to_save:
            self._repository.save_collections(new_state, to_save)
            self._logger.session_persisted(
                new_transactions=len(result.new_transactions),
                updated_schedules=len(result.advanced_ids),
            )
        
        return SessionReport(
            session_id=self._session_id,
            now=now,
            new_transactions=result.new_transactions,
            advanced_schedules=[s.id for s in result.changed_schedules],
            issues=issues,
            state=new_state,
        )


class LedgerService:
    """
    Validated edits to the ledger.
    
    Each operation applies a pure transition to the in-memory state and
    persists only the collections it touched.
    """
    
    def __init__(
        self,
        repository: LedgerRepository,
        validator: Optional[EntityValidator] = None,
        logger: Optional[LedgerLogger] = None,
        state: Optional[LedgerState] = None,
    ):
        self._repository = repository
        self._validator = validator or EntityValidator()
        self._logger = logger or LedgerLogger()
        self._state = state
    
    @property
    def state(self) -> LedgerState:
        if self._state is None:
            self._state = self._repository.load_state()
        return self._state
    
    def _commit(self, new_state: LedgerState, *collections: str) -> None:
        self._repository.save_collections(new_state, collections)
        self._state = new_state
    
    def _delete(
        self,
        new_state: LedgerState,
        report: DeletionReport,
        *collections: str,
    ) -> DeletionReport:
        """Persist a delete only when it removed something."""
        if report.changed:
            self._commit(new_state, *collections)
        self._logger.entity_deleted(report)
        return report
    
    def _create(self, entity_type: str, raw: dict[str, Any]) -> LedgerRecord:
        try:
            entity = self._validator.build(entity_type, raw, self.state)
        except EntityValidationError as e:
            self._logger.entity_rejected(entity_type, e.result.error_count)
            raise
        self._logger.entity_created(entity_type, entity)
        return entity
    
    # Creation
    
    def add_account(self, raw: dict[str, Any]) -> Account:
        account = self._create("account", raw)
        self._commit(transitions.add_account(self.state, account), "accounts")
        return account
    
    def add_budget(self, raw: dict[str, Any]) -> Budget:
        budget = self._create("budget", raw)
        self._commit(transitions.add_budget(self.state, budget), "budgets")
        return budget
    
    def add_transaction(self, raw: dict[str, Any]) -> Transaction:
        transaction = self._create("transaction", raw)
        self._commit(
            transitions.add_transaction(self.state, transaction),
            "transactions",
        )
        return transaction
    
    def add_recurring_transaction(self, raw: dict[str, Any]) -> RecurringTransaction:
        schedule = self._create("recurring_transaction", raw)
        self._commit(
            transitions.add_recurring_transaction(self.state, schedule),
            "recurring_transactions",
        )
        return schedule
    
    # Deletion
    
    def delete_account(self, account_id: str) -> DeletionReport:
        """Delete an account and its transactions; schedules are orphaned."""
        new_state, report = transitions.delete_account(self.state, account_id)
        return self._delete(new_state, report, "transactions", "accounts")
    
    def delete_budget(self, budget_id: str) -> DeletionReport:
        """Delete a budget and its transactions; schedules are orphaned."""
        new_state, report = transitions.delete_budget(self.state, budget_id)
        return self._delete(new_state, report, "transactions", "budgets")
    
    def delete_transaction(self, transaction_id: str) -> DeletionReport:
        new_state, report = transitions.delete_transaction(self.state, transaction_id)
        return self._delete(new_state, report, "transactions")
    
    def delete_recurring_transaction(self, schedule_id: str) -> DeletionReport:
        new_state, report = transitions.delete_recurring_transaction(
            self.state, schedule_id
        )
        return self._delete(new_state, report, "recurring_transactions")


def create_app_components(
    data_dir: Optional[str] = None,
    store: Optional[RecordStoreInterface] = None,
) -> tuple[SessionStartFlow, LedgerService, LedgerRepository]:
    """
    Factory function to create all application components.
    
    Args:
        data_dir: Directory for the JSON store; defaults to settings
        store: Explicit store (e.g. in-memory for tests); wins over data_dir
        
    Returns:
        (session_start_flow, ledger_service, repository)
    """
    storage_settings = get_settings().storage
    if store is None:
        store = JsonFileRecordStore(data_dir or storage_settings.data_dir)
    
    repository = LedgerRepository(store, storage_settings)
    session_flow = SessionStartFlow(repository)
    ledger_service = LedgerService(repository)
    
    return session_flow, ledger_service, repository
