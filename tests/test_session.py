"""Tests for the session-start flow and the ledger service."""

import json

import pytest
import structlog
from datetime import datetime, timezone
from structlog.testing import capture_logs

from budgetsaver.__main__ import main
from budgetsaver.ledger import LedgerState
from budgetsaver.models import ScheduleIssueKind
from budgetsaver.services.storage import InMemoryRecordStore, LedgerRepository
from budgetsaver.session import (
    LedgerService,
    SessionStartFlow,
    create_app_components,
)
from budgetsaver.validation import EntityValidationError


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


@pytest.fixture
def seeded_repository(repository, populated_state) -> LedgerRepository:
    repository.save_state(populated_state)
    return repository


class TestSessionStartFlow:
    """Load, materialize, merge, persist."""
    
    def test_first_run_materializes_and_persists(self, seeded_repository, now):
        report = SessionStartFlow(seeded_repository).run(now)
        
        assert [t.date for t in report.new_transactions] == [utc(2024, 2, 14), utc(2024, 3, 14)]
        assert report.advanced_schedules == ["rt-1"]
        
        reloaded = seeded_repository.load_state()
        assert reloaded == report.state
        assert len(reloaded.transactions) == 4
        assert reloaded.recurring_transactions[0].last_generated_date == utc(2024, 3, 14)
    
    def test_second_run_is_a_no_op(self, seeded_repository, now):
        SessionStartFlow(seeded_repository).run(now)
        saves = seeded_repository.store.save_count
        
        report = SessionStartFlow(seeded_repository).run(now)
        
        assert report.new_transactions == []
        assert report.advanced_schedules == []
        assert seeded_repository.store.save_count == saves
    
    def test_recovers_when_checkpoint_was_not_persisted(self, seeded_repository, now):
        """Test a crash between saving transactions and saving schedules."""
        before = seeded_repository.load_state()
        report = SessionStartFlow(seeded_repository).run(now)
        
        # Put back the stale schedule, keep the new transactions
        seeded_repository.save_collections(
            report.state.model_copy(update={
                "recurring_transactions": before.recurring_transactions,
            }),
            ["recurring_transactions"],
        )
        
        retry = SessionStartFlow(seeded_repository).run(now)
        
        assert retry.new_transactions == []
        assert retry.advanced_schedules == ["rt-1"]
        reloaded = seeded_repository.load_state()
        assert len(reloaded.transactions) == 4
        assert reloaded.recurring_transactions[0].last_generated_date == utc(2024, 3, 14)
    
    def test_bad_schedule_is_reported_and_left_alone(self, repository, populated_state, make_schedule, now):
        bad = make_schedule(id="bad", frequency="hourly")
        repository.save_state(populated_state.model_copy(update={
            "recurring_transactions": populated_state.recurring_transactions + (bad,),
        }))
        
        report = SessionStartFlow(repository).run(now)
        
        assert [i.kind for i in report.issues] == [ScheduleIssueKind.UNKNOWN_FREQUENCY]
        assert len(report.new_transactions) == 2
        assert repository.load_state().recurring_transactions[1] == bad
    
    @pytest.mark.parametrize("description", ["   ", "x" * 501, "Coffee "])
    def test_unusual_stored_description_does_not_stop_the_pass(
        self, repository, make_schedule, description, now
    ):
        transaction = {
            "id": "tx-odd",
            "description": description,
            "amount": 250,
            "date": "2024-03-01T00:00:00.000Z",
            "budgetId": "bud-1",
            "accountId": "acc-1",
        }
        repository.store.save("budgetsaver-transactions", [transaction])
        repository.save_collections(
            LedgerState(recurring_transactions=(
                make_schedule(frequency="daily", start_date=utc(2024, 3, 30)),
            )),
            ["recurring_transactions"],
        )
        
        report = SessionStartFlow(repository).run(now)
        
        assert [t.date for t in report.new_transactions] == [
            utc(2024, 3, 30), utc(2024, 3, 31), utc(2024, 4, 1),
        ]
        saved = repository.store.load("budgetsaver-transactions")
        assert saved[0]["description"] == description
    
    def test_malformed_schedule_record_is_reported_and_the_rest_run(
        self, seeded_repository, now
    ):
        key = "budgetsaver-recurring-transactions"
        broken = {"id": "rt-broken", "description": "Gym", "frequency": "monthly"}
        store = seeded_repository.store
        store.save(key, store.load(key) + [broken])
        
        report = SessionStartFlow(seeded_repository).run(now)
        
        assert [(i.schedule_id, i.kind) for i in report.issues] == [
            ("rt-broken", ScheduleIssueKind.MALFORMED_RECORD),
        ]
        assert report.advanced_schedules == ["rt-1"]
        assert len(report.new_transactions) == 2
        assert broken in store.load(key)
    
    def test_empty_store(self, repository, now):
        report = SessionStartFlow(repository).run(now)
        
        assert report.new_transactions == []
        assert report.state == LedgerState()
        assert repository.store.save_count == 0
    
    def test_logs_materialization_events(self, seeded_repository, make_schedule, now):
        with capture_logs() as logs:
            SessionStartFlow(seeded_repository).run(now)
        
        events = [entry["event"] for entry in logs]
        assert "session_started" in events
        assert "session_persisted" in events
        materialized = next(e for e in logs if e["event"] == "schedule_materialized")
        assert materialized["schedule_id"] == "rt-1"
        assert materialized["generated"] == 2
    
    def test_logs_skipped_schedule_as_warning(self, repository, make_schedule, now):
        repository.save_state(LedgerState(
            recurring_transactions=(make_schedule(frequency="hourly"),),
        ))
        with capture_logs() as logs:
            SessionStartFlow(repository).run(now)
        
        skipped = next(e for e in logs if e["event"] == "schedule_skipped")
        assert skipped["log_level"] == "warning"
        assert skipped["kind"] == "unknown_frequency"
    
    def test_report_log_dict(self, seeded_repository, now):
        report = SessionStartFlow(seeded_repository).run(now)
        log_dict = report.to_log_dict()
        
        assert log_dict["new_transactions"] == 2
        assert log_dict["advanced_schedules"] == ["rt-1"]
        assert "state" not in report.model_dump()


class TestLedgerService:
    """Validated edits persist only what they touch."""
    
    def test_add_entities(self, repository):
        service = LedgerService(repository)
        account = service.add_account({"name": "Main UPI"})
        budget = service.add_budget({"name": "Groceries", "limit": "5000", "color": "#00C49F"})
        transaction = service.add_transaction({
            "description": "Vegetables",
            "amount": "320.50",
            "date": "2024-03-02T00:00:00Z",
            "budgetId": budget.id,
            "accountId": account.id,
        })
        schedule = service.add_recurring_transaction({
            "description": "Milk",
            "amount": "60",
            "frequency": "daily",
            "startDate": "2024-03-01T00:00:00Z",
            "budgetId": budget.id,
            "accountId": account.id,
        })
        
        reloaded = repository.load_state()
        assert reloaded.accounts == (account,)
        assert reloaded.budgets == (budget,)
        assert reloaded.transactions == (transaction,)
        assert reloaded.recurring_transactions == (schedule,)
    
    def test_invalid_input_is_not_stored(self, repository):
        service = LedgerService(repository)
        with pytest.raises(EntityValidationError):
            service.add_transaction({
                "description": "Coffee",
                "amount": "12",
                "date": "2024-03-02T00:00:00Z",
                "budgetId": "nope",
                "accountId": "nope",
            })
        
        assert repository.store.save_count == 0
        assert service.state.transactions == ()
    
    def test_delete_budget_cascades_and_persists(self, seeded_repository):
        service = LedgerService(seeded_repository)
        report = service.delete_budget("bud-1")
        
        reloaded = seeded_repository.load_state()
        assert report.cascaded_transactions == 2
        assert reloaded.budgets == ()
        assert reloaded.transactions == ()
        assert [s.id for s in reloaded.recurring_transactions] == ["rt-1"]
    
    def test_delete_account_cascades_and_persists(self, seeded_repository):
        service = LedgerService(seeded_repository)
        service.delete_account("acc-1")
        
        reloaded = seeded_repository.load_state()
        assert reloaded.accounts == ()
        assert reloaded.transactions == ()
    
    def test_delete_transaction_and_schedule(self, seeded_repository):
        service = LedgerService(seeded_repository)
        service.delete_transaction("tx-1")
        service.delete_recurring_transaction("rt-1")
        
        reloaded = seeded_repository.load_state()
        assert [t.id for t in reloaded.transactions] == ["tx-2"]
        assert reloaded.recurring_transactions == ()
    
    @pytest.mark.parametrize("method", [
        "delete_account",
        "delete_budget",
        "delete_transaction",
        "delete_recurring_transaction",
    ])
    def test_delete_of_missing_entity_writes_nothing(self, seeded_repository, method):
        service = LedgerService(seeded_repository)
        saves = seeded_repository.store.save_count
        
        with capture_logs() as logs:
            report = getattr(service, method)("does-not-exist")
        
        assert report.found is False
        assert seeded_repository.store.save_count == saves
        assert "entity_delete_missing" in [entry["event"] for entry in logs]
    
    def test_delete_unreadable_schedule(self, seeded_repository):
        key = "budgetsaver-recurring-transactions"
        store = seeded_repository.store
        store.save(key, store.load(key) + [{"id": "rt-broken"}])
        
        report = LedgerService(seeded_repository).delete_recurring_transaction("rt-broken")
        
        assert report.found is True
        assert [record["id"] for record in store.load(key)] == ["rt-1"]
    
    def test_orphaned_schedule_still_materializes(self, seeded_repository, now):
        LedgerService(seeded_repository).delete_budget("bud-1")
        report = SessionStartFlow(seeded_repository).run(now)
        
        assert len(report.new_transactions) == 2
        assert {t.budget_id for t in report.new_transactions} == {"bud-1"}


class TestComponents:
    """Factory and command-line entry point."""
    
    def test_create_app_components_with_store(self, populated_state, now):
        store = InMemoryRecordStore()
        session_flow, service, repository = create_app_components(store=store)
        repository.save_state(populated_state)
        
        report = session_flow.run(now)
        assert len(report.new_transactions) == 2
        assert service.state.transaction_ids == report.state.transaction_ids
    
    def test_create_app_components_with_data_dir(self, tmp_path, now):
        session_flow, service, _ = create_app_components(data_dir=str(tmp_path))
        account = service.add_account({"name": "Main"})
        
        assert (tmp_path / "budgetsaver-accounts.json").exists()
        assert session_flow.run(now).state.accounts == (account,)
    
    def test_main_prints_report(self, tmp_path, capsys):
        try:
            exit_code = main([str(tmp_path)])
        finally:
            structlog.reset_defaults()
        
        assert exit_code == 0
        output = json.loads(capsys.readouterr().out)
        assert output["new_transactions"] == 0


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
