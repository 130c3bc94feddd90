"""Tests for record stores and the ledger repository."""

import json

import pytest
from datetime import datetime, timezone

from budgetsaver.config import StorageSettings
from budgetsaver.ledger import LedgerState
from budgetsaver.models import ScheduleIssueKind
from budgetsaver.services.storage import (
    CorruptCollectionError,
    InMemoryRecordStore,
    JsonFileRecordStore,
    LedgerRepository,
    StorageError,
)


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


class TestInMemoryStore:
    """Tests for InMemoryRecordStore."""
    
    def test_absent_key_loads_none(self, memory_store):
        assert memory_store.load("missing") is None
    
    def test_save_then_load(self, memory_store):
        memory_store.save("k", [{"id": "1"}])
        assert memory_store.load("k") == [{"id": "1"}]
        assert memory_store.save_count == 1
    
    def test_callers_cannot_mutate_stored_records(self, memory_store):
        records = [{"id": "1"}]
        memory_store.save("k", records)
        records[0]["id"] = "changed"
        
        loaded = memory_store.load("k")
        loaded.append({"id": "2"})
        
        assert memory_store.load("k") == [{"id": "1"}]
    
    def test_empty_collection_is_not_absent(self, memory_store):
        memory_store.save("k", [])
        assert memory_store.load("k") == []


class TestJsonFileStore:
    """Tests for JsonFileRecordStore."""
    
    def test_absent_file_loads_none(self, json_store):
        assert json_store.load("budgetsaver-accounts") is None
    
    def test_save_creates_directory_and_file(self, json_store):
        json_store.save("budgetsaver-accounts", [{"id": "a1", "name": "Main"}])
        
        path = json_store.path_for("budgetsaver-accounts")
        assert path.exists()
        assert json.loads(path.read_text(encoding="utf-8")) == [{"id": "a1", "name": "Main"}]
    
    def test_round_trip(self, json_store):
        records = [{"id": "t1", "amount": 12.5, "note": "₹ chai"}]
        json_store.save("k", records)
        assert json_store.load("k") == records
    
    def test_overwrite_leaves_no_temp_files(self, json_store):
        json_store.save("k", [{"id": "1"}])
        json_store.save("k", [{"id": "2"}])
        
        assert json_store.load("k") == [{"id": "2"}]
        assert [p.name for p in json_store.data_dir.iterdir()] == ["k.json"]
    
    def test_invalid_json_is_corrupt(self, json_store):
        json_store.data_dir.mkdir(parents=True)
        json_store.path_for("k").write_text("{not json", encoding="utf-8")
        
        with pytest.raises(CorruptCollectionError):
            json_store.load("k")
    
    def test_non_list_is_corrupt(self, json_store):
        json_store.data_dir.mkdir(parents=True)
        json_store.path_for("k").write_text('{"id": "1"}', encoding="utf-8")
        
        with pytest.raises(CorruptCollectionError, match="JSON array"):
            json_store.load("k")
    
    def test_unserializable_records_raise_storage_error(self, json_store):
        with pytest.raises(StorageError):
            json_store.save("k", [{"id": object()}])
        assert json_store.load("k") is None


class TestLedgerRepository:
    """Tests for LedgerRepository."""
    
    def test_empty_store_loads_empty_state(self, repository):
        snapshot = repository.load_snapshot()
        assert snapshot.state == LedgerState()
        assert snapshot.absent == [
            "accounts", "budgets", "transactions", "recurring_transactions",
        ]
        assert snapshot.issues == []
    
    def test_default_keys(self, repository):
        assert repository.key_for("accounts") == "budgetsaver-accounts"
        assert repository.key_for("recurring_transactions") == (
            "budgetsaver-recurring-transactions"
        )
    
    def test_state_round_trip(self, repository, populated_state, make_schedule, make_transaction):
        """Test that every collection reloads field-for-field."""
        state = populated_state.model_copy(update={
            "transactions": populated_state.transactions + (
                make_transaction(id="rt-1-1707868800000", recurring_transaction_id="rt-1"),
            ),
            "recurring_transactions": (
                make_schedule(id="rt-1"),
                make_schedule(
                    id="rt-2",
                    end_date=utc(2025, 1, 1),
                    last_generated_date=utc(2024, 3, 14),
                ),
            ),
        })
        
        repository.save_state(state)
        snapshot = repository.load_snapshot()
        assert snapshot.state == state
        assert snapshot.absent == []
    
    def test_absent_optional_fields_stay_absent_in_store(self, repository, populated_state):
        repository.save_state(populated_state)
        
        schedule_record = repository.store.load("budgetsaver-recurring-transactions")[0]
        transaction_record = repository.store.load("budgetsaver-transactions")[0]
        
        assert "endDate" not in schedule_record
        assert "lastGeneratedDate" not in schedule_record
        assert "recurringTransactionId" not in transaction_record
    
    def test_loads_records_written_by_earlier_versions(self, storage_settings):
        store = InMemoryRecordStore({
            "budgetsaver-recurring-transactions": [{
                "id": "1700000000000",
                "description": "Rent",
                "amount": 15000,
                "budgetId": "1699999999999",
                "accountId": "1699999999000",
                "frequency": "monthly",
                "startDate": "2024-01-15T00:00:00.000Z",
                "lastGeneratedDate": "2024-03-14T00:00:00.000Z",
            }],
        })
        state = LedgerRepository(store, storage_settings).load_state()
        
        schedule = state.recurring_transactions[0]
        assert schedule.last_generated_date == utc(2024, 3, 14)
        assert schedule.end_date is None
    
    def test_invalid_account_record_is_corrupt(self, storage_settings):
        store = InMemoryRecordStore({
            "budgetsaver-accounts": [{"id": "a1"}],
        })
        with pytest.raises(CorruptCollectionError, match="budgetsaver-accounts"):
            LedgerRepository(store, storage_settings).load_state()
    
    def test_each_collection_is_read_once_per_load(self, storage_settings, monkeypatch):
        store = InMemoryRecordStore()
        reads = []
        original_load = store.load
        
        def counting_load(key):
            reads.append(key)
            return original_load(key)
        
        monkeypatch.setattr(store, "load", counting_load)
        LedgerRepository(store, storage_settings).load_snapshot()
        
        assert sorted(reads) == sorted(set(reads))
        assert len(reads) == 4
    
    def test_unreadable_schedule_is_reported_and_kept(self, storage_settings, make_schedule):
        broken = {"id": "rt-bad", "description": "Rent", "frequency": "monthly"}
        store = InMemoryRecordStore({
            "budgetsaver-recurring-transactions": [
                make_schedule(id="rt-1").to_record(),
                broken,
            ],
        })
        repository = LedgerRepository(store, storage_settings)
        snapshot = repository.load_snapshot()
        
        assert [s.id for s in snapshot.state.recurring_transactions] == ["rt-1"]
        assert snapshot.state.unreadable_schedules == (broken,)
        assert len(snapshot.issues) == 1
        assert snapshot.issues[0].schedule_id == "rt-bad"
        assert snapshot.issues[0].kind is ScheduleIssueKind.MALFORMED_RECORD
        assert "amount" in snapshot.issues[0].message
        
        repository.save_state(snapshot.state)
        saved = store.load("budgetsaver-recurring-transactions")
        assert broken in saved
        assert len(saved) == 2
    
    def test_save_collections_only_touches_named(self, repository, populated_state):
        repository.save_collections(populated_state, ["budgets"])
        
        assert repository.store.keys() == ["budgetsaver-budgets"]
    
    def test_custom_keys(self, memory_store, populated_state):
        settings = StorageSettings(accounts_key="acc", budgets_key="bud")
        repository = LedgerRepository(memory_store, settings)
        repository.save_state(populated_state)
        
        assert "acc" in memory_store.keys()
        assert "bud" in memory_store.keys()
    
    def test_json_backed_round_trip(self, json_store, storage_settings, populated_state):
        repository = LedgerRepository(json_store, storage_settings)
        repository.save_state(populated_state)
        
        reloaded = LedgerRepository(JsonFileRecordStore(json_store.data_dir), storage_settings)
        assert reloaded.load_state() == populated_state


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
