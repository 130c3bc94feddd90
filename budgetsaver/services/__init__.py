"""Services package."""

from budgetsaver.services.storage import (
    COLLECTIONS,
    CorruptCollectionError,
    InMemoryRecordStore,
    JsonFileRecordStore,
    LedgerRepository,
    Record,
    RecordStoreInterface,
    StorageError,
)

__all__ = [
    "COLLECTIONS",
    "CorruptCollectionError",
    "InMemoryRecordStore",
    "JsonFileRecordStore",
    "LedgerRepository",
    "Record",
    "RecordStoreInterface",
    "StorageError",
]
