"""
Storage Services Package

Provides the abstract record store interface, its concrete
implementations, and the repository that maps collections to models.
"""

from budgetsaver.services.storage.interface import (
    CorruptCollectionError,
    Record,
    RecordStoreInterface,
    StorageError,
)
from budgetsaver.services.storage.json_file import JsonFileRecordStore
from budgetsaver.services.storage.memory import InMemoryRecordStore
from budgetsaver.services.storage.repository import (
    COLLECTIONS,
    LedgerRepository,
    LedgerSnapshot,
)

__all__ = [
    # Interface
    "Record",
    "RecordStoreInterface",
    # Exceptions
    "CorruptCollectionError",
    "StorageError",
    # Implementations
    "InMemoryRecordStore",
    "JsonFileRecordStore",
    # Repository
    "COLLECTIONS",
    "LedgerRepository",
    "LedgerSnapshot",
]
