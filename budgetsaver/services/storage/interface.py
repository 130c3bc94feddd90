"""
Abstract Storage Interface

DESIGN DECISION: The ledger talks to storage through a tiny key-value
interface: one collection of records per logical key. This allows us to:
1. Keep the local JSON files as the default backend
2. Use in-memory storage for testing
3. Swap in another backend without touching business logic

Records are plain JSON-compatible dicts. Mapping them to models is the
repository's job, not the store's.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional


Record = dict[str, Any]


class RecordStoreInterface(ABC):
    """
    Abstract interface for collection storage.
    
    Any storage implementation must implement these methods.
    """
    
    @abstractmethod
    def load(self, key: str) -> Optional[list[Record]]:
        """
        Load a previously stored collection.
        
        Args:
            key: Logical collection name
            
        Returns:
            The stored records, or None if nothing was ever saved under key
            
        Raises:
            StorageError: If the collection exists but cannot be read
        """
        pass
    
    @abstractmethod
    def save(self, key: str, records: list[Record]) -> None:
        """
        Replace the collection stored under key.
        
        Args:
            key: Logical collection name
            records: The full collection
            
        Raises:
            StorageError: If the write fails
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class CorruptCollectionError(StorageError):
    """A stored collection exists but is not a list of records."""
    pass
