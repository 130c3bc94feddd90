"""In-memory record store, used by tests and throwaway sessions."""

import copy
from typing import Optional

from budgetsaver.services.storage.interface import Record, RecordStoreInterface


class InMemoryRecordStore(RecordStoreInterface):
    """
    Keeps collections in a dict.
    
    Records are deep-copied on the way in and out so callers can never
    mutate what is "on disk".
    """
    
    def __init__(self, initial: Optional[dict[str, list[Record]]] = None):
        self._collections: dict[str, list[Record]] = copy.deepcopy(initial or {})
        self.save_count = 0
    
    def load(self, key: str) -> Optional[list[Record]]:
        if key not in self._collections:
            return None
        return copy.deepcopy(self._collections[key])
    
    def save(self, key: str, records: list[Record]) -> None:
        self._collections[key] = copy.deepcopy(records)
        self.save_count += 1
    
    def keys(self) -> list[str]:
        return list(self._collections)
