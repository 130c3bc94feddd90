"""
JSON File Storage Implementation

DESIGN DECISION: One file per collection (<data_dir>/<key>.json).
This is a local, single-user store:
1. No server, no network
2. Files are human-readable and easy to back up
3. Each save rewrites the whole collection atomically

Writes go to a temporary file in the same directory which then
replaces the target, so a crash mid-write leaves the previous
version intact.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Optional, Union

from budgetsaver.services.storage.interface import (
    CorruptCollectionError,
    Record,
    RecordStoreInterface,
    StorageError,
)


class JsonFileRecordStore(RecordStoreInterface):
    """Stores each collection as a JSON array in its own file."""
    
    def __init__(self, data_dir: Union[str, Path]):
        self._data_dir = Path(data_dir)
    
    @property
    def data_dir(self) -> Path:
        return self._data_dir
    
    def path_for(self, key: str) -> Path:
        return self._data_dir / f"{key}.json"
    
    def load(self, key: str) -> Optional[list[Record]]:
        """Load a collection; None if its file does not exist."""
        path = self.path_for(key)
        try:
            with path.open("r", encoding="utf-8") as handle:
                data = json.load(handle)
        except FileNotFoundError:
            return None
        except json.JSONDecodeError as e:
            raise CorruptCollectionError(f"Collection {key!r} is not valid JSON: {e}")
        except OSError as e:
            raise StorageError(f"Failed to read collection {key!r}: {e}")
        
        if not isinstance(data, list) or not all(isinstance(r, dict) for r in data):
            raise CorruptCollectionError(
                f"Collection {key!r} must be a JSON array of objects"
            )
        return data
    
    def save(self, key: str, records: list[Record]) -> None:
        """Atomically replace a collection's file."""
        path = self.path_for(key)
        try:
            self._data_dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self._data_dir,
                prefix=f".{key}.",
                suffix=".tmp",
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    json.dump(records, handle, ensure_ascii=False, indent=2)
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except (OSError, TypeError, ValueError) as e:
            raise StorageError(f"Failed to save collection {key!r}: {e}")
