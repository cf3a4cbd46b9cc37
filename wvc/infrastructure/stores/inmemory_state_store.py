"""
In-Memory State Store Implementation.

Keeps the last saved state in process memory. Does not persist between
runs; used for tests and sessions that only need export/import.
"""

from copy import deepcopy
from threading import Lock
from typing import Any, Dict, Optional

from wvc.domain.interfaces.state_store import IStateStore


class InMemoryStateStore(IStateStore):
    """
    In-memory implementation of IStateStore.

    Saved data is deep-copied in both directions so callers cannot mutate
    the stored snapshot. Thread-safe via Lock.
    """

    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        self._lock = Lock()
        self._data: Optional[Dict[str, Any]] = deepcopy(initial) if initial is not None else None
        self._save_count = 0

    def save(self, data: Dict[str, Any]) -> bool:
        with self._lock:
            self._data = deepcopy(data)
            self._save_count += 1
        return True

    def load(self) -> Optional[Dict[str, Any]]:
        with self._lock:
            return deepcopy(self._data) if self._data is not None else None

    def clear(self) -> None:
        with self._lock:
            self._data = None

    @property
    def save_count(self) -> int:
        return self._save_count
