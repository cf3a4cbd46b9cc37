"""
State Store Interface.

Port for persisting the serialized commit graph. The engine does not know
whether state ends up on local disk, in a database or behind a remote API.

Implementations:
- InMemory: wvc/infrastructure/stores/inmemory_state_store.py
- JSON file: wvc/infrastructure/stores/json_file_state_store.py
- SQLAlchemy: wvc/infrastructure/stores/sqlalchemy_state_store.py
- HTTP: wvc/infrastructure/stores/http_state_store.py
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional


class IStateStore(ABC):
    """
    Persistence collaborator for serialized engine state.

    Contract:
    - save() reports failure by returning False, never by raising for
      ordinary I/O problems
    - load() returns None when nothing was saved
    - No locking: concurrent writers get last-writer-wins
    """

    @abstractmethod
    def save(self, data: Dict[str, Any]) -> bool:
        """
        Persist a serialized state.

        Args:
            data: Output of serialize_state()

        Returns:
            True if persisted, False otherwise
        """
        pass

    @abstractmethod
    def load(self) -> Optional[Dict[str, Any]]:
        """
        Load the last saved state.

        Returns:
            Serialized state, or None when absent
        """
        pass

    def clear(self) -> None:
        """Remove any saved state. Optional for stores that support it."""
        raise NotImplementedError(f"{type(self).__name__} does not support clear()")

    @property
    def description(self) -> str:
        return type(self).__name__
