"""
IStateStore implementations.
"""

from .inmemory_state_store import InMemoryStateStore
from .json_file_state_store import JsonFileStateStore
from .sqlalchemy_state_store import SQLAlchemyStateStore
from .http_state_store import HttpStateStore

__all__ = [
    "InMemoryStateStore",
    "JsonFileStateStore",
    "SQLAlchemyStateStore",
    "HttpStateStore",
]
