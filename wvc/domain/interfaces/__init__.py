"""
Domain interfaces (ports) for the version control engine.
"""

from .hashing import IHashStrategy
from .state_store import IStateStore
from .notifier import IVerificationNotifier

__all__ = [
    "IHashStrategy",
    "IStateStore",
    "IVerificationNotifier",
]
