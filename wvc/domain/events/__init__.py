"""
Version control domain events.
"""

from .version_events import (
    WVCEvent,
    CommitCreatedEvent,
    VersionResetEvent,
    BranchCreatedEvent,
    BranchSwitchedEvent,
    BranchMergedEvent,
    StatePersistFailedEvent,
)

__all__ = [
    "WVCEvent",
    "CommitCreatedEvent",
    "VersionResetEvent",
    "BranchCreatedEvent",
    "BranchSwitchedEvent",
    "BranchMergedEvent",
    "StatePersistFailedEvent",
]
