"""
Version Control Domain Events.

Events emitted after an engine operation has swapped in its new state.

Design Principles:
- Published only after the state change is applied
- Serializable: to_dict for audit logging and messaging

Integration:
- Published via WVCEventBus by VersionControlEngine
- Subscribers must not mutate the engine from inside a handler

Usage:
    from wvc.domain.events import CommitCreatedEvent
    from wvc.infrastructure.events import get_wvc_event_bus

    get_wvc_event_bus().subscribe(CommitCreatedEvent, on_commit)
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional
import uuid


@dataclass
class WVCEvent:
    """Base class for all version control domain events."""
    event_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: datetime = field(default_factory=datetime.now)
    workspace_id: str = ""

    @property
    def event_type(self) -> str:
        return self.__class__.__name__

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "event_type": self.event_type,
            "event_id": self.event_id,
            "timestamp": self.timestamp.isoformat(),
        }
        for key, value in self.__dict__.items():
            if key in data:
                continue
            data[key] = list(value) if isinstance(value, tuple) else value
        return data


# ═══════════════════════════════════════════════════════════════════════════════
# Commit Events
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass
class CommitCreatedEvent(WVCEvent):
    """
    Emitted when a commit is appended and the branch head advanced.

    Attributes:
        commit_hash: Hash of the new commit
        parent_hash: Hash of its parent, None for a root commit
        branch: Branch whose head advanced
        author: Commit author
        message: Commit message
        file_paths: Paths touched by the commit
    """
    commit_hash: str = ""
    parent_hash: Optional[str] = None
    branch: str = ""
    author: str = ""
    message: str = ""
    file_paths: tuple = field(default_factory=tuple)

    @property
    def event_type(self) -> str:
        return "commit.created"


@dataclass
class VersionResetEvent(WVCEvent):
    """Emitted when the current branch head is reset to an existing commit."""
    branch: str = ""
    previous_head: str = ""
    new_head: str = ""
    mode: str = "soft"

    @property
    def event_type(self) -> str:
        return "version.reset"


# ═══════════════════════════════════════════════════════════════════════════════
# Branch Events
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass
class BranchCreatedEvent(WVCEvent):
    """Emitted when a branch is created from the current head."""
    branch: str = ""
    head: str = ""
    source_branch: str = ""

    @property
    def event_type(self) -> str:
        return "branch.created"


@dataclass
class BranchSwitchedEvent(WVCEvent):
    """Emitted when the active branch changes."""
    from_branch: str = ""
    to_branch: str = ""

    @property
    def event_type(self) -> str:
        return "branch.switched"


@dataclass
class BranchMergedEvent(WVCEvent):
    """
    Emitted after a merge commit is created on the target branch.

    Attributes:
        source_branch: Branch merged from
        target_branch: Branch merged into
        merge_hash: Hash of the synthesized merge commit
        merged_commit_count: Number of source commits collected
        truncated: True when the source chain had a missing ancestor
    """
    source_branch: str = ""
    target_branch: str = ""
    merge_hash: str = ""
    merged_commit_count: int = 0
    truncated: bool = False

    @property
    def event_type(self) -> str:
        return "branch.merged"


# ═══════════════════════════════════════════════════════════════════════════════
# Persistence Events
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass
class StatePersistFailedEvent(WVCEvent):
    """Emitted when the state store rejects or fails a save."""
    store: str = ""
    error: Optional[str] = None

    @property
    def event_type(self) -> str:
        return "state.persist_failed"


__all__ = [
    "WVCEvent",
    "CommitCreatedEvent",
    "VersionResetEvent",
    "BranchCreatedEvent",
    "BranchSwitchedEvent",
    "BranchMergedEvent",
    "StatePersistFailedEvent",
]
