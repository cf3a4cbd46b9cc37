"""
WVC - Workspace Version Control.

A lightweight branching version-control engine for tracking content
changes to named document paths within a workspace: stage, commit,
branch, switch, merge, diff and reset over an append-only commit DAG,
with pluggable hashing and persistence.

Quick start:
    from wvc import VersionControlEngine, Change, ChangeType

    engine = VersionControlEngine()
    engine.stage_change(Change(ChangeType.ADD, "notes.md", "hello"))
    engine.commit("initial", "alice")
"""

from wvc.domain.models import (
    Branch,
    Change,
    ChangeType,
    Commit,
    CommitMetadata,
    DiffResult,
    ResetMode,
    RepositoryState,
    VersionHistory,
    track_file_change,
    VersionControlError,
    EmptyCommitError,
    DuplicateBranchError,
    UnknownBranchError,
    UncommittedChangesError,
    UnknownVersionError,
    InvalidSnapshotError,
)
from wvc.application.services import (
    VersionControlEngine,
    CommitApprovalGate,
    PendingCommit,
)
from wvc.config import WVCConfig

__version__ = "0.1.0"

__all__ = [
    "Branch",
    "Change",
    "ChangeType",
    "Commit",
    "CommitMetadata",
    "DiffResult",
    "ResetMode",
    "RepositoryState",
    "VersionHistory",
    "track_file_change",
    "VersionControlError",
    "EmptyCommitError",
    "DuplicateBranchError",
    "UnknownBranchError",
    "UncommittedChangesError",
    "UnknownVersionError",
    "InvalidSnapshotError",
    "VersionControlEngine",
    "CommitApprovalGate",
    "PendingCommit",
    "WVCConfig",
]
