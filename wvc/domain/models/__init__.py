"""
Version Control Domain Models Package.

Package Structure:
- exceptions.py: All version control exceptions
- value_objects.py: ChangeType, ResetMode, CommitMetadata, LineStats
- diff.py: Positional line diff and line statistics
- entities.py: Change, Commit, Branch
- state.py: RepositoryState snapshot and traversal results

Usage:
    from wvc.domain.models import Change, ChangeType, track_file_change

    change = track_file_change("notes.md", "hello world", "hello")
"""

# Exceptions
from .exceptions import (
    VersionControlError,
    EmptyCommitError,
    DuplicateBranchError,
    UnknownBranchError,
    UncommittedChangesError,
    UnknownVersionError,
    InvalidSnapshotError,
    CommitApprovalError,
    PendingCommitNotFoundError,
    InvalidVerificationCodeError,
    PendingCommitExpiredError,
    StagedChangesChangedError,
)

# Value Objects
from .value_objects import (
    ChangeType,
    ResetMode,
    CommitMetadata,
    LineStats,
)

from .diff import generate_simple_diff, summarize_line_changes

# Entities
from .entities import (
    Change,
    Commit,
    Branch,
    track_file_change,
    parse_timestamp,
)

# State
from .state import (
    RepositoryState,
    VersionHistory,
    DiffResult,
)


__all__ = [
    # Value Objects
    "ChangeType",
    "ResetMode",
    "CommitMetadata",
    "LineStats",
    # Entities
    "Change",
    "Commit",
    "Branch",
    "track_file_change",
    "parse_timestamp",
    "generate_simple_diff",
    "summarize_line_changes",
    # State
    "RepositoryState",
    "VersionHistory",
    "DiffResult",
    # Errors
    "VersionControlError",
    "EmptyCommitError",
    "DuplicateBranchError",
    "UnknownBranchError",
    "UncommittedChangesError",
    "UnknownVersionError",
    "InvalidSnapshotError",
    "CommitApprovalError",
    "PendingCommitNotFoundError",
    "InvalidVerificationCodeError",
    "PendingCommitExpiredError",
    "StagedChangesChangedError",
]
