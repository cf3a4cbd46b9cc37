"""
Version Control Exceptions.

Custom exceptions for version control domain operations.
All failures are local and synchronous: an operation either returns a
clean result or raises one of these without touching engine state.

Design Principles:
- Single Responsibility: One file for all version control exceptions
- Hierarchy: All inherit from VersionControlError base
- Rich context: Exceptions carry relevant data
"""

from typing import Optional


class VersionControlError(Exception):
    """
    Base exception for version control errors.

    Allows catching all engine errors with one handler.
    """
    pass


class EmptyCommitError(VersionControlError):
    """
    Commit attempted with nothing to commit.

    Raised when the staged set is empty or the commit message is blank.
    """

    def __init__(self, reason: str = "No changes staged for commit"):
        super().__init__(reason)
        self.reason = reason


class DuplicateBranchError(VersionControlError):
    """Branch creation with a name that already exists."""

    def __init__(self, branch_name: str):
        super().__init__(f"Branch {branch_name} already exists")
        self.branch_name = branch_name


class UnknownBranchError(VersionControlError):
    """Switch or merge referencing a branch that does not exist."""

    def __init__(self, branch_name: str):
        super().__init__(f"Branch {branch_name} does not exist")
        self.branch_name = branch_name


class UncommittedChangesError(VersionControlError):
    """
    Branch switch attempted with pending changes.

    The caller must commit, unstage and discard, or reset first.
    """

    def __init__(self, staged_count: int, working_count: int):
        super().__init__(
            f"Cannot switch branches with uncommitted changes "
            f"({staged_count} staged, {working_count} working)"
        )
        self.staged_count = staged_count
        self.working_count = working_count


class UnknownVersionError(VersionControlError):
    """Reset or lookup referencing a hash not present in the store."""

    def __init__(self, version_hash: str):
        super().__init__(f"Version not found: {version_hash}")
        self.version_hash = version_hash


class InvalidSnapshotError(VersionControlError):
    """
    Imported snapshot failed validation.

    Raised when the export envelope is malformed or has no state identifier.
    """
    pass


class CommitApprovalError(VersionControlError):
    """Base exception for the out-of-band commit approval step."""
    pass


class PendingCommitNotFoundError(CommitApprovalError):
    """No pending commit exists for the given commit ID."""

    def __init__(self, commit_id: str):
        super().__init__(f"No pending commit: {commit_id}")
        self.commit_id = commit_id


class InvalidVerificationCodeError(CommitApprovalError):
    """Supplied verification code does not match the pending commit."""

    def __init__(self, commit_id: str):
        super().__init__("Invalid verification code")
        self.commit_id = commit_id


class PendingCommitExpiredError(CommitApprovalError):
    """Pending commit outlived its approval window."""

    def __init__(self, commit_id: str, ttl_seconds: Optional[float] = None):
        super().__init__(f"Pending commit {commit_id} has expired")
        self.commit_id = commit_id
        self.ttl_seconds = ttl_seconds


class StagedChangesChangedError(CommitApprovalError):
    """Staged set no longer matches the changes that were approved."""

    def __init__(self, commit_id: str = ""):
        super().__init__(
            f"Staged changes changed since commit {commit_id} was initiated"
            if commit_id else "Staged changes differ from the approved set"
        )
        self.commit_id = commit_id


__all__ = [
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
