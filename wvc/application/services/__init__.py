"""
Application services.
"""

from .version_control import VersionControlEngine, generate_workspace_id
from .commit_approval import (
    CommitApprovalGate,
    PendingCommit,
    author_from_email,
    generate_verification_code,
)

__all__ = [
    "VersionControlEngine",
    "generate_workspace_id",
    "CommitApprovalGate",
    "PendingCommit",
    "author_from_email",
    "generate_verification_code",
]
