"""
Version Control Value Objects.

Immutable value objects for the version control domain.

Value Objects:
- ChangeType: Kind of path-level mutation
- ResetMode: soft/hard reset behaviour
- CommitMetadata: Derived counts for a commit's changeset
- LineStats: Per-document added/removed/modified line counts
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict


class ChangeType(str, Enum):
    """Types of path-level changes."""
    ADD = "add"
    MODIFY = "modify"
    DELETE = "delete"


class ResetMode(str, Enum):
    """
    Reset behaviour.

    SOFT moves the branch head only; HARD also clears staged and working sets.
    """
    SOFT = "soft"
    HARD = "hard"


@dataclass(frozen=True)
class CommitMetadata:
    """
    Derived counts for a commit.

    Attributes:
        file_count: Number of distinct paths touched
        additions: Number of ADD changes
        deletions: Number of DELETE changes

    MODIFY changes count toward neither additions nor deletions.
    """
    file_count: int = 0
    additions: int = 0
    deletions: int = 0

    @classmethod
    def from_changes(cls, changes) -> "CommitMetadata":
        """Compute metadata for a sequence of Change objects."""
        return cls(
            file_count=len({c.path for c in changes}),
            additions=sum(1 for c in changes if c.change_type == ChangeType.ADD),
            deletions=sum(1 for c in changes if c.change_type == ChangeType.DELETE),
        )

    def to_dict(self) -> Dict[str, int]:
        return {
            "file_count": self.file_count,
            "additions": self.additions,
            "deletions": self.deletions,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CommitMetadata":
        return cls(
            file_count=int(data.get("file_count", 0)),
            additions=int(data.get("additions", 0)),
            deletions=int(data.get("deletions", 0)),
        )


@dataclass(frozen=True)
class LineStats:
    """Line-level change counts between two versions of a document."""
    added: int = 0
    removed: int = 0
    modified: int = 0

    @property
    def total(self) -> int:
        return self.added + self.removed + self.modified

    def to_dict(self) -> Dict[str, int]:
        return {"added": self.added, "removed": self.removed, "modified": self.modified}


__all__ = [
    "ChangeType",
    "ResetMode",
    "CommitMetadata",
    "LineStats",
]
