"""
Version Control Entities.

Domain entities for the branching version-control engine.

Design Principles:
- Immutable: Change, Commit and Branch are frozen dataclasses
- History is append-only; only branch pointers move, and they move by
  replacement (``Branch.move_to`` returns a new Branch)
- Serializable: to_dict/from_dict with ISO-8601 timestamps

Entities:
- Change: Single path-level mutation (add/modify/delete)
- Commit: Immutable, hash-identified changeset record
- Branch: Named pointer to a commit hash
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Dict, Optional, Tuple

from .diff import generate_simple_diff, summarize_line_changes
from .value_objects import ChangeType, CommitMetadata, LineStats


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp, accepting a trailing ``Z`` for UTC."""
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)


@dataclass(frozen=True)
class Change:
    """
    A single path's add/modify/delete mutation.

    Attributes:
        change_type: Kind of mutation
        path: Document/file path (unique key within a change set)
        content: Full new content, None for deletions
        previous_content: Prior content, if known
        diff: Positional line diff between previous_content and content

    Examples:
        >>> Change(ChangeType.ADD, "notes.md", "hello")
        >>> track_file_change("notes.md", "hello world", "hello")
    """
    change_type: ChangeType
    path: str
    content: Optional[str] = None
    previous_content: Optional[str] = None
    diff: Optional[str] = None

    def __post_init__(self):
        if not self.path:
            raise ValueError("path cannot be empty")
        if not isinstance(self.change_type, ChangeType):
            object.__setattr__(self, "change_type", ChangeType(self.change_type))
        if self.change_type != ChangeType.DELETE and self.content is None:
            raise ValueError(f"content is required for {self.change_type.value} change: {self.path}")

    @property
    def is_deletion(self) -> bool:
        return self.change_type == ChangeType.DELETE

    @property
    def line_stats(self) -> LineStats:
        """Added/removed/modified line counts against previous_content."""
        if self.is_deletion:
            if not self.previous_content:
                return LineStats()
            return LineStats(removed=len(self.previous_content.split("\n")))
        return summarize_line_changes(self.previous_content, self.content)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "type": self.change_type.value,
            "path": self.path,
            "content": self.content,
            "previous_content": self.previous_content,
            "diff": self.diff,
        }

    def canonical_dict(self) -> Dict[str, Any]:
        """Serialize without absent fields; used as hash input."""
        return {k: v for k, v in self.to_dict().items() if v is not None}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Change":
        """Deserialize from dictionary."""
        return cls(
            change_type=ChangeType(data["type"]),
            path=data["path"],
            content=data.get("content"),
            previous_content=data.get("previous_content"),
            diff=data.get("diff"),
        )


def track_file_change(
    path: str,
    content: str,
    previous_content: Optional[str] = None,
    change_type: ChangeType = ChangeType.MODIFY,
) -> Change:
    """
    Build a Change record for a path.

    The content is dropped for deletions. A diff is computed only when both
    the previous and the new content are non-empty.

    Args:
        path: Document path
        content: New content
        previous_content: Prior content, if any
        change_type: Kind of change (default MODIFY)

    Returns:
        New Change instance
    """
    change_type = ChangeType(change_type)
    diff = None
    if previous_content and content:
        diff = generate_simple_diff(previous_content, content)

    return Change(
        change_type=change_type,
        path=path,
        content=content if change_type != ChangeType.DELETE else None,
        previous_content=previous_content,
        diff=diff,
    )


@dataclass(frozen=True)
class Commit:
    """
    Immutable, hash-identified changeset record.

    Commits form a DAG through parent_hash. A commit is created exactly once
    by a successful commit or merge and never modified afterwards.

    Attributes:
        id: Process-local identifier (timestamp plus random suffix)
        hash: Content-derived fingerprint
        timestamp: Creation time
        author: Author name
        message: Commit message
        parent_hash: Hash of the commit this one extends, None for a root
        changes: Full changeset, order preserved
        metadata: Derived counts
    """
    id: str
    hash: str
    timestamp: datetime
    author: str
    message: str
    parent_hash: Optional[str] = None
    changes: Tuple[Change, ...] = field(default_factory=tuple)
    metadata: CommitMetadata = field(default_factory=CommitMetadata)

    def __post_init__(self):
        if not isinstance(self.changes, tuple):
            object.__setattr__(self, "changes", tuple(self.changes))

    @property
    def short_hash(self) -> str:
        return self.hash[:8]

    @property
    def is_root(self) -> bool:
        return not self.parent_hash

    @property
    def paths(self) -> Tuple[str, ...]:
        return tuple(c.path for c in self.changes)

    def touches(self, path: str) -> bool:
        """Check whether this commit changes the given path."""
        return any(c.path == path for c in self.changes)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "id": self.id,
            "hash": self.hash,
            "timestamp": self.timestamp.isoformat(),
            "author": self.author,
            "message": self.message,
            "parent_hash": self.parent_hash,
            "changes": [c.to_dict() for c in self.changes],
            "metadata": self.metadata.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Commit":
        """Deserialize from dictionary."""
        changes = tuple(Change.from_dict(c) for c in data.get("changes", []))
        metadata = data.get("metadata")
        return cls(
            id=data["id"],
            hash=data["hash"],
            timestamp=parse_timestamp(data["timestamp"]),
            author=data["author"],
            message=data["message"],
            parent_hash=data.get("parent_hash") or None,
            changes=changes,
            metadata=CommitMetadata.from_dict(metadata) if metadata else CommitMetadata.from_changes(changes),
        )

    def __repr__(self) -> str:
        return f"Commit(hash={self.short_hash}, message={self.message!r}, changes={len(self.changes)})"


@dataclass(frozen=True)
class Branch:
    """
    Named, movable pointer into the commit DAG.

    Attributes:
        name: Unique branch name
        head: Hash of the commit the branch points to ("" = no commits yet)
        is_active: Whether this is the current branch
        created_at: Creation time
    """
    name: str
    head: str = ""
    is_active: bool = False
    created_at: datetime = field(default_factory=datetime.now)

    def __post_init__(self):
        if not self.name or not self.name.strip():
            raise ValueError("branch name cannot be empty")

    @property
    def has_commits(self) -> bool:
        return bool(self.head)

    def move_to(self, head: str) -> "Branch":
        return replace(self, head=head)

    def with_active(self, is_active: bool) -> "Branch":
        return replace(self, is_active=is_active)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "head": self.head,
            "is_active": self.is_active,
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Branch":
        return cls(
            name=data["name"],
            head=data.get("head") or "",
            is_active=bool(data.get("is_active", False)),
            created_at=parse_timestamp(data["created_at"]),
        )


__all__ = [
    "Change",
    "Commit",
    "Branch",
    "track_file_change",
    "parse_timestamp",
]
