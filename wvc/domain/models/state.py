"""
Repository state snapshot.

The engine never mutates state in place. Each operation derives a new
RepositoryState from the previous one and swaps it in as a whole, so no
reader can observe a half-applied operation.

Traversal results (VersionHistory, DiffResult) carry a ``truncated`` flag
so callers can tell a complete walk from one that stopped at a missing
ancestor.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from types import MappingProxyType
from typing import Callable, Dict, Iterator, List, Mapping, Optional, Set, Tuple

from .entities import Branch, Change, Commit


def _without_path(changes: Tuple[Change, ...], path: str) -> Tuple[Change, ...]:
    return tuple(c for c in changes if c.path != path)


def _find(changes: Tuple[Change, ...], path: str) -> Optional[Change]:
    for change in changes:
        if change.path == path:
            return change
    return None


@dataclass(frozen=True)
class VersionHistory:
    """
    Head-first list of commits from a branch head.

    Attributes:
        commits: Commits in reverse-chronological order
        truncated: True when the walk stopped at a missing parent
    """
    commits: Tuple[Commit, ...] = ()
    truncated: bool = False

    def __iter__(self) -> Iterator[Commit]:
        return iter(self.commits)

    def __len__(self) -> int:
        return len(self.commits)

    def __getitem__(self, index):
        return self.commits[index]

    @property
    def hashes(self) -> List[str]:
        return [c.hash for c in self.commits]


@dataclass(frozen=True)
class DiffResult:
    """
    Changes accumulated between two commits, oldest first.

    Attributes:
        from_hash: Ancestor endpoint
        to_hash: Descendant endpoint
        changes: Accumulated changes
        truncated: True when from_hash was never reached
    """
    from_hash: str
    to_hash: str
    changes: Tuple[Change, ...] = ()
    truncated: bool = False

    def __iter__(self) -> Iterator[Change]:
        return iter(self.changes)

    def __len__(self) -> int:
        return len(self.changes)

    @property
    def paths(self) -> List[str]:
        return [c.path for c in self.changes]


@dataclass(frozen=True)
class RepositoryState:
    """
    Immutable snapshot of one workspace's version control state.

    Attributes:
        workspace_id: Identifier of the owning workspace
        commits: hash -> Commit, in creation order (append-only)
        branches: name -> Branch
        current_branch: Name of the active branch
        staged: Changes ready for the next commit
        working: Detected changes not yet staged

    Invariants:
    - A path is never present in both staged and working
    - Exactly one branch is active and it equals current_branch
    """
    workspace_id: str
    commits: Mapping[str, Commit] = field(default_factory=lambda: MappingProxyType({}))
    branches: Mapping[str, Branch] = field(default_factory=lambda: MappingProxyType({}))
    current_branch: str = "main"
    staged: Tuple[Change, ...] = ()
    working: Tuple[Change, ...] = ()

    def __post_init__(self):
        if not isinstance(self.commits, MappingProxyType):
            object.__setattr__(self, "commits", MappingProxyType(dict(self.commits)))
        if not isinstance(self.branches, MappingProxyType):
            object.__setattr__(self, "branches", MappingProxyType(dict(self.branches)))
        object.__setattr__(self, "staged", tuple(self.staged))
        object.__setattr__(self, "working", tuple(self.working))

    @classmethod
    def initial(
        cls,
        workspace_id: str,
        default_branch: str = "main",
        created_at: Optional[datetime] = None,
    ) -> "RepositoryState":
        """Fresh state with a single empty, active default branch."""
        branch = Branch(
            name=default_branch,
            head="",
            is_active=True,
            created_at=created_at or datetime.now(),
        )
        return cls(
            workspace_id=workspace_id,
            branches={default_branch: branch},
            current_branch=default_branch,
        )

    # ═══════════════════════════════════════════════════════════════
    # Queries
    # ═══════════════════════════════════════════════════════════════

    @property
    def current(self) -> Optional[Branch]:
        return self.branches.get(self.current_branch)

    @property
    def head(self) -> str:
        branch = self.current
        return branch.head if branch else ""

    @property
    def has_pending_changes(self) -> bool:
        return bool(self.staged or self.working)

    @property
    def staged_paths(self) -> List[str]:
        return [c.path for c in self.staged]

    @property
    def working_paths(self) -> List[str]:
        return [c.path for c in self.working]

    def get_commit(self, version_hash: str) -> Optional[Commit]:
        if not version_hash:
            return None
        return self.commits.get(version_hash)

    def get_staged(self, path: str) -> Optional[Change]:
        return _find(self.staged, path)

    def get_working(self, path: str) -> Optional[Change]:
        return _find(self.working, path)

    def walk(
        self,
        start_hash: str,
        stop: Optional[Callable[[Commit], bool]] = None,
        limit: Optional[int] = None,
    ) -> Tuple[List[Commit], bool]:
        """
        Follow parent_hash links from start_hash.

        Stops before a commit for which ``stop`` returns True, at a root, or
        once ``limit`` commits were collected.

        Returns:
            (commits head-first, truncated) where truncated means a hash on
            the chain was referenced but is not in the store
        """
        collected: List[Commit] = []
        current = start_hash
        seen: Set[str] = set()

        while current and (limit is None or len(collected) < limit):
            commit = self.commits.get(current)
            if commit is None:
                return collected, True
            if stop is not None and stop(commit):
                break
            if commit.hash in seen:
                # A cycle can only come from a hand-edited persisted state.
                return collected, True
            seen.add(commit.hash)
            collected.append(commit)
            current = commit.parent_hash or ""

        return collected, False

    def ancestors(self, start_hash: str) -> Set[str]:
        """Hashes reachable from start_hash, including itself."""
        commits, _ = self.walk(start_hash)
        return {c.hash for c in commits}

    # ═══════════════════════════════════════════════════════════════
    # Derivations (each returns a new snapshot)
    # ═══════════════════════════════════════════════════════════════

    def with_staged(self, change: Change) -> "RepositoryState":
        return replace(
            self,
            working=_without_path(self.working, change.path),
            staged=_without_path(self.staged, change.path) + (change,),
        )

    def with_unstaged(self, path: str) -> "RepositoryState":
        change = self.get_staged(path)
        if change is None:
            return self
        return replace(
            self,
            staged=_without_path(self.staged, path),
            working=_without_path(self.working, path) + (change,),
        )

    def with_working(self, change: Change) -> "RepositoryState":
        return replace(
            self,
            staged=_without_path(self.staged, change.path),
            working=_without_path(self.working, change.path) + (change,),
        )

    def without_path(self, path: str) -> "RepositoryState":
        return replace(
            self,
            staged=_without_path(self.staged, path),
            working=_without_path(self.working, path),
        )

    def with_cleared_changes(self) -> "RepositoryState":
        return replace(self, staged=(), working=())

    def with_commit(self, commit: Commit, clear_staged: bool = True) -> "RepositoryState":
        """Append a commit and advance the current branch to it."""
        commits: Dict[str, Commit] = dict(self.commits)
        commits[commit.hash] = commit
        state = replace(self, commits=commits)
        state = state.with_head(commit.hash)
        if clear_staged:
            state = replace(state, staged=())
        return state

    def with_head(self, version_hash: str) -> "RepositoryState":
        """Move the current branch's head."""
        branches: Dict[str, Branch] = dict(self.branches)
        branches[self.current_branch] = branches[self.current_branch].move_to(version_hash)
        return replace(self, branches=branches)

    def with_branch(self, branch: Branch) -> "RepositoryState":
        branches: Dict[str, Branch] = dict(self.branches)
        branches[branch.name] = branch
        return replace(self, branches=branches)

    def with_current_branch(self, name: str) -> "RepositoryState":
        branches = {
            branch_name: branch.with_active(branch_name == name)
            for branch_name, branch in self.branches.items()
        }
        return replace(self, branches=branches, current_branch=name)


__all__ = [
    "RepositoryState",
    "VersionHistory",
    "DiffResult",
]
