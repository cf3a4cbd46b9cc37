"""
Version Control Engine.

Branching version control over named document paths: stage, commit,
branch, switch, merge, diff, reset.

Consistency model:
- Every operation derives a new RepositoryState from the current one and
  swaps it in only after all checks passed. A failed operation leaves
  state untouched.
- After the swap, the serialized state is handed to the injected
  IStateStore (when autosave is on) and domain events are published.
  A failed save is logged and reported as an event; it never rolls back
  or corrupts the in-memory state.
- One engine instance owns one workspace. Mutations are serialized by an
  RLock; there is no cross-process locking (stores are last-writer-wins).

Usage:
    engine = VersionControlEngine(workspace_id="ws-1", state_store=InMemoryStateStore())
    engine.stage_change(Change(ChangeType.ADD, "notes.md", "hello"))
    commit_hash = engine.commit("initial", "alice")
    engine.create_branch("dev")
    engine.switch_branch("dev")
"""

from __future__ import annotations

import json
import logging
import secrets
from datetime import datetime, timedelta
from threading import RLock
from typing import Any, Callable, Dict, List, Optional, Sequence, Union

from wvc.domain.events import (
    WVCEvent,
    BranchCreatedEvent,
    BranchMergedEvent,
    BranchSwitchedEvent,
    CommitCreatedEvent,
    StatePersistFailedEvent,
    VersionResetEvent,
)
from wvc.domain.interfaces.hashing import IHashStrategy
from wvc.domain.interfaces.state_store import IStateStore
from wvc.domain.models import (
    Branch,
    Change,
    Commit,
    CommitMetadata,
    DiffResult,
    DuplicateBranchError,
    EmptyCommitError,
    RepositoryState,
    ResetMode,
    StagedChangesChangedError,
    UncommittedChangesError,
    UnknownBranchError,
    UnknownVersionError,
    VersionHistory,
)
from wvc.infrastructure.events import WVCEventBus
from wvc.infrastructure.hashing import RollingHash32
from wvc.infrastructure.serialization import (
    deserialize_state,
    export_snapshot,
    import_snapshot,
    serialize_state,
)

logger = logging.getLogger(__name__)

MERGE_AUTHOR = "System"


def _align_tz(value: datetime, reference: datetime) -> datetime:
    """Express value as naive or aware to match reference; naive means local time."""
    if reference.tzinfo is None and value.tzinfo is not None:
        return value.astimezone().replace(tzinfo=None)
    if reference.tzinfo is not None and value.tzinfo is None:
        return value.astimezone(reference.tzinfo)
    return value


def generate_workspace_id() -> str:
    return f"workspace-{int(datetime.now().timestamp() * 1000)}-{secrets.token_hex(4)}"


class VersionControlEngine:
    """
    Stateful version control engine for a single workspace.

    Collaborators (all injected, all optional):
        state_store: Persistence port; None keeps state in memory only
        hash_strategy: Commit fingerprint; defaults to RollingHash32
        event_bus: Receives domain events after each successful mutation
        clock: Returns the current time; defaults to datetime.now
    """

    def __init__(
        self,
        workspace_id: Optional[str] = None,
        state_store: Optional[IStateStore] = None,
        hash_strategy: Optional[IHashStrategy] = None,
        event_bus: Optional[WVCEventBus] = None,
        clock: Optional[Callable[[], datetime]] = None,
        default_branch: str = "main",
        autosave: bool = True,
        persist_workspace: bool = False,
        initial_state: Optional[RepositoryState] = None,
    ):
        """
        Initialize the engine.

        Args:
            workspace_id: Workspace identifier (generated when omitted)
            state_store: Persistence collaborator
            hash_strategy: Commit hashing strategy
            event_bus: Event bus for domain events
            clock: Time source
            default_branch: Branch created for a fresh state
            autosave: Persist after every successful mutation
            persist_workspace: Include staged/working sets in saved state
            initial_state: Start from this snapshot instead of a fresh one
        """
        self._lock = RLock()
        self._store = state_store
        self._hasher = hash_strategy or RollingHash32()
        self._event_bus = event_bus
        self._clock = clock or datetime.now
        self._autosave = autosave
        self._persist_workspace = persist_workspace

        if initial_state is not None:
            self._state = initial_state
        else:
            self._state = RepositoryState.initial(
                workspace_id=workspace_id or generate_workspace_id(),
                default_branch=default_branch,
                created_at=self._clock(),
            )

    @classmethod
    def restore(
        cls,
        state_store: IStateStore,
        workspace_id: Optional[str] = None,
        **kwargs: Any,
    ) -> "VersionControlEngine":
        """
        Build an engine from the state saved in a store.

        Starts from a fresh state when the store holds nothing.

        Raises:
            InvalidSnapshotError: If the saved state cannot be decoded
        """
        data = state_store.load()
        if data is None:
            logger.debug(f"No saved state in {state_store.description}, starting fresh")
            return cls(workspace_id=workspace_id, state_store=state_store, **kwargs)

        state = deserialize_state(data)
        logger.debug(
            f"Restored workspace {state.workspace_id} with {len(state.commits)} commits "
            f"from {state_store.description}"
        )
        return cls(state_store=state_store, initial_state=state, **kwargs)

    # ═══════════════════════════════════════════════════════════════
    # State Access
    # ═══════════════════════════════════════════════════════════════

    @property
    def state(self) -> RepositoryState:
        """Current immutable snapshot."""
        return self._state

    @property
    def workspace_id(self) -> str:
        return self._state.workspace_id

    @property
    def current_branch(self) -> str:
        return self._state.current_branch

    @property
    def head(self) -> str:
        return self._state.head

    @property
    def staged_changes(self) -> List[Change]:
        return list(self._state.staged)

    @property
    def working_changes(self) -> List[Change]:
        return list(self._state.working)

    @property
    def hash_strategy(self) -> IHashStrategy:
        return self._hasher

    def list_branches(self) -> List[Branch]:
        return list(self._state.branches.values())

    def get_branch(self, name: str) -> Optional[Branch]:
        return self._state.branches.get(name)

    # ═══════════════════════════════════════════════════════════════
    # Working / Staging Area
    # ═══════════════════════════════════════════════════════════════

    def stage_change(self, change: Change) -> None:
        """
        Stage a change, replacing any staged or working entry for its path.
        """
        with self._lock:
            self._apply(self._state.with_staged(change))
        logger.debug(f"Staged {change.change_type.value} {change.path}")

    def stage_all(self) -> int:
        """
        Stage every working change.

        Returns:
            Number of changes staged
        """
        with self._lock:
            working = self._state.working
            if not working:
                return 0
            state = self._state
            for change in working:
                state = state.with_staged(change)
            self._apply(state)
        return len(working)

    def unstage_change(self, path: str) -> bool:
        """
        Move a staged change back to the working set.

        Returns:
            True if the path was staged, False if nothing changed
        """
        with self._lock:
            new_state = self._state.with_unstaged(path)
            if new_state is self._state:
                return False
            self._apply(new_state)
        logger.debug(f"Unstaged {path}")
        return True

    def track_change(self, change: Change) -> None:
        """
        Record a detected, not yet staged change in the working set.

        Any staged entry for the same path is replaced.
        """
        with self._lock:
            self._apply(self._state.with_working(change))

    def discard_change(self, path: str) -> bool:
        """
        Drop a path from both the staged and the working set.

        Returns:
            True if anything was removed
        """
        with self._lock:
            if self._state.get_staged(path) is None and self._state.get_working(path) is None:
                return False
            self._apply(self._state.without_path(path))
        return True

    def discard_all(self) -> None:
        with self._lock:
            if self._state.has_pending_changes:
                self._apply(self._state.with_cleared_changes())

    # ═══════════════════════════════════════════════════════════════
    # Commit
    # ═══════════════════════════════════════════════════════════════

    def commit(
        self,
        message: str,
        author: str,
        expected_staged: Optional[Sequence[Change]] = None,
    ) -> str:
        """
        Commit the staged set on the current branch.

        Args:
            message: Commit message (must not be blank)
            author: Author name
            expected_staged: Commit only if the staged set equals this
                sequence; checked under the same lock as the commit

        Returns:
            Hash of the new commit

        Raises:
            EmptyCommitError: If nothing is staged or the message is blank
            StagedChangesChangedError: If expected_staged does not match
        """
        with self._lock:
            state = self._state
            if not state.staged:
                raise EmptyCommitError("No changes staged for commit")
            if not message or not message.strip():
                raise EmptyCommitError("Commit message cannot be empty")
            if expected_staged is not None and state.staged != tuple(expected_staged):
                raise StagedChangesChangedError()

            commit = self._build_commit(state, message, author, state.staged, prefix="commit")
            self._apply(state.with_commit(commit, clear_staged=True))

        logger.info(f"Committed {commit.short_hash} on {state.current_branch}: {message}")
        self._publish(CommitCreatedEvent(
            workspace_id=state.workspace_id,
            commit_hash=commit.hash,
            parent_hash=commit.parent_hash,
            branch=state.current_branch,
            author=author,
            message=message,
            file_paths=commit.paths,
        ))
        return commit.hash

    def _build_commit(
        self,
        state: RepositoryState,
        message: str,
        author: str,
        changes: Sequence[Change],
        prefix: str,
    ) -> Commit:
        parent_hash = state.head or None
        timestamp = self._next_timestamp(state, parent_hash)
        changes = tuple(changes)

        content = json.dumps(
            {
                "message": message,
                "author": author,
                "changes": [c.canonical_dict() for c in changes],
                "parent_hash": parent_hash or "",
                "timestamp": timestamp.isoformat(),
            },
            separators=(",", ":"),
            ensure_ascii=False,
        )
        commit_hash = self._hasher.hash(content)
        attempt = 0
        while commit_hash in state.commits:
            attempt += 1
            logger.warning(
                f"Hash collision on {commit_hash} ({self._hasher.name}), re-hashing (attempt {attempt})"
            )
            commit_hash = self._hasher.hash(f"{content}#{attempt}")

        return Commit(
            id=f"{prefix}-{int(timestamp.timestamp() * 1000)}-{secrets.token_hex(3)}",
            hash=commit_hash,
            timestamp=timestamp,
            author=author,
            message=message,
            parent_hash=parent_hash,
            changes=changes,
            metadata=CommitMetadata.from_changes(changes),
        )

    def _next_timestamp(self, state: RepositoryState, parent_hash: Optional[str]) -> datetime:
        # Children are strictly younger than their parent so history order is total.
        now = self._clock()
        parent = state.get_commit(parent_hash) if parent_hash else None
        if parent is None:
            return now
        now = _align_tz(now, parent.timestamp)
        if now <= parent.timestamp:
            now = parent.timestamp + timedelta(microseconds=1)
        return now

    # ═══════════════════════════════════════════════════════════════
    # Branching
    # ═══════════════════════════════════════════════════════════════

    def create_branch(self, name: str) -> Branch:
        """
        Create a branch pointing at the current head.

        The new branch records the head at creation time; later commits on
        the current branch do not move it.

        Raises:
            DuplicateBranchError: If the name is taken
            ValueError: If the name is blank
        """
        with self._lock:
            state = self._state
            if name in state.branches:
                raise DuplicateBranchError(name)
            branch = Branch(name=name, head=state.head, is_active=False, created_at=self._clock())
            self._apply(state.with_branch(branch))

        logger.info(f"Created branch {name} at {branch.head[:8] or '(empty)'}")
        self._publish(BranchCreatedEvent(
            workspace_id=state.workspace_id,
            branch=name,
            head=branch.head,
            source_branch=state.current_branch,
        ))
        return branch

    def switch_branch(self, name: str) -> None:
        """
        Make another branch current.

        Raises:
            UnknownBranchError: If the branch does not exist
            UncommittedChangesError: If staged or working sets are non-empty
        """
        with self._lock:
            state = self._state
            if name not in state.branches:
                raise UnknownBranchError(name)
            if state.has_pending_changes:
                raise UncommittedChangesError(len(state.staged), len(state.working))
            previous = state.current_branch
            self._apply(state.with_current_branch(name))

        logger.info(f"Switched branch {previous} -> {name}")
        self._publish(BranchSwitchedEvent(
            workspace_id=state.workspace_id,
            from_branch=previous,
            to_branch=name,
        ))

    def merge_branch(self, source_branch: str) -> str:
        """
        Merge another branch into the current branch.

        Collects the source commits not reachable from the current head by
        walking the source chain back until it meets the current head's
        ancestry (or a root), then records their changes, oldest first, in
        a single merge commit on the current branch.

        Changes are concatenated without conflict detection: when both
        branches touched a path, both changes appear in the merge commit.

        Returns:
            Hash of the merge commit

        Raises:
            UnknownBranchError: If the source or current branch is missing
        """
        with self._lock:
            state = self._state
            source = state.branches.get(source_branch)
            if source is None:
                raise UnknownBranchError(source_branch)
            target = state.current
            if target is None:
                raise UnknownBranchError(state.current_branch)

            target_ancestry = state.ancestors(target.head)
            collected, truncated = state.walk(
                source.head, stop=lambda c: c.hash in target_ancestry
            )
            if truncated:
                logger.warning(
                    f"Source branch {source_branch} has a missing ancestor; merging "
                    f"{len(collected)} reachable commit(s) only"
                )

            changes: List[Change] = []
            for commit in reversed(collected):
                changes.extend(commit.changes)

            message = f"Merge branch '{source_branch}' into {target.name}"
            merge_commit = self._build_commit(state, message, MERGE_AUTHOR, changes, prefix="merge")
            self._apply(state.with_commit(merge_commit, clear_staged=False))

        logger.info(
            f"Merged {source_branch} into {target.name}: {len(collected)} commit(s), "
            f"{len(changes)} change(s) -> {merge_commit.short_hash}"
        )
        self._publish(BranchMergedEvent(
            workspace_id=state.workspace_id,
            source_branch=source_branch,
            target_branch=target.name,
            merge_hash=merge_commit.hash,
            merged_commit_count=len(collected),
            truncated=truncated,
        ))
        return merge_commit.hash

    # ═══════════════════════════════════════════════════════════════
    # History & Diff Queries
    # ═══════════════════════════════════════════════════════════════

    def get_version_history(self, limit: Optional[int] = None) -> VersionHistory:
        """
        Commits from the current head back through parent links.

        Args:
            limit: Maximum number of commits (None = all)

        Returns:
            VersionHistory, head first; truncated when a parent was missing
        """
        if limit is not None and limit < 0:
            raise ValueError(f"limit cannot be negative: {limit}")

        state = self._state
        commits, truncated = state.walk(state.head, limit=limit)
        if truncated:
            logger.warning(
                f"History of {state.current_branch} is truncated after {len(commits)} commit(s): "
                f"missing ancestor"
            )
        return VersionHistory(commits=tuple(commits), truncated=truncated)

    def get_version(self, version_hash: str) -> Optional[Commit]:
        """Look up a commit by hash; None when absent."""
        return self._state.get_commit(version_hash)

    def get_diff(self, from_hash: str, to_hash: str) -> DiffResult:
        """
        Changes recorded between two commits.

        Walks back from to_hash, prepending each commit's changes, until
        from_hash is reached. When from_hash is not an ancestor, or either
        endpoint is unknown, the result is marked truncated.
        """
        state = self._state
        if state.get_commit(from_hash) is None or state.get_commit(to_hash) is None:
            logger.warning(f"Diff endpoint not found: {from_hash!r} -> {to_hash!r}")
            return DiffResult(from_hash=from_hash, to_hash=to_hash, truncated=True)

        commits, missing = state.walk(to_hash, stop=lambda c: c.hash == from_hash)
        last_parent = commits[-1].parent_hash if commits else to_hash
        reached = not missing and last_parent == from_hash

        changes: List[Change] = []
        for commit in reversed(commits):
            changes.extend(commit.changes)

        if not reached:
            logger.warning(
                f"{from_hash[:8]} is not an ancestor of {to_hash[:8]}; diff covers "
                f"{len(commits)} commit(s) only"
            )
        return DiffResult(
            from_hash=from_hash,
            to_hash=to_hash,
            changes=tuple(changes),
            truncated=not reached,
        )

    def get_path_history(self, path: str, limit: Optional[int] = None) -> List[Commit]:
        """Commits on the current history that change the given path, head first."""
        matches = [c for c in self.get_version_history() if c.touches(path)]
        return matches[:limit] if limit is not None else matches

    def get_content_at(self, version_hash: str, path: str) -> Optional[str]:
        """
        Content of a path as of a commit.

        Uses the most recent change to the path at or before the commit.

        Returns:
            Content, or None if the path was deleted or never recorded

        Raises:
            UnknownVersionError: If the commit does not exist
        """
        state = self._state
        if state.get_commit(version_hash) is None:
            raise UnknownVersionError(version_hash)

        commits, _ = state.walk(version_hash)
        for commit in commits:
            for change in reversed(commit.changes):
                if change.path == path:
                    return None if change.is_deletion else change.content
        return None

    def reset(self, version_hash: str, mode: Union[ResetMode, str] = ResetMode.SOFT) -> None:
        """
        Point the current branch at an existing commit.

        Args:
            version_hash: Target commit
            mode: SOFT keeps staged/working sets, HARD clears them

        Raises:
            UnknownVersionError: If the commit does not exist
        """
        mode = ResetMode(mode)
        with self._lock:
            state = self._state
            if state.get_commit(version_hash) is None:
                raise UnknownVersionError(version_hash)

            previous_head = state.head
            new_state = state.with_head(version_hash)
            if mode == ResetMode.HARD:
                new_state = new_state.with_cleared_changes()
            self._apply(new_state)

        logger.info(f"Reset {state.current_branch} to {version_hash[:8]} ({mode.value})")
        self._publish(VersionResetEvent(
            workspace_id=state.workspace_id,
            branch=state.current_branch,
            previous_head=previous_head,
            new_head=version_hash,
            mode=mode.value,
        ))

    def get_stats(self) -> Dict[str, Any]:
        state = self._state
        return {
            "workspace_id": state.workspace_id,
            "current_branch": state.current_branch,
            "head": state.head,
            "total_commits": len(state.commits),
            "total_branches": len(state.branches),
            "staged_changes": len(state.staged),
            "working_changes": len(state.working),
        }

    # ═══════════════════════════════════════════════════════════════
    # Persistence / Export
    # ═══════════════════════════════════════════════════════════════

    def to_dict(self, include_workspace: bool = False) -> Dict[str, Any]:
        return serialize_state(self._state, include_workspace)

    def save(self) -> bool:
        """
        Persist the current state now, regardless of autosave.

        Returns:
            True if the store accepted the state (False without a store)
        """
        return self._persist(self._state)

    def export_snapshot(self, include_workspace: bool = False) -> Dict[str, Any]:
        """Export envelope for download; inverse of import_snapshot()."""
        return export_snapshot(self._state, exported_at=self._clock(), include_workspace=include_workspace)

    def import_snapshot(self, data: Union[str, bytes, Dict[str, Any]]) -> None:
        """
        Replace the engine state with an exported snapshot.

        Raises:
            InvalidSnapshotError: If the snapshot fails validation
        """
        state = import_snapshot(data)
        with self._lock:
            self._apply(state)
        logger.info(f"Imported workspace {state.workspace_id} ({len(state.commits)} commits)")

    # ═══════════════════════════════════════════════════════════════
    # Internals
    # ═══════════════════════════════════════════════════════════════

    def _apply(self, new_state: RepositoryState) -> None:
        self._state = new_state
        if self._autosave:
            self._persist(new_state)

    def _persist(self, state: RepositoryState) -> bool:
        if self._store is None:
            return False

        error: Optional[str] = None
        try:
            saved = self._store.save(serialize_state(state, self._persist_workspace))
        except Exception as e:
            saved = False
            error = str(e)

        if not saved:
            logger.warning(
                f"Failed to persist workspace {state.workspace_id} to {self._store.description}"
                + (f": {error}" if error else "")
            )
            self._publish(StatePersistFailedEvent(
                workspace_id=state.workspace_id,
                store=self._store.description,
                error=error,
            ))
        return saved

    def _publish(self, event: WVCEvent) -> None:
        if self._event_bus is not None:
            self._event_bus.publish(event)


__all__ = ["VersionControlEngine", "generate_workspace_id", "MERGE_AUTHOR"]
