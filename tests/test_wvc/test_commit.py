"""
Tests for VersionControlEngine.commit.
"""

from datetime import timedelta

import pytest

from wvc.application.services import VersionControlEngine
from wvc.domain.events import CommitCreatedEvent
from wvc.domain.interfaces.hashing import IHashStrategy
from wvc.domain.models import EmptyCommitError, StagedChangesChangedError, VersionControlError
from wvc.infrastructure.hashing import Sha256Hash

from .builders import FakeClock, add, commit_change, delete, modify


class CollidingHash(IHashStrategy):
    """Returns the same digest for every first attempt."""

    name = "colliding"

    def hash(self, content: str) -> str:
        return "resolved" if content.endswith("#1") else "collide!"


class TestCommit:
    """Creating commits from the staged set."""

    def test_initial_commit(self, engine):
        """First commit: one history entry with derived metadata."""
        engine.stage_change(add("notes.md", "hello"))
        commit_hash = engine.commit("initial", "alice")

        history = engine.get_version_history()
        assert len(history) == 1
        commit = history[0]
        assert commit.hash == commit_hash
        assert commit.metadata.additions == 1
        assert commit.metadata.file_count == 1
        assert commit.parent_hash is None
        assert commit.author == "alice"
        assert commit.message == "initial"

    def test_commit_advances_head_and_clears_staged(self, engine):
        engine.stage_change(add("notes.md", "hello"))
        commit_hash = engine.commit("initial", "alice")
        assert engine.head == commit_hash
        assert engine.get_branch("main").head == commit_hash
        assert engine.staged_changes == []

    def test_commit_keeps_working_set(self, engine):
        engine.track_change(add("draft.md", "wip"))
        engine.stage_change(add("notes.md", "hello"))
        engine.commit("initial", "alice")
        assert [c.path for c in engine.working_changes] == ["draft.md"]

    def test_committed_hash_resolves_to_identical_changes(self, engine):
        changes = [add("a.md", "1"), modify("b.md", "2", previous="1"), delete("c.md")]
        for change in changes:
            engine.stage_change(change)
        commit_hash = engine.commit("batch", "alice")
        assert engine.get_version(commit_hash).changes == tuple(changes)

    def test_child_links_to_parent(self, engine):
        first = commit_change(engine, add("notes.md", "hello"), "initial")
        second = commit_change(engine, modify("notes.md", "hello world"), "update")
        assert engine.get_version(second).parent_hash == first
        assert first != second

    def test_empty_staged_set_rejected(self, engine):
        """Commit with nothing staged fails and leaves the head alone."""
        first = commit_change(engine, add("notes.md", "hello"), "initial")
        with pytest.raises(EmptyCommitError):
            engine.commit("msg", "alice")
        assert engine.head == first
        assert len(engine.state.commits) == 1

    def test_blank_message_rejected(self, engine):
        engine.stage_change(add("notes.md", "hello"))
        with pytest.raises(EmptyCommitError, match="message"):
            engine.commit("   ", "alice")
        assert engine.head == ""
        assert len(engine.staged_changes) == 1

    def test_errors_share_base_class(self, engine):
        with pytest.raises(VersionControlError):
            engine.commit("msg", "alice")

    def test_expected_staged_mismatch_rejected(self, engine):
        engine.stage_change(add("notes.md", "hello"))
        before = engine.state

        with pytest.raises(StagedChangesChangedError):
            engine.commit("initial", "alice", expected_staged=[add("other.md", "x")])

        assert engine.state is before
        assert engine.head == ""

    def test_expected_staged_match_commits(self, engine):
        change = add("notes.md", "hello")
        engine.stage_change(change)
        commit_hash = engine.commit("initial", "alice", expected_staged=[change])
        assert engine.get_version(commit_hash).changes == (change,)

    def test_unknown_hash_lookup_returns_none(self, engine):
        assert engine.get_version("ffffffff") is None
        assert engine.get_version("") is None


class TestCommitHashing:
    def test_default_hash_is_eight_hex_digits(self, engine):
        commit_hash = commit_change(engine, add("notes.md", "hello"), "initial")
        assert len(commit_hash) == 8
        int(commit_hash, 16)

    def test_injected_strategy_used(self, clock):
        engine = VersionControlEngine(hash_strategy=Sha256Hash(), clock=clock)
        commit_hash = commit_change(engine, add("notes.md", "hello"), "initial")
        assert len(commit_hash) == 64

    def test_collision_is_rehashed(self, clock):
        engine = VersionControlEngine(hash_strategy=CollidingHash(), clock=clock)
        first = commit_change(engine, add("a.md", "1"), "one")
        second = commit_change(engine, add("b.md", "2"), "two")
        assert first == "collide!"
        assert second == "resolved"
        assert len(engine.state.commits) == 2

    def test_timestamps_strictly_increase_with_frozen_clock(self):
        """A frozen clock still yields strictly ordered commits."""
        clock = FakeClock(step=timedelta(0))
        engine = VersionControlEngine(clock=clock)
        hashes = [commit_change(engine, add(f"{i}.md", str(i)), f"c{i}") for i in range(3)]
        timestamps = [engine.get_version(h).timestamp for h in hashes]
        assert timestamps[0] < timestamps[1] < timestamps[2]


class TestCommitEvents:
    def test_commit_publishes_event(self, engine, event_bus):
        received = []
        event_bus.subscribe(CommitCreatedEvent, received.append)

        commit_hash = commit_change(engine, add("notes.md", "hello"), "initial")

        assert len(received) == 1
        event = received[0]
        assert event.commit_hash == commit_hash
        assert event.branch == "main"
        assert event.file_paths == ("notes.md",)
        assert event.workspace_id == "ws-test"

    def test_failed_commit_publishes_nothing(self, engine, event_bus):
        with pytest.raises(EmptyCommitError):
            engine.commit("msg", "alice")
        assert event_bus.get_history(CommitCreatedEvent) == []
