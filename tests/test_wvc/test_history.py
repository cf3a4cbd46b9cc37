"""
Tests for history, diff, reset and content queries.
"""

from dataclasses import replace

import pytest

from wvc.application.services import VersionControlEngine
from wvc.domain.events import VersionResetEvent
from wvc.domain.models import ResetMode, UnknownVersionError

from .builders import add, commit_change, delete, modify


@pytest.fixture
def three_commits(engine):
    """notes.md added, modified, then deleted on main."""
    first = commit_change(engine, add("notes.md", "hello"), "initial")
    second = commit_change(engine, modify("notes.md", "hello world", previous="hello"), "update")
    third = commit_change(engine, delete("notes.md"), "remove")
    return first, second, third


# ═══════════════════════════════════════════════════════════════════════════════
# History
# ═══════════════════════════════════════════════════════════════════════════════


class TestVersionHistory:
    def test_empty_repository(self, engine):
        history = engine.get_version_history()
        assert len(history) == 0
        assert not history.truncated

    def test_head_first_order(self, engine, three_commits):
        first, second, third = three_commits
        history = engine.get_version_history()
        assert history.hashes == [third, second, first]
        assert not history.truncated

    def test_strictly_descending_timestamps(self, engine, three_commits):
        timestamps = [c.timestamp for c in engine.get_version_history()]
        assert all(a > b for a, b in zip(timestamps, timestamps[1:]))

    @pytest.mark.parametrize("limit,expected", [(0, 0), (1, 1), (2, 2), (10, 3)])
    def test_limit(self, engine, three_commits, limit, expected):
        history = engine.get_version_history(limit)
        assert len(history) == expected
        if expected:
            assert history[0].hash == three_commits[2]

    def test_negative_limit_rejected(self, engine):
        with pytest.raises(ValueError):
            engine.get_version_history(-1)

    def test_missing_ancestor_truncates(self, engine, three_commits):
        first, second, third = three_commits
        commits = dict(engine.state.commits)
        del commits[second]
        broken = VersionControlEngine(initial_state=replace(engine.state, commits=commits))

        history = broken.get_version_history()

        assert history.hashes == [third]
        assert history.truncated

    def test_history_follows_current_branch(self, engine, three_commits):
        first, _, _ = three_commits
        engine.reset(first)
        engine.create_branch("old")
        engine.switch_branch("old")
        assert engine.get_version_history().hashes == [first]


# ═══════════════════════════════════════════════════════════════════════════════
# Diff
# ═══════════════════════════════════════════════════════════════════════════════


class TestGetDiff:
    def test_changes_between_ancestor_and_descendant(self, engine, three_commits):
        first, second, third = three_commits
        diff = engine.get_diff(first, third)
        assert [c.change_type.value for c in diff] == ["modify", "delete"]
        assert diff.paths == ["notes.md", "notes.md"]
        assert not diff.truncated

    def test_same_endpoint_is_empty(self, engine, three_commits):
        diff = engine.get_diff(three_commits[1], three_commits[1])
        assert len(diff) == 0
        assert not diff.truncated

    def test_unknown_endpoint(self, engine, three_commits):
        diff = engine.get_diff("ffffffff", three_commits[2])
        assert diff.changes == ()
        assert diff.truncated

    def test_missing_parent_between_endpoints(self, engine, three_commits):
        """A hole in the chain between the endpoints truncates the diff."""
        first, second, third = three_commits
        fourth = commit_change(engine, add("other.md", "x"), "other")
        commits = dict(engine.state.commits)
        del commits[second]
        broken = VersionControlEngine(initial_state=replace(engine.state, commits=commits))

        diff = broken.get_diff(first, fourth)

        assert diff.truncated
        assert diff.paths == ["notes.md", "other.md"]
        assert [c.change_type.value for c in diff] == ["delete", "add"]

    def test_reversed_endpoints_marked_truncated(self, engine, three_commits):
        """from_hash is not an ancestor of to_hash: whole chain, truncated."""
        first, _, third = three_commits
        diff = engine.get_diff(third, first)
        assert diff.truncated
        assert [c.change_type.value for c in diff] == ["add"]


# ═══════════════════════════════════════════════════════════════════════════════
# Reset
# ═══════════════════════════════════════════════════════════════════════════════


class TestReset:
    def test_hard_reset_clears_workspace(self, engine, three_commits):
        first, _, _ = three_commits
        engine.stage_change(add("pending.md", "p"))
        engine.track_change(add("draft.md", "d"))

        engine.reset(first, "hard")

        assert engine.head == first
        assert engine.staged_changes == []
        assert engine.working_changes == []

    def test_soft_reset_keeps_workspace(self, engine, three_commits):
        first, _, _ = three_commits
        engine.stage_change(add("pending.md", "p"))
        engine.reset(first)
        assert engine.head == first
        assert [c.path for c in engine.staged_changes] == ["pending.md"]

    def test_reset_keeps_commits(self, engine, three_commits):
        first, _, third = three_commits
        engine.reset(first, ResetMode.HARD)
        assert engine.get_version(third) is not None
        engine.reset(third)
        assert engine.head == third

    def test_unknown_hash_rejected(self, engine, three_commits):
        before = engine.state
        with pytest.raises(UnknownVersionError):
            engine.reset("ffffffff")
        assert engine.state is before

    def test_invalid_mode_rejected(self, engine, three_commits):
        with pytest.raises(ValueError):
            engine.reset(three_commits[0], "mixed")

    def test_publishes_event(self, engine, event_bus, three_commits):
        first, _, third = three_commits
        engine.reset(first, "hard")
        [event] = event_bus.get_history(VersionResetEvent)
        assert event.previous_head == third
        assert event.new_head == first
        assert event.mode == "hard"


# ═══════════════════════════════════════════════════════════════════════════════
# Content Queries
# ═══════════════════════════════════════════════════════════════════════════════


class TestContentQueries:
    def test_content_at(self, engine, three_commits):
        first, second, third = three_commits
        assert engine.get_content_at(first, "notes.md") == "hello"
        assert engine.get_content_at(second, "notes.md") == "hello world"
        assert engine.get_content_at(third, "notes.md") is None
        assert engine.get_content_at(second, "other.md") is None

    def test_content_at_unknown_commit(self, engine):
        with pytest.raises(UnknownVersionError):
            engine.get_content_at("ffffffff", "notes.md")

    def test_path_history(self, engine, three_commits):
        first, second, third = three_commits
        commit_change(engine, add("other.md", "x"), "other")
        assert [c.hash for c in engine.get_path_history("notes.md")] == [third, second, first]
        assert [c.hash for c in engine.get_path_history("notes.md", limit=1)] == [third]
        assert engine.get_path_history("missing.md") == []

    def test_stats(self, engine, three_commits):
        engine.create_branch("dev")
        engine.track_change(add("draft.md", "d"))
        stats = engine.get_stats()
        assert stats["total_commits"] == 3
        assert stats["total_branches"] == 2
        assert stats["working_changes"] == 1
        assert stats["staged_changes"] == 0
        assert stats["head"] == three_commits[2]
