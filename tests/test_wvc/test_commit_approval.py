"""
Tests for the email-verified commit flow.
"""

import logging
from datetime import timedelta

import pytest

from wvc.application.services import (
    CommitApprovalGate,
    VersionControlEngine,
    author_from_email,
    generate_verification_code,
)
from wvc.domain.models import (
    CommitApprovalError,
    EmptyCommitError,
    InvalidVerificationCodeError,
    PendingCommitExpiredError,
    PendingCommitNotFoundError,
    StagedChangesChangedError,
)
from wvc.infrastructure.notifications import LoggingVerificationNotifier, render_verification_email

from .builders import FakeClock, RecordingNotifier, add, modify


class InterleavingEngine(VersionControlEngine):
    """Stages one more change just before every commit takes the lock."""

    def __init__(self, extra, **kwargs):
        super().__init__(**kwargs)
        self._extra = extra

    def commit(self, message, author, expected_staged=None):
        self.stage_change(self._extra)
        return super().commit(message, author, expected_staged)


@pytest.fixture
def gate_clock() -> FakeClock:
    return FakeClock(step=timedelta(0))


@pytest.fixture
def gate(engine, notifier, gate_clock) -> CommitApprovalGate:
    return CommitApprovalGate(engine, notifier, ttl_seconds=60, clock=gate_clock)


class TestHelpers:
    def test_author_from_email(self):
        assert author_from_email("jane.doe@example.org") == "jane doe"
        assert author_from_email("j_smith@example.org") == "j smith"

    def test_verification_code_alphabet(self):
        code = generate_verification_code()
        assert len(code) == 8
        assert code == code.upper()
        assert code.isalnum()
        assert len(generate_verification_code(12)) == 12


class TestInitiateCommit:
    def test_sends_code(self, engine, gate, notifier):
        engine.stage_change(add("notes.md", "hello"))
        pending = gate.initiate_commit("initial", "jane.doe@example.org")

        assert notifier.sent == [pending]
        assert pending.author == "jane doe"
        assert pending.paths == ["notes.md"]
        assert pending.expires_at == pending.created_at + timedelta(seconds=60)
        assert gate.list_pending() == [pending]
        assert engine.head == ""

    def test_requires_staged_changes(self, gate):
        with pytest.raises(EmptyCommitError):
            gate.initiate_commit("initial", "jane@example.org")

    def test_requires_message(self, engine, gate):
        engine.stage_change(add("notes.md", "hello"))
        with pytest.raises(EmptyCommitError):
            gate.initiate_commit("", "jane@example.org")

    def test_requires_email(self, engine, gate):
        engine.stage_change(add("notes.md", "hello"))
        with pytest.raises(ValueError):
            gate.initiate_commit("initial", "not-an-email")

    def test_notifier_failure_discards_pending(self, engine):
        gate = CommitApprovalGate(engine, RecordingNotifier(fail=True))
        engine.stage_change(add("notes.md", "hello"))
        with pytest.raises(ConnectionError):
            gate.initiate_commit("initial", "jane@example.org")
        assert gate.list_pending() == []


class TestCompleteCommit:
    def test_correct_code_commits(self, engine, gate, notifier):
        engine.stage_change(add("notes.md", "hello"))
        pending = gate.initiate_commit("initial", "jane.doe@example.org")

        commit_hash = gate.complete_commit(pending.commit_id, notifier.code_for(pending.commit_id))

        commit = engine.get_version(commit_hash)
        assert engine.head == commit_hash
        assert commit.author == "jane doe"
        assert commit.message == "initial"
        assert gate.list_pending() == []

    def test_code_is_case_insensitive(self, engine, gate, notifier):
        engine.stage_change(add("notes.md", "hello"))
        pending = gate.initiate_commit("initial", "jane@example.org")
        code = f"  {pending.verification_code.lower()} "
        assert gate.complete_commit(pending.commit_id, code) == engine.head

    def test_wrong_code_keeps_pending(self, engine, gate):
        engine.stage_change(add("notes.md", "hello"))
        pending = gate.initiate_commit("initial", "jane@example.org")

        with pytest.raises(InvalidVerificationCodeError):
            gate.complete_commit(pending.commit_id, "WRONG")

        assert engine.head == ""
        assert gate.list_pending() == [pending]
        gate.complete_commit(pending.commit_id, pending.verification_code)
        assert engine.head != ""

    def test_unknown_commit_id(self, gate):
        with pytest.raises(PendingCommitNotFoundError):
            gate.complete_commit("pending-missing", "ABCDEFGH")

    def test_expired_pending_commit(self, engine, gate, gate_clock):
        engine.stage_change(add("notes.md", "hello"))
        pending = gate.initiate_commit("initial", "jane@example.org")
        gate_clock.advance(61)

        with pytest.raises(PendingCommitExpiredError):
            gate.complete_commit(pending.commit_id, pending.verification_code)

        with pytest.raises(PendingCommitNotFoundError):
            gate.complete_commit(pending.commit_id, pending.verification_code)
        assert engine.head == ""

    def test_staged_set_changed_since_initiation(self, engine, gate):
        engine.stage_change(add("notes.md", "hello"))
        pending = gate.initiate_commit("initial", "jane@example.org")
        engine.stage_change(modify("notes.md", "tampered"))

        with pytest.raises(StagedChangesChangedError):
            gate.complete_commit(pending.commit_id, pending.verification_code)
        assert engine.head == ""
        assert gate.list_pending() == []

    def test_staging_during_completion_is_not_committed(self, store, notifier, gate_clock):
        """A change staged while completion is in flight blocks the commit."""
        engine = InterleavingEngine(extra=add("late.md", "sneaky"), state_store=store)
        gate = CommitApprovalGate(engine, notifier, ttl_seconds=60, clock=gate_clock)
        engine.stage_change(add("notes.md", "hello"))
        pending = gate.initiate_commit("initial", "jane@example.org")

        with pytest.raises(StagedChangesChangedError):
            gate.complete_commit(pending.commit_id, pending.verification_code)

        assert engine.head == ""
        assert sorted(c.path for c in engine.staged_changes) == ["late.md", "notes.md"]
        assert gate.list_pending() == []

    def test_failures_share_base_class(self, gate):
        with pytest.raises(CommitApprovalError):
            gate.complete_commit("pending-missing", "X")


class TestPendingLifecycle:
    def test_cancel(self, engine, gate):
        engine.stage_change(add("notes.md", "hello"))
        pending = gate.initiate_commit("initial", "jane@example.org")
        assert gate.cancel_commit(pending.commit_id) is True
        assert gate.cancel_commit(pending.commit_id) is False

    def test_purge_expired(self, engine, gate, gate_clock):
        engine.stage_change(add("notes.md", "hello"))
        gate.initiate_commit("first", "jane@example.org")
        gate_clock.advance(30)
        gate.initiate_commit("second", "jane@example.org")
        gate_clock.advance(40)

        assert [p.message for p in gate.list_pending()] == ["second"]
        assert gate.purge_expired() == 1

    def test_zero_ttl_expires_immediately(self, engine, notifier, gate_clock):
        gate = CommitApprovalGate(engine, notifier, ttl_seconds=0, clock=gate_clock)
        engine.stage_change(add("notes.md", "hello"))
        pending = gate.initiate_commit("initial", "jane@example.org")

        assert pending.expires_at == pending.created_at
        assert gate.list_pending() == []
        with pytest.raises(PendingCommitExpiredError):
            gate.complete_commit(pending.commit_id, pending.verification_code)
        assert engine.head == ""

    def test_no_ttl_never_expires(self, engine, notifier, gate_clock):
        gate = CommitApprovalGate(engine, notifier, ttl_seconds=None, clock=gate_clock)
        engine.stage_change(add("notes.md", "hello"))
        pending = gate.initiate_commit("initial", "jane@example.org")
        gate_clock.advance(10 ** 6)
        assert pending.expires_at is None
        assert gate.complete_commit(pending.commit_id, pending.verification_code) == engine.head


class TestLoggingVerificationNotifier:
    def test_logs_email(self, engine, caplog):
        gate = CommitApprovalGate(engine, LoggingVerificationNotifier())
        engine.stage_change(add("notes.md", "hello"))

        with caplog.at_level(logging.INFO, logger="wvc"):
            pending = gate.initiate_commit("initial", "jane@example.org")

        assert pending.verification_code in caplog.text
        assert "To: jane@example.org" in caplog.text

    def test_render_lists_documents(self, engine, notifier):
        gate = CommitApprovalGate(engine, notifier)
        engine.stage_change(add("a.md", "1"))
        engine.stage_change(add("b.md", "2"))
        pending = gate.initiate_commit("pair", "jane@example.org")

        body = render_verification_email(pending)
        assert "Documents: a.md, b.md" in body
        assert f"Verification Code: {pending.verification_code}" in body
