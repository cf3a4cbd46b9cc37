"""
Commit approval gate.

An optional out-of-band confirmation step in front of
VersionControlEngine.commit. Initiating a commit snapshots the staged set
and sends a verification code to the author's email through an
IVerificationNotifier; completing it with the right code performs the
ordinary engine commit.

Flow:
    pending = gate.initiate_commit("Update notes", "jane.doe@example.org")
    # code arrives out of band
    commit_hash = gate.complete_commit(pending.commit_id, code)

The gate holds pending commits in memory; they do not survive a restart.
"""

import logging
import secrets
import string
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from threading import Lock
from typing import Callable, Dict, List, Optional, Tuple

from wvc.domain.interfaces.notifier import IVerificationNotifier
from wvc.domain.models import (
    Change,
    EmptyCommitError,
    InvalidVerificationCodeError,
    PendingCommitExpiredError,
    PendingCommitNotFoundError,
    StagedChangesChangedError,
)

from .version_control import VersionControlEngine

logger = logging.getLogger(__name__)

CODE_ALPHABET = string.ascii_uppercase + string.digits


def author_from_email(email: str) -> str:
    """``jane.doe@example.org`` -> ``jane doe``."""
    local = email.split("@", 1)[0]
    return local.replace(".", " ").replace("_", " ")


def generate_verification_code(length: int = 8) -> str:
    return "".join(secrets.choice(CODE_ALPHABET) for _ in range(length))


@dataclass(frozen=True)
class PendingCommit:
    """
    A commit waiting for its verification code.

    Attributes:
        commit_id: Identifier used to complete or cancel
        message: Commit message
        email: Recipient of the verification code
        author: Author name derived from the email
        verification_code: Code the author must echo back
        staged: Staged changes at initiation time
        created_at: Initiation time
        expires_at: Expiry time, None for no expiry
    """
    commit_id: str
    message: str
    email: str
    author: str
    verification_code: str
    staged: Tuple[Change, ...] = field(default_factory=tuple)
    created_at: datetime = field(default_factory=datetime.now)
    expires_at: Optional[datetime] = None

    @property
    def paths(self) -> List[str]:
        return [c.path for c in self.staged]

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at is not None and now >= self.expires_at


class CommitApprovalGate:
    """
    Requires an out-of-band verification code before committing.

    The staged set must be unchanged between initiation and completion;
    otherwise completion fails and the author must initiate again.
    """

    def __init__(
        self,
        engine: VersionControlEngine,
        notifier: IVerificationNotifier,
        ttl_seconds: Optional[float] = None,
        clock: Optional[Callable[[], datetime]] = None,
        code_length: int = 8,
    ):
        """
        Args:
            engine: Engine that performs the actual commit
            notifier: Delivers verification codes
            ttl_seconds: Lifetime of a pending commit (None = no expiry)
            clock: Time source
            code_length: Number of characters in a verification code
        """
        self._engine = engine
        self._notifier = notifier
        self._ttl = ttl_seconds
        self._clock = clock or datetime.now
        self._code_length = code_length
        self._lock = Lock()
        self._pending: Dict[str, PendingCommit] = {}

    def initiate_commit(self, message: str, email: str) -> PendingCommit:
        """
        Start an approval for the currently staged changes.

        Raises:
            EmptyCommitError: If nothing is staged or the message is blank
            ValueError: If the email has no ``@``
        """
        staged = tuple(self._engine.staged_changes)
        if not staged:
            raise EmptyCommitError("No changes staged for commit")
        if not message or not message.strip():
            raise EmptyCommitError("Commit message cannot be empty")
        if "@" not in email:
            raise ValueError(f"Invalid email address: {email}")

        now = self._clock()
        pending = PendingCommit(
            commit_id=f"pending-{int(now.timestamp() * 1000)}-{secrets.token_hex(4)}",
            message=message,
            email=email,
            author=author_from_email(email),
            verification_code=generate_verification_code(self._code_length),
            staged=staged,
            created_at=now,
            expires_at=now + timedelta(seconds=self._ttl) if self._ttl is not None else None,
        )

        with self._lock:
            self._pending[pending.commit_id] = pending
        try:
            self._notifier.send_verification(pending)
        except Exception:
            with self._lock:
                self._pending.pop(pending.commit_id, None)
            raise

        logger.info(f"Commit {pending.commit_id} awaiting verification by {email}")
        return pending

    def complete_commit(self, commit_id: str, verification_code: str) -> str:
        """
        Verify the code and commit.

        A wrong code leaves the pending commit in place for another attempt.

        Returns:
            Hash of the new commit

        Raises:
            PendingCommitNotFoundError: Unknown commit ID
            PendingCommitExpiredError: Approval window elapsed
            InvalidVerificationCodeError: Code mismatch
            StagedChangesChangedError: Staged changes differ from those approved
        """
        with self._lock:
            pending = self._pending.get(commit_id)
            if pending is None:
                raise PendingCommitNotFoundError(commit_id)
            if pending.is_expired(self._clock()):
                del self._pending[commit_id]
                raise PendingCommitExpiredError(commit_id, self._ttl)
            if not secrets.compare_digest(
                verification_code.strip().upper().encode(), pending.verification_code.encode()
            ):
                raise InvalidVerificationCodeError(commit_id)

            try:
                commit_hash = self._engine.commit(
                    pending.message, pending.author, expected_staged=pending.staged
                )
            except (StagedChangesChangedError, EmptyCommitError):
                del self._pending[commit_id]
                raise StagedChangesChangedError(commit_id) from None
            del self._pending[commit_id]

        logger.info(f"Verified commit {commit_id} -> {commit_hash[:8]}")
        return commit_hash

    def cancel_commit(self, commit_id: str) -> bool:
        with self._lock:
            return self._pending.pop(commit_id, None) is not None

    def list_pending(self) -> List[PendingCommit]:
        """Pending commits that have not expired."""
        now = self._clock()
        with self._lock:
            return [p for p in self._pending.values() if not p.is_expired(now)]

    def purge_expired(self) -> int:
        now = self._clock()
        with self._lock:
            expired = [cid for cid, p in self._pending.items() if p.is_expired(now)]
            for cid in expired:
                del self._pending[cid]
        return len(expired)


__all__ = [
    "CommitApprovalGate",
    "PendingCommit",
    "author_from_email",
    "generate_verification_code",
]
