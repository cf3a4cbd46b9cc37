"""
Logging verification notifier.

Renders the verification email into the log instead of sending it.
Suitable for development and for deployments where the code is relayed
by another channel that tails the log.
"""

import logging
from typing import List, TYPE_CHECKING

from wvc.domain.interfaces.notifier import IVerificationNotifier

if TYPE_CHECKING:
    from wvc.application.services.commit_approval import PendingCommit

logger = logging.getLogger(__name__)


def render_verification_email(pending: "PendingCommit") -> str:
    paths = ", ".join(pending.paths) or "(none)"
    return (
        f"To: {pending.email}\n"
        f"Subject: Verify your commit\n"
        f"\n"
        f"Documents: {paths}\n"
        f"Message: {pending.message}\n"
        f"Verification Code: {pending.verification_code}\n"
        f"\n"
        f"Enter this code to complete your commit."
    )


class LoggingVerificationNotifier(IVerificationNotifier):
    """IVerificationNotifier that writes the email to the log."""

    def __init__(self, level: int = logging.INFO):
        self._level = level
        self._sent: List[str] = []

    def send_verification(self, pending: "PendingCommit") -> None:
        logger.log(self._level, "Commit verification email\n%s", render_verification_email(pending))
        self._sent.append(pending.commit_id)

    @property
    def sent_commit_ids(self) -> List[str]:
        return list(self._sent)
