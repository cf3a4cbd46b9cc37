"""
Verification Notifier Interface.

Delivers the out-of-band verification code for a pending commit, usually
by email.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from wvc.application.services.commit_approval import PendingCommit


class IVerificationNotifier(ABC):
    """Sends a verification code to the commit author."""

    @abstractmethod
    def send_verification(self, pending: "PendingCommit") -> None:
        """
        Deliver the verification code for a pending commit.

        Args:
            pending: Pending commit holding the recipient and code

        Raises:
            Any delivery error; the approval gate drops the pending commit
        """
        pass
