"""
Hash Strategy Interface.

Commit identity and change detection depend only on this abstraction, so a
stronger digest can replace the default rolling hash without touching the
engine.
"""

from abc import ABC, abstractmethod


class IHashStrategy(ABC):
    """
    Deterministic content fingerprint.

    Contract:
    - Equal inputs always produce equal output within a process
    - Empty and non-ASCII strings are accepted
    - Not a security boundary; collisions are possible for weak strategies
    """

    name: str = ""

    @abstractmethod
    def hash(self, content: str) -> str:
        """
        Fingerprint a string.

        Args:
            content: Text to hash

        Returns:
            Lowercase hexadecimal token
        """
        pass
