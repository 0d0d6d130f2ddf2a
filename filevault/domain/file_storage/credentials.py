"""
Credential Verifier Interface

One-way password hashing for per-file passphrases.
"""

from abc import ABC, abstractmethod


class PasswordHasher(ABC):
    """
    Hashes passphrases with a slow salted algorithm and verifies them.

    Hashes are salted, so hashing the same plaintext twice yields different
    strings; only verify() is guaranteed to match them.
    """

    @abstractmethod
    def hash(self, plaintext: str) -> str:
        """Return a one-way hash of the plaintext."""
        pass  # pragma: no cover

    @abstractmethod
    def verify(self, plaintext: str, hashed: str) -> bool:
        """
        Check a plaintext against a stored hash in constant time.

        Returns False (never raises) for malformed hashes.
        """
        pass  # pragma: no cover
