"""
Bcrypt Password Hasher

passlib-backed implementation of the PasswordHasher interface.
"""

from passlib.context import CryptContext
from passlib.exc import UnknownHashError

from filevault.domain.file_storage.credentials import PasswordHasher

DEFAULT_ROUNDS = 12


class BcryptPasswordHasher(PasswordHasher):
    """
    Salted bcrypt hashing with a fixed cost factor.

    passlib's verify() compares digests in constant time.
    """

    def __init__(self, rounds: int = DEFAULT_ROUNDS):
        """
        Args:
            rounds: bcrypt cost factor (log2 of the iteration count, 4-31)
        """
        self.rounds = rounds
        self._context = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__rounds=rounds,
        )

    def hash(self, plaintext: str) -> str:
        return self._context.hash(plaintext)

    def verify(self, plaintext: str, hashed: str) -> bool:
        if not hashed:
            return False
        try:
            return self._context.verify(plaintext, hashed)
        except (UnknownHashError, ValueError, TypeError):
            return False
