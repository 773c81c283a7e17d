"""
Password hashing and verification.

Uses bcrypt with a per-call salt and a configurable work factor.
"""
import secrets
from typing import Optional

import bcrypt

from seniko.config import MAX_HASH_ROUNDS, MIN_HASH_ROUNDS
from seniko.errors import ConfigurationError


class PasswordHasher:
    """bcrypt hasher shared by all requests. Holds no mutable state."""

    def __init__(self, rounds: int = 12):
        if not MIN_HASH_ROUNDS <= rounds <= MAX_HASH_ROUNDS:
            raise ConfigurationError(
                f"bcrypt rounds must be between {MIN_HASH_ROUNDS} and {MAX_HASH_ROUNDS}, got {rounds}"
            )
        self.rounds = rounds
        # Checked when a login names an unknown email so that path costs one bcrypt verification too
        self._dummy_hash = self.hash(secrets.token_urlsafe(16))

    def hash(self, password: str) -> str:
        """Generate a salted bcrypt hash for the password."""
        return bcrypt.hashpw(
            password.encode("utf-8"),
            bcrypt.gensalt(rounds=self.rounds)
        ).decode("utf-8")

    def verify(self, password: str, password_hash: Optional[str]) -> bool:
        """
        Check a password against a stored hash.

        A missing hash is verified against the dummy hash and always fails.
        """
        if password_hash is None:
            self._checkpw(password, self._dummy_hash)
            return False
        return self._checkpw(password, password_hash)

    @staticmethod
    def _checkpw(password: str, password_hash: str) -> bool:
        try:
            return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
        except (ValueError, TypeError):
            return False
