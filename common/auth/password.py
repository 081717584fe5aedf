"""
bcrypt password hashing.

Passwords are pre-hashed with SHA-256 before bcrypt to handle bcrypt's
72-byte input limit.

Example:
    hasher = PasswordHasher(rounds=10)
    digest = hasher.hash("p@ss1")
    assert hasher.verify("p@ss1", digest)
"""

import base64
import hashlib

import bcrypt as bcrypt_lib


class PasswordHasher:
    """One-way password hashing with an adaptive cost factor."""

    def __init__(self, rounds: int = 10):
        """
        Args:
            rounds: bcrypt cost factor (4-31)
        """
        self.rounds = rounds

    def _prehash_password(self, password: str) -> str:
        """
        Pre-hash password with SHA-256 before bcrypt.

        This handles bcrypt's 72-byte limit and ensures consistent
        behavior across all password lengths.
        """
        sha256_hash = hashlib.sha256(password.encode("utf-8")).digest()
        return base64.b64encode(sha256_hash).decode("utf-8")

    def hash(self, password: str) -> str:
        """Hash a password using bcrypt with SHA-256 pre-hashing."""
        prehashed = self._prehash_password(password)
        salt = bcrypt_lib.gensalt(rounds=self.rounds)
        return bcrypt_lib.hashpw(prehashed.encode("utf-8"), salt).decode("utf-8")

    def verify(self, password: str, hashed: str) -> bool:
        """
        Verify a password against its hash.

        Supports both pre-hashed and legacy (direct bcrypt) hashes.
        Malformed hashes never match.
        """
        if not password or not hashed:
            return False

        hashed_bytes = hashed.encode("utf-8")

        prehashed = self._prehash_password(password)
        try:
            if bcrypt_lib.checkpw(prehashed.encode("utf-8"), hashed_bytes):
                return True
        except ValueError:
            return False

        # Legacy hashes of the raw password
        try:
            return bcrypt_lib.checkpw(password.encode("utf-8"), hashed_bytes)
        except ValueError:
            # Password too long for direct bcrypt - definitely not a match
            return False
