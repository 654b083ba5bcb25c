"""
StoreRate Backend — Credential Hashing
=======================================

What:  bcrypt hashing and verification of user passwords.
How:   Every hash gets a fresh salt from bcrypt.gensalt(); verification is
       bcrypt.checkpw. Length rules are enforced before hashing because bcrypt
       only looks at the first 72 bytes of its input.
Who:   IdentityService, on every write path that carries a password.
"""

import bcrypt

from storerate.exceptions import ValidationError


class PasswordHasher:
    """Salted one-way hashing of credentials."""

    MIN_LENGTH = 8
    MAX_BYTES = 72

    def __init__(self, rounds: int = 12):
        self._rounds = rounds
        # Used to spend the same time on unknown emails as on wrong passwords
        self._dummy_hash = self.hash("storerate-dummy-credential")

    def validate(self, password: str) -> None:
        """Raise ValidationError unless the password can be hashed safely."""
        if not password or len(password) < self.MIN_LENGTH:
            raise ValidationError(
                message=f"Password must be at least {self.MIN_LENGTH} characters",
                field="password",
            )
        if len(password.encode("utf-8")) > self.MAX_BYTES:
            raise ValidationError(
                message=f"Password cannot exceed {self.MAX_BYTES} bytes",
                field="password",
            )

    def hash(self, password: str) -> str:
        self.validate(password)
        salt = bcrypt.gensalt(rounds=self._rounds)
        return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")

    def verify(self, password: str, password_hash: str) -> bool:
        try:
            return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
        except (ValueError, TypeError):
            # Malformed hash or over-long input
            return False

    def verify_dummy(self, password: str) -> bool:
        """Burn one bcrypt comparison and always report a mismatch."""
        self.verify(password, self._dummy_hash)
        return False
