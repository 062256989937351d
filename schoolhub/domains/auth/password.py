# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Password hashing utilities using bcrypt.

bcrypt only looks at the first 72 bytes of its input, so passwords are
truncated to 72 UTF-8 bytes (on a character boundary) before hashing
and verification. Both sides truncate the same way.

Example:
    >>> hasher = PasswordHasher(rounds=4)
    >>> hashed = hasher.hash("correct horse")
    >>> hasher.verify("correct horse", hashed)
    True
"""

import logging

import bcrypt

logger = logging.getLogger(__name__)

BCRYPT_MAX_BYTES = 72


def _encode(password: str) -> bytes:
    encoded = password.encode("utf-8")[:BCRYPT_MAX_BYTES]
    # Drop a multi-byte character cut in half by the truncation
    return encoded.decode("utf-8", errors="ignore").encode("utf-8")


class PasswordHasher:
    """bcrypt password hashing.

    Attributes:
        _rounds: bcrypt cost factor.
    """

    def __init__(self, rounds: int = 12) -> None:
        self._rounds = rounds

    def hash(self, password: str) -> str:
        """Hash a password.

        Raises:
            ValueError: If password is empty.
        """
        if not password:
            raise ValueError("Password cannot be empty")

        salt = bcrypt.gensalt(rounds=self._rounds)
        return bcrypt.hashpw(_encode(password), salt).decode("utf-8")

    def verify(self, password: str, password_hash: str | None) -> bool:
        """Check a password against a stored hash.

        Returns:
            True on match. False on mismatch, on empty input and on a
            malformed hash.
        """
        if not password or not password_hash:
            return False

        try:
            return bcrypt.checkpw(_encode(password), password_hash.encode("utf-8"))
        except ValueError as e:
            logger.warning("Password verification failed: %s", str(e))
            return False


_default_hasher = PasswordHasher()


def hash_password(password: str) -> str:
    """Hash a password with the default hasher."""
    return _default_hasher.hash(password)


def verify_password(password: str, password_hash: str | None) -> bool:
    """Verify a password with the default hasher."""
    return _default_hasher.verify(password, password_hash)
