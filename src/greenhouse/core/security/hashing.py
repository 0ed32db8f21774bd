"""Password hashing helpers (argon2 via pwdlib)."""

from __future__ import annotations

from fastapi_users.password import PasswordHelper
from pwdlib.exceptions import UnknownHashError


class PasswordVerifier:
    """One-way hashing and verification of member passwords."""

    def __init__(self, helper: PasswordHelper | None = None) -> None:
        self._helper = helper or PasswordHelper()

    def hash(self, password: str) -> str:
        """Hash ``password`` using the configured password helper."""

        if not password.strip():
            msg = "Password must not be empty"
            raise ValueError(msg)

        return self._helper.hash(password)

    def matches(self, password: str, hashed: str | None) -> bool:
        """Return ``True`` if ``password`` matches ``hashed``."""

        if not hashed:
            return False
        try:
            verified, _ = self._helper.verify_and_update(password, hashed)
        except (UnknownHashError, ValueError):
            return False
        return verified


__all__ = ["PasswordVerifier"]
