"""Identity error taxonomy.

Every expected failure is an :class:`IdentityError` tagged with an
:class:`IdentityErrorKind`; callers branch on ``exc.kind`` rather than on the
exception type or message. Infrastructure failures are :class:`StorageError`.
Messages never include tokens, secrets or passwords.
"""

from __future__ import annotations

import enum


class IdentityErrorKind(str, enum.Enum):
    """Distinguishable outcomes surfaced by the identity services."""

    EMAIL_ALREADY_ON_FILE = "email_already_on_file"
    USERNAME_ALREADY_TAKEN = "username_already_taken"
    USERNAME_NOT_FOUND = "username_not_found"
    INVALID_PASSWORD = "invalid_password"
    ACCOUNT_ALREADY_CONNECTED = "account_already_connected"
    CONNECTED_ACCOUNT_NOT_FOUND = "connected_account_not_found"
    INVALID_API_KEY = "invalid_api_key"
    CONNECTED_APP_NOT_FOUND = "connected_app_not_found"


_DEFAULT_MESSAGES: dict[IdentityErrorKind, str] = {
    IdentityErrorKind.EMAIL_ALREADY_ON_FILE: "Email already on file",
    IdentityErrorKind.USERNAME_ALREADY_TAKEN: "Username already taken",
    IdentityErrorKind.USERNAME_NOT_FOUND: "No account matches the supplied username",
    IdentityErrorKind.INVALID_PASSWORD: "Invalid password",
    IdentityErrorKind.ACCOUNT_ALREADY_CONNECTED: "Account already connected to provider",
    IdentityErrorKind.CONNECTED_ACCOUNT_NOT_FOUND: "No connected account matches",
    IdentityErrorKind.INVALID_API_KEY: "API key is not registered",
    IdentityErrorKind.CONNECTED_APP_NOT_FOUND: "No connected app matches",
}


class IdentityError(Exception):
    """Expected, caller-recoverable identity failure."""

    def __init__(self, kind: IdentityErrorKind, message: str | None = None) -> None:
        super().__init__(message or _DEFAULT_MESSAGES[kind])
        self.kind = kind

    @property
    def code(self) -> str:
        return self.kind.value

    def __repr__(self) -> str:
        return f"IdentityError(kind={self.kind.name}, message={str(self)!r})"


class StorageError(RuntimeError):
    """Opaque infrastructure failure raised when the relational store fails."""


__all__ = ["IdentityError", "IdentityErrorKind", "StorageError"]
