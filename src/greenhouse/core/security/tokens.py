"""Opaque token helpers for issued app credentials."""

from __future__ import annotations

import secrets


def mint_opaque_token(length: int = 32) -> str:
    """Return a random URL-safe token carrying ``length`` bytes of entropy."""

    if length <= 0:
        raise ValueError("Token length must be positive")
    return secrets.token_urlsafe(length)


__all__ = ["mint_opaque_token"]
