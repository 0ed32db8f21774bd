"""Security primitives for hashing, encryption and token handling."""

from .hashing import PasswordVerifier
from .secrets import SecretCodec
from .tokens import mint_opaque_token

__all__ = [
    "PasswordVerifier",
    "SecretCodec",
    "mint_opaque_token",
]
