"""Helpers for encrypting and decrypting secrets at rest.

Encryption is deterministic (AES-SIV): the same plaintext always yields the
same ciphertext for a given key, and ciphertexts are authenticated. Lookups by
token go through :meth:`SecretCodec.digest`, a keyed HMAC that is safe to index
without exposing the reversible ciphertext.
"""

from __future__ import annotations

import base64
import hashlib
import hmac

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESSIV
from cryptography.hazmat.primitives.kdf.hkdf import HKDF

from greenhouse.settings import Settings

_CIPHER_HKDF_INFO = b"greenhouse.secret.v1"
_DIGEST_HKDF_INFO = b"greenhouse.lookup.v1"
_ASSOCIATED_DATA = [b"greenhouse.secret"]
_SIV_KEY_LEN = 64  # AES-256-SIV
_DIGEST_KEY_LEN = 32


def _derive_key(master_key: bytes, salt: bytes, *, info: bytes, length: int) -> bytes:
    hkdf = HKDF(
        algorithm=hashes.SHA256(),
        length=length,
        salt=salt,
        info=info,
    )
    return hkdf.derive(master_key)


def _b64encode(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).decode("ascii").rstrip("=")


def _b64decode(value: str) -> bytes:
    padding = "=" * (-len(value) % 4)
    return base64.urlsafe_b64decode(value + padding)


class SecretCodec:
    """Reversible, deterministic string encryption keyed by a master key and salt."""

    def __init__(self, master_key: bytes, salt: bytes) -> None:
        if not master_key:
            raise ValueError("master_key must not be empty")
        self._cipher = AESSIV(
            _derive_key(master_key, salt, info=_CIPHER_HKDF_INFO, length=_SIV_KEY_LEN)
        )
        self._digest_key = _derive_key(
            master_key, salt, info=_DIGEST_HKDF_INFO, length=_DIGEST_KEY_LEN
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> SecretCodec:
        return cls(settings.secret_key_bytes, settings.secret_salt_bytes)

    def encrypt(self, plaintext: str) -> str:
        """Return the base64url ciphertext for ``plaintext``."""

        if not plaintext:
            raise ValueError("Cannot encrypt an empty value")
        ciphertext = self._cipher.encrypt(plaintext.encode("utf-8"), _ASSOCIATED_DATA)
        return _b64encode(ciphertext)

    def decrypt(self, ciphertext: str) -> str:
        """Return the plaintext for ``ciphertext`` or raise ``ValueError``."""

        try:
            plaintext = self._cipher.decrypt(_b64decode(ciphertext), _ASSOCIATED_DATA)
        except (InvalidTag, ValueError, TypeError) as exc:
            raise ValueError("Unable to decrypt secret") from exc
        return plaintext.decode("utf-8")

    def digest(self, plaintext: str) -> str:
        """Return a keyed, deterministic lookup digest for ``plaintext``."""

        mac = hmac.new(self._digest_key, plaintext.encode("utf-8"), hashlib.sha256)
        return _b64encode(mac.digest())


__all__ = ["SecretCodec"]
