"""Greenhouse settings (conventional Pydantic v2)."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# ---- Defaults ---------------------------------------------------------------

MODULE_DIR = Path(__file__).resolve().parent
PROJECT_ROOT = MODULE_DIR.parent.parent

DEFAULT_DATABASE_URL = "sqlite+aiosqlite:///./data/db/greenhouse.sqlite"
DEFAULT_PROFILE_URL_TEMPLATE = "http://localhost:8080/members/{profileKey}"
DEFAULT_PICTURE_BASE_URL = "http://localhost:8080/resources"
DEFAULT_MIGRATIONS_DIR = PROJECT_ROOT / "migrations"

PROFILE_KEY_PLACEHOLDER = "{profileKey}"

# Development-only key material; production deployments must override both.
_DEV_SECRET_KEY = "greenhouse-development-secret"
_DEV_SECRET_SALT = "5b8bd7612cdab5ed"


def _http_url(value: Any, *, env_name: str) -> str:
    s = str(value).strip()
    p = urlparse(s)
    if p.scheme not in {"http", "https"} or not p.netloc:
        raise ValueError(f"{env_name} must be an http(s) URL")
    return s.rstrip("/")


class Settings(BaseSettings):
    """Identity settings loaded from GREENHOUSE_* environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="GREENHOUSE_",
        case_sensitive=False,
        extra="ignore",
        env_ignore_empty=True,
    )

    # Core
    logging_level: str = "INFO"

    # Database
    database_url: str = DEFAULT_DATABASE_URL
    database_echo: bool = False
    database_pool_size: int = Field(5, ge=1)       # ignored by sqlite
    database_max_overflow: int = Field(10, ge=0)
    database_pool_timeout: int = Field(30, gt=0)
    migrations_dir: Path = Field(default=DEFAULT_MIGRATIONS_DIR)

    # Members
    profile_url_template: str = DEFAULT_PROFILE_URL_TEMPLATE
    picture_base_url: str = DEFAULT_PICTURE_BASE_URL

    # Secrets
    secret_key: SecretStr = Field(
        default=SecretStr(_DEV_SECRET_KEY),
        description="Master key for encrypting tokens and secrets at rest.",
    )
    secret_salt: str = Field(
        default=_DEV_SECRET_SALT,
        description="Hex-encoded salt mixed into derived encryption keys.",
    )

    # Connected apps
    app_token_bytes: int = Field(32, ge=16, le=128)

    # ---- Validators ----

    @field_validator("logging_level", mode="before")
    @classmethod
    def _v_log_level(cls, v: Any) -> str:
        s = ("" if v is None else str(v).strip()).upper()
        return s or "INFO"

    @field_validator("profile_url_template", mode="before")
    @classmethod
    def _v_profile_template(cls, v: Any) -> str:
        s = str(v).strip()
        if s.count(PROFILE_KEY_PLACEHOLDER) != 1:
            raise ValueError(
                f"GREENHOUSE_PROFILE_URL_TEMPLATE must contain {PROFILE_KEY_PLACEHOLDER} once"
            )
        _http_url(s.replace(PROFILE_KEY_PLACEHOLDER, "x"), env_name="GREENHOUSE_PROFILE_URL_TEMPLATE")
        return s

    @field_validator("picture_base_url", mode="before")
    @classmethod
    def _v_picture_base(cls, v: Any) -> str:
        return _http_url(v, env_name="GREENHOUSE_PICTURE_BASE_URL")

    @field_validator("secret_key", mode="before")
    @classmethod
    def _v_secret_key(cls, v: Any) -> SecretStr:
        raw = v.get_secret_value() if isinstance(v, SecretStr) else str(v or "").strip()
        if len(raw) < 16:
            raise ValueError("GREENHOUSE_SECRET_KEY must be at least 16 characters")
        return SecretStr(raw)

    @field_validator("secret_salt", mode="before")
    @classmethod
    def _v_secret_salt(cls, v: Any) -> str:
        s = str(v or "").strip().lower()
        try:
            raw = bytes.fromhex(s)
        except ValueError as exc:
            raise ValueError("GREENHOUSE_SECRET_SALT must be a hex string") from exc
        if len(raw) < 8:
            raise ValueError("GREENHOUSE_SECRET_SALT must encode at least 8 bytes")
        return s

    # ---- Derived ----

    @property
    def secret_key_bytes(self) -> bytes:
        return self.secret_key.get_secret_value().encode("utf-8")

    @property
    def secret_salt_bytes(self) -> bytes:
        return bytes.fromhex(self.secret_salt)

    def profile_url(self, profile_key: str) -> str:
        return self.profile_url_template.replace(PROFILE_KEY_PLACEHOLDER, profile_key)


@lru_cache(maxsize=1)
def _build_settings() -> Settings:
    return Settings()


def get_settings() -> Settings:
    return _build_settings()


def reload_settings() -> Settings:
    _build_settings.cache_clear()
    return _build_settings()


__all__ = [
    "DEFAULT_DATABASE_URL",
    "DEFAULT_PICTURE_BASE_URL",
    "DEFAULT_PROFILE_URL_TEMPLATE",
    "PROFILE_KEY_PLACEHOLDER",
    "Settings",
    "get_settings",
    "reload_settings",
]
