"""Pydantic contracts for member identities."""

from __future__ import annotations

from datetime import date

from pydantic import ConfigDict, EmailStr, Field, SecretStr, computed_field, field_validator

from greenhouse.common.schema import BaseSchema
from greenhouse.core.models import Gender


class Person(BaseSchema):
    """Sign-up details used once to create an account."""

    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    email: EmailStr
    password: SecretStr
    gender: Gender
    birth_date: date | None = None
    username: str | None = Field(default=None, max_length=100)

    @field_validator("first_name", "last_name", mode="before")
    @classmethod
    def _strip_names(cls, value: str) -> str:
        return value.strip() if isinstance(value, str) else value

    @field_validator("username")
    @classmethod
    def _clean_username(cls, value: str | None) -> str | None:
        if value is None:
            return None
        cleaned = value.strip()
        if "@" in cleaned:
            raise ValueError("username must not contain '@'")
        return cleaned or None

    @field_validator("password")
    @classmethod
    def _require_password(cls, value: SecretStr) -> SecretStr:
        if not value.get_secret_value().strip():
            raise ValueError("password must not be blank")
        return value


class Account(BaseSchema):
    """Read-only view of a member identity. Never carries the password hash."""

    model_config = ConfigDict(frozen=True)

    id: int
    first_name: str
    last_name: str
    email: str
    username: str | None = None
    gender: Gender
    birth_date: date | None = None
    picture_set: bool = False
    profile_url: str
    picture_url: str

    @computed_field  # type: ignore[prop-decorator]
    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


__all__ = ["Account", "Gender", "Person"]
