"""Member identity model."""

from __future__ import annotations

import enum
from datetime import date
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, Date, Integer, String, false
from sqlalchemy import Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from greenhouse.infra.db import Base, TimestampMixin

if TYPE_CHECKING:
    from .app import AppConnection
    from .connected_account import ConnectedAccount


def _enum_values(enum_cls: type[enum.Enum]) -> list[str]:
    return [member.value for member in enum_cls]


class Gender(str, enum.Enum):
    """Member gender as captured at sign-up."""

    MALE = "male"
    FEMALE = "female"


def _normalise_email(value: str) -> str:
    cleaned = value.strip()
    if not cleaned:
        msg = "Email must not be empty"
        raise ValueError(msg)
    return cleaned


def canonical_login(value: str) -> str:
    """Case-folded form used for username and email comparisons."""

    return value.strip().lower()


class Member(TimestampMixin, Base):
    """A member account; owns connected accounts and app connections."""

    __tablename__ = "member"
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(320), nullable=False)
    email_canonical: Mapped[str] = mapped_column(String(320), nullable=False, unique=True)
    username: Mapped[str | None] = mapped_column(String(100), nullable=True)
    username_canonical: Mapped[str | None] = mapped_column(
        String(100), nullable=True, unique=True
    )
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    gender: Mapped[Gender] = mapped_column(
        SAEnum(
            Gender,
            name="member_gender",
            native_enum=False,
            length=10,
            values_callable=_enum_values,
        ),
        nullable=False,
    )
    birth_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    picture_set: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=false(),
    )

    connected_accounts: Mapped[list[ConnectedAccount]] = relationship(
        "ConnectedAccount",
        back_populates="member",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="raise",
    )
    app_connections: Mapped[list[AppConnection]] = relationship(
        "AppConnection",
        back_populates="member",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="raise",
    )

    @validates("email")
    def _store_normalised_email(self, _key: str, value: str) -> str:
        cleaned = _normalise_email(value)
        self.email_canonical = canonical_login(cleaned)
        return cleaned

    @validates("username")
    def _store_normalised_username(self, _key: str, value: str | None) -> str | None:
        cleaned = value.strip() if value else None
        self.username_canonical = canonical_login(cleaned) if cleaned else None
        return cleaned or None

    @property
    def profile_key(self) -> str:
        """Public identifier used in profile URLs: username, else numeric id."""

        return self.username or str(self.id)


__all__ = ["Gender", "Member", "canonical_login"]
