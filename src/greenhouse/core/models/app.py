"""Registered client applications and the credentials issued to them."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from greenhouse.infra.db import Base, TimestampMixin

if TYPE_CHECKING:
    from .member import Member


class App(TimestampMixin, Base):
    """A client application registered out-of-band with a stable API key."""

    __tablename__ = "app"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    api_key: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)

    connections: Mapped[list[AppConnection]] = relationship(
        "AppConnection",
        back_populates="app",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="raise",
    )


class AppConnection(TimestampMixin, Base):
    """Access token + encrypted secret issued to an app on behalf of a member."""

    __tablename__ = "app_connection"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    app_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("app.id", ondelete="CASCADE"),
        nullable=False,
    )
    member_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("member.id", ondelete="CASCADE"),
        nullable=False,
    )
    access_token: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    secret_encrypted: Mapped[str] = mapped_column(Text(), nullable=False)

    app: Mapped[App] = relationship("App", back_populates="connections", lazy="joined")
    member: Mapped[Member] = relationship("Member", back_populates="app_connections")

    __table_args__ = (Index("ix_app_connection_member_app", "member_id", "app_id"),)


__all__ = ["App", "AppConnection"]
