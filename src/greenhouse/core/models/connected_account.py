"""Links between members and external identity-provider accounts."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from greenhouse.infra.db import Base, TimestampMixin

if TYPE_CHECKING:
    from .member import Member


class ConnectedAccount(TimestampMixin, Base):
    """A member's account at an external provider (e.g. ``facebook``)."""

    __tablename__ = "connected_account"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    member_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("member.id", ondelete="CASCADE"),
        nullable=False,
    )
    provider: Mapped[str] = mapped_column(String(64), nullable=False)
    access_token_encrypted: Mapped[str] = mapped_column(Text(), nullable=False)
    access_token_digest: Mapped[str] = mapped_column(String(64), nullable=False)
    provider_account_id: Mapped[str | None] = mapped_column(String(255), nullable=True)

    member: Mapped[Member] = relationship("Member", back_populates="connected_accounts")

    __table_args__ = (
        UniqueConstraint("member_id", "provider"),
        Index("ix_connected_account_provider_token", "provider", "access_token_digest"),
        Index("ix_connected_account_provider_account", "provider", "provider_account_id"),
    )


__all__ = ["ConnectedAccount"]
