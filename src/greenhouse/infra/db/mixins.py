"""Reusable SQLAlchemy mixins for Greenhouse models."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime
from sqlalchemy.orm import Mapped, mapped_column

from greenhouse.common.time import utc_now

__all__ = ["TimestampMixin"]


class TimestampMixin:
    """Mixin that records created/updated timestamps as timezone-aware datetimes."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
        onupdate=utc_now,
    )
