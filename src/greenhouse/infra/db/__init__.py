"""Database plumbing (SQLAlchemy engines, sessions, base classes)."""

from .base import NAMING_CONVENTION, Base, metadata
from .engine import (
    build_database_url,
    get_engine,
    render_sync_url,
    reset_database_state,
)
from .migrations import run_migrations
from .mixins import TimestampMixin
from .session import get_sessionmaker, reset_session_state, unit_of_work

__all__ = [
    "Base",
    "NAMING_CONVENTION",
    "metadata",
    "build_database_url",
    "get_engine",
    "render_sync_url",
    "reset_database_state",
    "run_migrations",
    "TimestampMixin",
    "get_sessionmaker",
    "reset_session_state",
    "unit_of_work",
]
