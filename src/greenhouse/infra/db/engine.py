"""Async engine management for Greenhouse.

Standard behavior:
- One engine per process, cached against the settings that built it
- SQLite: foreign keys + WAL + busy_timeout, pool_size=1 (serialize access per process)
- Other backends: pooled connections + pre-ping
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from sqlalchemy import event
from sqlalchemy.engine import URL, make_url
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import StaticPool

from greenhouse.settings import Settings, get_settings

_ENGINE: AsyncEngine | None = None
_ENGINE_KEY: tuple[Any, ...] | None = None

_SQLITE_BUSY_TIMEOUT_MS = 30_000

logger = logging.getLogger(__name__)


def build_database_url(settings: Settings) -> URL:
    """Return the async SQLAlchemy URL for ``settings``."""

    url = make_url(settings.database_url)
    if url.get_backend_name() == "sqlite" and url.drivername == "sqlite":
        url = url.set(drivername="sqlite+aiosqlite")
    return url


def render_sync_url(database_url: str) -> str:
    """Return a *sync* URL string (for Alembic) matching ``database_url``."""

    url = make_url(database_url)
    if url.get_backend_name() == "sqlite":
        url = url.set(drivername="sqlite")
    return url.render_as_string(hide_password=False)


def engine_cache_key(settings: Settings) -> tuple[Any, ...]:
    url = build_database_url(settings)
    return (
        url.render_as_string(hide_password=False),
        settings.database_echo,
        settings.database_pool_size,
        settings.database_max_overflow,
        settings.database_pool_timeout,
    )


def is_sqlite_memory_url(url: URL) -> bool:
    database = (url.database or "").strip()
    if not database or database == ":memory:":
        return True
    if database.startswith("file:"):
        query = dict(url.query or {})
        if query.get("mode") == "memory":
            return True
    return False


def ensure_sqlite_database_directory(url: URL) -> None:
    """Ensure a filesystem-backed SQLite database can be created."""

    database = (url.database or "").strip()
    if not database or database == ":memory:" or database.startswith("file:"):
        return
    path = Path(database)
    if not path.is_absolute():
        path = Path.cwd() / path
    path.parent.mkdir(parents=True, exist_ok=True)


def _build_engine_kwargs(url: URL, settings: Settings) -> dict[str, Any]:
    kwargs: dict[str, Any] = {
        "echo": settings.database_echo,
        "pool_pre_ping": True,
    }

    if url.get_backend_name() == "sqlite":
        kwargs["connect_args"] = {
            "check_same_thread": False,
            "timeout": _SQLITE_BUSY_TIMEOUT_MS / 1000.0,
        }
        if is_sqlite_memory_url(url):
            kwargs["poolclass"] = StaticPool
        else:
            kwargs["pool_size"] = 1
            kwargs["max_overflow"] = 0
            kwargs["pool_timeout"] = settings.database_pool_timeout
    else:
        kwargs["pool_size"] = settings.database_pool_size
        kwargs["max_overflow"] = settings.database_max_overflow
        kwargs["pool_timeout"] = settings.database_pool_timeout

    return kwargs


def _create_engine(settings: Settings) -> AsyncEngine:
    url = build_database_url(settings)
    is_sqlite = url.get_backend_name() == "sqlite"
    if is_sqlite and not is_sqlite_memory_url(url):
        ensure_sqlite_database_directory(url)

    engine = create_async_engine(
        url.render_as_string(hide_password=False),
        **_build_engine_kwargs(url, settings),
    )

    if is_sqlite:

        @event.listens_for(engine.sync_engine, "connect")
        def _set_sqlite_pragma(dbapi_connection, _connection_record) -> None:
            cursor = dbapi_connection.cursor()
            try:
                cursor.execute("PRAGMA foreign_keys=ON")
                cursor.execute(f"PRAGMA busy_timeout={_SQLITE_BUSY_TIMEOUT_MS}")
                cursor.execute("PRAGMA journal_mode=WAL")
            finally:
                cursor.close()

    logger.debug(
        "db.engine.created",
        extra={"backend": url.get_backend_name(), "driver": url.drivername},
    )
    return engine


def get_engine(settings: Settings | None = None) -> AsyncEngine:
    """Return a cached async engine matching the active settings."""

    global _ENGINE, _ENGINE_KEY
    settings = settings or get_settings()
    key = engine_cache_key(settings)
    if _ENGINE is None or _ENGINE_KEY != key:
        if _ENGINE is not None:
            _ENGINE.sync_engine.dispose()
        _ENGINE = _create_engine(settings)
        _ENGINE_KEY = key
    return _ENGINE


def reset_database_state() -> None:
    """Dispose cached engine and associated session factories."""

    global _ENGINE, _ENGINE_KEY
    if _ENGINE is not None:
        _ENGINE.sync_engine.dispose()
    _ENGINE = None
    _ENGINE_KEY = None

    from . import session as session_module

    session_module.reset_session_state()


__all__ = [
    "build_database_url",
    "engine_cache_key",
    "ensure_sqlite_database_directory",
    "get_engine",
    "is_sqlite_memory_url",
    "render_sync_url",
    "reset_database_state",
]
