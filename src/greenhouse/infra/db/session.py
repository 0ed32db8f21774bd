"""Session factories and the per-operation transaction boundary."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from greenhouse.core.errors import StorageError
from greenhouse.settings import Settings, get_settings

from .engine import engine_cache_key, get_engine

_SESSION_FACTORY: async_sessionmaker[AsyncSession] | None = None
_SESSION_KEY: tuple[Any, ...] | None = None


def reset_session_state() -> None:
    """Clear the cached session factory."""

    global _SESSION_FACTORY, _SESSION_KEY
    _SESSION_FACTORY = None
    _SESSION_KEY = None


def get_sessionmaker(settings: Settings | None = None) -> async_sessionmaker[AsyncSession]:
    """Return a cached ``async_sessionmaker`` bound to the Greenhouse engine."""

    global _SESSION_FACTORY, _SESSION_KEY
    settings = settings or get_settings()
    cache_key = engine_cache_key(settings)
    if _SESSION_FACTORY is None or _SESSION_KEY != cache_key:
        engine = get_engine(settings)
        _SESSION_FACTORY = async_sessionmaker(
            bind=engine,
            expire_on_commit=False,
            autoflush=False,
        )
        _SESSION_KEY = cache_key
    return _SESSION_FACTORY


async def close_session(session: AsyncSession) -> None:
    await asyncio.shield(session.close())


@asynccontextmanager
async def unit_of_work(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncIterator[AsyncSession]:
    """Yield a session whose work commits on success and rolls back on any error.

    SQLAlchemy failures that escape the block are re-raised as
    :class:`~greenhouse.core.errors.StorageError`; everything else propagates
    unchanged after the rollback.
    """

    session = session_factory()
    try:
        try:
            yield session
            await session.commit()
        except SQLAlchemyError as exc:
            await session.rollback()
            raise StorageError("Storage operation failed") from exc
        except BaseException:
            await session.rollback()
            raise
    finally:
        await close_session(session)


__all__ = [
    "close_session",
    "get_sessionmaker",
    "reset_session_state",
    "unit_of_work",
]
