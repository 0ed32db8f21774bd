"""Programmatic Alembic runner for Greenhouse migrations."""

from __future__ import annotations

from alembic import command
from alembic.config import Config

from greenhouse.settings import Settings, get_settings

from .engine import render_sync_url


def alembic_config(settings: Settings | None = None) -> Config:
    """Return an Alembic config pointed at the project migrations."""

    resolved = settings or get_settings()
    migrations_dir = resolved.migrations_dir
    if not migrations_dir.exists():
        raise FileNotFoundError(f"Alembic migrations not found at {migrations_dir}")

    alembic_cfg = Config()
    alembic_cfg.set_main_option("script_location", str(migrations_dir))
    # ConfigParser treats % as interpolation; escape to preserve URL encoding.
    safe_url = render_sync_url(resolved.database_url).replace("%", "%%")
    alembic_cfg.set_main_option("sqlalchemy.url", safe_url)
    alembic_cfg.attributes["configure_logger"] = False
    return alembic_cfg


def run_migrations(settings: Settings | None = None, *, revision: str = "head") -> None:
    command.upgrade(alembic_config(settings), revision)


__all__ = ["alembic_config", "run_migrations"]
