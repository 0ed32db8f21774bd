"""Logging helpers for the identity services.

Services log dotted event names (``account.create.success``) and attach ids,
provider names and email domains through :func:`log_context`. The console
formatter renders those extras as ``key=value`` pairs after the event name.
Tokens, secrets and passwords are never passed to ``log_context``.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Any

from greenhouse.settings import Settings

# Attributes every LogRecord carries; anything else came in through ``extra``.
_RECORD_ATTRS = frozenset(
    logging.LogRecord("", logging.NOTSET, "", 0, "", None, None).__dict__
) | {"message", "asctime"}

_CONFIGURED_FLAG = "_greenhouse_configured"


class ConsoleLogFormatter(logging.Formatter):
    """One line per record: UTC timestamp, level, logger, event, extras.

        2025-11-27T02:57:00.302Z INFO  greenhouse.features.accounts.service
        account.create.success account_id=3 email_domain=black.com
    """

    def __init__(self) -> None:
        super().__init__(fmt="%(asctime)s %(levelname)-5s %(name)s %(message)s")

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:
        stamp = datetime.fromtimestamp(record.created, tz=UTC)
        return stamp.strftime("%Y-%m-%dT%H:%M:%S") + f".{int(record.msecs):03d}Z"

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        pairs = [
            f"{key}={'null' if value is None else value}"
            for key, value in record.__dict__.items()
            if key not in _RECORD_ATTRS and not key.startswith("_")
        ]
        return " ".join([line, *pairs]) if pairs else line


def setup_logging(settings: Settings) -> None:
    """Install the console formatter on the root logger.

    The handler is installed once per process; later calls only adjust the
    level taken from ``GREENHOUSE_LOGGING_LEVEL``.
    """

    root = logging.getLogger()
    root.setLevel(getattr(logging, settings.logging_level.upper(), logging.INFO))
    if getattr(root, _CONFIGURED_FLAG, False):
        return

    handler = logging.StreamHandler()
    handler.setFormatter(ConsoleLogFormatter())
    root.handlers = [handler]

    # SQLAlchemy and Alembic write through the same handler.
    for name in ("alembic", "sqlalchemy"):
        logging.getLogger(name).handlers.clear()
        logging.getLogger(name).propagate = True

    setattr(root, _CONFIGURED_FLAG, True)


def log_context(
    *,
    account_id: int | None = None,
    provider: str | None = None,
    app_id: int | None = None,
    **extra: Any,
) -> dict[str, Any]:
    """Build the ``extra`` payload for a service log call, dropping unset ids."""

    ctx: dict[str, Any] = {
        key: value
        for key, value in (
            ("account_id", account_id),
            ("provider", provider),
            ("app_id", app_id),
        )
        if value is not None
    }
    ctx.update(extra)
    return ctx


def email_domain(email: str) -> str | None:
    """Return the domain part of ``email`` so logs never carry the local part."""

    _, at, domain = email.strip().lower().rpartition("@")
    return domain if at and domain else None


__all__ = [
    "ConsoleLogFormatter",
    "email_domain",
    "log_context",
    "setup_logging",
]
