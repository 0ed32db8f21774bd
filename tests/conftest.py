"""Shared pytest configuration for the identity services."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest

from greenhouse.settings import reload_settings

TEST_SECRET_KEY = "greenhouse-test-secret-key"
TEST_SECRET_SALT = "5b8bd7612cdab5ed"

_ENV_VARS = (
    "GREENHOUSE_LOGGING_LEVEL",
    "GREENHOUSE_DATABASE_URL",
    "GREENHOUSE_DATABASE_ECHO",
    "GREENHOUSE_PROFILE_URL_TEMPLATE",
    "GREENHOUSE_PICTURE_BASE_URL",
    "GREENHOUSE_SECRET_KEY",
    "GREENHOUSE_SECRET_SALT",
    "GREENHOUSE_APP_TOKEN_BYTES",
)


def pytest_collection_modifyitems(config, items) -> None:
    for item in items:
        path_str = str(Path(str(item.fspath)))
        if "/tests/integration/" in path_str:
            item.add_marker(pytest.mark.integration)
        elif "/tests/unit/" in path_str:
            item.add_marker(pytest.mark.unit)


@pytest.fixture(autouse=True)
def _isolated_environment(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> Iterator[None]:
    """Run every test with a clean GREENHOUSE_* environment and settings cache."""

    for var in _ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("GREENHOUSE_SECRET_KEY", TEST_SECRET_KEY)
    monkeypatch.setenv("GREENHOUSE_SECRET_SALT", TEST_SECRET_SALT)
    reload_settings()
    yield
    monkeypatch.undo()
    reload_settings()
