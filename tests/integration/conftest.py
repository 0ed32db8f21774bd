"""Fixtures that provide a migrated, seeded SQLite database per test."""

from __future__ import annotations

from collections.abc import AsyncIterator
from dataclasses import dataclass
from datetime import date
from pathlib import Path

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from greenhouse.core.models import App, AppConnection, ConnectedAccount, Gender, Member
from greenhouse.core.security import PasswordVerifier, SecretCodec
from greenhouse.features.accounts import AccountService
from greenhouse.features.connected_accounts import ConnectedAccountService
from greenhouse.features.connected_apps import ConnectedAppService
from greenhouse.infra.db import get_engine, get_sessionmaker, reset_database_state, run_migrations
from greenhouse.settings import Settings, reload_settings

SEED_PASSWORD = "password"


@dataclass(frozen=True, slots=True)
class SeedData:
    password: str
    craig_id: int
    keith_id: int
    facebook_token: str
    facebook_user_id: str
    api_key: str
    app_access_token: str
    app_secret: str


@pytest.fixture()
def settings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Settings:
    """Point the settings at a fresh SQLite file migrated to head."""

    db_path = tmp_path / "db" / "greenhouse.sqlite"
    db_path.parent.mkdir(parents=True, exist_ok=True)
    monkeypatch.setenv("GREENHOUSE_DATABASE_URL", f"sqlite+aiosqlite:///{db_path}")
    reset_database_state()
    resolved = reload_settings()
    run_migrations(resolved)
    return resolved


@pytest_asyncio.fixture()
async def session_factory(
    settings: Settings,
) -> AsyncIterator[async_sessionmaker[AsyncSession]]:
    factory = get_sessionmaker(settings)
    yield factory
    await get_engine(settings).dispose()
    reset_database_state()


@pytest.fixture()
def codec(settings: Settings) -> SecretCodec:
    return SecretCodec.from_settings(settings)


@pytest_asyncio.fixture()
async def seed(
    session_factory: async_sessionmaker[AsyncSession],
    codec: SecretCodec,
) -> SeedData:
    """Insert two members, a facebook link, a registered app and one issued credential."""

    password_hash = PasswordVerifier().hash(SEED_PASSWORD)
    async with session_factory() as session:
        craig = Member(
            first_name="Craig",
            last_name="Walls",
            email="cwalls@vmware.com",
            username="habuma",
            password_hash=password_hash,
            gender=Gender.MALE,
            birth_date=date(1977, 12, 1),
        )
        keith = Member(
            first_name="Keith",
            last_name="Donald",
            email="keith.donald@springsource.com",
            username="kdonald",
            password_hash=password_hash,
            gender=Gender.MALE,
            birth_date=date(1977, 12, 29),
        )
        session.add_all([craig, keith])
        await session.flush()

        session.add(
            ConnectedAccount(
                member_id=craig.id,
                provider="facebook",
                access_token_encrypted=codec.encrypt("accesstoken"),
                access_token_digest=codec.digest("accesstoken"),
                provider_account_id="1",
            )
        )
        app = App(name="Greenhouse for iPhone", api_key="123456789")
        session.add(app)
        await session.flush()
        session.add(
            AppConnection(
                app_id=app.id,
                member_id=craig.id,
                access_token="234567890",
                secret_encrypted=codec.encrypt("345678901"),
            )
        )
        await session.commit()
        craig_id, keith_id = craig.id, keith.id

    return SeedData(
        password=SEED_PASSWORD,
        craig_id=craig_id,
        keith_id=keith_id,
        facebook_token="accesstoken",
        facebook_user_id="1",
        api_key="123456789",
        app_access_token="234567890",
        app_secret="345678901",
    )


@pytest.fixture()
def account_service(
    settings: Settings,
    session_factory: async_sessionmaker[AsyncSession],
    seed: SeedData,
) -> AccountService:
    return AccountService(session_factory=session_factory, settings=settings)


@pytest.fixture()
def connected_account_service(
    session_factory: async_sessionmaker[AsyncSession],
    account_service: AccountService,
    codec: SecretCodec,
) -> ConnectedAccountService:
    return ConnectedAccountService(
        session_factory=session_factory,
        accounts=account_service,
        codec=codec,
    )


@pytest.fixture()
def connected_app_service(
    settings: Settings,
    session_factory: async_sessionmaker[AsyncSession],
    codec: SecretCodec,
    seed: SeedData,
) -> ConnectedAppService:
    return ConnectedAppService(
        session_factory=session_factory,
        settings=settings,
        codec=codec,
    )
