"""Integration tests for member account creation and lookup."""

from __future__ import annotations

import asyncio
from datetime import date
from typing import Any

import pytest
from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from greenhouse.core.errors import IdentityError, IdentityErrorKind
from greenhouse.core.models import Member
from greenhouse.features.accounts import (
    Account,
    AccountService,
    Gender,
    MembersRepository,
    Person,
)

pytestmark = pytest.mark.asyncio

PROFILE_BASE = "http://localhost:8080/members"
PICTURE_BASE = "http://localhost:8080/resources/profile-pics"


def _jack(**overrides) -> Person:
    fields = {
        "first_name": "Jack",
        "last_name": "Black",
        "email": "jack@black.com",
        "password": "foobie",
        "gender": Gender.MALE,
        "birth_date": date(1977, 12, 1),
    }
    fields.update(overrides)
    return Person(**fields)


def _assert_craig(account: Account) -> None:
    assert account.first_name == "Craig"
    assert account.last_name == "Walls"
    assert account.full_name == "Craig Walls"
    assert account.email == "cwalls@vmware.com"
    assert account.username == "habuma"
    assert account.profile_url == f"{PROFILE_BASE}/habuma"
    assert account.picture_url == f"{PICTURE_BASE}/male/small.jpg"


async def test_create_account_assigns_next_id(account_service: AccountService) -> None:
    account = await account_service.create_account(_jack())

    assert account.id == 3
    assert account.full_name == "Jack Black"
    assert account.email == "jack@black.com"
    assert account.username is None
    assert account.picture_set is False
    assert account.profile_url == f"{PROFILE_BASE}/3"
    assert account.picture_url == f"{PICTURE_BASE}/male/small.jpg"


async def test_create_account_hashes_password(
    account_service: AccountService,
    session_factory: async_sessionmaker[AsyncSession],
) -> None:
    account = await account_service.create_account(_jack())

    async with session_factory() as session:
        member = await session.get(Member, account.id)
        assert member is not None
        assert member.password_hash != "foobie"
        assert "foobie" not in member.password_hash


async def test_created_account_can_authenticate_by_email(
    account_service: AccountService,
) -> None:
    created = await account_service.create_account(_jack())

    account = await account_service.authenticate("Jack@Black.com", "foobie")

    assert account == created


async def test_create_account_with_username_uses_it_as_profile_key(
    account_service: AccountService,
) -> None:
    account = await account_service.create_account(_jack(username="jackb"))

    assert account.username == "jackb"
    assert account.profile_url == f"{PROFILE_BASE}/jackb"
    assert (await account_service.find_by_username("JACKB")).id == account.id


async def test_create_account_rejects_email_on_file(account_service: AccountService) -> None:
    with pytest.raises(IdentityError) as excinfo:
        await account_service.create_account(_jack(email="CWalls@VMware.com"))

    assert excinfo.value.kind is IdentityErrorKind.EMAIL_ALREADY_ON_FILE


async def test_create_account_rejects_username_taken(account_service: AccountService) -> None:
    with pytest.raises(IdentityError) as excinfo:
        await account_service.create_account(_jack(username="Habuma"))

    assert excinfo.value.kind is IdentityErrorKind.USERNAME_ALREADY_TAKEN


async def test_failed_create_does_not_consume_state(
    account_service: AccountService,
    session_factory: async_sessionmaker[AsyncSession],
) -> None:
    with pytest.raises(IdentityError):
        await account_service.create_account(_jack(email="cwalls@vmware.com"))

    async with session_factory() as session:
        count = await session.scalar(select(func.count()).select_from(Member))
    assert count == 2


async def test_concurrent_duplicate_create_yields_one_account(
    account_service: AccountService,
    session_factory: async_sessionmaker[AsyncSession],
) -> None:
    results = await asyncio.gather(
        account_service.create_account(_jack()),
        account_service.create_account(_jack(first_name="Other")),
        return_exceptions=True,
    )

    accounts = [result for result in results if isinstance(result, Account)]
    errors = [result for result in results if isinstance(result, IdentityError)]
    assert len(accounts) == 1
    assert len(errors) == 1
    assert errors[0].kind is IdentityErrorKind.EMAIL_ALREADY_ON_FILE

    async with session_factory() as session:
        count = await session.scalar(
            select(func.count()).select_from(Member).where(
                Member.email_canonical == "jack@black.com"
            )
        )
    assert count == 1


async def test_ids_are_not_reused_after_delete(
    account_service: AccountService,
    session_factory: async_sessionmaker[AsyncSession],
) -> None:
    first = await account_service.create_account(_jack())
    async with session_factory() as session:
        await session.execute(delete(Member).where(Member.id == first.id))
        await session.commit()

    second = await account_service.create_account(_jack())

    assert second.id == first.id + 1


async def test_authenticate_by_username(
    account_service: AccountService,
    seed: Any,
) -> None:
    account = await account_service.authenticate("kdonald", seed.password)

    assert account.full_name == "Keith Donald"


async def test_authenticate_is_case_insensitive(
    account_service: AccountService,
    seed: Any,
) -> None:
    account = await account_service.authenticate("KDonald", seed.password)

    assert account.username == "kdonald"


async def test_authenticate_invalid_password(account_service: AccountService) -> None:
    with pytest.raises(IdentityError) as excinfo:
        await account_service.authenticate("kdonald", "bogus")

    assert excinfo.value.kind is IdentityErrorKind.INVALID_PASSWORD


@pytest.mark.parametrize("password", ["  password  ", "password ", "PASSWORD"])
async def test_authenticate_requires_exact_password(
    account_service: AccountService,
    password: str,
) -> None:
    with pytest.raises(IdentityError) as excinfo:
        await account_service.authenticate("kdonald", password)

    assert excinfo.value.kind is IdentityErrorKind.INVALID_PASSWORD


async def test_authenticate_unknown_username(
    account_service: AccountService,
    seed: Any,
) -> None:
    with pytest.raises(IdentityError) as excinfo:
        await account_service.authenticate("strangerdanger", seed.password)

    assert excinfo.value.kind is IdentityErrorKind.USERNAME_NOT_FOUND


async def test_find_by_id(account_service: AccountService, seed: Any) -> None:
    account = await account_service.find_by_id(seed.craig_id)

    assert account is not None
    _assert_craig(account)


async def test_find_by_id_absent_returns_none(account_service: AccountService) -> None:
    assert await account_service.find_by_id(999) is None


async def test_find_by_username_accepts_email(account_service: AccountService) -> None:
    _assert_craig(await account_service.find_by_username("cwalls@vmware.com"))


async def test_find_by_username(account_service: AccountService) -> None:
    _assert_craig(await account_service.find_by_username("habuma"))


@pytest.mark.parametrize("login", ["strangerdanger", "stranger@danger.com"])
async def test_find_by_username_not_found(account_service: AccountService, login: str) -> None:
    with pytest.raises(IdentityError) as excinfo:
        await account_service.find_by_username(login)

    assert excinfo.value.kind is IdentityErrorKind.USERNAME_NOT_FOUND


async def test_mark_profile_picture_set(
    account_service: AccountService,
    session_factory: async_sessionmaker[AsyncSession],
    seed: Any,
) -> None:
    await account_service.mark_profile_picture_set(seed.craig_id)
    await account_service.mark_profile_picture_set(seed.craig_id)

    async with session_factory() as session:
        member = await session.get(Member, seed.craig_id)
        assert member is not None
        assert member.picture_set is True

    account = await account_service.find_by_id(seed.craig_id)
    assert account is not None
    assert account.picture_set is True
    assert account.picture_url == f"{PICTURE_BASE}/{seed.craig_id}/small.jpg"


async def test_mark_profile_picture_set_unknown_id_is_noop(
    account_service: AccountService,
) -> None:
    await account_service.mark_profile_picture_set(999)

    assert await account_service.find_by_id(999) is None


async def _no_match(self: MembersRepository, value: str) -> None:
    return None


async def test_email_unique_constraint_maps_to_email_on_file(
    account_service: AccountService,
    session_factory: async_sessionmaker[AsyncSession],
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setattr(MembersRepository, "get_by_email", _no_match)

    with pytest.raises(IdentityError) as excinfo:
        await account_service.create_account(_jack(email="CWalls@vmware.com"))

    assert excinfo.value.kind is IdentityErrorKind.EMAIL_ALREADY_ON_FILE
    assert isinstance(excinfo.value.__cause__, IntegrityError)
    async with session_factory() as session:
        assert await session.scalar(select(func.count()).select_from(Member)) == 2


async def test_username_unique_constraint_maps_to_username_taken(
    account_service: AccountService,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setattr(MembersRepository, "get_by_username", _no_match)

    with pytest.raises(IdentityError) as excinfo:
        await account_service.create_account(_jack(username="HABUMA"))

    assert excinfo.value.kind is IdentityErrorKind.USERNAME_ALREADY_TAKEN
    assert isinstance(excinfo.value.__cause__, IntegrityError)
