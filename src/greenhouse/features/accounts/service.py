"""Member account creation, authentication and lookup."""

from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from greenhouse.common.logging import email_domain, log_context
from greenhouse.core.errors import IdentityError, IdentityErrorKind
from greenhouse.core.models import Member
from greenhouse.core.security import PasswordVerifier
from greenhouse.infra.db import unit_of_work
from greenhouse.settings import Settings

from .pictures import PictureSize, PictureUrlResolver, StaticPictureUrlResolver
from .repository import MembersRepository
from .schemas import Account, Person

logger = logging.getLogger(__name__)


# Constraint name (PostgreSQL and friends) or column reference (SQLite).
_USERNAME_CONSTRAINT_MARKERS = ("member_username_canonical_key", "member.username_canonical")


def _conflict_kind(exc: IntegrityError) -> IdentityErrorKind:
    message = str(exc.orig)
    if any(marker in message for marker in _USERNAME_CONSTRAINT_MARKERS):
        return IdentityErrorKind.USERNAME_ALREADY_TAKEN
    return IdentityErrorKind.EMAIL_ALREADY_ON_FILE


class AccountService:
    """Create, authenticate and resolve member accounts."""

    def __init__(
        self,
        *,
        session_factory: async_sessionmaker[AsyncSession],
        settings: Settings,
        passwords: PasswordVerifier | None = None,
        pictures: PictureUrlResolver | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._settings = settings
        self._passwords = passwords or PasswordVerifier()
        self._pictures = pictures or StaticPictureUrlResolver.from_settings(settings)

    def to_account(self, member: Member) -> Account:
        """Project a stored member onto the public :class:`Account` view."""

        return Account(
            id=member.id,
            first_name=member.first_name,
            last_name=member.last_name,
            email=member.email,
            username=member.username,
            gender=member.gender,
            birth_date=member.birth_date,
            picture_set=member.picture_set,
            profile_url=self._settings.profile_url(member.profile_key),
            picture_url=self._pictures.picture_url(
                member.id,
                member.gender,
                PictureSize.SMALL,
                member.picture_set,
            ),
        )

    async def create_account(self, person: Person) -> Account:
        """Persist a new member for ``person`` and return its account view."""

        domain = email_domain(person.email)
        logger.debug(
            "account.create.start",
            extra=log_context(email_domain=domain),
        )

        async with unit_of_work(self._session_factory) as session:
            repo = MembersRepository(session)

            if await repo.get_by_email(person.email) is not None:
                logger.warning(
                    "account.create.conflict",
                    extra=log_context(email_domain=domain, reason="email"),
                )
                raise IdentityError(IdentityErrorKind.EMAIL_ALREADY_ON_FILE)
            if person.username and await repo.get_by_username(person.username) is not None:
                logger.warning(
                    "account.create.conflict",
                    extra=log_context(email_domain=domain, reason="username"),
                )
                raise IdentityError(IdentityErrorKind.USERNAME_ALREADY_TAKEN)

            password_hash = self._passwords.hash(person.password.get_secret_value())
            try:
                member = await repo.create(
                    first_name=person.first_name,
                    last_name=person.last_name,
                    email=person.email,
                    username=person.username,
                    password_hash=password_hash,
                    gender=person.gender,
                    birth_date=person.birth_date,
                )
            except IntegrityError as exc:
                kind = _conflict_kind(exc)
                logger.warning(
                    "account.create.conflict",
                    extra=log_context(email_domain=domain, reason=kind.value),
                )
                raise IdentityError(kind) from exc

            account = self.to_account(member)

        logger.info(
            "account.create.success",
            extra=log_context(account_id=account.id, email_domain=domain),
        )
        return account

    async def authenticate(self, username: str, password: str) -> Account:
        """Return the account for ``username`` (or email) if ``password`` matches."""

        async with unit_of_work(self._session_factory) as session:
            member = await MembersRepository(session).get_by_login(username)
            if member is None:
                logger.info("account.authenticate.not_found")
                raise IdentityError(IdentityErrorKind.USERNAME_NOT_FOUND)
            if not self._passwords.matches(password, member.password_hash):
                logger.info(
                    "account.authenticate.invalid_password",
                    extra=log_context(account_id=member.id),
                )
                raise IdentityError(IdentityErrorKind.INVALID_PASSWORD)
            account = self.to_account(member)

        logger.debug(
            "account.authenticate.success",
            extra=log_context(account_id=account.id),
        )
        return account

    async def find_by_id(self, account_id: int) -> Account | None:
        async with unit_of_work(self._session_factory) as session:
            member = await MembersRepository(session).get_by_id(account_id)
            return self.to_account(member) if member is not None else None

    async def find_by_username(self, username: str) -> Account:
        """Resolve an account by username or email, ignoring case."""

        async with unit_of_work(self._session_factory) as session:
            member = await MembersRepository(session).get_by_login(username)
            if member is None:
                raise IdentityError(IdentityErrorKind.USERNAME_NOT_FOUND)
            return self.to_account(member)

    async def mark_profile_picture_set(self, account_id: int) -> None:
        async with unit_of_work(self._session_factory) as session:
            matched = await MembersRepository(session).mark_picture_set(account_id)

        logger.info(
            "account.picture.mark_set",
            extra=log_context(account_id=account_id, matched=matched),
        )


__all__ = ["AccountService"]
