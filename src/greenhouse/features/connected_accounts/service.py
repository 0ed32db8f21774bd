"""Links between members and third-party identity providers."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from greenhouse.common.logging import log_context
from greenhouse.core.errors import IdentityError, IdentityErrorKind
from greenhouse.core.security import SecretCodec
from greenhouse.features.accounts import Account, AccountService
from greenhouse.infra.db import unit_of_work

from .repository import ConnectedAccountsRepository

logger = logging.getLogger(__name__)


def _is_unique_violation(exc: IntegrityError) -> bool:
    message = str(exc.orig).lower()
    return "unique" in message or "duplicate" in message


class ConnectedAccountService:
    """Connect, disconnect and resolve provider accounts.

    Provider access tokens are stored encrypted; lookups by token go through
    the codec's keyed digest so the ciphertext never needs to be queried.
    """

    def __init__(
        self,
        *,
        session_factory: async_sessionmaker[AsyncSession],
        accounts: AccountService,
        codec: SecretCodec,
    ) -> None:
        self._session_factory = session_factory
        self._accounts = accounts
        self._codec = codec

    async def connect_account(
        self,
        account_id: int,
        provider: str,
        access_token: str,
        provider_account_id: str | None,
    ) -> None:
        """Link ``account_id`` to its account at ``provider``.

        Raises ``ValueError`` before touching storage when ``provider`` or
        ``access_token`` is blank.
        """

        if not provider.strip():
            raise ValueError("provider must not be empty")
        if not access_token:
            raise ValueError("access_token must not be empty")

        logger.debug(
            "connected_account.connect.start",
            extra=log_context(account_id=account_id, provider=provider),
        )

        async with unit_of_work(self._session_factory) as session:
            repo = ConnectedAccountsRepository(session)
            if await repo.exists(account_id, provider):
                logger.warning(
                    "connected_account.connect.conflict",
                    extra=log_context(account_id=account_id, provider=provider),
                )
                raise IdentityError(IdentityErrorKind.ACCOUNT_ALREADY_CONNECTED)

            try:
                await repo.add(
                    member_id=account_id,
                    provider=provider,
                    access_token_encrypted=self._codec.encrypt(access_token),
                    access_token_digest=self._codec.digest(access_token),
                    provider_account_id=provider_account_id,
                )
            except IntegrityError as exc:
                if not _is_unique_violation(exc):
                    raise
                logger.warning(
                    "connected_account.connect.conflict",
                    extra=log_context(account_id=account_id, provider=provider),
                )
                raise IdentityError(IdentityErrorKind.ACCOUNT_ALREADY_CONNECTED) from exc

        logger.info(
            "connected_account.connect.success",
            extra=log_context(account_id=account_id, provider=provider),
        )

    async def disconnect_account(self, account_id: int, provider: str) -> None:
        async with unit_of_work(self._session_factory) as session:
            removed = await ConnectedAccountsRepository(session).remove(account_id, provider)

        logger.info(
            "connected_account.disconnect",
            extra=log_context(account_id=account_id, provider=provider, removed=removed),
        )

    async def find_by_connected_account(self, provider: str, access_token: str) -> Account:
        """Return the member whose ``provider`` link carries ``access_token``."""

        digest = self._codec.digest(access_token)
        async with unit_of_work(self._session_factory) as session:
            member = await ConnectedAccountsRepository(session).find_member_by_token_digest(
                provider, digest
            )
            if member is None:
                logger.info(
                    "connected_account.lookup.not_found",
                    extra=log_context(provider=provider),
                )
                raise IdentityError(IdentityErrorKind.CONNECTED_ACCOUNT_NOT_FOUND)
            return self._accounts.to_account(member)

    async def find_friend_accounts(
        self,
        provider: str,
        provider_account_ids: Sequence[str],
    ) -> list[Account]:
        """Map provider-side user ids to member accounts.

        Ids without a matching link are skipped; an empty input yields ``[]``.
        """

        if not provider_account_ids:
            return []
        async with unit_of_work(self._session_factory) as session:
            members = await ConnectedAccountsRepository(
                session
            ).list_members_by_provider_account_ids(provider, provider_account_ids)
            return [self._accounts.to_account(member) for member in members]

    async def has_connected_account(self, account_id: int, provider: str) -> bool:
        async with unit_of_work(self._session_factory) as session:
            return await ConnectedAccountsRepository(session).exists(account_id, provider)

    async def connected_providers(self, account_id: int) -> list[str]:
        async with unit_of_work(self._session_factory) as session:
            return await ConnectedAccountsRepository(session).list_providers(account_id)

    async def get_access_token(self, account_id: int, provider: str) -> str:
        """Return the decrypted provider token for server-side API calls."""

        async with unit_of_work(self._session_factory) as session:
            link = await ConnectedAccountsRepository(session).get(account_id, provider)
            if link is None:
                raise IdentityError(IdentityErrorKind.CONNECTED_ACCOUNT_NOT_FOUND)
            ciphertext = link.access_token_encrypted
        return self._codec.decrypt(ciphertext)


__all__ = ["ConnectedAccountService"]
