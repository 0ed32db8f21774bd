"""Query helpers for ``ConnectedAccount`` links."""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from greenhouse.core.models import ConnectedAccount, Member


class ConnectedAccountsRepository:
    """Persistence helpers for member <-> provider links."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, member_id: int, provider: str) -> ConnectedAccount | None:
        stmt = select(ConnectedAccount).where(
            ConnectedAccount.member_id == member_id,
            ConnectedAccount.provider == provider,
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def exists(self, member_id: int, provider: str) -> bool:
        stmt = (
            select(ConnectedAccount.id)
            .where(
                ConnectedAccount.member_id == member_id,
                ConnectedAccount.provider == provider,
            )
            .limit(1)
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def add(
        self,
        *,
        member_id: int,
        provider: str,
        access_token_encrypted: str,
        access_token_digest: str,
        provider_account_id: str | None,
    ) -> ConnectedAccount:
        link = ConnectedAccount(
            member_id=member_id,
            provider=provider,
            access_token_encrypted=access_token_encrypted,
            access_token_digest=access_token_digest,
            provider_account_id=provider_account_id,
        )
        self._session.add(link)
        await self._session.flush()
        return link

    async def remove(self, member_id: int, provider: str) -> int:
        result = await self._session.execute(
            delete(ConnectedAccount).where(
                ConnectedAccount.member_id == member_id,
                ConnectedAccount.provider == provider,
            )
        )
        return int(result.rowcount or 0)

    async def find_member_by_token_digest(self, provider: str, digest: str) -> Member | None:
        stmt = (
            select(Member)
            .join(ConnectedAccount, ConnectedAccount.member_id == Member.id)
            .where(
                ConnectedAccount.provider == provider,
                ConnectedAccount.access_token_digest == digest,
            )
            .order_by(ConnectedAccount.id)
            .limit(1)
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_members_by_provider_account_ids(
        self,
        provider: str,
        provider_account_ids: Sequence[str],
    ) -> list[Member]:
        """Return one member per matching link, in link storage order."""

        stmt = (
            select(Member)
            .join(ConnectedAccount, ConnectedAccount.member_id == Member.id)
            .where(
                ConnectedAccount.provider == provider,
                ConnectedAccount.provider_account_id.in_(list(provider_account_ids)),
            )
            .order_by(ConnectedAccount.id)
        )
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def list_providers(self, member_id: int) -> list[str]:
        stmt = (
            select(ConnectedAccount.provider)
            .where(ConnectedAccount.member_id == member_id)
            .order_by(ConnectedAccount.provider)
        )
        result = await self._session.execute(stmt)
        return list(result.scalars().all())


__all__ = ["ConnectedAccountsRepository"]
