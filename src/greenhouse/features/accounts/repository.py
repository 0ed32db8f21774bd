"""Query helpers for working with ``Member`` records."""

from __future__ import annotations

from datetime import date

from sqlalchemy import or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from greenhouse.core.models import Gender, Member, canonical_login


class MembersRepository:
    """Persistence helpers for member identities."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, member_id: int) -> Member | None:
        return await self._session.get(Member, member_id)

    async def get_by_email(self, email: str) -> Member | None:
        stmt = select(Member).where(Member.email_canonical == canonical_login(email))
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_username(self, username: str) -> Member | None:
        stmt = select(Member).where(Member.username_canonical == canonical_login(username))
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_login(self, username_or_email: str) -> Member | None:
        """Return the member whose username or email matches, ignoring case."""

        login = canonical_login(username_or_email)
        if not login:
            return None
        stmt = (
            select(Member)
            .where(or_(Member.username_canonical == login, Member.email_canonical == login))
            .order_by(Member.id)
            .limit(1)
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def create(
        self,
        *,
        first_name: str,
        last_name: str,
        email: str,
        password_hash: str,
        gender: Gender,
        birth_date: date | None = None,
        username: str | None = None,
    ) -> Member:
        member = Member(
            first_name=first_name,
            last_name=last_name,
            email=email,
            username=username,
            password_hash=password_hash,
            gender=gender,
            birth_date=birth_date,
            picture_set=False,
        )
        self._session.add(member)
        await self._session.flush()
        await self._session.refresh(member)
        return member

    async def mark_picture_set(self, member_id: int) -> bool:
        """Flag the member's picture as uploaded; return whether a row matched."""

        result = await self._session.execute(
            update(Member).where(Member.id == member_id).values(picture_set=True)
        )
        return bool(result.rowcount)


__all__ = ["MembersRepository"]
