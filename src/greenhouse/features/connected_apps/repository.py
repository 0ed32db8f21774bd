"""Query helpers for registered apps and their issued credentials."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from greenhouse.core.models import App, AppConnection


class ConnectedAppsRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_app_by_api_key(self, api_key: str) -> App | None:
        result = await self._session.execute(select(App).where(App.api_key == api_key))
        return result.scalar_one_or_none()

    async def add_app(self, *, name: str, api_key: str) -> App:
        app = App(name=name, api_key=api_key)
        self._session.add(app)
        await self._session.flush()
        return app

    async def add_connection(
        self,
        *,
        app_id: int,
        member_id: int,
        access_token: str,
        secret_encrypted: str,
    ) -> AppConnection:
        connection = AppConnection(
            app_id=app_id,
            member_id=member_id,
            access_token=access_token,
            secret_encrypted=secret_encrypted,
        )
        self._session.add(connection)
        await self._session.flush()
        return connection

    async def get_connection_by_token(self, access_token: str) -> AppConnection | None:
        stmt = select(AppConnection).where(AppConnection.access_token == access_token)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()


__all__ = ["ConnectedAppsRepository"]
