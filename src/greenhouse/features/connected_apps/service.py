"""Issue and resolve per-application access credentials."""

from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from greenhouse.common.logging import log_context
from greenhouse.core.errors import IdentityError, IdentityErrorKind
from greenhouse.core.security import SecretCodec, mint_opaque_token
from greenhouse.infra.db import unit_of_work
from greenhouse.settings import Settings

from .repository import ConnectedAppsRepository
from .schemas import ConnectedApp, RegisteredApp

logger = logging.getLogger(__name__)


class ConnectedAppService:
    """Connected app credential issuance and lookup.

    Every successful :meth:`connect_app` mints a fresh access token and secret.
    The secret is encrypted before it is stored; both values are returned in
    plaintext exactly once.
    """

    def __init__(
        self,
        *,
        session_factory: async_sessionmaker[AsyncSession],
        settings: Settings,
        codec: SecretCodec,
    ) -> None:
        self._session_factory = session_factory
        self._settings = settings
        self._codec = codec

    async def register_app(self, name: str, api_key: str) -> RegisteredApp:
        """Register a client application under ``api_key``."""

        cleaned_name = name.strip()
        cleaned_key = api_key.strip()
        if not cleaned_name or not cleaned_key:
            raise ValueError("App name and API key are required")

        async with unit_of_work(self._session_factory) as session:
            repo = ConnectedAppsRepository(session)
            if await repo.get_app_by_api_key(cleaned_key) is not None:
                raise ValueError("API key is already registered")
            app = await repo.add_app(name=cleaned_name, api_key=cleaned_key)
            registered = RegisteredApp.model_validate(app)

        logger.info("connected_app.register", extra=log_context(app_id=registered.id))
        return registered

    async def connect_app(self, account_id: int, api_key: str) -> ConnectedApp:
        """Issue a new access token and secret for ``account_id`` under ``api_key``."""

        async with unit_of_work(self._session_factory) as session:
            repo = ConnectedAppsRepository(session)
            app = await repo.get_app_by_api_key(api_key)
            if app is None:
                logger.warning(
                    "connected_app.connect.invalid_api_key",
                    extra=log_context(account_id=account_id),
                )
                raise IdentityError(IdentityErrorKind.INVALID_API_KEY)

            access_token = mint_opaque_token(self._settings.app_token_bytes)
            secret = mint_opaque_token(self._settings.app_token_bytes)
            await repo.add_connection(
                app_id=app.id,
                member_id=account_id,
                access_token=access_token,
                secret_encrypted=self._codec.encrypt(secret),
            )
            app_id = app.id

        logger.info(
            "connected_app.connect.success",
            extra=log_context(account_id=account_id, app_id=app_id),
        )
        return ConnectedApp(
            api_key=api_key,
            account_id=account_id,
            access_token=access_token,
            secret=secret,
        )

    async def find_connected_app(self, access_token: str) -> ConnectedApp:
        """Resolve issued credentials by access token, decrypting the secret."""

        async with unit_of_work(self._session_factory) as session:
            connection = await ConnectedAppsRepository(session).get_connection_by_token(
                access_token
            )
            if connection is None:
                logger.info("connected_app.lookup.not_found")
                raise IdentityError(IdentityErrorKind.CONNECTED_APP_NOT_FOUND)
            api_key = connection.app.api_key
            account_id = connection.member_id
            secret_encrypted = connection.secret_encrypted

        return ConnectedApp(
            api_key=api_key,
            account_id=account_id,
            access_token=access_token,
            secret=self._codec.decrypt(secret_encrypted),
        )


__all__ = ["ConnectedAppService"]
