"""Pydantic contracts for application credentials."""

from __future__ import annotations

from pydantic import ConfigDict, SecretStr

from greenhouse.common.schema import BaseSchema


class RegisteredApp(BaseSchema):
    """A client application known by its API key."""

    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    api_key: str


class ConnectedApp(BaseSchema):
    """Credentials issued to an application on behalf of a member."""

    model_config = ConfigDict(frozen=True)

    api_key: str
    account_id: int
    access_token: str
    secret: SecretStr


__all__ = ["ConnectedApp", "RegisteredApp"]
