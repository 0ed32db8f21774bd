"""Credentials issued to registered client applications."""

from .repository import ConnectedAppsRepository
from .schemas import ConnectedApp, RegisteredApp
from .service import ConnectedAppService

__all__ = [
    "ConnectedApp",
    "ConnectedAppService",
    "ConnectedAppsRepository",
    "RegisteredApp",
]
