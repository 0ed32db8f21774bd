"""Member links to third-party identity providers."""

from .repository import ConnectedAccountsRepository
from .service import ConnectedAccountService

__all__ = ["ConnectedAccountService", "ConnectedAccountsRepository"]
