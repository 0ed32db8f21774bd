"""ORM models for member identities and credentials."""

from .app import App, AppConnection
from .connected_account import ConnectedAccount
from .member import Gender, Member, canonical_login

__all__ = [
    "App",
    "AppConnection",
    "ConnectedAccount",
    "Gender",
    "Member",
    "canonical_login",
]
