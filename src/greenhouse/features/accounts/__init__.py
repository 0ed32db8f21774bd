"""Member identities: creation, authentication and lookup."""

from .pictures import PictureSize, PictureUrlResolver, StaticPictureUrlResolver
from .repository import MembersRepository
from .schemas import Account, Gender, Person
from .service import AccountService

__all__ = [
    "Account",
    "AccountService",
    "Gender",
    "MembersRepository",
    "Person",
    "PictureSize",
    "PictureUrlResolver",
    "StaticPictureUrlResolver",
]
