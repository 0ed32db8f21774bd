"""Profile picture URL resolution."""

from __future__ import annotations

import enum
from typing import Protocol

from greenhouse.core.models import Gender
from greenhouse.settings import Settings


class PictureSize(str, enum.Enum):
    SMALL = "small"
    NORMAL = "normal"
    LARGE = "large"


class PictureUrlResolver(Protocol):
    """Capability that maps a member's picture state to a URL."""

    def picture_url(
        self,
        account_id: int,
        gender: Gender,
        size: PictureSize,
        picture_set: bool,
    ) -> str: ...


class StaticPictureUrlResolver:
    """Resolve pictures beneath a static resources base URL.

    Members without an uploaded picture get the gender default
    (``{base}/profile-pics/{gender}/{size}.jpg``); uploaded pictures live at
    ``{base}/profile-pics/{account_id}/{size}.jpg``.
    """

    def __init__(self, base_url: str) -> None:
        self._base_url = base_url.rstrip("/")

    @classmethod
    def from_settings(cls, settings: Settings) -> StaticPictureUrlResolver:
        return cls(settings.picture_base_url)

    def picture_url(
        self,
        account_id: int,
        gender: Gender,
        size: PictureSize,
        picture_set: bool,
    ) -> str:
        owner = str(account_id) if picture_set else Gender(gender).value
        return f"{self._base_url}/profile-pics/{owner}/{PictureSize(size).value}.jpg"


__all__ = ["PictureSize", "PictureUrlResolver", "StaticPictureUrlResolver"]
