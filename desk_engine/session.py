"""Per-session identity handed to every feature controller."""

from __future__ import annotations

from dataclasses import dataclass

from .derive import SortKey
from .settings import DeskSettings


@dataclass(frozen=True, slots=True)
class Session:
    """
    The acting user and view defaults for one application session.

    Attributes
    ----------
    user_id:
        Acting identity. None means nobody is signed in; owned actions then
        fail their precondition check.
    display_name:
        Name shown on the user's posts and reviews.
    email:
        Contact address stored on the profile.
    default_sort:
        Initial sort key for every list.
    """

    user_id: str | None
    display_name: str = ""
    email: str = ""
    default_sort: SortKey = SortKey.DATE_NEWEST

    @classmethod
    def from_settings(cls, settings: DeskSettings) -> "Session":
        return cls(
            user_id=settings.user_id,
            display_name=settings.display_name,
            email=settings.email,
            default_sort=settings.default_sort,
        )

    @property
    def signed_in(self) -> bool:
        return bool(self.user_id and self.user_id.strip())
