"""Entity models for PocketDesk.

Every persisted record is represented as a frozen dataclass built from a gateway
row mapping. Entities are detached snapshots: holding one never keeps a live
reference into the store, and re-fetching produces new instances.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Mapping, Self

from .formatting import name_initials

ISO_8601_UTC_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"


class PriorityLevel(str, Enum):
    """Task priority levels."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


def datetime_to_iso_utc(dt: datetime) -> str:
    """Serialize a timezone-aware datetime as a UTC ISO-8601 string.

    Raises
    ------
    ValueError
        If `dt` is naive (has no timezone).
    """
    if dt.tzinfo is None:
        raise ValueError("datetime must be timezone-aware")
    return dt.astimezone(timezone.utc).strftime(ISO_8601_UTC_FORMAT)


def datetime_from_iso_utc(value: str) -> datetime:
    """Parse an ISO-8601 timestamp as an aware datetime.

    Accepts the canonical ``Z`` suffix as well as explicit offsets. Naive
    values are interpreted as UTC.
    """
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    dt = datetime.fromisoformat(text)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def _require_keys(payload: Mapping[str, Any], keys: set[str], *, context: str) -> None:
    missing = keys.difference(payload.keys())
    if missing:
        missing_str = ", ".join(sorted(missing))
        raise ValueError(f"Missing required keys in {context}: {missing_str}")


def _optional_dt(value: object) -> datetime | None:
    if value is None or value == "":
        return None
    return datetime_from_iso_utc(str(value))


@dataclass(frozen=True, slots=True)
class Profile:
    """Public profile of a user, attached to posts and reviews for display."""

    user_id: str
    name: str
    email: str

    @property
    def initials(self) -> str:
        return name_initials(self.name)

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> Self:
        _require_keys(row, {"user_id", "name", "email"}, context="profile")
        return cls(user_id=str(row["user_id"]), name=str(row["name"]), email=str(row["email"]))

    @classmethod
    def unknown(cls, user_id: str) -> Self:
        """Placeholder used when a row references a user with no profile."""
        return cls(user_id=user_id, name="Unknown", email="")


@dataclass(frozen=True, slots=True)
class FileItem:
    """Metadata for a stored drive file; the bytes live in the blob store."""

    id: int
    user_id: str
    name: str
    path: str
    size: int
    type: str
    url: str
    created_at: datetime
    updated_at: datetime | None = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> Self:
        _require_keys(
            row, {"id", "user_id", "name", "path", "size", "type", "url", "created_at"}, context="file"
        )
        return cls(
            id=int(row["id"]),
            user_id=str(row["user_id"]),
            name=str(row["name"]),
            path=str(row["path"]),
            size=int(row["size"]),
            type=str(row["type"]),
            url=str(row["url"]),
            created_at=datetime_from_iso_utc(str(row["created_at"])),
            updated_at=_optional_dt(row.get("updated_at")),
        )


@dataclass(frozen=True, slots=True)
class Note:
    """A markdown note."""

    id: int
    user_id: str
    title: str
    note: str
    created_at: datetime
    updated_at: datetime | None = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> Self:
        _require_keys(row, {"id", "user_id", "title", "note", "created_at"}, context="note")
        return cls(
            id=int(row["id"]),
            user_id=str(row["user_id"]),
            title=str(row["title"]),
            note=str(row["note"] or ""),
            created_at=datetime_from_iso_utc(str(row["created_at"])),
            updated_at=_optional_dt(row.get("updated_at")),
        )


@dataclass(frozen=True, slots=True)
class Task:
    """A to-do item."""

    id: int
    user_id: str
    content: str
    is_done: bool
    priority_level: PriorityLevel
    created_at: datetime

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> Self:
        _require_keys(
            row, {"id", "user_id", "content", "is_done", "priority_level", "created_at"}, context="task"
        )
        try:
            priority = PriorityLevel(str(row["priority_level"]).lower())
        except ValueError:
            priority = PriorityLevel.MEDIUM
        return cls(
            id=int(row["id"]),
            user_id=str(row["user_id"]),
            content=str(row["content"]),
            is_done=bool(row["is_done"]),
            priority_level=priority,
            created_at=datetime_from_iso_utc(str(row["created_at"])),
        )


@dataclass(frozen=True, slots=True)
class FoodPost:
    """A food photo post with its author's profile."""

    id: int
    user_id: str
    name: str
    description: str
    url: str
    created_at: datetime
    profile: Profile
    updated_at: datetime | None = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any], profile: Profile | None = None) -> Self:
        _require_keys(
            row, {"id", "user_id", "name", "description", "url", "created_at"}, context="food"
        )
        user_id = str(row["user_id"])
        return cls(
            id=int(row["id"]),
            user_id=user_id,
            name=str(row["name"]),
            description=str(row["description"] or ""),
            url=str(row["url"]),
            created_at=datetime_from_iso_utc(str(row["created_at"])),
            profile=profile or Profile.unknown(user_id),
            updated_at=_optional_dt(row.get("updated_at")),
        )


@dataclass(frozen=True, slots=True)
class Review:
    """
    A comment left on a food post or a pokemon.

    Attributes
    ----------
    parent_id:
        Id of the reviewed food post or pokemon.
    user_id:
        Owner of the review; may differ from the parent's owner.
    """

    id: int
    parent_id: int
    user_id: str
    comment: str
    created_at: datetime
    profile: Profile
    updated_at: datetime | None = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any], *, parent_key: str, profile: Profile | None = None) -> Self:
        _require_keys(row, {"id", parent_key, "user_id", "comment", "created_at"}, context="review")
        user_id = str(row["user_id"])
        return cls(
            id=int(row["id"]),
            parent_id=int(row[parent_key]),
            user_id=user_id,
            comment=str(row["comment"]),
            created_at=datetime_from_iso_utc(str(row["created_at"])),
            profile=profile or Profile.unknown(user_id),
            updated_at=_optional_dt(row.get("updated_at")),
        )


@dataclass(frozen=True, slots=True)
class PokemonStats:
    """Base stats shown on a pokemon card."""

    hp: int = 0
    attack: int = 0
    defense: int = 0
    speed: int = 0

    @classmethod
    def from_value(cls, value: object) -> Self:
        payload = json.loads(value) if isinstance(value, str) else value
        if not isinstance(payload, Mapping):
            return cls()
        return cls(
            hp=int(payload.get("hp", 0)),
            attack=int(payload.get("attack", 0)),
            defense=int(payload.get("defense", 0)),
            speed=int(payload.get("speed", 0)),
        )

    def to_dict(self) -> dict[str, int]:
        return {"hp": self.hp, "attack": self.attack, "defense": self.defense, "speed": self.speed}


@dataclass(frozen=True, slots=True)
class Pokemon:
    """A catalogue pokemon that users can review."""

    id: int
    name: str
    image: str
    types: tuple[str, ...]
    stats: PokemonStats
    created_at: datetime

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> Self:
        _require_keys(row, {"id", "name", "image", "types", "stats", "created_at"}, context="pokemon")
        raw_types = row["types"]
        types = json.loads(raw_types) if isinstance(raw_types, str) else raw_types
        return cls(
            id=int(row["id"]),
            name=str(row["name"]),
            image=str(row["image"]),
            types=tuple(str(t) for t in (types or ())),
            stats=PokemonStats.from_value(row["stats"]),
            created_at=datetime_from_iso_utc(str(row["created_at"])),
        )
