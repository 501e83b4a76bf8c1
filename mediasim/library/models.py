from __future__ import annotations

from enum import Enum
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class ItemKind(str, Enum):
    aggregate_folder = "AggregateFolder"
    collection_folder = "CollectionFolder"
    folder = "Folder"
    movie = "Movie"
    series = "Series"
    season = "Season"
    episode = "Episode"
    trailer = "Trailer"
    music_album = "MusicAlbum"
    music_artist = "MusicArtist"
    audio = "Audio"
    music_video = "MusicVideo"
    box_set = "BoxSet"

    @classmethod
    def parse(cls, value: str) -> "ItemKind":
        """Case-insensitive lookup by value. Raises ``ValueError`` if unknown."""
        needle = value.strip().lower()
        for kind in cls:
            if kind.value.lower() == needle:
                return kind
        raise ValueError(f"Unknown item type: {value!r}")

    @property
    def is_folder(self) -> bool:
        return self in _FOLDER_KINDS


_FOLDER_KINDS = frozenset(
    {ItemKind.aggregate_folder, ItemKind.collection_folder, ItemKind.folder}
)


class PersonKind(str, Enum):
    director = "Director"
    actor = "Actor"
    composer = "Composer"
    guest_star = "GuestStar"
    writer = "Writer"
    other = "Other"

    @classmethod
    def parse(cls, value: str | None) -> "PersonKind | None":
        """Case-insensitive lookup by value, ``None`` when nothing matches."""
        if not value:
            return None
        needle = value.strip().lower()
        for kind in cls:
            if kind.value.lower() == needle:
                return kind
        return None


class Item(BaseModel):
    """A library entry. Owned by the store; treated as read-only."""

    model_config = ConfigDict(frozen=True)

    id: UUID
    name: str = ""
    kind: ItemKind
    parent_id: UUID | None = None
    official_rating: str | None = None
    production_year: int | None = None
    genres: tuple[str, ...] = ()
    tags: tuple[str, ...] = ()
    studios: tuple[str, ...] = ()
    artist_ids: tuple[UUID, ...] = ()

    @field_validator("kind", mode="before")
    @classmethod
    def _parse_kind(cls, value: Any) -> Any:
        if isinstance(value, str) and not isinstance(value, ItemKind):
            return ItemKind.parse(value)
        return value

    @property
    def is_folder(self) -> bool:
        return self.kind.is_folder


class PersonAssociation(BaseModel):
    """A person credited on an item.

    ``kind`` is the credit type. ``role`` is free text (a character name, or
    sometimes a job title such as "Director"); ``role_kind`` is that text
    parsed into the vocabulary once, so scoring never compares strings.
    """

    name: str
    item_id: UUID
    kind: PersonKind = PersonKind.other
    role: str | None = None
    role_kind: PersonKind | None = None

    @model_validator(mode="before")
    @classmethod
    def _parse_roles(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        kind = data.get("kind")
        if kind is None or (isinstance(kind, str) and not isinstance(kind, PersonKind)):
            data["kind"] = PersonKind.parse(kind) or PersonKind.other
        if data.get("role_kind") is None:
            data["role_kind"] = PersonKind.parse(data.get("role"))
        return data


class User(BaseModel):
    id: UUID
    name: str
    library_ids: tuple[UUID, ...] = ()


class UserItemData(BaseModel):
    user_id: UUID
    item_id: UUID
    is_favorite: bool = False
    played: bool = False
    play_count: int = Field(default=0, ge=0)
