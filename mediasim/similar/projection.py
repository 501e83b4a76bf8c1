from __future__ import annotations

from typing import Sequence

from ..library.data_store import LibraryStore
from ..library.models import Item, User
from .models import ItemDto, UserItemDataDto


class DtoProjector:
    """Turns ranked items into API records, with the viewer's state attached."""

    def __init__(self, store: LibraryStore) -> None:
        self._store = store

    def _user_data(self, item: Item, viewer: User | None) -> UserItemDataDto | None:
        if viewer is None:
            return None
        entry = self._store.get_user_data(viewer.id, item.id)
        if entry is None:
            return UserItemDataDto(is_favorite=False, played=False, play_count=0)
        return UserItemDataDto(
            is_favorite=entry.is_favorite,
            played=entry.played,
            play_count=entry.play_count,
        )

    def project(self, items: Sequence[Item], viewer: User | None = None) -> list[ItemDto]:
        return [
            ItemDto(
                id=item.id,
                name=item.name,
                type=item.kind,
                parent_id=item.parent_id,
                official_rating=item.official_rating,
                production_year=item.production_year,
                genres=list(item.genres),
                tags=list(item.tags),
                studios=list(item.studios),
                user_data=self._user_data(item, viewer),
            )
            for item in items
        ]
