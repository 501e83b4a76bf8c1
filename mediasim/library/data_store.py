from __future__ import annotations

import logging
from collections import defaultdict
from typing import Iterable
from uuid import UUID

import pandas as pd

from ..similar.contracts import ItemsQuery, NotFoundError
from .config import DEFAULT_LIBRARY_CONFIG, LibraryConfig
from .ingest import load_library
from .models import Item, ItemKind, PersonAssociation, User, UserItemData

logger = logging.getLogger(__name__)


class LibraryStore:
    """In-memory item store, people index and user registry.

    Items keep the order they were loaded in; ``list_items`` returns them in
    that order, which is the tie-break order of the similar-items ranking.
    """

    def __init__(
        self,
        items: Iterable[Item],
        people: Iterable[PersonAssociation] = (),
        users: Iterable[User] = (),
        user_data: Iterable[UserItemData] = (),
    ) -> None:
        self._items: dict[UUID, Item] = {}
        for item in items:
            self._items[item.id] = item

        self._children: dict[UUID, list[UUID]] = defaultdict(list)
        for item in self._items.values():
            if item.parent_id is not None:
                self._children[item.parent_id].append(item.id)

        self._frame = pd.DataFrame({
            "id": list(self._items.keys()),
            "kind": [item.kind.value for item in self._items.values()],
            "artist_ids": [frozenset(item.artist_ids) for item in self._items.values()],
        })

        self._people: list[PersonAssociation] = list(people)
        self._people_frame = pd.DataFrame({
            "name_lower": [p.name.lower() for p in self._people],
            "item_id": [p.item_id for p in self._people],
        })

        self._users: dict[UUID, User] = {user.id: user for user in users}
        self._user_data: dict[tuple[UUID, UUID], UserItemData] = {
            (entry.user_id, entry.item_id): entry for entry in user_data
        }

    @classmethod
    def from_config(cls, config: LibraryConfig = DEFAULT_LIBRARY_CONFIG) -> "LibraryStore":
        items, people, users, user_data = load_library(config)
        return cls(items, people, users, user_data)

    # ── Items ───────────────────────────────────────────────────────────

    def resolve_item(self, item_id: UUID) -> Item:
        item = self._items.get(item_id)
        if item is None:
            raise NotFoundError("Item", item_id)
        return item

    def root_folder(self) -> Item:
        """Return the library's aggregate root folder."""
        for item in self._items.values():
            if item.kind is ItemKind.aggregate_folder:
                return item
        raise NotFoundError("Root folder", None)

    def descendants(self, parent_id: UUID, recursive: bool = True) -> list[UUID]:
        found: list[UUID] = []
        pending = list(self._children.get(parent_id, ()))
        seen: set[UUID] = set()
        while pending:
            child = pending.pop(0)
            if child in seen:
                continue
            seen.add(child)
            found.append(child)
            if recursive:
                pending.extend(self._children.get(child, ()))
        return found

    def list_items(self, query: ItemsQuery) -> list[Item]:
        frame = self._frame
        kinds = [kind.value for kind in query.include_kinds]
        mask = frame["kind"].isin(kinds)

        if query.parent_ids is not None:
            in_scope: set[UUID] = set()
            for parent_id in query.parent_ids:
                in_scope.update(self.descendants(parent_id, recursive=query.recursive))
            mask = mask & frame["id"].isin(list(in_scope))

        if query.exclude_artist_ids:
            excluded = query.exclude_artist_ids
            mask = mask & ~frame["artist_ids"].apply(lambda ids: bool(ids & excluded))

        if query.exclude_item_ids:
            mask = mask & ~frame["id"].isin(list(query.exclude_item_ids))

        return [self._items[item_id] for item_id in frame.loc[mask, "id"]]

    def genres(self) -> list[str]:
        return _distinct_sorted(g for item in self._items.values() for g in item.genres)

    def studios(self) -> list[str]:
        return _distinct_sorted(s for item in self._items.values() for s in item.studios)

    def kinds(self) -> list[str]:
        return sorted(self._frame["kind"].unique().tolist())

    # ── People ──────────────────────────────────────────────────────────

    def people_of(self, item_id: UUID) -> list[PersonAssociation]:
        return [p for p in self._people if p.item_id == item_id]

    def people_appearing_in(self, item_id: UUID) -> list[PersonAssociation]:
        """Credits of every item that shares at least one person with ``item_id``."""
        frame = self._people_frame
        if frame.empty:
            return []
        names = set(frame.loc[frame["item_id"] == item_id, "name_lower"])
        if not names:
            return []
        related_items = set(frame.loc[frame["name_lower"].isin(list(names)), "item_id"])
        rows = frame.index[frame["item_id"].isin(list(related_items))]
        return [self._people[i] for i in rows]

    # ── Users ───────────────────────────────────────────────────────────

    def get_user(self, user_id: UUID) -> User:
        user = self._users.get(user_id)
        if user is None:
            raise NotFoundError("User", user_id)
        return user

    def get_user_data(self, user_id: UUID, item_id: UUID) -> UserItemData | None:
        return self._user_data.get((user_id, item_id))


def _distinct_sorted(values: Iterable[str]) -> list[str]:
    # Case-insensitive dedupe, first spelling wins.
    seen: dict[str, str] = {}
    for value in values:
        seen.setdefault(value.lower(), value)
    return sorted(seen.values(), key=str.lower)


_store: LibraryStore | None = None


def get_store() -> LibraryStore:
    """Return the process-wide library store, loading it on first call."""
    global _store
    if _store is None:
        _store = LibraryStore.from_config()
        logger.info("Library store loaded from %s", DEFAULT_LIBRARY_CONFIG.data_dir)
    return _store
