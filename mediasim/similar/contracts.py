from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol, Sequence
from uuid import UUID

from ..library.models import Item, ItemKind, PersonAssociation, User


class NotFoundError(LookupError):
    """Raised when an item, scope or user id does not resolve."""

    def __init__(self, what: str, identifier: object) -> None:
        super().__init__(f"{what} not found: {identifier}")
        self.what = what
        self.identifier = identifier


@dataclass(frozen=True)
class ItemsQuery:
    """Filter for ``ItemStore.list_items``.

    ``parent_ids`` of ``None`` means the whole library. ``recursive`` walks
    every descendant of the parents instead of their direct children.
    """

    include_kinds: tuple[ItemKind, ...]
    parent_ids: tuple[UUID, ...] | None = None
    exclude_artist_ids: frozenset[UUID] = frozenset()
    exclude_item_ids: frozenset[UUID] = frozenset()
    recursive: bool = True


class ItemStore(Protocol):
    def resolve_item(self, item_id: UUID) -> Item: ...

    def root_folder(self) -> Item: ...

    def get_user(self, user_id: UUID) -> User: ...

    def list_items(self, query: ItemsQuery) -> list[Item]: ...


class PeopleIndex(Protocol):
    def people_of(self, item_id: UUID) -> list[PersonAssociation]: ...

    def people_appearing_in(self, item_id: UUID) -> list[PersonAssociation]: ...


class ResultProjector(Protocol):
    def project(self, items: Sequence[Item], viewer: User | None = None) -> list[Any]: ...
