from __future__ import annotations

import logging
from typing import Iterable
from uuid import UUID

from ..library.models import Item, ItemKind, User
from .contracts import ItemsQuery, ItemStore

logger = logging.getLogger(__name__)


def parse_guids(raw: str | None) -> list[UUID]:
    """Parse a comma-delimited id list. Malformed entries are skipped."""
    if not raw:
        return []
    ids: list[UUID] = []
    for part in raw.split(","):
        part = part.strip()
        if not part:
            continue
        try:
            ids.append(UUID(part))
        except ValueError:
            logger.debug("Skipping malformed id %r", part)
    return ids


def resolve_reference(store: ItemStore, item_id: UUID | None) -> Item:
    """Return the reference item, or the library root when no id is given.

    Raises ``NotFoundError`` for an id that does not resolve.
    """
    if item_id is None:
        return store.root_folder()
    return store.resolve_item(item_id)


def resolve_scope(
    store: ItemStore,
    parent_id: UUID | None,
    user: User | None,
) -> tuple[UUID, ...] | None:
    """Return the container ids candidates must descend from.

    An explicit container wins; otherwise a viewer is confined to the
    libraries they can see; otherwise the whole library (``None``).
    """
    if parent_id is not None:
        return (store.resolve_item(parent_id).id,)
    if user is not None:
        return tuple(user.library_ids)
    return None


def select_candidates(
    store: ItemStore,
    reference: Item,
    include_kinds: Iterable[ItemKind],
    parent_id: UUID | None = None,
    user: User | None = None,
    exclude_artist_ids: Iterable[UUID] = (),
) -> list[Item]:
    """Build the full, unpaged candidate set for ``reference``."""
    query = ItemsQuery(
        include_kinds=tuple(include_kinds),
        parent_ids=resolve_scope(store, parent_id, user),
        exclude_artist_ids=frozenset(exclude_artist_ids),
        exclude_item_ids=frozenset({reference.id}),
        recursive=True,
    )
    return store.list_items(query)
