from __future__ import annotations

import logging
from typing import List
from uuid import UUID

import pandas as pd

from .config import DEFAULT_LIBRARY_CONFIG, LibraryConfig
from .models import Item, ItemKind, PersonAssociation, User, UserItemData

logger = logging.getLogger(__name__)


ITEM_COLUMNS: List[str] = [
    "id",
    "name",
    "type",
    "parent_id",
    "official_rating",
    "production_year",
    "genres",
    "tags",
    "studios",
    "artist_ids",
]

PEOPLE_COLUMNS: List[str] = ["name", "type", "role", "item_id"]

USER_COLUMNS: List[str] = ["id", "name", "library_ids"]

USER_DATA_COLUMNS: List[str] = [
    "user_id",
    "item_id",
    "is_favorite",
    "played",
    "play_count",
]


def _clean_text(value: object) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str) and pd.isna(value):
        return None
    text = str(value).strip()
    return text or None


def _split_list(value: object, sep: str = ",") -> tuple[str, ...]:
    text = _clean_text(value)
    if text is None:
        return ()
    return tuple(part.strip() for part in text.split(sep) if part.strip())


def _parse_uuid(value: object) -> UUID | None:
    text = _clean_text(value)
    if text is None:
        return None
    try:
        return UUID(text)
    except ValueError:
        return None


def _parse_uuid_list(value: object) -> tuple[UUID, ...]:
    ids = (_parse_uuid(part) for part in _split_list(value))
    return tuple(i for i in ids if i is not None)


def _normalize_year(value: object) -> int | None:
    text = _clean_text(value)
    if text is None:
        return None
    try:
        year = int(float(text))
    except (TypeError, ValueError):
        return None
    return year if year > 0 else None


def _parse_count(value: object) -> int:
    text = _clean_text(value)
    if text is None:
        return 0
    try:
        return max(0, int(float(text)))
    except ValueError:
        return 0


def _parse_flag(value: object) -> bool:
    text = _clean_text(value)
    return text is not None and text.lower() in ("1", "true", "yes")


def _ensure_columns(raw: pd.DataFrame, columns: List[str]) -> pd.DataFrame:
    # Missing optional columns are treated as empty.
    frame = raw.copy()
    for col in columns:
        if col not in frame.columns:
            frame[col] = pd.NA
    return frame[columns]


def normalize_items(raw: pd.DataFrame) -> list[Item]:
    """Map raw item rows into ``Item`` models, skipping unusable rows."""
    frame = _ensure_columns(raw, ITEM_COLUMNS)
    items: list[Item] = []
    for row in frame.itertuples(index=False):
        item_id = _parse_uuid(row.id)
        if item_id is None:
            logger.warning("Skipping item row with invalid id %r", row.id)
            continue
        try:
            kind = ItemKind.parse(_clean_text(row.type) or "")
        except ValueError:
            logger.warning("Skipping item %s with unknown type %r", item_id, row.type)
            continue
        items.append(Item(
            id=item_id,
            name=_clean_text(row.name) or "",
            kind=kind,
            parent_id=_parse_uuid(row.parent_id),
            official_rating=_clean_text(row.official_rating),
            production_year=_normalize_year(row.production_year),
            genres=_split_list(row.genres),
            tags=_split_list(row.tags),
            studios=_split_list(row.studios),
            artist_ids=_parse_uuid_list(row.artist_ids),
        ))
    return items


def normalize_people(raw: pd.DataFrame) -> list[PersonAssociation]:
    """Map raw credit rows into ``PersonAssociation`` models.

    Rows without a name or with an invalid item id are dropped. The credit
    type and the free-text role are parsed into ``PersonKind`` here, once.
    """
    frame = _ensure_columns(raw, PEOPLE_COLUMNS)
    people: list[PersonAssociation] = []
    for row in frame.itertuples(index=False):
        name = _clean_text(row.name)
        item_id = _parse_uuid(row.item_id)
        if name is None or item_id is None:
            continue
        people.append(PersonAssociation(
            name=name,
            item_id=item_id,
            kind=_clean_text(row.type),
            role=_clean_text(row.role),
        ))
    return people


def normalize_users(raw: pd.DataFrame) -> list[User]:
    frame = _ensure_columns(raw, USER_COLUMNS)
    users: list[User] = []
    for row in frame.itertuples(index=False):
        user_id = _parse_uuid(row.id)
        if user_id is None:
            continue
        users.append(User(
            id=user_id,
            name=_clean_text(row.name) or "",
            library_ids=_parse_uuid_list(row.library_ids),
        ))
    return users


def normalize_user_data(raw: pd.DataFrame) -> list[UserItemData]:
    frame = _ensure_columns(raw, USER_DATA_COLUMNS)
    entries: list[UserItemData] = []
    for row in frame.itertuples(index=False):
        user_id = _parse_uuid(row.user_id)
        item_id = _parse_uuid(row.item_id)
        if user_id is None or item_id is None:
            continue
        play_count = _parse_count(row.play_count)
        entries.append(UserItemData(
            user_id=user_id,
            item_id=item_id,
            is_favorite=_parse_flag(row.is_favorite),
            played=_parse_flag(row.played) or play_count > 0,
            play_count=play_count,
        ))
    return entries


def _read_optional_csv(path, columns: List[str]) -> pd.DataFrame:
    if not path.is_file():
        logger.debug("No table at %s, using an empty one", path)
        return pd.DataFrame(columns=columns)
    return pd.read_csv(path, dtype=str)


def load_library(
    config: LibraryConfig = DEFAULT_LIBRARY_CONFIG,
) -> tuple[list[Item], list[PersonAssociation], list[User], list[UserItemData]]:
    """
    Read and normalise the library tables under ``config.data_dir``.

    ``items.csv`` is required; the people, user and user-data tables are
    optional and default to empty.
    """
    items = normalize_items(pd.read_csv(config.items_path, dtype=str))
    people = normalize_people(_read_optional_csv(config.people_path, PEOPLE_COLUMNS))
    users = normalize_users(_read_optional_csv(config.users_path, USER_COLUMNS))
    user_data = normalize_user_data(
        _read_optional_csv(config.user_data_path, USER_DATA_COLUMNS)
    )
    logger.debug(
        "Loaded %d items, %d credits, %d users from %s",
        len(items), len(people), len(users), config.data_dir,
    )
    return items, people, users, user_data
