from __future__ import annotations

from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from ..library.models import ItemKind


class SimilarItemsRequest(BaseModel):
    item_id: UUID | None = Field(
        default=None, description="Reference item; omit to use the library root"
    )
    include_item_types: list[ItemKind] = Field(..., min_length=1)
    parent_id: UUID | None = Field(
        default=None, description="Container to confine candidates to"
    )
    user_id: UUID | None = None
    exclude_artist_ids: list[UUID] = Field(default_factory=list)
    limit: int | None = Field(default=None, ge=0)

    @field_validator("include_item_types", mode="before")
    @classmethod
    def _split_item_types(cls, value: object) -> object:
        """Accept a comma-delimited string and match names case-insensitively."""
        if isinstance(value, str):
            value = [part for part in value.split(",") if part.strip()]
        if isinstance(value, list):
            return [
                ItemKind.parse(v) if isinstance(v, str) and not isinstance(v, ItemKind) else v
                for v in value
            ]
        return value


class UserItemDataDto(BaseModel):
    is_favorite: bool
    played: bool
    play_count: int


class ItemDto(BaseModel):
    id: UUID
    name: str
    type: ItemKind
    parent_id: UUID | None
    official_rating: str | None
    production_year: int | None
    genres: list[str]
    tags: list[str]
    studios: list[str]
    user_data: UserItemDataDto | None = None


class SimilarItemsResponse(BaseModel):
    items: list[ItemDto]
    total_record_count: int
