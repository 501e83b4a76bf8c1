from __future__ import annotations

import time
from uuid import UUID

from fastapi import Depends, FastAPI, HTTPException, Query
from pydantic import ValidationError

from .analytics.aggregator import compute_analytics
from .analytics.events import get_events, record_event
from .library.data_store import LibraryStore, get_store
from .library.models import ItemKind
from .similar.contracts import NotFoundError
from .similar.models import SimilarItemsRequest, SimilarItemsResponse
from .similar.projection import DtoProjector
from .similar.ranking import get_similar_items
from .similar.selector import parse_guids

app = FastAPI(title="Media Similarity API", version="1.0.0")


def _build_request(
    item_id: UUID | None,
    include_item_types: str | list[ItemKind],
    parent_id: UUID | None,
    user_id: UUID | None,
    exclude_artist_ids: str | None,
    limit: int | None,
) -> SimilarItemsRequest:
    try:
        return SimilarItemsRequest(
            item_id=item_id,
            include_item_types=include_item_types,
            parent_id=parent_id,
            user_id=user_id,
            exclude_artist_ids=parse_guids(exclude_artist_ids),
            limit=limit,
        )
    except ValidationError as exc:
        raise HTTPException(
            status_code=422,
            detail=exc.errors(include_url=False, include_context=False, include_input=False),
        ) from exc


def _similar(request: SimilarItemsRequest, store: LibraryStore) -> SimilarItemsResponse:
    start_time = time.time()
    try:
        records, total_matches = get_similar_items(
            store,
            store,
            DtoProjector(store),
            request.item_id,
            request.include_item_types,
            parent_id=request.parent_id,
            user_id=request.user_id,
            exclude_artist_ids=request.exclude_artist_ids,
            limit=request.limit,
        )
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc

    elapsed_ms = round((time.time() - start_time) * 1000, 1)
    record_event("similar_items", {
        "item_id": str(request.item_id) if request.item_id else None,
        "include_item_types": [kind.value for kind in request.include_item_types],
        "limit": request.limit,
        "total_matches": total_matches,
        "results_returned": len(records),
        "response_time_ms": elapsed_ms,
    })
    return SimilarItemsResponse(items=records, total_record_count=total_matches)


# ── Public endpoints ─────────────────────────────────────────────────────


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/metadata")
def metadata(store: LibraryStore = Depends(get_store)) -> dict:
    return {
        "item_types": store.kinds(),
        "genres": store.genres(),
        "studios": store.studios(),
    }


# ── Similar items ────────────────────────────────────────────────────────


@app.get("/items/similar", response_model=SimilarItemsResponse)
def root_similar_items(
    include_item_types: str = Query(..., alias="includeItemTypes"),
    parent_id: UUID | None = Query(default=None, alias="parentId"),
    user_id: UUID | None = Query(default=None, alias="userId"),
    exclude_artist_ids: str | None = Query(default=None, alias="excludeArtistIds"),
    limit: int | None = Query(default=None),
    store: LibraryStore = Depends(get_store),
) -> SimilarItemsResponse:
    request = _build_request(
        None, include_item_types, parent_id, user_id, exclude_artist_ids, limit,
    )
    return _similar(request, store)


@app.get("/items/{item_id}/similar", response_model=SimilarItemsResponse)
def similar_items(
    item_id: UUID,
    include_item_types: str = Query(..., alias="includeItemTypes"),
    parent_id: UUID | None = Query(default=None, alias="parentId"),
    user_id: UUID | None = Query(default=None, alias="userId"),
    exclude_artist_ids: str | None = Query(default=None, alias="excludeArtistIds"),
    limit: int | None = Query(default=None),
    store: LibraryStore = Depends(get_store),
) -> SimilarItemsResponse:
    request = _build_request(
        item_id, include_item_types, parent_id, user_id, exclude_artist_ids, limit,
    )
    return _similar(request, store)


def _register_typed_route(path: str, kinds: list[ItemKind]) -> None:
    def endpoint(
        item_id: UUID,
        parent_id: UUID | None = Query(default=None, alias="parentId"),
        user_id: UUID | None = Query(default=None, alias="userId"),
        exclude_artist_ids: str | None = Query(default=None, alias="excludeArtistIds"),
        limit: int | None = Query(default=None),
        store: LibraryStore = Depends(get_store),
    ) -> SimilarItemsResponse:
        request = _build_request(
            item_id, kinds, parent_id, user_id, exclude_artist_ids, limit,
        )
        return _similar(request, store)

    app.add_api_route(
        path,
        endpoint,
        methods=["GET"],
        response_model=SimilarItemsResponse,
        name=f"similar_{path.split('/')[1]}",
    )


_register_typed_route("/movies/{item_id}/similar", [ItemKind.movie, ItemKind.trailer])
_register_typed_route("/trailers/{item_id}/similar", [ItemKind.movie, ItemKind.trailer])
_register_typed_route("/shows/{item_id}/similar", [ItemKind.series])
_register_typed_route("/albums/{item_id}/similar", [ItemKind.music_album])
_register_typed_route("/artists/{item_id}/similar", [ItemKind.music_artist])


# ── Analytics ────────────────────────────────────────────────────────────


@app.get("/analytics")
def analytics() -> dict:
    return compute_analytics(get_events())
