from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Iterable, Sequence
from uuid import UUID

import numpy as np

from ..library.models import Item, ItemKind, PersonAssociation
from .config import DEFAULT_RANKING_CONFIG, RankingConfig
from .contracts import ItemStore, PeopleIndex, ResultProjector
from .scoring import SimilarityScorer, similarity_score
from .selector import resolve_reference, select_candidates

logger = logging.getLogger(__name__)

# A single shared tag or studio is noise, not similarity.
SCORE_THRESHOLD = 2

_NIL_UUID = UUID(int=0)


@dataclass(frozen=True)
class ScoredCandidate:
    item: Item
    score: int


@dataclass(frozen=True)
class RankedResult:
    candidates: tuple[ScoredCandidate, ...]
    total_matches: int

    @property
    def items(self) -> list[Item]:
        return [c.item for c in self.candidates]


def build_name_lookup(associations: Iterable[PersonAssociation]) -> dict[UUID, set[str]]:
    """Map item id -> distinct lower-cased names of the people credited on it."""
    lookup: dict[UUID, set[str]] = {}
    for person in associations:
        name = person.name.strip()
        if not name:
            continue
        lookup.setdefault(person.item_id, set()).add(name.lower())
    return lookup


def _score_all(
    reference: Item,
    reference_people: Sequence[PersonAssociation],
    lookup: dict[UUID, set[str]],
    pool: Sequence[Item],
    scorer: SimilarityScorer,
    config: RankingConfig,
) -> list[int]:
    empty: frozenset[str] = frozenset()

    def _score(candidate: Item) -> int:
        return scorer(reference, reference_people, lookup.get(candidate.id, empty), candidate)

    if config.scoring_workers > 1 and len(pool) >= config.parallel_min_candidates:
        with ThreadPoolExecutor(max_workers=config.scoring_workers) as executor:
            return list(executor.map(_score, pool))
    return [_score(candidate) for candidate in pool]


def rank_candidates(
    reference: Item,
    reference_people: Sequence[PersonAssociation],
    related_people: Iterable[PersonAssociation],
    candidates: Sequence[Item],
    limit: int | None = None,
    scorer: SimilarityScorer = similarity_score,
    config: RankingConfig = DEFAULT_RANKING_CONFIG,
) -> RankedResult:
    """Score, threshold, order and cap ``candidates`` against ``reference``.

    Equal scores keep their order in ``candidates``. ``total_matches`` counts
    every candidate above the threshold, before ``limit`` is applied.
    """
    pool = [c for c in candidates if c.id != reference.id]
    lookup = build_name_lookup(related_people)

    scores = np.asarray(
        _score_all(reference, reference_people, lookup, pool, scorer, config),
        dtype=np.int64,
    )
    kept = np.flatnonzero(scores > SCORE_THRESHOLD)
    order = kept[np.argsort(-scores[kept], kind="stable")]

    total_matches = len(order)
    if limit is not None and limit < total_matches:
        order = order[:limit]

    ranked = tuple(ScoredCandidate(pool[i], int(scores[i])) for i in order)
    return RankedResult(candidates=ranked, total_matches=total_matches)


def get_similar_items(
    store: ItemStore,
    people: PeopleIndex,
    projector: ResultProjector,
    item_id: UUID | None,
    include_kinds: Sequence[ItemKind],
    parent_id: UUID | None = None,
    user_id: UUID | None = None,
    exclude_artist_ids: Iterable[UUID] = (),
    limit: int | None = None,
    scorer: SimilarityScorer = similarity_score,
    config: RankingConfig = DEFAULT_RANKING_CONFIG,
) -> tuple[list[Any], int]:
    """Run the whole similar-items pipeline for one request.

    Returns the projected records (at most ``limit``) and the uncapped match
    count. Raises ``NotFoundError`` when the item, scope or user id does not
    resolve; store failures propagate unchanged.
    """
    start_time = time.time()

    user = store.get_user(user_id) if user_id and user_id != _NIL_UUID else None
    reference = resolve_reference(store, item_id)
    candidates = select_candidates(
        store,
        reference,
        include_kinds,
        parent_id=parent_id,
        user=user,
        exclude_artist_ids=exclude_artist_ids,
    )

    reference_people = people.people_of(reference.id)
    related_people = people.people_appearing_in(reference.id)

    ranked = rank_candidates(
        reference,
        reference_people,
        related_people,
        candidates,
        limit=limit,
        scorer=scorer,
        config=config,
    )
    records = projector.project(ranked.items, user)

    logger.info(
        "Similar items for %s: %d candidates, %d matches, %d returned in %.1f ms",
        reference.id,
        len(candidates),
        ranked.total_matches,
        len(records),
        (time.time() - start_time) * 1000,
    )
    return records, ranked.total_matches
