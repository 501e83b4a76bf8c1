from __future__ import annotations

from unittest.mock import MagicMock
from uuid import UUID

import pytest

from mediasim.library.models import Item, ItemKind, PersonAssociation
from mediasim.similar.config import RankingConfig
from mediasim.similar.contracts import NotFoundError
from mediasim.similar.ranking import (
    SCORE_THRESHOLD,
    build_name_lookup,
    get_similar_items,
    rank_candidates,
)
from mediasim.similar.scoring import similarity_score

REFERENCE = Item(
    id=UUID(int=1),
    kind=ItemKind.movie,
    genres=["Crime", "Drama"],
    tags=["heist"],
    studios=["Warner Bros."],
    official_rating="R",
    production_year=1995,
)


def _candidate(n: int, **fields) -> Item:
    return Item(id=UUID(int=100 + n), name=f"Candidate {n}", kind=ItemKind.movie, **fields)


def _fixed_scorer(scores: dict[UUID, int]):
    def scorer(reference, reference_people, candidate_names, candidate):
        return scores[candidate.id]
    return scorer


def test_reference_is_never_ranked():
    twin = REFERENCE.model_copy()
    other = _candidate(1, genres=["Crime"])

    result = rank_candidates(REFERENCE, [], [], [twin, other, REFERENCE])

    assert REFERENCE.id not in {item.id for item in result.items}
    assert result.total_matches == 1


def test_candidates_at_or_below_threshold_are_dropped():
    pool = [_candidate(i) for i in range(4)]
    scores = {pool[0].id: 0, pool[1].id: SCORE_THRESHOLD, pool[2].id: 3, pool[3].id: 1}

    result = rank_candidates(REFERENCE, [], [], pool, scorer=_fixed_scorer(scores))

    assert result.items == [pool[2]]
    assert result.total_matches == 1


def test_results_are_sorted_by_descending_score():
    pool = [
        _candidate(1, production_year=1999),
        _candidate(2, genres=["Crime", "Drama"], official_rating="R"),
        _candidate(3, tags=["heist"]),
        _candidate(4, genres=["Crime"], studios=["Warner Bros."]),
    ]

    result = rank_candidates(REFERENCE, [], [], pool)
    scores = [c.score for c in result.candidates]

    assert scores == sorted(scores, reverse=True)
    assert [c.item for c in result.candidates] == [pool[1], pool[3], pool[2], pool[0]]
    assert scores == [30, 13, 10, 4]


def test_equal_scores_keep_candidate_order():
    pool = [_candidate(i) for i in range(6)]
    scores = {c.id: 10 if i % 2 else 20 for i, c in enumerate(pool)}

    result = rank_candidates(REFERENCE, [], [], pool, scorer=_fixed_scorer(scores))

    assert result.items == [pool[0], pool[2], pool[4], pool[1], pool[3], pool[5]]


def test_limit_caps_results_but_not_total_matches():
    pool = [_candidate(i, genres=["Crime"]) for i in range(5)]

    result = rank_candidates(REFERENCE, [], [], pool, limit=2)

    assert len(result.items) == 2
    assert result.total_matches == 5
    assert result.items == pool[:2]


def test_limit_larger_than_matches_returns_everything():
    pool = [_candidate(i, genres=["Crime"]) for i in range(3)]

    result = rank_candidates(REFERENCE, [], [], pool, limit=10)

    assert len(result.items) == result.total_matches == 3


def test_limit_zero_returns_no_items():
    pool = [_candidate(i, genres=["Crime"]) for i in range(3)]

    result = rank_candidates(REFERENCE, [], [], pool, limit=0)

    assert result.items == []
    assert result.total_matches == 3


def test_empty_pool():
    result = rank_candidates(REFERENCE, [], [], [])

    assert result.items == []
    assert result.total_matches == 0


def test_people_lookup_is_built_per_candidate():
    director = PersonAssociation(name="Michael Mann", item_id=REFERENCE.id, kind="Director")
    credited = _candidate(1)
    uncredited = _candidate(2)
    related = [
        director,
        PersonAssociation(name="MICHAEL MANN", item_id=credited.id, kind="Actor"),
    ]

    result = rank_candidates(REFERENCE, [director], related, [uncredited, credited])

    assert result.items == [credited]
    assert result.candidates[0].score == 5


def test_build_name_lookup_dedupes_and_skips_blank_names():
    item_id = UUID(int=7)
    lookup = build_name_lookup([
        PersonAssociation(name="Jane Doe", item_id=item_id),
        PersonAssociation(name="jane doe", item_id=item_id, kind="Writer"),
        PersonAssociation(name="   ", item_id=item_id),
        PersonAssociation(name="John Roe", item_id=UUID(int=8)),
    ])

    assert lookup == {item_id: {"jane doe"}, UUID(int=8): {"john roe"}}


def test_parallel_scoring_matches_sequential():
    pool = [
        _candidate(i, genres=["Crime"] if i % 3 else ["Drama", "Crime"], production_year=1990 + i % 12)
        for i in range(40)
    ]
    parallel = RankingConfig(scoring_workers=4, parallel_min_candidates=1)
    sequential = RankingConfig(scoring_workers=1)

    a = rank_candidates(REFERENCE, [], [], pool, config=parallel)
    b = rank_candidates(REFERENCE, [], [], pool, config=sequential)

    assert a == b


# ── Pipeline orchestration ───────────────────────────────────────────────


def _collaborators(candidates: list[Item]):
    store = MagicMock()
    store.resolve_item.return_value = REFERENCE
    store.list_items.return_value = candidates
    people = MagicMock()
    people.people_of.return_value = []
    people.people_appearing_in.return_value = []
    projector = MagicMock()
    projector.project.side_effect = lambda items, viewer=None: [item.id for item in items]
    return store, people, projector


def test_pipeline_projects_the_capped_sequence_once():
    pool = [_candidate(i, genres=["Crime"]) for i in range(5)]
    store, people, projector = _collaborators(pool)

    records, total = get_similar_items(
        store, people, projector, REFERENCE.id, [ItemKind.movie], limit=2,
    )

    assert records == [pool[0].id, pool[1].id]
    assert total == 5
    projector.project.assert_called_once()
    assert projector.project.call_args.args[0] == pool[:2]
    people.people_of.assert_called_once_with(REFERENCE.id)
    people.people_appearing_in.assert_called_once_with(REFERENCE.id)


def test_pipeline_raises_not_found_for_unknown_reference():
    store, people, projector = _collaborators([])
    store.resolve_item.side_effect = NotFoundError("Item", UUID(int=99))

    with pytest.raises(NotFoundError):
        get_similar_items(store, people, projector, UUID(int=99), [ItemKind.movie])

    store.list_items.assert_not_called()
    projector.project.assert_not_called()


def test_pipeline_propagates_store_failures():
    store, people, projector = _collaborators([])
    store.list_items.side_effect = ConnectionError("library offline")

    with pytest.raises(ConnectionError):
        get_similar_items(store, people, projector, REFERENCE.id, [ItemKind.movie])


def test_pipeline_uses_the_root_when_no_reference_is_given():
    root = Item(id=UUID(int=50), kind=ItemKind.aggregate_folder)
    store, people, projector = _collaborators([_candidate(1, genres=["Crime"])])
    store.root_folder.return_value = root

    records, total = get_similar_items(store, people, projector, None, [ItemKind.movie])

    store.resolve_item.assert_not_called()
    assert store.list_items.call_args.args[0].exclude_item_ids == frozenset({root.id})
    assert (records, total) == ([], 0)


def test_pipeline_accepts_a_custom_scorer():
    pool = [_candidate(1), _candidate(2)]
    store, people, projector = _collaborators(pool)

    def id_scorer(reference, reference_people, names, candidate):
        return candidate.id.int

    records, total = get_similar_items(
        store, people, projector, REFERENCE.id, [ItemKind.movie], scorer=id_scorer,
    )

    assert records == [pool[1].id, pool[0].id]
    assert total == 2


def test_default_scorer_is_the_similarity_score():
    pool = [_candidate(1, genres=["Crime"])]

    result = rank_candidates(REFERENCE, [], [], pool)

    assert result.candidates[0].score == similarity_score(REFERENCE, [], set(), pool[0])
