from __future__ import annotations

from typing import AbstractSet, Callable, Sequence

from ..library.models import Item, PersonAssociation, PersonKind

RATING_POINTS = 10
GENRE_POINTS = 10
TAG_POINTS = 10
STUDIO_POINTS = 3
UNRECOGNISED_ROLE_POINTS = 1

# Checked in this order against both the credit type and the parsed role.
ROLE_WEIGHTS: tuple[tuple[PersonKind, int], ...] = (
    (PersonKind.director, 5),
    (PersonKind.actor, 3),
    (PersonKind.composer, 3),
    (PersonKind.guest_star, 3),
    (PersonKind.writer, 2),
)

SimilarityScorer = Callable[
    [Item, Sequence[PersonAssociation], AbstractSet[str], Item], int
]


def role_weight(person: PersonAssociation) -> int:
    """Points earned by a shared person, by the role they hold on the reference."""
    for kind, points in ROLE_WEIGHTS:
        if person.kind is kind or person.role_kind is kind:
            return points
    return UNRECOGNISED_ROLE_POINTS


def _lowered(values: Sequence[str]) -> set[str]:
    return {v.lower() for v in values}


def _year_points(year1: int | None, year2: int | None) -> int:
    if year1 is None or year2 is None:
        return 0
    diff = abs(year1 - year2)
    points = 0
    # Same decade
    if diff < 10:
        points += 2
    # Within five years
    if diff < 5:
        points += 2
    return points


def similarity_score(
    reference: Item,
    reference_people: Sequence[PersonAssociation],
    candidate_names: AbstractSet[str],
    candidate: Item,
) -> int:
    """Compute how related ``candidate`` is to ``reference``.

    ``candidate_names`` holds the lower-cased, de-duplicated names of the
    people credited on ``candidate``. Never raises; missing attributes simply
    contribute nothing.
    """
    points = 0

    if (
        reference.official_rating
        and candidate.official_rating
        and reference.official_rating.lower() == candidate.official_rating.lower()
    ):
        points += RATING_POINTS

    points += GENRE_POINTS * len(_lowered(reference.genres) & _lowered(candidate.genres))
    points += TAG_POINTS * len(_lowered(reference.tags) & _lowered(candidate.tags))
    points += STUDIO_POINTS * len(_lowered(reference.studios) & _lowered(candidate.studios))

    if candidate_names:
        points += sum(
            role_weight(person)
            for person in reference_people
            if person.name.lower() in candidate_names
        )

    points += _year_points(reference.production_year, candidate.production_year)
    return points
