# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Client-side nutrition sorting.

Sorting is stable, so candidates with equal keys keep the upstream order.
Missing values sort as 0 for the descending keys and as 999 for
``carbs_asc``, which places unknown-carb candidates last.
"""

from collections.abc import Callable, Sequence
from typing import TypeVar

from ..types.catalog import Candidate
from ..types.search import SortKey

T = TypeVar("T")

MISSING_CARBS = 999.0


def _protein(candidate: Candidate) -> float:
    nutrition = candidate.nutrition
    return nutrition.protein if nutrition and nutrition.protein is not None else 0.0


def _fat(candidate: Candidate) -> float:
    nutrition = candidate.nutrition
    return nutrition.fat if nutrition and nutrition.fat is not None else 0.0


def _moisture(candidate: Candidate) -> float:
    nutrition = candidate.nutrition
    return nutrition.moisture if nutrition and nutrition.moisture is not None else 0.0


def _carbs(candidate: Candidate) -> float:
    metrics = candidate.derived_metrics
    if metrics is None or metrics.carb_estimated is None:
        return MISSING_CARBS
    return metrics.carb_estimated


# (value extractor, descending)
_SORT_KEYS: dict[SortKey, tuple[Callable[[Candidate], float], bool]] = {
    SortKey.PROTEIN_DESC: (_protein, True),
    SortKey.CARBS_ASC: (_carbs, False),
    SortKey.FAT_DESC: (_fat, True),
    SortKey.MOISTURE_DESC: (_moisture, True),
}


def sort_candidates(
    items: Sequence[T],
    sort_by: str | SortKey | None,
    get_candidate: Callable[[T], Candidate] | None = None,
) -> list[T]:
    """
    Return a stably sorted copy of ``items``.

    Args:
        items: Candidates, or wrappers around candidates
        sort_by: A SortKey value; None or an unknown key keeps the input order
        get_candidate: Extracts the Candidate from a wrapper item

    Returns:
        New list; the input is not modified.
    """
    try:
        key = SortKey(sort_by) if sort_by is not None else None
    except ValueError:
        key = None
    if key is None:
        return list(items)

    extract, descending = _SORT_KEYS[key]
    unwrap = get_candidate or (lambda item: item)  # type: ignore[assignment,return-value]
    # sorted(reverse=True) keeps ties in their original order
    return sorted(items, key=lambda item: extract(unwrap(item)), reverse=descending)


__all__ = [
    "MISSING_CARBS",
    "sort_candidates",
]
