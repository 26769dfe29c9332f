# SPDX-License-Identifier: Apache-2.0
"""Unit tests for client-side nutrition sorting."""

from __future__ import annotations

import pytest

from product_search_gateway.search.matching import SearchableCandidate
from product_search_gateway.search.sorting import sort_candidates
from product_search_gateway.types.catalog import DerivedMetrics, NutritionInfo
from product_search_gateway.types.search import SortKey


def ids(items):
    return [item.id for item in items]


class TestSortCandidates:
    """Tests for sort_candidates."""

    def test_protein_desc_missing_sorts_as_zero(self, candidate):
        """Missing protein sorts as 0, below any real value."""
        items = [
            candidate(id="a", protein=30),
            candidate(id="b", protein=40),
            candidate(id="c"),
        ]
        assert ids(sort_candidates(items, "protein_desc")) == ["b", "a", "c"]

    def test_protein_desc_stable_ties(self, candidate):
        """Missing and explicit zero tie; ties keep input order."""
        items = [
            candidate(id="a", protein=30),
            candidate(id="b", protein=40),
            candidate(id="c"),
            candidate(id="d", protein=0),
        ]
        assert ids(sort_candidates(items, SortKey.PROTEIN_DESC)) == ["b", "a", "c", "d"]

    def test_carbs_asc_missing_sorts_last(self, candidate):
        """Missing carb estimates sort as 999, after every real value."""
        items = [
            candidate(id="none"),
            candidate(id="high", derived_metrics=DerivedMetrics(carb_estimated=30)),
            candidate(id="low", derived_metrics=DerivedMetrics(carb_estimated=5)),
            candidate(id="metrics-no-carb", derived_metrics=DerivedMetrics(meat_score=3)),
        ]
        assert ids(sort_candidates(items, "carbs_asc")) == [
            "low",
            "high",
            "none",
            "metrics-no-carb",
        ]

    def test_fat_desc(self, candidate):
        """Fat sorts highest first."""
        items = [candidate(id="a", fat=10), candidate(id="b", fat=20), candidate(id="c")]
        assert ids(sort_candidates(items, "fat_desc")) == ["b", "a", "c"]

    def test_moisture_desc(self, candidate):
        """Moisture sorts highest first."""
        items = [
            candidate(id="dry", moisture=10),
            candidate(id="wet", moisture=78),
            candidate(id="unknown", nutrition=None),
        ]
        assert ids(sort_candidates(items, "moisture_desc")) == ["wet", "dry", "unknown"]

    @pytest.mark.parametrize("sort_by", [None, "name_asc", ""])
    def test_unknown_key_keeps_order(self, candidate, sort_by):
        """No key, or an unknown key, preserves the input order."""
        items = [candidate(id="a", protein=1), candidate(id="b", protein=2)]
        assert ids(sort_candidates(items, sort_by)) == ["a", "b"]

    def test_returns_new_list(self, candidate):
        """The input list is not mutated."""
        items = [candidate(id="a", protein=1), candidate(id="b", protein=2)]
        result = sort_candidates(items, "protein_desc")
        assert result is not items
        assert ids(items) == ["a", "b"]

    def test_wrapped_items(self, candidate):
        """get_candidate unwraps SearchableCandidate wrappers."""
        items = [
            SearchableCandidate.from_candidate(candidate(id="a", protein=1)),
            SearchableCandidate.from_candidate(candidate(id="b", protein=2)),
        ]
        result = sort_candidates(items, "protein_desc", get_candidate=lambda s: s.candidate)
        assert [s.candidate.id for s in result] == ["b", "a"]

    def test_nutrition_without_field(self, candidate):
        """A nutrition panel lacking the field sorts as missing."""
        items = [
            candidate(id="a", nutrition=NutritionInfo(fat=5)),
            candidate(id="b", protein=10),
        ]
        assert ids(sort_candidates(items, "protein_desc")) == ["b", "a"]
