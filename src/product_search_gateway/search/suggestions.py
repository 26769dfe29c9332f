# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Advisory hints for zero-result ingredient searches.

When strict filtering leaves nothing, the engine re-runs a relaxed pass
over the unfiltered batch: every term becomes a quote-stripped substring
test against the candidate's joined search text. Include is satisfied by
any relaxed term; a candidate matching any relaxed exclude term is dropped.
The pass only counts matches. It never changes the result set.
"""

import logging
from collections.abc import Sequence

from .matching import FilterTerm, SearchableCandidate

logger = logging.getLogger(__name__)

NO_EXACT_MATCHES = (
    "No exact matches found. Try broadening your search or check ingredient spelling."
)


class SuggestionEngine:
    """Produces relaxed-matching hints for empty strict results."""

    def count_relaxed_matches(
        self,
        candidates: Sequence[SearchableCandidate],
        include_terms: Sequence[FilterTerm],
        exclude_terms: Sequence[FilterTerm],
    ) -> int:
        include = [term.relaxed().normalized_value for term in include_terms]
        exclude = [term.relaxed().normalized_value for term in exclude_terms]

        count = 0
        for candidate in candidates:
            text = candidate.search_text
            if include and not any(value in text for value in include):
                continue
            if any(value in text for value in exclude):
                continue
            count += 1
        return count

    def suggest(
        self,
        candidates: Sequence[SearchableCandidate],
        include_terms: Sequence[FilterTerm],
        exclude_terms: Sequence[FilterTerm],
    ) -> list[str] | None:
        """
        Build hint strings, or None when even relaxed matching finds nothing.

        Args:
            candidates: The unfiltered batch
            include_terms: Parsed include terms from the request
            exclude_terms: Parsed exclude terms from the request
        """
        count = self.count_relaxed_matches(candidates, include_terms, exclude_terms)
        if count == 0:
            return None
        logger.debug(f"Relaxed matching found {count} candidate(s)")
        return [
            NO_EXACT_MATCHES,
            f"Found {count} products with relaxed matching.",
        ]


__all__ = [
    "NO_EXACT_MATCHES",
    "SuggestionEngine",
]
