# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Hybrid product search: ingredient matching, sorting, re-pagination and
relaxed-match suggestions.
"""

from .matching import (
    FilterTerm,
    IngredientMatcher,
    SearchableCandidate,
    compile_exact_pattern,
    is_safe_literal,
    parse_terms,
)
from .pipeline import (
    CAPABILITY_MISMATCH_MESSAGE,
    DEFAULT_BATCH_SIZE,
    FILTER_NOTE,
    MAX_BATCH_SIZE,
    FetchBatch,
    SearchPipeline,
)
from .sorting import MISSING_CARBS, sort_candidates
from .suggestions import NO_EXACT_MATCHES, SuggestionEngine

__all__ = [
    "CAPABILITY_MISMATCH_MESSAGE",
    "DEFAULT_BATCH_SIZE",
    "FILTER_NOTE",
    "MAX_BATCH_SIZE",
    "MISSING_CARBS",
    "NO_EXACT_MATCHES",
    "FetchBatch",
    "FilterTerm",
    "IngredientMatcher",
    "SearchPipeline",
    "SearchableCandidate",
    "SuggestionEngine",
    "compile_exact_pattern",
    "is_safe_literal",
    "parse_terms",
    "sort_candidates",
]
