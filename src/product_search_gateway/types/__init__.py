# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Type definitions and constants."""

from .catalog import (
    Candidate,
    CatalogPage,
    CatalogQuery,
    ComparisonPage,
    CurationPage,
    DerivedMetrics,
    NutritionInfo,
    ProductForm,
)
from .rate_limit import Clock, RateLimitCheck, RateLimitInfo
from .search import (
    DEFAULT_LIMIT,
    MAX_LIMIT,
    MAX_QUERY_LENGTH,
    MatchType,
    SearchRequest,
    SearchResult,
    SearchResultItem,
    SortKey,
)

__all__ = [
    "DEFAULT_LIMIT",
    "MAX_LIMIT",
    "MAX_QUERY_LENGTH",
    # Catalog types
    "Candidate",
    "CatalogPage",
    "CatalogQuery",
    "ComparisonPage",
    "CurationPage",
    # Rate limit types
    "Clock",
    "DerivedMetrics",
    # Search types
    "MatchType",
    "NutritionInfo",
    "ProductForm",
    "RateLimitCheck",
    "RateLimitInfo",
    "SearchRequest",
    "SearchResult",
    "SearchResultItem",
    "SortKey",
]
