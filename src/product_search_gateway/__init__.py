# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Product Search Gateway - rate-limited hybrid search over a product catalog.

This library sits in front of a remote product catalog and adds what the
catalog cannot do natively.

Key Features:
    - Per-identity token bucket admission with continuous refill
    - Ingredient include/exclude filtering (quoted terms match exactly)
    - Client-side nutrition sorting and cursor re-pagination
    - Relaxed-match suggestions for empty ingredient searches
    - Product detail caching and nutrition analysis
    - Side-by-side comparison and curated best-of lists
    - Prometheus metrics through a unified collector

Quick Start:
    >>> from product_search_gateway import GatewayConfig, create_service
    >>>
    >>> class MyCatalog:
    ...     async def fetch_batch(self, query):
    ...         ...
    ...     async def get_product(self, product_id):
    ...         ...
    ...     async def compare_products(self, product_ids):
    ...         ...
    ...     async def get_curation(self, slug):
    ...         ...
    >>>
    >>> service = create_service(MyCatalog(), GatewayConfig(rate_limit_per_min=60))
    >>> response = await service.search_products(
    ...     {"includeIngredients": '"chicken meal"', "sortBy": "protein_desc"}
    ... )
    >>> response.text

Version: 1.0.0
"""

__version__ = "1.0.0"

from .cache import ProductCache
from .config import GatewayConfig
from .exceptions import (
    CapabilityMismatchError,
    CatalogError,
    CatalogNotFoundError,
    CatalogTimeoutError,
    CatalogUnavailableError,
    GatewayError,
    RateLimitedError,
    ValidationError,
)
from .nutrition import NutritionAnalysis, analyze_product, estimate_carbs
from .observability import (
    MetricsCollectorProtocol,
    UnifiedMetricsCollector,
    get_metrics_collector,
)
from .protocols import CatalogProtocol
from .ratelimit import BucketRegistry, RateBucket
from .responses import ErrorType, ResponseBuilder, ToolResponse
from .search import (
    FilterTerm,
    IngredientMatcher,
    SearchPipeline,
    SuggestionEngine,
    sort_candidates,
)
from .service import ProductSearchService, create_service
from .types import (
    Candidate,
    CatalogPage,
    CatalogQuery,
    RateLimitCheck,
    RateLimitInfo,
    SearchRequest,
    SearchResult,
    SortKey,
)

__all__ = [
    "__version__",
    # Service
    "ProductSearchService",
    "create_service",
    "GatewayConfig",
    # Rate limiting
    "BucketRegistry",
    "RateBucket",
    "RateLimitCheck",
    "RateLimitInfo",
    # Search
    "FilterTerm",
    "IngredientMatcher",
    "SearchPipeline",
    "SearchRequest",
    "SearchResult",
    "SortKey",
    "SuggestionEngine",
    "sort_candidates",
    # Catalog
    "Candidate",
    "CatalogPage",
    "CatalogProtocol",
    "CatalogQuery",
    "ProductCache",
    # Nutrition
    "NutritionAnalysis",
    "analyze_product",
    "estimate_carbs",
    # Responses
    "ErrorType",
    "ResponseBuilder",
    "ToolResponse",
    # Observability
    "MetricsCollectorProtocol",
    "UnifiedMetricsCollector",
    "get_metrics_collector",
    # Exceptions
    "CapabilityMismatchError",
    "CatalogError",
    "CatalogNotFoundError",
    "CatalogTimeoutError",
    "CatalogUnavailableError",
    "GatewayError",
    "RateLimitedError",
    "ValidationError",
]
