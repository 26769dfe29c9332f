# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Tool surface of the product search gateway.

Every tool follows the same order: admit the caller through its token
bucket, validate input, do the work, wrap the outcome in an envelope.
A denied caller never costs a catalog round trip. Every response carries
rate-limit metadata, and errors never leak upstream detail.
"""

import asyncio
import logging
import re
import uuid
from collections.abc import Callable, Mapping, Sequence
from typing import Any

from .cache import ProductCache
from .config import GatewayConfig
from .exceptions import (
    CatalogError,
    CatalogNotFoundError,
    CatalogUnavailableError,
    RateLimitedError,
    ValidationError,
)
from .nutrition.analysis import analyze_product
from .observability.collector import get_metrics_collector
from .observability.constants import TOOL_ERRORS_TOTAL
from .observability.protocols import MetricsCollectorProtocol
from .protocols.catalog import CatalogProtocol
from .ratelimit.registry import BucketRegistry
from .responses import ResponseBuilder, ToolResponse
from .search.pipeline import SearchPipeline
from .types.catalog import Candidate, CurationPage
from .types.rate_limit import RateLimitInfo
from .types.search import SearchRequest

logger = logging.getLogger(__name__)

# ULID: 26 alphanumerics
PRODUCT_ID_PATTERN = re.compile(r"^[A-Z0-9]{26}$", re.IGNORECASE)
ANALYSIS_ID_PATTERN = re.compile(r"^[a-zA-Z0-9_-]+$")
MAX_PRODUCT_ID_LENGTH = 128
MAX_SLUG_LENGTH = 128
MIN_COMPARE_PRODUCTS = 2
MAX_COMPARE_PRODUCTS = 3
CURATION_ENRICH_COUNT = 3

CatalogFactory = Callable[[GatewayConfig], CatalogProtocol]


class ProductSearchService:
    """
    Rate-limited product search, detail, nutrition, comparison and curation
    tools.

    Args:
        catalog: Catalog collaborator
        registry: Per-identity token buckets
        pipeline: Search pipeline (a default one is built if omitted)
        cache: Product detail cache (a default one is built if omitted)
        identity: Default caller identity; random per instance if omitted
        metrics_collector: Optional metrics sink

    Example:
        >>> service = ProductSearchService(catalog, BucketRegistry(capacity=100))
        >>> response = await service.search_products({"includeIngredients": "tuna"})
        >>> response.payload["data"]["items"]
    """

    def __init__(
        self,
        catalog: CatalogProtocol,
        registry: BucketRegistry,
        pipeline: SearchPipeline | None = None,
        cache: ProductCache[Candidate] | None = None,
        identity: str | None = None,
        metrics_collector: MetricsCollectorProtocol | None = None,
    ) -> None:
        self.catalog = catalog
        self.registry = registry
        self.pipeline = (
            pipeline
            if pipeline is not None
            else SearchPipeline(metrics_collector=metrics_collector)
        )
        # An empty cache is falsy, so test for None explicitly
        self.cache: ProductCache[Candidate] = (
            cache if cache is not None else ProductCache(metrics_collector=metrics_collector)
        )
        self.identity = identity or str(uuid.uuid4())
        self._metrics_collector = metrics_collector

    # === Tools ===

    async def search_products(
        self,
        params: Mapping[str, Any] | SearchRequest,
        identity: str | None = None,
    ) -> ToolResponse:
        """Search the catalog with optional ingredient filters and sorting."""
        try:
            check = self.registry.admit(identity or self.identity)
        except RateLimitedError as e:
            return ResponseBuilder.rate_limited(e.check, e.retry_after_seconds)
        rate_limit = check.to_info()

        try:
            request = (
                params
                if isinstance(params, SearchRequest)
                else SearchRequest.from_params(params)
            )
            result = await self.pipeline.execute(request, self.catalog.fetch_batch)
        except Exception as e:
            return self._error_response("search_products", e, rate_limit, "search query")

        return ResponseBuilder.success(result.to_dict(), rate_limit)

    async def get_product_detail(
        self, product_id: str, identity: str | None = None
    ) -> ToolResponse:
        """Full product record, including the complete ingredient list."""
        try:
            check = self.registry.admit(identity or self.identity)
        except RateLimitedError as e:
            return ResponseBuilder.rate_limited(e.check, e.retry_after_seconds)
        rate_limit = check.to_info()

        if not isinstance(product_id, str) or not PRODUCT_ID_PATTERN.match(product_id):
            return self._error_response(
                "get_product_detail",
                ValidationError(
                    "Invalid product ID format. Product ID must be a valid ULID "
                    "(26 alphanumeric characters)",
                    field="productId",
                    details={"productId": product_id},
                ),
                rate_limit,
            )

        try:
            product = await self._load_product(product_id)
        except Exception as e:
            return self._error_response("get_product_detail", e, rate_limit, product_id)

        return ResponseBuilder.success(product.to_dict(), rate_limit)

    async def analyze_nutrition(
        self, product_id: str, identity: str | None = None
    ) -> ToolResponse:
        """Carb estimate, dry matter basis and ingredient breakdown."""
        try:
            check = self.registry.admit(identity or self.identity)
        except RateLimitedError as e:
            return ResponseBuilder.rate_limited(e.check, e.retry_after_seconds)
        rate_limit = check.to_info()

        if (
            not isinstance(product_id, str)
            or len(product_id) > MAX_PRODUCT_ID_LENGTH
            or not ANALYSIS_ID_PATTERN.match(product_id)
        ):
            return self._error_response(
                "analyze_nutrition",
                ValidationError(
                    "Invalid product ID format",
                    field="productId",
                    details={"productId": product_id},
                ),
                rate_limit,
            )

        try:
            product = await self._load_product(product_id)
            analysis = analyze_product(product)
        except Exception as e:
            return self._error_response("analyze_nutrition", e, rate_limit, product_id)

        return ResponseBuilder.success(analysis.to_dict(), rate_limit)

    async def compare_products(
        self, product_ids: Sequence[str], identity: str | None = None
    ) -> ToolResponse:
        """Side-by-side nutrition and tags for 2-3 products."""
        try:
            check = self.registry.admit(identity or self.identity)
        except RateLimitedError as e:
            return ResponseBuilder.rate_limited(e.check, e.retry_after_seconds)
        rate_limit = check.to_info()

        try:
            ids = self._validate_compare_ids(product_ids)
            page = await self.catalog.compare_products(ids)
        except Exception as e:
            return self._error_response(
                "compare_products", e, rate_limit, "requested product"
            )

        products = [product.to_comparison_dict() for product in page.products]
        return ResponseBuilder.success(
            {
                "products": products,
                "requested": page.requested or len(ids),
                "compared": page.compared or len(products),
            },
            rate_limit,
        )

    async def get_curation_list(
        self,
        slug: str,
        include_sections: bool = False,
        include_faq: bool = False,
        identity: str | None = None,
    ) -> ToolResponse:
        """
        Curated best-of page with its top products summarized.

        The first three recommended products are loaded through the product
        cache shared with ``get_product_detail``. A product that cannot be
        loaded is reported inline instead of failing the whole page.
        """
        try:
            check = self.registry.admit(identity or self.identity)
        except RateLimitedError as e:
            return ResponseBuilder.rate_limited(e.check, e.retry_after_seconds)
        rate_limit = check.to_info()

        if not isinstance(slug, str) or not 0 < len(slug) <= MAX_SLUG_LENGTH:
            return self._error_response(
                "get_curation_list",
                ValidationError(
                    f"Invalid curation slug. Slug must be 1-{MAX_SLUG_LENGTH} characters",
                    field="slug",
                    details={"slug": slug},
                ),
                rate_limit,
            )

        try:
            page = await self.catalog.get_curation(slug)
            summaries = await self._summarize_recommended(page)
        except Exception as e:
            return self._error_response(
                "get_curation_list", e, rate_limit, slug, resource="Curation page"
            )

        data = page.to_dict(include_sections=include_sections, include_faq=include_faq)
        data["recommendedProducts"] = summaries
        return ResponseBuilder.success(data, rate_limit)

    # === Internals ===

    async def _load_product(self, product_id: str) -> Candidate:
        cached = self.cache.get(product_id)
        if cached is not None:
            return cached
        product = await self.catalog.get_product(product_id)
        self.cache.set(product_id, product)
        return product

    @staticmethod
    def _validate_compare_ids(product_ids: Sequence[str]) -> list[str]:
        if isinstance(product_ids, str) or not isinstance(product_ids, Sequence):
            raise ValidationError(
                "productIds must be a list of product IDs", field="productIds"
            )
        ids = list(product_ids)
        if len(ids) < MIN_COMPARE_PRODUCTS:
            raise ValidationError(
                "Need at least 2 product IDs to compare", field="productIds"
            )
        if len(ids) > MAX_COMPARE_PRODUCTS:
            raise ValidationError(
                "Maximum 3 products can be compared", field="productIds"
            )
        invalid = [
            pid
            for pid in ids
            if not isinstance(pid, str) or not PRODUCT_ID_PATTERN.match(pid)
        ]
        if invalid:
            raise ValidationError(
                "Invalid product ID format. All product IDs must be valid ULIDs "
                "(26 alphanumeric characters)",
                field="productIds",
                details={"invalidIds": invalid},
            )
        return ids

    async def _summarize_recommended(
        self, page: CurationPage
    ) -> list[dict[str, Any]]:
        top = page.recommended_product_ids[:CURATION_ENRICH_COUNT]
        return list(await asyncio.gather(*(self._summarize_product(pid) for pid in top)))

    async def _summarize_product(self, product_id: str) -> dict[str, Any]:
        try:
            product = await self._load_product(product_id)
        except CatalogError as e:
            logger.warning(f"Could not load recommended product {product_id}: {e}")
            return {"id": product_id, "error": "Product not found"}

        key_nutrition: dict[str, Any] = {}
        if product.nutrition is not None and product.nutrition.protein is not None:
            key_nutrition["protein"] = product.nutrition.protein
        if (
            product.derived_metrics is not None
            and product.derived_metrics.carb_estimated is not None
        ):
            key_nutrition["carbEstimated"] = product.derived_metrics.carb_estimated

        summary: dict[str, Any] = {
            "id": product_id,
            "name": product.name or "Unknown",
            "brand": product.brand or "Unknown",
            "keyNutrition": key_nutrition,
            "detailToolLink": f"Use get_product_detail with productId '{product_id}'",
        }
        if product.form is not None:
            summary["form"] = product.form.value
        return summary

    def _error_response(
        self,
        tool: str,
        error: Exception,
        rate_limit: RateLimitInfo,
        resource_id: str = "",
        resource: str = "Product",
    ) -> ToolResponse:
        """Map an exception onto an error envelope."""
        if self._metrics_collector is not None:
            self._metrics_collector.inc_counter(
                TOOL_ERRORS_TOTAL,
                labels={"tool": tool, "error_type": type(error).__name__},
            )

        if isinstance(error, ValidationError):
            details = error.details
            if details is None and error.field:
                details = {"field": error.field}
            return ResponseBuilder.validation(str(error), rate_limit, details)

        if isinstance(error, CatalogNotFoundError):
            logger.debug(f"{tool}: {error}")
            return ResponseBuilder.not_found(
                resource, resource_id or error.resource_id or "", rate_limit
            )

        if isinstance(error, CatalogUnavailableError) or (
            isinstance(error, CatalogError) and error.retryable
        ):
            logger.warning(f"{tool}: catalog unavailable: {error}")
            return ResponseBuilder.upstream_unavailable(rate_limit)

        logger.exception(f"{tool} failed")
        return ResponseBuilder.internal(
            f"{tool} failed: {type(error).__name__}",
            rate_limit,
            {"tool": tool, "resource_id": resource_id},
        )


def create_service(
    catalog: CatalogProtocol | CatalogFactory,
    config: GatewayConfig | None = None,
    metrics_collector: MetricsCollectorProtocol | None = None,
) -> ProductSearchService:
    """
    Build a ProductSearchService and its collaborators from configuration.

    Args:
        catalog: Catalog collaborator, or a factory called with the config
            to build one. A factory receives the transport settings
            (base URL, key, agent name, timeout, response size bound).
        config: Configuration; read from the environment when omitted
        metrics_collector: Metrics sink; the process-wide collector is used
            when omitted and metrics are enabled
    """
    config = config or GatewayConfig.from_env()
    if metrics_collector is None and config.metrics_enabled:
        metrics_collector = get_metrics_collector()
    if not isinstance(catalog, CatalogProtocol):
        catalog = catalog(config)

    registry = BucketRegistry(
        capacity=config.rate_limit_per_min,
        window_ms=config.rate_limit_window_ms,
        max_buckets=config.max_tracked_identities,
        cleanup_every=config.rate_limit_cleanup_every,
        metrics_collector=metrics_collector,
    )
    cache: ProductCache[Candidate] = ProductCache(
        ttl_seconds=config.product_cache_ttl,
        max_entries=config.product_cache_max_entries,
        metrics_collector=metrics_collector,
    )
    logger.debug(
        f"Creating product search service (rate_limit={config.rate_limit_per_min}/"
        f"{config.rate_limit_window_ms}ms, cache_ttl={config.product_cache_ttl}s)"
    )
    return ProductSearchService(
        catalog,
        registry,
        pipeline=SearchPipeline(metrics_collector=metrics_collector),
        cache=cache,
        identity=config.session_id,
        metrics_collector=metrics_collector,
    )


__all__ = [
    "ANALYSIS_ID_PATTERN",
    "CatalogFactory",
    "PRODUCT_ID_PATTERN",
    "ProductSearchService",
    "create_service",
]
