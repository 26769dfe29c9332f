# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Hybrid search pipeline.

The upstream catalog paginates natively but cannot filter by ingredient or
sort by nutrition. The pipeline picks one of two modes per request:

    Pass-through: no sort and no ingredient terms. ``limit`` and ``cursor``
        are forwarded as-is and upstream pagination metadata is trusted.

    Client-side: a larger batch is fetched from offset 0, then filtered,
        sorted and sliced locally at ``[cursor:cursor+limit]``. ``total`` is
        the filtered count of that batch, not the catalog-wide count.

The catalog fetch is the only await. Everything after it is synchronous.
Fetch errors propagate untouched; retries belong to the transport.
"""

import logging
import time
from collections.abc import Awaitable, Callable

from ..exceptions import CapabilityMismatchError
from ..observability.constants import (
    CATALOG_FETCH_LATENCY_SECONDS,
    SEARCH_CAPABILITY_MISMATCHES_TOTAL,
    SEARCH_SUGGESTIONS_TOTAL,
    SEARCHES_TOTAL,
)
from ..observability.protocols import MetricsCollectorProtocol
from ..types.catalog import CatalogPage, CatalogQuery
from ..types.search import SearchRequest, SearchResult, SearchResultItem
from .matching import IngredientMatcher, SearchableCandidate, parse_terms
from .sorting import sort_candidates
from .suggestions import SuggestionEngine

logger = logging.getLogger(__name__)

FetchBatch = Callable[[CatalogQuery], Awaitable[CatalogPage]]

DEFAULT_BATCH_SIZE = 50
MAX_BATCH_SIZE = 200

FILTER_NOTE = (
    "Ingredient filtering uses ingredients preview with partial matching by "
    'default. Use quotes for exact matching (e.g., "chicken meal").'
)

CAPABILITY_MISMATCH_MESSAGE = (
    "Ingredient include/exclude filtering is not available for this "
    "environment (list results do not include ingredient previews). "
    "Use query/conditions filters instead."
)


class SearchPipeline:
    """
    Turns a SearchRequest into one catalog fetch and a shaped SearchResult.

    The pipeline holds no per-request state and may be shared across
    concurrent requests.

    Example:
        >>> pipeline = SearchPipeline()
        >>> result = await pipeline.execute(request, catalog.fetch_batch)
    """

    def __init__(
        self,
        suggestion_engine: SuggestionEngine | None = None,
        default_batch_size: int = DEFAULT_BATCH_SIZE,
        max_batch_size: int = MAX_BATCH_SIZE,
        metrics_collector: MetricsCollectorProtocol | None = None,
    ) -> None:
        if default_batch_size <= 0 or max_batch_size <= 0:
            raise ValueError("batch sizes must be positive")

        self.suggestion_engine = suggestion_engine or SuggestionEngine()
        self.default_batch_size = default_batch_size
        self.max_batch_size = max_batch_size
        self._metrics_collector = metrics_collector

    def batch_size(self, request: SearchRequest) -> int:
        """Items to fetch for client-side processing."""
        wanted = (
            request.limit * 2 if request.limit is not None else self.default_batch_size
        )
        return min(wanted, self.max_batch_size)

    def _inc(self, name: str, labels: dict[str, str] | None = None) -> None:
        if self._metrics_collector is not None:
            self._metrics_collector.inc_counter(name, labels=labels)

    async def _fetch(
        self, fetch_batch: FetchBatch, query: CatalogQuery, mode: str
    ) -> CatalogPage:
        start = time.perf_counter()
        try:
            return await fetch_batch(query)
        finally:
            if self._metrics_collector is not None:
                self._metrics_collector.observe_histogram(
                    CATALOG_FETCH_LATENCY_SECONDS,
                    time.perf_counter() - start,
                    labels={"mode": mode},
                )

    async def execute(
        self, request: SearchRequest, fetch_batch: FetchBatch
    ) -> SearchResult:
        """
        Run one search.

        Args:
            request: Validated search options
            fetch_batch: Catalog collaborator call returning one CatalogPage

        Raises:
            CapabilityMismatchError: Ingredient terms were given but the
                fetched batch carries no ingredient data at all
            CatalogError: Propagated from ``fetch_batch``
        """
        include_terms = parse_terms(request.include_ingredients)
        exclude_terms = parse_terms(request.exclude_ingredients)
        matcher = IngredientMatcher(include_terms, exclude_terms)
        client_side = request.needs_client_side_processing
        mode = "client" if client_side else "passthrough"
        limit = request.page_size
        cursor = request.cursor

        query = CatalogQuery(
            limit=self.batch_size(request) if client_side else limit,
            offset=0 if client_side else cursor,
            search=request.query or None,
            form=request.form,
            conditions=request.conditions or None,
            min_protein=request.min_protein,
            max_carbs=request.max_carbs,
        )
        logger.debug(f"Search in {mode} mode (limit={query.limit}, offset={query.offset})")
        self._inc(SEARCHES_TOTAL, {"mode": mode})

        page = await self._fetch(fetch_batch, query, mode)

        if not client_side:
            has_more = (
                page.has_more
                if page.has_more is not None
                else page.total > cursor + limit
            )
            return SearchResult(
                items=[SearchResultItem.from_candidate(c) for c in page.items],
                total=page.total,
                has_more=has_more,
                cursor=cursor + len(page.items) if has_more else cursor,
            )

        if matcher.is_active and not any(c.has_ingredient_data for c in page.items):
            self._inc(SEARCH_CAPABILITY_MISMATCHES_TOTAL)
            raise CapabilityMismatchError(
                CAPABILITY_MISMATCH_MESSAGE,
                field="includeIngredients",
                details={
                    "includeIngredients": request.include_ingredients,
                    "excludeIngredients": request.exclude_ingredients,
                },
            )

        searchable = [SearchableCandidate.from_candidate(c) for c in page.items]
        filtered = matcher.filter(searchable) if matcher.is_active else searchable

        suggestions = None
        if matcher.is_active and not filtered:
            suggestions = self.suggestion_engine.suggest(
                searchable, include_terms, exclude_terms
            )
            if suggestions:
                self._inc(SEARCH_SUGGESTIONS_TOTAL)

        ordered = sort_candidates(
            filtered, request.sort_by, get_candidate=lambda s: s.candidate
        )
        total = len(ordered)
        window = ordered[cursor : cursor + limit]

        return SearchResult(
            items=[SearchResultItem.from_candidate(s.candidate) for s in window],
            total=total,
            has_more=cursor + limit < total,
            cursor=cursor + len(window),
            filter_note=FILTER_NOTE if matcher.is_active else None,
            suggestions=suggestions,
        )


__all__ = [
    "CAPABILITY_MISMATCH_MESSAGE",
    "DEFAULT_BATCH_SIZE",
    "FILTER_NOTE",
    "FetchBatch",
    "MAX_BATCH_SIZE",
    "SearchPipeline",
]
