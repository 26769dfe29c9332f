# SPDX-License-Identifier: Apache-2.0
"""Shared fixtures: a controllable clock, a scripted catalog and an isolated
metrics collector."""

from __future__ import annotations

from typing import Any

import pytest
from prometheus_client import CollectorRegistry

from product_search_gateway.exceptions import CatalogNotFoundError
from product_search_gateway.observability.collector import UnifiedMetricsCollector
from product_search_gateway.types.catalog import (
    Candidate,
    CatalogPage,
    CatalogQuery,
    ComparisonPage,
    CurationPage,
    NutritionInfo,
)


class FakeClock:
    """Epoch-millisecond clock advanced by hand."""

    def __init__(self, now: int = 1_700_000_000_000) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


class FakeCatalog:
    """
    In-memory catalog.

    ``fetch_batch`` slices the corpus by offset/limit like the real list
    endpoint and records every query it receives.
    """

    def __init__(
        self,
        items: list[Candidate] | None = None,
        total: int | None = None,
        has_more: bool | None = None,
        error: Exception | None = None,
        curations: list[CurationPage] | None = None,
    ) -> None:
        self.items = list(items or [])
        self.curations = {page.slug: page for page in curations or []}
        self.total = total
        self.has_more = has_more
        self.error = error
        self.queries: list[CatalogQuery] = []
        self.product_calls: list[str] = []
        self.compare_calls: list[list[str]] = []

    async def fetch_batch(self, query: CatalogQuery) -> CatalogPage:
        self.queries.append(query)
        if self.error is not None:
            raise self.error
        window = self.items[query.offset : query.offset + query.limit]
        return CatalogPage(
            items=window,
            total=self.total if self.total is not None else len(self.items),
            limit=query.limit,
            offset=query.offset,
            has_more=self.has_more,
        )

    async def get_product(self, product_id: str) -> Candidate:
        self.product_calls.append(product_id)
        if self.error is not None:
            raise self.error
        for item in self.items:
            if item.id == product_id:
                return item
        raise CatalogNotFoundError("Product", product_id)

    async def compare_products(self, product_ids: list[str]) -> ComparisonPage:
        self.compare_calls.append(list(product_ids))
        if self.error is not None:
            raise self.error
        by_id = {item.id: item for item in self.items}
        found = [by_id[pid] for pid in product_ids if pid in by_id]
        if not found:
            raise CatalogNotFoundError("Resource")
        return ComparisonPage(
            products=found, requested=len(product_ids), compared=len(found)
        )

    async def get_curation(self, slug: str) -> CurationPage:
        if self.error is not None:
            raise self.error
        if slug not in self.curations:
            raise CatalogNotFoundError("Curation page", slug)
        return self.curations[slug]


def make_candidate(
    id: str = "p1",
    name: str = "Test Food",
    brand: str = "Brand",
    preview: list[str] | None = None,
    full: list[str] | None = None,
    tags: list[str] | None = None,
    protein: float | None = None,
    fat: float | None = None,
    moisture: float | None = None,
    **kwargs: Any,
) -> Candidate:
    nutrition = kwargs.pop("nutrition", None)
    if protein is not None or fat is not None or moisture is not None:
        nutrition = NutritionInfo(protein=protein, fat=fat, moisture=moisture)
    return Candidate(
        id=id,
        name=name,
        brand=brand,
        detail_url=f"https://example.com/products/{id}",
        ingredients_preview=list(preview or []),
        ingredients_full=list(full or []),
        condition_tags=list(tags or []),
        nutrition=nutrition,
        **kwargs,
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def collector() -> UnifiedMetricsCollector:
    """Collector registered against a private Prometheus registry."""
    return UnifiedMetricsCollector(registry=CollectorRegistry())


@pytest.fixture
def candidate():
    """Factory for catalog candidates."""
    return make_candidate


@pytest.fixture
def fake_catalog():
    """Factory for scripted in-memory catalogs."""
    return FakeCatalog
