# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Protocol for the remote product catalog."""

from typing import Protocol, runtime_checkable

from ..types.catalog import (
    Candidate,
    CatalogPage,
    CatalogQuery,
    ComparisonPage,
    CurationPage,
)


@runtime_checkable
class CatalogProtocol(Protocol):
    """
    Minimal protocol for catalog integration.

    The gateway does NOT speak HTTP itself. Transport, retries, timeouts,
    status mapping and response-schema validation stay in the catalog
    implementation. Implementations must fail distinguishably:

    - CatalogNotFoundError for a missing resource (not retryable)
    - CatalogUnavailableError / CatalogTimeoutError for transient failures
    """

    async def fetch_batch(self, query: CatalogQuery) -> CatalogPage:
        """Fetch one page of list results."""
        ...

    async def get_product(self, product_id: str) -> Candidate:
        """Fetch one product with full detail (including full ingredients)."""
        ...

    async def compare_products(self, product_ids: list[str]) -> ComparisonPage:
        """Fetch 2-3 products for a side-by-side comparison."""
        ...

    async def get_curation(self, slug: str) -> CurationPage:
        """Fetch a curated best-of page by slug."""
        ...
