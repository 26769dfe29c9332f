# SPDX-License-Identifier: Apache-2.0
"""Unit tests for the tool surface: admission, validation and envelopes."""

from __future__ import annotations

import asyncio

import pytest

from product_search_gateway.cache import ProductCache
from product_search_gateway.config import GatewayConfig
from product_search_gateway.exceptions import CatalogUnavailableError
from product_search_gateway.observability.constants import (
    REQUESTS_RATE_LIMITED_TOTAL,
    TOOL_ERRORS_TOTAL,
)
from product_search_gateway.ratelimit.registry import BucketRegistry
from product_search_gateway.responses import GENERIC_INTERNAL_MESSAGE, ErrorType
from product_search_gateway.search.pipeline import SearchPipeline
from product_search_gateway.service import ProductSearchService, create_service
from product_search_gateway.types.catalog import (
    ComparisonPage,
    CurationPage,
    DerivedMetrics,
    ProductForm,
)
from product_search_gateway.types.search import SearchRequest

ULID = "01HZX3K9Q8W7E6R5T4Y3U2I1O0"
ULID_2 = "01HZX3K9Q8W7E6R5T4Y3U2I1O1"
MISSING_ULID = "01HZX3K9Q8W7E6R5T4Y3U2I1OZ"


@pytest.fixture
def catalog(fake_catalog, candidate):
    return fake_catalog(
        [
            candidate(
                id="p1",
                name="Tuna Dinner",
                preview=["tuna", "water"],
                protein=40,
                fat=15,
                moisture=10,
            ),
            candidate(id="p2", name="Chicken Pate", preview=["chicken", "water"]),
            candidate(id=ULID, name="Salmon Bites", preview=["salmon"]),
            candidate(
                id=ULID_2,
                name="Duck Kibble",
                preview=["duck"],
                protein=38,
                fat=12,
                form=ProductForm.DRY,
                derived_metrics=DerivedMetrics(carb_estimated=9.5),
            ),
        ],
        curations=[
            CurationPage(
                slug="low-carb-cat-food",
                title="Best Low-Carb Cat Food",
                description="Foods under 10% carbohydrates.",
                tldr=["Duck Kibble leads"],
                criteria=["carbs < 10%"],
                methodology="Dry matter basis",
                recommended_product_ids=[ULID_2, "gone", "p1", "p2"],
                updated_at="2026-01-01",
                canonical_url="https://example.com/low-carb",
                sections=[{"heading": "Why", "capsule": "c", "content": "body"}],
                faq=[{"question": "Q?", "answer": "A."}],
            )
        ],
    )


@pytest.fixture
def service(catalog, clock, collector) -> ProductSearchService:
    registry = BucketRegistry(capacity=3, clock=clock, metrics_collector=collector)
    return ProductSearchService(
        catalog, registry, identity="session-1", metrics_collector=collector
    )


class TestSearchProducts:
    """Tests for the search tool."""

    @pytest.mark.asyncio
    async def test_success_envelope(self, service):
        """Results come wrapped with rate-limit metadata."""
        response = await service.search_products({"includeIngredients": "tuna"})
        assert response.is_error is False
        data = response.payload["data"]
        assert [item["id"] for item in data["items"]] == ["p1"]
        assert data["total"] == 1
        assert "filterNote" in data
        assert response.rate_limit["limit"] == 3
        assert response.rate_limit["remaining"] == 2

    @pytest.mark.asyncio
    async def test_accepts_search_request(self, service):
        """A prepared SearchRequest is used as-is."""
        response = await service.search_products(SearchRequest(limit=2))
        assert len(response.payload["data"]["items"]) == 2

    @pytest.mark.asyncio
    async def test_rate_limited_skips_catalog(self, service, catalog, collector):
        """A denied caller gets RATE_LIMITED without a catalog round trip."""
        for _ in range(3):
            await service.search_products({})
        response = await service.search_products({})

        assert response.error_type is ErrorType.RATE_LIMITED
        assert response.rate_limit["remaining"] == 0
        assert response.payload["retryAfterSeconds"] >= 0
        assert len(catalog.queries) == 3
        assert collector.get_metrics()["counters"][REQUESTS_RATE_LIMITED_TOTAL] == {"": 1}

    @pytest.mark.asyncio
    async def test_identities_are_independent(self, service):
        """Each identity has its own bucket."""
        for _ in range(3):
            await service.search_products({}, identity="a")
        response = await service.search_products({}, identity="b")
        assert response.is_error is False

    @pytest.mark.asyncio
    async def test_validation_error(self, service, catalog):
        """Invalid options produce VALIDATION without a catalog call."""
        response = await service.search_products({"limit": 50})
        assert response.error_type is ErrorType.VALIDATION
        assert response.payload["error"]["details"] == {"field": "limit"}
        assert response.rate_limit["remaining"] == 2
        assert catalog.queries == []

    @pytest.mark.asyncio
    async def test_capability_mismatch(self, clock, fake_catalog, candidate):
        """A catalog without ingredient data rejects ingredient filters."""
        bare = fake_catalog([candidate(id="x1"), candidate(id="x2")])
        service = ProductSearchService(bare, BucketRegistry(capacity=5, clock=clock))
        response = await service.search_products({"excludeIngredients": "corn"})
        assert response.error_type is ErrorType.VALIDATION
        assert "ingredient" in response.payload["error"]["message"]

    @pytest.mark.asyncio
    async def test_upstream_unavailable(self, clock, collector, fake_catalog):
        """Transient catalog failures map to UPSTREAM_UNAVAILABLE."""
        down = fake_catalog(error=CatalogUnavailableError("503", status_code=503))
        service = ProductSearchService(
            down, BucketRegistry(capacity=5, clock=clock), metrics_collector=collector
        )
        response = await service.search_products({"query": "tuna"})
        assert response.error_type is ErrorType.UPSTREAM_UNAVAILABLE
        assert collector.get_metrics()["counters"][TOOL_ERRORS_TOTAL] == {
            "error_type=CatalogUnavailableError,tool=search_products": 1
        }

    @pytest.mark.asyncio
    async def test_unexpected_error_is_generic(self, clock, fake_catalog):
        """Unexpected failures return INTERNAL without leaking detail."""
        broken = fake_catalog(error=RuntimeError("connection string: secret"))
        service = ProductSearchService(broken, BucketRegistry(capacity=5, clock=clock))
        response = await service.search_products({})
        assert response.error_type is ErrorType.INTERNAL
        assert response.payload["error"]["message"] == GENERIC_INTERNAL_MESSAGE
        assert "secret" not in response.text


class TestGetProductDetail:
    """Tests for the detail tool."""

    @pytest.mark.asyncio
    async def test_returns_full_record(self, service):
        """A valid id returns the product projection."""
        response = await service.get_product_detail(ULID)
        assert response.is_error is False
        assert response.payload["data"]["name"] == "Salmon Bites"

    @pytest.mark.asyncio
    async def test_invalid_id(self, service, catalog):
        """Non-ULID ids are rejected before any catalog call."""
        response = await service.get_product_detail("not-a-ulid")
        assert response.error_type is ErrorType.VALIDATION
        assert response.payload["error"]["details"] == {"productId": "not-a-ulid"}
        assert catalog.product_calls == []

    @pytest.mark.asyncio
    async def test_not_found(self, service):
        """Unknown ids map to NOT_FOUND."""
        missing = "01HZX3K9Q8W7E6R5T4Y3U2I1OZ"
        response = await service.get_product_detail(missing)
        assert response.error_type is ErrorType.NOT_FOUND
        assert response.payload["error"]["message"] == f"Product not found: {missing}"

    @pytest.mark.asyncio
    async def test_cached(self, service, catalog):
        """Repeated lookups are served from the cache."""
        await service.get_product_detail(ULID)
        await service.get_product_detail(ULID)
        assert catalog.product_calls == [ULID]

    @pytest.mark.asyncio
    async def test_rate_limited(self, service, catalog):
        """Detail lookups share the caller's bucket."""
        for _ in range(3):
            await service.get_product_detail(ULID)
        response = await service.get_product_detail(ULID)
        assert response.error_type is ErrorType.RATE_LIMITED


class TestAnalyzeNutrition:
    """Tests for the nutrition analysis tool."""

    @pytest.mark.asyncio
    async def test_analysis(self, service):
        """Analysis reports carbs and dry matter."""
        response = await service.analyze_nutrition("p1")
        assert response.is_error is False
        data = response.payload["data"]
        assert data["productId"] == "p1"
        assert data["carbohydrates"]["isEstimated"] is True
        assert "disclaimer" in data

    @pytest.mark.asyncio
    @pytest.mark.parametrize("product_id", ["", "bad id!", "x" * 129])
    async def test_invalid_id(self, service, product_id):
        """Malformed ids are rejected."""
        response = await service.analyze_nutrition(product_id)
        assert response.error_type is ErrorType.VALIDATION
        assert response.payload["error"]["message"] == "Invalid product ID format"

    @pytest.mark.asyncio
    async def test_not_found(self, service):
        """Unknown ids map to NOT_FOUND."""
        response = await service.analyze_nutrition("nope")
        assert response.error_type is ErrorType.NOT_FOUND


class TestCompareProducts:
    """Tests for the comparison tool."""

    @pytest.mark.asyncio
    async def test_side_by_side(self, service, catalog):
        """Two valid ids return the comparison projection and counts."""
        response = await service.compare_products([ULID, ULID_2])
        assert response.is_error is False
        data = response.payload["data"]
        assert [p["id"] for p in data["products"]] == [ULID, ULID_2]
        assert (data["requested"], data["compared"]) == (2, 2)
        assert catalog.compare_calls == [[ULID, ULID_2]]

        duck = data["products"][1]
        assert duck["form"] == "dry"
        assert duck["nutrition"] == {"protein": 38, "fat": 12}
        assert duck["derivedMetrics"] == {"carbEstimated": 9.5}
        assert duck["hasOffer"] is False
        assert "ingredientsPreview" not in duck

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "ids, message",
        [
            ([ULID], "Need at least 2 product IDs to compare"),
            ([ULID, ULID_2, ULID, ULID_2], "Maximum 3 products can be compared"),
        ],
    )
    async def test_count_bounds(self, service, catalog, ids, message):
        """Fewer than two or more than three ids are rejected."""
        response = await service.compare_products(ids)
        assert response.error_type is ErrorType.VALIDATION
        assert response.payload["error"]["message"] == message
        assert catalog.compare_calls == []

    @pytest.mark.asyncio
    async def test_invalid_ids_listed(self, service, catalog):
        """Every malformed id is reported back."""
        response = await service.compare_products([ULID, "bad", "p1"])
        assert response.error_type is ErrorType.VALIDATION
        assert response.payload["error"]["details"] == {"invalidIds": ["bad", "p1"]}
        assert catalog.compare_calls == []

    @pytest.mark.asyncio
    async def test_bare_string_rejected(self, service):
        """A single string is not a list of ids."""
        response = await service.compare_products(ULID)
        assert response.error_type is ErrorType.VALIDATION
        assert response.payload["error"]["details"] == {"field": "productIds"}

    @pytest.mark.asyncio
    async def test_not_found(self, service):
        """Unknown products map to a generic NOT_FOUND."""
        response = await service.compare_products([MISSING_ULID, MISSING_ULID])
        assert response.error_type is ErrorType.NOT_FOUND
        assert (
            response.payload["error"]["message"]
            == "Product not found: requested product"
        )

    @pytest.mark.asyncio
    async def test_counts_fall_back(self, service, catalog):
        """Missing upstream counts fall back to the request and result sizes."""

        async def compare_without_counts(product_ids):
            return ComparisonPage(products=[catalog.items[2]])

        catalog.compare_products = compare_without_counts
        response = await service.compare_products([ULID, MISSING_ULID])
        data = response.payload["data"]
        assert (data["requested"], data["compared"]) == (2, 1)

    @pytest.mark.asyncio
    async def test_rate_limited_before_validation(self, service):
        """A denied caller is rejected even with invalid input."""
        for _ in range(3):
            await service.compare_products([ULID, ULID_2])
        response = await service.compare_products([ULID])
        assert response.error_type is ErrorType.RATE_LIMITED


class TestGetCurationList:
    """Tests for the curation tool."""

    @pytest.mark.asyncio
    async def test_summary(self, service):
        """The page comes back with its top three products summarized."""
        response = await service.get_curation_list("low-carb-cat-food")
        assert response.is_error is False
        data = response.payload["data"]
        assert data["title"] == "Best Low-Carb Cat Food"
        assert data["recommendedProductIds"] == [ULID_2, "gone", "p1", "p2"]
        assert "sections" not in data
        assert "faq" not in data

        duck, gone, tuna = data["recommendedProducts"]
        assert duck == {
            "id": ULID_2,
            "name": "Duck Kibble",
            "brand": "Brand",
            "form": "dry",
            "keyNutrition": {"protein": 38, "carbEstimated": 9.5},
            "detailToolLink": f"Use get_product_detail with productId '{ULID_2}'",
        }
        assert gone == {"id": "gone", "error": "Product not found"}
        assert tuna["keyNutrition"] == {"protein": 40}
        assert "form" not in tuna

    @pytest.mark.asyncio
    async def test_extended_content_opt_in(self, service):
        """Sections and FAQ only appear when requested."""
        response = await service.get_curation_list(
            "low-carb-cat-food", include_sections=True, include_faq=True
        )
        data = response.payload["data"]
        assert data["sections"] == [{"heading": "Why", "capsule": "c", "content": "body"}]
        assert data["faq"] == [{"question": "Q?", "answer": "A."}]

    @pytest.mark.asyncio
    async def test_products_come_from_cache(self, service, catalog):
        """Recommended products are fetched once and reused across tools."""
        await service.get_product_detail(ULID_2)
        await service.get_curation_list("low-carb-cat-food")
        await service.get_curation_list("low-carb-cat-food")
        assert catalog.product_calls.count(ULID_2) == 1
        assert catalog.product_calls.count("p1") == 1
        # Failed lookups are not cached
        assert catalog.product_calls.count("gone") == 2

    @pytest.mark.asyncio
    async def test_not_found(self, service):
        """An unknown slug names the curation page."""
        response = await service.get_curation_list("nope")
        assert response.error_type is ErrorType.NOT_FOUND
        assert response.payload["error"]["message"] == "Curation page not found: nope"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("slug", ["", "x" * 129, 42])
    async def test_invalid_slug(self, service, slug):
        """Empty, oversized or non-string slugs are rejected."""
        response = await service.get_curation_list(slug)
        assert response.error_type is ErrorType.VALIDATION
        assert response.payload["error"]["details"] == {"slug": slug}

    @pytest.mark.asyncio
    async def test_upstream_unavailable(self, clock, fake_catalog):
        """A failing catalog maps to UPSTREAM_UNAVAILABLE."""
        down = fake_catalog(error=CatalogUnavailableError("503", status_code=503))
        service = ProductSearchService(down, BucketRegistry(capacity=5, clock=clock))
        response = await service.get_curation_list("low-carb-cat-food")
        assert response.error_type is ErrorType.UPSTREAM_UNAVAILABLE


class TestServiceConstruction:
    """Tests for collaborator injection."""

    @pytest.mark.asyncio
    async def test_injected_cache_is_kept(self, catalog, clock):
        """An empty injected cache and its clock are used as given."""
        now = [0.0]
        cache = ProductCache(ttl_seconds=5.0, clock=lambda: now[0])
        service = ProductSearchService(
            catalog, BucketRegistry(capacity=10, clock=clock), cache=cache
        )
        assert service.cache is cache

        await service.get_product_detail(ULID)
        await service.get_product_detail(ULID)
        now[0] = 6.0
        await service.get_product_detail(ULID)
        assert catalog.product_calls == [ULID, ULID]

    def test_injected_pipeline_is_kept(self, catalog, clock):
        """A supplied pipeline is not replaced."""
        pipeline = SearchPipeline()
        service = ProductSearchService(
            catalog, BucketRegistry(capacity=1, clock=clock), pipeline=pipeline
        )
        assert service.pipeline is pipeline


class TestCreateService:
    """Tests for the service factory."""

    def test_wires_config(self, catalog, collector):
        """Configuration flows into the registry, cache and identity."""
        config = GatewayConfig(
            rate_limit_per_min=7,
            rate_limit_window_ms=1000,
            product_cache_ttl=5.0,
            product_cache_max_entries=1000,
            rate_limit_cleanup_every=50,
            session_id="fixed",
        )
        service = create_service(catalog, config, metrics_collector=collector)
        assert service.identity == "fixed"
        assert service.registry.capacity == 7
        assert service.registry.window_ms == 1000
        assert isinstance(service.cache, ProductCache)
        assert service.cache.ttl_seconds == 5.0
        assert service.cache.max_entries == 1000

    @pytest.mark.asyncio
    async def test_metrics_disabled(self, catalog):
        """With metrics disabled no collector is attached."""
        service = create_service(catalog, GatewayConfig(metrics_enabled=False))
        assert service._metrics_collector is None
        response = await service.search_products({})
        assert response.is_error is False

    def test_catalog_factory_receives_config(self, catalog, collector):
        """A factory is called with the config to build the catalog."""
        config = GatewayConfig(
            api_base_url="https://catalog.test", api_key="k", api_timeout_seconds=2.0
        )
        received = []

        def factory(cfg):
            received.append(cfg)
            return catalog

        service = create_service(factory, config, metrics_collector=collector)
        assert received == [config]
        assert service.catalog is catalog

    @pytest.mark.asyncio
    async def test_idle_cleanup_is_scheduled(self, catalog, collector):
        """New identities trigger idle bucket cleanup at the configured rate."""
        config = GatewayConfig(rate_limit_window_ms=1, rate_limit_cleanup_every=1)
        service = create_service(catalog, config, metrics_collector=collector)
        await service.search_products({}, identity="a")
        # Wall clock; sleep past the one-millisecond window
        await asyncio.sleep(0.02)
        await service.search_products({}, identity="b")
        assert "a" not in service.registry
        assert "b" in service.registry
