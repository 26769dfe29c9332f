# SPDX-License-Identifier: Apache-2.0
"""Unit tests for carbohydrate estimation, dry matter conversion and product
analysis."""

from __future__ import annotations

import pytest

from product_search_gateway.nutrition.analysis import (
    NUTRITION_DISCLAIMER,
    analyze_product,
    estimate_carbs,
    to_dry_matter,
)
from product_search_gateway.types.catalog import NutritionInfo, ProductForm


class TestEstimateCarbs:
    """Tests for estimate_carbs."""

    def test_dry_default_ash(self):
        """Dry food without ash uses 8%."""
        result = estimate_carbs(
            NutritionInfo(protein=30, fat=15, fiber=3, moisture=10), ProductForm.DRY
        )
        assert result.value == 34.0
        assert result.is_estimated is True

    def test_wet_default_ash(self):
        """Wet food without ash uses 2.5%."""
        result = estimate_carbs(
            NutritionInfo(protein=10, fat=5, fiber=1, moisture=78), ProductForm.WET
        )
        assert result.value == 3.5

    def test_unknown_form_uses_dry_ash(self):
        """Without a form the dry default applies."""
        result = estimate_carbs(NutritionInfo(protein=30, fat=15, fiber=3, moisture=10))
        assert result.value == 34.0

    def test_provided_ash(self):
        """A published ash value is used and the result is not estimated."""
        result = estimate_carbs(
            NutritionInfo(protein=30, fat=15, fiber=3, moisture=10, ash=7)
        )
        assert result.value == 35.0
        assert result.is_estimated is False

    def test_missing_fiber_counts_as_zero(self):
        """Missing fiber contributes nothing."""
        result = estimate_carbs(NutritionInfo(protein=30, fat=15, moisture=10, ash=5))
        assert result.value == 40.0

    def test_rounds_half_up(self):
        """Results round to one decimal, halves upward."""
        result = estimate_carbs(
            NutritionInfo(protein=30.25, fat=15, fiber=0, moisture=10, ash=8)
        )
        assert result.value == 36.8

    def test_clamped_at_zero(self):
        """Negative estimates clamp to zero."""
        result = estimate_carbs(NutritionInfo(protein=50, fat=30, moisture=20, ash=5))
        assert result.value == 0.0

    @pytest.mark.parametrize(
        "nutrition",
        [
            NutritionInfo(fat=15, moisture=10),
            NutritionInfo(protein=30, moisture=10),
            NutritionInfo(protein=30, fat=15),
        ],
    )
    def test_required_fields(self, nutrition):
        """Protein, fat and moisture are required."""
        result = estimate_carbs(nutrition)
        assert result.value is None
        assert result.is_estimated is False


class TestDryMatter:
    """Tests for to_dry_matter."""

    def test_conversion(self):
        """Values scale by 100 / (100 - moisture)."""
        dmb = to_dry_matter(NutritionInfo(protein=30, fat=15, moisture=10), 34.0)
        assert dmb.protein == 33.3
        assert dmb.fat == 16.7
        assert dmb.fiber is None
        assert dmb.carb_estimated == 37.8

    def test_wet_food_conversion(self):
        """High-moisture food shows a large dry matter uplift."""
        dmb = to_dry_matter(NutritionInfo(protein=11, moisture=78))
        assert dmb.protein == 50.0

    @pytest.mark.parametrize("moisture", [None, 100, 120])
    def test_unusable_moisture_returns_as_fed(self, moisture):
        """Missing or impossible moisture leaves values unconverted."""
        dmb = to_dry_matter(NutritionInfo(protein=30, fat=15, moisture=moisture), 20.0)
        assert dmb.protein == 30
        assert dmb.fat == 15
        assert dmb.carb_estimated == 20.0


class TestAnalyzeProduct:
    """Tests for analyze_product."""

    def test_full_analysis(self, candidate):
        """A product with a partial panel gets assumptions and limitations."""
        product = candidate(
            id="01HX0000000000000000000000",
            name="Chicken Dinner",
            protein=30,
            fat=15,
            moisture=10,
            full=[f"ingredient {i}" for i in range(11)] + ["chicken"],
        )
        analysis = analyze_product(product)
        data = analysis.to_dict()

        assert data["productId"] == "01HX0000000000000000000000"
        assert data["productName"] == "Chicken Dinner"
        assert data["asFed"] == {"protein": 30, "fat": 15, "moisture": 10}
        assert data["carbohydrates"] == {"asFed": 37.0, "isEstimated": True, "dmb": 41.1}
        assert data["ingredients"]["totalCount"] == 12
        assert len(data["ingredients"]["topIngredients"]) == 10
        assert data["assumptions"] == [
            "Default ash value of 8% used for dry food",
            "Fiber value not provided; assumed 0% for carb calculation",
        ]
        assert data["limitations"] == [
            "Ash value not provided by manufacturer; carb estimate uses default",
            "Fiber value not provided by manufacturer",
        ]
        assert data["disclaimer"] == NUTRITION_DISCLAIMER

    def test_wet_assumption(self, candidate):
        """Wet food reports the wet ash default."""
        product = candidate(protein=10, fat=5, moisture=78, form=ProductForm.WET)
        assert analyze_product(product).assumptions[0] == (
            "Default ash value of 2.5% used for wet food"
        )

    def test_no_nutrition(self, candidate):
        """A product without a panel lists every gap."""
        analysis = analyze_product(candidate(preview=["tuna", "water"]))
        assert analysis.carbs.value is None
        assert "Protein value unavailable" in analysis.limitations
        assert "Moisture value unavailable; DMB calculation not possible" in analysis.limitations
        assert analysis.total_ingredients == 2
        assert [c.name for c in analysis.top_ingredients] == ["tuna", "water"]
        data = analysis.to_dict()
        assert data["carbohydrates"] == {"isEstimated": False}
        assert data["dmb"] == {}

    def test_unknown_name(self, candidate):
        """A blank product name reads as Unknown."""
        assert analyze_product(candidate(name="")).product_name == "Unknown"
