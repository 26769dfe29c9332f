# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Nutrition analysis: carbohydrate estimation, dry-matter-basis conversion
and ingredient breakdown.

Carbohydrates are not on a guaranteed analysis label, so they are
estimated by difference::

    carbs = 100 - (protein + fat + fiber + moisture + ash)

Missing fiber counts as 0. Missing ash uses a form-specific default.
"""

import math
from dataclasses import dataclass, field
from typing import Any

from ..types.catalog import Candidate, NutritionInfo, ProductForm
from .classifier import IngredientClassification, classify_ingredient

DEFAULT_DRY_ASH = 8.0
DEFAULT_WET_ASH = 2.5
TOP_INGREDIENT_COUNT = 10

NUTRITION_DISCLAIMER = (
    "This analysis is for informational purposes only and is not veterinary "
    "advice. Consult a veterinarian for specific dietary recommendations."
)


def _round1(value: float) -> float:
    # Half-up to one decimal
    return math.floor(value * 10 + 0.5) / 10


def default_ash(form: ProductForm | None) -> float:
    return DEFAULT_WET_ASH if form == ProductForm.WET else DEFAULT_DRY_ASH


@dataclass(frozen=True)
class CarbEstimate:
    """
    Estimated as-fed carbohydrate percentage.

    Attributes:
        value: Estimate rounded to one decimal and clamped at 0; None when
            protein, fat or moisture is missing
        is_estimated: True when the default ash value was used
    """

    value: float | None
    is_estimated: bool


def estimate_carbs(
    nutrition: NutritionInfo, form: ProductForm | None = None
) -> CarbEstimate:
    """Estimate as-fed carbohydrates by difference."""
    if nutrition.protein is None or nutrition.fat is None or nutrition.moisture is None:
        return CarbEstimate(value=None, is_estimated=False)

    ash_missing = nutrition.ash is None
    ash = default_ash(form) if nutrition.ash is None else nutrition.ash
    fiber = nutrition.fiber or 0.0
    carbs = 100 - (nutrition.protein + nutrition.fat + fiber + nutrition.moisture + ash)
    return CarbEstimate(value=max(0.0, _round1(carbs)), is_estimated=ash_missing)


@dataclass(frozen=True)
class DryMatterBasis:
    """Nutrient percentages with moisture removed."""

    protein: float | None = None
    fat: float | None = None
    fiber: float | None = None
    ash: float | None = None
    carb_estimated: float | None = None

    def to_dict(self) -> dict[str, Any]:
        return _drop_none(
            {
                "protein": self.protein,
                "fat": self.fat,
                "fiber": self.fiber,
                "ash": self.ash,
                "carbEstimated": self.carb_estimated,
            }
        )


def to_dry_matter(
    nutrition: NutritionInfo, carb_as_fed: float | None = None
) -> DryMatterBasis:
    """
    Convert as-fed values to dry matter basis: ``value * 100 / (100 - moisture)``.

    Without a usable moisture value (missing, or 100% or more) the as-fed
    values are returned unconverted.
    """
    moisture = nutrition.moisture
    if moisture is None or moisture >= 100:
        return DryMatterBasis(
            protein=nutrition.protein,
            fat=nutrition.fat,
            fiber=nutrition.fiber,
            ash=nutrition.ash,
            carb_estimated=carb_as_fed,
        )

    factor = 100 / (100 - moisture)

    def convert(value: float | None) -> float | None:
        return _round1(value * factor) if value is not None else None

    return DryMatterBasis(
        protein=convert(nutrition.protein),
        fat=convert(nutrition.fat),
        fiber=convert(nutrition.fiber),
        ash=convert(nutrition.ash),
        carb_estimated=convert(carb_as_fed),
    )


@dataclass
class NutritionAnalysis:
    """Result of analysing one product."""

    product_id: str
    product_name: str
    as_fed: NutritionInfo
    carbs: CarbEstimate
    dry_matter: DryMatterBasis
    total_ingredients: int
    top_ingredients: list[IngredientClassification] = field(default_factory=list)
    assumptions: list[str] = field(default_factory=list)
    limitations: list[str] = field(default_factory=list)
    disclaimer: str = NUTRITION_DISCLAIMER

    def to_dict(self) -> dict[str, Any]:
        return {
            "productId": self.product_id,
            "productName": self.product_name,
            "asFed": self.as_fed.to_dict(),
            "carbohydrates": _drop_none(
                {
                    "asFed": self.carbs.value,
                    "isEstimated": self.carbs.is_estimated,
                    "dmb": self.dry_matter.carb_estimated,
                }
            ),
            "dmb": self.dry_matter.to_dict(),
            "ingredients": {
                "totalCount": self.total_ingredients,
                "topIngredients": [item.to_dict() for item in self.top_ingredients],
            },
            "assumptions": list(self.assumptions),
            "limitations": list(self.limitations),
            "disclaimer": self.disclaimer,
        }


def _drop_none(data: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in data.items() if value is not None}


def analyze_product(candidate: Candidate) -> NutritionAnalysis:
    """
    Analyse a product's nutrition panel and leading ingredients.

    Uses the full ingredient list when present, the preview otherwise.
    Products without a known form are treated as dry food.
    """
    nutrition = candidate.nutrition or NutritionInfo()
    form = candidate.form or ProductForm.DRY

    carbs = estimate_carbs(nutrition, form)
    dry_matter = to_dry_matter(nutrition, carbs.value)
    ingredients = candidate.ingredients_full or candidate.ingredients_preview

    assumptions: list[str] = []
    if nutrition.ash is None:
        assumptions.append(
            f"Default ash value of {default_ash(form):g}% used for {form.value} food"
        )
    if nutrition.fiber is None:
        assumptions.append("Fiber value not provided; assumed 0% for carb calculation")

    limitations: list[str] = []
    if nutrition.ash is None:
        limitations.append(
            "Ash value not provided by manufacturer; carb estimate uses default"
        )
    if nutrition.protein is None:
        limitations.append("Protein value unavailable")
    if nutrition.fat is None:
        limitations.append("Fat value unavailable")
    if nutrition.moisture is None:
        limitations.append("Moisture value unavailable; DMB calculation not possible")
    if nutrition.fiber is None:
        limitations.append("Fiber value not provided by manufacturer")

    return NutritionAnalysis(
        product_id=candidate.id,
        product_name=candidate.name or "Unknown",
        as_fed=nutrition,
        carbs=carbs,
        dry_matter=dry_matter,
        total_ingredients=len(ingredients),
        top_ingredients=[
            classify_ingredient(name) for name in ingredients[:TOP_INGREDIENT_COUNT]
        ],
        assumptions=assumptions,
        limitations=limitations,
    )


__all__ = [
    "DEFAULT_DRY_ASH",
    "DEFAULT_WET_ASH",
    "NUTRITION_DISCLAIMER",
    "TOP_INGREDIENT_COUNT",
    "CarbEstimate",
    "DryMatterBasis",
    "NutritionAnalysis",
    "analyze_product",
    "default_ash",
    "estimate_carbs",
    "to_dry_matter",
]
