# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Nutrition analysis and ingredient classification."""

from .analysis import (
    DEFAULT_DRY_ASH,
    DEFAULT_WET_ASH,
    NUTRITION_DISCLAIMER,
    CarbEstimate,
    DryMatterBasis,
    NutritionAnalysis,
    analyze_product,
    estimate_carbs,
    to_dry_matter,
)
from .classifier import (
    IngredientCategory,
    IngredientClassification,
    classify_by_keywords,
    classify_by_patterns,
    classify_ingredient,
)

__all__ = [
    "DEFAULT_DRY_ASH",
    "DEFAULT_WET_ASH",
    "NUTRITION_DISCLAIMER",
    "CarbEstimate",
    "DryMatterBasis",
    "IngredientCategory",
    "IngredientClassification",
    "NutritionAnalysis",
    "analyze_product",
    "classify_by_keywords",
    "classify_by_patterns",
    "classify_ingredient",
    "estimate_carbs",
    "to_dry_matter",
]
