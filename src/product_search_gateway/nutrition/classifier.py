# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Ingredient classification.

Keyword tables are immutable module constants and every function here is
pure, so classification is safe to call from any thread.

Classification runs a keyword substring pass first. Only when no keyword
hits does it fall back to the regex pattern table.
"""

import re
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any


class IngredientCategory(str, Enum):
    """Nutritional category of an ingredient."""

    ANIMAL_PROTEIN = "animal_protein"
    PLANT_PROTEIN = "plant_protein"
    GRAIN_STARCH = "grain_starch"
    ADDITIVES = "additives"
    OTHER = "other"


_ANIMAL_PROTEIN = (
    "chicken",
    "turkey",
    "beef",
    "fish",
    "salmon",
    "tuna",
    "lamb",
    "duck",
    "meat",
    "liver",
    "heart",
    "kidney",
    "gizzard",
)
_PLANT_PROTEIN = (
    "pea protein",
    "potato protein",
    "corn gluten",
    "wheat gluten",
    "soy",
    "plant protein",
    "soybean",
)
_GRAIN_STARCH = (
    "rice",
    "corn",
    "wheat",
    "barley",
    "oats",
    "potato",
    "tapioca",
    "pea",
    "lentil",
    "chickpea",
    "sweet potato",
    "cassava",
)
_ADDITIVES = (
    "taurine",
    "vitamin",
    "mineral",
    "supplement",
    "preservative",
    "color",
    "flavor",
    "choline",
    "methionine",
    "lysine",
)

# Insertion order is the order categories are reported in
CATEGORY_KEYWORDS: MappingProxyType[IngredientCategory, frozenset[str]] = (
    MappingProxyType(
        {
            IngredientCategory.ANIMAL_PROTEIN: frozenset(_ANIMAL_PROTEIN),
            IngredientCategory.PLANT_PROTEIN: frozenset(_PLANT_PROTEIN),
            IngredientCategory.GRAIN_STARCH: frozenset(_GRAIN_STARCH),
            IngredientCategory.ADDITIVES: frozenset(_ADDITIVES),
        }
    )
)

CATEGORY_PATTERNS: MappingProxyType[IngredientCategory, tuple[re.Pattern[str], ...]] = (
    MappingProxyType(
        {
            IngredientCategory.ANIMAL_PROTEIN: tuple(
                re.compile(re.escape(word), re.IGNORECASE) for word in _ANIMAL_PROTEIN
            ),
            IngredientCategory.PLANT_PROTEIN: tuple(
                re.compile(re.escape(word), re.IGNORECASE)
                for word in _PLANT_PROTEIN
                if word != "soybean"
            ),
            IngredientCategory.GRAIN_STARCH: tuple(
                re.compile(re.escape(word), re.IGNORECASE) for word in _GRAIN_STARCH
            ),
            IngredientCategory.ADDITIVES: tuple(
                re.compile(re.escape(word), re.IGNORECASE) for word in _ADDITIVES
            ),
        }
    )
)


@dataclass(frozen=True)
class IngredientClassification:
    """An ingredient name and the categories it falls into (never empty)."""

    name: str
    categories: tuple[IngredientCategory, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "categories": [category.value for category in self.categories],
        }


def classify_by_keywords(ingredient: str) -> tuple[IngredientCategory, ...]:
    """Categories whose keywords appear as substrings of the ingredient."""
    lower = ingredient.lower()
    return tuple(
        category
        for category, keywords in CATEGORY_KEYWORDS.items()
        if any(keyword in lower for keyword in keywords)
    )


def classify_by_patterns(ingredient: str) -> tuple[IngredientCategory, ...]:
    """Categories with at least one matching regex pattern."""
    return tuple(
        category
        for category, patterns in CATEGORY_PATTERNS.items()
        if any(pattern.search(ingredient) for pattern in patterns)
    )


def classify_ingredient(ingredient: str) -> IngredientClassification:
    """
    Classify one ingredient.

    An ingredient may fall into several categories ("corn gluten meal" is
    both plant protein and grain). Nothing matching yields ``OTHER``.
    """
    categories = classify_by_keywords(ingredient) or classify_by_patterns(ingredient)
    if not categories:
        categories = (IngredientCategory.OTHER,)
    return IngredientClassification(name=ingredient, categories=categories)


__all__ = [
    "CATEGORY_KEYWORDS",
    "CATEGORY_PATTERNS",
    "IngredientCategory",
    "IngredientClassification",
    "classify_by_keywords",
    "classify_by_patterns",
    "classify_ingredient",
]
