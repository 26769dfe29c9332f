# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Catalog item types.

These dataclasses mirror the catalog collaborator's product shape. Wire
payloads use camelCase keys; ``from_dict``/``to_dict`` translate at the
boundary so the rest of the library only sees snake_case attributes.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ProductForm(str, Enum):
    """Physical form of a food product."""

    DRY = "dry"
    WET = "wet"


def _optional_float(value: Any) -> float | None:
    if value is None:
        return None
    return float(value)


@dataclass
class NutritionInfo:
    """
    Guaranteed analysis percentages (as-fed).

    Any field may be missing; consumers decide how to default it.
    """

    protein: float | None = None
    fat: float | None = None
    fiber: float | None = None
    moisture: float | None = None
    ash: float | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "NutritionInfo":
        return cls(
            protein=_optional_float(data.get("protein")),
            fat=_optional_float(data.get("fat")),
            fiber=_optional_float(data.get("fiber")),
            moisture=_optional_float(data.get("moisture")),
            ash=_optional_float(data.get("ash")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            key: value
            for key, value in (
                ("protein", self.protein),
                ("fat", self.fat),
                ("fiber", self.fiber),
                ("moisture", self.moisture),
                ("ash", self.ash),
            )
            if value is not None
        }


@dataclass
class DerivedMetrics:
    """Metrics computed upstream from the nutrition panel."""

    carb_estimated: float | None = None
    meat_score: float | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DerivedMetrics":
        return cls(
            carb_estimated=_optional_float(data.get("carbEstimated")),
            meat_score=_optional_float(data.get("meatScore")),
        )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {}
        if self.carb_estimated is not None:
            result["carbEstimated"] = self.carb_estimated
        if self.meat_score is not None:
            result["meatScore"] = self.meat_score
        return result


@dataclass
class Candidate:
    """
    A catalog product as returned by the catalog collaborator.

    Attributes:
        id: Catalog product identifier
        name: Product name
        brand: Brand name
        detail_url: Public product page
        form: Dry or wet, when known
        condition_tags: Health condition tags (e.g. "urinary", "hairball")
        ingredients_preview: First few ingredients (list views, up to 5)
        ingredients_full: Complete ingredient list (detail views)
        nutrition: Guaranteed analysis, when published
        derived_metrics: Upstream-computed metrics, when available
    """

    id: str
    name: str
    brand: str
    detail_url: str = ""
    form: ProductForm | None = None
    condition_tags: list[str] = field(default_factory=list)
    ingredients_preview: list[str] = field(default_factory=list)
    ingredients_full: list[str] = field(default_factory=list)
    nutrition: NutritionInfo | None = None
    derived_metrics: DerivedMetrics | None = None
    image_url: str | None = None
    life_stage_tags: list[str] = field(default_factory=list)
    energy_kcal_per_kg: float | None = None
    has_offer: bool = False

    @property
    def has_ingredient_data(self) -> bool:
        """True when either preview or full ingredient data is present."""
        return bool(self.ingredients_preview) or bool(self.ingredients_full)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Candidate":
        """Build a Candidate from a camelCase catalog payload."""
        form = data.get("form")
        nutrition = data.get("nutrition")
        derived = data.get("derivedMetrics")
        return cls(
            id=str(data["id"]),
            name=data.get("name") or "",
            brand=data.get("brand") or "",
            detail_url=data.get("detailUrl") or "",
            form=ProductForm(form) if form else None,
            condition_tags=list(data.get("conditionTags") or []),
            ingredients_preview=list(data.get("ingredientsPreview") or []),
            ingredients_full=list(data.get("ingredientsFull") or []),
            nutrition=NutritionInfo.from_dict(nutrition) if nutrition else None,
            derived_metrics=DerivedMetrics.from_dict(derived) if derived else None,
            image_url=data.get("imageUrl"),
            life_stage_tags=list(data.get("lifeStageTags") or []),
            energy_kcal_per_kg=_optional_float(data.get("energyKcalPerKg")),
            has_offer=bool(data.get("hasOffer", False)),
        )

    def to_dict(self) -> dict[str, Any]:
        """Full camelCase projection used by the product detail tool."""
        result: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "brand": self.brand,
            "detailUrl": self.detail_url,
            "conditionTags": list(self.condition_tags),
            "lifeStageTags": list(self.life_stage_tags),
            "ingredientsPreview": list(self.ingredients_preview),
            "ingredientsFull": list(self.ingredients_full),
            "hasOffer": self.has_offer,
        }
        if self.form is not None:
            result["form"] = self.form.value
        if self.image_url:
            result["imageUrl"] = self.image_url
        if self.nutrition is not None:
            result["nutrition"] = self.nutrition.to_dict()
        if self.derived_metrics is not None:
            result["derivedMetrics"] = self.derived_metrics.to_dict()
        if self.energy_kcal_per_kg is not None:
            result["energyKcalPerKg"] = self.energy_kcal_per_kg
        return result

    def to_comparison_dict(self) -> dict[str, Any]:
        """Side-by-side projection: no ingredient lists and no offer data."""
        result: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "brand": self.brand,
            "detailUrl": self.detail_url,
            "lifeStageTags": list(self.life_stage_tags),
            "conditionTags": list(self.condition_tags),
            "hasOffer": False,
        }
        if self.image_url:
            result["imageUrl"] = self.image_url
        if self.form is not None:
            result["form"] = self.form.value
        if self.nutrition is not None:
            nutrition = self.nutrition.to_dict()
            nutrition.pop("ash", None)
            result["nutrition"] = nutrition
        if self.derived_metrics is not None:
            result["derivedMetrics"] = self.derived_metrics.to_dict()
        return result


@dataclass
class CatalogQuery:
    """
    Parameters forwarded to the catalog collaborator's list endpoint.

    Only fields that are set are emitted by ``to_params``.
    """

    limit: int
    offset: int = 0
    search: str | None = None
    form: str | None = None
    conditions: str | None = None
    min_protein: float | None = None
    max_carbs: float | None = None

    def to_params(self) -> dict[str, str]:
        params: dict[str, str] = {}
        if self.search:
            params["search"] = self.search
        if self.form:
            params["form"] = self.form
        if self.conditions:
            params["conditions"] = self.conditions
        if self.min_protein is not None:
            params["minProtein"] = str(self.min_protein)
        if self.max_carbs is not None:
            params["maxCarbs"] = str(self.max_carbs)
        params["limit"] = str(self.limit)
        params["offset"] = str(self.offset)
        return params


@dataclass
class CatalogPage:
    """
    One page of catalog results plus the upstream pagination metadata.

    ``has_more`` is None when the upstream omitted the flag.
    """

    items: list[Candidate]
    total: int
    limit: int
    offset: int
    has_more: bool | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CatalogPage":
        meta = data.get("meta") or {}
        items = [Candidate.from_dict(item) for item in data.get("items") or []]
        has_more = meta.get("hasMore")
        return cls(
            items=items,
            total=int(meta.get("total", len(items))),
            limit=int(meta.get("limit", len(items))),
            offset=int(meta.get("offset", 0)),
            has_more=bool(has_more) if has_more is not None else None,
        )


@dataclass
class ComparisonPage:
    """
    Products returned by the catalog's compare endpoint.

    ``requested`` and ``compared`` are 0 when the upstream omitted them;
    the service falls back to the caller's and the returned counts.
    """

    products: list[Candidate]
    requested: int = 0
    compared: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ComparisonPage":
        return cls(
            products=[Candidate.from_dict(item) for item in data.get("products") or []],
            requested=int(data.get("requested") or 0),
            compared=int(data.get("compared") or 0),
        )


@dataclass
class CurationPage:
    """
    A curated best-of category page.

    Attributes:
        slug: Page identifier (e.g. "low-carb-cat-food")
        recommended_product_ids: Ranked product ids, best first
        sections: Extended content blocks (heading, capsule, content)
        faq: Question/answer pairs
    """

    slug: str
    title: str = ""
    description: str = ""
    tldr: list[str] = field(default_factory=list)
    criteria: list[str] = field(default_factory=list)
    methodology: str = ""
    recommended_product_ids: list[str] = field(default_factory=list)
    updated_at: str = ""
    canonical_url: str = ""
    sections: list[dict[str, str]] | None = None
    faq: list[dict[str, str]] | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CurationPage":
        sections = data.get("sections")
        faq = data.get("faq")
        return cls(
            slug=str(data["slug"]),
            title=data.get("title") or "",
            description=data.get("description") or "",
            tldr=list(data.get("tldr") or []),
            criteria=list(data.get("criteria") or []),
            methodology=data.get("methodology") or "",
            recommended_product_ids=[
                str(pid) for pid in data.get("recommendedProductIds") or []
            ],
            updated_at=data.get("updatedAt") or "",
            canonical_url=data.get("canonicalUrl") or "",
            sections=[dict(s) for s in sections] if sections is not None else None,
            faq=[dict(f) for f in faq] if faq is not None else None,
        )

    def to_dict(
        self, include_sections: bool = False, include_faq: bool = False
    ) -> dict[str, Any]:
        """Summary projection; sections and FAQ are opt-in."""
        result: dict[str, Any] = {
            "slug": self.slug,
            "title": self.title,
            "description": self.description,
            "tldr": list(self.tldr),
            "criteria": list(self.criteria),
            "methodology": self.methodology,
            "recommendedProductIds": list(self.recommended_product_ids),
            "updatedAt": self.updated_at,
            "canonicalUrl": self.canonical_url,
        }
        if include_sections and self.sections is not None:
            result["sections"] = [dict(s) for s in self.sections]
        if include_faq and self.faq is not None:
            result["faq"] = [dict(f) for f in self.faq]
        return result


__all__ = [
    "Candidate",
    "CatalogPage",
    "CatalogQuery",
    "ComparisonPage",
    "CurationPage",
    "DerivedMetrics",
    "NutritionInfo",
    "ProductForm",
]
