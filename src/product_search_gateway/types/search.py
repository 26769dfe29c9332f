# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Search request and result types.

SearchRequest validates the recognized options of the search surface on
construction; SearchResult is the shaped page handed back to the caller.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ..exceptions import ValidationError
from .catalog import Candidate, ProductForm

MAX_QUERY_LENGTH = 256
DEFAULT_LIMIT = 10
MAX_LIMIT = 20


class SortKey(str, Enum):
    """Client-side sort orders the upstream catalog cannot apply natively."""

    PROTEIN_DESC = "protein_desc"
    CARBS_ASC = "carbs_asc"
    FAT_DESC = "fat_desc"
    MOISTURE_DESC = "moisture_desc"


class MatchType(Enum):
    """How an ingredient filter term is compared against a candidate."""

    EXACT = "exact"  # quoted: word-bounded literal
    PARTIAL = "partial"  # unquoted: substring


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _has_terms(csv: str | None) -> bool:
    # Blank comma-separated entries are not terms
    if not csv:
        return False
    return any(part.strip() for part in csv.split(","))


@dataclass
class SearchRequest:
    """
    A validated search request.

    ``limit`` stays None when the caller omitted it; ``page_size`` applies the
    default. Ingredient filters are raw comma-separated strings; parsing into
    FilterTerms happens in the search pipeline.

    Raises:
        ValidationError: On any out-of-range or malformed option.
    """

    query: str | None = None
    form: str | None = None
    conditions: str | None = None
    include_ingredients: str | None = None
    exclude_ingredients: str | None = None
    min_protein: float | None = None
    max_carbs: float | None = None
    sort_by: str | None = None
    limit: int | None = None
    cursor: int = 0

    def __post_init__(self) -> None:
        for name in (
            "query",
            "form",
            "conditions",
            "include_ingredients",
            "exclude_ingredients",
            "sort_by",
        ):
            value = getattr(self, name)
            if value is not None and not isinstance(value, str):
                raise ValidationError(f"{name} must be a string", field=name)
        if self.query is not None and len(self.query) > MAX_QUERY_LENGTH:
            raise ValidationError(
                f"query must be at most {MAX_QUERY_LENGTH} characters",
                field="query",
            )
        if self.form is not None and self.form not in {f.value for f in ProductForm}:
            raise ValidationError("form must be 'dry' or 'wet'", field="form")
        if self.sort_by is not None and self.sort_by not in {
            k.value for k in SortKey
        }:
            raise ValidationError(
                "sortBy must be one of: "
                + ", ".join(k.value for k in SortKey),
                field="sortBy",
            )
        if self.limit is not None and (
            not _is_int(self.limit) or not 1 <= self.limit <= MAX_LIMIT
        ):
            raise ValidationError(
                f"limit must be an integer between 1 and {MAX_LIMIT}",
                field="limit",
            )
        if not _is_int(self.cursor) or self.cursor < 0:
            raise ValidationError(
                "cursor must be a non-negative integer", field="cursor"
            )
        for name in ("min_protein", "max_carbs"):
            value = getattr(self, name)
            if value is not None and not _is_number(value):
                raise ValidationError(f"{name} must be numeric", field=name)

    @classmethod
    def from_params(cls, params: Mapping[str, Any]) -> "SearchRequest":
        """Build a request from the camelCase options of the search surface."""
        cursor = params.get("cursor")
        return cls(
            query=params.get("query"),
            form=params.get("form"),
            conditions=params.get("conditions"),
            include_ingredients=params.get("includeIngredients"),
            exclude_ingredients=params.get("excludeIngredients"),
            min_protein=params.get("minProtein"),
            max_carbs=params.get("maxCarbs"),
            sort_by=params.get("sortBy"),
            limit=params.get("limit"),
            cursor=cursor if cursor is not None else 0,
        )

    @property
    def page_size(self) -> int:
        return self.limit if self.limit is not None else DEFAULT_LIMIT

    @property
    def has_ingredient_filters(self) -> bool:
        """True when either filter holds at least one non-blank term."""
        return _has_terms(self.include_ingredients) or _has_terms(
            self.exclude_ingredients
        )

    @property
    def needs_client_side_processing(self) -> bool:
        """True when sorting or ingredient filtering must happen locally."""
        return bool(self.sort_by) or self.has_ingredient_filters


@dataclass
class SearchResultItem:
    """Lean projection of a candidate; full data comes from the detail tool."""

    id: str
    name: str
    brand: str
    ingredients_preview: list[str]
    detail_url: str
    form: str | None = None

    @classmethod
    def from_candidate(cls, candidate: Candidate) -> "SearchResultItem":
        return cls(
            id=candidate.id,
            name=candidate.name,
            brand=candidate.brand,
            form=candidate.form.value if candidate.form else None,
            ingredients_preview=list(candidate.ingredients_preview),
            detail_url=candidate.detail_url,
        )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "brand": self.brand,
            "ingredientsPreview": self.ingredients_preview,
            "detailUrl": self.detail_url,
        }
        if self.form is not None:
            result["form"] = self.form
        return result


@dataclass
class SearchResult:
    """
    One page of search results.

    Attributes:
        items: Ordered page of trimmed candidate projections
        total: Filtered count (client mode) or upstream total (pass-through)
        has_more: Whether another page exists
        cursor: Offset to send for the next page
        filter_note: Explains ingredient matching scope when filtering ran
        suggestions: Advisory hints when strict filtering matched nothing
    """

    items: list[SearchResultItem]
    total: int
    has_more: bool
    cursor: int
    filter_note: str | None = None
    suggestions: list[str] | None = field(default=None)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "items": [item.to_dict() for item in self.items],
            "total": self.total,
            "hasMore": self.has_more,
            "cursor": self.cursor,
        }
        if self.filter_note:
            result["filterNote"] = self.filter_note
        if self.suggestions:
            result["suggestions"] = list(self.suggestions)
        return result


__all__ = [
    "DEFAULT_LIMIT",
    "MAX_LIMIT",
    "MAX_QUERY_LENGTH",
    "MatchType",
    "SearchRequest",
    "SearchResult",
    "SearchResultItem",
    "SortKey",
]
