# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Ingredient filter terms and candidate matching.

A term wrapped in double quotes is an exact match: the quotes are stripped
and the literal must appear on word boundaries within one searched field.
Any other term is a case-insensitive substring test.

Searched fields are the candidate's name, brand, condition tags and
ingredient preview. The full ingredient list is not searched.
"""

import functools
import logging
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from ..types.catalog import Candidate
from ..types.search import MatchType

logger = logging.getLogger(__name__)

# Letters, digits, whitespace and -'.() only
_SAFE_LITERAL = re.compile(r"^(?:[^\W_]|[\s\-'.()])+$")
_QUOTED = re.compile(r'^"(.+)"$', re.DOTALL)


def is_safe_literal(literal: str) -> bool:
    """True when ``literal`` may be compiled into a word-boundary pattern."""
    return bool(_SAFE_LITERAL.match(literal))


@functools.lru_cache(maxsize=256)
def compile_exact_pattern(literal: str) -> re.Pattern[str]:
    """Compile (once per literal) a case-insensitive word-boundary pattern."""
    return re.compile(rf"\b{re.escape(literal)}\b", re.IGNORECASE)


@dataclass(frozen=True)
class SearchableCandidate:
    """
    A candidate plus its lowercase searchable fields.

    Built once per candidate per request; read-only thereafter.
    """

    candidate: Candidate
    fields: tuple[str, ...]
    search_text: str

    @classmethod
    def from_candidate(cls, candidate: Candidate) -> "SearchableCandidate":
        fields = tuple(
            value.lower()
            for value in (
                candidate.name,
                candidate.brand,
                *candidate.condition_tags,
                *candidate.ingredients_preview,
            )
        )
        return cls(candidate=candidate, fields=fields, search_text=" ".join(fields))


@dataclass(frozen=True)
class FilterTerm:
    """
    One parsed include/exclude term.

    Attributes:
        raw_value: Term as the caller wrote it (whitespace-trimmed)
        match_type: EXACT for quoted terms, PARTIAL otherwise
        normalized_value: Lowercased literal with any quotes stripped
        compiled_matcher: Word-boundary pattern for safe exact literals;
            None for partial terms and for exact terms that degraded to
            substring matching
    """

    raw_value: str
    match_type: MatchType
    normalized_value: str
    compiled_matcher: re.Pattern[str] | None = field(default=None, compare=False)

    @classmethod
    def parse(cls, raw: str) -> "FilterTerm":
        raw = raw.strip()
        quoted = _QUOTED.match(raw)
        if quoted is None:
            return cls(raw, MatchType.PARTIAL, raw.lower())

        literal = quoted.group(1).lower()
        if not is_safe_literal(literal):
            logger.warning(
                f"Exact ingredient term contains unsafe characters, "
                f"falling back to partial matching: {literal!r}"
            )
            return cls(raw, MatchType.EXACT, literal)
        return cls(raw, MatchType.EXACT, literal, compile_exact_pattern(literal))

    def matches(self, fields: Iterable[str]) -> bool:
        """True if any lowercase field satisfies this term."""
        if self.compiled_matcher is not None:
            pattern = self.compiled_matcher
            return any(pattern.search(value) for value in fields)
        return any(self.normalized_value in value for value in fields)

    def relaxed(self) -> "FilterTerm":
        """Always-partial, quote-stripped version of this term."""
        return FilterTerm(self.raw_value, MatchType.PARTIAL, self.normalized_value)


def parse_terms(csv: str | None) -> list[FilterTerm]:
    """Split a comma-separated term list; empty terms are dropped."""
    if not csv:
        return []
    return [FilterTerm.parse(part) for part in csv.split(",") if part.strip()]


class IngredientMatcher:
    """
    Applies include and exclude terms to candidates.

    A candidate passes when it matches every include term and no exclude
    term. With no terms at all, every candidate passes.
    """

    def __init__(
        self,
        include_terms: Sequence[FilterTerm] = (),
        exclude_terms: Sequence[FilterTerm] = (),
    ) -> None:
        self.include_terms = list(include_terms)
        self.exclude_terms = list(exclude_terms)

    @property
    def is_active(self) -> bool:
        return bool(self.include_terms) or bool(self.exclude_terms)

    def matches(self, candidate: SearchableCandidate) -> bool:
        fields = candidate.fields
        if not all(term.matches(fields) for term in self.include_terms):
            return False
        return not any(term.matches(fields) for term in self.exclude_terms)

    def filter(
        self, candidates: Iterable[SearchableCandidate]
    ) -> list[SearchableCandidate]:
        return [candidate for candidate in candidates if self.matches(candidate)]


__all__ = [
    "FilterTerm",
    "IngredientMatcher",
    "SearchableCandidate",
    "compile_exact_pattern",
    "is_safe_literal",
    "parse_terms",
]
