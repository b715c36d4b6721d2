# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Deterministic free-text search over the tool catalog.

Scoring weights, in descending priority: resource-name token matches
(exact, then prefix, then fuzzy), operation-verb matches, domain token
matches, then free-text summary/description substring matches. Results are
ordered by descending score with ties broken by tool name, so identical
queries always produce identical lists.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Final

from ..catalog.cache import CatalogCache
from ..catalog.model_catalog import CatalogSnapshot
from ..catalog.model_tool import DangerLevel, Operation, ToolDescriptor
from ..catalog.types import resource_key
from ..results import Failure, not_found

LOGGER = logging.getLogger(__name__)

EXACT_RESOURCE_WEIGHT: Final[float] = 3.0
PREFIX_RESOURCE_WEIGHT: Final[float] = 1.5
FUZZY_RESOURCE_WEIGHT: Final[float] = 1.0
OPERATION_WEIGHT: Final[float] = 2.0
DOMAIN_WEIGHT: Final[float] = 0.75
TEXT_WEIGHT: Final[float] = 0.5
MAX_TERM_SCORE: Final[float] = EXACT_RESOURCE_WEIGHT + OPERATION_WEIGHT + DOMAIN_WEIGHT + TEXT_WEIGHT

MIN_PREFIX_LENGTH: Final[int] = 3
MIN_FUZZY_LENGTH: Final[int] = 4

DEFAULT_LIMIT: Final[int] = 10
DEFAULT_MAX_LIMIT: Final[int] = 50
DEFAULT_MIN_SCORE: Final[float] = 0.1
DEFAULT_FUZZY_DISTANCE: Final[int] = 2

OPERATION_TERMS: Final[dict[str, Operation]] = {
    "create": Operation.CREATE,
    "add": Operation.CREATE,
    "new": Operation.CREATE,
    "get": Operation.GET,
    "read": Operation.GET,
    "show": Operation.GET,
    "list": Operation.LIST,
    "update": Operation.UPDATE,
    "patch": Operation.UPDATE,
    "replace": Operation.UPDATE,
    "delete": Operation.DELETE,
    "remove": Operation.DELETE,
}

_SEPARATORS = re.compile(r"[-_]")
_NON_ALNUM = re.compile(r"[^a-z0-9\s]")


def normalize_text(text: str) -> str:
    """Lowercase ``text``, turn ``-``/``_`` into spaces and drop punctuation."""

    return _NON_ALNUM.sub("", _SEPARATORS.sub(" ", text.lower())).strip()


def tokenize(text: str) -> tuple[str, ...]:
    """Split normalised ``text`` into terms longer than one character."""

    return tuple(term for term in normalize_text(text).split() if len(term) > 1)


def levenshtein(left: str, right: str, max_distance: int) -> int:
    """Return the edit distance of two strings, or ``max_distance + 1`` once exceeded."""

    if abs(len(left) - len(right)) > max_distance:
        return max_distance + 1
    previous = list(range(len(right) + 1))
    for row, left_char in enumerate(left, start=1):
        current = [row]
        for column, right_char in enumerate(right, start=1):
            cost = 0 if left_char == right_char else 1
            current.append(min(previous[column] + 1, current[column - 1] + 1, previous[column - 1] + cost))
        if min(current) > max_distance:
            return max_distance + 1
        previous = current
    return previous[-1]


@dataclass(frozen=True, slots=True)
class SearchFilters:
    """Hard pre-filters and options applied to a search."""

    domains: frozenset[str] = frozenset()
    operations: frozenset[Operation] = frozenset()
    limit: int | None = None
    min_score: float | None = None
    exclude_dangerous: bool = False
    include_dependencies: bool = False


@dataclass(frozen=True, slots=True)
class PrerequisiteHint:
    """Prerequisites advertised alongside a create tool."""

    resources: tuple[str, ...]
    hint: str


@dataclass(frozen=True, slots=True)
class SearchHit:
    """Ranked search result."""

    tool: ToolDescriptor
    score: float
    matched_terms: tuple[str, ...]
    prerequisites: PrerequisiteHint | None = None


@dataclass(frozen=True, slots=True)
class ResourceMatch:
    """Search hits consolidated per ``domain/resource``."""

    domain: str
    resource: str
    score: float
    operations: tuple[Operation, ...]
    tool_names: tuple[str, ...]

    @property
    def key(self) -> str:
        """Return the ``domain/resource`` key."""

        return resource_key(self.domain, self.resource)


@dataclass(frozen=True, slots=True)
class _IndexedTool:
    tool: ToolDescriptor
    resource_terms: frozenset[str]
    domain_terms: frozenset[str]
    text: str


@dataclass(slots=True)
class SearchIndex:
    """Pre-tokenised view of a catalog snapshot."""

    snapshot: CatalogSnapshot
    entries: tuple[_IndexedTool, ...] = field(init=False)

    def __post_init__(self) -> None:
        self.entries = tuple(
            _IndexedTool(
                tool=tool,
                resource_terms=frozenset(tokenize(tool.resource)),
                domain_terms=frozenset(tokenize(tool.domain)),
                text=normalize_text(" ".join((tool.name, tool.summary, tool.description))),
            )
            for tool in snapshot_tools(self.snapshot)
        )
        LOGGER.debug("Search index built over %d tools", len(self.entries))


def snapshot_tools(snapshot: CatalogSnapshot) -> tuple[ToolDescriptor, ...]:
    """Return the snapshot's descriptors sorted by name."""

    return tuple(sorted(snapshot.tools, key=lambda tool: tool.name))


class SearchEngine:
    """Rank catalog entries against a free-text query."""

    def __init__(
        self,
        cache: CatalogCache,
        *,
        default_limit: int = DEFAULT_LIMIT,
        max_limit: int = DEFAULT_MAX_LIMIT,
        min_score: float = DEFAULT_MIN_SCORE,
        fuzzy_max_edit_distance: int = DEFAULT_FUZZY_DISTANCE,
    ) -> None:
        """Create a search engine over the snapshot held by ``cache``."""

        self._cache = cache
        self._default_limit = default_limit
        self._max_limit = max_limit
        self._min_score = min_score
        self._fuzzy_distance = fuzzy_max_edit_distance
        self._index: SearchIndex | None = None

    def index(self) -> SearchIndex:
        """Return the search index, rebuilding it when the snapshot changed."""

        snapshot = self._cache.snapshot()
        if self._index is None or self._index.snapshot is not snapshot:
            self._index = SearchIndex(snapshot)
        return self._index

    def search(self, query: str, filters: SearchFilters | None = None) -> tuple[SearchHit, ...]:
        """Return tools ranked against ``query``.

        Args:
            query: Free-text query such as ``"list origin pool"``.
            filters: Domain and operation pre-filters plus result options.

        Returns:
            tuple[SearchHit, ...]: Hits sorted by descending score, then tool name.
        """
        active = filters or SearchFilters()
        hits = self._ranked(query, active)
        return hits[: self._limit(active)]

    def search_resources(self, query: str, filters: SearchFilters | None = None) -> tuple[ResourceMatch, ...]:
        """Return matches consolidated per resource, best score first."""

        active = filters or SearchFilters()
        grouped: dict[str, list[SearchHit]] = {}
        for hit in self._ranked(query, active):
            grouped.setdefault(hit.tool.resource_key, []).append(hit)
        matches = [
            ResourceMatch(
                domain=hits[0].tool.domain,
                resource=hits[0].tool.resource,
                score=hits[0].score,
                operations=tuple(sorted({hit.tool.operation for hit in hits}, key=_operation_order)),
                tool_names=tuple(hit.tool.name for hit in hits),
            )
            for hits in grouped.values()
        ]
        matches.sort(key=lambda match: (-match.score, match.key))
        return tuple(matches[: self._limit(active)])

    def describe(self, name: str) -> ToolDescriptor | Failure:
        """Return the descriptor named ``name`` or a ``NOT_FOUND`` failure."""

        tool = self._cache.snapshot().get(name)
        if tool is None:
            return not_found(f'Tool "{name}" not found', subject=name)
        return tool

    def tools_by_resource(self, resource: str) -> tuple[ToolDescriptor, ...]:
        """Return tools whose normalised resource name contains ``resource``."""

        needle = normalize_text(resource)
        return tuple(
            entry.tool for entry in self.index().entries if needle and needle in normalize_text(entry.tool.resource)
        )

    def _limit(self, filters: SearchFilters) -> int:
        requested = filters.limit if filters.limit is not None else self._default_limit
        return max(0, min(requested, self._max_limit))

    def _ranked(self, query: str, filters: SearchFilters) -> list[SearchHit]:
        terms = tokenize(query)
        if not terms:
            return []
        min_score = filters.min_score if filters.min_score is not None else self._min_score
        hits: list[SearchHit] = []
        for entry in self.index().entries:
            tool = entry.tool
            if filters.domains and tool.domain not in filters.domains:
                continue
            if filters.operations and tool.operation not in filters.operations:
                continue
            if filters.exclude_dangerous and tool.danger_level is DangerLevel.HIGH:
                continue
            raw_score, matched = self._score(entry, terms)
            if raw_score <= 0:
                continue
            score = round(raw_score / (len(terms) * MAX_TERM_SCORE), 6)
            if score < min_score:
                continue
            hint = self._prerequisite_hint(tool) if filters.include_dependencies else None
            hits.append(SearchHit(tool=tool, score=score, matched_terms=matched, prerequisites=hint))
        hits.sort(key=lambda hit: (-hit.score, hit.tool.name))
        return hits

    def _score(self, entry: _IndexedTool, terms: Iterable[str]) -> tuple[float, tuple[str, ...]]:
        total = 0.0
        matched: list[str] = []
        for term in terms:
            term_score = self._resource_score(term, entry.resource_terms)
            if OPERATION_TERMS.get(term) is entry.tool.operation:
                term_score += OPERATION_WEIGHT
            if term in entry.domain_terms:
                term_score += DOMAIN_WEIGHT
            if term in entry.text:
                term_score += TEXT_WEIGHT
            if term_score > 0:
                matched.append(term)
                total += term_score
        return total, tuple(matched)

    def _resource_score(self, term: str, resource_terms: frozenset[str]) -> float:
        if term in resource_terms:
            return EXACT_RESOURCE_WEIGHT
        if len(term) >= MIN_PREFIX_LENGTH and any(candidate.startswith(term) for candidate in resource_terms):
            return PREFIX_RESOURCE_WEIGHT
        if len(term) >= MIN_FUZZY_LENGTH and any(
            levenshtein(term, candidate, self._fuzzy_distance) <= self._fuzzy_distance
            for candidate in sorted(resource_terms)
            if len(candidate) >= MIN_FUZZY_LENGTH
        ):
            return FUZZY_RESOURCE_WEIGHT
        return 0.0

    def _prerequisite_hint(self, tool: ToolDescriptor) -> PrerequisiteHint | None:
        if tool.operation is not Operation.CREATE:
            return None
        graph = self._cache.snapshot().graph
        if graph.get(tool.domain, tool.resource) is None:
            return None
        prerequisites = graph.prerequisites(tool.domain, tool.resource)
        if prerequisites:
            hint = f"To create {tool.resource}, you first need: {', '.join(ref.resource for ref in prerequisites)}"
        else:
            hint = f"No strict prerequisites for {tool.resource}"
        return PrerequisiteHint(resources=tuple(ref.key for ref in prerequisites), hint=hint)


_OPERATION_ORDER: Final[dict[Operation, int]] = {operation: index for index, operation in enumerate(Operation)}


def _operation_order(operation: Operation) -> int:
    return _OPERATION_ORDER[operation]


__all__ = [
    "PrerequisiteHint",
    "ResourceMatch",
    "SearchEngine",
    "SearchFilters",
    "SearchHit",
    "SearchIndex",
    "levenshtein",
    "normalize_text",
    "tokenize",
]
