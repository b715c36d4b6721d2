# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Facade wiring the catalog, resolvers and discovery services together.

:class:`CatalogPlanner` is the single entry point most callers need. It
owns one :class:`~toolplan.catalog.cache.CatalogCache` and hands it to
every service so that the catalog is loaded at most once per process.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from pathlib import Path

from .catalog.cache import CacheStats, CatalogCache
from .catalog.loader import CatalogLoader
from .catalog.model_dependency import GraphStats, ResourceRef
from .catalog.model_tool import ToolDescriptor
from .catalog.types import JSONValue
from .config import PlannerSettings
from .discovery.cost import CostEstimator, ToolCostEstimate, WorkflowCostEstimate
from .discovery.search import ResourceMatch, SearchEngine, SearchFilters, SearchHit
from .discovery.suggest import ParameterSuggester, Suggestion
from .discovery.validate import ParameterValidator, ValidationResult
from .resolution.dependencies import CreationPlan, DependencyResolver, ResolveOptions
from .resolution.extraction import extract_field_defaults, extract_required_fields
from .resolution.models import FieldDefault, MinimumConfiguration, MutuallyExclusiveGroup, ResolvedSchema
from .resolution.schema_resolver import SchemaResolver
from .results import Failure, not_found

LOGGER = logging.getLogger(__name__)


class CatalogPlanner:
    """Answer discovery, planning, validation and cost questions over one catalog."""

    def __init__(self, settings: PlannerSettings | None = None, *, catalog_root: Path | None = None) -> None:
        """Create a planner from ``settings`` or a bare ``catalog_root``.

        Args:
            settings: Planner settings; defaults apply when omitted.
            catalog_root: Overrides ``settings.catalog_root`` when provided.
        """
        resolved = settings.model_copy() if settings is not None else PlannerSettings()
        if catalog_root is not None:
            resolved.catalog_root = catalog_root
        self._settings = resolved
        loader = CatalogLoader(resolved.catalog_root, validate_documents=resolved.validate_documents)
        self._cache = CatalogCache(loader)
        self._schemas = SchemaResolver(self._cache, max_depth=resolved.schema_max_depth)
        self._dependencies = DependencyResolver(self._cache, self._schemas)
        self._search = SearchEngine(
            self._cache,
            default_limit=resolved.search_limit,
            max_limit=resolved.search_max_limit,
            min_score=resolved.search_min_score,
            fuzzy_max_edit_distance=resolved.fuzzy_max_edit_distance,
        )
        self._validator = ParameterValidator(self._cache, self._schemas)
        self._costs = CostEstimator(self._cache)
        self._suggester = ParameterSuggester(self._cache, self._schemas)
        LOGGER.debug("Planner created for catalog %s", resolved.catalog_root)

    @property
    def settings(self) -> PlannerSettings:
        """Return the effective settings."""

        return self._settings

    @property
    def cache(self) -> CatalogCache:
        """Return the shared catalog cache."""

        return self._cache

    # Discovery -----------------------------------------------------------

    def search(self, query: str, filters: SearchFilters | None = None) -> tuple[SearchHit, ...]:
        """Return tools ranked against ``query``."""

        return self._search.search(query, filters)

    def search_resources(self, query: str, filters: SearchFilters | None = None) -> tuple[ResourceMatch, ...]:
        """Return search matches consolidated per resource."""

        return self._search.search_resources(query, filters)

    def describe(self, tool_name: str) -> ToolDescriptor | Failure:
        """Return the descriptor of ``tool_name``."""

        return self._search.describe(tool_name)

    def tools_for_domain(self, domain: str) -> tuple[ToolDescriptor, ...]:
        return self._cache.snapshot().tools_for_domain(domain)

    def domains(self) -> tuple[str, ...]:
        return self._cache.snapshot().domains()

    def tool_counts(self) -> dict[str, int]:
        return self._cache.snapshot().tool_counts()

    # Schemas -------------------------------------------------------------

    def resolve_schema(self, tool_name: str) -> ResolvedSchema | Failure:
        """Return the fully resolved request body schema of ``tool_name``.

        Returns:
            ResolvedSchema | Failure: Resolved schema, or ``NOT_FOUND`` when the
            tool is unknown or takes no request body.
        """
        tool = self._cache.snapshot().get(tool_name)
        if tool is None:
            return not_found(f'Tool "{tool_name}" not found', subject=tool_name)
        if tool.request_body is None:
            return not_found(f"Tool {tool_name} has no request body", subject=tool_name)
        return self._schemas.resolve(tool.request_body, tool.domain)

    def resolve_definition(self, name: str, domain: str) -> ResolvedSchema | Failure:
        """Return the named definition of ``domain`` fully resolved."""

        resolved = self._schemas.resolve_definition(name, domain)
        if resolved is None:
            return not_found(f"Schema definition {name} not found for domain {domain}", subject=name)
        return resolved

    def required_fields(self, tool_name: str) -> tuple[str, ...] | Failure:
        """Return dotted paths of every required request field."""

        schema = self.resolve_schema(tool_name)
        if isinstance(schema, Failure):
            return schema
        return extract_required_fields(schema)

    def field_defaults(self, tool_name: str) -> tuple[FieldDefault, ...] | Failure:
        """Return default, server-default and recommended values per field."""

        schema = self.resolve_schema(tool_name)
        if isinstance(schema, Failure):
            return schema
        return extract_field_defaults(schema)

    def exclusive_groups(self, tool_name: str) -> tuple[MutuallyExclusiveGroup, ...] | Failure:
        """Return the mutually-exclusive groups that apply to ``tool_name``."""

        tool = self._cache.snapshot().get(tool_name)
        if tool is None:
            return not_found(f'Tool "{tool_name}" not found', subject=tool_name)
        return self._validator.exclusive_groups(tool)

    # Dependencies --------------------------------------------------------

    def resolve(
        self,
        resource: str,
        domain: str,
        *,
        existing_resources: Iterable[str] = (),
        include_optional: bool = False,
        expand_alternatives: bool = False,
        max_depth: int | None = None,
    ) -> CreationPlan | Failure:
        """Return the creation plan for ``domain``/``resource``.

        Args:
            resource: Target resource type.
            domain: Domain of the target.
            existing_resources: ``domain/resource`` keys that already exist.
            include_optional: Also plan optional prerequisites.
            expand_alternatives: Derive alternative plans for resource choices.
            max_depth: Overrides ``settings.dependency_max_depth``.

        Returns:
            CreationPlan | Failure: The plan or a ``NOT_FOUND`` failure.
        """
        options = ResolveOptions(
            existing_resources=frozenset(existing_resources),
            include_optional=include_optional,
            expand_alternatives=expand_alternatives,
            max_depth=max_depth if max_depth is not None else self._settings.dependency_max_depth,
        )
        return self._dependencies.resolve(resource, domain, options)

    def compact_plan(
        self,
        resource: str,
        domain: str,
        *,
        existing_resources: Iterable[str] = (),
        include_optional: bool = False,
        expand_alternatives: bool = False,
        max_depth: int | None = None,
    ) -> dict[str, JSONValue] | Failure:
        """Return :meth:`CreationPlan.compact` of the plan :meth:`resolve` builds."""

        plan = self.resolve(
            resource,
            domain,
            existing_resources=existing_resources,
            include_optional=include_optional,
            expand_alternatives=expand_alternatives,
            max_depth=max_depth,
        )
        if isinstance(plan, Failure):
            return plan
        return plan.compact()

    def prerequisites(self, resource: str, domain: str, *, include_optional: bool = False) -> tuple[ResourceRef, ...]:
        return self._cache.snapshot().graph.prerequisites(domain, resource, include_optional=include_optional)

    def dependents(self, resource: str, domain: str) -> tuple[ResourceRef, ...]:
        return self._cache.snapshot().graph.dependents(domain, resource)

    def graph_stats(self) -> GraphStats:
        return self._cache.snapshot().graph.stats()

    # Validation, suggestions and costs ----------------------------------

    def validate(
        self,
        tool_name: str,
        body: Mapping[str, JSONValue] | None = None,
        *,
        path_params: Mapping[str, str] | None = None,
        query_params: Mapping[str, str] | None = None,
    ) -> ValidationResult:
        """Validate a candidate request for ``tool_name``."""

        return self._validator.validate(tool_name, body, path_params=path_params, query_params=query_params)

    def suggest(self, tool_name: str) -> Suggestion | Failure:
        """Return an example request payload for ``tool_name``."""

        return self._suggester.suggest(tool_name)

    def minimum_configuration(self, tool_name: str) -> MinimumConfiguration | Failure:
        return self._suggester.minimum_configuration(tool_name)

    def estimate_tool(self, tool_name: str) -> ToolCostEstimate:
        return self._costs.estimate_tool(tool_name)

    def estimate_tools(self, tool_names: Iterable[str]) -> tuple[ToolCostEstimate, ...]:
        return self._costs.estimate_tools(tool_names)

    def estimate_workflow(self, plan: CreationPlan | Sequence[str]) -> WorkflowCostEstimate:
        """Return the aggregate cost of a plan or an ordered list of tool names."""

        return self._costs.estimate_workflow(plan)

    # Cache ---------------------------------------------------------------

    def cache_stats(self) -> CacheStats:
        return self._cache.stats()

    def clear_cache(self) -> None:
        """Drop every cached document and resolution; the next call reloads."""

        self._cache.clear()
        LOGGER.info("Catalog cache cleared")


__all__ = ["CatalogPlanner"]
