# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Turn a target resource into an ordered, deduplicated creation plan.

The resolver performs a post-order depth-first walk over the static
dependency graph: prerequisites are emitted before the resource that needs
them, and a shared prerequisite is emitted once, at its first discovery.
Every ``depends_on`` entry of step ``i`` therefore names a step with a
smaller index.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import Final

from ..catalog.cache import CatalogCache
from ..catalog.model_dependency import DependencyGraphEntry, ResourceChoice, ResourceRef, SubscriptionRequirement
from ..catalog.model_tool import Operation
from ..catalog.types import JSONValue, resource_key
from ..results import ErrorKind, Failure, not_found
from .extraction import extract_required_fields
from .schema_resolver import SchemaResolver

LOGGER = logging.getLogger(__name__)

DEFAULT_DEPENDENCY_DEPTH: Final[int] = 10
LOW_COMPLEXITY_MAX_STEPS: Final[int] = 2
MEDIUM_COMPLEXITY_MAX_STEPS: Final[int] = 5


class Complexity(str, Enum):
    """Plan complexity derived from its step count."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @classmethod
    def classify(cls, step_count: int) -> Complexity:
        """Return ``low`` for up to 2 steps, ``medium`` up to 5, else ``high``."""

        if step_count <= LOW_COMPLEXITY_MAX_STEPS:
            return cls.LOW
        if step_count <= MEDIUM_COMPLEXITY_MAX_STEPS:
            return cls.MEDIUM
        return cls.HIGH


@dataclass(frozen=True, slots=True)
class ResolveOptions:
    """Options controlling dependency resolution.

    Attributes:
        existing_resources: ``domain/resource`` keys that already exist and are skipped.
        include_optional: Also plan optional prerequisites.
        expand_alternatives: Derive one alternative plan per resource-level choice.
        max_depth: Recursion bound; deeper prerequisites are not expanded.
    """

    existing_resources: frozenset[str] = frozenset()
    include_optional: bool = False
    expand_alternatives: bool = False
    max_depth: int = DEFAULT_DEPENDENCY_DEPTH


@dataclass(frozen=True, slots=True)
class WorkflowStep:
    """One resource creation inside a plan."""

    step_number: int
    domain: str
    resource: str
    tool_name: str | None
    depends_on: tuple[str, ...]
    required_inputs: tuple[str, ...] = ()
    choices: tuple[ResourceChoice, ...] = ()
    optional: bool = False

    @property
    def key(self) -> str:
        """Return the ``domain/resource`` key of the step."""

        return resource_key(self.domain, self.resource)

    def compact(self) -> dict[str, JSONValue]:
        """Return the low-footprint projection of the step."""

        return {
            "tool": self.tool_name,
            "resource": self.key,
            "inputs": list(self.required_inputs),
            "choices": {choice.field: list(choice.options) for choice in self.choices},
        }


@dataclass(frozen=True, slots=True)
class AlternativePlan:
    """Plan variant selecting a non-default option of one resource-level choice."""

    resource: str
    choice_field: str
    selected_option: str
    steps: tuple[WorkflowStep, ...]
    description: str


@dataclass(frozen=True, slots=True)
class CreationPlan:
    """Ordered steps needed to bring a target resource into existence."""

    target: str
    steps: tuple[WorkflowStep, ...]
    complexity: Complexity
    warnings: tuple[str, ...] = ()
    alternatives: tuple[AlternativePlan, ...] = ()
    subscriptions: tuple[SubscriptionRequirement, ...] = ()
    existing_resources: tuple[str, ...] = ()
    truncated: tuple[str, ...] = ()
    notices: tuple[Failure, ...] = ()

    @property
    def total_steps(self) -> int:
        """Return the number of steps in the plan."""

        return len(self.steps)

    @property
    def depth_exceeded(self) -> bool:
        """Return ``True`` when the depth bound truncated the plan."""

        return bool(self.truncated)

    def tool_names(self) -> tuple[str, ...]:
        """Return the create tool of each step, skipping steps without one."""

        return tuple(step.tool_name for step in self.steps if step.tool_name is not None)

    def subscription_summary(self) -> tuple[str, ...]:
        """Return one human-readable line per aggregated subscription."""

        return tuple(subscription.describe() for subscription in self.subscriptions)

    def compact(self) -> dict[str, JSONValue]:
        """Return the compact projection of the plan."""

        return {
            "target": self.target,
            "complexity": self.complexity.value,
            "steps": [step.compact() for step in self.steps],
            "warnings": list(self.warnings),
        }


@dataclass(frozen=True, slots=True)
class _Override:
    """Prerequisite substitution applied to one resource while deriving an alternative."""

    resource: str
    remove: ResourceRef | None
    add: ResourceRef | None


@dataclass(slots=True)
class _Traversal:
    options: ResolveOptions
    override: _Override | None = None
    steps: list[WorkflowStep] = field(default_factory=list)
    emitted: set[str] = field(default_factory=set)
    in_progress: set[str] = field(default_factory=set)
    warnings: list[str] = field(default_factory=list)
    existing: list[str] = field(default_factory=list)
    truncated: list[str] = field(default_factory=list)
    subscriptions: dict[tuple[str, str | None], SubscriptionRequirement] = field(default_factory=dict)

    def warn(self, message: str) -> None:
        if message not in self.warnings:
            self.warnings.append(message)

    def mark_existing(self, key: str) -> None:
        if key not in self.existing:
            self.existing.append(key)


class DependencyResolver:
    """Build creation plans from the dependency graph and the catalog index."""

    def __init__(self, cache: CatalogCache, schemas: SchemaResolver) -> None:
        """Create a resolver reading the graph from ``cache``.

        Args:
            cache: Catalog cache providing the snapshot (tools and graph).
            schemas: Schema resolver used to derive each step's required inputs.
        """

        self._cache = cache
        self._schemas = schemas

    def resolve(
        self,
        resource: str,
        domain: str,
        options: ResolveOptions | None = None,
    ) -> CreationPlan | Failure:
        """Return the creation plan for ``domain``/``resource``.

        Args:
            resource: Target resource type.
            domain: Domain of the target resource.
            options: Resolution options; defaults apply when omitted.

        Returns:
            CreationPlan | Failure: The plan, or a ``NOT_FOUND`` failure when
            the target is not in the dependency graph.
        """
        resolved_options = options or ResolveOptions()
        key = resource_key(domain, resource)
        graph = self._cache.snapshot().graph
        if graph.get(domain, resource) is None:
            return not_found(f"Resource {key} not found in dependency graph", subject=key)

        traversal = self._traverse(ResourceRef(domain, resource), resolved_options)
        steps = tuple(traversal.steps)
        alternatives = self._alternatives(ResourceRef(domain, resource), steps, resolved_options)
        notices = tuple(
            Failure(
                kind=ErrorKind.DEPTH_EXCEEDED,
                message=(
                    f"Dependency depth {resolved_options.max_depth} exceeded at {truncated}; "
                    "its prerequisites were not expanded"
                ),
                subject=truncated,
            )
            for truncated in traversal.truncated
        )
        LOGGER.debug("Resolved %s into %d steps", key, len(steps))
        return CreationPlan(
            target=key,
            steps=steps,
            complexity=Complexity.classify(len(steps)),
            warnings=tuple(traversal.warnings),
            alternatives=alternatives,
            subscriptions=tuple(traversal.subscriptions.values()),
            existing_resources=tuple(traversal.existing),
            truncated=tuple(traversal.truncated),
            notices=notices,
        )

    def _traverse(self, target: ResourceRef, options: ResolveOptions, override: _Override | None = None) -> _Traversal:
        traversal = _Traversal(options=options, override=override)
        self._visit(target, traversal, depth=0, optional=False)
        return traversal

    def _visit(self, ref: ResourceRef, traversal: _Traversal, *, depth: int, optional: bool) -> None:
        key = ref.key
        if key in traversal.emitted:
            return
        if key in traversal.in_progress:
            traversal.warn(f"Dependency cycle detected at {key}; edge ignored")
            LOGGER.warning("Dependency cycle detected at %s", key)
            return

        graph = self._cache.snapshot().graph
        entry = graph.get(ref.domain, ref.resource)
        traversal.in_progress.add(key)
        prerequisites: tuple[ResourceRef, ...] = ()
        if entry is None:
            traversal.warn(f"Prerequisite {key} is not in the dependency graph")
            LOGGER.warning("Prerequisite %s is not in the dependency graph", key)
        else:
            for subscription in entry.subscriptions:
                traversal.subscriptions.setdefault((subscription.service, subscription.tier), subscription)
            prerequisites = self._prerequisites(entry, traversal)
            if prerequisites and depth >= traversal.options.max_depth:
                traversal.truncated.append(key)
                prerequisites = ()
            required_keys = {prerequisite.key for prerequisite in entry.requires}
            for prerequisite in prerequisites:
                if prerequisite.key in traversal.options.existing_resources:
                    traversal.mark_existing(prerequisite.key)
                    continue
                self._visit(
                    prerequisite,
                    traversal,
                    depth=depth + 1,
                    optional=optional or prerequisite.key not in required_keys,
                )
        traversal.in_progress.discard(key)

        depends_on = tuple(
            prerequisite.key for prerequisite in prerequisites if prerequisite.key in traversal.emitted
        )
        tool = self._cache.snapshot().find_tool(ref.domain, ref.resource, Operation.CREATE)
        required_inputs: tuple[str, ...] = ()
        if tool is None:
            traversal.warn(f"No create tool found for {key}")
        elif tool.request_body is not None:
            required_inputs = extract_required_fields(self._schemas.resolve(tool.request_body, tool.domain))
        traversal.steps.append(
            WorkflowStep(
                step_number=len(traversal.steps) + 1,
                domain=ref.domain,
                resource=ref.resource,
                tool_name=tool.name if tool is not None else None,
                depends_on=depends_on,
                required_inputs=required_inputs,
                choices=entry.choices if entry is not None else (),
                optional=optional,
            ),
        )
        traversal.emitted.add(key)

    def _prerequisites(self, entry: DependencyGraphEntry, traversal: _Traversal) -> tuple[ResourceRef, ...]:
        prerequisites = list(entry.requires)
        if traversal.options.include_optional:
            prerequisites.extend(ref for ref in entry.optional if ref not in prerequisites)
        override = traversal.override
        if override is not None and override.resource == entry.key:
            if override.remove is not None and override.remove in prerequisites:
                prerequisites.remove(override.remove)
            if override.add is not None and override.add not in prerequisites:
                prerequisites.append(override.add)
        return tuple(prerequisites)

    def _alternatives(
        self,
        target: ResourceRef,
        steps: Iterable[WorkflowStep],
        options: ResolveOptions,
    ) -> tuple[AlternativePlan, ...]:
        if not options.expand_alternatives:
            return ()
        alternatives: list[AlternativePlan] = []
        for step in steps:
            for choice in step.choices:
                default = choice.default_option
                selected = next((option for option in choice.options if option != default), None)
                if selected is None:
                    continue
                override = _Override(
                    resource=step.key,
                    remove=self._option_resource(step.domain, default),
                    add=self._option_resource(step.domain, selected),
                )
                traversal = self._traverse(target, options, override)
                alternatives.append(
                    AlternativePlan(
                        resource=step.key,
                        choice_field=choice.field,
                        selected_option=selected,
                        steps=tuple(traversal.steps),
                        description=f"Alternative using {selected} for {choice.field}",
                    ),
                )
        return tuple(alternatives)

    def _option_resource(self, domain: str, option: str) -> ResourceRef | None:
        """Map a choice option such as ``origin_pool`` to a graph resource, if one exists."""

        candidate = ResourceRef(domain, option.replace("_", "-"))
        if self._cache.snapshot().graph.get(candidate.domain, candidate.resource) is None:
            return None
        return candidate


__all__ = [
    "AlternativePlan",
    "Complexity",
    "CreationPlan",
    "DEFAULT_DEPENDENCY_DEPTH",
    "DependencyResolver",
    "ResolveOptions",
    "WorkflowStep",
]
