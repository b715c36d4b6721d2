# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Static resource dependency graph models."""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from functools import cached_property

from .errors import CatalogIntegrityError
from .types import JSONValue, resource_key
from .utils import expect_string, mapping_array, optional_bool, optional_string, string_array


@dataclass(frozen=True, slots=True)
class ResourceRef:
    """Reference to a resource type inside a domain."""

    domain: str
    resource: str

    @property
    def key(self) -> str:
        """Return the ``domain/resource`` key."""

        return resource_key(self.domain, self.resource)

    @staticmethod
    def from_mapping(data: Mapping[str, JSONValue], *, context: str) -> ResourceRef:
        """Create a reference from a ``{domain, resource}`` mapping."""

        return ResourceRef(
            domain=expect_string(data.get("domain"), key="domain", context=context),
            resource=expect_string(data.get("resource"), key="resource", context=context),
        )


@dataclass(frozen=True, slots=True)
class ResourceChoice:
    """Resource-level mutually-exclusive choice (for example origin server type)."""

    field: str
    options: tuple[str, ...]
    description: str | None = None
    recommended: str | None = None

    @property
    def default_option(self) -> str:
        """Return the option used by the primary plan.

        The recommended option wins when it is one of the options,
        otherwise the first option in table order is used.
        """
        if self.recommended and self.recommended in self.options:
            return self.recommended
        return self.options[0]

    @staticmethod
    def from_mapping(data: Mapping[str, JSONValue], *, context: str) -> ResourceChoice:
        """Create a choice group from raw JSON.

        Raises:
            CatalogIntegrityError: If the choice lists no options.
        """
        choice_field = expect_string(data.get("field"), key="field", context=context)
        options = string_array(data.get("options"), key="options", context=context)
        if not options:
            raise CatalogIntegrityError(f"{context}: choice '{choice_field}' must list at least one option")
        return ResourceChoice(
            field=choice_field,
            options=options,
            description=optional_string(data.get("description"), key="description", context=context),
            recommended=optional_string(data.get("recommended"), key="recommended", context=context),
        )


@dataclass(frozen=True, slots=True)
class SubscriptionRequirement:
    """Licensing or subscription a resource depends on."""

    service: str
    display_name: str
    tier: str | None = None
    required: bool = True

    def describe(self) -> str:
        """Return a human-readable line such as ``"WAAP (Advanced) - required"``."""

        tier = f" ({self.tier})" if self.tier else ""
        status = "required" if self.required else "optional"
        return f"{self.display_name}{tier} - {status}"

    @staticmethod
    def from_mapping(data: Mapping[str, JSONValue], *, context: str) -> SubscriptionRequirement:
        """Create a subscription requirement from raw JSON."""

        service = expect_string(data.get("service"), key="service", context=context)
        return SubscriptionRequirement(
            service=service,
            display_name=optional_string(data.get("displayName"), key="displayName", context=context) or service,
            tier=optional_string(data.get("tier"), key="tier", context=context),
            required=optional_bool(data.get("required"), key="required", context=context, default=True),
        )


@dataclass(frozen=True, slots=True)
class DependencyGraphEntry:
    """Prerequisites, choices and subscriptions of one resource type."""

    domain: str
    resource: str
    requires: tuple[ResourceRef, ...] = ()
    optional: tuple[ResourceRef, ...] = ()
    choices: tuple[ResourceChoice, ...] = ()
    subscriptions: tuple[SubscriptionRequirement, ...] = ()

    @property
    def key(self) -> str:
        """Return the ``domain/resource`` key."""

        return resource_key(self.domain, self.resource)

    @staticmethod
    def from_mapping(data: Mapping[str, JSONValue], *, context: str) -> DependencyGraphEntry:
        """Create a graph entry from one ``resources[]`` item."""

        domain = expect_string(data.get("domain"), key="domain", context=context)
        resource = expect_string(data.get("resource"), key="resource", context=context)
        entry_context = f"{context}[{resource_key(domain, resource)}]"
        return DependencyGraphEntry(
            domain=domain,
            resource=resource,
            requires=_refs(data.get("requires"), key="requires", context=entry_context),
            optional=_refs(data.get("optional"), key="optional", context=entry_context),
            choices=tuple(
                ResourceChoice.from_mapping(item, context=f"{entry_context}.choices")
                for item in mapping_array(data.get("choices"), key="choices", context=entry_context)
            ),
            subscriptions=tuple(
                SubscriptionRequirement.from_mapping(item, context=f"{entry_context}.subscriptions")
                for item in mapping_array(data.get("subscriptions"), key="subscriptions", context=entry_context)
            ),
        )


@dataclass(frozen=True, slots=True)
class GraphStats:
    """Summary counts over a dependency graph."""

    total_resources: int
    total_edges: int
    resources_with_prerequisites: int
    resources_with_choices: int
    resources_with_subscriptions: int
    domains: Mapping[str, int]


@dataclass(frozen=True)
class DependencyGraph:
    """Read-only lookup over :class:`DependencyGraphEntry` records."""

    entries: tuple[DependencyGraphEntry, ...]
    _by_key: Mapping[str, DependencyGraphEntry] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        """Index entries by key and reject duplicates."""

        by_key: dict[str, DependencyGraphEntry] = {}
        for entry in self.entries:
            if entry.key in by_key:
                raise CatalogIntegrityError(f"duplicate dependency graph entry '{entry.key}'")
            by_key[entry.key] = entry
        object.__setattr__(self, "_by_key", by_key)

    @classmethod
    def from_entries(cls, entries: Iterable[DependencyGraphEntry]) -> DependencyGraph:
        """Build a graph from ``entries`` preserving their order."""

        return cls(entries=tuple(entries))

    def get(self, domain: str, resource: str) -> DependencyGraphEntry | None:
        """Return the entry for ``domain``/``resource`` or ``None``."""

        return self._by_key.get(resource_key(domain, resource))

    def __contains__(self, key: object) -> bool:
        return key in self._by_key

    def __len__(self) -> int:
        return len(self.entries)

    def prerequisites(self, domain: str, resource: str, *, include_optional: bool = False) -> tuple[ResourceRef, ...]:
        """Return the direct prerequisites of a resource.

        Args:
            domain: Domain of the resource.
            resource: Resource type.
            include_optional: Append optional prerequisites after required ones.

        Returns:
            tuple[ResourceRef, ...]: Prerequisites, empty for unknown resources.
        """
        entry = self.get(domain, resource)
        if entry is None:
            return ()
        if include_optional:
            return entry.requires + entry.optional
        return entry.requires

    def dependents(self, domain: str, resource: str) -> tuple[ResourceRef, ...]:
        """Return resources that list ``domain``/``resource`` as a prerequisite."""

        return self._reverse_edges.get(resource_key(domain, resource), ())

    def requiring_subscription(self, service: str) -> tuple[ResourceRef, ...]:
        """Return resources that declare a subscription to ``service``."""

        return tuple(
            ResourceRef(entry.domain, entry.resource)
            for entry in self.entries
            if any(sub.service == service for sub in entry.subscriptions)
        )

    def stats(self) -> GraphStats:
        """Return summary counts over the graph."""

        domains = Counter(entry.domain for entry in self.entries)
        return GraphStats(
            total_resources=len(self.entries),
            total_edges=sum(len(entry.requires) + len(entry.optional) for entry in self.entries),
            resources_with_prerequisites=sum(1 for entry in self.entries if entry.requires),
            resources_with_choices=sum(1 for entry in self.entries if entry.choices),
            resources_with_subscriptions=sum(1 for entry in self.entries if entry.subscriptions),
            domains=dict(sorted(domains.items())),
        )

    @cached_property
    def _reverse_edges(self) -> Mapping[str, tuple[ResourceRef, ...]]:
        reverse: dict[str, list[ResourceRef]] = {}
        for entry in self.entries:
            for prerequisite in entry.requires + entry.optional:
                reverse.setdefault(prerequisite.key, []).append(ResourceRef(entry.domain, entry.resource))
        return {key: tuple(value) for key, value in reverse.items()}

    @staticmethod
    def from_mapping(data: Mapping[str, JSONValue], *, context: str) -> DependencyGraph:
        """Create a graph from the ``dependencies.json`` root object."""

        return DependencyGraph.from_entries(
            DependencyGraphEntry.from_mapping(item, context=f"{context}.resources")
            for item in mapping_array(data.get("resources"), key="resources", context=context)
        )


def _refs(value: JSONValue | None, *, key: str, context: str) -> tuple[ResourceRef, ...]:
    return tuple(
        ResourceRef.from_mapping(item, context=f"{context}.{key}")
        for item in mapping_array(value, key=key, context=context)
    )


__all__ = [
    "DependencyGraph",
    "DependencyGraphEntry",
    "GraphStats",
    "ResourceChoice",
    "ResourceRef",
    "SubscriptionRequirement",
]
