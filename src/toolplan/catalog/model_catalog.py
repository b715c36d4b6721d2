# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Catalog index aggregate built from the tool index and dependency graph."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field

from .errors import CatalogIntegrityError
from .model_dependency import DependencyGraph
from .model_tool import Operation, ToolDescriptor
from .types import resource_key


@dataclass(frozen=True, slots=True)
class CatalogSnapshot:
    """Materialised tool descriptors and dependency graph with a checksum."""

    _tools: tuple[ToolDescriptor, ...]
    graph: DependencyGraph
    checksum: str
    _by_name: Mapping[str, ToolDescriptor] = field(init=False, repr=False, compare=False)
    _by_domain: Mapping[str, tuple[ToolDescriptor, ...]] = field(init=False, repr=False, compare=False)
    _by_resource: Mapping[str, tuple[ToolDescriptor, ...]] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        """Index descriptors by name, domain and resource key."""

        by_name: dict[str, ToolDescriptor] = {}
        by_domain: dict[str, list[ToolDescriptor]] = {}
        by_resource: dict[str, list[ToolDescriptor]] = {}
        for tool in self._tools:
            if tool.name in by_name:
                raise CatalogIntegrityError(f"Duplicate tool name '{tool.name}' detected in catalog snapshot")
            by_name[tool.name] = tool
            by_domain.setdefault(tool.domain, []).append(tool)
            by_resource.setdefault(tool.resource_key, []).append(tool)
        object.__setattr__(self, "_by_name", by_name)
        object.__setattr__(self, "_by_domain", {key: tuple(value) for key, value in by_domain.items()})
        object.__setattr__(self, "_by_resource", {key: tuple(value) for key, value in by_resource.items()})

    @property
    def tools(self) -> tuple[ToolDescriptor, ...]:
        """Return every descriptor in index order."""

        return self._tools

    def get(self, name: str) -> ToolDescriptor | None:
        """Return the descriptor named ``name`` or ``None``."""

        return self._by_name.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def __len__(self) -> int:
        return len(self._tools)

    def tools_for_domain(self, domain: str) -> tuple[ToolDescriptor, ...]:
        """Return descriptors of ``domain`` in index order."""

        return self._by_domain.get(domain, ())

    def tools_for_resource(self, domain: str, resource: str) -> tuple[ToolDescriptor, ...]:
        """Return every operation of one resource type."""

        return self._by_resource.get(resource_key(domain, resource), ())

    def find_tool(self, domain: str, resource: str, operation: Operation) -> ToolDescriptor | None:
        """Return the tool performing ``operation`` on a resource, if catalogued."""

        for tool in self.tools_for_resource(domain, resource):
            if tool.operation is operation:
                return tool
        return None

    def domains(self) -> tuple[str, ...]:
        """Return the available domains sorted by name."""

        return tuple(sorted(self._by_domain))

    def tool_counts(self) -> dict[str, int]:
        """Return the number of tools per domain, sorted by domain."""

        return {domain: len(self._by_domain[domain]) for domain in self.domains()}


__all__ = ["CatalogSnapshot"]
