# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Typed tool descriptors built from the catalog index."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Final

from .types import JSONValue, resource_key
from .utils import (
    enum_value,
    expect_mapping,
    expect_string,
    freeze_json_mapping,
    mapping_array,
    optional_bool,
    optional_mapping,
    optional_string,
    string_array,
)


class Operation(str, Enum):
    """Operation verb of a catalogued vendor call."""

    CREATE = "create"
    GET = "get"
    LIST = "list"
    UPDATE = "update"
    DELETE = "delete"
    OTHER = "other"

    @classmethod
    def parse(cls, value: str) -> Operation:
        """Return the member for ``value``; unknown verbs map to ``OTHER``."""

        normalized = value.strip().lower()
        normalized = _OPERATION_ALIASES.get(normalized, normalized)
        try:
            return cls(normalized)
        except ValueError:
            return cls.OTHER

    @property
    def is_read(self) -> bool:
        """Return ``True`` for the read-only verbs ``get`` and ``list``."""

        return self in (Operation.GET, Operation.LIST)


_OPERATION_ALIASES: Final[dict[str, str]] = {
    "read": "get",
    "replace": "update",
    "patch": "update",
}


class DangerLevel(str, Enum):
    """Risk classification attached to a tool."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True, slots=True)
class ParameterDefinition:
    """Path or query parameter accepted by a tool."""

    name: str
    required: bool = False
    description: str | None = None
    type: str | None = None

    @staticmethod
    def from_mapping(data: Mapping[str, JSONValue], *, context: str) -> ParameterDefinition:
        """Create a parameter definition from raw JSON.

        Args:
            data: Parameter mapping from the index.
            context: Location prefix for errors.

        Returns:
            ParameterDefinition: Parsed parameter.
        """
        return ParameterDefinition(
            name=expect_string(data.get("name"), key="name", context=context),
            required=optional_bool(data.get("required"), key="required", context=context, default=False),
            description=optional_string(data.get("description"), key="description", context=context),
            type=optional_string(data.get("type"), key="type", context=context),
        )


@dataclass(frozen=True, slots=True)
class SideEffects:
    """Declared remote side effects of invoking a tool."""

    creates: tuple[str, ...] = ()
    modifies: tuple[str, ...] = ()
    deletes: tuple[str, ...] = ()

    @staticmethod
    def from_mapping(data: Mapping[str, JSONValue] | None, *, context: str) -> SideEffects:
        """Create side-effect metadata; ``None`` yields an empty declaration."""

        if data is None:
            return SideEffects()
        return SideEffects(
            creates=string_array(data.get("creates"), key="creates", context=context),
            modifies=string_array(data.get("modifies"), key="modifies", context=context),
            deletes=string_array(data.get("deletes"), key="deletes", context=context),
        )

    @property
    def is_empty(self) -> bool:
        """Return ``True`` when no side effects are declared."""

        return not (self.creates or self.modifies or self.deletes)


@dataclass(frozen=True, slots=True)
class OneOfGroupSpec:
    """Mutually-exclusive field group declared directly on a tool."""

    field: str
    options: tuple[str, ...]
    description: str | None = None
    recommended: str | None = None

    @staticmethod
    def from_mapping(data: Mapping[str, JSONValue], *, context: str) -> OneOfGroupSpec:
        """Build a group declaration from raw JSON."""

        return OneOfGroupSpec(
            field=expect_string(data.get("field"), key="field", context=context),
            options=string_array(data.get("options"), key="options", context=context),
            description=optional_string(data.get("description"), key="description", context=context),
            recommended=optional_string(data.get("recommended"), key="recommended", context=context),
        )


@dataclass(frozen=True, slots=True)
class ToolDescriptor:
    """Immutable representation of one catalogued vendor operation."""

    name: str
    domain: str
    resource: str
    operation: Operation
    method: str
    path: str
    summary: str
    description: str
    request_body: Mapping[str, JSONValue] | None
    response_schema: Mapping[str, JSONValue] | None
    path_parameters: tuple[ParameterDefinition, ...]
    query_parameters: tuple[ParameterDefinition, ...]
    danger_level: DangerLevel
    requires_confirmation: bool
    side_effects: SideEffects
    one_of_groups: tuple[OneOfGroupSpec, ...]
    examples: Mapping[str, JSONValue] = field(default_factory=dict, compare=False)

    @property
    def resource_key(self) -> str:
        """Return the ``domain/resource`` key of the tool's resource."""

        return resource_key(self.domain, self.resource)

    @property
    def has_request_body(self) -> bool:
        """Return ``True`` when the tool declares a request body schema."""

        return self.request_body is not None

    @property
    def example_body(self) -> Mapping[str, JSONValue] | None:
        """Return the curated example request body, if any."""

        body = self.examples.get("body")
        return body if isinstance(body, Mapping) else None

    @staticmethod
    def from_mapping(data: Mapping[str, JSONValue], *, context: str) -> ToolDescriptor:
        """Create a tool descriptor from an index entry.

        Args:
            data: Raw descriptor mapping (camelCase keys).
            context: Location prefix used in error messages.

        Returns:
            ToolDescriptor: Frozen descriptor.

        Raises:
            CatalogIntegrityError: If a field carries the wrong value type.
        """
        name = expect_string(data.get("name"), key="name", context=context)
        entry_context = f"{context}[{name}]"
        operation_raw = expect_string(data.get("operation"), key="operation", context=entry_context)
        request_body = optional_mapping(data.get("requestBody"), key="requestBody", context=entry_context)
        response_schema = optional_mapping(data.get("responseSchema"), key="responseSchema", context=entry_context)
        examples = optional_mapping(data.get("examples"), key="examples", context=entry_context) or {}
        return ToolDescriptor(
            name=name,
            domain=expect_string(data.get("domain"), key="domain", context=entry_context),
            resource=expect_string(data.get("resource"), key="resource", context=entry_context),
            operation=Operation.parse(operation_raw),
            method=(optional_string(data.get("method"), key="method", context=entry_context) or "").upper(),
            path=optional_string(data.get("path"), key="path", context=entry_context) or "",
            summary=optional_string(data.get("summary"), key="summary", context=entry_context) or "",
            description=optional_string(data.get("description"), key="description", context=entry_context) or "",
            request_body=(
                freeze_json_mapping(request_body, context=f"{entry_context}.requestBody")
                if request_body is not None
                else None
            ),
            response_schema=(
                freeze_json_mapping(response_schema, context=f"{entry_context}.responseSchema")
                if response_schema is not None
                else None
            ),
            path_parameters=_parameters(data.get("pathParameters"), key="pathParameters", context=entry_context),
            query_parameters=_parameters(data.get("queryParameters"), key="queryParameters", context=entry_context),
            danger_level=enum_value(
                data.get("dangerLevel"),
                DangerLevel,
                key="dangerLevel",
                context=entry_context,
                default=DangerLevel.LOW,
            ),
            requires_confirmation=optional_bool(
                data.get("requiresConfirmation"),
                key="requiresConfirmation",
                context=entry_context,
                default=False,
            ),
            side_effects=SideEffects.from_mapping(
                optional_mapping(data.get("sideEffects"), key="sideEffects", context=entry_context),
                context=f"{entry_context}.sideEffects",
            ),
            one_of_groups=tuple(
                OneOfGroupSpec.from_mapping(item, context=f"{entry_context}.oneOfGroups")
                for item in mapping_array(data.get("oneOfGroups"), key="oneOfGroups", context=entry_context)
            ),
            examples=freeze_json_mapping(
                expect_mapping(examples, key="examples", context=entry_context),
                context=f"{entry_context}.examples",
            ),
        )


def _parameters(value: JSONValue | None, *, key: str, context: str) -> tuple[ParameterDefinition, ...]:
    return tuple(
        ParameterDefinition.from_mapping(item, context=f"{context}.{key}")
        for item in mapping_array(value, key=key, context=context)
    )


__all__ = [
    "DangerLevel",
    "OneOfGroupSpec",
    "Operation",
    "ParameterDefinition",
    "SideEffects",
    "ToolDescriptor",
]
