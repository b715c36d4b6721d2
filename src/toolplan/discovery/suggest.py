# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Example request payloads for catalogued tools.

Payloads come from the first available source: the schema's minimum
configuration example (``spec``), the descriptor's curated example
(``curated``), or a payload generated from the resolved schema
(``generated``).
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Final, Literal

from ..catalog.cache import CatalogCache
from ..catalog.model_tool import ToolDescriptor
from ..catalog.types import JSONValue
from ..catalog.utils import thaw_json_value
from ..resolution.extraction import collect_groups, extract_required_fields, minimum_configuration
from ..resolution.models import MinimumConfiguration, MutuallyExclusiveGroup, ResolvedSchema
from ..resolution.schema_resolver import SchemaResolver
from ..results import Failure, not_found

SuggestionSource = Literal["spec", "curated", "generated"]

CURATED_NOTES: Final[tuple[str, ...]] = (
    "Curated example based on common usage",
    "Modify the values to match your requirements",
)
GENERATED_NOTES: Final[tuple[str, ...]] = (
    "Generated from the request schema",
    "Review and adjust values before use",
)

_TYPE_PLACEHOLDERS: Final[dict[str, JSONValue]] = {
    "string": "string",
    "integer": 0,
    "number": 0,
    "boolean": False,
}


@dataclass(frozen=True, slots=True)
class Suggestion:
    """Suggested request body with the metadata needed to adapt it."""

    tool_name: str
    example_payload: JSONValue
    description: str
    source: SuggestionSource
    required_fields: tuple[str, ...] = ()
    mutually_exclusive_groups: tuple[MutuallyExclusiveGroup, ...] = ()
    notes: tuple[str, ...] = ()


class ParameterSuggester:
    """Build example payloads with a spec, curated, generated fallback chain."""

    def __init__(self, cache: CatalogCache, schemas: SchemaResolver) -> None:
        """Create a suggester reading descriptors from ``cache``."""

        self._cache = cache
        self._schemas = schemas

    def minimum_configuration(self, tool_name: str) -> MinimumConfiguration | Failure:
        """Return the minimum configuration advertised for ``tool_name``."""

        tool = self._cache.snapshot().get(tool_name)
        if tool is None:
            return not_found(f'Tool "{tool_name}" not found', subject=tool_name)
        if tool.request_body is not None:
            minimum = minimum_configuration(self._schemas.resolve(tool.request_body, tool.domain))
            if minimum is not None:
                return minimum
        return not_found(f"No minimum configuration for {tool_name}", subject=tool_name)

    def suggest(self, tool_name: str) -> Suggestion | Failure:
        """Return an example payload for ``tool_name``.

        Args:
            tool_name: Catalogued tool name.

        Returns:
            Suggestion | Failure: Suggestion, or ``NOT_FOUND`` when the tool is
            unknown or no source can produce a payload.
        """
        tool = self._cache.snapshot().get(tool_name)
        if tool is None:
            return not_found(f'Tool "{tool_name}" not found', subject=tool_name)
        schema = self._schemas.resolve(tool.request_body, tool.domain) if tool.request_body is not None else None
        minimum = minimum_configuration(schema) if schema is not None else None
        groups = collect_groups(schema, tool.one_of_groups)
        required = _required_fields(schema, minimum)
        group_notes = tuple(_group_note(group) for group in groups)

        if minimum is not None and isinstance(minimum.example_json, Mapping):
            return Suggestion(
                tool_name=tool.name,
                example_payload=minimum.example_json,
                description=minimum.description or _describe(tool, "Example payload"),
                source="spec",
                required_fields=required,
                mutually_exclusive_groups=groups,
                notes=(*_minimum_notes(minimum), *group_notes),
            )
        if tool.example_body is not None:
            return Suggestion(
                tool_name=tool.name,
                example_payload=thaw_json_value(tool.example_body),
                description=_describe(tool, "Curated example payload"),
                source="curated",
                required_fields=required,
                mutually_exclusive_groups=groups,
                notes=(*CURATED_NOTES, *group_notes),
            )
        if schema is not None:
            return Suggestion(
                tool_name=tool.name,
                example_payload=generate_payload(schema, groups, resource=tool.resource),
                description=_describe(tool, "Generated example payload"),
                source="generated",
                required_fields=required,
                mutually_exclusive_groups=groups,
                notes=(*GENERATED_NOTES, *group_notes),
            )
        return not_found(f"No example payload available for {tool_name}", subject=tool_name)


def generate_payload(
    schema: ResolvedSchema,
    groups: Sequence[MutuallyExclusiveGroup] = (),
    *,
    resource: str = "resource",
) -> JSONValue:
    """Build a payload from ``schema`` using defaults, recommended values and placeholders.

    Objects include their required fields, fields with a default or
    recommended value, and the recommended option of each exclusive group.
    Non-recommended options of a group are left out.

    Args:
        schema: Resolved request schema.
        groups: Exclusive groups of the schema.
        resource: Resource name used for ``name`` placeholders.

    Returns:
        JSONValue: Generated payload.
    """
    chosen: set[str] = set()
    skipped: set[str] = set()
    for group in groups:
        for option in group.options:
            target = chosen if option.name == group.recommended_option else skipped
            target.update(option.fields)
    return _generate(schema, "", chosen, skipped - chosen, resource)


def _generate(node: ResolvedSchema, path: str, chosen: set[str], skipped: set[str], resource: str) -> JSONValue:
    if node.has_default:
        return thaw_json_value(node.default)
    if node.has_recommended_value:
        return thaw_json_value(node.recommended_value)
    if node.example is not None:
        return thaw_json_value(node.example)
    if node.enum:
        return thaw_json_value(node.enum[0])
    if node.is_stub:
        return {}
    kind = node.effective_type
    if kind == "array":
        if node.items is None:
            return []
        return [_generate(node.items, f"{path}[]", chosen, skipped, resource)]
    if kind == "object" or node.all_properties():
        payload: dict[str, JSONValue] = {}
        required = set(node.all_required())
        for name, child in node.all_properties().items():
            child_path = f"{path}.{name}" if path else name
            if child_path in skipped:
                continue
            wanted = (
                name in required
                or child_path in chosen
                or child.has_default
                or child.has_recommended_value
            )
            if wanted:
                payload[name] = _smart_value(name, child, child_path, chosen, skipped, resource)
        return payload
    if kind is not None:
        return _TYPE_PLACEHOLDERS.get(kind, "string")
    return {}


def _smart_value(
    name: str,
    node: ResolvedSchema,
    path: str,
    chosen: set[str],
    skipped: set[str],
    resource: str,
) -> JSONValue:
    if node.effective_type == "string" and not (node.has_default or node.has_recommended_value or node.enum):
        if name == "name":
            return f"example-{resource}"
        if name == "namespace":
            return "default"
    return _generate(node, path, chosen, skipped, resource)


def _required_fields(schema: ResolvedSchema | None, minimum: MinimumConfiguration | None) -> tuple[str, ...]:
    fields = list(extract_required_fields(schema)) if schema is not None else []
    if minimum is not None:
        fields.extend(name for name in minimum.required_fields if name not in fields)
    return tuple(fields)


def _minimum_notes(minimum: MinimumConfiguration) -> tuple[str, ...]:
    notes: list[str] = []
    if minimum.description:
        notes.append(minimum.description)
    if minimum.required_fields:
        notes.append(f"Required fields: {', '.join(minimum.required_fields)}")
    for group in minimum.mutually_exclusive_groups:
        line = f"Mutually exclusive: {' OR '.join(group.option_names)}"
        notes.append(f"{line} - {group.reason}" if group.reason else line)
    return tuple(notes)


def _group_note(group: MutuallyExclusiveGroup) -> str:
    note = f"Configuration choice ({group.field_path}): {', '.join(group.option_names)}"
    if group.recommended_option:
        note += f" (Recommended: {group.recommended_option})"
    return note


def _describe(tool: ToolDescriptor, prefix: str) -> str:
    return f"{prefix} for {tool.resource} {tool.operation.value}"


__all__ = ["ParameterSuggester", "Suggestion", "SuggestionSource", "generate_payload"]
