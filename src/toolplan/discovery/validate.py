# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Pre-flight validation of candidate requests against resolved schemas.

Missing or mis-typed fields are blocking errors. Mutually-exclusive fields
set together, unknown fields and unknown query parameters are warnings.
The candidate request is only read, never modified.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass
from typing import Final, cast

from ..catalog.cache import CatalogCache
from ..catalog.model_tool import Operation, ParameterDefinition, ToolDescriptor
from ..catalog.types import JSONValue
from ..catalog.utils import is_json_array, thaw_json_value
from ..resolution.extraction import collect_groups, extract_field_defaults, extract_required_fields
from ..resolution.models import ARRAY_SEGMENT, FieldDefault, MutuallyExclusiveGroup, ResolvedSchema, join_path
from ..resolution.schema_resolver import SchemaResolver
from ..results import ErrorKind, ValidationIssue

BODY_OPERATIONS: Final[frozenset[Operation]] = frozenset({Operation.CREATE, Operation.UPDATE})


@dataclass(frozen=True, slots=True)
class AppliedDefault:
    """Field the server fills in because the request omits it."""

    field: str
    default_value: JSONValue


@dataclass(frozen=True, slots=True)
class RecommendedValue:
    """Recommended value of a field next to the value currently supplied."""

    field: str
    recommended_value: JSONValue
    current_value: JSONValue = None


@dataclass(frozen=True, slots=True)
class ValidationResult:
    """Outcome of validating one candidate request."""

    valid: bool
    errors: tuple[ValidationIssue, ...] = ()
    warnings: tuple[str, ...] = ()
    tool: ToolDescriptor | None = None
    applied_defaults: tuple[AppliedDefault, ...] = ()
    recommended_values: tuple[RecommendedValue, ...] = ()


@dataclass(slots=True)
class _Collector:
    errors: list[ValidationIssue]
    warnings: list[str]
    applied_defaults: list[AppliedDefault]
    recommended_values: list[RecommendedValue]

    def error(
        self,
        path: str,
        message: str,
        *,
        expected: str | None = None,
        actual: JSONValue = None,
        kind: ErrorKind = ErrorKind.VALIDATION_ERROR,
    ) -> None:
        self.errors.append(ValidationIssue(kind=kind, path=path, message=message, expected=expected, actual=actual))

    def warn(self, message: str) -> None:
        if message not in self.warnings:
            self.warnings.append(message)


class ParameterValidator:
    """Validate candidate requests for catalogued tools."""

    def __init__(self, cache: CatalogCache, schemas: SchemaResolver) -> None:
        """Create a validator reading descriptors from ``cache``."""

        self._cache = cache
        self._schemas = schemas

    def validate(
        self,
        tool_name: str,
        body: Mapping[str, JSONValue] | None = None,
        *,
        path_params: Mapping[str, str] | None = None,
        query_params: Mapping[str, str] | None = None,
    ) -> ValidationResult:
        """Validate a candidate request for ``tool_name``.

        Args:
            tool_name: Catalogued tool the request is meant for.
            body: Candidate request body.
            path_params: Candidate path parameters.
            query_params: Candidate query parameters.

        Returns:
            ValidationResult: ``valid`` is ``False`` when any blocking error was found.
        """
        tool = self._cache.snapshot().get(tool_name)
        if tool is None:
            return ValidationResult(
                valid=False,
                errors=(
                    ValidationIssue(
                        kind=ErrorKind.NOT_FOUND,
                        path="toolName",
                        message=f'Tool "{tool_name}" not found',
                        expected="Valid tool name",
                        actual=tool_name,
                    ),
                ),
            )

        collector = _Collector(errors=[], warnings=[], applied_defaults=[], recommended_values=[])
        _check_path_params(tool.path_parameters, path_params or {}, collector)
        _check_query_params(tool.query_parameters, query_params or {}, collector)
        if tool.request_body is None:
            if body:
                collector.warn(f"Tool {tool.name} does not accept a request body, but one was provided")
        else:
            self._check_body(tool, body, collector)

        return ValidationResult(
            valid=not collector.errors,
            errors=tuple(collector.errors),
            warnings=tuple(collector.warnings),
            tool=tool,
            applied_defaults=tuple(collector.applied_defaults),
            recommended_values=tuple(collector.recommended_values),
        )

    def exclusive_groups(self, tool: ToolDescriptor) -> tuple[MutuallyExclusiveGroup, ...]:
        """Return schema, minimum-configuration and tool-declared groups, deduplicated."""

        schema = self._schemas.resolve(tool.request_body, tool.domain) if tool.request_body is not None else None
        return collect_groups(schema, tool.one_of_groups)

    def _check_body(self, tool: ToolDescriptor, body: Mapping[str, JSONValue] | None, collector: _Collector) -> None:
        if not body and tool.operation in BODY_OPERATIONS:
            collector.error(
                "body",
                "Request body is required for this operation",
                expected="Object with required fields",
            )
            return
        schema = self._schemas.resolve(tool.request_body, tool.domain)
        defaults = {item.path: item for item in extract_field_defaults(schema)}
        required = extract_required_fields(schema)
        if not body:
            for path in required:
                default = defaults.get(path)
                if default is None or not default.server_default:
                    _report_missing(path, collector)
            return
        if tool.operation is Operation.CREATE:
            _check_metadata(body, collector)
        _check_required(required, defaults, body, collector)
        _check_server_defaults(defaults.values(), body, collector)
        _collect_recommended(defaults.values(), body, collector)
        _check_value(body, schema, "", collector)
        for group in self.exclusive_groups(tool):
            _check_group(group, body, collector)


def _check_path_params(params: Sequence[ParameterDefinition], values: Mapping[str, str], collector: _Collector) -> None:
    for param in params:
        if param.required and not values.get(param.name):
            collector.error(
                f"pathParams.{param.name}",
                f"Missing required path parameter: {param.name}",
                expected=param.description or "string value",
            )
    known = [param.name for param in params]
    for key in values:
        if key not in known:
            collector.error(
                f"pathParams.{key}",
                f"Unknown path parameter: {key}",
                expected=f"One of: {', '.join(known)}",
                actual=key,
            )


def _check_query_params(params: Sequence[ParameterDefinition], values: Mapping[str, str], collector: _Collector) -> None:
    for param in params:
        if param.required and not values.get(param.name):
            collector.error(
                f"queryParams.{param.name}",
                f"Missing required query parameter: {param.name}",
                expected=param.description or "string value",
            )
    known = {param.name for param in params}
    for key in values:
        if key not in known:
            collector.warn(f"Unknown query parameter: {key}")


def _check_required(
    required: Sequence[str],
    defaults: Mapping[str, FieldDefault],
    body: Mapping[str, JSONValue],
    collector: _Collector,
) -> None:
    for path in required:
        if not _missing_under_present_parent(body, path):
            continue
        default = defaults.get(path)
        if default is not None and default.server_default:
            _apply_default(default, collector)
            continue
        _report_missing(path, collector)


def _report_missing(path: str, collector: _Collector) -> None:
    collector.error(f"body.{path}", f"Missing required field: {path}", expected="User must provide value")


def _check_metadata(body: Mapping[str, JSONValue], collector: _Collector) -> None:
    """Advise on the object metadata every created resource carries."""

    metadata = body.get("metadata")
    if not isinstance(metadata, Mapping):
        collector.warn("Body should include a 'metadata' object")
    elif not metadata.get("name"):
        collector.warn("metadata.name is typically required")


def _check_server_defaults(defaults: Iterable[FieldDefault], body: Mapping[str, JSONValue], collector: _Collector) -> None:
    for default in defaults:
        if default.server_default and _missing_under_present_parent(body, default.path):
            _apply_default(default, collector)


def _apply_default(default: FieldDefault, collector: _Collector) -> None:
    if any(applied.field == default.path for applied in collector.applied_defaults):
        return
    value = thaw_json_value(default.default)
    collector.applied_defaults.append(AppliedDefault(field=default.path, default_value=value))
    collector.warn(f'Field "{default.path}" will default to {json.dumps(value)}')


def _collect_recommended(defaults: Iterable[FieldDefault], body: Mapping[str, JSONValue], collector: _Collector) -> None:
    for default in defaults:
        if not default.has_recommended_value:
            continue
        current = next(iter(values_at(body, default.path)), None)
        collector.recommended_values.append(
            RecommendedValue(
                field=default.path,
                recommended_value=thaw_json_value(default.recommended_value),
                current_value=current,
            ),
        )


def _check_group(group: MutuallyExclusiveGroup, body: Mapping[str, JSONValue], collector: _Collector) -> None:
    container_path, relative = _group_layout(group)
    containers = [item for item in values_at(body, container_path) if isinstance(item, Mapping)]
    any_selected = False
    for container in containers:
        selected = [
            option.name
            for option, fields in zip(group.options, relative)
            if any(any(value is not None for value in values_at(container, field)) for field in fields)
        ]
        any_selected = any_selected or bool(selected)
        if len(selected) > 1:
            message = (
                f"Multiple mutually exclusive options selected for {group.field_path}: "
                f"{', '.join(selected)}. Choose only one."
            )
            if group.recommended_option:
                message += f" Recommended: {group.recommended_option}"
            collector.warn(message)
            return
    if containers and not any_selected and group.recommended_option:
        collector.warn(
            f"No option selected for {group.field_path}. "
            f"Consider using the recommended option: {group.recommended_option}",
        )


def _group_layout(group: MutuallyExclusiveGroup) -> tuple[str, list[tuple[str, ...]]]:
    """Return the common container path and option fields relative to it."""

    parents = {_split_leaf(field)[0] for option in group.options for field in option.fields}
    if len(parents) == 1:
        container = parents.pop()
        return container, [tuple(_split_leaf(field)[1] for field in option.fields) for option in group.options]
    return "", [option.fields for option in group.options]


def _check_value(value: JSONValue, schema: ResolvedSchema, path: str, collector: _Collector) -> None:
    if value is None or schema.is_stub:
        return
    expected = schema.effective_type
    if expected is not None and not _type_matches(value, expected):
        label = path or "body"
        collector.error(
            f"body.{path}" if path else "body",
            f"Invalid type for {label}: expected {expected}, got {_json_type(value)}",
            expected=expected,
            actual=_json_type(value),
        )
        return
    if isinstance(value, Mapping):
        _check_object(value, schema, path, collector)
    elif is_json_array(value) and schema.items is not None:
        for index, item in enumerate(cast(list[JSONValue], value)):
            _check_value(item, schema.items, f"{path}[{index}]", collector)


def _check_object(value: Mapping[str, JSONValue], schema: ResolvedSchema, path: str, collector: _Collector) -> None:
    properties = schema.all_properties()
    for branch in schema.union_branches():
        for name, child in branch.all_properties().items():
            properties.setdefault(name, child)
    additional = schema.additional_properties
    for key, item in value.items():
        child_path = join_path(path, key)
        child = properties.get(key)
        if child is not None:
            _check_value(item, child, child_path, collector)
        elif isinstance(additional, ResolvedSchema):
            _check_value(item, additional, child_path, collector)
        elif properties and additional is not True:
            collector.warn(f"Unknown field: {child_path}")


def _type_matches(value: JSONValue, expected: str) -> bool:
    if expected == "string":
        return isinstance(value, str)
    if expected == "integer":
        return isinstance(value, int) and not isinstance(value, bool)
    if expected == "number":
        return isinstance(value, (int, float)) and not isinstance(value, bool)
    if expected == "boolean":
        return isinstance(value, bool)
    if expected == "object":
        return isinstance(value, Mapping)
    if expected == "array":
        return is_json_array(value)
    return True


def _json_type(value: JSONValue) -> str:
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int):
        return "integer"
    if isinstance(value, float):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, Mapping):
        return "object"
    if is_json_array(value):
        return "array"
    return "null"


def _split_leaf(path: str) -> tuple[str, str]:
    if "." not in path:
        return "", path
    parent, leaf = path.rsplit(".", 1)
    return parent, leaf


def _missing_under_present_parent(body: Mapping[str, JSONValue], path: str) -> bool:
    parent_path, leaf = _split_leaf(path)
    return any(
        isinstance(parent, Mapping) and parent.get(leaf) is None for parent in values_at(body, parent_path)
    )


def values_at(root: JSONValue, path: str) -> Iterator[JSONValue]:
    """Yield every value addressed by a dotted ``path``.

    A segment ending in ``[]`` fans out over array elements, so
    ``origins[].port`` yields the port of every origin. Absent or ``None``
    values are not yielded.
    """
    current: list[JSONValue] = [root]
    if path:
        for segment in path.split("."):
            expand = segment.endswith(ARRAY_SEGMENT)
            key = segment[: -len(ARRAY_SEGMENT)] if expand else segment
            following: list[JSONValue] = []
            for item in current:
                if key and not isinstance(item, Mapping):
                    continue
                value = cast(Mapping[str, JSONValue], item).get(key) if key else item
                if value is None:
                    continue
                if expand:
                    if is_json_array(value):
                        following.extend(element for element in cast(list[JSONValue], value) if element is not None)
                else:
                    following.append(value)
            current = following
    yield from current


__all__ = [
    "AppliedDefault",
    "ParameterValidator",
    "RecommendedValue",
    "ValidationResult",
    "values_at",
]
