# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Derive defaults, required fields and exclusive groups from resolved schemas."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Mapping
from dataclasses import replace
from typing import Final, cast

from ..catalog.model_tool import OneOfGroupSpec
from ..catalog.types import JSONValue
from ..catalog.utils import is_json_array, thaw_json_value
from .models import (
    ARRAY_SEGMENT,
    ExclusiveOption,
    FieldDefault,
    MinimumConfiguration,
    MutuallyExclusiveGroup,
    ResolvedSchema,
    join_path,
)

LOGGER = logging.getLogger(__name__)

ONEOF_FIELD_PREFIX: Final[str] = "x-ves-oneof-field-"
RECOMMENDED_VARIANT_PREFIX: Final[str] = "x-f5xc-recommended-oneof-variant-"
MINIMUM_CONFIGURATION_KEY: Final[str] = "x-f5xc-minimum-configuration"
ROOT_PATH: Final[str] = "(root)"

ANNOTATION_REASON: Final[str] = "Only one of these fields may be set"
ONE_OF_REASON: Final[str] = "Exactly one option must be selected"
ANY_OF_REASON: Final[str] = "Select one or more of these options"


def extract_field_defaults(schema: ResolvedSchema) -> tuple[FieldDefault, ...]:
    """Collect dotted field paths carrying default metadata.

    A field is reported when it has a literal ``default``, is applied by the
    server when omitted, or carries a recommended value. Array element
    fields are reported below an ``[]`` segment (``rules[].enabled``).

    Args:
        schema: Resolved request schema.

    Returns:
        tuple[FieldDefault, ...]: Defaults in depth-first discovery order.
    """
    found: dict[str, FieldDefault] = {}
    _walk_defaults(schema, "", found)
    return tuple(found.values())


def _walk_defaults(node: ResolvedSchema, path: str, found: dict[str, FieldDefault]) -> None:
    if node.is_stub:
        return
    for name, child in node.all_properties().items():
        child_path = join_path(path, name)
        if (child.has_default or child.server_default or child.has_recommended_value) and child_path not in found:
            found[child_path] = FieldDefault(
                path=child_path,
                default=child.default,
                has_default=child.has_default,
                server_default=child.server_default,
                recommended_value=child.recommended_value,
                has_recommended_value=child.has_recommended_value,
            )
        _walk_defaults(child, child_path, found)
    if node.items is not None:
        _walk_defaults(node.items, f"{path}{ARRAY_SEGMENT}", found)
    for branch in node.union_branches():
        _walk_defaults(branch, path, found)


def extract_required_fields(schema: ResolvedSchema) -> tuple[str, ...]:
    """Collect dotted paths named in a ``required`` list at every nesting level.

    Returns:
        tuple[str, ...]: Required paths, parents before children.
    """
    found: list[str] = []
    _walk_required(schema, "", found)
    return tuple(found)


def _walk_required(node: ResolvedSchema, path: str, found: list[str]) -> None:
    if node.is_stub:
        return
    for name in node.all_required():
        required_path = join_path(path, name)
        if required_path not in found:
            found.append(required_path)
    for name, child in node.all_properties().items():
        _walk_required(child, join_path(path, name), found)
    if node.items is not None:
        _walk_required(node.items, f"{path}{ARRAY_SEGMENT}", found)


def extract_mutually_exclusive_groups(schema: ResolvedSchema) -> tuple[MutuallyExclusiveGroup, ...]:
    """Detect mutually-exclusive groups at any nesting depth.

    Two shapes are recognised: ``x-ves-oneof-field-<choice>`` annotations
    naming alternative sibling fields, and ``oneOf``/``anyOf`` unions whose
    branches are named by their title.

    Args:
        schema: Resolved request schema.

    Returns:
        tuple[MutuallyExclusiveGroup, ...]: Groups tagged with their full dotted path.
    """
    found: list[MutuallyExclusiveGroup] = []
    _walk_groups(schema, "", found)
    return merge_groups(found)


def _walk_groups(node: ResolvedSchema, path: str, found: list[MutuallyExclusiveGroup]) -> None:
    if node.is_stub:
        return
    found.extend(_annotation_groups(node, path))
    for source, branches, reason in (
        ("oneOf", node.one_of, ONE_OF_REASON),
        ("anyOf", node.any_of, ANY_OF_REASON),
    ):
        if len(branches) >= 2:
            found.append(_union_group(branches, path, source=source, reason=reason))
    for name, child in node.properties.items():
        _walk_groups(child, join_path(path, name), found)
    if node.items is not None:
        _walk_groups(node.items, f"{path}{ARRAY_SEGMENT}", found)
    for branch in (*node.all_of, *node.union_branches()):
        _walk_groups(branch, path, found)


def _annotation_groups(node: ResolvedSchema, path: str) -> list[MutuallyExclusiveGroup]:
    groups: list[MutuallyExclusiveGroup] = []
    properties = node.all_properties()
    for key, value in node.extensions.items():
        if not key.startswith(ONEOF_FIELD_PREFIX):
            continue
        choice = key[len(ONEOF_FIELD_PREFIX) :]
        names = _option_names(value, key=key, path=path)
        if not names:
            continue
        options = tuple(
            ExclusiveOption(
                name=name,
                description=properties[name].description if name in properties else None,
                fields=(join_path(path, name),),
                server_default=name in properties and properties[name].server_default,
            )
            for name in names
        )
        recommended = node.extensions.get(f"{RECOMMENDED_VARIANT_PREFIX}{choice}")
        if not isinstance(recommended, str):
            # first alternative carrying the server-default marker, in table order
            recommended = next((option.name for option in options if option.server_default), None)
        groups.append(
            MutuallyExclusiveGroup(
                field_path=join_path(path, choice),
                options=options,
                source="annotation",
                recommended_option=recommended,
                reason=ANNOTATION_REASON,
            ),
        )
    return groups


def _option_names(value: JSONValue, *, key: str, path: str) -> tuple[str, ...]:
    raw: JSONValue = value
    if isinstance(value, str):
        try:
            raw = cast(JSONValue, json.loads(value))
        except json.JSONDecodeError:
            LOGGER.warning("Ignoring %s at '%s': value is not valid JSON", key, path or ROOT_PATH)
            return ()
    if not is_json_array(raw) or not all(isinstance(item, str) for item in cast(list[JSONValue], raw)):
        LOGGER.warning("Ignoring %s at '%s': expected a list of field names", key, path or ROOT_PATH)
        return ()
    return tuple(cast(list[str], raw))


def _union_group(
    branches: tuple[ResolvedSchema, ...],
    path: str,
    *,
    source: str,
    reason: str,
) -> MutuallyExclusiveGroup:
    options = tuple(
        ExclusiveOption(
            name=branch.title or branch.ref_name or f"option{index + 1}",
            description=branch.description,
            fields=tuple(join_path(path, name) for name in branch.all_properties()),
        )
        for index, branch in enumerate(branches)
    )
    return MutuallyExclusiveGroup(
        field_path=path or ROOT_PATH,
        options=options,
        source="oneOf" if source == "oneOf" else "anyOf",
        reason=reason,
    )


def minimum_configuration(schema: ResolvedSchema) -> MinimumConfiguration | None:
    """Return the ``x-f5xc-minimum-configuration`` annotation of ``schema``, if any."""

    raw = schema.extensions.get(MINIMUM_CONFIGURATION_KEY)
    if not isinstance(raw, Mapping):
        return None
    description = raw.get("description")
    required_raw = raw.get("required_fields")
    required = (
        tuple(item for item in cast(list[JSONValue], required_raw) if isinstance(item, str))
        if is_json_array(required_raw)
        else ()
    )
    example: JSONValue = thaw_json_value(raw.get("example_json"))
    if isinstance(example, str):
        try:
            example = cast(JSONValue, json.loads(example))
        except json.JSONDecodeError:
            LOGGER.warning("Ignoring invalid example_json in %s", MINIMUM_CONFIGURATION_KEY)
            example = None
    groups: list[MutuallyExclusiveGroup] = []
    groups_raw = raw.get("mutually_exclusive_groups")
    if is_json_array(groups_raw):
        for item in cast(list[JSONValue], groups_raw):
            if not isinstance(item, Mapping):
                continue
            fields_raw = item.get("fields")
            if not is_json_array(fields_raw):
                continue
            fields = [name for name in cast(list[JSONValue], fields_raw) if isinstance(name, str)]
            reason = item.get("reason")
            groups.append(
                MutuallyExclusiveGroup(
                    field_path=" | ".join(fields),
                    options=tuple(ExclusiveOption(name=name, fields=(name,)) for name in fields),
                    source="minimum-configuration",
                    reason=reason if isinstance(reason, str) else None,
                ),
            )
    return MinimumConfiguration(
        description=description if isinstance(description, str) else None,
        required_fields=required,
        example_json=example,
        mutually_exclusive_groups=tuple(groups),
    )


def tool_groups(specs: Iterable[OneOfGroupSpec]) -> tuple[MutuallyExclusiveGroup, ...]:
    """Convert groups declared on a tool descriptor into the shared model."""

    return tuple(
        MutuallyExclusiveGroup(
            field_path=spec.field,
            options=tuple(ExclusiveOption(name=option, fields=(option,)) for option in spec.options),
            source="tool",
            recommended_option=spec.recommended,
            reason=spec.description,
        )
        for spec in specs
    )


def collect_groups(
    schema: ResolvedSchema | None,
    declared: Iterable[OneOfGroupSpec] = (),
) -> tuple[MutuallyExclusiveGroup, ...]:
    """Return schema, tool-declared and minimum-configuration groups, deduplicated.

    Args:
        schema: Resolved request schema, or ``None`` for tools without a body.
        declared: Groups declared on the tool descriptor.

    Returns:
        tuple[MutuallyExclusiveGroup, ...]: Groups in that precedence order.
    """
    if schema is None:
        return merge_groups(tool_groups(declared))
    minimum = minimum_configuration(schema)
    return merge_groups(
        (
            *extract_mutually_exclusive_groups(schema),
            *tool_groups(declared),
            *(minimum.mutually_exclusive_groups if minimum is not None else ()),
        ),
    )


def merge_groups(groups: Iterable[MutuallyExclusiveGroup]) -> tuple[MutuallyExclusiveGroup, ...]:
    """Deduplicate groups keeping the first occurrence.

    Two groups are the same choice when they share a field path or cover
    the same set of option fields, so a minimum-configuration group naming
    ``spec.http`` and ``spec.https`` folds into the annotation group that
    declares those alternatives. A later duplicate only contributes a
    recommended option the first one lacks.
    """
    merged: list[MutuallyExclusiveGroup] = []
    by_path: dict[str, int] = {}
    by_fields: dict[frozenset[str], int] = {}
    for group in groups:
        fields = frozenset(field for option in group.options for field in option.fields)
        position = by_path.get(group.field_path)
        if position is None and fields:
            position = by_fields.get(fields)
        if position is None:
            by_path[group.field_path] = len(merged)
            if fields:
                by_fields.setdefault(fields, len(merged))
            merged.append(group)
            continue
        existing = merged[position]
        if existing.recommended_option is None and group.recommended_option is not None:
            merged[position] = replace(existing, recommended_option=group.recommended_option)
    return tuple(merged)


__all__ = [
    "MINIMUM_CONFIGURATION_KEY",
    "ONEOF_FIELD_PREFIX",
    "RECOMMENDED_VARIANT_PREFIX",
    "collect_groups",
    "extract_field_defaults",
    "extract_mutually_exclusive_groups",
    "extract_required_fields",
    "merge_groups",
    "minimum_configuration",
    "tool_groups",
]
