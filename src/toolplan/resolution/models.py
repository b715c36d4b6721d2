# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Resolved schema tree and the metadata extracted from it."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from typing import Final, Literal

from ..catalog.types import JSONValue
from ..catalog.utils import thaw_json_value

ARRAY_SEGMENT: Final[str] = "[]"

GroupSource = Literal["annotation", "oneOf", "anyOf", "minimum-configuration", "tool"]


def join_path(prefix: str, name: str) -> str:
    """Return ``prefix.name`` or ``name`` when ``prefix`` is empty."""

    return f"{prefix}.{name}" if prefix else name


@dataclass(frozen=True, slots=True)
class ResolvedSchema:
    """Expanded schema node with every resolvable ``$ref`` inlined.

    A slot that re-enters a definition already on the active expansion
    chain is kept as a stub with ``circular`` set. A slot cut off by the
    depth bound has ``truncated`` set. A reference that names a missing
    definition keeps its pointer in ``unresolved_ref``.
    """

    type: str | None = None
    title: str | None = None
    description: str | None = None
    format: str | None = None
    properties: Mapping[str, ResolvedSchema] = field(default_factory=dict)
    items: ResolvedSchema | None = None
    one_of: tuple[ResolvedSchema, ...] = ()
    any_of: tuple[ResolvedSchema, ...] = ()
    all_of: tuple[ResolvedSchema, ...] = ()
    additional_properties: ResolvedSchema | bool | None = None
    required: tuple[str, ...] = ()
    enum: tuple[JSONValue, ...] = ()
    default: JSONValue = None
    has_default: bool = False
    server_default: bool = False
    recommended_value: JSONValue = None
    has_recommended_value: bool = False
    example: JSONValue = None
    extensions: Mapping[str, JSONValue] = field(default_factory=dict)
    ref_name: str | None = None
    circular: bool = False
    truncated: bool = False
    unresolved_ref: str | None = None

    @property
    def effective_type(self) -> str | None:
        """Return the declared type, inferring ``object``/``array`` from structure."""

        if self.type:
            return self.type
        if self.properties:
            return "object"
        if self.items is not None:
            return "array"
        return None

    @property
    def is_stub(self) -> bool:
        """Return ``True`` when the node was not expanded."""

        return self.circular or self.truncated or self.unresolved_ref is not None

    def all_properties(self) -> dict[str, ResolvedSchema]:
        """Return own properties merged with those contributed by ``allOf`` branches."""

        merged: dict[str, ResolvedSchema] = {}
        for branch in self.all_of:
            merged.update(branch.all_properties())
        merged.update(self.properties)
        return merged

    def all_required(self) -> tuple[str, ...]:
        """Return required names declared here or on ``allOf`` branches."""

        names: list[str] = list(self.required)
        for branch in self.all_of:
            names.extend(name for name in branch.all_required() if name not in names)
        return tuple(names)

    def union_branches(self) -> Iterator[ResolvedSchema]:
        """Yield ``oneOf`` then ``anyOf`` branches."""

        yield from self.one_of
        yield from self.any_of

    def to_dict(self) -> dict[str, JSONValue]:
        """Return a JSON-compatible rendering of the tree.

        Circular and truncated slots render with ``_circular`` /
        ``_truncated`` markers next to the definition name.
        """
        payload: dict[str, JSONValue] = {}
        if self.circular:
            payload["_circular"] = True
        if self.truncated:
            payload["_truncated"] = True
        if self.unresolved_ref is not None:
            payload["_unresolved"] = self.unresolved_ref
        if self.ref_name is not None:
            payload["_ref"] = self.ref_name
        for key, value in (
            ("type", self.type),
            ("title", self.title),
            ("description", self.description),
            ("format", self.format),
        ):
            if value is not None:
                payload[key] = value
        if self.properties:
            payload["properties"] = {name: child.to_dict() for name, child in self.properties.items()}
        if self.items is not None:
            payload["items"] = self.items.to_dict()
        for key, branches in (("oneOf", self.one_of), ("anyOf", self.any_of), ("allOf", self.all_of)):
            if branches:
                payload[key] = [branch.to_dict() for branch in branches]
        if isinstance(self.additional_properties, ResolvedSchema):
            payload["additionalProperties"] = self.additional_properties.to_dict()
        elif self.additional_properties is not None:
            payload["additionalProperties"] = self.additional_properties
        if self.required:
            payload["required"] = list(self.required)
        if self.enum:
            payload["enum"] = [thaw_json_value(value) for value in self.enum]
        if self.has_default:
            payload["default"] = thaw_json_value(self.default)
        if self.server_default:
            payload["x-f5xc-server-default"] = True
        if self.has_recommended_value:
            payload["x-f5xc-recommended-value"] = thaw_json_value(self.recommended_value)
        if self.example is not None:
            payload["example"] = thaw_json_value(self.example)
        for key, value in self.extensions.items():
            payload[key] = thaw_json_value(value)
        return payload


@dataclass(frozen=True, slots=True)
class FieldDefault:
    """Default metadata of one field path."""

    path: str
    default: JSONValue = None
    has_default: bool = False
    server_default: bool = False
    recommended_value: JSONValue = None
    has_recommended_value: bool = False

    @property
    def per_element(self) -> bool:
        """Return ``True`` when the path addresses array elements."""

        return ARRAY_SEGMENT in self.path


@dataclass(frozen=True, slots=True)
class ExclusiveOption:
    """One alternative of a mutually-exclusive group.

    ``fields`` lists the dotted body paths whose presence selects the option.
    """

    name: str
    description: str | None = None
    fields: tuple[str, ...] = ()
    server_default: bool = False


@dataclass(frozen=True, slots=True)
class MutuallyExclusiveGroup:
    """Set of options of which a valid request sets at most one."""

    field_path: str
    options: tuple[ExclusiveOption, ...]
    source: GroupSource
    recommended_option: str | None = None
    reason: str | None = None

    @property
    def option_names(self) -> tuple[str, ...]:
        """Return the option names in table order."""

        return tuple(option.name for option in self.options)


@dataclass(frozen=True, slots=True)
class MinimumConfiguration:
    """Minimal working configuration advertised by a schema."""

    description: str | None = None
    required_fields: tuple[str, ...] = ()
    example_json: JSONValue = None
    mutually_exclusive_groups: tuple[MutuallyExclusiveGroup, ...] = ()


__all__ = [
    "ARRAY_SEGMENT",
    "ExclusiveOption",
    "FieldDefault",
    "GroupSource",
    "MinimumConfiguration",
    "MutuallyExclusiveGroup",
    "ResolvedSchema",
    "join_path",
]
