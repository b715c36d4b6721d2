# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Expand raw schema nodes into :class:`ResolvedSchema` trees.

Resolution walks the node graph with a visited-path set of
``(domain, definition)`` pairs: re-entering a definition that is already on
the active expansion chain yields a stub tagged ``circular`` instead of
recursing. A depth bound, independent of cycle detection, truncates
pathological acyclic nesting.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from dataclasses import replace
from typing import Final, cast

from ..catalog.cache import CatalogCache
from ..catalog.types import JSONValue
from ..catalog.utils import freeze_json_value, is_json_array, thaw_json_value
from .models import ResolvedSchema

LOGGER = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH: Final[int] = 10

REF_PREFIXES: Final[tuple[str, ...]] = ("#/components/schemas/", "#/definitions/")
SERVER_DEFAULT_KEY: Final[str] = "x-f5xc-server-default"
RECOMMENDED_VALUE_KEY: Final[str] = "x-f5xc-recommended-value"

_STRUCTURAL_KEYS: Final[frozenset[str]] = frozenset(
    {
        "$ref",
        "type",
        "title",
        "description",
        "format",
        "properties",
        "items",
        "oneOf",
        "anyOf",
        "allOf",
        "additionalProperties",
        "required",
        "enum",
        "default",
        "example",
        SERVER_DEFAULT_KEY,
        RECOMMENDED_VALUE_KEY,
    },
)


def parse_ref(ref: str) -> str | None:
    """Return the definition name addressed by a local JSON pointer.

    Args:
        ref: Pointer such as ``#/components/schemas/origin_poolCreateSpecType``.

    Returns:
        str | None: Definition name, or ``None`` for unsupported pointers.
    """
    for prefix in REF_PREFIXES:
        if ref.startswith(prefix):
            name = ref[len(prefix) :]
            if name and "/" not in name:
                return name.replace("~1", "/").replace("~0", "~")
    return None


class SchemaResolver:
    """Resolve schema nodes against per-domain definition tables."""

    def __init__(self, cache: CatalogCache, *, max_depth: int = DEFAULT_MAX_DEPTH) -> None:
        """Create a resolver backed by ``cache``.

        Args:
            cache: Catalog cache providing definition tables and the
                per-domain resolved-schema cache.
            max_depth: Nesting bound applied independently of cycle detection.
        """

        self._cache = cache
        self._max_depth = max_depth

    @property
    def max_depth(self) -> int:
        """Return the nesting bound used by this resolver."""

        return self._max_depth

    def resolve(self, node: Mapping[str, JSONValue] | None, domain: str) -> ResolvedSchema:
        """Return the fully expanded form of ``node``.

        Results are cached per originating ``domain``; resolving the same
        node twice returns an equal (and identical) tree.

        Args:
            node: Raw schema node, typically a ``$ref`` taken from a descriptor.
            domain: Domain whose definition table is searched first.

        Returns:
            ResolvedSchema: Expanded schema. ``None`` yields an empty schema.
        """
        if node is None:
            return ResolvedSchema()
        key = (json.dumps(thaw_json_value(node), sort_keys=True), self._max_depth)
        cached = self._cache.cached_resolution(domain, key)
        if cached is not None:
            return cast(ResolvedSchema, cached)
        resolved = self._resolve_node(node, domain, visited=frozenset(), depth=0)
        return cast(ResolvedSchema, self._cache.store_resolution(domain, key, resolved))

    def resolve_definition(self, name: str, domain: str) -> ResolvedSchema | None:
        """Resolve the named definition, or return ``None`` when it is unknown."""

        if self.lookup_definition(name, domain) is None:
            return None
        return self.resolve({"$ref": f"{REF_PREFIXES[0]}{name}"}, domain)

    def lookup_definition(self, name: str, domain: str) -> tuple[str, Mapping[str, JSONValue]] | None:
        """Find definition ``name`` in ``domain`` or, failing that, any loaded domain.

        Args:
            name: Definition name.
            domain: Domain searched first; its table is loaded on demand.

        Returns:
            tuple[str, Mapping[str, JSONValue]] | None: Owning domain and raw
            definition, or ``None`` when no loaded table defines ``name``.
        """
        table = self._cache.domain_table(domain)
        if table is not None:
            definition = table.get(name)
            if isinstance(definition, Mapping):
                return domain, definition
        for other_domain, other_table in self._cache.loaded_tables():
            if other_domain == domain:
                continue
            definition = other_table.get(name)
            if isinstance(definition, Mapping):
                LOGGER.debug("Resolved '%s' from domain '%s' for '%s'", name, other_domain, domain)
                return other_domain, definition
        return None

    def _resolve_node(
        self,
        node: Mapping[str, JSONValue],
        domain: str,
        *,
        visited: frozenset[tuple[str, str]],
        depth: int,
    ) -> ResolvedSchema:
        if depth > self._max_depth:
            LOGGER.debug("Schema depth bound %d reached in domain '%s'", self._max_depth, domain)
            ref = node.get("$ref")
            stub = ResolvedSchema(truncated=True, ref_name=parse_ref(ref) if isinstance(ref, str) else None)
            return _apply_siblings(stub, node)

        ref = node.get("$ref")
        if isinstance(ref, str):
            return self._resolve_ref(ref, node, domain, visited=visited, depth=depth)

        child_depth = depth + 1
        properties_raw = node.get("properties")
        properties: dict[str, ResolvedSchema] = {}
        if isinstance(properties_raw, Mapping):
            for name, child in properties_raw.items():
                if isinstance(child, Mapping):
                    properties[name] = self._resolve_node(child, domain, visited=visited, depth=child_depth)

        items_raw = node.get("items")
        items = (
            self._resolve_node(items_raw, domain, visited=visited, depth=child_depth)
            if isinstance(items_raw, Mapping)
            else None
        )

        additional_raw = node.get("additionalProperties")
        additional: ResolvedSchema | bool | None
        if isinstance(additional_raw, Mapping):
            additional = self._resolve_node(additional_raw, domain, visited=visited, depth=child_depth)
        elif isinstance(additional_raw, bool):
            additional = additional_raw
        else:
            additional = None

        return _apply_siblings(
            ResolvedSchema(
                type=_schema_type(node.get("type")),
                title=_optional_text(node.get("title")),
                description=_optional_text(node.get("description")),
                format=_optional_text(node.get("format")),
                properties=properties,
                items=items,
                one_of=self._branches(node.get("oneOf"), domain, visited=visited, depth=child_depth),
                any_of=self._branches(node.get("anyOf"), domain, visited=visited, depth=child_depth),
                all_of=self._branches(node.get("allOf"), domain, visited=visited, depth=child_depth),
                additional_properties=additional,
                required=_required_names(node.get("required")),
                enum=_frozen_enum(node.get("enum")),
                example=_frozen(node.get("example")),
                extensions={
                    key: _frozen(value)
                    for key, value in node.items()
                    if key.startswith("x-") and key not in _STRUCTURAL_KEYS
                },
            ),
            node,
        )

    def _resolve_ref(
        self,
        ref: str,
        node: Mapping[str, JSONValue],
        domain: str,
        *,
        visited: frozenset[tuple[str, str]],
        depth: int,
    ) -> ResolvedSchema:
        name = parse_ref(ref)
        found = self.lookup_definition(name, domain) if name is not None else None
        if name is None or found is None:
            LOGGER.warning("Unresolvable schema reference '%s' in domain '%s'", ref, domain)
            return _apply_siblings(ResolvedSchema(unresolved_ref=ref, ref_name=name), node)
        target_domain, definition = found
        slot = (target_domain, name)
        if slot in visited:
            LOGGER.debug("Circular reference to '%s' in domain '%s'", name, target_domain)
            return _apply_siblings(
                ResolvedSchema(
                    type=_schema_type(definition.get("type")),
                    title=_optional_text(definition.get("title")),
                    circular=True,
                    ref_name=name,
                ),
                node,
            )
        resolved = self._resolve_node(definition, target_domain, visited=visited | {slot}, depth=depth)
        return _apply_siblings(replace(resolved, ref_name=name), node)

    def _branches(
        self,
        value: JSONValue | None,
        domain: str,
        *,
        visited: frozenset[tuple[str, str]],
        depth: int,
    ) -> tuple[ResolvedSchema, ...]:
        if not is_json_array(value):
            return ()
        return tuple(
            self._resolve_node(branch, domain, visited=visited, depth=depth)
            for branch in cast(list[JSONValue], value)
            if isinstance(branch, Mapping)
        )


def _apply_siblings(resolved: ResolvedSchema, node: Mapping[str, JSONValue]) -> ResolvedSchema:
    """Overlay annotations present on ``node`` onto ``resolved``; node values win."""

    changes: dict[str, object] = {}
    if "default" in node:
        changes["default"] = _frozen(node["default"])
        changes["has_default"] = True
    if node.get(SERVER_DEFAULT_KEY) is True:
        changes["server_default"] = True
    if RECOMMENDED_VALUE_KEY in node:
        changes["recommended_value"] = _frozen(node[RECOMMENDED_VALUE_KEY])
        changes["has_recommended_value"] = True
    if "$ref" in node:
        description = _optional_text(node.get("description"))
        if description is not None:
            changes["description"] = description
        title = _optional_text(node.get("title"))
        if title is not None:
            changes["title"] = title
    if not changes:
        return resolved
    return replace(resolved, **changes)  # type: ignore[arg-type]


def _schema_type(value: JSONValue | None) -> str | None:
    if isinstance(value, str):
        return value
    if is_json_array(value):
        for item in cast(list[JSONValue], value):
            if isinstance(item, str) and item != "null":
                return item
    return None


def _optional_text(value: JSONValue | None) -> str | None:
    return value if isinstance(value, str) else None


def _required_names(value: JSONValue | None) -> tuple[str, ...]:
    if not is_json_array(value):
        return ()
    return tuple(item for item in cast(list[JSONValue], value) if isinstance(item, str))


def _frozen(value: JSONValue | None) -> JSONValue:
    return freeze_json_value(value, context="schema") if value is not None else None


def _frozen_enum(value: JSONValue | None) -> tuple[JSONValue, ...]:
    if not is_json_array(value):
        return ()
    return tuple(_frozen(item) for item in cast(list[JSONValue], value))


__all__ = ["DEFAULT_MAX_DEPTH", "SchemaResolver", "parse_ref"]
