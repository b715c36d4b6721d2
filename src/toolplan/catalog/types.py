# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared type aliases and constants for the tool catalog."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Final, TypeAlias

JSONPrimitive: TypeAlias = str | int | float | bool | None
JSONValue: TypeAlias = JSONPrimitive | Sequence["JSONValue"] | Mapping[str, "JSONValue"]

INDEX_SCHEMA_VERSION: Final[str] = "1.0.0"
DEPENDENCY_SCHEMA_VERSION: Final[str] = "1.0.0"

RESOURCE_KEY_SEPARATOR: Final[str] = "/"


def resource_key(domain: str, resource: str) -> str:
    """Return the ``domain/resource`` key used to address graph nodes."""

    return f"{domain}{RESOURCE_KEY_SEPARATOR}{resource}"


__all__ = [
    "DEPENDENCY_SCHEMA_VERSION",
    "INDEX_SCHEMA_VERSION",
    "JSONPrimitive",
    "JSONValue",
    "RESOURCE_KEY_SEPARATOR",
    "resource_key",
]
