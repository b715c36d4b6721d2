# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Public export surface for the tool catalog."""

from __future__ import annotations

from typing import Final

from .cache import CacheStats, CatalogCache
from .errors import CatalogIntegrityError, CatalogValidationError
from .loader import CatalogLoader
from .model_catalog import CatalogSnapshot
from .model_dependency import (
    DependencyGraph,
    DependencyGraphEntry,
    GraphStats,
    ResourceChoice,
    ResourceRef,
    SubscriptionRequirement,
)
from .model_tool import DangerLevel, OneOfGroupSpec, Operation, ParameterDefinition, SideEffects, ToolDescriptor
from .types import JSONValue, resource_key

__all__: Final[tuple[str, ...]] = (
    "CacheStats",
    "CatalogCache",
    "CatalogIntegrityError",
    "CatalogLoader",
    "CatalogSnapshot",
    "CatalogValidationError",
    "DangerLevel",
    "DependencyGraph",
    "DependencyGraphEntry",
    "GraphStats",
    "JSONValue",
    "OneOfGroupSpec",
    "Operation",
    "ParameterDefinition",
    "ResourceChoice",
    "ResourceRef",
    "SideEffects",
    "SubscriptionRequirement",
    "ToolDescriptor",
    "resource_key",
)
