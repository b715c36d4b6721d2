# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Schema and dependency resolution over the loaded catalog."""

from __future__ import annotations

from typing import Final

from .dependencies import (
    AlternativePlan,
    Complexity,
    CreationPlan,
    DependencyResolver,
    ResolveOptions,
    WorkflowStep,
)
from .extraction import (
    collect_groups,
    extract_field_defaults,
    extract_mutually_exclusive_groups,
    extract_required_fields,
    merge_groups,
    minimum_configuration,
    tool_groups,
)
from .models import ExclusiveOption, FieldDefault, MinimumConfiguration, MutuallyExclusiveGroup, ResolvedSchema
from .schema_resolver import SchemaResolver, parse_ref

__all__: Final[tuple[str, ...]] = (
    "AlternativePlan",
    "Complexity",
    "CreationPlan",
    "DependencyResolver",
    "ExclusiveOption",
    "FieldDefault",
    "MinimumConfiguration",
    "MutuallyExclusiveGroup",
    "ResolveOptions",
    "ResolvedSchema",
    "SchemaResolver",
    "WorkflowStep",
    "collect_groups",
    "extract_field_defaults",
    "extract_mutually_exclusive_groups",
    "extract_required_fields",
    "merge_groups",
    "minimum_configuration",
    "parse_ref",
    "tool_groups",
)
