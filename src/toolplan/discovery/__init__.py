# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Search, validation, cost estimation and payload suggestions."""

from __future__ import annotations

from typing import Final

from .cost import (
    CostEstimator,
    LatencyEstimate,
    LatencyLevel,
    StepCost,
    TokenEstimate,
    ToolCostEstimate,
    WorkflowCostEstimate,
)
from .search import PrerequisiteHint, ResourceMatch, SearchEngine, SearchFilters, SearchHit
from .suggest import ParameterSuggester, Suggestion
from .validate import AppliedDefault, ParameterValidator, RecommendedValue, ValidationResult

__all__: Final[tuple[str, ...]] = (
    "AppliedDefault",
    "CostEstimator",
    "LatencyEstimate",
    "LatencyLevel",
    "ParameterSuggester",
    "ParameterValidator",
    "PrerequisiteHint",
    "RecommendedValue",
    "ResourceMatch",
    "SearchEngine",
    "SearchFilters",
    "SearchHit",
    "StepCost",
    "Suggestion",
    "TokenEstimate",
    "ToolCostEstimate",
    "ValidationResult",
    "WorkflowCostEstimate",
)
