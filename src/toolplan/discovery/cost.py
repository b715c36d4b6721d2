# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Heuristic token and latency estimates for tools and whole plans."""

from __future__ import annotations

import json
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Final

from ..catalog.cache import CatalogCache
from ..catalog.model_tool import DangerLevel, Operation, ToolDescriptor
from ..catalog.utils import thaw_json_value
from ..resolution.dependencies import CreationPlan

CHARS_PER_TOKEN: Final[int] = 4
SCHEMA_BASE_TOKENS: Final[int] = 50
TOKENS_PER_PARAMETER: Final[int] = 15

DEFAULT_SCHEMA_TOKENS: Final[int] = 200
DEFAULT_REQUEST_TOKENS: Final[int] = 100
DEFAULT_RESPONSE_TOKENS: Final[int] = 300
DEFAULT_LATENCY_MS: Final[int] = 1000

REQUEST_TOKENS: Final[dict[Operation, int]] = {
    Operation.CREATE: 600,
    Operation.UPDATE: 300,
    Operation.GET: 30,
    Operation.LIST: 40,
    Operation.DELETE: 20,
    Operation.OTHER: DEFAULT_REQUEST_TOKENS,
}

RESPONSE_TOKENS: Final[dict[Operation, int]] = {
    Operation.LIST: 1500,
    Operation.GET: 500,
    Operation.CREATE: 400,
    Operation.UPDATE: 400,
    Operation.DELETE: 50,
    Operation.OTHER: DEFAULT_RESPONSE_TOKENS,
}


class LatencyLevel(str, Enum):
    """Latency bucket of an operation."""

    LOW = "low"
    MODERATE = "moderate"
    UNKNOWN = "unknown"


@dataclass(frozen=True, slots=True)
class LatencyEstimate:
    """Latency bucket with a fixed millisecond estimate."""

    level: LatencyLevel
    estimated_ms: int
    description: str


LATENCY: Final[dict[Operation, LatencyEstimate]] = {
    Operation.GET: LatencyEstimate(LatencyLevel.LOW, 300, "Single resource read"),
    Operation.LIST: LatencyEstimate(LatencyLevel.LOW, 800, "Collection read; large result sets take longer"),
    Operation.CREATE: LatencyEstimate(LatencyLevel.MODERATE, 1500, "Write operation that provisions a resource"),
    Operation.UPDATE: LatencyEstimate(LatencyLevel.MODERATE, 1200, "Write operation that reconfigures a resource"),
    Operation.DELETE: LatencyEstimate(LatencyLevel.MODERATE, 1000, "Write operation that removes a resource"),
    Operation.OTHER: LatencyEstimate(LatencyLevel.MODERATE, DEFAULT_LATENCY_MS, "Custom operation"),
}

UNKNOWN_LATENCY: Final[LatencyEstimate] = LatencyEstimate(
    LatencyLevel.UNKNOWN,
    DEFAULT_LATENCY_MS,
    "Latency not specified; conservative default applied",
)


@dataclass(frozen=True, slots=True)
class TokenEstimate:
    """Token breakdown of one call."""

    schema_tokens: int
    request_tokens: int
    response_tokens: int

    @property
    def total_tokens(self) -> int:
        """Return the sum of schema, request and response tokens."""

        return self.schema_tokens + self.request_tokens + self.response_tokens


DEFAULT_TOKENS: Final[TokenEstimate] = TokenEstimate(
    schema_tokens=DEFAULT_SCHEMA_TOKENS,
    request_tokens=DEFAULT_REQUEST_TOKENS,
    response_tokens=DEFAULT_RESPONSE_TOKENS,
)


@dataclass(frozen=True, slots=True)
class ToolCostEstimate:
    """Token and latency estimate of one tool."""

    tool_name: str
    exists: bool
    tokens: TokenEstimate
    latency: LatencyEstimate
    danger_level: DangerLevel
    operation: Operation | None = None

    @property
    def total_tokens(self) -> int:
        """Return the total token estimate."""

        return self.tokens.total_tokens


@dataclass(frozen=True, slots=True)
class StepCost:
    """Per-step contribution to a workflow estimate."""

    step_number: int
    tool_name: str | None
    tokens: int
    latency_ms: int
    latency_level: LatencyLevel


@dataclass(frozen=True, slots=True)
class WorkflowCostEstimate:
    """Aggregate estimate of a creation plan."""

    total_tokens: int
    average_latency: LatencyLevel
    estimated_total_ms: int
    step_count: int
    steps: tuple[StepCost, ...] = ()
    warnings: tuple[str, ...] = ()


class CostEstimator:
    """Compute heuristic estimates from catalog descriptors."""

    def __init__(self, cache: CatalogCache) -> None:
        """Create an estimator reading descriptors from ``cache``."""

        self._cache = cache

    def estimate_tool(self, tool_name: str) -> ToolCostEstimate:
        """Return the estimate of ``tool_name``; unknown tools get conservative defaults.

        Args:
            tool_name: Catalogued tool name.

        Returns:
            ToolCostEstimate: Estimate with ``exists`` set to ``False`` for
            unknown tools (600 tokens, ``unknown`` latency).
        """
        tool = self._cache.snapshot().get(tool_name)
        if tool is None:
            return ToolCostEstimate(
                tool_name=tool_name,
                exists=False,
                tokens=DEFAULT_TOKENS,
                latency=UNKNOWN_LATENCY,
                danger_level=DangerLevel.LOW,
            )
        return ToolCostEstimate(
            tool_name=tool_name,
            exists=True,
            tokens=estimate_tokens(tool),
            latency=LATENCY[tool.operation],
            danger_level=tool.danger_level,
            operation=tool.operation,
        )

    def estimate_tools(self, tool_names: Iterable[str]) -> tuple[ToolCostEstimate, ...]:
        """Return estimates for ``tool_names`` preserving their order."""

        return tuple(self.estimate_tool(name) for name in tool_names)

    def estimate_workflow(self, plan: CreationPlan | Sequence[str]) -> WorkflowCostEstimate:
        """Aggregate per-step estimates across a plan.

        Args:
            plan: Creation plan, or an ordered sequence of tool names.

        Returns:
            WorkflowCostEstimate: Summed tokens and latency. An empty plan
            yields zeros throughout.
        """
        names: list[str | None]
        if isinstance(plan, CreationPlan):
            names = [step.tool_name for step in plan.steps]
            keys = [step.key for step in plan.steps]
        else:
            names = list(plan)
            keys = [name or "" for name in names]

        warnings: list[str] = []
        steps: list[StepCost] = []
        for index, (name, key) in enumerate(zip(names, keys), start=1):
            if name is None:
                warnings.append(f"Step {index}: no create tool found for {key}; default estimate applied")
                estimate = self.estimate_tool("")
            else:
                estimate = self.estimate_tool(name)
                if not estimate.exists:
                    warnings.append(f"Step {index}: tool {name} not found; default estimate applied")
            steps.append(
                StepCost(
                    step_number=index,
                    tool_name=name,
                    tokens=estimate.total_tokens,
                    latency_ms=estimate.latency.estimated_ms,
                    latency_level=estimate.latency.level,
                ),
            )
        return WorkflowCostEstimate(
            total_tokens=sum(step.tokens for step in steps),
            average_latency=_overall_level(steps),
            estimated_total_ms=sum(step.latency_ms for step in steps),
            step_count=len(steps),
            steps=tuple(steps),
            warnings=tuple(warnings),
        )


def estimate_tokens(tool: ToolDescriptor) -> TokenEstimate:
    """Return the token breakdown of ``tool``.

    Schema tokens grow with the descriptor's text and parameter count.
    Request tokens are largest for create/update and minimal for delete;
    response tokens are largest for list.
    """
    text = " ".join((tool.name, tool.summary, tool.description))
    if tool.request_body is not None:
        text += json.dumps(thaw_json_value(tool.request_body), sort_keys=True)
    parameters = len(tool.path_parameters) + len(tool.query_parameters)
    return TokenEstimate(
        schema_tokens=SCHEMA_BASE_TOKENS + len(text) // CHARS_PER_TOKEN + TOKENS_PER_PARAMETER * parameters,
        request_tokens=REQUEST_TOKENS[tool.operation],
        response_tokens=RESPONSE_TOKENS[tool.operation],
    )


def _overall_level(steps: Sequence[StepCost]) -> LatencyLevel:
    if all(step.latency_level is LatencyLevel.LOW for step in steps):
        return LatencyLevel.LOW
    return LatencyLevel.MODERATE


__all__ = [
    "CostEstimator",
    "LatencyEstimate",
    "LatencyLevel",
    "StepCost",
    "TokenEstimate",
    "ToolCostEstimate",
    "WorkflowCostEstimate",
    "estimate_tokens",
]
