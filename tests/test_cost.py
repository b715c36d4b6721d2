# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for token and latency estimates."""

from __future__ import annotations

from toolplan.catalog import DangerLevel, Operation, ToolDescriptor
from toolplan.discovery import LatencyLevel
from toolplan.discovery.cost import estimate_tokens
from toolplan.planner import CatalogPlanner
from toolplan.resolution import CreationPlan


def test_unknown_tool_gets_conservative_default(planner: CatalogPlanner) -> None:
    """Unknown tools are estimated rather than rejected."""
    estimate = planner.estimate_tool("nope")

    assert estimate.exists is False
    assert estimate.total_tokens == 600
    assert estimate.latency.level is LatencyLevel.UNKNOWN
    assert estimate.latency.estimated_ms == 1000
    assert estimate.operation is None


def test_list_tool_estimate(planner: CatalogPlanner) -> None:
    """List calls have small requests, large responses and low latency."""
    estimate = planner.estimate_tool("virtual-origin-pool-list")

    assert estimate.exists is True
    assert estimate.operation is Operation.LIST
    assert estimate.tokens.request_tokens == 40
    assert estimate.tokens.response_tokens == 1500
    assert estimate.tokens.schema_tokens >= 50 + 2 * 15
    assert estimate.latency.level is LatencyLevel.LOW
    assert estimate.latency.estimated_ms == 800


def test_dangerous_tool_reports_level(planner: CatalogPlanner) -> None:
    """The danger level of the descriptor is carried through."""
    estimate = planner.estimate_tool("virtual-origin-pool-delete")
    assert estimate.danger_level is DangerLevel.HIGH
    assert estimate.latency.level is LatencyLevel.MODERATE


def test_token_breakdown_for_minimal_descriptor() -> None:
    """A bare descriptor costs only the base schema tokens."""
    tool = ToolDescriptor.from_mapping(
        {"name": "x", "domain": "d", "resource": "r", "operation": "delete"},
        context="test",
    )
    tokens = estimate_tokens(tool)

    assert (tokens.schema_tokens, tokens.request_tokens, tokens.response_tokens) == (50, 20, 50)
    assert tokens.total_tokens == 120


def test_create_tool_with_body_costs_more(planner: CatalogPlanner) -> None:
    """Request bodies add to the schema footprint."""
    create = planner.estimate_tool("virtual-origin-pool-create")
    get = planner.estimate_tool("virtual-origin-pool-get")
    assert create.tokens.request_tokens == 600
    assert create.total_tokens > get.total_tokens


def test_workflow_estimate_for_plan(planner: CatalogPlanner) -> None:
    """Plan estimates sum every step."""
    plan = planner.resolve("http-loadbalancer", "virtual")
    assert isinstance(plan, CreationPlan)
    estimate = planner.estimate_workflow(plan)

    assert estimate.step_count == 2
    assert estimate.average_latency is LatencyLevel.MODERATE
    assert estimate.estimated_total_ms == 3000
    assert estimate.total_tokens == sum(step.tokens for step in estimate.steps)
    assert [step.tool_name for step in estimate.steps] == [
        "virtual-origin-pool-create",
        "virtual-http-loadbalancer-create",
    ]
    assert estimate.warnings == ()


def test_read_only_workflow_is_low_latency(planner: CatalogPlanner) -> None:
    """A workflow made only of reads stays in the low bucket."""
    estimate = planner.estimate_workflow(["virtual-origin-pool-list", "virtual-origin-pool-get"])

    assert estimate.average_latency is LatencyLevel.LOW
    assert estimate.estimated_total_ms == 1100


def test_workflow_with_unknown_tool(planner: CatalogPlanner) -> None:
    """Unknown tools fall back to defaults with a warning."""
    estimate = planner.estimate_workflow(["virtual-origin-pool-get", "nope"])

    assert estimate.warnings == ("Step 2: tool nope not found; default estimate applied",)
    assert estimate.average_latency is LatencyLevel.MODERATE
    assert estimate.steps[1].tokens == 600


def test_empty_workflow(planner: CatalogPlanner) -> None:
    """An empty plan has zero totals."""
    estimate = planner.estimate_workflow([])

    assert estimate.step_count == 0
    assert estimate.total_tokens == 0
    assert estimate.estimated_total_ms == 0
    assert estimate.average_latency is LatencyLevel.LOW


def test_plan_steps_without_tools(planner: CatalogPlanner) -> None:
    """Steps lacking a create tool are estimated with defaults."""
    plan = planner.resolve("x", "loop")
    assert isinstance(plan, CreationPlan)
    estimate = planner.estimate_workflow(plan)

    assert estimate.warnings[0] == "Step 1: no create tool found for loop/y; default estimate applied"
    assert estimate.total_tokens == 1200


def test_estimate_tools_keeps_order(planner: CatalogPlanner) -> None:
    """Batch estimates follow the requested order."""
    names = ["virtual-origin-pool-get", "nope", "virtual-origin-pool-list"]
    assert [estimate.tool_name for estimate in planner.estimate_tools(names)] == names
