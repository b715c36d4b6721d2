# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for dependency ordering and creation plans."""

from __future__ import annotations

import pytest

from toolplan.planner import CatalogPlanner
from toolplan.resolution import Complexity, CreationPlan
from toolplan.results import ErrorKind, Failure


def _plan(planner: CatalogPlanner, resource: str, domain: str, **kwargs: object) -> CreationPlan:
    plan = planner.resolve(resource, domain, **kwargs)  # type: ignore[arg-type]
    assert isinstance(plan, CreationPlan), plan
    return plan


def _keys(plan: CreationPlan) -> list[str]:
    return [step.key for step in plan.steps]


def test_load_balancer_plan(planner: CatalogPlanner) -> None:
    """Prerequisites come first and subscriptions are aggregated."""
    plan = _plan(planner, "http-loadbalancer", "virtual")

    assert plan.target == "virtual/http-loadbalancer"
    assert _keys(plan) == ["virtual/origin-pool", "virtual/http-loadbalancer"]
    assert [step.step_number for step in plan.steps] == [1, 2]
    assert plan.steps[0].tool_name == "virtual-origin-pool-create"
    assert plan.steps[1].tool_name == "virtual-http-loadbalancer-create"
    assert plan.steps[1].depends_on == ("virtual/origin-pool",)
    assert plan.steps[0].depends_on == ()
    assert "spec.origin_servers" in plan.steps[0].required_inputs
    assert "spec.domains" in plan.steps[1].required_inputs
    assert plan.complexity is Complexity.LOW
    assert plan.warnings == ()
    assert plan.subscription_summary() == ("Web App & API Protection (standard) - required",)
    assert plan.tool_names() == ("virtual-origin-pool-create", "virtual-http-loadbalancer-create")


def test_shared_prerequisite_emitted_once(planner: CatalogPlanner) -> None:
    """A diamond-shaped graph yields each resource exactly once."""
    plan = _plan(planner, "a", "diamond")

    assert _keys(plan) == ["diamond/d", "diamond/b", "diamond/c", "diamond/a"]
    assert plan.steps[2].depends_on == ("diamond/d",)
    assert plan.steps[3].depends_on == ("diamond/b", "diamond/c")
    assert plan.complexity is Complexity.MEDIUM


def test_dependencies_precede_dependents(planner: CatalogPlanner) -> None:
    """Every depends_on entry refers to an earlier step."""
    for resource, domain in (("a", "diamond"), ("service-policy", "network_security"), ("x", "loop")):
        plan = _plan(planner, resource, domain, include_optional=True)
        positions = {step.key: index for index, step in enumerate(plan.steps)}
        for index, step in enumerate(plan.steps):
            assert all(positions[dependency] < index for dependency in step.depends_on)
        assert len(positions) == len(plan.steps)


def test_leaf_resource_single_step(planner: CatalogPlanner) -> None:
    """A resource without prerequisites plans only itself."""
    plan = _plan(planner, "healthcheck", "virtual")
    assert _keys(plan) == ["virtual/healthcheck"]
    assert plan.total_steps == 1


def test_existing_resources_are_skipped(planner: CatalogPlanner) -> None:
    """Prerequisites that already exist are left out of the plan."""
    plan = _plan(planner, "http-loadbalancer", "virtual", existing_resources={"virtual/origin-pool"})

    assert _keys(plan) == ["virtual/http-loadbalancer"]
    assert plan.existing_resources == ("virtual/origin-pool",)
    assert plan.steps[0].depends_on == ()


def test_target_is_planned_even_when_listed_as_existing(planner: CatalogPlanner) -> None:
    """The target itself is never skipped."""
    plan = _plan(planner, "healthcheck", "virtual", existing_resources=["virtual/healthcheck"])
    assert _keys(plan) == ["virtual/healthcheck"]


def test_include_optional(planner: CatalogPlanner) -> None:
    """Optional prerequisites are planned and flagged when requested."""
    plan = _plan(planner, "http-loadbalancer", "virtual", include_optional=True)

    assert _keys(plan) == [
        "virtual/healthcheck",
        "virtual/origin-pool",
        "virtual/app-firewall",
        "virtual/http-loadbalancer",
    ]
    assert [step.optional for step in plan.steps] == [True, False, True, False]
    assert plan.steps[1].depends_on == ("virtual/healthcheck",)
    assert plan.steps[2].tool_name is None
    assert "No create tool found for virtual/app-firewall" in plan.warnings
    assert plan.subscription_summary() == (
        "Web App & API Protection (standard) - required",
        "Web App & API Protection (advanced) - optional",
    )
    assert plan.complexity is Complexity.MEDIUM


def test_depth_bound_records_notices(planner: CatalogPlanner) -> None:
    """Resources at the depth bound are kept but not expanded."""
    plan = _plan(planner, "a", "diamond", max_depth=1)

    assert _keys(plan) == ["diamond/b", "diamond/c", "diamond/a"]
    assert plan.truncated == ("diamond/b", "diamond/c")
    assert plan.depth_exceeded
    assert [notice.kind for notice in plan.notices] == [ErrorKind.DEPTH_EXCEEDED, ErrorKind.DEPTH_EXCEEDED]
    assert plan.notices[0].subject == "diamond/b"


def test_cycle_is_reported_and_broken(planner: CatalogPlanner, caplog: pytest.LogCaptureFixture) -> None:
    """A cycle produces a warning and the offending edge is ignored."""
    plan = _plan(planner, "x", "loop")

    assert _keys(plan) == ["loop/y", "loop/x"]
    assert plan.steps[0].depends_on == ()
    assert plan.steps[1].depends_on == ("loop/y",)
    assert "Dependency cycle detected at loop/x; edge ignored" in plan.warnings
    assert "Dependency cycle detected" in caplog.text


def test_unknown_prerequisite_still_planned(planner: CatalogPlanner) -> None:
    """A prerequisite missing from the graph gets a step and a warning."""
    plan = _plan(planner, "rate-limiter", "virtual")

    assert _keys(plan) == ["virtual/ghost", "virtual/rate-limiter"]
    assert "Prerequisite virtual/ghost is not in the dependency graph" in plan.warnings
    assert "No create tool found for virtual/ghost" in plan.warnings


def test_unknown_target_is_not_found(planner: CatalogPlanner) -> None:
    """Targets missing from the graph produce a failure value."""
    result = planner.resolve("nope", "virtual")

    assert isinstance(result, Failure)
    assert result.kind is ErrorKind.NOT_FOUND
    assert result.message == "Resource virtual/nope not found in dependency graph"
    assert isinstance(planner.compact_plan("nope", "virtual"), Failure)


def test_alternative_plans(planner: CatalogPlanner) -> None:
    """Resource-level choices expand into alternative plans."""
    plan = _plan(planner, "tcp-loadbalancer", "virtual", expand_alternatives=True)

    assert _keys(plan) == ["virtual/origin-pool", "virtual/tcp-loadbalancer"]
    (alternative,) = plan.alternatives
    assert alternative.resource == "virtual/tcp-loadbalancer"
    assert alternative.choice_field == "backend"
    assert alternative.selected_option == "cdn_origin"
    assert [step.key for step in alternative.steps] == ["virtual/cdn-origin", "virtual/tcp-loadbalancer"]
    assert alternative.description == "Alternative using cdn_origin for backend"

    assert _plan(planner, "tcp-loadbalancer", "virtual").alternatives == ()


def test_compact_plan(planner: CatalogPlanner) -> None:
    """The compact projection keeps tool, resource, inputs and choices."""
    compact = planner.compact_plan("tcp-loadbalancer", "virtual")

    assert isinstance(compact, dict)
    assert set(compact) == {"target", "complexity", "steps", "warnings"}
    assert compact["complexity"] == "low"
    steps = compact["steps"]
    assert isinstance(steps, list)
    assert steps[1] == {
        "tool": "virtual-tcp-loadbalancer-create",
        "resource": "virtual/tcp-loadbalancer",
        "inputs": [],
        "choices": {"backend": ["origin_pool", "cdn_origin"]},
    }

    plan = _plan(planner, "tcp-loadbalancer", "virtual")
    assert plan.compact() == compact
    with_existing = planner.compact_plan("tcp-loadbalancer", "virtual", existing_resources=["virtual/origin-pool"])
    assert isinstance(with_existing, dict)
    assert [step["tool"] for step in with_existing["steps"]] == ["virtual-tcp-loadbalancer-create"]


def test_graph_queries_through_planner(planner: CatalogPlanner) -> None:
    """The planner exposes prerequisite and dependent lookups."""
    assert [ref.key for ref in planner.prerequisites("http-loadbalancer", "virtual")] == ["virtual/origin-pool"]
    assert [ref.key for ref in planner.prerequisites("http-loadbalancer", "virtual", include_optional=True)] == [
        "virtual/origin-pool",
        "virtual/app-firewall",
    ]
    assert [ref.key for ref in planner.dependents("http-loadbalancer", "virtual")] == [
        "network_security/service-policy",
    ]
    assert planner.graph_stats().total_resources == 14
