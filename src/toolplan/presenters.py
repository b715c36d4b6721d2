# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Rich renderables for plans, validation results and cost estimates."""

from __future__ import annotations

from rich import box
from rich.console import Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .discovery.cost import LatencyLevel, ToolCostEstimate, WorkflowCostEstimate
from .discovery.validate import ValidationResult
from .resolution.dependencies import Complexity, CreationPlan

_COMPLEXITY_STYLES = {
    Complexity.LOW: "green",
    Complexity.MEDIUM: "yellow",
    Complexity.HIGH: "red",
}

_LATENCY_STYLES = {
    LatencyLevel.LOW: "green",
    LatencyLevel.MODERATE: "yellow",
    LatencyLevel.UNKNOWN: "magenta",
}


def render_plan(plan: CreationPlan) -> Panel:
    """Return a panel listing the steps of ``plan`` in execution order.

    Args:
        plan: Creation plan to render.

    Returns:
        Panel: Step table followed by subscriptions, alternatives and warnings.
    """
    table = Table(box=box.SIMPLE, pad_edge=False, expand=False)
    table.add_column("#", justify="right", style="cyan", no_wrap=True)
    table.add_column("Resource", style="bold")
    table.add_column("Tool")
    table.add_column("Depends on")
    table.add_column("Inputs")
    for step in plan.steps:
        resource = Text(step.key)
        if step.optional:
            resource.append(" (optional)", style="dim")
        table.add_row(
            str(step.step_number),
            resource,
            step.tool_name or Text("missing", style="red"),
            ", ".join(step.depends_on) or "-",
            ", ".join(step.required_inputs) or "-",
        )

    parts: list[Table | Text] = [table]
    for line in plan.subscription_summary():
        parts.append(Text(f"Subscription: {line}", style="blue"))
    for alternative in plan.alternatives:
        parts.append(Text(f"{alternative.description} ({len(alternative.steps)} steps)", style="dim"))
    parts.extend(_warning_lines(plan.warnings))
    for notice in plan.notices:
        parts.append(Text(notice.message, style="yellow"))

    complexity = plan.complexity
    title = Text.assemble(
        ("Plan ", "bold"),
        (plan.target, "bold cyan"),
        " · ",
        (f"{complexity.value} complexity", _COMPLEXITY_STYLES[complexity]),
    )
    return Panel(Group(*parts), title=title, border_style="cyan")


def render_validation(result: ValidationResult) -> Panel:
    """Return a panel summarising a validation result."""

    lines: list[Text] = []
    if result.tool is not None:
        lines.append(Text(f"Tool: {result.tool.name}"))
        if result.tool.method or result.tool.path:
            lines.append(Text(f"Operation: {result.tool.method} {result.tool.path}".rstrip()))
    for issue in result.errors:
        line = Text(f"{issue.path}: {issue.message}", style="red")
        if issue.expected:
            line.append(f" (expected {issue.expected})", style="dim")
        lines.append(line)
    lines.extend(_warning_lines(result.warnings))
    for applied in result.applied_defaults:
        lines.append(Text(f"default {applied.field} = {applied.default_value!r}", style="dim"))
    status = Text("Validation passed", style="bold green") if result.valid else Text("Validation failed", style="bold red")
    return Panel(Group(*lines) if lines else Text("No findings"), title=status, border_style="green" if result.valid else "red")


def render_tool_cost(estimate: ToolCostEstimate) -> Panel:
    """Return a panel with the token breakdown and latency of one tool."""

    table = Table(show_header=False, box=box.SIMPLE, pad_edge=False, expand=False)
    table.add_column(style="yellow", justify="left", no_wrap=True)
    table.add_column(justify="right")
    table.add_row("Schema tokens", str(estimate.tokens.schema_tokens))
    table.add_row("Request tokens", str(estimate.tokens.request_tokens))
    table.add_row("Response tokens", str(estimate.tokens.response_tokens))
    table.add_row("Total tokens", Text(str(estimate.total_tokens), style="bold"))
    latency = estimate.latency
    table.add_row("Latency", Text(f"{latency.level.value} (~{latency.estimated_ms} ms)", style=_LATENCY_STYLES[latency.level]))
    table.add_row("Danger level", estimate.danger_level.value)
    title = f"Cost estimate: {estimate.tool_name}" if estimate.exists else f"Cost estimate: {estimate.tool_name} (unknown tool)"
    return Panel(Group(table, Text(latency.description, style="dim")), title=title, border_style="orange1")


def render_workflow_cost(estimate: WorkflowCostEstimate) -> Panel:
    """Return a panel with per-step and total workflow estimates."""

    table = Table(box=box.SIMPLE, pad_edge=False, expand=False)
    table.add_column("#", justify="right", style="cyan")
    table.add_column("Tool")
    table.add_column("Tokens", justify="right")
    table.add_column("Latency (ms)", justify="right")
    for step in estimate.steps:
        table.add_row(str(step.step_number), step.tool_name or "-", str(step.tokens), str(step.latency_ms))
    table.add_row(
        Text("Σ", style="bold"),
        Text(f"{estimate.step_count} steps", style="bold"),
        Text(str(estimate.total_tokens), style="bold"),
        Text(str(estimate.estimated_total_ms), style="bold"),
    )
    parts: list[Table | Text] = [table, *_warning_lines(estimate.warnings)]
    level = estimate.average_latency
    title = Text.assemble(("Workflow cost", "bold"), " · ", (f"{level.value} latency", _LATENCY_STYLES[level]))
    return Panel(Group(*parts), title=title, border_style="orange1")


def _warning_lines(warnings: tuple[str, ...]) -> list[Text]:
    return [Text(f"warning: {warning}", style="yellow") for warning in warnings]


__all__ = ["render_plan", "render_tool_cost", "render_validation", "render_workflow_cost"]
