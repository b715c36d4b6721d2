# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for the planner facade."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from toolplan import CatalogPlanner, ErrorKind, Failure, PlannerSettings, __version__
from toolplan.catalog import CatalogValidationError
from toolplan.resolution import ResolvedSchema


def test_version_is_exposed() -> None:
    """The package exposes a version string."""
    assert isinstance(__version__, str) and __version__


def test_catalog_root_overrides_settings(catalog_root: Path, tmp_path: Path) -> None:
    """An explicit catalog root wins and the passed settings are not mutated."""
    settings = PlannerSettings(catalog_root=tmp_path / "other", search_limit=3)
    planner = CatalogPlanner(settings, catalog_root=catalog_root)

    assert planner.settings.catalog_root == catalog_root
    assert planner.settings.search_limit == 3
    assert settings.catalog_root == tmp_path / "other"
    assert len(planner.search("origin pool")) == 3


def test_catalog_summary(planner: CatalogPlanner) -> None:
    """Domains, counts and per-domain tool listings come from the snapshot."""
    assert planner.domains() == ("cdn", "diamond", "network_security", "virtual")
    assert planner.tool_counts()["virtual"] == 7
    assert [tool.name for tool in planner.tools_for_domain("cdn")] == ["cdn-origin-pool-list"]


def test_resolve_schema_failures(planner: CatalogPlanner) -> None:
    """Unknown tools and tools without a body produce failure values."""
    unknown = planner.resolve_schema("nope")
    assert isinstance(unknown, Failure)
    assert unknown.kind is ErrorKind.NOT_FOUND
    assert str(unknown) == 'Tool "nope" not found'

    bodiless = planner.resolve_schema("virtual-origin-pool-list")
    assert isinstance(bodiless, Failure)
    assert bodiless.message == "Tool virtual-origin-pool-list has no request body"

    missing = planner.resolve_definition("Nope", "virtual")
    assert isinstance(missing, Failure)
    assert missing.message == "Schema definition Nope not found for domain virtual"
    assert isinstance(planner.resolve_definition("ObjectMeta", "virtual"), ResolvedSchema)


def test_field_queries(planner: CatalogPlanner) -> None:
    """Required fields, defaults and groups are available per tool."""
    assert planner.required_fields("virtual-healthcheck-create") == (
        "metadata",
        "spec",
        "metadata.name",
        "metadata.namespace",
        "spec.http_health_check",
    )
    defaults = planner.field_defaults("virtual-healthcheck-create")
    assert not isinstance(defaults, Failure)
    assert [item.path for item in defaults] == [
        "spec.http_health_check.path",
        "spec.http_health_check.use_origin_server_name",
        "spec.timeout",
        "spec.interval",
    ]
    groups = planner.exclusive_groups("virtual-http-loadbalancer-create")
    assert not isinstance(groups, Failure)
    assert [group.field_path for group in groups] == [
        "spec.loadbalancer_type",
        "spec.advertise_choice",
    ]
    assert isinstance(planner.required_fields("virtual-origin-pool-list"), Failure)
    assert isinstance(planner.exclusive_groups("nope"), Failure)
    assert planner.exclusive_groups("virtual-origin-pool-list") == ()


def test_clear_cache_resets_state(planner: CatalogPlanner, caplog: pytest.LogCaptureFixture) -> None:
    """Clearing the cache drops the snapshot and resolved schemas."""
    planner.resolve_schema("virtual-healthcheck-create")
    stats = planner.cache_stats()
    assert stats.snapshot_loaded is True
    assert stats.resolved_schemas == 1
    assert stats.cached_domains == ("virtual",)

    with caplog.at_level(logging.INFO, logger="toolplan.planner"):
        planner.clear_cache()

    cleared = planner.cache_stats()
    assert cleared.snapshot_loaded is False
    assert cleared.resolved_schemas == 0
    assert cleared.cached_domains == ()
    assert "Catalog cache cleared" in caplog.text


def test_invalid_catalog_raises(tmp_path: Path) -> None:
    """Structural catalog problems surface as exceptions on first use."""
    (tmp_path / "index.json").write_text('{"schemaVersion": "1.0.0", "tools": [{"name": "x"}]}', encoding="utf-8")
    planner = CatalogPlanner(catalog_root=tmp_path)
    with pytest.raises(CatalogValidationError):
        planner.domains()
