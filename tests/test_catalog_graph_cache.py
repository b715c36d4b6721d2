# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for the dependency graph model and the catalog cache."""

from __future__ import annotations

from pathlib import Path

import pytest

from toolplan.catalog import (
    CatalogCache,
    CatalogIntegrityError,
    CatalogLoader,
    DependencyGraph,
    DependencyGraphEntry,
    ResourceChoice,
    ResourceRef,
    SubscriptionRequirement,
)


def test_graph_queries(catalog_root: Path) -> None:
    """Prerequisites, dependents and subscription lookups read the static graph."""
    graph = CatalogLoader(catalog_root).load_graph()

    assert graph.prerequisites("virtual", "http-loadbalancer") == (ResourceRef("virtual", "origin-pool"),)
    assert graph.prerequisites("virtual", "http-loadbalancer", include_optional=True) == (
        ResourceRef("virtual", "origin-pool"),
        ResourceRef("virtual", "app-firewall"),
    )
    assert graph.prerequisites("virtual", "unknown") == ()
    assert graph.dependents("virtual", "origin-pool") == (
        ResourceRef("virtual", "http-loadbalancer"),
        ResourceRef("virtual", "tcp-loadbalancer"),
    )
    assert graph.requiring_subscription("f5xc-waap-standard") == (ResourceRef("virtual", "http-loadbalancer"),)
    assert "diamond/a" in graph


def test_graph_stats(catalog_root: Path) -> None:
    """Statistics summarise resources, edges and domains."""
    stats = CatalogLoader(catalog_root).load_graph().stats()

    assert stats.total_resources == 14
    assert stats.total_edges == 12
    assert stats.resources_with_prerequisites == 9
    assert stats.resources_with_choices == 1
    assert stats.resources_with_subscriptions == 2
    assert stats.domains == {"diamond": 4, "loop": 2, "network_security": 1, "virtual": 7}


def test_duplicate_graph_entries_raise() -> None:
    """A resource may only appear once in the graph."""
    entry = DependencyGraphEntry(domain="d", resource="r")
    with pytest.raises(CatalogIntegrityError, match="duplicate dependency graph entry 'd/r'"):
        DependencyGraph.from_entries([entry, entry])


def test_choice_default_option() -> None:
    """The recommended option wins only when it is listed."""
    assert ResourceChoice("f", ("a", "b"), recommended="b").default_option == "b"
    assert ResourceChoice("f", ("a", "b"), recommended="z").default_option == "a"
    assert ResourceChoice("f", ("a", "b")).default_option == "a"
    with pytest.raises(CatalogIntegrityError, match="at least one option"):
        ResourceChoice.from_mapping({"field": "f", "options": []}, context="test")


def test_subscription_describe() -> None:
    """Subscriptions render as a single readable line."""
    requirement = SubscriptionRequirement.from_mapping(
        {"service": "bot", "displayName": "Bot Defense", "tier": "advanced", "required": False},
        context="test",
    )
    assert requirement.describe() == "Bot Defense (advanced) - optional"
    assert SubscriptionRequirement(service="waap", display_name="waap").describe() == "waap - required"


def test_cache_loads_lazily_and_clears(catalog_root: Path) -> None:
    """The cache loads the snapshot once and forgets everything on clear."""
    cache = CatalogCache(CatalogLoader(catalog_root))
    assert cache.stats().snapshot_loaded is False
    assert cache.stats().checksum is None

    snapshot = cache.snapshot()
    assert cache.snapshot() is snapshot
    stats = cache.stats()
    assert stats.snapshot_loaded is True
    assert stats.checksum == snapshot.checksum

    cache.clear()
    assert cache.stats().snapshot_loaded is False
    assert cache.snapshot() is not snapshot


def test_cache_domain_tables_in_load_order(catalog_root: Path) -> None:
    """Domain tables are cached in load order and missing tables are remembered."""
    cache = CatalogCache(CatalogLoader(catalog_root))

    assert cache.domain_table("network_security") is not None
    assert cache.domain_table("virtual") is not None
    assert cache.domain_table("cdn") is None
    assert cache.domain_table("cdn") is None

    assert [domain for domain, _ in cache.loaded_tables()] == ["network_security", "virtual"]
    stats = cache.stats()
    assert stats.cached_domains == ("network_security", "virtual")
    assert stats.total_definitions > 10


def test_cache_resolution_counts_hits(catalog_root: Path) -> None:
    """Resolved entries count hits and misses and keep the first stored value."""
    cache = CatalogCache(CatalogLoader(catalog_root))

    assert cache.cached_resolution("virtual", "key") is None
    first = object()
    assert cache.store_resolution("virtual", "key", first) is first
    assert cache.store_resolution("virtual", "key", object()) is first
    assert cache.cached_resolution("virtual", "key") is first

    stats = cache.stats()
    assert (stats.hits, stats.misses, stats.resolved_schemas) == (1, 1, 1)
    cache.clear()
    assert (cache.stats().hits, cache.stats().misses) == (0, 0)
