# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared pytest fixtures."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from toolplan.planner import CatalogPlanner


def _write_json(path: Path, payload: Any) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    return path


def _ref(name: str) -> dict[str, str]:
    return {"$ref": f"#/components/schemas/{name}"}


def _tool(name: str, domain: str, resource: str, operation: str, **extra: Any) -> dict[str, Any]:
    method = {"create": "POST", "get": "GET", "list": "GET", "delete": "DELETE"}.get(operation, "POST")
    payload: dict[str, Any] = {
        "name": name,
        "domain": domain,
        "resource": resource,
        "operation": operation,
        "method": method,
        "path": f"/api/config/namespaces/{{namespace}}/{resource.replace('-', '_')}s",
    }
    payload.update(extra)
    return payload


NAMESPACE_PARAM = {"name": "namespace", "required": True, "description": "Namespace of the object"}
NAME_PARAM = {"name": "name", "required": True, "description": "Name of the object"}

TOOLS: list[dict[str, Any]] = [
    _tool(
        "virtual-http-loadbalancer-create",
        "virtual",
        "http-loadbalancer",
        "create",
        summary="Create HTTP load balancer",
        description="Creates an HTTP load balancer that routes traffic to upstream servers.",
        requestBody=_ref("http_loadbalancerCreateRequest"),
        dangerLevel="medium",
        sideEffects={"creates": ["http-loadbalancer"]},
        oneOfGroups=[
            {
                "field": "spec.advertise_choice",
                "options": ["advertise_on_public_default_vip", "advertise_custom"],
                "description": "Where the load balancer is advertised",
                "recommended": "advertise_on_public_default_vip",
            },
        ],
    ),
    _tool(
        "virtual-origin-pool-create",
        "virtual",
        "origin-pool",
        "create",
        summary="Create origin pool",
        description="Creates a pool of origin servers.",
        requestBody=_ref("origin_poolCreateRequest"),
        examples={
            "body": {
                "metadata": {"name": "my-pool", "namespace": "default"},
                "spec": {"origin_servers": [{"public_name": {"dns_name": "app.example.com"}}], "port": 443},
            },
        },
    ),
    _tool(
        "virtual-origin-pool-get",
        "virtual",
        "origin-pool",
        "get",
        summary="Get origin pool",
        description="Returns one origin pool by name.",
        pathParameters=[NAMESPACE_PARAM, NAME_PARAM],
    ),
    _tool(
        "virtual-origin-pool-list",
        "virtual",
        "origin-pool",
        "list",
        summary="List origin pools",
        description="Returns every origin pool in a namespace.",
        pathParameters=[NAMESPACE_PARAM],
        queryParameters=[{"name": "label_filter", "required": False, "description": "Label selector"}],
    ),
    _tool(
        "virtual-origin-pool-delete",
        "virtual",
        "origin-pool",
        "delete",
        summary="Delete origin pool",
        description="Removes an origin pool.",
        pathParameters=[NAMESPACE_PARAM, NAME_PARAM],
        dangerLevel="high",
        requiresConfirmation=True,
        sideEffects={"deletes": ["origin-pool"]},
    ),
    _tool(
        "virtual-healthcheck-create",
        "virtual",
        "healthcheck",
        "create",
        summary="Create health check",
        description="Creates an HTTP health check.",
        requestBody=_ref("healthcheckCreateRequest"),
    ),
    _tool(
        "virtual-tcp-loadbalancer-create",
        "virtual",
        "tcp-loadbalancer",
        "create",
        summary="Create TCP load balancer",
        description="Creates a TCP load balancer.",
    ),
    _tool(
        "cdn-origin-pool-list",
        "cdn",
        "origin-pool",
        "list",
        summary="List CDN origin pools",
        description="Returns every CDN origin pool.",
        pathParameters=[NAMESPACE_PARAM],
    ),
    _tool(
        "network-security-service-policy-create",
        "network_security",
        "service-policy",
        "create",
        summary="Create service policy",
        description="Creates a service policy.",
        requestBody=_ref("service_policyCreateRequest"),
    ),
    *(
        _tool(f"diamond-{name}-create", "diamond", name, "create", summary=f"Create {name.upper()}")
        for name in ("a", "b", "c", "d")
    ),
]

VIRTUAL_SCHEMAS: dict[str, Any] = {
    "ObjectMeta": {
        "type": "object",
        "required": ["name", "namespace"],
        "properties": {
            "name": {"type": "string", "description": "Object name"},
            "namespace": {"type": "string"},
            "labels": {"type": "object", "additionalProperties": {"type": "string"}},
        },
    },
    "ObjectRef": {
        "type": "object",
        "required": ["name"],
        "properties": {"name": {"type": "string"}, "namespace": {"type": "string"}},
    },
    "http_loadbalancerCreateRequest": {
        "type": "object",
        "required": ["metadata", "spec"],
        "properties": {
            "metadata": _ref("ObjectMeta"),
            "spec": _ref("http_loadbalancerSpec"),
        },
        "x-f5xc-minimum-configuration": {
            "description": "Minimal HTTP load balancer",
            "required_fields": ["metadata.name", "metadata.namespace", "spec.domains"],
            "example_json": json.dumps(
                {"metadata": {"name": "web", "namespace": "default"}, "spec": {"domains": ["example.com"]}},
            ),
            "mutually_exclusive_groups": [
                {"fields": ["spec.http", "spec.https"], "reason": "Choose one listener protocol"},
            ],
        },
    },
    "http_loadbalancerSpec": {
        "type": "object",
        "required": ["domains"],
        "properties": {
            "domains": {"type": "array", "items": {"type": "string"}},
            "http": {"type": "object", "properties": {"port": {"type": "integer", "default": 80}}},
            "https": {"type": "object", "properties": {"port": {"type": "integer", "default": 443}}},
            "default_route_pools": {"type": "array", "items": _ref("RoutePool")},
            "advertise_on_public_default_vip": {"type": "object", "x-f5xc-server-default": True},
            "advertise_custom": {"type": "object"},
            "add_location": {"type": "boolean", "x-f5xc-recommended-value": True},
        },
        "x-ves-oneof-field-loadbalancer_type": '["http", "https"]',
        "x-f5xc-recommended-oneof-variant-loadbalancer_type": "https",
        "x-ves-oneof-field-advertise_choice": ["advertise_on_public_default_vip", "advertise_custom"],
    },
    "RoutePool": {
        "type": "object",
        "required": ["pool"],
        "properties": {
            "pool": _ref("ObjectRef"),
            "weight": {"type": "integer", "default": 1},
        },
    },
    "origin_poolCreateRequest": {
        "type": "object",
        "required": ["metadata", "spec"],
        "properties": {"metadata": _ref("ObjectMeta"), "spec": _ref("origin_poolSpec")},
    },
    "origin_poolSpec": {
        "type": "object",
        "required": ["origin_servers", "port"],
        "properties": {
            "origin_servers": {"type": "array", "items": _ref("OriginServer")},
            "port": {"type": "integer", "example": 443},
            "healthcheck": {"type": "array", "items": _ref("ObjectRef")},
            "loadbalancer_algorithm": {
                "type": "string",
                "enum": ["ROUND_ROBIN", "LEAST_ACTIVE"],
                "default": "ROUND_ROBIN",
            },
        },
    },
    "OriginServer": {
        "type": "object",
        "properties": {
            "public_ip": {"type": "object", "properties": {"ip": {"type": "string"}}},
            "public_name": {"type": "object", "properties": {"dns_name": {"type": "string"}}},
        },
        "x-ves-oneof-field-choice": '["public_ip", "public_name"]',
    },
    "healthcheckCreateRequest": {
        "type": "object",
        "required": ["metadata", "spec"],
        "properties": {"metadata": _ref("ObjectMeta"), "spec": _ref("healthcheckSpec")},
    },
    "healthcheckSpec": {
        "type": "object",
        "required": ["http_health_check"],
        "properties": {
            "http_health_check": _ref("HttpHealthCheck"),
            "timeout": {"type": "integer", "default": 3},
            "interval": {"type": "integer", "x-f5xc-recommended-value": 15},
        },
    },
    "HttpHealthCheck": {
        "type": "object",
        "properties": {
            "path": {"type": "string", "default": "/"},
            "host_header": {"type": "string"},
            "use_origin_server_name": {"type": "object", "x-f5xc-server-default": True},
        },
        "x-ves-oneof-field-host_header_choice": ["host_header", "use_origin_server_name"],
    },
    "TreeNode": {
        "type": "object",
        "title": "TreeNode",
        "properties": {
            "label": {"type": "string"},
            "children": {"type": "array", "items": _ref("TreeNode")},
        },
    },
    "Ping": {"type": "object", "properties": {"pong": _ref("Pong")}},
    "Pong": {"type": "object", "properties": {"ping": _ref("Ping")}},
}

NETWORK_SECURITY_DEFINITIONS: dict[str, Any] = {
    "service_policyCreateRequest": {
        "type": "object",
        "required": ["metadata"],
        "properties": {
            "metadata": _ref("ObjectMeta"),
            "rules": {"type": "array", "items": {"$ref": "#/definitions/MissingRule"}},
        },
    },
}


def _entry(domain: str, resource: str, **extra: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {"domain": domain, "resource": resource}
    payload.update(extra)
    return payload


def _refs(*keys: str) -> list[dict[str, str]]:
    refs = []
    for key in keys:
        domain, resource = key.split("/")
        refs.append({"domain": domain, "resource": resource})
    return refs


GRAPH: list[dict[str, Any]] = [
    _entry(
        "virtual",
        "http-loadbalancer",
        requires=_refs("virtual/origin-pool"),
        optional=_refs("virtual/app-firewall"),
        subscriptions=[
            {"service": "f5xc-waap-standard", "displayName": "Web App & API Protection", "tier": "standard"},
        ],
    ),
    _entry("virtual", "origin-pool", optional=_refs("virtual/healthcheck")),
    _entry("virtual", "healthcheck"),
    _entry(
        "virtual",
        "app-firewall",
        subscriptions=[
            {
                "service": "f5xc-waap-advanced",
                "displayName": "Web App & API Protection",
                "tier": "advanced",
                "required": False,
            },
        ],
    ),
    _entry(
        "virtual",
        "tcp-loadbalancer",
        requires=_refs("virtual/origin-pool"),
        choices=[
            {
                "field": "backend",
                "description": "Upstream selection",
                "options": ["origin_pool", "cdn_origin"],
                "recommended": "origin_pool",
            },
        ],
    ),
    _entry("virtual", "cdn-origin"),
    _entry("virtual", "rate-limiter", requires=_refs("virtual/ghost")),
    _entry("diamond", "a", requires=_refs("diamond/b", "diamond/c")),
    _entry("diamond", "b", requires=_refs("diamond/d")),
    _entry("diamond", "c", requires=_refs("diamond/d")),
    _entry("diamond", "d"),
    _entry("loop", "x", requires=_refs("loop/y")),
    _entry("loop", "y", requires=_refs("loop/x")),
    _entry("network_security", "service-policy", requires=_refs("virtual/http-loadbalancer")),
]


def write_catalog(root: Path) -> Path:
    """Write the sample catalog below ``root`` and return it."""

    _write_json(root / "index.json", {"schemaVersion": "1.0.0", "tools": TOOLS})
    _write_json(root / "dependencies.json", {"schemaVersion": "1.0.0", "resources": GRAPH})
    _write_json(root / "domains" / "virtual.json", {"components": {"schemas": VIRTUAL_SCHEMAS}})
    _write_json(root / "domains" / "network-security.json", {"definitions": NETWORK_SECURITY_DEFINITIONS})
    return root


@pytest.fixture
def catalog_root(tmp_path: Path) -> Path:
    """Return a freshly written sample catalog directory."""
    return write_catalog(tmp_path / "catalog")


@pytest.fixture
def planner(catalog_root: Path) -> CatalogPlanner:
    """Return a planner over the sample catalog."""
    return CatalogPlanner(catalog_root=catalog_root)
