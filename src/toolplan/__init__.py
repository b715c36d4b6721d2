# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Offline discovery, dependency planning and pre-flight validation over an API tool catalog."""

from __future__ import annotations

from importlib import metadata

from .config import ConfigError, PlannerSettings, load_settings
from .planner import CatalogPlanner
from .results import ErrorKind, Failure, ValidationIssue

__all__ = [
    "CatalogPlanner",
    "ConfigError",
    "ErrorKind",
    "Failure",
    "PlannerSettings",
    "ValidationIssue",
    "__version__",
    "load_settings",
]

try:
    __version__ = metadata.version("toolplan")
except metadata.PackageNotFoundError:  # pragma: no cover - local development fallback
    __version__ = "0.0.0"
