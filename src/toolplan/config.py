# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Configuration model and loader for the catalog planner."""

from __future__ import annotations

import os
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Final

from pydantic import BaseModel, ConfigDict, Field, ValidationError

PYPROJECT_FILENAME: Final[str] = "pyproject.toml"
PYPROJECT_TOOL_KEY: Final[str] = "tool"
PYPROJECT_SECTION_KEY: Final[str] = "toolplan"
ENV_PREFIX: Final[str] = "TOOLPLAN_"
DEFAULT_CATALOG_DIRNAME: Final[str] = "catalog"


class ConfigError(Exception):
    """Raised when configuration input is invalid."""


class PlannerSettings(BaseModel):
    """Tunable limits and locations used by the planner."""

    model_config = ConfigDict(validate_assignment=True, extra="forbid")

    catalog_root: Path = Field(default_factory=lambda: Path(DEFAULT_CATALOG_DIRNAME))
    schema_max_depth: int = Field(default=10, ge=1)
    dependency_max_depth: int = Field(default=10, ge=1)
    search_limit: int = Field(default=10, ge=1)
    search_max_limit: int = Field(default=50, ge=1)
    search_min_score: float = Field(default=0.1, ge=0.0, le=1.0)
    fuzzy_max_edit_distance: int = Field(default=2, ge=0)
    validate_documents: bool = True

    def to_dict(self) -> dict[str, Any]:
        """Return the settings as plain Python data."""

        return self.model_dump(mode="python")


def load_settings(project_root: Path, env: Mapping[str, str] | None = None) -> PlannerSettings:
    """Load settings from defaults, ``[tool.toolplan]`` and ``TOOLPLAN_*`` variables.

    Later sources override earlier ones. A relative ``catalog_root`` is
    resolved against ``project_root``.

    Args:
        project_root: Directory holding the optional ``pyproject.toml``.
        env: Environment mapping; defaults to ``os.environ``.

    Returns:
        PlannerSettings: Validated settings.

    Raises:
        ConfigError: If a source is unreadable or a value is invalid.
    """
    merged: dict[str, Any] = {}
    merged.update(_pyproject_section(project_root / PYPROJECT_FILENAME))
    merged.update(_environment_overrides(os.environ if env is None else env))
    try:
        settings = PlannerSettings(**merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid toolplan configuration: {exc}") from exc
    if not settings.catalog_root.is_absolute():
        settings.catalog_root = project_root / settings.catalog_root
    if settings.search_limit > settings.search_max_limit:
        raise ConfigError(
            f"search_limit ({settings.search_limit}) must not exceed search_max_limit ({settings.search_max_limit})",
        )
    return settings


def _pyproject_section(path: Path) -> Mapping[str, Any]:
    if not path.is_file():
        return {}
    try:
        with path.open("rb") as handle:
            document = tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"{path}: {exc}") from exc
    section = document.get(PYPROJECT_TOOL_KEY, {}).get(PYPROJECT_SECTION_KEY, {})
    if not isinstance(section, Mapping):
        raise ConfigError(f"{path}: [tool.{PYPROJECT_SECTION_KEY}] must be a table")
    return section


def _environment_overrides(env: Mapping[str, str]) -> dict[str, str]:
    overrides: dict[str, str] = {}
    for name in PlannerSettings.model_fields:
        value = env.get(f"{ENV_PREFIX}{name.upper()}")
        if value is not None and value != "":
            overrides[name] = value
    return overrides


__all__ = ["ConfigError", "PlannerSettings", "load_settings"]
