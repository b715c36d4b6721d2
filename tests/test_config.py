# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for planner settings and their loading."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from toolplan.config import ConfigError, PlannerSettings, load_settings


def _write_pyproject(root: Path, body: str) -> None:
    (root / "pyproject.toml").write_text(body, encoding="utf-8")


def test_defaults_without_sources(tmp_path: Path) -> None:
    """Without pyproject or environment the defaults apply."""
    settings = load_settings(tmp_path, env={})

    assert settings.catalog_root == tmp_path / "catalog"
    assert settings.schema_max_depth == 10
    assert settings.dependency_max_depth == 10
    assert settings.search_limit == 10
    assert settings.validate_documents is True


def test_pyproject_section(tmp_path: Path) -> None:
    """The [tool.toolplan] table overrides defaults; relative roots are anchored."""
    _write_pyproject(
        tmp_path,
        '[project]\nname = "demo"\n\n[tool.toolplan]\ncatalog_root = "data/catalog"\nsearch_limit = 5\n',
    )
    settings = load_settings(tmp_path, env={})

    assert settings.catalog_root == tmp_path / "data" / "catalog"
    assert settings.search_limit == 5


def test_absolute_catalog_root_is_kept(tmp_path: Path) -> None:
    """An absolute catalog root is used as given."""
    target = tmp_path / "elsewhere"
    settings = load_settings(tmp_path, env={"TOOLPLAN_CATALOG_ROOT": str(target)})
    assert settings.catalog_root == target


def test_environment_overrides_pyproject(tmp_path: Path) -> None:
    """TOOLPLAN_* variables win over the pyproject table."""
    _write_pyproject(tmp_path, "[tool.toolplan]\nsearch_limit = 5\n")
    settings = load_settings(
        tmp_path,
        env={"TOOLPLAN_SEARCH_LIMIT": "3", "TOOLPLAN_VALIDATE_DOCUMENTS": "false", "TOOLPLAN_FUZZY_MAX_EDIT_DISTANCE": ""},
    )

    assert settings.search_limit == 3
    assert settings.validate_documents is False
    assert settings.fuzzy_max_edit_distance == 2


@pytest.mark.parametrize(
    ("body", "match"),
    [
        ("[tool.toolplan]\ndependency_max_depth = 0\n", "Invalid toolplan configuration"),
        ("[tool.toolplan]\nunknown_option = 1\n", "Invalid toolplan configuration"),
        ("[tool.toolplan]\nsearch_limit = 60\n", "must not exceed search_max_limit"),
        ("[tool.toolplan\n", "pyproject.toml"),
        ('[tool]\ntoolplan = "flat"\n', "must be a table"),
    ],
)
def test_invalid_configuration(tmp_path: Path, body: str, match: str) -> None:
    """Invalid values and unreadable files raise ConfigError."""
    _write_pyproject(tmp_path, body)
    with pytest.raises(ConfigError, match=match):
        load_settings(tmp_path, env={})


def test_assignment_is_validated() -> None:
    """Settings reject invalid values assigned after construction."""
    settings = PlannerSettings()
    with pytest.raises(ValidationError):
        settings.schema_max_depth = 0
    assert settings.to_dict()["schema_max_depth"] == 10
