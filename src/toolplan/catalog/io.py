# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Read JSON documents shipped in a catalog or alongside the package."""

from __future__ import annotations

import json
from collections.abc import Mapping
from pathlib import Path
from typing import cast

from .errors import CatalogIntegrityError
from .types import JSONValue


def read_json_document(path: Path, *, label: str = "catalog JSON", require_object: bool = False) -> JSONValue:
    """Parse the JSON document at ``path``.

    A missing file propagates as :class:`FileNotFoundError` so callers can
    tell an absent catalog from a corrupt one.

    Args:
        path: Document to read.
        label: Human readable document kind used in error messages.
        require_object: Reject documents whose top level is not an object.

    Returns:
        JSONValue: Decoded document.

    Raises:
        CatalogIntegrityError: Invalid JSON, or a non-object top level when
            ``require_object`` is set.
    """
    text = path.read_text(encoding="utf-8")
    try:
        payload = cast(JSONValue, json.loads(text))
    except json.JSONDecodeError as exc:
        raise CatalogIntegrityError(f"{path}: failed to parse {label} (line {exc.lineno})") from exc
    if require_object and not isinstance(payload, Mapping):
        raise CatalogIntegrityError(f"{path}: expected a JSON object")
    return payload


__all__ = ["read_json_document"]
