# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""jsonschema validators for the catalog documents."""

from __future__ import annotations

import importlib
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from pathlib import Path
from types import ModuleType
from typing import Final, Literal, Protocol, cast, runtime_checkable

from .errors import CatalogValidationError
from .io import read_json_document
from .types import JSONValue

DEFAULT_SCHEMA_ROOT: Final[Path] = Path(__file__).resolve().parent / "schemas"

DocumentKind = Literal["index", "dependencies", "domain"]


@runtime_checkable
class SchemaValidator(Protocol):
    """Minimal interface exposed by jsonschema validators."""

    def validate(self, instance: JSONValue) -> None:
        """Validate ``instance`` against the bound schema."""

    def iter_errors(self, instance: JSONValue) -> Iterable[object]:
        """Iterate over validation errors for ``instance``."""


SchemaValidatorFactory = Callable[[JSONValue], SchemaValidator]

jsonschema_module = importlib.import_module("jsonschema")
Draft202012Validator = cast(SchemaValidatorFactory, jsonschema_module.Draft202012Validator)
jsonschema_exceptions: ModuleType = cast(ModuleType, jsonschema_module.exceptions)
JsonSchemaValidationError = cast(type[Exception], getattr(jsonschema_exceptions, "ValidationError"))


@dataclass(slots=True)
class SchemaRepository:
    """Hold one validator per catalog document kind."""

    schema_root: Path
    index_validator: SchemaValidator
    dependencies_validator: SchemaValidator
    domain_validator: SchemaValidator

    @classmethod
    def load(cls, schema_root: Path | None = None) -> SchemaRepository:
        """Load schema validators from disk.

        Args:
            schema_root: Optional override for the directory holding the
                ``*.schema.json`` files. Defaults to the packaged schemas.

        Returns:
            SchemaRepository: Repository with validators for every document kind.
        """
        resolved_root = schema_root or DEFAULT_SCHEMA_ROOT

        def _validator(filename: str) -> SchemaValidator:
            schema = read_json_document(resolved_root / filename, label="JSON schema", require_object=True)
            return Draft202012Validator(schema)

        return cls(
            schema_root=resolved_root,
            index_validator=_validator("tool_index.schema.json"),
            dependencies_validator=_validator("dependency_graph.schema.json"),
            domain_validator=_validator("domain_table.schema.json"),
        )

    def validate(self, document: JSONValue, *, kind: DocumentKind, path: Path) -> None:
        """Validate ``document`` with the validator registered for ``kind``.

        Args:
            document: Raw JSON payload to validate.
            kind: Catalog document kind.
            path: Filesystem path used in error reporting.

        Raises:
            CatalogValidationError: When the document fails schema validation.
            ValueError: If an unknown document kind is supplied.
        """
        if kind == "index":
            validator = self.index_validator
        elif kind == "dependencies":
            validator = self.dependencies_validator
        elif kind == "domain":
            validator = self.domain_validator
        else:  # pragma: no cover - guarded by the Literal type
            raise ValueError(f"unknown document kind '{kind}'")
        try:
            validator.validate(document)
        except JsonSchemaValidationError as exc:
            raise CatalogValidationError(f"{path}: {exc}") from exc


__all__ = ["DEFAULT_SCHEMA_ROOT", "DocumentKind", "SchemaRepository", "SchemaValidator"]
