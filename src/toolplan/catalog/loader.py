# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""High-level loader that materialises catalog documents."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from .errors import CatalogIntegrityError, CatalogValidationError
from .io import read_json_document
from .model_catalog import CatalogSnapshot
from .model_dependency import DependencyGraph
from .model_tool import ToolDescriptor
from .scanner import CatalogScanner
from .schema import DocumentKind, SchemaRepository
from .types import DEPENDENCY_SCHEMA_VERSION, INDEX_SCHEMA_VERSION, JSONValue
from .utils import expect_mapping, expect_string, mapping_array, optional_mapping

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class CatalogLoader:
    """Loader that validates and materialises catalog documents."""

    catalog_root: Path
    schema_root: Path | None = None
    validate_documents: bool = True
    _schemas: SchemaRepository | None = field(init=False, repr=False, default=None)
    _scanner: CatalogScanner = field(init=False, repr=False)

    def __post_init__(self) -> None:
        """Initialise the scanner and, when enabled, the schema validators."""

        self._scanner = CatalogScanner(self.catalog_root)
        if self.validate_documents:
            self._schemas = SchemaRepository.load(self.schema_root)

    @property
    def scanner(self) -> CatalogScanner:
        """Return the scanner describing the catalog layout."""

        return self._scanner

    def load_tools(self) -> tuple[ToolDescriptor, ...]:
        """Load every tool descriptor from the catalog index.

        Returns:
            tuple[ToolDescriptor, ...]: Descriptors in index order.

        Raises:
            CatalogIntegrityError: If the index is missing, malformed or has an
                unsupported schema version.
            CatalogValidationError: If the index fails schema validation.
        """
        path = self._scanner.index_path
        if not path.is_file():
            raise CatalogIntegrityError(f"{path}: catalog index not found")
        mapping = self._load_validated(path, kind="index", expected_version=INDEX_SCHEMA_VERSION)
        tools = tuple(
            ToolDescriptor.from_mapping(item, context=f"{path}.tools")
            for item in mapping_array(mapping.get("tools"), key="tools", context=str(path))
        )
        LOGGER.debug("Loaded %d tool descriptors from %s", len(tools), path)
        return tools

    def load_graph(self) -> DependencyGraph:
        """Load the static dependency graph; a missing document yields an empty graph."""

        path = self._scanner.dependencies_path
        if not path.is_file():
            LOGGER.debug("No dependency graph at %s; using an empty graph", path)
            return DependencyGraph.from_entries(())
        mapping = self._load_validated(path, kind="dependencies", expected_version=DEPENDENCY_SCHEMA_VERSION)
        graph = DependencyGraph.from_mapping(mapping, context=str(path))
        LOGGER.debug("Loaded %d dependency graph entries from %s", len(graph), path)
        return graph

    def load_snapshot(self) -> CatalogSnapshot:
        """Produce a snapshot containing descriptors, graph and checksum."""

        return CatalogSnapshot(
            _tools=self.load_tools(),
            graph=self.load_graph(),
            checksum=self.compute_checksum(),
        )

    def load_domain_table(self, domain: str) -> Mapping[str, JSONValue] | None:
        """Load the definition table of ``domain``.

        Args:
            domain: Domain whose definitions should be read.

        Returns:
            Mapping[str, JSONValue] | None: Definitions keyed by name, or
            ``None`` when the domain ships no table.

        Raises:
            CatalogIntegrityError: If the table cannot be parsed.
            CatalogValidationError: If the table fails schema validation.
        """
        path = self._scanner.domain_table(domain)
        if path is None:
            return None
        document = read_json_document(path)
        self._validate(document, kind="domain", path=path)
        mapping = expect_mapping(document, key="<root>", context=str(path))
        definitions: dict[str, JSONValue] = {}
        components = optional_mapping(mapping.get("components"), key="components", context=str(path))
        if components is not None:
            schemas = optional_mapping(components.get("schemas"), key="components.schemas", context=str(path))
            definitions.update(schemas or {})
        legacy = optional_mapping(mapping.get("definitions"), key="definitions", context=str(path))
        for name, node in (legacy or {}).items():
            definitions.setdefault(name, node)
        LOGGER.debug("Loaded %d definitions for domain '%s' from %s", len(definitions), domain, path)
        return definitions

    def compute_checksum(self) -> str:
        """Calculate a checksum representing the current catalog contents."""

        return self._scanner.digest()

    def _load_validated(self, path: Path, *, kind: DocumentKind, expected_version: str) -> Mapping[str, JSONValue]:
        document = read_json_document(path)
        self._validate(document, kind=kind, path=path)
        mapping = expect_mapping(document, key="<root>", context=str(path))
        version = expect_string(mapping.get("schemaVersion"), key="schemaVersion", context=str(path))
        if version.split(".")[0] != expected_version.split(".")[0]:
            raise CatalogIntegrityError(
                f"{path}: unsupported schemaVersion '{version}' (expected {expected_version})",
            )
        return mapping

    def _validate(self, document: JSONValue, *, kind: DocumentKind, path: Path) -> None:
        if self._schemas is None:
            return
        self._schemas.validate(document, kind=kind, path=path)


__all__ = [
    "CatalogIntegrityError",
    "CatalogLoader",
    "CatalogValidationError",
]
