# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Filesystem layout of an on-disk tool catalog."""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from pathlib import Path
from typing import Final

INDEX_FILENAME: Final[str] = "index.json"
DEPENDENCIES_FILENAME: Final[str] = "dependencies.json"
DOMAINS_DIRNAME: Final[str] = "domains"


@dataclass(slots=True)
class CatalogScanner:
    """Locate the documents that make up a catalog directory."""

    catalog_root: Path

    @property
    def index_path(self) -> Path:
        """Return the path of the tool index document."""

        return self.catalog_root / INDEX_FILENAME

    @property
    def dependencies_path(self) -> Path:
        """Return the path of the dependency graph document."""

        return self.catalog_root / DEPENDENCIES_FILENAME

    @property
    def domains_root(self) -> Path:
        """Return the directory holding per-domain definition tables."""

        return self.catalog_root / DOMAINS_DIRNAME

    def domain_table(self, domain: str) -> Path | None:
        """Return the definition table for ``domain`` when one exists.

        The literal domain name is tried first, then its hyphenated
        spelling (``network_security`` -> ``network-security.json``).

        Args:
            domain: Domain whose table should be located.

        Returns:
            Path | None: Existing table path, or ``None`` when the domain
            ships no definitions.
        """
        candidates = [domain]
        hyphenated = domain.replace("_", "-")
        if hyphenated != domain:
            candidates.append(hyphenated)
        for candidate in candidates:
            path = self.domains_root / f"{candidate}.json"
            if path.is_file():
                return path
        return None

    def domain_tables(self) -> tuple[Path, ...]:
        """Return every definition table path sorted lexicographically."""

        if not self.domains_root.exists():
            return ()
        return tuple(sorted(path for path in self.domains_root.glob("*.json") if path.is_file()))

    def catalog_files(self) -> tuple[Path, ...]:
        """Return the catalog documents that feed :meth:`digest`, sorted."""

        paths = [path for path in (self.index_path, self.dependencies_path) if path.is_file()]
        paths.extend(self.domain_tables())
        return tuple(sorted(paths))

    def digest(self) -> str:
        """Return a SHA-256 hex digest over :meth:`catalog_files`.

        Each file contributes its root-relative POSIX name, a NUL separator
        and its raw bytes, so renames and edits both change the value.
        """
        sha = hashlib.sha256()
        for path in self.catalog_files():
            sha.update(b"%s\0" % path.relative_to(self.catalog_root).as_posix().encode("utf-8"))
            sha.update(path.read_bytes())
        return sha.hexdigest()


__all__ = ["DEPENDENCIES_FILENAME", "DOMAINS_DIRNAME", "INDEX_FILENAME", "CatalogScanner"]
