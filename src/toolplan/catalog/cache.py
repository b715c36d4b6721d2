# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Explicit cache object owning the loaded catalog and schema caches.

The cache is populated lazily: the snapshot on first access, each domain's
definition table the first time a schema in that domain is resolved, and
resolved schemas per originating domain. Population is serialised with a
lock and is idempotent, so warm caches can be shared by concurrent readers.
``clear`` must not race with readers; callers serialise reloads themselves.
"""

from __future__ import annotations

import logging
from collections import OrderedDict
from collections.abc import Hashable, Iterator, Mapping
from dataclasses import dataclass
from threading import RLock
from typing import Any

from .loader import CatalogLoader
from .model_catalog import CatalogSnapshot
from .types import JSONValue

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CacheStats:
    """Describe the current state of a :class:`CatalogCache`.

    Attributes:
        snapshot_loaded: Whether the tool index and graph are loaded.
        checksum: Checksum of the loaded snapshot, ``None`` before loading.
        cached_domains: Domains whose definition tables were read, in load order.
        total_definitions: Number of definitions across cached tables.
        resolved_schemas: Number of resolved schemas held across domains.
        hits: Resolved-schema cache hits since the last clear.
        misses: Resolved-schema cache misses since the last clear.
    """

    snapshot_loaded: bool
    checksum: str | None
    cached_domains: tuple[str, ...]
    total_definitions: int
    resolved_schemas: int
    hits: int
    misses: int


class CatalogCache:
    """Lazily populated, explicitly clearable catalog state."""

    def __init__(self, loader: CatalogLoader) -> None:
        """Create an empty cache backed by ``loader``.

        Args:
            loader: Loader used to read the snapshot and domain tables.
        """

        self._loader = loader
        self._lock = RLock()
        self._snapshot: CatalogSnapshot | None = None
        self._tables: OrderedDict[str, Mapping[str, JSONValue]] = OrderedDict()
        self._missing_tables: set[str] = set()
        self._resolved: dict[str, dict[Hashable, Any]] = {}
        self._hits = 0
        self._misses = 0

    @property
    def loader(self) -> CatalogLoader:
        """Return the loader backing this cache."""

        return self._loader

    def snapshot(self) -> CatalogSnapshot:
        """Return the catalog snapshot, loading it on first access."""

        snapshot = self._snapshot
        if snapshot is not None:
            return snapshot
        with self._lock:
            if self._snapshot is None:
                self._snapshot = self._loader.load_snapshot()
                LOGGER.debug(
                    "Catalog snapshot loaded: %d tools, checksum %s",
                    len(self._snapshot),
                    self._snapshot.checksum,
                )
            return self._snapshot

    def domain_table(self, domain: str) -> Mapping[str, JSONValue] | None:
        """Return the definition table of ``domain``, reading it on first use.

        Args:
            domain: Domain to look up.

        Returns:
            Mapping[str, JSONValue] | None: Definitions, or ``None`` when the
            domain has no table on disk.
        """
        table = self._tables.get(domain)
        if table is not None:
            return table
        with self._lock:
            if domain in self._tables:
                return self._tables[domain]
            if domain in self._missing_tables:
                return None
            loaded = self._loader.load_domain_table(domain)
            if loaded is None:
                self._missing_tables.add(domain)
                LOGGER.debug("Domain '%s' has no definition table", domain)
                return None
            self._tables[domain] = loaded
            return loaded

    def loaded_tables(self) -> Iterator[tuple[str, Mapping[str, JSONValue]]]:
        """Yield ``(domain, table)`` pairs in the order they were loaded."""

        with self._lock:
            items = list(self._tables.items())
        yield from items

    def cached_resolution(self, domain: str, key: Hashable) -> Any | None:
        """Return a resolved schema cached for ``domain`` under ``key``."""

        with self._lock:
            value = self._resolved.get(domain, {}).get(key)
            if value is None:
                self._misses += 1
            else:
                self._hits += 1
            return value

    def store_resolution(self, domain: str, key: Hashable, value: Any) -> Any:
        """Cache ``value`` for ``domain``; the first stored value wins.

        Returns:
            Any: The value held by the cache after the call.
        """

        with self._lock:
            return self._resolved.setdefault(domain, {}).setdefault(key, value)

    def clear(self) -> None:
        """Drop the snapshot, domain tables and resolved schemas."""

        with self._lock:
            self._snapshot = None
            self._tables.clear()
            self._missing_tables.clear()
            self._resolved.clear()
            self._hits = 0
            self._misses = 0
        LOGGER.debug("Catalog cache cleared")

    def stats(self) -> CacheStats:
        """Return a :class:`CacheStats` view of the current cache state."""

        with self._lock:
            return CacheStats(
                snapshot_loaded=self._snapshot is not None,
                checksum=self._snapshot.checksum if self._snapshot is not None else None,
                cached_domains=tuple(self._tables),
                total_definitions=sum(len(table) for table in self._tables.values()),
                resolved_schemas=sum(len(entries) for entries in self._resolved.values()),
                hits=self._hits,
                misses=self._misses,
            )


__all__ = ["CacheStats", "CatalogCache"]
