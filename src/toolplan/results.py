# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Result values shared by the planning operations.

Expected conditions such as an unknown tool or resource are returned as a
:class:`Failure` instead of being raised; callers branch on
``isinstance(result, Failure)``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .catalog.types import JSONValue


class ErrorKind(str, Enum):
    """Taxonomy of non-fatal conditions reported by the planner."""

    NOT_FOUND = "not_found"
    VALIDATION_ERROR = "validation_error"
    CONFLICT_WARNING = "conflict_warning"
    DEPTH_EXCEEDED = "depth_exceeded"
    CIRCULAR_REFERENCE = "circular_reference"

    @property
    def blocking(self) -> bool:
        """Return ``True`` for kinds that prevent a call from proceeding."""

        return self in (ErrorKind.NOT_FOUND, ErrorKind.VALIDATION_ERROR)


@dataclass(frozen=True, slots=True)
class Failure:
    """Explicit failure value returned by lookups and resolutions."""

    kind: ErrorKind
    message: str
    subject: str | None = None

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True, slots=True)
class ValidationIssue:
    """Blocking problem detected in a candidate request."""

    kind: ErrorKind
    path: str
    message: str
    expected: str | None = None
    actual: JSONValue = None

    def __str__(self) -> str:
        return self.message


def not_found(message: str, subject: str | None = None) -> Failure:
    """Return a ``NOT_FOUND`` failure."""

    return Failure(kind=ErrorKind.NOT_FOUND, message=message, subject=subject)


__all__ = ["ErrorKind", "Failure", "ValidationIssue", "not_found"]
