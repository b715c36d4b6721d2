# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Coercion helpers that turn raw catalog JSON into typed values."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from enum import Enum
from types import MappingProxyType
from typing import TypeVar

from .errors import CatalogIntegrityError
from .types import JSONValue

EnumT = TypeVar("EnumT", bound=Enum)


def is_json_array(value: JSONValue | None) -> bool:
    """Return ``True`` when ``value`` is a JSON array rather than a string."""

    return isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray))


def expect_string(value: JSONValue | None, *, key: str, context: str) -> str:
    """Return ``value`` as a non-empty string.

    Args:
        value: Raw JSON value pulled from a catalog document.
        key: Attribute name reported in error messages.
        context: Location prefix (document path plus entry) for errors.

    Returns:
        str: The validated string.

    Raises:
        CatalogIntegrityError: If ``value`` is missing, empty or not a string.
    """
    if not isinstance(value, str) or not value:
        raise CatalogIntegrityError(f"{context}: expected '{key}' to be a non-empty string")
    return value


def optional_string(value: JSONValue | None, *, key: str, context: str) -> str | None:
    """Return ``value`` as a string when present, otherwise ``None``.

    Raises:
        CatalogIntegrityError: If ``value`` is present but not a string.
    """
    if value is None:
        return None
    if not isinstance(value, str):
        raise CatalogIntegrityError(f"{context}: expected '{key}' to be a string if present")
    return value


def optional_bool(value: JSONValue | None, *, key: str, context: str, default: bool) -> bool:
    """Return ``value`` as a boolean, falling back to ``default`` when absent.

    Raises:
        CatalogIntegrityError: If ``value`` is present but not a boolean.
    """
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    raise CatalogIntegrityError(f"{context}: expected '{key}' to be a boolean")


def string_array(value: JSONValue | None, *, key: str, context: str) -> tuple[str, ...]:
    """Return ``value`` as a tuple of strings; ``None`` yields an empty tuple.

    Args:
        value: Raw JSON value pulled from a catalog document.
        key: Attribute name reported in error messages.
        context: Location prefix for errors.

    Returns:
        tuple[str, ...]: The strings in document order.

    Raises:
        CatalogIntegrityError: If ``value`` is not an array of strings.
    """
    if value is None:
        return ()
    if not is_json_array(value):
        raise CatalogIntegrityError(f"{context}: expected '{key}' to be an array of strings")
    result: list[str] = []
    for index, item in enumerate(value):  # type: ignore[arg-type]
        if not isinstance(item, str):
            raise CatalogIntegrityError(f"{context}: expected '{key}[{index}]' to be a string")
        result.append(item)
    return tuple(result)


def expect_mapping(value: JSONValue | None, *, key: str, context: str) -> Mapping[str, JSONValue]:
    """Return ``value`` as a JSON object or raise ``CatalogIntegrityError``."""

    if not isinstance(value, Mapping):
        raise CatalogIntegrityError(f"{context}: expected '{key}' to be an object")
    return value


def optional_mapping(value: JSONValue | None, *, key: str, context: str) -> Mapping[str, JSONValue] | None:
    """Return ``value`` as a JSON object when present, otherwise ``None``."""

    if value is None:
        return None
    return expect_mapping(value, key=key, context=context)


def mapping_array(value: JSONValue | None, *, key: str, context: str) -> tuple[Mapping[str, JSONValue], ...]:
    """Return ``value`` as a tuple of JSON objects; ``None`` yields an empty tuple.

    Raises:
        CatalogIntegrityError: If ``value`` is not an array of objects.
    """
    if value is None:
        return ()
    if not is_json_array(value):
        raise CatalogIntegrityError(f"{context}: expected '{key}' to be an array of objects")
    return tuple(
        expect_mapping(item, key=f"{key}[{index}]", context=context)
        for index, item in enumerate(value)  # type: ignore[arg-type]
    )


def enum_value(
    value: JSONValue | None,
    enum_type: type[EnumT],
    *,
    key: str,
    context: str,
    default: EnumT,
) -> EnumT:
    """Return the ``enum_type`` member named by ``value``.

    Args:
        value: Raw JSON value; ``None`` selects ``default``.
        enum_type: String-valued enumeration to coerce into.
        key: Attribute name reported in error messages.
        context: Location prefix for errors.
        default: Member returned when ``value`` is absent.

    Returns:
        EnumT: Matching enumeration member.

    Raises:
        CatalogIntegrityError: If ``value`` does not name a member.
    """
    if value is None:
        return default
    raw = expect_string(value, key=key, context=context).lower()
    try:
        return enum_type(raw)
    except ValueError as exc:
        allowed = ", ".join(str(member.value) for member in enum_type)
        raise CatalogIntegrityError(f"{context}: '{key}' must be one of {allowed}; got '{raw}'") from exc


def freeze_json_mapping(value: Mapping[str, JSONValue], *, context: str) -> Mapping[str, JSONValue]:
    """Return a read-only mapping with recursively frozen values.

    Raises:
        CatalogIntegrityError: If any key is not a string.
    """
    frozen: dict[str, JSONValue] = {}
    for key, item in value.items():
        if not isinstance(key, str):
            raise CatalogIntegrityError(f"{context}: expected keys to be strings")
        frozen[key] = freeze_json_value(item, context=f"{context}.{key}")
    return MappingProxyType(frozen)


def freeze_json_value(value: JSONValue, *, context: str) -> JSONValue:
    """Return ``value`` with mappings turned into proxies and arrays into tuples.

    Raises:
        CatalogIntegrityError: If ``value`` is not JSON compatible.
    """
    if isinstance(value, Mapping):
        return freeze_json_mapping(value, context=context)
    if is_json_array(value):
        return tuple(freeze_json_value(item, context=context) for item in value)  # type: ignore[union-attr]
    if isinstance(value, (str, int, float, bool)) or value is None:
        return value
    raise CatalogIntegrityError(f"{context}: unsupported JSON value type {type(value).__name__}")


def thaw_json_value(value: JSONValue) -> JSONValue:
    """Return a plain ``dict``/``list`` copy of a frozen JSON value."""

    if isinstance(value, Mapping):
        return {str(key): thaw_json_value(item) for key, item in value.items()}
    if isinstance(value, (tuple, list)):
        return [thaw_json_value(item) for item in value]
    return value


__all__ = [
    "enum_value",
    "expect_mapping",
    "expect_string",
    "freeze_json_mapping",
    "freeze_json_value",
    "is_json_array",
    "mapping_array",
    "optional_bool",
    "optional_mapping",
    "optional_string",
    "string_array",
    "thaw_json_value",
]
