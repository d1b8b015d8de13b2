"""Strict coercion helpers shared by every ``from_mapping`` schema parser.

Each helper takes the parsed YAML value plus a dotted ``path`` used in error messages
and raises :class:`SchemaValidationError` when the value has the wrong shape.
"""

from __future__ import annotations

import math
import re
from collections.abc import Collection, Mapping

from act_engine.domain.errors import SchemaValidationError

_MISSING = object()


def child_path(path: str, key: str | int) -> str:
    if isinstance(key, int):
        return f"{path}[{key}]"
    return f"{path}.{key}" if path else key


def as_mapping(value: object, path: str) -> dict[str, object]:
    if not isinstance(value, Mapping):
        raise SchemaValidationError(path, f"expected mapping, got {type(value).__name__}")
    parsed: dict[str, object] = {}
    for key, item in value.items():
        if not isinstance(key, str):
            raise SchemaValidationError(path, f"mapping keys must be strings, got {key!r}")
        parsed[key] = item
    return parsed


def optional_mapping(payload: Mapping[str, object], key: str, path: str) -> dict[str, object]:
    value = payload.get(key)
    if value is None:
        return {}
    return as_mapping(value, child_path(path, key))


def require_str(payload: Mapping[str, object], key: str, path: str) -> str:
    value = payload.get(key, _MISSING)
    if value is _MISSING or value is None:
        raise SchemaValidationError(child_path(path, key), "required field is missing")
    return coerce_str(value, child_path(path, key))


def coerce_str(value: object, path: str) -> str:
    if not isinstance(value, str):
        raise SchemaValidationError(path, f"expected string, got {type(value).__name__}")
    candidate = value.strip()
    if not candidate:
        raise SchemaValidationError(path, "must be a non-empty string")
    return candidate


def optional_str(
    payload: Mapping[str, object], key: str, path: str, default: str | None = None
) -> str | None:
    value = payload.get(key)
    if value is None:
        return default
    if not isinstance(value, str):
        raise SchemaValidationError(
            child_path(path, key), f"expected string, got {type(value).__name__}"
        )
    return value


def optional_bool(payload: Mapping[str, object], key: str, path: str, default: bool) -> bool:
    value = payload.get(key)
    if value is None:
        return default
    if not isinstance(value, bool):
        raise SchemaValidationError(child_path(path, key), "expected bool")
    return value


def optional_int(
    payload: Mapping[str, object],
    key: str,
    path: str,
    default: int | None,
    *,
    minimum: int | None = None,
) -> int | None:
    value = payload.get(key)
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, int):
        raise SchemaValidationError(child_path(path, key), "expected integer")
    if minimum is not None and value < minimum:
        raise SchemaValidationError(child_path(path, key), f"must be >= {minimum}")
    return value


def optional_number(
    payload: Mapping[str, object],
    key: str,
    path: str,
    default: float | None,
    *,
    minimum: float | None = None,
) -> float | None:
    value = payload.get(key)
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise SchemaValidationError(child_path(path, key), "expected number")
    if isinstance(value, float) and not math.isfinite(value):
        raise SchemaValidationError(child_path(path, key), "must be finite")
    if minimum is not None and value < minimum:
        raise SchemaValidationError(child_path(path, key), f"must be >= {minimum}")
    return value


def choice(
    payload: Mapping[str, object],
    key: str,
    path: str,
    allowed: Collection[str],
    default: str | None = None,
) -> str:
    value = payload.get(key)
    if value is None:
        if default is None:
            raise SchemaValidationError(child_path(path, key), "required field is missing")
        return default
    if not isinstance(value, str) or value not in allowed:
        raise SchemaValidationError(
            child_path(path, key),
            f"expected one of {sorted(allowed)}, got {value!r}",
        )
    return value


def string_tuple(
    payload: Mapping[str, object],
    key: str,
    path: str,
    *,
    min_items: int = 0,
    pattern: re.Pattern[str] | None = None,
) -> tuple[str, ...]:
    value = payload.get(key)
    location = child_path(path, key)
    if value is None:
        items: list[object] = []
    elif isinstance(value, list | tuple):
        items = list(value)
    else:
        raise SchemaValidationError(location, f"expected list, got {type(value).__name__}")
    if len(items) < min_items:
        raise SchemaValidationError(location, f"must contain at least {min_items} item(s)")
    parsed: list[str] = []
    for index, item in enumerate(items):
        text = coerce_str(item, child_path(location, index))
        if pattern is not None and pattern.fullmatch(text) is None:
            raise SchemaValidationError(
                child_path(location, index),
                f"{text!r} does not match pattern {pattern.pattern}",
            )
        parsed.append(text)
    return tuple(parsed)


def mapping_tuple(
    payload: Mapping[str, object],
    key: str,
    path: str,
    *,
    min_items: int = 0,
) -> tuple[tuple[str, dict[str, object]], ...]:
    """Return ``(item_path, mapping)`` pairs for a list-of-mappings field."""

    value = payload.get(key)
    location = child_path(path, key)
    if value is None:
        items: list[object] = []
    elif isinstance(value, list | tuple):
        items = list(value)
    else:
        raise SchemaValidationError(location, f"expected list, got {type(value).__name__}")
    if len(items) < min_items:
        raise SchemaValidationError(location, f"must contain at least {min_items} item(s)")
    return tuple(
        (child_path(location, index), as_mapping(item, child_path(location, index)))
        for index, item in enumerate(items)
    )


def require_root(payload: object, root_key: str) -> dict[str, object]:
    """Return the mapping under the document's required top-level key."""

    document = as_mapping(payload, "")
    if root_key not in document:
        raise SchemaValidationError(root_key, "required top-level key is missing")
    return as_mapping(document[root_key], root_key)


__all__ = [
    "as_mapping",
    "child_path",
    "choice",
    "coerce_str",
    "mapping_tuple",
    "optional_bool",
    "optional_int",
    "optional_mapping",
    "optional_number",
    "optional_str",
    "require_root",
    "require_str",
    "string_tuple",
]
