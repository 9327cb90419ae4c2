"""Shared type aliases and loose-value coercion helpers."""
from __future__ import annotations

from typing import Any, Dict, List, Literal, Mapping, Union

JsonValue = Union[None, bool, int, float, str, List[Any], Dict[str, Any]]

NavigationTarget = Literal["END", "RESTART", "MAIN_MENU"]
NAVIGATION_TARGETS: tuple[str, ...] = ("END", "RESTART", "MAIN_MENU")


def as_bool(value: object) -> bool | None:
    """Return the value when it is a real boolean."""
    return value if isinstance(value, bool) else None


def as_int(value: object) -> int | None:
    """Return the value as an int, or None when it is not an integer.

    Booleans are rejected even though Python treats them as ints.
    """
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value


def as_str(value: object) -> str | None:
    return value if isinstance(value, str) else None


def as_mapping(value: object) -> Mapping[str, Any] | None:
    return value if isinstance(value, Mapping) else None


def is_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def values_equal(left: object, right: object) -> bool:
    """Structural equality that never mixes booleans, numbers and strings."""
    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool) and left is right
    if is_number(left) or is_number(right):
        return is_number(left) and is_number(right) and left == right
    if isinstance(left, Mapping) and isinstance(right, Mapping):
        if left.keys() != right.keys():
            return False
        return all(values_equal(left[key], right[key]) for key in left)
    if isinstance(left, list) and isinstance(right, list):
        return len(left) == len(right) and all(
            values_equal(a, b) for a, b in zip(left, right)
        )
    return type(left) is type(right) and left == right


__all__ = [
    "JsonValue",
    "NAVIGATION_TARGETS",
    "NavigationTarget",
    "as_bool",
    "as_int",
    "as_mapping",
    "as_str",
    "is_number",
    "values_equal",
]
