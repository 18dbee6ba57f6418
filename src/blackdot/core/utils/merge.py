"""Deep merge and dotted-path helpers for layer documents."""
from __future__ import annotations

from typing import Any, Dict, List, Mapping, Tuple


def deep_merge(base: Dict[str, Any], override: Mapping[str, Any]) -> Dict[str, Any]:
    """Recursively merge dictionaries without mutating inputs.

    Nested mappings merge key by key; any other value in ``override``
    (lists included) replaces the value in ``base``.

    Example:
        >>> deep_merge({"a": 1, "b": {"c": 2}}, {"b": {"d": 3}})
        {'a': 1, 'b': {'c': 2, 'd': 3}}
    """
    result: Dict[str, Any] = dict(base)
    for key, value in (override or {}).items():
        current = result.get(key)
        if isinstance(current, dict) and isinstance(value, Mapping):
            result[key] = deep_merge(current, value)
        else:
            result[key] = value
    return result


def split_key(key: str) -> List[str]:
    """Split a dotted key into its non-empty segments."""
    return [part for part in str(key).strip().split(".") if part]


_ABSENT = object()


def lookup_path(data: Any, key: str) -> Tuple[bool, Any]:
    """Find ``key`` (dot notation) inside nested mappings.

    Returns:
        ``(found, value)``; ``found`` is False when any segment is missing or
        an intermediate value is not a mapping.
    """
    parts = split_key(key)
    if not parts:
        return False, None
    current: Any = data
    for part in parts:
        if not isinstance(current, Mapping):
            return False, None
        current = current.get(part, _ABSENT)
        if current is _ABSENT:
            return False, None
    return True, current


__all__ = ["deep_merge", "split_key", "lookup_path"]
