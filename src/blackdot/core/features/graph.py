"""Dependency graph walks over a ``FeatureCatalog``."""
from __future__ import annotations

from typing import Callable, List, Optional, Set, Tuple

from .catalog import FeatureCatalog


def find_cycle(catalog: FeatureCatalog, start: str) -> Optional[List[str]]:
    """Depth-first walk from ``start`` carrying the current path.

    Returns the cycle as an ordered path ending with the repeated name
    (e.g. ``["a", "b", "c", "a"]``), or None. Names missing from the catalog
    are leaves here; callers report them separately.
    """
    explored: Set[str] = set()

    def _walk(name: str, path: List[str]) -> Optional[List[str]]:
        if name in path:
            return path + [name]
        if name in explored:
            return None
        feature = catalog.get(name)
        if feature is None:
            return None
        path.append(name)
        for dep in feature.dependencies:
            found = _walk(dep, path)
            if found is not None:
                return found
        path.pop()
        explored.add(name)
        return None

    return _walk(start, [])


def unknown_dependencies(catalog: FeatureCatalog) -> List[Tuple[str, str]]:
    """``(feature, dependency)`` pairs where the dependency is not in the catalog."""
    missing: List[Tuple[str, str]] = []
    for feature in catalog.all():
        for dep in feature.dependencies:
            if dep not in catalog:
                missing.append((feature.name, dep))
    return missing


def enable_order(
    catalog: FeatureCatalog,
    name: str,
    is_enabled: Callable[[str], bool],
) -> List[str]:
    """Features to switch on for ``name``, dependencies before dependents.

    Already-enabled dependencies are left out of the result but still
    walked, since one of their own dependencies may have been disabled
    since. The requested feature is always last. Assumes the walk from
    ``name`` is acyclic (check with :func:`find_cycle` first).
    """
    order: List[str] = []
    seen: Set[str] = set()

    def _visit(current: str, include: bool) -> None:
        if current in seen:
            return
        seen.add(current)
        feature = catalog.get(current)
        if feature is not None:
            for dep in feature.dependencies:
                _visit(dep, not is_enabled(dep))
        if include:
            order.append(current)

    _visit(name, True)
    return order


def transitive_dependencies(catalog: FeatureCatalog, name: str) -> List[str]:
    """Every feature reachable through dependencies of ``name`` (excluding it), in walk order."""
    result: List[str] = []
    seen: Set[str] = {name}
    stack = list(reversed(catalog.get(name).dependencies)) if name in catalog else []
    while stack:
        current = stack.pop()
        if current in seen:
            continue
        seen.add(current)
        result.append(current)
        feature = catalog.get(current)
        if feature is not None:
            stack.extend(reversed(feature.dependencies))
    return result


__all__ = ["find_cycle", "unknown_dependencies", "enable_order", "transitive_dependencies"]
