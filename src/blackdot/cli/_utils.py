"""Shared CLI utility functions.

Each invocation builds exactly one store and one resolver; nothing is kept
at module level.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from blackdot.core.config import ConfigStore
from blackdot.core.features import EnablementResolver


def build_store() -> ConfigStore:
    """Config store rooted at the resolved config dir and the current directory."""
    return ConfigStore()


def build_resolver(store: Optional[ConfigStore] = None) -> EnablementResolver:
    """Resolver over the bundled catalog, reading persisted state through ``store``."""
    return EnablementResolver.builtin(store=store if store is not None else build_store())


def warnings_payload(store: ConfigStore) -> List[Dict[str, Any]]:
    """Drain layer warnings into a JSON-friendly list."""
    return [
        {"layer": w.layer.value, "path": w.path, "message": w.message}
        for w in store.drain_warnings()
    ]


__all__ = ["build_store", "build_resolver", "warnings_payload"]
