"""Feature enablement resolution.

``EnablementResolver.enabled(name)`` answers from the first step that has an
opinion:

1. core category                      always on
2. runtime state                      set by enable/disable/presets this process
3. environment override               BLACKDOT_FEATURE_<NAME>, then legacy SKIP_* vars
4. persisted ``features.<name>``      machine layer, then user layer
5. catalog default policy             always_on on; off_by_default/env_gated off

Queries never write runtime state. ``enable`` validates the whole plan
(cycles, unknown dependencies, conflicts) before committing any of it.
"""
from __future__ import annotations

import logging
import os
import threading
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Set, Tuple

from blackdot.core.config import ConfigLayer, ConfigStore, parse_layer
from blackdot.core.exceptions import (
    BlackdotError,
    CircularDependencyError,
    ConfigError,
    ConflictError,
    CoreFeatureError,
    ReadOnlyLayerError,
    UnknownFeatureError,
)

from .catalog import FeatureCatalog
from .graph import enable_order, find_cycle, transitive_dependencies, unknown_dependencies
from .models import Feature
from .presets import PresetCatalog

logger = logging.getLogger(__name__)

FEATURES_SECTION = "features"

# Machine overrides user.
PERSISTED_LAYERS: Tuple[ConfigLayer, ...] = (ConfigLayer.MACHINE, ConfigLayer.USER)


class StateSource(str, Enum):
    """Which resolution step decided a feature's state."""

    CORE = "core"
    RUNTIME = "runtime"
    ENV = "env"
    CONFIG = "config"
    DEFAULT = "default"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class FeatureState:
    name: str
    enabled: bool
    source: StateSource
    origin: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "enabled": self.enabled,
            "source": self.source.value,
            "origin": self.origin,
        }


def _as_flag(value: Any) -> Optional[bool]:
    """Persisted flags are JSON bools; ``"true"``/``"false"`` strings are tolerated."""
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        v = value.strip().lower()
        if v in ("true", "1"):
            return True
        if v in ("false", "0"):
            return False
    return None


class EnablementResolver:
    """Decides which features are on and mutates runtime state safely."""

    def __init__(
        self,
        catalog: FeatureCatalog,
        presets: Optional[PresetCatalog] = None,
        *,
        store: Optional[ConfigStore] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> None:
        self.catalog = catalog
        self.presets = presets if presets is not None else PresetCatalog()
        self.store = store
        self._environ = environ
        self._state: Dict[str, bool] = {}
        self._lock = threading.RLock()

    @classmethod
    def builtin(
        cls,
        *,
        store: Optional[ConfigStore] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> "EnablementResolver":
        """Resolver over the bundled feature and preset tables."""
        catalog = FeatureCatalog.builtin()
        return cls(catalog, PresetCatalog.builtin(catalog), store=store, environ=environ)

    @property
    def environ(self) -> Mapping[str, str]:
        if self._environ is not None:
            return self._environ
        if self.store is not None:
            return self.store.environ
        return os.environ

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def _persisted(self, name: str) -> Optional[Tuple[bool, str]]:
        if self.store is None:
            return None
        key = f"{FEATURES_SECTION}.{name}"
        for layer in PERSISTED_LAYERS:
            result = self.store.get_from(layer, key)
            if result is None:
                continue
            flag = _as_flag(result.value)
            if flag is None:
                logger.debug("Ignoring non-boolean %s=%r in %s", key, result.value, result.origin)
                continue
            return flag, str(result.origin)
        return None

    def explain(self, name: str) -> FeatureState:
        """Resolve ``name`` and report the step that decided it."""
        feature = self.catalog.get(name)
        if feature is None:
            return FeatureState(name, False, StateSource.UNKNOWN)
        if feature.is_core:
            return FeatureState(name, True, StateSource.CORE)

        with self._lock:
            runtime = self._state.get(name)
        if runtime is not None:
            return FeatureState(name, runtime, StateSource.RUNTIME)

        override = self.catalog.env_overrides.lookup(name, self.environ)
        if override is not None:
            return FeatureState(name, override.enabled, StateSource.ENV, override.variable)

        persisted = self._persisted(name)
        if persisted is not None:
            return FeatureState(name, persisted[0], StateSource.CONFIG, persisted[1])

        return FeatureState(
            name, feature.default_enabled, StateSource.DEFAULT, feature.default_policy.value
        )

    def enabled(self, name: str) -> bool:
        """True when ``name`` is on; unknown names are off."""
        return self.explain(name).enabled

    def enabled_features(self) -> List[str]:
        return [f.name for f in self.catalog.all() if self.enabled(f.name)]

    def dependencies(self, name: str) -> List[str]:
        feature = self.catalog.get(name)
        return list(feature.dependencies) if feature else []

    def dependents(self, name: str) -> List[str]:
        if name not in self.catalog:
            return []
        return self.catalog.dependents_of(name)

    def missing_deps(self, name: str) -> List[str]:
        """Declared dependencies of ``name`` that are currently off."""
        return [dep for dep in self.dependencies(name) if not self.enabled(dep)]

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    def _require(self, name: str) -> Feature:
        feature = self.catalog.get(name)
        if feature is None:
            raise UnknownFeatureError(name)
        return feature

    def _plan(self, name: str) -> List[str]:
        self._require(name)

        cycle = find_cycle(self.catalog, name)
        if cycle is not None:
            raise CircularDependencyError(cycle)

        for member in [name, *transitive_dependencies(self.catalog, name)]:
            feature = self.catalog.get(member)
            if feature is None:
                continue
            for dep in feature.dependencies:
                if dep not in self.catalog:
                    raise UnknownFeatureError(dep, required_by=member)

        plan = enable_order(self.catalog, name, self.enabled)

        planned = set(plan)
        for member in plan:
            for other in sorted(self.catalog.conflicts_of(member)):
                if other in planned or self.enabled(other):
                    raise ConflictError(member, other)
        return plan

    def enable(self, name: str) -> List[str]:
        """Enable ``name`` and any disabled dependencies.

        Returns the features switched on, dependencies first.

        Raises:
            UnknownFeatureError: ``name`` or one of its dependencies is unknown.
            CircularDependencyError: The dependency walk from ``name`` loops.
            ConflictError: A planned feature conflicts with an enabled one or
                with another planned feature.
        """
        with self._lock:
            plan = self._plan(name)
            for member in plan:
                self._state[member] = True
        if len(plan) > 1:
            logger.info("Enabled %s (with dependencies: %s)", name, ", ".join(plan[:-1]))
        else:
            logger.info("Enabled %s", name)
        return plan

    def disable(self, name: str) -> None:
        """Turn ``name`` off. Dependents are left as they are."""
        feature = self._require(name)
        if feature.is_core:
            raise CoreFeatureError(name)
        with self._lock:
            self._state[name] = False
        logger.info("Disabled %s", name)

    def apply_preset(self, name: str) -> List[str]:
        """Reset non-core features to catalog defaults, then enable the preset's features in order."""
        preset = self.presets.require(name)
        with self._lock:
            for feature in self.catalog.all():
                if not feature.is_core:
                    self._state[feature.name] = feature.default_enabled
            for fname in preset.features:
                self.enable(fname)
        logger.info("Applied preset %s", name)
        return list(preset.features)

    # ------------------------------------------------------------------
    # Bulk state
    # ------------------------------------------------------------------
    def load_state(self, state: Mapping[str, Any]) -> None:
        """Import runtime overrides; unknown and core names are skipped."""
        with self._lock:
            for name, value in state.items():
                feature = self.catalog.get(name)
                if feature is None or feature.is_core:
                    logger.debug("Skipping state for %s", name)
                    continue
                flag = _as_flag(value)
                if flag is None:
                    logger.debug("Skipping non-boolean state %s=%r", name, value)
                    continue
                self._state[name] = flag

    def save_state(self) -> Dict[str, bool]:
        """Runtime overrides that differ from the catalog default.

        Only state set in this process counts; values coming from the
        environment or from config layers are not exported.
        """
        with self._lock:
            runtime = dict(self._state)
        out: Dict[str, bool] = {}
        for feature in self.catalog.all():
            if feature.is_core or feature.name not in runtime:
                continue
            if runtime[feature.name] != feature.default_enabled:
                out[feature.name] = runtime[feature.name]
        return out

    def _layer_section(self, layer: ConfigLayer) -> Dict[str, bool]:
        result = self.store.get_from(layer, FEATURES_SECTION)
        if result is None or not isinstance(result.value, dict):
            return {}
        section: Dict[str, bool] = {}
        for name, value in result.value.items():
            feature = self.catalog.get(name)
            flag = _as_flag(value)
            if feature is None or feature.is_core or flag is None:
                continue
            section[name] = flag
        return section

    def _persisted_below(self, layer: ConfigLayer, name: str) -> Optional[bool]:
        """Persisted value for ``name`` in the layers ``layer`` overrides."""
        if layer not in PERSISTED_LAYERS:
            return None
        for lower in PERSISTED_LAYERS[PERSISTED_LAYERS.index(layer) + 1 :]:
            result = self.store.get_from(lower, f"{FEATURES_SECTION}.{name}")
            flag = _as_flag(result.value) if result is not None else None
            if flag is not None:
                return flag
        return None

    def persist(self, layer: ConfigLayer | str = ConfigLayer.USER) -> Path:
        """Merge runtime overrides into the ``features`` section of ``layer``.

        Entries already in that layer are kept unless this process changed
        them. An entry equal to the catalog default is dropped, unless a
        lower persisted layer holds a different value it has to mask.
        """
        if self.store is None:
            raise ConfigError("cannot persist feature state: no config store configured")
        layer = parse_layer(layer)
        if not layer.writable:
            raise ReadOnlyLayerError(layer.value)

        section = self._layer_section(layer)
        with self._lock:
            section.update(
                (name, value)
                for name, value in self._state.items()
                if name in self.catalog and not self.catalog.get(name).is_core
            )

        out: Dict[str, bool] = {}
        for feature in self.catalog.all():
            if feature.name not in section:
                continue
            value = section[feature.name]
            below = self._persisted_below(layer, feature.name)
            if value != feature.default_enabled or (below is not None and below != value):
                out[feature.name] = value

        path = self.store.set(layer, FEATURES_SECTION, out)
        logger.info("Persisted feature state to %s", path)
        return path

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------
    def problems(self) -> List[BlackdotError]:
        """Every cycle, unknown dependency and enabled-conflict, as exceptions."""
        found: List[BlackdotError] = []

        seen_cycles: Set[frozenset] = set()
        for feature in self.catalog.all():
            cycle = find_cycle(self.catalog, feature.name)
            if cycle is None:
                continue
            members = frozenset(cycle)
            if members not in seen_cycles:
                seen_cycles.add(members)
                found.append(CircularDependencyError(cycle))

        for feature_name, dep in unknown_dependencies(self.catalog):
            found.append(UnknownFeatureError(dep, required_by=feature_name))

        on = set(self.enabled_features())
        reported: Set[frozenset] = set()
        for name in sorted(on):
            for other in sorted(self.catalog.conflicts_of(name)):
                pair = frozenset((name, other))
                if other in on and pair not in reported:
                    reported.add(pair)
                    found.append(ConflictError(name, other, both_enabled=True))
        return found

    def validate(self) -> None:
        """Raise the first problem reported by :meth:`problems`."""
        found = self.problems()
        if found:
            raise found[0]


__all__ = [
    "EnablementResolver",
    "FeatureState",
    "StateSource",
    "FEATURES_SECTION",
    "PERSISTED_LAYERS",
]
