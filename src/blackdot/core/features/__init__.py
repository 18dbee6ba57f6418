"""Feature catalog, presets and enablement resolution."""
from __future__ import annotations

from .catalog import CATALOG_FILE, FeatureCatalog
from .env import DIRECT_PREFIX, EnvOverride, EnvOverrides, direct_variable
from .graph import enable_order, find_cycle, transitive_dependencies, unknown_dependencies
from .models import Category, DefaultPolicy, Feature, Preset, parse_category, parse_default_policy
from .presets import PRESETS_FILE, PresetCatalog
from .resolver import EnablementResolver, FeatureState, StateSource

__all__ = [
    "Category",
    "DefaultPolicy",
    "Feature",
    "Preset",
    "FeatureCatalog",
    "PresetCatalog",
    "EnablementResolver",
    "FeatureState",
    "StateSource",
    "EnvOverride",
    "EnvOverrides",
    "DIRECT_PREFIX",
    "CATALOG_FILE",
    "PRESETS_FILE",
    "direct_variable",
    "enable_order",
    "find_cycle",
    "transitive_dependencies",
    "unknown_dependencies",
    "parse_category",
    "parse_default_policy",
]
