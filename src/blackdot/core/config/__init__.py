"""Layered configuration: env > project > machine > user > default."""
from __future__ import annotations

from .cache import ResolutionCache, file_fingerprint
from .layers import (
    ENV_PREFIX,
    FILE_LAYERS,
    LAYER_PRIORITY,
    WRITABLE_LAYERS,
    ConfigLayer,
    LayerResult,
    LayerValue,
    LayerWarning,
    coerce_bool,
    env_key,
    is_empty,
    parse_layer,
    parse_value,
    value_to_str,
)
from .paths import find_project_config, resolve_config_dir
from .store import ConfigStore

__all__ = [
    "ConfigStore",
    "ConfigLayer",
    "LayerResult",
    "LayerValue",
    "LayerWarning",
    "ResolutionCache",
    "ENV_PREFIX",
    "FILE_LAYERS",
    "LAYER_PRIORITY",
    "WRITABLE_LAYERS",
    "coerce_bool",
    "env_key",
    "file_fingerprint",
    "find_project_config",
    "is_empty",
    "parse_layer",
    "parse_value",
    "resolve_config_dir",
    "value_to_str",
]
