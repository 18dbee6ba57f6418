"""Configuration layers and resolution results.

Layers in priority order (highest first)::

    env > project > machine > user > default

Values keep their JSON type (str, bool, int, float, list, dict) until a
caller asks for a string or a bool.
"""
from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple

ENV_PREFIX = "BLACKDOT"


class ConfigLayer(str, Enum):
    ENV = "env"
    PROJECT = "project"
    MACHINE = "machine"
    USER = "user"
    DEFAULT = "default"

    @property
    def writable(self) -> bool:
        return self in WRITABLE_LAYERS

    @property
    def file_backed(self) -> bool:
        return self in FILE_LAYERS


# Highest priority first.
LAYER_PRIORITY: Tuple[ConfigLayer, ...] = (
    ConfigLayer.ENV,
    ConfigLayer.PROJECT,
    ConfigLayer.MACHINE,
    ConfigLayer.USER,
    ConfigLayer.DEFAULT,
)
FILE_LAYERS: Tuple[ConfigLayer, ...] = (ConfigLayer.PROJECT, ConfigLayer.MACHINE, ConfigLayer.USER)
WRITABLE_LAYERS = FILE_LAYERS


def parse_layer(raw: Any) -> ConfigLayer:
    if isinstance(raw, ConfigLayer):
        return raw
    v = str(raw or "").strip().lower()
    if v == "environment":
        return ConfigLayer.ENV
    for layer in ConfigLayer:
        if v == layer.value:
            return layer
    raise ValueError(f"Unknown layer: {raw} (expected one of: env, project, machine, user, default)")


def env_key(key: str, prefix: str = ENV_PREFIX) -> str:
    """Environment variable for a dotted key: ``vault.backend`` -> ``BLACKDOT_VAULT_BACKEND``."""
    return f"{prefix}_" + str(key).replace(".", "_").upper()


def is_empty(value: Any) -> bool:
    """A layer only "has" a key when its value is neither None nor ``""``."""
    return value is None or value == ""


def value_to_str(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)):
        return str(value)
    return json.dumps(value, sort_keys=True)


_TRUE_STRINGS = frozenset({"true", "1", "yes", "on"})
_FALSE_STRINGS = frozenset({"false", "0", "no", "off"})


def coerce_bool(value: Any, default: bool = False) -> bool:
    """Interpret a config value as a bool.

    Bools pass through, numbers compare against zero, and the strings
    ``true/1/yes/on`` and ``false/0/no/off`` are recognised (case-insensitive).
    Anything else returns ``default``.
    """
    if isinstance(value, bool):
        return value
    if value is None:
        return default
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        v = value.strip().lower()
        if v in _TRUE_STRINGS:
            return True
        if v in _FALSE_STRINGS:
            return False
    return default


def parse_value(raw: str) -> Any:
    """Parse a command-line value: JSON when it parses, otherwise the raw string."""
    try:
        return json.loads(raw)
    except (TypeError, ValueError):
        return raw


@dataclass(frozen=True)
class LayerResult:
    """A resolved value and the single layer that supplied it."""

    key: str
    value: Any
    source: ConfigLayer
    origin: Optional[str] = None

    @property
    def found(self) -> bool:
        return not is_empty(self.value)

    def as_str(self) -> str:
        return value_to_str(self.value)

    def as_bool(self, default: bool = False) -> bool:
        return coerce_bool(self.value, default)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "key": self.key,
            "value": self.value,
            "source": self.source.value,
            "origin": self.origin,
        }


@dataclass(frozen=True)
class LayerValue:
    """One layer's view of a key, for provenance displays."""

    layer: ConfigLayer
    value: Any
    origin: Optional[str]
    present: bool
    active: bool = False
    note: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "layer": self.layer.value,
            "value": self.value,
            "origin": self.origin,
            "present": self.present,
            "active": self.active,
            "note": self.note,
        }


@dataclass(frozen=True)
class LayerWarning:
    """Non-fatal problem found while reading a layer file."""

    layer: ConfigLayer
    path: str
    message: str

    def __str__(self) -> str:
        return f"{self.layer.value} config {self.path}: {self.message}"


__all__ = [
    "ENV_PREFIX",
    "ConfigLayer",
    "LAYER_PRIORITY",
    "FILE_LAYERS",
    "WRITABLE_LAYERS",
    "LayerResult",
    "LayerValue",
    "LayerWarning",
    "parse_layer",
    "env_key",
    "is_empty",
    "value_to_str",
    "coerce_bool",
    "parse_value",
]
