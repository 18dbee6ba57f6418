"""Feature and preset value types."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, Optional


class Category(str, Enum):
    CORE = "core"
    OPTIONAL = "optional"
    INTEGRATION = "integration"


class DefaultPolicy(str, Enum):
    ALWAYS_ON = "always_on"
    OFF_BY_DEFAULT = "off_by_default"
    # Off unless an environment signal turns it on.
    ENV_GATED = "env_gated"


def parse_category(raw: Any) -> Category:
    if isinstance(raw, Category):
        return raw
    v = str(raw or "").strip().lower()
    for c in Category:
        if v == c.value:
            return c
    raise ValueError(f"Invalid feature category: {raw} (expected one of: core, optional, integration)")


def parse_default_policy(raw: Any) -> DefaultPolicy:
    if isinstance(raw, DefaultPolicy):
        return raw
    v = str(raw or "").strip().lower()
    for p in DefaultPolicy:
        if v == p.value:
            return p
    raise ValueError(
        f"Invalid default policy: {raw} (expected one of: always_on, off_by_default, env_gated)"
    )


def _unique(names: Optional[Iterable[str]]) -> tuple[str, ...]:
    return tuple(dict.fromkeys(str(n) for n in (names or ())))


@dataclass(frozen=True)
class Feature:
    """A named, toggleable capability.

    ``category`` and ``default_policy`` accept their string values and are
    converted to enums on construction; anything else raises ``ValueError``.
    """

    name: str
    description: str = ""
    category: Category = Category.OPTIONAL
    dependencies: tuple[str, ...] = ()
    conflicts: frozenset[str] = frozenset()
    default_policy: DefaultPolicy = DefaultPolicy.OFF_BY_DEFAULT

    def __post_init__(self) -> None:
        if not self.name or not str(self.name).strip():
            raise ValueError("Feature name must be a non-empty string")
        object.__setattr__(self, "category", parse_category(self.category))
        object.__setattr__(self, "default_policy", parse_default_policy(self.default_policy))
        object.__setattr__(self, "dependencies", _unique(self.dependencies))
        object.__setattr__(self, "conflicts", frozenset(str(c) for c in (self.conflicts or ())))
        if self.name in self.conflicts:
            raise ValueError(f"Feature '{self.name}' cannot conflict with itself")

    @property
    def is_core(self) -> bool:
        return self.category is Category.CORE

    @property
    def default_enabled(self) -> bool:
        """Catalog default state: core and ``always_on`` are on, everything else off."""
        return self.is_core or self.default_policy is DefaultPolicy.ALWAYS_ON

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "category": self.category.value,
            "dependencies": list(self.dependencies),
            "conflicts": sorted(self.conflicts),
            "default": self.default_policy.value,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Feature":
        return cls(
            name=str(data["name"]),
            description=str(data.get("description") or ""),
            category=data.get("category", Category.OPTIONAL),
            dependencies=tuple(data.get("dependencies") or ()),
            conflicts=frozenset(data.get("conflicts") or ()),
            default_policy=data.get("default", DefaultPolicy.OFF_BY_DEFAULT),
        )


@dataclass(frozen=True)
class Preset:
    """A named bundle of features enabled together, in order."""

    name: str
    description: str = ""
    features: tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "features", _unique(self.features))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "features": list(self.features),
        }


__all__ = [
    "Category",
    "DefaultPolicy",
    "Feature",
    "Preset",
    "parse_category",
    "parse_default_policy",
]
