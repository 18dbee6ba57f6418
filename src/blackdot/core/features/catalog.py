"""Feature catalog: static metadata for every known feature.

The catalog is read-only after startup. ``FeatureCatalog.builtin()`` builds
it from the bundled ``features/catalog.yaml`` table; tests and embedders can
construct an empty catalog and ``register`` their own entries.

Example:
    catalog = FeatureCatalog.builtin()
    for feature in catalog.by_category(Category.INTEGRATION):
        print(f"{feature.name}: {feature.description}")
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional

from blackdot.core.exceptions import CatalogError, DuplicateFeatureError
from blackdot.core.schemas import validate_payload
from blackdot.data import read_yaml

from .env import EnvOverrides
from .models import Category, Feature

logger = logging.getLogger(__name__)

CATALOG_FILE = "catalog.yaml"


class FeatureCatalog:
    """Registry of ``Feature`` entries keyed by name."""

    def __init__(
        self,
        features: Optional[Iterable[Feature]] = None,
        *,
        legacy_env: Optional[Mapping[str, str]] = None,
    ) -> None:
        self._features: Dict[str, Feature] = {}
        self.env_overrides = EnvOverrides(legacy_env)
        for feature in features or ():
            self.register(feature)

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------
    @classmethod
    def from_table(cls, table: Mapping[str, Any]) -> "FeatureCatalog":
        """Build a catalog from a parsed ``catalog.yaml`` mapping.

        Raises:
            CatalogError: If the table violates the catalog schema or a
                legacy variable maps to an unknown feature.
        """
        validate_payload(table, "catalog.schema")
        catalog = cls(
            (Feature.from_dict(entry) for entry in table.get("features") or []),
            legacy_env=table.get("legacy_env") or {},
        )
        for var, name in catalog.env_overrides.legacy.items():
            if name not in catalog:
                raise CatalogError(
                    f"legacy variable {var} maps to unknown feature: {name}",
                    context={"variable": var, "feature": name},
                )
        return catalog

    @classmethod
    def builtin(cls) -> "FeatureCatalog":
        """Return a fresh catalog populated from the bundled feature table."""
        catalog = cls.from_table(read_yaml("features", CATALOG_FILE))
        logger.debug("Loaded %d built-in features", len(catalog))
        return catalog

    def register(self, feature: Feature) -> None:
        """Add ``feature``; raises ``DuplicateFeatureError`` if the name exists."""
        if feature.name in self._features:
            raise DuplicateFeatureError(feature.name)
        self._features[feature.name] = feature

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    def __contains__(self, name: object) -> bool:
        return name in self._features

    def __len__(self) -> int:
        return len(self._features)

    def exists(self, name: str) -> bool:
        return name in self._features

    def get(self, name: str) -> Optional[Feature]:
        return self._features.get(name)

    def all(self) -> List[Feature]:
        """All features sorted by name."""
        return [self._features[n] for n in sorted(self._features)]

    def names(self) -> List[str]:
        return sorted(self._features)

    def by_category(self, category: Category | str) -> List[Feature]:
        """Features in ``category`` sorted by name."""
        cat = Category(category) if not isinstance(category, Category) else category
        return [f for f in self.all() if f.category is cat]

    def conflicts_of(self, name: str) -> frozenset[str]:
        """Names mutually exclusive with ``name``.

        Conflicts are symmetric: declaring ``C conflicts with B`` makes ``B``
        conflict with ``C`` as well.
        """
        feature = self._features.get(name)
        declared = set(feature.conflicts) if feature else set()
        for other in self._features.values():
            if name in other.conflicts:
                declared.add(other.name)
        declared.discard(name)
        return frozenset(declared)

    def dependents_of(self, name: str) -> List[str]:
        """Features declaring ``name`` as a direct dependency, sorted."""
        return [f.name for f in self.all() if name in f.dependencies]


__all__ = ["FeatureCatalog", "CATALOG_FILE"]
