"""Feature presets: named bundles applied together."""
from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, Optional

from blackdot.core.exceptions import CatalogError, UnknownPresetError
from blackdot.core.schemas import validate_payload
from blackdot.data import read_yaml

from .catalog import FeatureCatalog
from .models import Preset

PRESETS_FILE = "presets.yaml"


class PresetCatalog:
    """Presets in display (registration) order."""

    def __init__(self, presets: Optional[Iterable[Preset]] = None) -> None:
        self._presets: Dict[str, Preset] = {}
        for preset in presets or ():
            self.register(preset)

    @classmethod
    def from_table(
        cls,
        table: Mapping[str, Any],
        *,
        catalog: Optional[FeatureCatalog] = None,
    ) -> "PresetCatalog":
        """Build presets from a parsed ``presets.yaml`` mapping.

        When ``catalog`` is given, every listed feature must exist in it.
        """
        validate_payload(table, "presets.schema")
        presets = cls(
            Preset(
                name=str(entry["name"]),
                description=str(entry.get("description") or ""),
                features=tuple(entry.get("features") or ()),
            )
            for entry in table.get("presets") or []
        )
        if catalog is not None:
            for preset in presets.all():
                unknown = [f for f in preset.features if f not in catalog]
                if unknown:
                    raise CatalogError(
                        f"preset '{preset.name}' lists unknown features: {', '.join(unknown)}",
                        context={"preset": preset.name, "unknown": unknown},
                    )
        return presets

    @classmethod
    def builtin(cls, catalog: Optional[FeatureCatalog] = None) -> "PresetCatalog":
        return cls.from_table(read_yaml("features", PRESETS_FILE), catalog=catalog)

    def register(self, preset: Preset) -> None:
        if preset.name in self._presets:
            raise CatalogError(f"preset already registered: {preset.name}", context={"preset": preset.name})
        self._presets[preset.name] = preset

    def __contains__(self, name: object) -> bool:
        return name in self._presets

    def get(self, name: str) -> Optional[Preset]:
        return self._presets.get(name)

    def require(self, name: str) -> Preset:
        preset = self._presets.get(name)
        if preset is None:
            raise UnknownPresetError(name, available=self.names())
        return preset

    def all(self) -> List[Preset]:
        return list(self._presets.values())

    def names(self) -> List[str]:
        return list(self._presets)


__all__ = ["PresetCatalog", "PRESETS_FILE"]
