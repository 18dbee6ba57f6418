"""Environment-variable feature overrides.

Two declared variable families can force a feature on or off:

- Direct flags: ``BLACKDOT_FEATURE_<NAME>``. ``true``/``1`` enables the
  feature, any other non-empty value disables it.
- Legacy inverted "skip" variables (e.g. ``SKIP_CLAUDE_SETUP``), kept for
  older shell setups. ``true``/``1`` disables the mapped feature, any other
  non-empty value enables it.

The direct flag is checked before the legacy family. Empty values count as
unset.
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Dict, Mapping, Optional

DIRECT_PREFIX = "BLACKDOT_FEATURE_"

_TRUTHY = frozenset({"true", "1"})


@dataclass(frozen=True)
class EnvOverride:
    """A feature state forced by an environment variable."""

    variable: str
    raw: str
    enabled: bool
    legacy: bool = False


def direct_variable(name: str, prefix: str = DIRECT_PREFIX) -> str:
    return prefix + str(name).upper()


class EnvOverrides:
    """Declared mapping tables for environment feature overrides."""

    def __init__(
        self,
        legacy: Optional[Mapping[str, str]] = None,
        *,
        direct_prefix: str = DIRECT_PREFIX,
    ) -> None:
        # variable -> feature name
        self._legacy: Dict[str, str] = dict(legacy or {})
        self.direct_prefix = direct_prefix

    @property
    def legacy(self) -> Dict[str, str]:
        return dict(self._legacy)

    def legacy_variables_for(self, name: str) -> list[str]:
        """Legacy variables mapped to ``name``, in declaration order."""
        return [var for var, feature in self._legacy.items() if feature == name]

    def lookup(self, name: str, environ: Optional[Mapping[str, str]] = None) -> Optional[EnvOverride]:
        """Return the override for ``name``, or None when no variable is set."""
        env = os.environ if environ is None else environ

        var = direct_variable(name, self.direct_prefix)
        raw = env.get(var, "")
        if raw:
            return EnvOverride(variable=var, raw=raw, enabled=raw.strip().lower() in _TRUTHY)

        for var in self.legacy_variables_for(name):
            raw = env.get(var, "")
            if raw:
                return EnvOverride(
                    variable=var,
                    raw=raw,
                    enabled=raw.strip().lower() not in _TRUTHY,
                    legacy=True,
                )
        return None


__all__ = ["DIRECT_PREFIX", "EnvOverride", "EnvOverrides", "direct_variable"]
