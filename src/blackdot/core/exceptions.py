from __future__ import annotations

from typing import Any, Dict, Iterable, Mapping, Sequence


class BlackdotError(Exception):
    """Base exception for Blackdot."""

    context: Dict[str, Any]

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        super().__init__(message)
        if context is not None:
            # Store a shallow copy to avoid accidental mutation.
            self.context = dict(context)
        else:
            self.context = {}

    def to_json_error(self) -> Dict[str, Any]:
        """Return a JSON-serializable error payload."""
        return {
            "message": str(self),
            "code": self.__class__.__name__,
            "context": self.context,
        }


# ---------------------------------------------------------------------------
# Feature registry
# ---------------------------------------------------------------------------


class UnknownFeatureError(BlackdotError, LookupError):
    """Raised when a feature name is not in the catalog."""

    def __init__(self, name: str, *, required_by: str | None = None) -> None:
        if required_by:
            message = f"unknown feature: {name} (required by {required_by})"
        else:
            message = f"unknown feature: {name}"
        ctx: Dict[str, Any] = {"feature": name}
        if required_by:
            ctx["required_by"] = required_by
        BlackdotError.__init__(self, message, context=ctx)
        self.name = name
        self.required_by = required_by


class UnknownPresetError(BlackdotError, LookupError):
    """Raised when a preset name is not defined."""

    def __init__(self, name: str, *, available: Iterable[str] = ()) -> None:
        available = list(available)
        BlackdotError.__init__(
            self,
            f"unknown preset: {name}",
            context={"preset": name, "available": available},
        )
        self.name = name


class DuplicateFeatureError(BlackdotError, ValueError):
    """Raised when registering a feature name twice."""

    def __init__(self, name: str) -> None:
        BlackdotError.__init__(self, f"feature already registered: {name}", context={"feature": name})
        self.name = name


class CircularDependencyError(BlackdotError, ValueError):
    """Raised when the dependency walk revisits a feature on the current path."""

    def __init__(self, path: Sequence[str]) -> None:
        self.path = tuple(path)
        BlackdotError.__init__(
            self,
            "circular dependency detected: " + " -> ".join(self.path),
            context={"path": list(self.path)},
        )


class ConflictError(BlackdotError, ValueError):
    """Raised when two mutually exclusive features would both be enabled."""

    def __init__(self, feature: str, conflicting: str, *, both_enabled: bool = False) -> None:
        if both_enabled:
            message = f"conflict: '{feature}' and '{conflicting}' are both enabled but mutually exclusive"
        else:
            message = f"cannot enable '{feature}': conflicts with enabled feature '{conflicting}'"
        BlackdotError.__init__(
            self, message, context={"feature": feature, "conflicting": conflicting}
        )
        self.feature = feature
        self.conflicting = conflicting


class CoreFeatureError(BlackdotError, ValueError):
    """Raised when attempting to disable a core feature."""

    def __init__(self, name: str) -> None:
        BlackdotError.__init__(self, f"cannot disable core feature: {name}", context={"feature": name})
        self.name = name


class CatalogError(BlackdotError):
    """Raised when a bundled feature or preset table is invalid."""


# ---------------------------------------------------------------------------
# Layered configuration
# ---------------------------------------------------------------------------


class ConfigError(BlackdotError):
    """Base class for layered configuration errors."""


class ReadOnlyLayerError(ConfigError):
    """Raised when writing to the env or default layer."""

    def __init__(self, layer: str) -> None:
        ConfigError.__init__(
            self,
            f"layer '{layer}' is read-only (writable layers: project, machine, user)",
            context={"layer": layer},
        )
        self.layer = layer


class ConfigKeyNotFoundError(ConfigError, LookupError):
    """Raised by direct reads when the key is absent from the user layer."""

    def __init__(self, key: str, *, path: str | None = None) -> None:
        message = f"key not found: {key}"
        if path:
            message = f"{message} (in {path})"
        ConfigError.__init__(self, message, context={"key": key, "path": path})
        self.key = key


class ConfigValueError(ConfigError, ValueError):
    """Raised when a key or value cannot be stored."""


class MalformedLayerError(ConfigError, ValueError):
    """Raised when a write targets a layer file that cannot be parsed."""

    def __init__(self, layer: str, path: str, reason: str) -> None:
        ConfigError.__init__(
            self,
            f"{layer} config is malformed: {path}: {reason}",
            context={"layer": layer, "path": path, "reason": reason},
        )
        self.layer = layer
        self.path = path


__all__ = [
    "BlackdotError",
    "UnknownFeatureError",
    "UnknownPresetError",
    "DuplicateFeatureError",
    "CircularDependencyError",
    "ConflictError",
    "CoreFeatureError",
    "CatalogError",
    "ConfigError",
    "ReadOnlyLayerError",
    "ConfigKeyNotFoundError",
    "ConfigValueError",
    "MalformedLayerError",
]
