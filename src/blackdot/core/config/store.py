"""Layered configuration store.

Resolves dotted keys across five layers (highest priority first)::

    env      BLACKDOT_<KEY>           read live, never cached
    project  .blackdot.json           nearest one walking up from cwd
    machine  <config-dir>/machine.json
    user     <config-dir>/config.json
    default  bundled data/config/defaults.yaml

The first layer holding a value other than None or ``""`` wins. A key no
layer knows resolves to ``""`` with source ``default``; lookups never raise
for missing keys.

Layer files that cannot be parsed are skipped during resolution. Each one is
logged at WARNING and recorded in :attr:`ConfigStore.warnings`; writes to such
a file raise :class:`MalformedLayerError` instead of replacing it.

Example:
    store = ConfigStore()
    result = store.get_layered("vault.backend")
    print(result.value, result.source.value, result.origin)
"""
from __future__ import annotations

import json
import logging
import os
import socket
import threading
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

from blackdot.core.exceptions import (
    ConfigKeyNotFoundError,
    ConfigValueError,
    MalformedLayerError,
    ReadOnlyLayerError,
)
from blackdot.core.utils.io import read_json, update_json, write_json_atomic
from blackdot.core.utils.merge import deep_merge, lookup_path, split_key
from blackdot.data import read_yaml

from .cache import ResolutionCache, file_fingerprint
from .layers import (
    ENV_PREFIX,
    FILE_LAYERS,
    ConfigLayer,
    LayerResult,
    LayerValue,
    LayerWarning,
    env_key,
    is_empty,
    parse_layer,
)
from .paths import (
    MACHINE_CONFIG_FILE,
    PROJECT_CONFIG_FILE,
    USER_CONFIG_FILE,
    find_project_config,
    resolve_config_dir,
)

logger = logging.getLogger(__name__)

DEFAULTS_FILE = "defaults.yaml"


class ConfigStore:
    """Read and write layered configuration.

    Args:
        config_dir: Directory holding ``config.json`` and ``machine.json``.
            Defaults to :func:`resolve_config_dir`.
        cwd: Start directory for project-file discovery (default: process cwd).
        environ: Environment mapping; defaults to ``os.environ`` read live.
        env_prefix: Prefix for environment keys.
        cache_ttl: Seconds a cached file-layer resolution stays valid.
            None keeps entries until a layer file changes or a write
            invalidates them.
        defaults: Replacement for the bundled defaults table.
    """

    def __init__(
        self,
        config_dir: Optional[Path | str] = None,
        *,
        cwd: Optional[Path | str] = None,
        environ: Optional[Mapping[str, str]] = None,
        env_prefix: str = ENV_PREFIX,
        cache_ttl: Optional[float] = None,
        defaults: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self._environ = environ
        self.config_dir = Path(config_dir) if config_dir is not None else resolve_config_dir(environ)
        self.cwd = Path(cwd) if cwd is not None else None
        self.env_prefix = env_prefix
        self._defaults = dict(defaults) if defaults is not None else None
        self._cache = ResolutionCache(ttl=cache_ttl)
        self._lock = threading.RLock()
        self._warnings: List[LayerWarning] = []

    # ------------------------------------------------------------------
    # Locations
    # ------------------------------------------------------------------
    @property
    def environ(self) -> Mapping[str, str]:
        return os.environ if self._environ is None else self._environ

    @property
    def user_path(self) -> Path:
        return self.config_dir / USER_CONFIG_FILE

    @property
    def machine_path(self) -> Path:
        return self.config_dir / MACHINE_CONFIG_FILE

    def project_path(self) -> Optional[Path]:
        """Nearest ``.blackdot.json`` at or above the working directory."""
        return find_project_config(self.cwd)

    def layer_path(self, layer: ConfigLayer | str) -> Optional[Path]:
        """Backing file for a file layer (None for env/default or no project file)."""
        layer = parse_layer(layer)
        if layer is ConfigLayer.USER:
            return self.user_path
        if layer is ConfigLayer.MACHINE:
            return self.machine_path
        if layer is ConfigLayer.PROJECT:
            return self.project_path()
        return None

    def _file_layer_paths(self) -> List[Tuple[ConfigLayer, Optional[Path]]]:
        return [(layer, self.layer_path(layer)) for layer in FILE_LAYERS]

    # ------------------------------------------------------------------
    # Warnings
    # ------------------------------------------------------------------
    @property
    def warnings(self) -> List[LayerWarning]:
        with self._lock:
            return list(self._warnings)

    def drain_warnings(self) -> List[LayerWarning]:
        """Return and clear accumulated layer warnings."""
        with self._lock:
            drained, self._warnings = self._warnings, []
            return drained

    def _warn(self, layer: ConfigLayer, path: Path, message: str) -> None:
        warning = LayerWarning(layer=layer, path=str(path), message=message)
        with self._lock:
            if warning in self._warnings:
                return
            self._warnings.append(warning)
        logger.warning("Ignoring malformed %s config %s: %s", layer.value, path, message)

    # ------------------------------------------------------------------
    # Layer documents
    # ------------------------------------------------------------------
    def _read_document(self, path: Path) -> Dict[str, Any]:
        """Parse a layer file; raises ValueError when it is not a JSON object."""
        data = read_json(path)
        if not isinstance(data, dict):
            raise ValueError(f"expected a JSON object, got {type(data).__name__}")
        return data

    def _load_layer(self, layer: ConfigLayer, path: Optional[Path]) -> Optional[Dict[str, Any]]:
        """Layer document, or None when the file is missing or malformed."""
        if path is None or not path.exists():
            return None
        try:
            return self._read_document(path)
        except ValueError as exc:
            # json.JSONDecodeError is a ValueError
            self._warn(layer, path, str(exc))
            return None

    def _defaults_table(self) -> Dict[str, Any]:
        if self._defaults is None:
            table = read_yaml("config", DEFAULTS_FILE) or {}
            self._defaults = dict(table) if isinstance(table, dict) else {}
        return self._defaults

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    def get(self, key: str) -> Any:
        """Read ``key`` from the user layer only.

        Raises:
            ConfigKeyNotFoundError: If the user layer does not contain ``key``.
        """
        path = self.user_path
        data = self._load_layer(ConfigLayer.USER, path) or {}
        found, value = lookup_path(data, key)
        if not found:
            raise ConfigKeyNotFoundError(key, path=str(path))
        return value

    def get_layered(self, key: str) -> LayerResult:
        """Resolve ``key`` across all layers and report which one supplied it."""
        var = env_key(key, self.env_prefix)
        raw = self.environ.get(var, "")
        if raw != "":
            logger.debug("%s resolved from env %s", key, var)
            return LayerResult(key=key, value=raw, source=ConfigLayer.ENV, origin=var)

        paths = self._file_layer_paths()
        fingerprint = file_fingerprint(p for _, p in paths)
        cached = self._cache.get(key, fingerprint)
        if cached is not None:
            return cached

        result = self._resolve_files(key, paths)
        self._cache.put(key, fingerprint, result)
        logger.debug("%s resolved from %s (%s)", key, result.source.value, result.origin)
        return result

    def _resolve_files(self, key: str, paths: List[Tuple[ConfigLayer, Optional[Path]]]) -> LayerResult:
        for layer, path in paths:
            data = self._load_layer(layer, path)
            if data is None:
                continue
            found, value = lookup_path(data, key)
            if found and not is_empty(value):
                return LayerResult(key=key, value=value, source=layer, origin=str(path))

        found, value = lookup_path(self._defaults_table(), key)
        if found and not is_empty(value):
            return LayerResult(key=key, value=value, source=ConfigLayer.DEFAULT)
        return LayerResult(key=key, value="", source=ConfigLayer.DEFAULT)

    def get_from(self, layer: ConfigLayer | str, key: str) -> Optional[LayerResult]:
        """Value of ``key`` in a single file layer, or None when that layer lacks it."""
        layer = parse_layer(layer)
        if not layer.file_backed:
            raise ConfigValueError(
                f"'{layer.value}' is not a file layer", context={"layer": layer.value}
            )
        path = self.layer_path(layer)
        data = self._load_layer(layer, path)
        if data is None:
            return None
        found, value = lookup_path(data, key)
        if not found:
            return None
        return LayerResult(key=key, value=value, source=layer, origin=str(path))

    def layer_values(self, key: str) -> List[LayerValue]:
        """Every layer's view of ``key`` in priority order, the winner marked active."""
        rows: List[Tuple[ConfigLayer, Any, Optional[str], bool, Optional[str]]] = []

        var = env_key(key, self.env_prefix)
        raw = self.environ.get(var, "")
        rows.append((ConfigLayer.ENV, raw or None, var, raw != "", None))

        for layer, path in self._file_layer_paths():
            if path is None:
                rows.append((layer, None, None, False, "no project file found"))
                continue
            if not path.exists():
                rows.append((layer, None, str(path), False, "file does not exist"))
                continue
            data = self._load_layer(layer, path)
            if data is None:
                rows.append((layer, None, str(path), False, "file is malformed"))
                continue
            found, value = lookup_path(data, key)
            present = found and not is_empty(value)
            rows.append((layer, value if found else None, str(path), present, None))

        found, value = lookup_path(self._defaults_table(), key)
        rows.append((ConfigLayer.DEFAULT, value if found else None, None, found and not is_empty(value), None))

        out: List[LayerValue] = []
        winner_seen = False
        for layer, value, origin, present, note in rows:
            active = present and not winner_seen
            winner_seen = winner_seen or present
            out.append(LayerValue(layer=layer, value=value, origin=origin, present=present, active=active, note=note))
        return out

    def merged(self) -> Dict[str, Any]:
        """File layers deep-merged: user < machine < project."""
        merged: Dict[str, Any] = {}
        for layer, path in reversed(self._file_layer_paths()):
            data = self._load_layer(layer, path)
            if data:
                merged = deep_merge(merged, data)
        return merged

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------
    def _write_target(self, layer: ConfigLayer) -> Path:
        if layer is ConfigLayer.PROJECT:
            found = self.project_path()
            if found is not None:
                return found
            base = self.cwd if self.cwd is not None else Path.cwd()
            return base / PROJECT_CONFIG_FILE
        if layer is ConfigLayer.MACHINE:
            return self.machine_path
        if layer is ConfigLayer.USER:
            return self.user_path
        raise ConfigValueError(
            f"layer '{layer.value}' has no backing file to write",
            context={"layer": layer.value},
        )

    def set(self, layer: ConfigLayer | str, key: str, value: Any) -> Path:
        """Write ``value`` at ``key`` in a writable layer; returns the file written.

        Raises:
            ReadOnlyLayerError: For the env and default layers.
            ConfigValueError: For an empty key, or when an intermediate segment
                holds a non-object value.
            MalformedLayerError: When the existing file cannot be parsed.
        """
        layer = parse_layer(layer)
        if not layer.writable:
            raise ReadOnlyLayerError(layer.value)
        parts = split_key(key)
        if not parts:
            raise ConfigValueError(f"invalid config key: {key!r}", context={"key": key})

        path = self._write_target(layer)

        def _apply(doc: Dict[str, Any]) -> Dict[str, Any]:
            node = doc
            for i, part in enumerate(parts[:-1]):
                child = node.get(part)
                if child is None:
                    child = {}
                    node[part] = child
                elif not isinstance(child, dict):
                    prefix = ".".join(parts[: i + 1])
                    raise ConfigValueError(
                        f"cannot set {key}: {prefix} is a {type(child).__name__}, not an object",
                        context={"key": key, "segment": prefix, "path": str(path)},
                    )
                node = child
            node[parts[-1]] = value
            return doc

        with self._lock:
            try:
                update_json(path, _apply)
            except json.JSONDecodeError as exc:
                raise MalformedLayerError(layer.value, str(path), str(exc)) from exc
            except TypeError as exc:
                raise MalformedLayerError(layer.value, str(path), str(exc)) from exc
            dropped = self._cache.invalidate(".".join(parts))
        logger.info("Set %s=%r in %s config %s", key, value, layer.value, path)
        logger.debug("Invalidated %d cached entries for %s", dropped, key)
        return path

    def init_layer(self, layer: ConfigLayer | str, identifier: Optional[str] = None) -> Tuple[Path, bool]:
        """Create a starter file for the machine or project layer.

        Returns ``(path, created)``; an existing file is left untouched.
        """
        layer = parse_layer(layer)
        if layer is ConfigLayer.MACHINE:
            path = self.machine_path
            doc: Dict[str, Any] = {"machine": {"identifier": identifier or socket.gethostname()}}
        elif layer is ConfigLayer.PROJECT:
            base = self.cwd if self.cwd is not None else Path.cwd()
            path = base / PROJECT_CONFIG_FILE
            doc = {"$comment": "Project-specific blackdot configuration"}
        else:
            raise ConfigValueError(
                f"cannot init layer '{layer.value}' (expected: machine, project)",
                context={"layer": layer.value},
            )
        if path.exists():
            return path, False
        with self._lock:
            write_json_atomic(path, doc)
            self._cache.clear()
        logger.info("Created %s config %s", layer.value, path)
        return path, True

    def invalidate(self, key: Optional[str] = None) -> None:
        """Drop cached resolutions for ``key`` (all keys when None)."""
        if key is None:
            self._cache.clear()
        else:
            self._cache.invalidate(key)


__all__ = ["ConfigStore", "DEFAULTS_FILE"]
