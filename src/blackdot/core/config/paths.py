"""Configuration path resolution.

Config directory precedence (highest to lowest):
1. Environment variable: BLACKDOT_CONFIG_DIR
2. $XDG_CONFIG_HOME/blackdot
3. ~/.config/blackdot

Relative values are resolved against the user's home directory, not the
current working directory.

The project layer file (``.blackdot.json``) is discovered by walking from the
working directory up to the filesystem root.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Mapping, Optional

APP_DIR_NAME = "blackdot"
USER_CONFIG_FILE = "config.json"
MACHINE_CONFIG_FILE = "machine.json"
PROJECT_CONFIG_FILE = ".blackdot.json"

CONFIG_DIR_ENV = "BLACKDOT_CONFIG_DIR"


def _expand(raw: str) -> Path:
    p = Path(os.path.expandvars(raw.strip())).expanduser()
    if not p.is_absolute():
        p = Path.home() / p
    return p


def resolve_config_dir(environ: Optional[Mapping[str, str]] = None) -> Path:
    """Return the directory holding the user and machine layer files."""
    env = os.environ if environ is None else environ

    override = env.get(CONFIG_DIR_ENV, "")
    if override.strip():
        return _expand(override)

    xdg = env.get("XDG_CONFIG_HOME", "")
    if xdg.strip():
        return _expand(xdg) / APP_DIR_NAME

    return Path.home() / ".config" / APP_DIR_NAME


def find_project_config(start: Optional[Path] = None, filename: str = PROJECT_CONFIG_FILE) -> Optional[Path]:
    """Walk from ``start`` (default: cwd) to the filesystem root looking for ``filename``.

    Returns the first match, or None when the root is reached without one.
    """
    try:
        current = Path(start) if start is not None else Path.cwd()
    except FileNotFoundError:
        # The working directory was removed underneath us.
        return None
    current = current.absolute()

    while True:
        candidate = current / filename
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            return None
        current = parent


__all__ = [
    "APP_DIR_NAME",
    "USER_CONFIG_FILE",
    "MACHINE_CONFIG_FILE",
    "PROJECT_CONFIG_FILE",
    "CONFIG_DIR_ENV",
    "resolve_config_dir",
    "find_project_config",
]
