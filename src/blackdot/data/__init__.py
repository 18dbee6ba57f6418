"""
Blackdot data resource helpers.

Provides access to the bundled feature table, preset table, schemas and
configuration defaults using importlib.resources.
"""

from __future__ import annotations

from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any

from blackdot.core.utils.io import read_yaml as _read_yaml_file


def get_data_path(subpackage: str, filename: str = "") -> Path:
    """
    Get absolute path to a data file or directory.

    Args:
        subpackage: Name of the data subdirectory (e.g., "features", "schemas")
        filename: Optional filename within the subdirectory

    Returns:
        Absolute path to the file or directory

    Example:
        >>> get_data_path("features", "catalog.yaml")
        PosixPath('/path/to/blackdot/data/features/catalog.yaml')
    """
    pkg = resources.files("blackdot.data")
    base = Path(str(pkg / subpackage))
    return base / filename if filename else base


@lru_cache(maxsize=16)
def read_yaml(subpackage: str, filename: str) -> Any:
    """Read and parse a bundled YAML file (cached)."""
    return _read_yaml_file(get_data_path(subpackage, filename), raise_on_error=True)


def clear_caches() -> None:
    """Clear all read caches."""
    read_yaml.cache_clear()


__all__ = [
    "get_data_path",
    "read_yaml",
    "clear_caches",
]
