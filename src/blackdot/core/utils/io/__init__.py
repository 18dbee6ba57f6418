"""I/O utilities for Blackdot.

This package provides safe file operations for layer files:
- Core: atomic replacement, directory creation
- JSON: read/write with shared locks and atomic replacement
- YAML: read bundled tables, dump human-readable output
"""
from __future__ import annotations

from .core import atomic_write, ensure_directory
from .json import (
    read_json,
    update_json,
    write_json_atomic,
)
from .yaml import (
    dump_yaml_string,
    read_yaml,
)

__all__ = [
    # core
    "ensure_directory",
    "atomic_write",
    # json
    "read_json",
    "write_json_atomic",
    "update_json",
    # yaml
    "read_yaml",
    "dump_yaml_string",
]
