"""File primitives behind the layer files.

Writers never leave a half-written config behind: content lands in a hidden
sibling file that is fsync'd and then swapped in with ``os.replace``.
"""
from __future__ import annotations

import fcntl
import os
import tempfile
from pathlib import Path
from typing import Callable, TextIO


def ensure_directory(path: Path) -> Path:
    """Create ``path`` and its parents if missing.

    Raises:
        NotADirectoryError: If something other than a directory is in the way.
    """
    path = Path(path)
    if path.exists() and not path.is_dir():
        raise NotADirectoryError(f"Path exists but is not a directory: {path}")
    path.mkdir(parents=True, exist_ok=True)
    return path


def atomic_write(path: Path, write_fn: Callable[[TextIO], None], *, encoding: str = "utf-8") -> None:
    """Replace ``path`` with whatever ``write_fn`` writes to the handle it is given."""
    path = Path(path)
    ensure_directory(path.parent)

    fd, tmp_name = tempfile.mkstemp(dir=str(path.parent), prefix=f".{path.name}.", suffix=".tmp")
    tmp = Path(tmp_name)
    try:
        with os.fdopen(fd, "w", encoding=encoding) as handle:
            # Released when the handle closes.
            fcntl.flock(handle.fileno(), fcntl.LOCK_EX)
            write_fn(handle)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp, path)
    finally:
        tmp.unlink(missing_ok=True)


__all__ = ["ensure_directory", "atomic_write"]
