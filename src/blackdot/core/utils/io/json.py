"""JSON layer files: shared-lock reads, atomic writes, read-modify-write."""
from __future__ import annotations

import fcntl
import json
from pathlib import Path
from typing import Any, Callable, Dict, TextIO

from .core import atomic_write

ENCODING = "utf-8"

# Layer files are meant to be edited by hand too, so keep them diff-friendly.
_DUMP_OPTIONS: Dict[str, Any] = {"indent": 2, "sort_keys": True, "ensure_ascii": False}

_MISSING = object()


def read_json(file_path: Path | str, *, default: Any = _MISSING) -> Any:
    """Parse ``file_path`` under a shared ``flock``.

    A missing file returns ``default`` when one is given and raises
    ``FileNotFoundError`` otherwise. A blank file reads as ``{}``; invalid
    content raises ``json.JSONDecodeError``.
    """
    path = Path(file_path)
    if not path.exists():
        if default is _MISSING:
            raise FileNotFoundError(f"JSON file not found: {path}")
        return default

    with open(path, "r", encoding=ENCODING) as f:
        fcntl.flock(f.fileno(), fcntl.LOCK_SH)
        try:
            text = f.read()
        finally:
            fcntl.flock(f.fileno(), fcntl.LOCK_UN)
    return json.loads(text) if text.strip() else {}


def write_json_atomic(file_path: Path | str, data: Any) -> None:
    def _dump(handle: TextIO) -> None:
        json.dump(data, handle, **_DUMP_OPTIONS)
        handle.write("\n")

    atomic_write(Path(file_path), _dump, encoding=ENCODING)


def update_json(
    file_path: Path | str,
    update_fn: Callable[[Dict[str, Any]], Dict[str, Any] | None],
) -> Dict[str, Any]:
    """Load the object in ``file_path`` (``{}`` when missing), apply ``update_fn``, write it back.

    ``update_fn`` may return a new object or mutate its argument and return
    None. The written object is returned.

    Raises:
        json.JSONDecodeError: If the existing file is not valid JSON.
        TypeError: If the existing document is not a JSON object.
    """
    path = Path(file_path)
    current = read_json(path, default={})
    if not isinstance(current, dict):
        raise TypeError(f"expected a JSON object in {path}, got {type(current).__name__}")

    doc = dict(current)
    updated = update_fn(doc)
    if updated is None:
        updated = doc
    write_json_atomic(path, updated)
    return updated


__all__ = ["read_json", "write_json_atomic", "update_json"]
