"""Resolution cache for layered lookups.

Entries are keyed by dotted key and stamped with a fingerprint of the layer
files (path, mtime, size) so edits made outside this process are noticed.
The map is guarded by a lock: lookups may run concurrently with each other
and with occasional writes.
"""
from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, Optional, Tuple

Fingerprint = Tuple[Tuple[str, int, int], ...]


def file_fingerprint(paths: Iterable[Optional[Path]]) -> Fingerprint:
    """Stat-based fingerprint; missing files stamp as ``(path, 0, -1)``."""
    stamp = []
    for path in paths:
        if path is None:
            stamp.append(("", 0, -1))
            continue
        try:
            st = path.stat()
            stamp.append((str(path), int(st.st_mtime_ns), int(st.st_size)))
        except OSError:
            stamp.append((str(path), 0, -1))
    return tuple(stamp)


def _related(a: str, b: str) -> bool:
    """True when one dotted key equals or contains the other."""
    return a == b or a.startswith(b + ".") or b.startswith(a + ".")


@dataclass
class _Entry:
    fingerprint: Fingerprint
    value: Any
    stored_at: float


class ResolutionCache:
    """Thread-safe per-key cache with optional TTL."""

    def __init__(
        self,
        ttl: Optional[float] = None,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl = ttl
        self._clock = clock
        self._entries: Dict[str, _Entry] = {}
        self._lock = threading.RLock()
        self.hits = 0
        self.misses = 0

    def get(self, key: str, fingerprint: Fingerprint) -> Optional[Any]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self.misses += 1
                return None
            expired = self.ttl is not None and (self._clock() - entry.stored_at) > self.ttl
            if expired or entry.fingerprint != fingerprint:
                del self._entries[key]
                self.misses += 1
                return None
            self.hits += 1
            return entry.value

    def put(self, key: str, fingerprint: Fingerprint, value: Any) -> None:
        with self._lock:
            self._entries[key] = _Entry(fingerprint, value, self._clock())

    def invalidate(self, key: str) -> int:
        """Drop ``key`` plus any cached parent or child key; returns the count."""
        with self._lock:
            stale = [k for k in self._entries if _related(k, key)]
            for k in stale:
                del self._entries[k]
            return len(stale)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


__all__ = ["Fingerprint", "ResolutionCache", "file_fingerprint"]
