"""Bounded in-memory cache for decoded GET payloads.

Entries expire lazily: an entry older than ``max_age_ms`` is only removed
when a lookup observes it.  Capacity is enforced in batches: when a write
finds the store full, the oldest quarter of the entries is
dropped in one sweep instead of evicting one entry per write.

Cache keys are SHA-256 hashes of ``GET|URL|headers[|params]`` with header
names lower-cased and sorted, so identical requests resolve to the same
entry regardless of header order or case.

See Also:
    :class:`~tfetch.models.CacheConfig` -- ``enabled``, ``max_age_ms``
    and ``max_entries``.
"""

from __future__ import annotations

import hashlib
import json
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional, Sequence, Union

import httpx

from tfetch.output import get_output

HeaderTypes = Union[Mapping[str, str], Sequence[tuple[str, str]], httpx.Headers]


@dataclass(frozen=True)
class CacheEntry:
    """A cached payload and the clock reading (seconds) it was stored at."""

    data: Any
    created_at: float


def make_cache_key(
    url: str,
    headers: Optional[HeaderTypes] = None,
    params: Optional[Mapping[str, Any]] = None,
) -> str:
    """Fingerprint a GET request.

    Args:
        url: The full request URL.  Scheme and host case and a default
            port do not matter.
        headers: Request headers.  Name case and order do not matter.
        params: Query parameters, sorted before hashing.

    Returns:
        A hex digest that is stable across processes.
    """
    pairs = sorted(
        (name.lower(), value) for name, value in httpx.Headers(headers or {}).multi_items()
    )
    parts = ["GET", _normalize_url(url), json.dumps(pairs)]
    if params:
        parts.append(json.dumps(params, sort_keys=True, default=str))
    raw = "|".join(parts)
    return hashlib.sha256(raw.encode()).hexdigest()


def _normalize_url(url: str | httpx.URL) -> str:
    # Unparseable URLs keep their raw form; the request itself reports the error.
    try:
        return str(httpx.URL(url))
    except httpx.InvalidURL:
        return str(url)


class CacheStore:
    """Thread-safe, size- and age-bounded key/value store.

    Args:
        max_age_ms: Entries older than this are treated as absent.
        max_entries: Upper bound on the number of stored entries.
        clock: Monotonic clock returning seconds.  Injectable for tests.
        debug: Emit a ``[DEBUG]`` trace line for every cleanup sweep.

    Example::

        store = CacheStore(max_age_ms=60_000, max_entries=100)
        store.put("k", {"id": 1})
        store.get("k")  # {"id": 1}
    """

    def __init__(
        self,
        max_age_ms: int,
        max_entries: int,
        clock: Callable[[], float] = time.monotonic,
        debug: bool = False,
    ) -> None:
        self._max_age = max_age_ms / 1000
        self._max_entries = max_entries
        self._clock = clock
        self._debug = debug
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.RLock()

    def get(self, key: str) -> Optional[Any]:
        """Return the fresh payload stored under *key*, or ``None``.

        An expired entry is deleted as a side effect.  Hits do not change
        the eviction order.
        """
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self._clock() - entry.created_at > self._max_age:
                del self._entries[key]
                return None
            return entry.data

    def put(self, key: str, data: Any) -> None:
        """Store *data* under *key*, sweeping first if the store is full."""
        if self._max_entries <= 0:
            return
        with self._lock:
            if len(self._entries) >= self._max_entries:
                self._evict()
            self._entries[key] = CacheEntry(data=data, created_at=self._clock())

    def clear(self) -> None:
        """Remove every entry."""
        with self._lock:
            self._entries.clear()

    def stats(self) -> dict[str, Any]:
        """Return the current size and the configured bounds."""
        with self._lock:
            size = len(self._entries)
        return {
            "size": size,
            "max_entries": self._max_entries,
            "max_age_ms": int(self._max_age * 1000),
        }

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries

    def _evict(self) -> None:
        """Drop the oldest quarter of the entries (at least one)."""
        if not self._entries:
            return
        ordered = sorted(
            self._entries.items(), key=lambda item: (item[1].created_at, item[0])
        )
        to_remove = max(1, len(ordered) // 4)
        for key, _ in ordered[:to_remove]:
            del self._entries[key]
        if self._debug:
            get_output().trace(f"Removed {to_remove} entries from cache cleanup.")
