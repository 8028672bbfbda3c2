from __future__ import annotations

import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Hashable

CacheKey = tuple[Hashable, ...]


@dataclass(frozen=True)
class CacheEntry:
    value: Any
    expires_at: float


class ResponseCache:
    """In-memory TTL cache for read-only query results, keyed by tuples.

    ``invalidate(("companies",))`` drops every key whose leading elements match.
    """

    def __init__(self, ttl_seconds: float = 30.0, now: Callable[[], float] | None = None) -> None:
        self.ttl_seconds = max(0.0, ttl_seconds)
        self._now = now or time.monotonic
        self._entries: dict[CacheKey, CacheEntry] = {}
        self._lock = threading.Lock()

    def get(self, key: CacheKey) -> Any | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if entry.expires_at <= self._now():
                self._entries.pop(key, None)
                return None
            return entry.value

    def set(self, key: CacheKey, value: Any) -> None:
        if self.ttl_seconds <= 0:
            return
        with self._lock:
            self._entries[key] = CacheEntry(value=value, expires_at=self._now() + self.ttl_seconds)

    def invalidate(self, prefix: CacheKey) -> int:
        width = len(prefix)
        with self._lock:
            stale_keys = [key for key in self._entries if key[:width] == tuple(prefix)]
            for key in stale_keys:
                self._entries.pop(key, None)
        return len(stale_keys)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
