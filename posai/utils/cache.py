# posai/utils/cache.py
from __future__ import annotations
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Callable, Optional
import threading
import time

MAX_ENTRIES = 100


@dataclass
class CacheEntry:
    value: Any
    timestamp: float
    ttl: float  # seconds

    def expired(self, now: float) -> bool:
        return now - self.timestamp > self.ttl


class MemoryCache:
    """
    In-process cache with per-entry TTL and insertion-order eviction.
    - get() counts hits/misses; an expired entry is dropped and counted as a miss.
    - Caching is disabled when enabled=False or default_ttl <= 0: every get is a miss.
    - Every mutation happens under one lock so threadpool handlers cannot interleave.
    """
    def __init__(
        self,
        default_ttl: float,
        *,
        enabled: bool = True,
        max_entries: int = MAX_ENTRIES,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.default_ttl = default_ttl
        self.enabled = enabled
        self.max_entries = max_entries
        self._clock = clock
        self._entries: "OrderedDict[str, CacheEntry]" = OrderedDict()
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    @property
    def active(self) -> bool:
        return self.enabled and self.default_ttl > 0

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            if not self.active:
                self.misses += 1
                return None

            entry = self._entries.get(key)
            if entry is None:
                self.misses += 1
                return None

            if entry.expired(self._clock()):
                del self._entries[key]
                self.misses += 1
                return None

            self.hits += 1
            return entry.value

    def set(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        with self._lock:
            if not self.active:
                return
            # overwriting keeps the key's original insertion slot
            self._entries[key] = CacheEntry(
                value=value,
                timestamp=self._clock(),
                ttl=self.default_ttl if ttl is None else ttl,
            )
            if len(self._entries) > self.max_entries:
                self._entries.popitem(last=False)

    def clear(self, pattern: Optional[str] = None) -> int:
        """Remove every entry, or only keys containing `pattern`. Returns the number removed."""
        with self._lock:
            if not pattern:
                n = len(self._entries)
                self._entries.clear()
                return n
            doomed = [k for k in self._entries if pattern in k]
            for k in doomed:
                del self._entries[k]
            return len(doomed)

    def reset_stats(self) -> None:
        with self._lock:
            self.hits = 0
            self.misses = 0

    def __len__(self) -> int:
        return len(self._entries)

    def hit_rate(self) -> float:
        total = self.hits + self.misses
        return (self.hits / total * 100) if total else 0.0
