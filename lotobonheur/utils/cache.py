"""
lotobonheur/utils/cache.py
Process-local read-through TTL cache, constructed explicitly and injected.
"""
from __future__ import annotations

import hashlib
import json
import threading
import time
from collections import OrderedDict
from typing import Any, Callable

from lotobonheur.utils.config import CACHE_MAX_ENTRIES, CACHE_SWEEP_SECONDS, CACHE_TTL_SECONDS
from lotobonheur.utils.logger import get_logger

log = get_logger("cache")


class TTLCache:
    """
    Key → value store with per-entry expiry and a bounded entry count.
    When full, the oldest inserted entry is evicted. Expired entries are
    swept on access, at most once every `sweep_interval` seconds.
    """

    def __init__(
        self,
        max_size: int = CACHE_MAX_ENTRIES,
        default_ttl: float = CACHE_TTL_SECONDS,
        sweep_interval: float = CACHE_SWEEP_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        if max_size < 1:
            raise ValueError("max_size must be >= 1")
        self.max_size = max_size
        self.default_ttl = default_ttl
        self.sweep_interval = sweep_interval
        self._clock = clock
        self._entries: OrderedDict[str, tuple[float, Any]] = OrderedDict()
        self._lock = threading.Lock()
        self._last_sweep = clock()
        self.hits = 0
        self.misses = 0

    @staticmethod
    def build_key(name: str, params: dict) -> str:
        payload = json.dumps(params, sort_keys=True, default=str)
        digest = hashlib.sha256(payload.encode("utf-8")).hexdigest()[:12]
        return f"{name}:{digest}"

    def get(self, key: str) -> Any | None:
        with self._lock:
            self._maybe_sweep()
            entry = self._entries.get(key)
            if entry is None:
                self.misses += 1
                return None
            expires_at, value = entry
            if expires_at <= self._clock():
                del self._entries[key]
                self.misses += 1
                return None
            self.hits += 1
            return value

    def set(self, key: str, value: Any, ttl: float | None = None) -> None:
        ttl = self.default_ttl if ttl is None else ttl
        with self._lock:
            self._maybe_sweep()
            if key in self._entries:
                del self._entries[key]
            while len(self._entries) >= self.max_size:
                evicted, _ = self._entries.popitem(last=False)
                log.debug(f"Evicted {evicted}")
            self._entries[key] = (self._clock() + ttl, value)

    def get_or_set(self, key: str, factory: Callable[[], Any], ttl: float | None = None) -> Any:
        cached = self.get(key)
        if cached is not None:
            return cached
        value = factory()
        self.set(key, value, ttl)
        return value

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._entries.pop(key, None) is not None

    def cleanup(self) -> int:
        """Drop every expired entry. Returns how many were removed."""
        with self._lock:
            return self._sweep()

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None

    def _maybe_sweep(self) -> None:
        now = self._clock()
        if now - self._last_sweep >= self.sweep_interval:
            removed = self._sweep()
            if removed:
                log.debug(f"Swept {removed} expired cache entries")

    def _sweep(self) -> int:
        now = self._clock()
        self._last_sweep = now
        expired = [k for k, (expires_at, _) in self._entries.items() if expires_at <= now]
        for key in expired:
            del self._entries[key]
        return len(expired)
