# tcm_lookup/core/cache.py
from __future__ import annotations

import time
from typing import Any, Callable, Dict, Optional, Tuple

DEFAULT_TTL_MS = 60 * 60 * 1000


def _now_ms() -> float:
    return time.monotonic() * 1000.0


class ItemCache:
    """Process-lifetime point cache keyed by name fingerprint.

    Entries older than ``ttl_ms`` read as absent but stay in the map until the
    key is written again; there is no sweep, no size cap and no LRU.

    No locking: two writers racing on one key is last-write-wins.
    """

    def __init__(self, ttl_ms: int = DEFAULT_TTL_MS, clock: Callable[[], float] = _now_ms) -> None:
        self.ttl_ms = ttl_ms
        self._clock = clock
        self._entries: Dict[str, Tuple[Any, float]] = {}

    def get(self, key: str) -> Optional[Any]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        data, stored_at = entry
        if self._clock() - stored_at < self.ttl_ms:
            return data
        return None

    def set(self, key: str, data: Any) -> None:
        self._entries[key] = (data, self._clock())

    def __len__(self) -> int:
        return len(self._entries)
