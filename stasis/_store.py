from __future__ import annotations

import logging
import typing as tp

from stasis._core.models import CacheEntry, CacheKey
from stasis._synchronization import Lock

logger = logging.getLogger("stasis.store")

__all__ = ("CacheStore",)

KeyTypes = tp.Union[str, CacheKey]


class CacheStore:
    """
    In-memory mapping from request targets to full response snapshots.

    Entries never expire on their own and are never checked against the
    filesystem. They leave the store only through `evict`, `clear`, or by
    being overwritten with a fresher read of the same target.

    Every operation holds one lock, so the store can be shared between
    concurrent requests, threads, and administrative callers.

    Example:
        ```python
        store = CacheStore()
        store.insert("/app.js", CacheEntry(headers=headers, body=body))
        store.lookup("/app.js")
        store.evict("/app.js")
        store.clear()
        ```
    """

    def __init__(self) -> None:
        self._entries: tp.Dict[CacheKey, CacheEntry] = {}
        self._lock = Lock()

    def lookup(self, key: KeyTypes) -> tp.Optional[CacheEntry]:
        key = CacheKey.from_target(key)
        with self._lock:
            return self._entries.get(key)

    def insert(self, key: KeyTypes, entry: CacheEntry) -> None:
        key = CacheKey.from_target(key)
        with self._lock:
            self._entries[key] = entry
        logger.debug("Stored response in memory cache: key=%s size=%d", key, len(entry.body))

    def evict(self, key: KeyTypes) -> None:
        key = CacheKey.from_target(key)
        with self._lock:
            removed = self._entries.pop(key, None)
        if removed is not None:
            logger.debug("Evicted response from memory cache: key=%s", key)

    def clear(self, root: tp.Optional[str] = None) -> None:
        """Drop every entry, or only the entries cached for `root`."""
        with self._lock:
            if root is None:
                count = len(self._entries)
                self._entries = {}
            else:
                kept = {key: entry for key, entry in self._entries.items() if key.root != root}
                count = len(self._entries) - len(kept)
                self._entries = kept
        logger.debug("Cleared memory cache: entries=%d", count)

    def keys(self) -> tp.List[CacheKey]:
        with self._lock:
            return list(self._entries)

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, (str, CacheKey)) or not key:
            return False
        return self.lookup(key) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
