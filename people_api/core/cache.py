"""
Process-wide memoization with tag based invalidation.

Entries live in a cachetools TLRUCache so each one can carry its own TTL
(30 minutes for a person, 6 hours for an aggregate). A tag -> keys index lets
writers drop every entry derived from one record without knowing the keys.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Sequence, Set, TypeVar

from cachetools import TLRUCache  # type: ignore[import-untyped]

from people_api.core.config import get_settings

logger = logging.getLogger(__name__)

T = TypeVar("T")

_MISSING = object()


@dataclass(frozen=True)
class _Entry:
    value: Any
    ttl_seconds: float


def _entry_expiry(_key: str, entry: _Entry, now: float) -> float:
    return now + entry.ttl_seconds


class TagCache:
    """
    Key/value store with per-entry TTL and a tag -> key-set index.

    ``None`` is a legitimate cached value (a lookup that found nothing), so
    misses are detected with a private sentinel.
    """

    def __init__(self, max_size: Optional[int] = None, timer: Callable[[], float] = time.monotonic) -> None:
        if max_size is None:
            max_size = get_settings().cache_max_size
        self.max_size = max_size
        self._cache: TLRUCache = TLRUCache(maxsize=max_size, ttu=_entry_expiry, timer=timer)
        self._tags: Dict[str, Set[str]] = {}
        # tag -> generation of its last invalidation; tags missing from the map
        # count as invalidated at _floor
        self._invalidated: Dict[str, int] = {}
        self._generation = 0
        self._floor = 0
        self._lock = threading.Lock()

    @staticmethod
    def make_key(key: Sequence[str]) -> str:
        return "\x1f".join(str(part) for part in key)

    def run_cached(
        self,
        key: Sequence[str],
        ttl_seconds: float,
        tags: Sequence[str],
        compute: Callable[[], T],
    ) -> T:
        """Return the cached value for ``key`` or compute, store and tag it."""
        cache_key = self.make_key(key)
        with self._lock:
            entry = self._cache.get(cache_key, _MISSING)
            started = self._generation
        if entry is not _MISSING:
            logger.debug("Cache HIT: %s", cache_key)
            return entry.value

        logger.debug("Cache MISS: %s", cache_key)
        value = compute()
        with self._lock:
            if self._invalidated_since(tags, started):
                logger.debug("Skipped storing %s: tag invalidated during compute", cache_key)
                return value
            self._cache[cache_key] = _Entry(value=value, ttl_seconds=ttl_seconds)
            for tag in tags:
                self._tags.setdefault(tag, set()).add(cache_key)
            if len(self._tags) > self.max_size:
                self._prune_tags()
        return value

    def invalidate(self, tag: str) -> None:
        """Drop every entry indexed under ``tag``. Unknown tags are ignored."""
        with self._lock:
            keys = self._tags.pop(tag, set())
            self._generation += 1
            self._invalidated[tag] = self._generation
            if len(self._invalidated) > self.max_size:
                self._floor = self._generation
                self._invalidated.clear()
            for cache_key in keys:
                self._cache.pop(cache_key, None)
        if keys:
            logger.debug("Invalidated %d cache entries for tag %s", len(keys), tag)

    def clear(self) -> None:
        with self._lock:
            self._cache.clear()
            self._tags.clear()
            self._generation += 1
            self._floor = self._generation
            self._invalidated.clear()

    def __len__(self) -> int:
        with self._lock:
            self._cache.expire()
            return len(self._cache)

    def _invalidated_since(self, tags: Sequence[str], started: int) -> bool:
        # caller holds the lock
        if self._floor > started:
            return True
        return any(self._invalidated.get(tag, 0) > started for tag in tags)

    def _prune_tags(self) -> None:
        # caller holds the lock
        self._cache.expire()
        for tag in list(self._tags):
            live = {k for k in self._tags[tag] if k in self._cache}
            if live:
                self._tags[tag] = live
            else:
                del self._tags[tag]


_tag_cache: Optional[TagCache] = None


def get_tag_cache() -> TagCache:
    """Shared cache used by the app factory; tests build their own instances."""
    global _tag_cache

    if _tag_cache is None:
        _tag_cache = TagCache()

    return _tag_cache
