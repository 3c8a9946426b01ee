"""
Read-through cache for the inventory list and single-order lookups.

A flat keyed store where every entry carries its own absolute expiry. It is
not an eviction engine: expired entries are dropped when touched or when room
is needed, and a write that would exceed ``size_limit`` is skipped.

Keys are typed (``CacheKind`` + id) rather than formatted strings. Each key has
a single owning service operation that sets it on a miss and removes it on
writes; nothing else may write to that key. There is no lock spanning a store
write and the matching ``remove``, so a concurrent reader can refill a key
from a pre-write snapshot. Such an entry lives at most one TTL.

One instance lives on ``app.state.cache`` and reaches handlers through the
``get_cache`` dependency.
"""
import enum
import logging
import threading
import time
from typing import Any, Callable, Dict, NamedTuple, Optional, Tuple

logger = logging.getLogger(__name__)


class CacheKind(enum.Enum):
    INVENTORY_ALL = "inventory_all"
    ORDER = "order"


class CacheKey(NamedTuple):
    kind: CacheKind
    ident: Optional[int] = None

    @classmethod
    def inventory_all(cls) -> "CacheKey":
        return cls(CacheKind.INVENTORY_ALL)

    @classmethod
    def order(cls, order_id: int) -> "CacheKey":
        return cls(CacheKind.ORDER, int(order_id))

    def __str__(self) -> str:
        if self.ident is None:
            return self.kind.value
        return f"{self.kind.value}_{self.ident}"


class _Entry(NamedTuple):
    value: Any
    expires_at: float
    size: int


class ReadThroughCache:
    def __init__(self, size_limit: Optional[int] = None, clock: Callable[[], float] = time.monotonic):
        self.size_limit = size_limit
        self._clock = clock
        self._entries: Dict[CacheKey, _Entry] = {}
        self._size = 0
        self._lock = threading.Lock()

    def get(self, key: CacheKey) -> Tuple[Any, bool]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None, False
            if entry.expires_at <= self._clock():
                self._drop(key)
                return None, False
            return entry.value, True

    def set(self, key: CacheKey, value: Any, ttl: float, size: int = 1) -> bool:
        """Store ``value`` under ``key`` for ``ttl`` seconds. Returns False if it did not fit."""
        with self._lock:
            now = self._clock()
            if key in self._entries:
                self._drop(key)
            if self.size_limit is not None and self._size + size > self.size_limit:
                self._purge_expired(now)
                if self._size + size > self.size_limit:
                    logger.debug("cache full (%d/%d); not storing %s", self._size, self.size_limit, key)
                    return False
            self._entries[key] = _Entry(value, now + ttl, size)
            self._size += size
            return True

    def remove(self, key: CacheKey) -> None:
        with self._lock:
            if key in self._entries:
                self._drop(key)
        logger.debug("cache invalidated %s", key)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._size = 0

    @property
    def size(self) -> int:
        return self._size

    def __len__(self) -> int:
        return len(self._entries)

    def _drop(self, key: CacheKey) -> None:
        entry = self._entries.pop(key)
        self._size -= entry.size

    def _purge_expired(self, now: float) -> None:
        expired = [k for k, e in self._entries.items() if e.expires_at <= now]
        for k in expired:
            self._drop(k)
        if expired:
            logger.debug("purged %d expired cache entries", len(expired))
