"""In-memory cache for widget API responses.

One process-wide instance is shared by every client, so mounting several
widgets for the same address (or re-mounting after navigation) does not
hit the API again within the TTL window.
"""

import json
import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Generic, Mapping, Optional, Set, Tuple, TypeVar, Union

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_TTL = timedelta(minutes=5)


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    data: T
    timestamp: datetime
    expires_at: datetime


@dataclass(frozen=True)
class CacheKey:
    """Structured cache key: resource kind, address and extra request params.

    ``params`` may be given as a mapping; it is stored as sorted pairs so
    keys are hashable and compare equal regardless of insertion order.
    """

    kind: str
    address: str
    params: Tuple[Tuple[str, str], ...] = ()

    def __post_init__(self):
        params = self.params.items() if isinstance(self.params, Mapping) else self.params
        object.__setattr__(self, "params", tuple(sorted(params)))

    def __str__(self) -> str:
        # Sort to ensure consistent keys
        param_str = json.dumps(dict(self.params), sort_keys=True, separators=(",", ":")) if self.params else ""
        return f"{self.kind}:{self.address}:{param_str}"


def make_cache_key(kind: str, address: str, params: Optional[Mapping[str, str]] = None) -> CacheKey:
    """Build a cache key, dropping params whose value is None."""
    clean = {k: v for k, v in (params or {}).items() if v is not None}
    return CacheKey(kind=kind, address=address, params=clean)


class WidgetCache:
    """TTL cache keyed by ``{kind}:{address}:{params}`` strings.

    Expiration is lazy: a stale entry is dropped the next time it is read.
    Every method holds a lock, so individual operations are atomic. A
    ``get`` followed by a ``set`` is NOT atomic as a pair; two concurrent
    misses for the same key will both fetch and the last ``set`` wins.
    """

    def __init__(self, ttl: timedelta = DEFAULT_TTL, clock: Callable[[], datetime] = datetime.now):
        self.ttl = ttl
        self.clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self._by_address: Dict[str, Set[str]] = {}
        self._address_of: Dict[str, str] = {}
        self._lock = threading.Lock()

    def get(self, key: Union[str, CacheKey]) -> Optional[Any]:
        """Get cached data for key if still valid."""
        skey = str(key)
        with self._lock:
            entry = self._entries.get(skey)
            if entry is None:
                return None
            if self.clock() < entry.expires_at:
                return entry.data
            self._drop(skey)  # Expired, remove it
            return None

    def set(self, key: Union[str, CacheKey], data: Any, ttl: Optional[timedelta] = None):
        """Cache data for key, replacing any previous entry."""
        skey = str(key)
        now = self.clock()
        entry = CacheEntry(data=data, timestamp=now, expires_at=now + (self.ttl if ttl is None else ttl))
        with self._lock:
            self._entries[skey] = entry
            if isinstance(key, CacheKey) and skey not in self._address_of:
                self._address_of[skey] = key.address
                self._by_address.setdefault(key.address, set()).add(skey)

    def get_entry(self, key: Union[str, CacheKey]) -> Optional[CacheEntry]:
        """Raw entry lookup, without expiry checks."""
        with self._lock:
            return self._entries.get(str(key))

    def clear(self):
        """Clear all cached data."""
        with self._lock:
            self._entries.clear()
            self._by_address.clear()
            self._address_of.clear()

    def reset(self):
        """Alias of clear(), for test isolation."""
        self.clear()

    def clear_by_address(self, address: str) -> int:
        """Drop every entry for an address. Returns the number removed."""
        segment = f":{address}:"
        with self._lock:
            doomed = set(self._by_address.get(address, ()))
            # Keys stored as plain strings are not indexed
            doomed.update(k for k in self._entries if segment in k)
            removed = 0
            for skey in doomed:
                if self._drop(skey):
                    removed += 1
        logger.debug("Cleared %d cache entries for %s", removed, address)
        return removed

    def _drop(self, skey: str) -> bool:
        """Remove an entry and its index slot. Caller holds the lock."""
        found = self._entries.pop(skey, None) is not None
        address = self._address_of.pop(skey, None)
        if address is not None:
            keys = self._by_address[address]
            keys.discard(skey)
            if not keys:
                del self._by_address[address]
        return found

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return str(key) in self._entries


# Global instance shared by every client in the process
_widget_cache = WidgetCache()


def get_widget_cache() -> WidgetCache:
    """Return the process-wide widget cache."""
    return _widget_cache


def clear_global_cache():
    """Clear all cached responses."""
    _widget_cache.clear()
